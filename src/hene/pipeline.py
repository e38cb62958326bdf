"""Fixed-order compilation pipeline and the build-tool adapter interface."""

from __future__ import annotations

import logging
import re
from pathlib import PurePath

from hene.analyzer.component import locate_component
from hene.analyzer.nodes import analyze_nodes
from hene.analyzer.render import analyze_render
from hene.analyzer.state import analyze_state
from hene.context import Analysis, CompileOptions, Context
from hene.env import DEFAULT_MARKER, env
from hene.errors import CompileError, Reporter, compile_error, report_error
from hene.js.nodes import emit
from hene.js.parser import JSSyntaxError, parse_module
from hene.transformer.class_shell import transform_class_shell
from hene.transformer.events import transform_events
from hene.transformer.nodes import transform_nodes
from hene.transformer.render import transform_render
from hene.transformer.watchers import transform_watchers

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = frozenset({".js", ".jsx", ".ts", ".tsx", ".mjs"})


class CompileFailed(Exception):
	"""Raised by `compile_strict` after the error has been reported."""

	error: CompileError

	def __init__(self, error: CompileError) -> None:
		super().__init__(str(error))
		self.error = error


def parse_stage(context: Context) -> None:
	try:
		context.program = parse_module(context.source)
	except JSSyntaxError as exc:
		raise compile_error(
			"ERR_JS_SYNTAX", location=exc.location, detail=str(exc.msg)
		) from exc


def analyze_stage(context: Context) -> Analysis | None:
	assert context.program is not None
	component = locate_component(context.program, context.options.marker)
	if component is None:
		return None
	context.analysis = Analysis(
		component=component,
		state_map=analyze_state(component),
		node_tracker=analyze_nodes(component),
		render=analyze_render(component),
	)
	return context.analysis


def transform_stage(context: Context) -> None:
	analysis = context.analysis
	assert analysis is not None
	lifecycle = transform_class_shell(analysis)
	transform_nodes(analysis)
	render = transform_render(analysis)
	transform_watchers(render, lifecycle)
	transform_events(analysis, lifecycle)
	context.lifecycle = lifecycle
	context.render = render


def generate_stage(context: Context) -> str:
	assert context.program is not None
	context.output = emit(context.program)
	return context.output


def run(context: Context) -> str:
	"""Run every stage; raises CompileError on the first violation.

	Sources without a component class come back unchanged.
	"""
	parse_stage(context)
	if analyze_stage(context) is None:
		logger.debug("No class extends %s, passing through", context.options.marker)
		context.output = context.source
		return context.source
	transform_stage(context)
	return generate_stage(context)


def _compile(source: str, options: CompileOptions) -> str:
	output = run(Context(source, options))
	if options.print_output or env.print_output:
		logger.info("Compiled %s:\n%s", options.filename or "<source>", output)
	return output


def compile_source(source: str, options: CompileOptions | None = None) -> str:
	"""Compile one module. Never raises for bad input.

	A compile error is reported (through `options.reporter` when given) and
	the original source is returned untouched.
	"""
	options = options or CompileOptions()
	if not source.strip():
		return source
	try:
		return _compile(source, options)
	except CompileError as exc:
		report_error(exc, source, reporter=options.reporter, filename=options.filename)
	except Exception:
		logger.exception("Internal error while compiling %s", options.filename or "<source>")
	return source


def compile_strict(source: str, options: CompileOptions | None = None) -> str:
	"""Like compile_source, but raises CompileFailed after reporting."""
	options = options or CompileOptions()
	try:
		return _compile(source, options)
	except CompileError as exc:
		report_error(exc, source, reporter=options.reporter, filename=options.filename)
		raise CompileFailed(exc) from exc


def should_compile(path: str | PurePath, code: str, marker: str = DEFAULT_MARKER) -> bool:
	"""Whether a build tool should hand this file to the compiler."""
	if PurePath(path).suffix not in SOURCE_EXTENSIONS:
		return False
	pattern = rf"\bclass\s+[A-Za-z_$][\w$]*\s+extends\s+{re.escape(marker)}\b"
	return re.search(pattern, code) is not None


def transform(
	code: str,
	path: str | PurePath,
	*,
	reporter: Reporter | None = None,
) -> str | None:
	"""Build-tool hook: None for files that are not components."""
	marker = env.marker
	if not should_compile(path, code, marker):
		return None
	options = CompileOptions(filename=str(path), reporter=reporter, marker=marker)
	return compile_source(code, options)


__all__ = [
	"SOURCE_EXTENSIONS",
	"CompileFailed",
	"compile_source",
	"compile_strict",
	"run",
	"should_compile",
	"transform",
]
