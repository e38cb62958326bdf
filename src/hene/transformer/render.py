"""Template to DOM construction code.

`$render` is compiled into straight-line `document.createElement` /
`createTextNode` statements inside a `__build` method. Interpolations that
read known `$state` values become watcher descriptors, consumed by the
watcher transform.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterable

from hene.context import Analysis, NodeTracker, RenderOutput, StateMap, WatcherDescriptor
from hene.errors import compile_error
from hene.js.inspect import free_identifiers, state_refs, this_member
from hene.js.nodes import (
	Assign,
	Call,
	Declarator,
	ExprNode,
	ExprStmt,
	Identifier,
	Literal,
	Member,
	Method,
	StmtNode,
	Template,
	VarDecl,
	emit,
)
from hene.js.parser import JSSyntaxError, parse_expression
from hene.template.interpolation import find_interpolations, split_segments
from hene.template.parser import ElementNode, TemplateNode, TextNode, parse_template
from hene.transformer.class_shell import BUILD_METHOD, ROOT

logger = logging.getLogger(__name__)

NODE_ATTRIBUTE = "node"

RESERVED_WORDS = frozenset(
	{
		"arguments",
		"await",
		"break",
		"case",
		"catch",
		"class",
		"const",
		"continue",
		"debugger",
		"default",
		"delete",
		"do",
		"else",
		"enum",
		"eval",
		"export",
		"extends",
		"false",
		"finally",
		"for",
		"function",
		"if",
		"implements",
		"import",
		"in",
		"instanceof",
		"interface",
		"let",
		"new",
		"null",
		"package",
		"private",
		"protected",
		"public",
		"return",
		"static",
		"super",
		"switch",
		"this",
		"throw",
		"true",
		"try",
		"typeof",
		"undefined",
		"var",
		"void",
		"while",
		"with",
		"yield",
	}
)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_$]")
_THIS_MEMBER = re.compile(r"this\s*\.\s*([A-Za-z0-9_$]+)")


# =============================================================================
# Interpolated values
# =============================================================================


def parse_interpolation(text: str) -> ExprNode | None:
	"""Parse the inside of one `${...}`; None when it is not an expression."""
	if not text.strip():
		return Literal("")
	try:
		return parse_expression(text)
	except JSSyntaxError:
		return None


def parse_error_placeholder(text: str) -> Literal:
	escaped = text.replace("*/", "*\\/")
	return Literal(f"/* HENE_PARSE_ERROR: {escaped} */")


def interpolation_value(text: str) -> ExprNode:
	expr = parse_interpolation(text)
	return expr if expr is not None else parse_error_placeholder(text)


def attribute_value(text: str) -> ExprNode:
	"""Double-quoted string, or a template literal when `text` interpolates."""
	if not find_interpolations(text):
		return Literal(text)
	parts: list[str | ExprNode] = []
	for segment in split_segments(text):
		parts.append(interpolation_value(segment.text) if segment.dynamic else segment.text)
	return Template.from_parts(parts)


def _sanitize(name: str) -> str:
	cleaned = _INVALID_NAME_CHARS.sub("", name)
	if cleaned[:1].isdigit():
		return ""
	return cleaned


def _is_indentation(text: str) -> bool:
	return not text.strip() and ("\n" in text or "\r" in text)


def _dom_call(method: str, args: list[ExprNode]) -> Call:
	return Call(Member(Identifier("document"), method), args)


# =============================================================================
# Builder
# =============================================================================


class DomBuilder:
	"""Emits construction statements for one template.

	Generated variable names are pairwise distinct and never shadow a
	reserved word, `document`, or an identifier the template reads.
	"""

	state_map: StateMap
	statements: list[StmtNode]
	node_map: dict[str, str]
	watchers: list[WatcherDescriptor]

	def __init__(self, state_map: StateMap, reserved: Iterable[str] = ()) -> None:
		self.state_map = state_map
		self.statements = []
		self.node_map = {}
		self.watchers = []
		self._declarations: dict[str, Declarator] = {}
		self._used: set[str] = {*RESERVED_WORDS, "document", ROOT, *reserved}
		self._counter = 0
		self._tag_counters: dict[str, int] = {}
		self._text_counters: dict[str, int] = {}
		self._parsed: dict[str, ExprNode | None] = {}

	# -------------------------------------------------------------------------
	# Naming
	# -------------------------------------------------------------------------

	def _claim(self, name: str) -> str:
		self._used.add(name)
		return name

	def _anonymous(self, prefix: str) -> str:
		while True:
			name = f"{prefix}{self._counter}"
			self._counter += 1
			if name not in self._used:
				return self._claim(name)

	def _element_name(self, node: ElementNode) -> str:
		declared = node.attributes.get(NODE_ATTRIBUTE)
		if declared is not None:
			name = _sanitize(declared)
			if name and name not in self._used:
				return self._claim(name)
		tag = _sanitize(node.tag)
		if not tag:
			return self._anonymous("_el")
		index = self._tag_counters.get(tag, 0)
		name = f"{tag}{index or ''}"
		while name in self._used:
			index += 1
			name = f"{tag}{index}"
		self._tag_counters[tag] = index + 1
		return self._claim(name)

	def _text_name(self, expression: str) -> str:
		match = _THIS_MEMBER.search(expression)
		base = match.group(1) if match else "t"
		index = self._text_counters.get(base, 0)
		name = f"t_{base}{index or ''}"
		while name in self._used:
			index += 1
			name = f"t_{base}{index}"
		self._text_counters[base] = index + 1
		return self._claim(name)

	# -------------------------------------------------------------------------
	# Expressions
	# -------------------------------------------------------------------------

	def reserve_template_identifiers(self, nodes: list[TemplateNode]) -> None:
		"""Parse every interpolation once and reserve the identifiers it reads."""
		for source in _interpolations(nodes):
			if source in self._parsed:
				continue
			expr = parse_interpolation(source)
			self._parsed[source] = expr
			if expr is None:
				logger.warning("Could not parse template expression ${%s}", source)
			else:
				self._used.update(free_identifiers(expr))

	def _expression(self, source: str) -> ExprNode:
		if source not in self._parsed:
			self._parsed[source] = parse_interpolation(source)
		expr = self._parsed[source]
		if expr is None:
			return parse_error_placeholder(source)
		return copy.deepcopy(expr)

	def _state_refs(self, expr: ExprNode) -> list[ExprNode]:
		return state_refs(expr, self.state_map) if self.state_map else []

	# -------------------------------------------------------------------------
	# Statements
	# -------------------------------------------------------------------------

	def _declare(self, name: str, init: ExprNode) -> None:
		declarator = Declarator(Identifier(name), init)
		self._declarations[name] = declarator
		self.statements.append(VarDecl("const", [declarator]))

	def _append(self, target: ExprNode, children: list[str]) -> None:
		if children:
			call = Call(Member(target, "append"), [Identifier(c) for c in children])
			self.statements.append(ExprStmt(call))

	def build(self, nodes: list[TemplateNode]) -> None:
		self.statements.append(
			ExprStmt(Assign(this_member(ROOT), _dom_call("createDocumentFragment", [])))
		)
		children: list[str] = []
		for node in nodes:
			children.extend(self._node(node))
		self._append(this_member(ROOT), children)

	def _node(self, node: TemplateNode) -> list[str]:
		match node:
			case TextNode(content=content):
				return self._text(content)
			case ElementNode():
				return [self._element(node)]

	def _text(self, content: str) -> list[str]:
		names: list[str] = []
		for segment in split_segments(content):
			refs: list[ExprNode] = []
			if not segment.dynamic:
				if not segment.text or _is_indentation(segment.text):
					continue
				init: ExprNode = Literal(segment.text)
				name = self._anonymous("_t")
			else:
				init = self._expression(segment.text)
				refs = self._state_refs(init)
				name = self._text_name(segment.text) if refs else self._anonymous("_t")
			self._declare(name, _dom_call("createTextNode", [init]))
			for ref in refs:
				self.watchers.append(WatcherDescriptor(ref, name, segment.source))
			names.append(name)
		return names

	def _element(self, node: ElementNode) -> str:
		name = self._element_name(node)
		self._declare(name, _dom_call("createElement", [Literal(node.tag)]))
		for attribute, raw in node.attributes.items():
			if attribute == NODE_ATTRIBUTE:
				if raw in self.node_map:
					logger.warning(
						'node="%s" is used on more than one element; the last one wins', raw
					)
				self.node_map[raw] = name
				continue
			value = self._attribute_value(raw)
			call = Call(Member(Identifier(name), "setAttribute"), [Literal(attribute), value])
			self.statements.append(ExprStmt(call))
			unique: dict[str, ExprNode] = {}
			for span in find_interpolations(raw):
				for ref in self._state_refs(self._expression(span.expression)):
					unique.setdefault(emit(ref), ref)
			for ref in unique.values():
				self.watchers.append(WatcherDescriptor(ref, name, raw, attribute=attribute))
		children: list[str] = []
		for child in node.children:
			children.extend(self._node(child))
		self._append(Identifier(name), children)
		return name

	def _attribute_value(self, text: str) -> ExprNode:
		if not find_interpolations(text):
			return Literal(text)
		parts: list[str | ExprNode] = []
		for segment in split_segments(text):
			parts.append(self._expression(segment.text) if segment.dynamic else segment.text)
		return Template.from_parts(parts)

	def bind_nodes(self, tracker: NodeTracker) -> None:
		"""Assign every declared node reference to its element variable.

		The first reference is folded into the creation statement; the rest
		become trailing assignments.
		"""
		for name, refs in tracker.refs.items():
			if name not in self.node_map:
				site = tracker.sites.get(name)
				raise compile_error(
					"ERR_NODE_NOT_FOUND", refs[0], location=site, detail=f'(node "{name}")'
				)
		trailing: list[StmtNode] = []
		for name, var in self.node_map.items():
			refs = tracker.refs.get(name)
			if not refs:
				continue
			declarator = self._declarations[var]
			first, *rest = refs
			assert declarator.init is not None
			declarator.init = Assign(copy.deepcopy(first), declarator.init)
			for ref in rest:
				trailing.append(ExprStmt(Assign(copy.deepcopy(ref), Identifier(var))))
		self.statements.extend(trailing)


def _interpolations(nodes: list[TemplateNode]) -> Iterable[str]:
	for node in nodes:
		if isinstance(node, TextNode):
			for span in find_interpolations(node.content):
				yield span.expression
		else:
			for raw in node.attributes.values():
				for span in find_interpolations(raw):
					yield span.expression
			yield from _interpolations(node.children)


def transform_render(analysis: Analysis) -> RenderOutput:
	"""Replace `$render` with a `__build` method."""
	nodes = parse_template(analysis.render_html)
	builder = DomBuilder(analysis.state_map)
	builder.reserve_template_identifiers(nodes)
	builder.build(nodes)
	builder.bind_nodes(analysis.node_tracker)

	class_node = analysis.class_node
	class_node.body = [m for m in class_node.body if m is not analysis.render.member]
	build = Method(Identifier(BUILD_METHOD), [], builder.statements)
	class_node.body.append(build)
	logger.debug(
		"Built %d statements, %d watcher descriptors, nodes %s",
		len(builder.statements),
		len(builder.watchers),
		builder.node_map,
	)
	return RenderOutput(builder.statements, builder.node_map, builder.watchers, build)


__all__ = [
	"NODE_ATTRIBUTE",
	"RESERVED_WORDS",
	"DomBuilder",
	"attribute_value",
	"interpolation_value",
	"parse_error_placeholder",
	"parse_interpolation",
	"transform_render",
]
