from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import Any, Literal, NamedTuple, TypeAlias

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

ErrorCode = Literal[
	"ERR_JS_SYNTAX",
	"ERR_NODE_STRING_LITERAL",
	"ERR_NODE_CONSTRUCTOR_ONLY",
	"ERR_NODE_BEFORE_BUILD",
	"ERR_NODE_NOT_FOUND",
	"ERR_RENDER_MISSING",
	"ERR_RENDER_NOT_STRING",
	"ERR_RENDER_EMPTY",
	"ERR_RENDER_MULTIPLE",
	"ERR_RENDER_CALLED",
	"ERR_EVENT_OUTSIDE_CONNECT",
	"ERR_EVENT_ARGUMENTS",
]

_TAB_WIDTH = 4


class Location(NamedTuple):
	"""Source position: 1-based line, 0-based column."""

	line: int
	column: int


class CompileError(Exception):
	"""Fatal misuse of the component syntax. Aborts the current compilation."""

	code: str
	message: str
	hint: str | None
	location: Location | None

	def __init__(
		self,
		code: str,
		message: str,
		hint: str | None = None,
		location: Location | None = None,
	) -> None:
		super().__init__(message)
		self.code = code
		self.message = message
		self.hint = hint
		self.location = location

	def __str__(self) -> str:
		if self.location is None:
			return f"[{self.code}] {self.message}"
		line, column = self.location
		return f"[{self.code}] {self.message} ({line}:{column})"


@cache
def load_messages() -> dict[str, dict[str, str]]:
	"""Error catalog shipped as package data."""
	text = resources.files("hene").joinpath("messages.json").read_text(encoding="utf-8")
	return json.loads(text)


def compile_error(
	code: ErrorCode,
	node: Any = None,
	*,
	location: Location | None = None,
	detail: str | None = None,
) -> CompileError:
	"""Build a CompileError from the catalog, positioned at `node` when given."""
	entry = load_messages().get(code)
	if entry is None:
		message, hint = code, None
	else:
		message, hint = entry["message"], entry.get("hint")
	if detail:
		message = f"{message} {detail}"
	if location is None and node is not None:
		location = getattr(node, "loc", None)
	return CompileError(code, message, hint, location)


@dataclass(slots=True)
class Diagnostic:
	"""Structured error handed to reporters."""

	id: str
	message: str
	hint: str | None
	file: str | None
	loc: Location | None
	frame: str | None

	def headline(self) -> str:
		where = self.file or "<source>"
		if self.loc is not None:
			where = f"{where}:{self.loc.line}:{self.loc.column}"
		return f"{where} [{self.id}] {self.message}"


Reporter: TypeAlias = Callable[[Diagnostic], None]


def code_frame(source: str, location: Location, context: int = 1) -> str:
	"""Render the lines around `location` with a `>` marker and a caret."""
	lines = source.splitlines()
	if not lines:
		return ""
	index = min(max(location.line - 1, 0), len(lines) - 1)
	start = max(index - context, 0)
	end = min(index + context, len(lines) - 1)
	frame: list[str] = []
	for i in range(start, end + 1):
		marker = ">" if i == index else " "
		text = lines[i].expandtabs(_TAB_WIDTH)
		frame.append(f"{marker} {i + 1:>4} | {text}".rstrip())
		if i == index:
			# Caret column accounts for tabs expanded before the error column
			prefix = lines[i][: location.column].expandtabs(_TAB_WIDTH)
			frame.append(f"       | {' ' * len(prefix)}^")
	return "\n".join(frame)


_console: Console | None = None


def _stderr() -> Console:
	global _console
	if _console is None:
		_console = Console(stderr=True)
	return _console


def report_error(
	error: CompileError,
	source: str,
	*,
	reporter: Reporter | None = None,
	filename: str | None = None,
) -> Diagnostic:
	"""Surface a compile error either through `reporter` or on stderr."""
	frame = code_frame(source, error.location) if error.location else None
	diagnostic = Diagnostic(
		id=error.code,
		message=error.message,
		hint=error.hint,
		file=filename,
		loc=error.location,
		frame=frame,
	)
	logger.error("%s", diagnostic.headline())
	if reporter is not None:
		reporter(diagnostic)
		return diagnostic

	console = _stderr()
	console.print(f"[bold red]error[/bold red] {escape(diagnostic.headline())}")
	if frame:
		console.print(escape(frame), highlight=False)
	if diagnostic.hint:
		console.print(f"[dim]hint:[/dim] {escape(diagnostic.hint)}")
	return diagnostic


__all__ = [
	"CompileError",
	"Diagnostic",
	"ErrorCode",
	"Location",
	"Reporter",
	"code_frame",
	"compile_error",
	"load_messages",
	"report_error",
]
