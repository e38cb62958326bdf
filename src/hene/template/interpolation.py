"""`${...}` scanning for render templates.

Braces are matched by counting, without understanding the expression, so a
string literal holding an unbalanced brace inside an interpolation is not
supported. An unterminated `${` is ordinary text.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Span:
	"""One interpolation: text[start:end] == "${" + expression + "}"."""

	start: int
	end: int
	expression: str


@dataclass(slots=True, frozen=True)
class Segment:
	"""A run of static text, or the source of one interpolated expression."""

	text: str
	dynamic: bool = False

	@property
	def source(self) -> str:
		return "${" + self.text + "}" if self.dynamic else self.text


def find_interpolations(text: str) -> list[Span]:
	spans: list[Span] = []
	pos = 0
	while True:
		start = text.find("${", pos)
		if start == -1:
			return spans
		depth = 0
		for i in range(start + 1, len(text)):
			c = text[i]
			if c == "{":
				depth += 1
			elif c == "}":
				depth -= 1
				if depth == 0:
					break
		else:
			return spans
		spans.append(Span(start, i + 1, text[start + 2 : i]))
		pos = i + 1


def split_segments(text: str) -> list[Segment]:
	"""Alternating static/dynamic segments; adjacent statics merged, empties dropped."""
	segments: list[Segment] = []
	pos = 0
	for span in find_interpolations(text):
		if span.start > pos:
			segments.append(Segment(text[pos : span.start]))
		segments.append(Segment(span.expression, dynamic=True))
		pos = span.end
	if pos < len(text):
		segments.append(Segment(text[pos:]))
	return segments


def has_interpolation(text: str) -> bool:
	return bool(find_interpolations(text))


__all__ = ["Segment", "Span", "find_interpolations", "has_interpolation", "split_segments"]
