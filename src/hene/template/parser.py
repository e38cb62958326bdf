"""HTML fragment parsing for `$render` templates.

Interpolations are swapped for opaque placeholder tokens before the HTML is
tokenized, so `<`, `>` and quotes inside `${...}` never reach the tokenizer,
and are restored verbatim in text and attribute values afterwards.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import TypeAlias, override

from hene.template.interpolation import find_interpolations

logger = logging.getLogger(__name__)

PLACEHOLDER = "__HENE_EXPR_{}__"
_PLACEHOLDER_RE = re.compile(r"__HENE_EXPR_(\d+)__")

VOID_ELEMENTS = frozenset(
	{
		"area",
		"base",
		"br",
		"col",
		"embed",
		"hr",
		"img",
		"input",
		"link",
		"meta",
		"param",
		"source",
		"track",
		"wbr",
	}
)


@dataclass(slots=True)
class TextNode:
	content: str


@dataclass(slots=True)
class ElementNode:
	tag: str
	attributes: dict[str, str] = field(default_factory=dict)
	children: list[TemplateNode] = field(default_factory=list)


TemplateNode: TypeAlias = TextNode | ElementNode


def protect(html: str) -> tuple[str, list[str]]:
	"""Replace each `${...}` with a placeholder; returns the originals by index."""
	originals: list[str] = []
	parts: list[str] = []
	pos = 0
	for span in find_interpolations(html):
		parts.append(html[pos : span.start])
		parts.append(PLACEHOLDER.format(len(originals)))
		originals.append(html[span.start : span.end])
		pos = span.end
	parts.append(html[pos:])
	return "".join(parts), originals


def restore(text: str, originals: list[str]) -> str:
	def replace(match: re.Match[str]) -> str:
		index = int(match.group(1))
		return originals[index] if index < len(originals) else match.group(0)

	return _PLACEHOLDER_RE.sub(replace, text)


class _TreeBuilder(HTMLParser):
	"""Builds a TemplateNode forest from HTMLParser callbacks."""

	def __init__(self) -> None:
		super().__init__(convert_charrefs=True)
		self.roots: list[TemplateNode] = []
		self.stack: list[ElementNode] = []

	def _siblings(self) -> list[TemplateNode]:
		return self.stack[-1].children if self.stack else self.roots

	@override
	def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
		attributes: dict[str, str] = {}
		for name, value in attrs:
			if name in attributes:
				logger.debug("Duplicate attribute %r on <%s> ignored", name, tag)
				continue
			attributes[name] = value if value is not None else ""
		element = ElementNode(tag, attributes)
		self._siblings().append(element)
		if tag not in VOID_ELEMENTS:
			self.stack.append(element)

	@override
	def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
		self.handle_starttag(tag, attrs)
		if tag not in VOID_ELEMENTS:
			self.stack.pop()

	@override
	def handle_endtag(self, tag: str) -> None:
		for i in range(len(self.stack) - 1, -1, -1):
			if self.stack[i].tag == tag:
				del self.stack[i:]
				return
		logger.debug("Stray end tag </%s> ignored", tag)

	@override
	def handle_data(self, data: str) -> None:
		siblings = self._siblings()
		if siblings and isinstance(siblings[-1], TextNode):
			siblings[-1].content += data
		else:
			siblings.append(TextNode(data))


def _restore_tree(nodes: list[TemplateNode], originals: list[str]) -> list[TemplateNode]:
	restored: list[TemplateNode] = []
	for node in nodes:
		if isinstance(node, TextNode):
			content = restore(node.content, originals)
			if content.strip():
				restored.append(TextNode(content))
			continue
		restored.append(
			ElementNode(
				node.tag,
				{name: restore(value, originals) for name, value in node.attributes.items()},
				_restore_tree(node.children, originals),
			)
		)
	return restored


def parse_template(html: str) -> list[TemplateNode]:
	"""Parse an HTML fragment into text/element nodes.

	Comments and whitespace-only text nodes are dropped.
	"""
	protected, originals = protect(html)
	builder = _TreeBuilder()
	builder.feed(protected)
	builder.close()
	if builder.stack:
		logger.debug("Unclosed elements at end of template: %s", [e.tag for e in builder.stack])
	return _restore_tree(builder.roots, originals)


__all__ = [
	"PLACEHOLDER",
	"VOID_ELEMENTS",
	"ElementNode",
	"TemplateNode",
	"TextNode",
	"parse_template",
	"protect",
	"restore",
]
