from __future__ import annotations

import logging

from hene.context import Component, RenderSource
from hene.errors import compile_error
from hene.js.inspect import find_this_member, is_method_call, member_name, string_value
from hene.js.nodes import ClassMember, ExprNode, ExprStmt, Field, Member, Method, Return, Template, This, emit

logger = logging.getLogger(__name__)

RENDER = "$render"
BUILT_MARKER = "$built"


def analyze_render(component: Component) -> RenderSource:
	"""Extract the HTML of the single `$render` field or method."""
	class_node = component.node
	candidates = [
		m
		for m in class_node.body
		if isinstance(m, Field | Method) and member_name(m.key, m.computed) == RENDER
	]
	if not candidates:
		raise compile_error("ERR_RENDER_MISSING", class_node)
	if len(candidates) > 1:
		raise compile_error("ERR_RENDER_MULTIPLE", candidates[1])
	member = candidates[0]

	for other in class_node.body:
		if other is member:
			continue
		for ref in find_this_member(other, RENDER):
			raise compile_error("ERR_RENDER_CALLED", ref)

	html = _extract_html(member)
	if not html.strip():
		raise compile_error("ERR_RENDER_EMPTY", member)
	logger.debug("Render template: %d characters", len(html))
	return RenderSource(html, member, _built_marker(component))


def _extract_html(member: ClassMember) -> str:
	value: ExprNode | None
	if isinstance(member, Field):
		value = member.value
	else:
		returns = [s for s in member.body if isinstance(s, Return)]
		if len(returns) != 1:
			raise compile_error("ERR_RENDER_NOT_STRING", member)
		value = returns[0].value

	text = string_value(value)
	if text is not None:
		return text
	if isinstance(value, Template):
		raw = value.raw if value.raw is not None else emit(value)
		return raw[1:-1]
	raise compile_error("ERR_RENDER_NOT_STRING", value if value is not None else member)


def _built_marker(component: Component) -> int:
	"""Index of the legacy `this.$built()` statement in the constructor."""
	ctor = component.ctor
	if ctor is None:
		return -1
	found = [
		i
		for i, stmt in enumerate(ctor.body)
		if isinstance(stmt, ExprStmt)
		and is_method_call(stmt.expr, BUILT_MARKER)
		and isinstance(stmt.expr.callee, Member)
		and isinstance(stmt.expr.callee.obj, This)
	]
	if not found:
		return -1
	if len(found) > 1:
		logger.warning("this.$built() appears %d times; only the first is removed", len(found))
	marker = ctor.body[found[0]]
	if isinstance(marker, ExprStmt) and getattr(marker.expr, "args", None):
		logger.warning("this.$built() takes no arguments; they are ignored")
	return found[0]


__all__ = ["BUILT_MARKER", "RENDER", "analyze_render"]
