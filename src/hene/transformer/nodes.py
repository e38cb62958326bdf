from __future__ import annotations

from hene.analyzer.nodes import NODE_CALL
from hene.context import Analysis
from hene.js.inspect import is_call_to, simple_assignment
from hene.js.nodes import ExprNode, Field, Literal, Object, Property


def transform_nodes(analysis: Analysis) -> None:
	"""Replace `$node(...)` declarations with `null`.

	The real elements are assigned by the build method once the DOM exists.
	"""
	for member in analysis.class_node.body:
		if isinstance(member, Field) and not member.static and member.value is not None:
			member.value = _placeholder(member.value)
	if analysis.ctor is not None:
		for stmt in analysis.ctor.body:
			assign = simple_assignment(stmt)
			if assign is not None:
				assign.value = _placeholder(assign.value)


def _placeholder(value: ExprNode) -> ExprNode:
	if is_call_to(value, NODE_CALL):
		replacement = Literal(None)
		replacement.loc = value.loc
		return replacement
	if isinstance(value, Object):
		for prop in value.props:
			if isinstance(prop, Property) and not prop.shorthand:
				prop.value = _placeholder(prop.value)
	return value


__all__ = ["transform_nodes"]
