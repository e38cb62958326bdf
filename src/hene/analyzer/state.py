from __future__ import annotations

import logging

from hene.context import Component, StateMap
from hene.js.inspect import is_call_to, make_member, member_name, member_parts, simple_assignment
from hene.js.nodes import ExprNode, Field, Object, Property

logger = logging.getLogger(__name__)

STATE_CALL = "$state"


def analyze_state(component: Component) -> StateMap:
	"""Map every `$state(...)` declaration site to its canonical member path.

	Instance field initializers are walked first, then top-level
	`<path> = ...` assignments of the constructor. Object literals are
	followed property by property. The first declaration of a path wins.
	"""
	state_map: StateMap = {}
	for member in component.node.body:
		if not isinstance(member, Field) or member.static or member.value is None:
			continue
		name = member_name(member.key, member.computed)
		if name is not None:
			_collect(member.value, ["this", name], state_map)

	if component.ctor is not None:
		for stmt in component.ctor.body:
			assign = simple_assignment(stmt)
			if assign is None:
				continue
			parts = member_parts(assign.target)
			if parts is None:
				continue
			_collect(assign.value, parts, state_map)

	logger.debug("State paths: %s", sorted(state_map))
	return state_map


def _collect(value: ExprNode, parts: list[str], state_map: StateMap) -> None:
	if is_call_to(value, STATE_CALL):
		key = ".".join(parts)
		if key not in state_map:
			state_map[key] = make_member(parts)
	elif isinstance(value, Object):
		for prop in value.props:
			if not isinstance(prop, Property) or prop.shorthand:
				continue
			name = member_name(prop.key, prop.computed)
			if name is not None:
				_collect(prop.value, [*parts, name], state_map)


__all__ = ["STATE_CALL", "analyze_state"]
