from __future__ import annotations

import logging
import re

from hene.context import Component, NodeTracker
from hene.errors import compile_error
from hene.js.inspect import (
	find_calls,
	is_call_to,
	member_name,
	member_parts,
	member_path,
	simple_assignment,
	string_value,
	walk,
)
from hene.js.nodes import Call, ExprNode, Field, Member, Node, Object, Property, Raw, RawStmt

logger = logging.getLogger(__name__)

NODE_CALL = "$node"


def analyze_nodes(component: Component) -> NodeTracker:
	"""Collect `$node('name')` declarations.

	Declarations are allowed in instance field initializers and as top-level
	constructor assignments (directly or inside an object literal). Any other
	`$node` call is fatal, nested constructor expressions included, and so is
	reading a node reference inside the constructor: elements only exist
	once the component has been built.
	"""
	tracker = NodeTracker()
	ctor = component.ctor
	for member in component.node.body:
		if member is ctor:
			continue
		if isinstance(member, Field) and not member.static and member.value is not None:
			name = member_name(member.key, member.computed)
			if name is not None and _is_declaration(member.value):
				_collect(member.value, ["this", name], tracker)
				continue
		_forbid(member)

	if ctor is not None:
		for stmt in ctor.body:
			assign = simple_assignment(stmt)
			parts = member_parts(assign.target) if assign is not None else None
			if assign is not None and parts is not None and _is_declaration(assign.value):
				_check_not_read(assign.value, tracker)
				_collect(assign.value, parts, tracker)
			else:
				_forbid(stmt)
				_check_not_read(stmt, tracker, skip_target=assign is not None)

	for name, refs in tracker.refs.items():
		logger.debug("Node %r referenced as %s", name, [member_path(r) for r in refs])
	return tracker


def _is_declaration(value: ExprNode) -> bool:
	if is_call_to(value, NODE_CALL):
		return True
	if isinstance(value, Object):
		return any(True for _ in find_calls(value, NODE_CALL))
	return False


def _collect(value: ExprNode, parts: list[str], tracker: NodeTracker) -> None:
	if isinstance(value, Call) and is_call_to(value, NODE_CALL):
		tracker.record(_node_name(value), parts, value.loc)
	elif isinstance(value, Object):
		for prop in value.props:
			if isinstance(prop, Property) and not prop.shorthand:
				name = member_name(prop.key, prop.computed)
				if name is not None:
					_collect(prop.value, [*parts, name], tracker)
					continue
			_forbid(prop)
	else:
		_forbid(value)


def _node_name(call: Call) -> str:
	if len(call.args) != 1:
		raise compile_error("ERR_NODE_STRING_LITERAL", call)
	name = string_value(call.args[0])
	if name is None:
		raise compile_error("ERR_NODE_STRING_LITERAL", call.args[0])
	return name


def _forbid(node: Node) -> None:
	"""`$node` calls outside a declaration position."""
	for call in find_calls(node, NODE_CALL):
		raise compile_error("ERR_NODE_CONSTRUCTOR_ONLY", call)


def _check_not_read(node: Node, tracker: NodeTracker, skip_target: bool = False) -> None:
	if not tracker.paths:
		return
	targets: set[int] = set()
	if skip_target:
		assign = simple_assignment(node)
		if assign is not None:
			targets.add(id(assign.target))
	for current in walk(node):
		if id(current) in targets:
			continue
		if isinstance(current, Member) and member_path(current) in tracker.paths:
			raise compile_error("ERR_NODE_BEFORE_BUILD", current)
		if isinstance(current, Raw | RawStmt):
			_check_raw(current, tracker)


def _check_raw(node: Raw | RawStmt, tracker: NodeTracker) -> None:
	for path in tracker.paths:
		if re.search(rf"(?<![\w$.]){re.escape(path)}(?![\w$])", node.text):
			raise compile_error("ERR_NODE_BEFORE_BUILD", node)


__all__ = ["NODE_CALL", "analyze_nodes"]
