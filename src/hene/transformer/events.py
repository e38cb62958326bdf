"""`$event` bindings to addEventListener / removeEventListener pairs."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from hene.context import Analysis, Lifecycle
from hene.errors import compile_error
from hene.js.inspect import find_method_calls, is_method_call, member_name, this_member
from hene.js.nodes import (
	Arrow,
	Assign,
	Block,
	Call,
	ExprNode,
	ExprStmt,
	Function,
	Identifier,
	If,
	Literal,
	Member,
	Method,
	Object,
	Property,
	StmtNode,
	This,
	emit,
)

logger = logging.getLogger(__name__)

EVENT_METHOD = "$event"
EVENT_SLOT = "_e{}"


@dataclass(slots=True)
class Listener:
	"""One attached listener, remembered for removal on disconnect."""

	target: ExprNode
	type: ExprNode
	listener: ExprNode
	capture: ExprNode


def capture_flag(options: ExprNode | None) -> ExprNode:
	"""The `capture` value removeEventListener needs to match `options`."""
	match options:
		case None:
			return Literal(False)
		case Literal(value=bool()):
			return Literal(options.value)
		case Identifier():
			return copy.deepcopy(options)
		case Object(props=props):
			for prop in props:
				if (
					isinstance(prop, Property)
					and member_name(prop.key, prop.computed) == "capture"
					and isinstance(prop.value, Literal | Identifier)
				):
					return capture_flag(prop.value)
	return Literal(False)


class EventRewriter:
	"""Rewrites `$event` statements of one connectedCallback."""

	methods: set[str]
	listeners: list[Listener]
	hoisted: list[StmtNode]

	def __init__(self, methods: set[str]) -> None:
		self.methods = methods
		self.listeners = []
		self.hoisted = []

	def rewrite(self, body: list[StmtNode]) -> None:
		for stmt in body:
			self._statement(stmt)

	def _statement(self, stmt: StmtNode) -> None:
		match stmt:
			case ExprStmt(expr=expr) if is_method_call(expr, EVENT_METHOD):
				stmt.expr = self._bind(expr)
			case Block(body=body):
				self.rewrite(body)
			case If(then=then, else_=else_):
				self._statement(then)
				if else_ is not None:
					self._statement(else_)

	def _hoist(self, value: ExprNode) -> Member:
		slot = EVENT_SLOT.format(len(self.hoisted))
		self.hoisted.append(ExprStmt(Assign(this_member(slot), value)))
		return this_member(slot)

	def _stable_listener(self, listener: ExprNode) -> ExprNode:
		match listener:
			case Arrow() | Function():
				return self._hoist(listener)
			case Member(obj=This(), prop=prop) if prop in self.methods:
				call = Call(this_member(prop), [Identifier("e")])
				return self._hoist(Arrow(["e"], call))
			case Member(obj=This()):
				return listener
			case Call() if is_method_call(listener, "bind"):
				return self._hoist(listener)
		logger.warning(
			"Listener %s is not an inline function or this.<member>; "
			"removeEventListener may not receive the same reference",
			emit(listener),
		)
		return listener

	def _bind(self, call: ExprNode) -> ExprNode:
		assert isinstance(call, Call) and isinstance(call.callee, Member)
		if not 2 <= len(call.args) <= 3:
			raise compile_error("ERR_EVENT_ARGUMENTS", call)
		target = call.callee.obj
		event_type, listener = call.args[0], call.args[1]
		options = call.args[2] if len(call.args) == 3 else None

		stable = self._stable_listener(listener)
		self.listeners.append(
			Listener(
				copy.deepcopy(target),
				copy.deepcopy(event_type),
				copy.deepcopy(stable),
				capture_flag(options),
			)
		)
		add = Call(
			Member(target, "addEventListener"),
			[event_type, stable, options if options is not None else Literal(False)],
		)
		add.loc = call.loc
		return add


def _class_methods(analysis: Analysis) -> set[str]:
	names: set[str] = set()
	for member in analysis.class_node.body:
		if isinstance(member, Method) and member.kind == "method" and not member.static:
			name = member_name(member.key, member.computed)
			if name is not None:
				names.add(name)
	return names


def transform_events(analysis: Analysis, lifecycle: Lifecycle) -> list[Listener]:
	"""Attach listeners in connectedCallback and detach them on disconnect.

	Inline and method listeners are hoisted into `this._eN` slots created at
	the end of the constructor, so removal gets the identical function.
	Removals are prepended to disconnectedCallback in declaration order.
	"""
	connected = lifecycle.connected
	for member in analysis.class_node.body:
		if member is connected:
			continue
		for call in find_method_calls(member, EVENT_METHOD):
			raise compile_error("ERR_EVENT_OUTSIDE_CONNECT", call)

	rewriter = EventRewriter(_class_methods(analysis))
	rewriter.rewrite(connected.body)
	for call in find_method_calls(connected, EVENT_METHOD):
		raise compile_error("ERR_EVENT_OUTSIDE_CONNECT", call)

	lifecycle.ctor.body.extend(rewriter.hoisted)
	for listener in reversed(rewriter.listeners):
		remove = Call(
			Member(listener.target, "removeEventListener"),
			[listener.type, listener.listener, listener.capture],
		)
		lifecycle.disconnected.body.insert(0, ExprStmt(remove))
	if rewriter.listeners:
		logger.debug(
			"Bound %d listener(s), hoisted %d", len(rewriter.listeners), len(rewriter.hoisted)
		)
	return rewriter.listeners


__all__ = ["EVENT_METHOD", "EventRewriter", "Listener", "capture_flag", "transform_events"]
