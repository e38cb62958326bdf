from __future__ import annotations

import logging

from hene.context import Analysis, Lifecycle
from hene.js.inspect import is_super_call, member_name, this_member
from hene.js.nodes import (
	Assign,
	Block,
	Call,
	ClassDecl,
	ExprStmt,
	Identifier,
	If,
	Literal,
	Member,
	Method,
	Super,
	This,
	Unary,
)

logger = logging.getLogger(__name__)

ELEMENT_BASE = "HTMLElement"
BUILT_FLAG = "__built"
BUILD_METHOD = "__build"
ROOT = "_root"
CONNECTED = "connectedCallback"
DISCONNECTED = "disconnectedCallback"


def transform_class_shell(analysis: Analysis) -> Lifecycle:
	"""Turn the component into a plain custom element class.

	Retargets `extends` to HTMLElement, makes sure the constructor and both
	lifecycle callbacks exist, and installs the build-once guard.
	"""
	class_node = analysis.class_node
	superclass = Identifier(ELEMENT_BASE)
	if class_node.superclass is not None:
		superclass.loc = class_node.superclass.loc
	class_node.superclass = superclass

	ctor = analysis.ctor
	if ctor is None:
		ctor = Method(Identifier("constructor"), [], [], kind="constructor")
		class_node.body.insert(0, ctor)
		analysis.component.ctor = ctor
		logger.debug("Synthesized constructor for %s", class_node.name)
	elif analysis.built_index >= 0:
		del ctor.body[analysis.built_index]

	super_index = next((i for i, s in enumerate(ctor.body) if is_super_call(s)), None)
	if super_index is None:
		ctor.body.insert(0, ExprStmt(Call(Super(), [])))
		super_index = 0
	ctor.body.insert(super_index + 1, ExprStmt(Assign(this_member(BUILT_FLAG), Literal(False))))

	connected = ensure_method(class_node, CONNECTED)
	disconnected = ensure_method(class_node, DISCONNECTED)

	guard = If(
		Unary("!", this_member(BUILT_FLAG)),
		Block(
			[
				ExprStmt(Call(this_member(BUILD_METHOD), [])),
				ExprStmt(Assign(this_member(BUILT_FLAG), Literal(True))),
			]
		),
	)
	connected.body.insert(0, guard)
	connected.body.append(ExprStmt(Call(Member(This(), "appendChild"), [this_member(ROOT)])))
	return Lifecycle(ctor, connected, disconnected)


def ensure_method(class_node: ClassDecl, name: str) -> Method:
	"""The instance method `name`, appended empty when missing."""
	for member in class_node.body:
		if (
			isinstance(member, Method)
			and member.kind == "method"
			and not member.static
			and member_name(member.key, member.computed) == name
		):
			return member
	method = Method(Identifier(name), [], [])
	class_node.body.append(method)
	logger.debug("Synthesized %s for %s", name, class_node.name)
	return method


__all__ = [
	"BUILD_METHOD",
	"BUILT_FLAG",
	"CONNECTED",
	"DISCONNECTED",
	"ELEMENT_BASE",
	"ROOT",
	"ensure_method",
	"transform_class_shell",
]
