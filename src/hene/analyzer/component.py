from __future__ import annotations

import logging

from hene.context import Component
from hene.js.inspect import member_name
from hene.js.nodes import ClassDecl, ExportDecl, Identifier, Method, Program

logger = logging.getLogger(__name__)


def locate_component(program: Program, marker: str) -> Component | None:
	"""First top-level `class X extends <marker>`, exported or not."""
	for stmt in program.body:
		decl = stmt.declaration if isinstance(stmt, ExportDecl) else stmt
		if isinstance(decl, ClassDecl) and decl.superclass == Identifier(marker):
			logger.debug("Found component class %s", decl.name)
			return Component(decl, find_constructor(decl))
	return None


def find_constructor(class_node: ClassDecl) -> Method | None:
	for member in class_node.body:
		if isinstance(member, Method) and member.kind == "constructor":
			return member
	return None


def find_method(class_node: ClassDecl, name: str) -> Method | None:
	"""Instance method `name`, ignoring accessors and static methods."""
	for member in class_node.body:
		if (
			isinstance(member, Method)
			and member.kind == "method"
			and not member.static
			and member_name(member.key, member.computed) == name
		):
			return member
	return None


__all__ = ["find_constructor", "find_method", "locate_component"]
