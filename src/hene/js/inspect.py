"""Read-only queries over `hene.js.nodes` trees."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence

from hene.js.nodes import (
	Array,
	Arrow,
	Assign,
	Await,
	Binary,
	Block,
	Call,
	ClassDecl,
	Comma,
	Declarator,
	ExportDecl,
	ExprNode,
	ExprStmt,
	Field,
	Function,
	FunctionDecl,
	Identifier,
	If,
	Literal,
	Member,
	Method,
	New,
	Node,
	Object,
	Program,
	Property,
	Raw,
	RawStmt,
	Return,
	Spread,
	Subscript,
	Super,
	Template,
	Ternary,
	This,
	Throw,
	Unary,
	Update,
	VarDecl,
	emit,
)


def iter_children(node: Node) -> Iterator[Node]:
	"""Direct children of `node`, in source order."""
	match node:
		case Program(body=body) | Block(body=body):
			yield from body
		case ExprStmt(expr=child) | Throw(value=child) | Spread(expr=child) | Await(expr=child):
			yield child
		case Return(value=value):
			if value is not None:
				yield value
		case VarDecl(declarations=declarations):
			yield from declarations
		case Declarator(target=target, init=init):
			yield target
			if init is not None:
				yield init
		case If(cond=cond, then=then, else_=else_):
			yield cond
			yield then
			if else_ is not None:
				yield else_
		case FunctionDecl(function=function):
			yield function
		case ClassDecl(superclass=superclass, body=body):
			if superclass is not None:
				yield superclass
			yield from body
		case ExportDecl(declaration=declaration):
			yield declaration
		case Method(key=key, body=body, computed=computed):
			if computed:
				yield key
			yield from body
		case Field(key=key, value=value, computed=computed):
			if computed:
				yield key
			if value is not None:
				yield value
		case Member(obj=obj):
			yield obj
		case Subscript(obj=obj, key=key):
			yield obj
			yield key
		case Call(callee=callee, args=args) | New(callee=callee, args=args):
			yield callee
			yield from args
		case Assign(target=target, value=value):
			yield target
			yield value
		case Binary(left=left, right=right):
			yield left
			yield right
		case Unary(operand=operand) | Update(operand=operand):
			yield operand
		case Ternary(cond=cond, then=then, else_=else_):
			yield cond
			yield then
			yield else_
		case Arrow(body=body):
			if isinstance(body, list):
				yield from body
			else:
				yield body
		case Function(body=body):
			yield from body
		case Property(key=key, value=value, computed=computed):
			if computed:
				yield key
			yield value
		case Object(props=props):
			yield from props
		case Array(elements=elements):
			yield from (e for e in elements if e is not None)
		case Comma(exprs=exprs):
			yield from exprs
		case Template(expressions=expressions):
			yield from expressions
		case Identifier() | This() | Super() | Literal() | Raw() | RawStmt():
			return
		case _:
			raise TypeError(f"Unknown node kind: {type(node).__name__}")


def walk(node: Node) -> Iterator[Node]:
	"""Pre-order traversal including `node` itself."""
	stack = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(list(iter_children(current))))


# =============================================================================
# Member paths
# =============================================================================


def member_parts(expr: ExprNode) -> list[str] | None:
	"""Canonical parts of a dotted access chain, e.g. ['this', 'data', 'a'].

	Returns None for anything that is not a plain chain of non-computed
	accesses rooted at `this` or an identifier.
	"""
	parts: list[str] = []
	current = expr
	while isinstance(current, Member):
		parts.append(current.prop)
		current = current.obj
	match current:
		case This():
			parts.append("this")
		case Identifier(name=name):
			parts.append(name)
		case _:
			return None
	parts.reverse()
	return parts


def member_path(expr: ExprNode) -> str | None:
	parts = member_parts(expr)
	return ".".join(parts) if parts is not None else None


def make_member(parts: Sequence[str]) -> ExprNode:
	"""Inverse of member_parts."""
	head, *rest = parts
	node: ExprNode = This() if head == "this" else Identifier(head)
	for part in rest:
		node = Member(node, part)
	return node


def this_member(name: str) -> Member:
	return Member(This(), name)


def member_name(key: ExprNode, computed: bool = False) -> str | None:
	"""Static name of a class member or property key."""
	if computed:
		return None
	match key:
		case Identifier(name=name):
			return name
		case Literal(value=str() as value):
			return value
	return None


# =============================================================================
# Calls
# =============================================================================


def is_call_to(expr: Node, name: str) -> bool:
	"""`name(...)` with a bare identifier callee."""
	return isinstance(expr, Call) and expr.callee == Identifier(name)


def is_method_call(expr: Node, method: str) -> bool:
	"""`<anything>.method(...)`"""
	return (
		isinstance(expr, Call)
		and isinstance(expr.callee, Member)
		and expr.callee.prop == method
	)


def _raw_text(node: Node) -> str | None:
	if isinstance(node, Raw | RawStmt):
		return node.text
	return None


def find_calls(node: Node, name: str) -> Iterator[Node]:
	"""Calls to `name(...)` anywhere under `node`, including verbatim text."""
	pattern = re.compile(rf"(?<![\w$.]){re.escape(name)}\s*\(")
	for current in walk(node):
		if is_call_to(current, name):
			yield current
		else:
			text = _raw_text(current)
			if text is not None and pattern.search(text):
				yield current


def find_method_calls(node: Node, method: str) -> Iterator[Node]:
	"""Calls to `<x>.method(...)` anywhere under `node`, including verbatim text."""
	pattern = re.compile(rf"\.\s*{re.escape(method)}\s*\(")
	for current in walk(node):
		if is_method_call(current, method):
			yield current
		else:
			text = _raw_text(current)
			if text is not None and pattern.search(text):
				yield current


def find_this_member(node: Node, name: str) -> Iterator[Node]:
	"""References to `this.<name>` anywhere under `node`."""
	pattern = re.compile(rf"\bthis\s*\.\s*{re.escape(name)}(?![\w$])")
	target = this_member(name)
	for current in walk(node):
		if current == target:
			yield current
		else:
			text = _raw_text(current)
			if text is not None and pattern.search(text):
				yield current


def simple_assignment(stmt: Node) -> Assign | None:
	"""The `target = value` expression of an assignment statement."""
	if isinstance(stmt, ExprStmt) and isinstance(stmt.expr, Assign) and stmt.expr.op == "=":
		return stmt.expr
	return None


def is_super_call(stmt: Node) -> bool:
	return (
		isinstance(stmt, ExprStmt)
		and isinstance(stmt.expr, Call)
		and isinstance(stmt.expr.callee, Super)
	)


# =============================================================================
# Expressions
# =============================================================================


def free_identifiers(node: Node) -> set[str]:
	"""Every identifier name read or written under `node`."""
	return {n.name for n in walk(node) if isinstance(n, Identifier)}


def state_refs(expr: ExprNode, known: dict[str, ExprNode]) -> list[ExprNode]:
	"""Known reactive references used anywhere inside `expr`.

	Every access chain is canonicalized and looked up in `known`; results are
	unique by their printed form, in first-seen order.
	"""
	found: dict[str, ExprNode] = {}
	for current in walk(expr):
		if not isinstance(current, Member):
			continue
		path = member_path(current)
		if path is None or path not in known:
			continue
		ref = known[path]
		found.setdefault(emit(ref), ref)
	return list(found.values())


def string_value(expr: Node | None) -> str | None:
	"""Value of a plain string literal, else None."""
	if isinstance(expr, Literal) and isinstance(expr.value, str):
		raw = expr.raw
		if raw is None or raw[:1] in ("'", '"'):
			return expr.value
	return None


__all__ = [
	"find_calls",
	"find_method_calls",
	"find_this_member",
	"free_identifiers",
	"is_call_to",
	"is_method_call",
	"is_super_call",
	"simple_assignment",
	"iter_children",
	"make_member",
	"member_name",
	"member_parts",
	"member_path",
	"state_refs",
	"string_value",
	"this_member",
	"walk",
]
