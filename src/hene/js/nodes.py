from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal as Lit
from typing import TypeAlias, override

from hene.errors import Location

INDENT = "  "


# =============================================================================
# Base classes
# =============================================================================
@dataclass(slots=True)
class Node(ABC):
	"""Base class for all JavaScript AST nodes.

	`loc` is the source position of parsed nodes, None for generated ones.
	It never takes part in equality.
	"""

	loc: Location | None = field(default=None, kw_only=True, compare=False, repr=False)

	@abstractmethod
	def emit(self, out: list[str], depth: int = 0) -> None:
		"""Emit this node as JavaScript into the output buffer.

		`depth` is the indentation level of the line the node starts on.
		"""


class ExprNode(Node, ABC):
	"""Base class for expression nodes."""

	__slots__: tuple[str, ...] = ()

	def precedence(self) -> int:
		"""Operator precedence (higher = binds tighter). Default: primary (20)."""
		return 20


class StmtNode(Node, ABC):
	"""Base class for statement nodes."""

	__slots__: tuple[str, ...] = ()


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(slots=True)
class Identifier(ExprNode):
	"""JS identifier: x, foo, undefined"""

	name: str

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append(self.name)


@dataclass(slots=True)
class This(ExprNode):
	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("this")


@dataclass(slots=True)
class Super(ExprNode):
	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("super")


@dataclass(slots=True)
class Literal(ExprNode):
	"""JS literal: 42, "hello", true, null, /re/g

	Parsed literals keep their source text in `raw` and are printed as written.
	"""

	value: int | float | str | bool | None
	raw: str | None = field(default=None, compare=False)

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.raw is not None:
			out.append(self.raw)
		elif self.value is None:
			out.append("null")
		elif isinstance(self.value, bool):
			out.append("true" if self.value else "false")
		elif isinstance(self.value, str):
			out.append('"')
			out.append(_escape_string(self.value))
			out.append('"')
		elif isinstance(self.value, float) and self.value.is_integer():
			out.append(str(int(self.value)))
		else:
			out.append(repr(self.value))

	def is_number(self) -> bool:
		return isinstance(self.value, int | float) and not isinstance(self.value, bool)


@dataclass(slots=True)
class Template(ExprNode):
	"""JS template literal: `a ${b} c`

	`quasis` hold the raw (already escaped) text between substitutions;
	there is always one more quasi than expressions. `raw` is the source
	text including the backticks, when parsed.
	"""

	quasis: list[str]
	expressions: list[ExprNode]
	raw: str | None = field(default=None, compare=False, repr=False)

	@staticmethod
	def from_parts(parts: Sequence[str | ExprNode]) -> Template:
		"""Build from alternating cooked strings and expressions."""
		quasis: list[str] = [""]
		expressions: list[ExprNode] = []
		for part in parts:
			if isinstance(part, str):
				quasis[-1] += _escape_template(part)
			else:
				expressions.append(part)
				quasis.append("")
		return Template(quasis, expressions)

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("`")
		for i, quasi in enumerate(self.quasis):
			out.append(quasi)
			if i < len(self.expressions):
				out.append("${")
				self.expressions[i].emit(out, depth)
				out.append("}")
		out.append("`")


@dataclass(slots=True)
class Member(ExprNode):
	"""JS member access: obj.prop, obj?.prop, this.#secret"""

	obj: ExprNode
	prop: str
	optional: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if isinstance(self.obj, Literal) and self.obj.is_number():
			out.append("(")
			self.obj.emit(out, depth)
			out.append(")")
		else:
			_emit_primary(self.obj, out, depth)
		out.append("?." if self.optional else ".")
		out.append(self.prop)


@dataclass(slots=True)
class Subscript(ExprNode):
	"""JS subscript access: obj[key], obj?.[key]"""

	obj: ExprNode
	key: ExprNode
	optional: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		_emit_primary(self.obj, out, depth)
		out.append("?.[" if self.optional else "[")
		self.key.emit(out, depth)
		out.append("]")


@dataclass(slots=True)
class Call(ExprNode):
	"""JS function call: fn(args), fn?.(args)"""

	callee: ExprNode
	args: list[ExprNode]
	optional: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		_emit_primary(self.callee, out, depth)
		if self.optional:
			out.append("?.")
		_emit_args(self.args, out, depth)


@dataclass(slots=True)
class New(ExprNode):
	"""JS constructor call: new Foo(args)"""

	callee: ExprNode
	args: list[ExprNode]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("new ")
		if self.callee.precedence() < 20 or _contains_call(self.callee):
			out.append("(")
			self.callee.emit(out, depth)
			out.append(")")
		else:
			self.callee.emit(out, depth)
		_emit_args(self.args, out, depth)


@dataclass(slots=True)
class Assign(ExprNode):
	"""JS assignment expression: x = y, x += y, x ??= y"""

	target: ExprNode
	value: ExprNode
	op: str = "="

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["="]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		self.target.emit(out, depth)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_assign_rhs(self.value, out, depth)


@dataclass(slots=True)
class Binary(ExprNode):
	"""JS binary or logical expression: x + y, a && b"""

	left: ExprNode
	op: str
	right: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE.get(self.op, 0)

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		# Special: ** with unary on left needs parens
		if self.op == "**" and isinstance(self.left, Unary | Await):
			out.append("(")
			self.left.emit(out, depth)
			out.append(")")
		else:
			_emit_paren(self.left, self.op, "left", out, depth)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_paren(self.right, self.op, "right", out, depth)


@dataclass(slots=True)
class Unary(ExprNode):
	"""JS unary expression: -x, !x, typeof x"""

	op: str
	operand: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["!"]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append(self.op)
		if self.op in {"typeof", "void", "delete"}:
			out.append(" ")
		operand = self.operand
		# Avoid gluing `- -x` into `--x`
		glued = isinstance(operand, Unary | Update) and operand.op.startswith(self.op)
		if glued or operand.precedence() < self.precedence():
			out.append("(")
			operand.emit(out, depth)
			out.append(")")
		else:
			operand.emit(out, depth)


@dataclass(slots=True)
class Update(ExprNode):
	"""JS update expression: ++x, x--"""

	op: Lit["++", "--"]
	operand: ExprNode
	prefix: bool = False

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["++"]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.prefix:
			out.append(self.op)
		_emit_primary(self.operand, out, depth)
		if not self.prefix:
			out.append(self.op)


@dataclass(slots=True)
class Ternary(ExprNode):
	"""JS ternary expression: cond ? a : b"""

	cond: ExprNode
	then: ExprNode
	else_: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["?:"]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.cond.precedence() <= self.precedence():
			out.append("(")
			self.cond.emit(out, depth)
			out.append(")")
		else:
			self.cond.emit(out, depth)
		out.append(" ? ")
		_emit_assign_rhs(self.then, out, depth)
		out.append(" : ")
		_emit_assign_rhs(self.else_, out, depth)


@dataclass(slots=True)
class Arrow(ExprNode):
	"""JS arrow function: x => expr, (a, b) => { ... }

	`params` are printed verbatim, so patterns and defaults survive.
	"""

	params: list[str]
	body: ExprNode | list[StmtNode]
	is_async: bool = False

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["=>"]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.is_async:
			out.append("async ")
		if len(self.params) == 1 and _is_identifier(self.params[0]):
			out.append(self.params[0])
		else:
			out.append("(")
			out.append(", ".join(self.params))
			out.append(")")
		out.append(" => ")
		if isinstance(self.body, list):
			_emit_block(self.body, out, depth)
		elif isinstance(_leftmost(self.body), Object) or self.body.precedence() < 3:
			out.append("(")
			self.body.emit(out, depth)
			out.append(")")
		else:
			self.body.emit(out, depth)


@dataclass(slots=True)
class Function(ExprNode):
	"""JS function expression: function name(params) { ... }"""

	params: list[str]
	body: list[StmtNode]
	name: str | None = None
	is_async: bool = False
	generator: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.is_async:
			out.append("async ")
		out.append("function")
		if self.generator:
			out.append("*")
		if self.name:
			out.append(" ")
			out.append(self.name)
		out.append("(")
		out.append(", ".join(self.params))
		out.append(") ")
		_emit_block(self.body, out, depth)


@dataclass(slots=True)
class Property(ExprNode):
	"""Object literal entry: key: value, [key]: value, shorthand"""

	key: ExprNode
	value: ExprNode
	computed: bool = False
	shorthand: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.shorthand:
			self.value.emit(out, depth)
			return
		_emit_key(self.key, self.computed, out, depth)
		out.append(": ")
		_emit_assign_rhs(self.value, out, depth)


@dataclass(slots=True)
class Object(ExprNode):
	"""JS object literal, one entry per line.

	Entries are Property, Spread, or Raw (method shorthand, accessors).
	"""

	props: list[ExprNode]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if not self.props:
			out.append("{}")
			return
		out.append("{\n")
		for i, prop in enumerate(self.props):
			out.append(INDENT * (depth + 1))
			prop.emit(out, depth + 1)
			if i < len(self.props) - 1:
				out.append(",")
			out.append("\n")
		out.append(INDENT * depth)
		out.append("}")


@dataclass(slots=True)
class Array(ExprNode):
	"""JS array literal: [a, b, c]. None marks a hole."""

	elements: list[ExprNode | None]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("[")
		for i, e in enumerate(self.elements):
			if i > 0:
				out.append(", ")
			if e is not None:
				_emit_assign_rhs(e, out, depth)
		if self.elements and self.elements[-1] is None:
			out.append(",")
		out.append("]")


@dataclass(slots=True)
class Spread(ExprNode):
	"""JS spread: ...expr"""

	expr: ExprNode

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("...")
		_emit_assign_rhs(self.expr, out, depth)


@dataclass(slots=True)
class Comma(ExprNode):
	"""JS comma expression: a, b"""

	exprs: list[ExprNode]

	@override
	def precedence(self) -> int:
		return _PRECEDENCE[","]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		for i, e in enumerate(self.exprs):
			if i > 0:
				out.append(", ")
			_emit_assign_rhs(e, out, depth)


@dataclass(slots=True)
class Await(ExprNode):
	"""JS await expression: await expr"""

	expr: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["await"]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("await ")
		if self.expr.precedence() < self.precedence():
			out.append("(")
			self.expr.emit(out, depth)
			out.append(")")
		else:
			self.expr.emit(out, depth)


@dataclass(slots=True)
class Raw(ExprNode):
	"""Verbatim expression text for kinds the compiler never rewrites."""

	text: str
	prec: int = 20

	@override
	def precedence(self) -> int:
		return self.prec

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append(self.text)


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass(slots=True)
class ExprStmt(StmtNode):
	"""JS expression statement: expr;"""

	expr: ExprNode

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if _starts_ambiguously(self.expr):
			out.append("(")
			self.expr.emit(out, depth)
			out.append(")")
		else:
			self.expr.emit(out, depth)
		out.append(";")


@dataclass(slots=True)
class Declarator(Node):
	"""One binding of a variable declaration: target = init"""

	target: ExprNode
	init: ExprNode | None = None

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		self.target.emit(out, depth)
		if self.init is not None:
			out.append(" = ")
			_emit_assign_rhs(self.init, out, depth)


@dataclass(slots=True)
class VarDecl(StmtNode):
	"""JS variable declaration: const a = 1, b;"""

	kind: Lit["var", "let", "const"]
	declarations: list[Declarator]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append(self.kind)
		out.append(" ")
		for i, decl in enumerate(self.declarations):
			if i > 0:
				out.append(", ")
			decl.emit(out, depth)
		out.append(";")


@dataclass(slots=True)
class Return(StmtNode):
	"""JS return statement: return expr;"""

	value: ExprNode | None = None

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("return")
		if self.value is not None:
			out.append(" ")
			self.value.emit(out, depth)
		out.append(";")


@dataclass(slots=True)
class Throw(StmtNode):
	"""JS throw statement: throw expr;"""

	value: ExprNode

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("throw ")
		self.value.emit(out, depth)
		out.append(";")


@dataclass(slots=True)
class Block(StmtNode):
	"""JS block: { ... }"""

	body: list[StmtNode]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		_emit_block(self.body, out, depth)


@dataclass(slots=True)
class If(StmtNode):
	"""JS if statement: if (cond) stmt else stmt"""

	cond: ExprNode
	then: StmtNode
	else_: StmtNode | None = None

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("if (")
		self.cond.emit(out, depth)
		out.append(") ")
		self.then.emit(out, depth)
		if self.else_ is not None:
			out.append(" else ")
			self.else_.emit(out, depth)


@dataclass(slots=True)
class FunctionDecl(StmtNode):
	"""JS function declaration."""

	function: Function

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		self.function.emit(out, depth)


@dataclass(slots=True)
class Method(Node):
	"""Class method: constructor, plain method, getter or setter."""

	key: ExprNode
	params: list[str]
	body: list[StmtNode]
	kind: Lit["constructor", "method", "get", "set"] = "method"
	static: bool = False
	is_async: bool = False
	generator: bool = False
	computed: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.static:
			out.append("static ")
		if self.is_async:
			out.append("async ")
		if self.kind in ("get", "set"):
			out.append(self.kind)
			out.append(" ")
		if self.generator:
			out.append("*")
		_emit_key(self.key, self.computed, out, depth)
		out.append("(")
		out.append(", ".join(self.params))
		out.append(") ")
		_emit_block(self.body, out, depth)


@dataclass(slots=True)
class Field(Node):
	"""Class field: name = value;"""

	key: ExprNode
	value: ExprNode | None = None
	static: bool = False
	computed: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		if self.static:
			out.append("static ")
		_emit_key(self.key, self.computed, out, depth)
		if self.value is not None:
			out.append(" = ")
			_emit_assign_rhs(self.value, out, depth)
		out.append(";")


@dataclass(slots=True)
class RawStmt(StmtNode):
	"""Verbatim statement text (loops, try, imports, static blocks, ...)."""

	text: str

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append(self.text)


ClassMember: TypeAlias = Method | Field | RawStmt


@dataclass(slots=True)
class ClassDecl(StmtNode):
	"""JS class declaration: class Name extends Base { ... }"""

	name: str
	superclass: ExprNode | None
	body: list[ClassMember]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("class ")
		out.append(self.name)
		if self.superclass is not None:
			out.append(" extends ")
			_emit_primary(self.superclass, out, depth)
		out.append(" ")
		_emit_block(self.body, out, depth)


@dataclass(slots=True)
class ExportDecl(StmtNode):
	"""export [default] <declaration>"""

	declaration: StmtNode
	default: bool = False

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		out.append("export ")
		if self.default:
			out.append("default ")
		self.declaration.emit(out, depth)


@dataclass(slots=True)
class Program(Node):
	"""A whole module: one statement per line."""

	body: list[StmtNode]

	@override
	def emit(self, out: list[str], depth: int = 0) -> None:
		for stmt in self.body:
			out.append(INDENT * depth)
			stmt.emit(out, depth)
			out.append("\n")


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as JavaScript code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)


# Operator precedence table (higher = binds tighter)
_PRECEDENCE: dict[str, int] = {
	# Primary
	".": 20,
	"[]": 20,
	"()": 20,
	# Postfix / prefix update
	"++": 18,
	"--": 18,
	# Unary
	"!": 17,
	"await": 17,
	# Exponentiation (right-assoc)
	"**": 16,
	# Multiplicative
	"*": 15,
	"/": 15,
	"%": 15,
	# Additive
	"+": 14,
	"-": 14,
	# Shift
	"<<": 13,
	">>": 13,
	">>>": 13,
	# Relational
	"<": 12,
	"<=": 12,
	">": 12,
	">=": 12,
	"instanceof": 12,
	"in": 12,
	# Equality
	"==": 11,
	"!=": 11,
	"===": 11,
	"!==": 11,
	# Bitwise
	"&": 10,
	"^": 9,
	"|": 8,
	# Logical
	"&&": 7,
	"||": 6,
	"??": 5,
	# Ternary
	"?:": 4,
	# Assignment, arrow
	"=": 3,
	"=>": 3,
	# Comma
	",": 1,
}

_RIGHT_ASSOC = {"**"}
_LOGICAL = {"&&", "||"}


def _escape_string(s: str) -> str:
	"""Escape for double-quoted JS string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _escape_template(s: str) -> str:
	"""Escape for template literal strings. Line breaks are kept literal."""
	return s.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def _is_identifier(text: str) -> bool:
	head = text[:1]
	if not head or not (head.isalpha() or head in "_$"):
		return False
	return all(c.isalnum() or c in "_$" for c in text)


def _emit_block(body: Sequence[Node], out: list[str], depth: int) -> None:
	if not body:
		out.append("{}")
		return
	out.append("{\n")
	for stmt in body:
		out.append(INDENT * (depth + 1))
		stmt.emit(out, depth + 1)
		out.append("\n")
	out.append(INDENT * depth)
	out.append("}")


def _emit_key(key: ExprNode, computed: bool, out: list[str], depth: int) -> None:
	if computed:
		out.append("[")
		_emit_assign_rhs(key, out, depth)
		out.append("]")
	else:
		key.emit(out, depth)


def _emit_args(args: Sequence[ExprNode], out: list[str], depth: int) -> None:
	out.append("(")
	for i, a in enumerate(args):
		if i > 0:
			out.append(", ")
		_emit_assign_rhs(a, out, depth)
	out.append(")")


def _emit_assign_rhs(node: ExprNode, out: list[str], depth: int) -> None:
	"""Emit in a position that accepts an AssignmentExpression."""
	if node.precedence() < _PRECEDENCE["="]:
		out.append("(")
		node.emit(out, depth)
		out.append(")")
	else:
		node.emit(out, depth)


def _emit_paren(
	node: ExprNode, parent_op: str, side: str, out: list[str], depth: int
) -> None:
	"""Emit child with parens if needed for precedence."""
	needs_parens = False
	child_prec = node.precedence()
	parent_prec = _PRECEDENCE.get(parent_op, 0)
	if child_prec < parent_prec:
		needs_parens = True
	elif child_prec == parent_prec and isinstance(node, Binary):
		# Handle associativity
		if parent_op in _RIGHT_ASSOC:
			needs_parens = side == "left"
		else:
			needs_parens = side == "right"
	# `??` cannot be mixed with && or || without parens
	if isinstance(node, Binary) and (
		(parent_op == "??" and node.op in _LOGICAL)
		or (parent_op in _LOGICAL and node.op == "??")
	):
		needs_parens = True

	if needs_parens:
		out.append("(")
		node.emit(out, depth)
		out.append(")")
	else:
		node.emit(out, depth)


def _emit_primary(node: ExprNode, out: list[str], depth: int) -> None:
	"""Emit with parens if not primary precedence."""
	if node.precedence() < 20:
		out.append("(")
		node.emit(out, depth)
		out.append(")")
	else:
		node.emit(out, depth)


def _contains_call(node: ExprNode) -> bool:
	while True:
		if isinstance(node, Call):
			return True
		if isinstance(node, Member | Subscript):
			node = node.obj
		else:
			return False


def _leftmost(node: ExprNode) -> ExprNode:
	"""The expression printed first, for statement-start ambiguity checks."""
	while True:
		match node:
			case Member(obj=inner) | Subscript(obj=inner):
				pass
			case Call(callee=inner):
				pass
			case Binary(left=inner) | Assign(target=inner) | Ternary(cond=inner):
				pass
			case Update(prefix=False, operand=inner):
				pass
			case Comma(exprs=[inner, *_]):
				pass
			case _:
				return node
		if inner.precedence() < node.precedence():
			# Parenthesized on emission
			return node
		node = inner


def _starts_ambiguously(expr: ExprNode) -> bool:
	first = _leftmost(expr)
	if isinstance(first, Object | Function):
		return True
	if isinstance(first, Raw):
		return first.text.startswith(("{", "function", "async function", "class"))
	return False


__all__ = [
	"INDENT",
	"Array",
	"Arrow",
	"Assign",
	"Await",
	"Binary",
	"Block",
	"Call",
	"ClassDecl",
	"ClassMember",
	"Declarator",
	"ExportDecl",
	"ExprNode",
	"ExprStmt",
	"Field",
	"Function",
	"FunctionDecl",
	"Identifier",
	"If",
	"Literal",
	"Member",
	"Method",
	"New",
	"Node",
	"Object",
	"Program",
	"Property",
	"Raw",
	"RawStmt",
	"Return",
	"Comma",
	"Spread",
	"StmtNode",
	"Subscript",
	"Super",
	"Template",
	"Ternary",
	"This",
	"Throw",
	"Unary",
	"Update",
	"VarDecl",
	"emit",
]
