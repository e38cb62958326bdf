"""tree-sitter backed JavaScript parser producing `hene.js.nodes` trees.

Only the statement and expression kinds the compiler inspects get a typed
node; everything else (loops, try, imports, JSX, ...) is carried through as
verbatim source text.
"""

from __future__ import annotations

import logging
import re
from functools import cache

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Parser
from tree_sitter import Node as TSNode

from hene.errors import Location
from hene.js.nodes import (
	Array,
	Arrow,
	Assign,
	Await,
	Binary,
	Block,
	Call,
	ClassDecl,
	ClassMember,
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
	Object,
	Program,
	Property,
	Raw,
	RawStmt,
	Return,
	Spread,
	StmtNode,
	Subscript,
	Super,
	Template,
	Ternary,
	This,
	Throw,
	Unary,
	Update,
	VarDecl,
)

logger = logging.getLogger(__name__)

_COMMENTS = {"comment", "html_comment"}
_FUNCTION_EXPRESSIONS = {"function_expression", "function", "generator_function"}
_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}


class JSSyntaxError(SyntaxError):
	"""Malformed JavaScript. `line` is 1-based, `column` 0-based."""

	def __init__(self, message: str, line: int, column: int) -> None:
		super().__init__(message)
		self.line = line
		self.column = column
		self.lineno = line
		self.offset = column + 1

	@property
	def location(self) -> Location:
		return Location(self.line, self.column)


@cache
def _language() -> Language:
	return Language(tsjs.language())


def _parse_tree(src: bytes) -> TSNode:
	return Parser(_language()).parse(src).root_node


def parse_module(text: str) -> Program:
	"""Parse a whole module."""
	src = text.encode("utf-8")
	root = _parse_tree(src)
	converter = _Converter(src)
	converter.check(root)
	return converter.program(root)


def parse_expression(text: str) -> ExprNode:
	"""Parse exactly one standalone expression."""
	src = f"({text}\n)".encode()
	root = _parse_tree(src)
	converter = _Converter(src)
	try:
		converter.check(root)
	except JSSyntaxError as exc:
		column = exc.column - 1 if exc.line == 1 else exc.column
		raise JSSyntaxError(str(exc.msg), exc.line, max(column, 0)) from None
	statements = converter.named(root)
	if len(statements) == 1 and statements[0].type == "expression_statement":
		inner = converter.named(statements[0])
		if (
			len(inner) == 1
			and inner[0].type == "parenthesized_expression"
			and inner[0].start_byte == 0
			and inner[0].end_byte == len(src)
		):
			return converter.expression(inner[0])
	raise JSSyntaxError("Expected a single expression", 1, 0)


class _Converter:
	"""Converts one tree-sitter tree into hene nodes."""

	src: bytes

	def __init__(self, src: bytes) -> None:
		self.src = src

	# -------------------------------------------------------------------------
	# Helpers
	# -------------------------------------------------------------------------

	def text(self, node: TSNode) -> str:
		return self.src[node.start_byte : node.end_byte].decode("utf-8")

	def loc(self, node: TSNode) -> Location:
		row, column = node.start_point
		line_start = node.start_byte - column
		prefix = self.src[line_start : node.start_byte].decode("utf-8", "replace")
		return Location(row + 1, len(prefix))

	def named(self, node: TSNode) -> list[TSNode]:
		return [c for c in node.named_children if c.type not in _COMMENTS]

	def field(self, node: TSNode, name: str) -> TSNode:
		child = node.child_by_field_name(name)
		if child is None:
			raise JSSyntaxError(f"Missing {name} in {node.type}", *self.loc(node))
		return child

	def check(self, root: TSNode) -> None:
		"""Raise JSSyntaxError for the first error or missing node."""
		if not root.has_error:
			return
		bad = _first_error(root)
		if bad is None:
			raise JSSyntaxError("Invalid syntax", *self.loc(root))
		if bad.is_missing:
			message = f'Missing "{bad.type}"'
		else:
			snippet = self.text(bad).strip().splitlines()
			token = snippet[0][:20] if snippet else ""
			message = f'Unexpected token "{token}"' if token else "Unexpected end of input"
		raise JSSyntaxError(message, *self.loc(bad))

	# -------------------------------------------------------------------------
	# Statements
	# -------------------------------------------------------------------------

	def program(self, root: TSNode) -> Program:
		program = Program(self.statements(root))
		program.loc = self.loc(root)
		return program

	def statements(self, node: TSNode) -> list[StmtNode]:
		out: list[StmtNode] = []
		for child in self.named(node):
			if child.type == "empty_statement":
				continue
			out.append(self.statement(child))
		return out

	def statement(self, node: TSNode) -> StmtNode:
		stmt: StmtNode
		match node.type:
			case "expression_statement":
				stmt = ExprStmt(self.expression(self.named(node)[0]))
			case "lexical_declaration" | "variable_declaration":
				kind = node.children[0].type
				if kind not in ("var", "let", "const"):
					return RawStmt(self.text(node), loc=self.loc(node))
				declarations = [
					self.declarator(d) for d in self.named(node) if d.type == "variable_declarator"
				]
				stmt = VarDecl(kind, declarations)
			case "return_statement":
				values = self.named(node)
				stmt = Return(self.expression(values[0]) if values else None)
			case "throw_statement":
				stmt = Throw(self.expression(self.named(node)[0]))
			case "statement_block":
				stmt = Block(self.statements(node))
			case "if_statement":
				alternative = node.child_by_field_name("alternative")
				else_ = None
				if alternative is not None:
					else_ = self.statement(self.named(alternative)[0])
				stmt = If(
					self.expression(self.field(node, "condition")),
					self.statement(self.field(node, "consequence")),
					else_,
				)
			case t if t in _FUNCTION_DECLARATIONS:
				stmt = FunctionDecl(self.function(node))
			case "class_declaration":
				stmt = self.class_decl(node)
			case "export_statement":
				declaration = node.child_by_field_name("declaration")
				if declaration is None:
					stmt = RawStmt(self.text(node))
				else:
					default = any(c.type == "default" for c in node.children)
					stmt = ExportDecl(self.statement(declaration), default)
			case _:
				stmt = RawStmt(self.text(node))
		stmt.loc = self.loc(node)
		return stmt

	def declarator(self, node: TSNode) -> Declarator:
		value = node.child_by_field_name("value")
		decl = Declarator(
			self.expression(self.field(node, "name")),
			self.expression(value) if value is not None else None,
		)
		decl.loc = self.loc(node)
		return decl

	def class_decl(self, node: TSNode) -> ClassDecl:
		superclass: ExprNode | None = None
		for child in node.named_children:
			if child.type == "class_heritage":
				heritage = self.named(child)
				if heritage:
					superclass = self.expression(heritage[0])
		body = self.field(node, "body")
		members = [self.member(m) for m in self.named(body)]
		return ClassDecl(self.text(self.field(node, "name")), superclass, members)

	def member(self, node: TSNode) -> ClassMember:
		member: ClassMember
		match node.type:
			case "method_definition":
				member = self.method(node)
			case "field_definition" | "public_field_definition":
				key_node = node.child_by_field_name("property")
				if key_node is None:
					key_node = self.field(node, "name")
				key, computed = self.property_key(key_node)
				value = node.child_by_field_name("value")
				member = Field(
					key,
					self.expression(value) if value is not None else None,
					static=any(c.type == "static" for c in node.children),
					computed=computed,
				)
			case _:
				member = RawStmt(self.text(node))
		member.loc = self.loc(node)
		return member

	def method(self, node: TSNode) -> Method:
		name = self.field(node, "name")
		static = is_async = generator = False
		kind = "method"
		for child in node.children:
			if child.start_byte >= name.start_byte:
				break
			match child.type:
				case "static":
					static = True
				case "async":
					is_async = True
				case "get" | "set":
					kind = child.type
				case "*":
					generator = True
		key, computed = self.property_key(name)
		if not static and not computed and key == Identifier("constructor"):
			kind = "constructor"
		return Method(
			key,
			self.params(self.field(node, "parameters")),
			self.statements(self.field(node, "body")),
			kind=kind,
			static=static,
			is_async=is_async,
			generator=generator,
			computed=computed,
		)

	def property_key(self, node: TSNode) -> tuple[ExprNode, bool]:
		if node.type == "computed_property_name":
			return self.expression(self.named(node)[0]), True
		key = self.expression(node)
		return key, False

	def params(self, node: TSNode) -> list[str]:
		return [self.text(p) for p in self.named(node)]

	# -------------------------------------------------------------------------
	# Expressions
	# -------------------------------------------------------------------------

	def expression(self, node: TSNode) -> ExprNode:
		expr: ExprNode
		match node.type:
			case "parenthesized_expression":
				inner = self.named(node)
				if len(inner) != 1:
					return Raw(self.text(node), loc=self.loc(node))
				return self.expression(inner[0])
			case (
				"identifier"
				| "undefined"
				| "property_identifier"
				| "private_property_identifier"
				| "shorthand_property_identifier"
				| "shorthand_property_identifier_pattern"
			):
				expr = Identifier(self.text(node))
			case "this":
				expr = This()
			case "super":
				expr = Super()
			case "true" | "false":
				expr = Literal(node.type == "true", self.text(node))
			case "null":
				expr = Literal(None, "null")
			case "number":
				raw = self.text(node)
				expr = Literal(_number_value(raw), raw)
			case "string":
				raw = self.text(node)
				expr = Literal(_string_value(raw), raw)
			case "template_string":
				expr = self.template(node)
			case "member_expression":
				expr = Member(
					self.expression(self.field(node, "object")),
					self.text(self.field(node, "property")),
					optional=_is_optional(node),
				)
			case "subscript_expression":
				expr = Subscript(
					self.expression(self.field(node, "object")),
					self.expression(self.field(node, "index")),
					optional=_is_optional(node),
				)
			case "call_expression":
				arguments = self.field(node, "arguments")
				if arguments.type == "template_string":
					# Tagged template
					return Raw(self.text(node), loc=self.loc(node))
				expr = Call(
					self.expression(self.field(node, "function")),
					self.arguments(arguments),
					optional=_is_optional(node),
				)
			case "new_expression":
				arguments = node.child_by_field_name("arguments")
				expr = New(
					self.expression(self.field(node, "constructor")),
					self.arguments(arguments) if arguments is not None else [],
				)
			case "assignment_expression":
				expr = Assign(
					self.expression(self.field(node, "left")),
					self.expression(self.field(node, "right")),
				)
			case "augmented_assignment_expression":
				expr = Assign(
					self.expression(self.field(node, "left")),
					self.expression(self.field(node, "right")),
					self.text(self.field(node, "operator")),
				)
			case "binary_expression":
				expr = Binary(
					self.expression(self.field(node, "left")),
					self.text(self.field(node, "operator")),
					self.expression(self.field(node, "right")),
				)
			case "unary_expression":
				expr = Unary(
					self.text(self.field(node, "operator")),
					self.expression(self.field(node, "argument")),
				)
			case "update_expression":
				operator = self.text(self.field(node, "operator"))
				expr = Update(
					"++" if operator == "++" else "--",
					self.expression(self.field(node, "argument")),
					prefix=node.children[0].type in ("++", "--"),
				)
			case "ternary_expression":
				expr = Ternary(
					self.expression(self.field(node, "condition")),
					self.expression(self.field(node, "consequence")),
					self.expression(self.field(node, "alternative")),
				)
			case "sequence_expression":
				exprs: list[ExprNode] = []
				for child in self.named(node):
					part = self.expression(child)
					if isinstance(part, Comma):
						exprs.extend(part.exprs)
					else:
						exprs.append(part)
				expr = Comma(exprs)
			case "await_expression":
				expr = Await(self.expression(self.named(node)[0]))
			case "spread_element":
				expr = Spread(self.expression(self.named(node)[0]))
			case "arrow_function":
				expr = self.arrow(node)
			case t if t in _FUNCTION_EXPRESSIONS:
				expr = self.function(node)
			case "object":
				expr = Object([self.object_entry(c) for c in self.named(node)])
			case "array":
				expr = self.array(node)
			case "yield_expression":
				expr = Raw(self.text(node), prec=2)
			case _:
				expr = Raw(self.text(node))
		expr.loc = self.loc(node)
		return expr

	def arguments(self, node: TSNode) -> list[ExprNode]:
		return [self.expression(a) for a in self.named(node)]

	def template(self, node: TSNode) -> Template:
		quasis: list[str] = []
		expressions: list[ExprNode] = []
		cursor = node.start_byte + 1
		for child in node.named_children:
			if child.type != "template_substitution":
				continue
			quasis.append(self.src[cursor : child.start_byte].decode("utf-8"))
			expressions.append(self.expression(self.named(child)[0]))
			cursor = child.end_byte
		quasis.append(self.src[cursor : node.end_byte - 1].decode("utf-8"))
		return Template(quasis, expressions, self.text(node))

	def object_entry(self, node: TSNode) -> ExprNode:
		entry: ExprNode
		match node.type:
			case "pair":
				key, computed = self.property_key(self.field(node, "key"))
				entry = Property(key, self.expression(self.field(node, "value")), computed)
			case "shorthand_property_identifier":
				name = Identifier(self.text(node))
				entry = Property(name, name, shorthand=True)
			case "spread_element":
				entry = Spread(self.expression(self.named(node)[0]))
			case _:
				entry = Raw(self.text(node))
		entry.loc = self.loc(node)
		return entry

	def array(self, node: TSNode) -> Array:
		elements: list[ExprNode | None] = []
		expecting = True
		for child in node.children:
			if child.type in ("[", "]") or child.type in _COMMENTS:
				continue
			if child.type == ",":
				if expecting:
					elements.append(None)
				expecting = True
				continue
			elements.append(self.expression(child))
			expecting = False
		return Array(elements)

	def arrow(self, node: TSNode) -> Arrow:
		param = node.child_by_field_name("parameter")
		if param is not None:
			params = [self.text(param)]
		else:
			params = self.params(self.field(node, "parameters"))
		body_node = self.field(node, "body")
		body: ExprNode | list[StmtNode]
		if body_node.type == "statement_block":
			body = self.statements(body_node)
		else:
			body = self.expression(body_node)
		is_async = any(c.type == "async" for c in node.children)
		return Arrow(params, body, is_async=is_async)

	def function(self, node: TSNode) -> Function:
		name = node.child_by_field_name("name")
		return Function(
			self.params(self.field(node, "parameters")),
			self.statements(self.field(node, "body")),
			name=self.text(name) if name is not None else None,
			is_async=any(c.type == "async" for c in node.children),
			generator=any(c.type == "*" for c in node.children),
		)


def _first_error(node: TSNode) -> TSNode | None:
	"""Pre-order search for the first ERROR or MISSING node."""
	if node.type == "ERROR" or node.is_missing:
		return node
	for child in node.children:
		if child.has_error or child.is_missing or child.type == "ERROR":
			found = _first_error(child)
			if found is not None:
				return found
	return None


def _is_optional(node: TSNode) -> bool:
	return any(c.type in ("optional_chain", "?.") for c in node.children)


_ESCAPE = re.compile(
	r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[0-7]{1,3}|.)",
	re.DOTALL,
)
_SIMPLE_ESCAPES = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"v": "\v",
	"0": "\0",
}


def _unescape(match: re.Match[str]) -> str:
	seq = match.group(1)
	if seq in _SIMPLE_ESCAPES:
		return _SIMPLE_ESCAPES[seq]
	if seq in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
		# Line continuation
		return ""
	if seq.startswith("u{"):
		return chr(int(seq[2:-1], 16))
	if seq[0] in "ux" and len(seq) > 1:
		return chr(int(seq[1:], 16))
	if seq.isdigit():
		return chr(int(seq, 8))
	return seq


def _string_value(raw: str) -> str:
	return _ESCAPE.sub(_unescape, raw[1:-1])


def _number_value(raw: str) -> int | float:
	text = raw.replace("_", "").removesuffix("n")
	try:
		if text[:2].lower() in ("0x", "0o", "0b"):
			return int(text, 0)
		return int(text)
	except ValueError:
		pass
	try:
		return float(text)
	except ValueError:
		logger.debug("Unrecognized numeric literal %r", raw)
		return 0


__all__ = ["JSSyntaxError", "parse_expression", "parse_module"]
