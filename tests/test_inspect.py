from hene.js.inspect import (
	find_calls,
	find_method_calls,
	find_this_member,
	free_identifiers,
	is_call_to,
	is_method_call,
	make_member,
	member_name,
	member_parts,
	member_path,
	state_refs,
	string_value,
	walk,
)
from hene.js.nodes import Identifier, Literal, RawStmt, emit
from hene.js.parser import parse_expression, parse_module

# =============================================================================
# Member paths
# =============================================================================


def test_member_parts_of_plain_chains():
	assert member_parts(parse_expression("this.data.a")) == ["this", "data", "a"]
	assert member_parts(parse_expression("store.count")) == ["store", "count"]
	assert member_path(parse_expression("this.x")) == "this.x"


def test_member_parts_rejects_computed_and_calls():
	assert member_parts(parse_expression("this[key].a")) is None
	assert member_parts(parse_expression("this.get().a")) is None


def test_make_member_is_inverse_of_member_parts():
	node = make_member(["this", "data", "a"])
	assert emit(node) == "this.data.a"
	assert member_parts(node) == ["this", "data", "a"]


def test_member_name():
	assert member_name(Identifier("foo")) == "foo"
	assert member_name(Literal("$render", "'$render'")) == "$render"
	assert member_name(Identifier("foo"), computed=True) is None
	assert member_name(Literal(1)) is None


# =============================================================================
# Calls
# =============================================================================


def test_call_predicates():
	assert is_call_to(parse_expression("$state(0)"), "$state")
	assert not is_call_to(parse_expression("this.$state(0)"), "$state")
	assert is_method_call(parse_expression("el.$event('x', f)"), "$event")
	assert not is_method_call(parse_expression("$event('x', f)"), "$event")


def test_find_calls_scans_verbatim_statements():
	program = parse_module("for (;;) { $node('x'); }\nconst y = $node('y');\n")
	found = list(find_calls(program, "$node"))
	assert len(found) == 2
	assert isinstance(found[0], RawStmt)


def test_find_calls_ignores_member_calls():
	program = parse_module("obj.$node('x');")
	assert list(find_calls(program, "$node")) == []


def test_find_method_calls():
	program = parse_module("a.$event('x', f);\nwhile (c) { b.$event('y', g); }\n")
	assert len(list(find_method_calls(program, "$event"))) == 2


def test_find_this_member():
	program = parse_module("f(this.$render);\nthis.$renderer();\n")
	assert len(list(find_this_member(program, "$render"))) == 1


# =============================================================================
# Expressions
# =============================================================================


def test_walk_is_pre_order():
	kinds = [type(n).__name__ for n in walk(parse_expression("a + f(b)"))]
	assert kinds == ["Binary", "Identifier", "Call", "Identifier", "Identifier"]


def test_free_identifiers_skip_property_names():
	assert free_identifiers(parse_expression("a + this.b(c) + d.e")) == {"a", "c", "d"}


def test_state_refs_unique_in_first_seen_order():
	known = {
		"this.a": make_member(["this", "a"]),
		"this.data.b": make_member(["this", "data", "b"]),
	}
	expr = parse_expression("this.data.b() + this.a() + this.data.b() + this.c()")
	assert [emit(r) for r in state_refs(expr, known)] == ["this.data.b", "this.a"]


def test_state_refs_nested_object_and_direct_paths_match():
	known = {"this.data.b": make_member(["this", "data", "b"])}
	direct = state_refs(parse_expression("this.data.b()"), known)
	assert len(direct) == 1


def test_string_value():
	assert string_value(parse_expression("'x'")) == "x"
	assert string_value(parse_expression('"y"')) == "y"
	assert string_value(parse_expression("`z`")) is None
	assert string_value(parse_expression("1")) is None
	assert string_value(Literal("generated")) == "generated"
