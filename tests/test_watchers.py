from hene.context import WatcherDescriptor
from hene.js.inspect import make_member
from hene.js.nodes import emit
from hene.transformer.watchers import build_watchers, group_watchers, update_expression

A = make_member(["this", "a"])
B = make_member(["this", "data", "b"])


def test_grouped_by_state_in_first_seen_order():
	groups = group_watchers(
		[
			WatcherDescriptor(A, "x", "${this.a()}"),
			WatcherDescriptor(B, "y", "${this.data.b()}"),
			WatcherDescriptor(make_member(["this", "a"]), "z", "${this.a()}", "title"),
		]
	)
	assert [emit(g.state_ref) for g in groups] == ["this.a", "this.data.b"]
	assert [d.target for d in groups[0].updates] == ["x", "z"]


def test_update_expressions():
	text = WatcherDescriptor(A, "x", "${this.a() * 2}")
	assert emit(update_expression(text)) == "x.textContent = this.a() * 2"
	attribute = WatcherDescriptor(A, "y", "p-${this.a()}", "title")
	assert emit(update_expression(attribute)) == 'y.setAttribute("title", `p-${this.a()}`)'


def test_single_update_is_expression_body():
	statements, slots = build_watchers([WatcherDescriptor(A, "x", "${this.a()}")])
	assert slots == ["_w0"]
	assert [emit(s) for s in statements] == [
		"this._w0 = this.a.watch(() => x.textContent = this.a(), false);"
	]


def test_several_updates_are_a_block():
	statements, slots = build_watchers(
		[
			WatcherDescriptor(A, "x", "${this.a()}"),
			WatcherDescriptor(B, "y", "${this.data.b()}"),
			WatcherDescriptor(A, "z", "${this.a()}", "title"),
		]
	)
	assert slots == ["_w0", "_w1"]
	assert emit(statements[0]) == (
		"this._w0 = this.a.watch(() => {\n"
		"  x.textContent = this.a();\n"
		'  z.setAttribute("title", `${this.a()}`);\n'
		"}, false);"
	)
	assert emit(statements[1]) == (
		"this._w1 = this.data.b.watch(() => y.textContent = this.data.b(), false);"
	)
