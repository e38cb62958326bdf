import pytest
from hene import CompileFailed, CompileOptions, compile_strict
from hene.js.nodes import emit
from hene.js.parser import parse_expression
from hene.transformer.events import capture_flag


def compile_component(members: str) -> str:
	source = f"class A extends HeneElement {{\n{members}\n  $render = `<p></p>`;\n}}\n"
	return compile_strict(source, CompileOptions(reporter=lambda _: None))


def error_code(members: str) -> str:
	with pytest.raises(CompileFailed) as info:
		compile_component(members)
	return info.value.error.code


# =============================================================================
# Capture flag
# =============================================================================


@pytest.mark.parametrize(
	("options", "expected"),
	[
		("true", "true"),
		("false", "false"),
		("useCapture", "useCapture"),
		("{ capture: true, passive: true }", "true"),
		("{ 'capture': flag }", "flag"),
		("{ passive: true }", "false"),
		("{ capture: opts.capture }", "false"),
		("opts", "opts"),
		("getOptions()", "false"),
	],
)
def test_capture_flag(options: str, expected: str):
	assert emit(capture_flag(parse_expression(options))) == expected


def test_capture_flag_defaults_to_false():
	assert emit(capture_flag(None)) == "false"


# =============================================================================
# Listener rewriting
# =============================================================================


class TestListeners:
	def test_inline_arrow_is_hoisted(self):
		output = compile_component(
			"  connectedCallback() {\n    this.$event('click', () => this.go(), true);\n  }"
		)
		assert "    this._e0 = () => this.go();\n" in output
		assert "    this.addEventListener('click', this._e0, true);\n" in output
		assert "    this.removeEventListener('click', this._e0, true);\n" in output

	def test_function_expression_is_hoisted(self):
		output = compile_component(
			"  connectedCallback() {\n    document.$event('keyup', function (e) { log(e); });\n  }"
		)
		assert "    this._e0 = function(e) {\n      log(e);\n    };\n" in output
		assert "    document.addEventListener('keyup', this._e0, false);\n" in output

	def test_bound_method_is_hoisted(self):
		output = compile_component(
			"  connectedCallback() {\n    this.$event('click', this.go.bind(this));\n  }\n  go() {}"
		)
		assert "    this._e0 = this.go.bind(this);\n" in output

	def test_same_class_method_is_wrapped(self):
		output = compile_component(
			"  connectedCallback() {\n    this.$event('click', this.go);\n  }\n  go() {}"
		)
		assert "    this._e0 = e => this.go(e);\n" in output
		assert "    this.addEventListener('click', this._e0, false);\n" in output

	def test_other_members_are_left_alone(self):
		output = compile_component(
			"  handler = () => {};\n  connectedCallback() {\n    this.$event('click', this.handler);\n  }"
		)
		assert "_e0" not in output
		assert "    this.addEventListener('click', this.handler, false);\n" in output
		assert "    this.removeEventListener('click', this.handler, false);\n" in output

	def test_unstable_listener_warns(self, caplog: pytest.LogCaptureFixture):
		output = compile_component("  connectedCallback() {\n    this.$event('click', handler);\n  }")
		assert "    this.addEventListener('click', handler, false);\n" in output
		assert "may not receive the same reference" in caplog.text

	def test_removals_in_declaration_order_before_author_code(self):
		output = compile_component(
			"  connectedCallback() {\n"
			"    a.$event('x', f);\n"
			"    b.$event('y', g);\n"
			"  }\n"
			"  disconnectedCallback() {\n"
			"    cleanup();\n"
			"  }"
		)
		assert (
			"  disconnectedCallback() {\n"
			"    a.removeEventListener('x', f, false);\n"
			"    b.removeEventListener('y', g, false);\n"
			"    cleanup();\n"
			"  }\n"
		) in output


# =============================================================================
# Misuse
# =============================================================================


class TestMisuse:
	def test_outside_connected_callback(self):
		assert error_code("  go() {\n    this.$event('x', f);\n  }") == "ERR_EVENT_OUTSIDE_CONNECT"
		assert error_code("  h = this.$event('x', f);") == "ERR_EVENT_OUTSIDE_CONNECT"
		assert (
			error_code("  constructor() {\n    super();\n    this.$event('x', f);\n  }")
			== "ERR_EVENT_OUTSIDE_CONNECT"
		)

	def test_nested_function_inside_connected_callback(self):
		code = "  connectedCallback() {\n    setTimeout(() => this.$event('x', f));\n  }"
		assert error_code(code) == "ERR_EVENT_OUTSIDE_CONNECT"

	def test_argument_count(self):
		assert error_code("  connectedCallback() {\n    this.$event('x');\n  }") == "ERR_EVENT_ARGUMENTS"
		code = "  connectedCallback() {\n    this.$event('x', f, true, 1);\n  }"
		assert error_code(code) == "ERR_EVENT_ARGUMENTS"
