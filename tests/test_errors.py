import pytest
from hene.errors import (
	CompileError,
	Diagnostic,
	Location,
	code_frame,
	compile_error,
	load_messages,
	report_error,
)
from hene.js.nodes import Identifier


def test_catalog_covers_every_code():
	messages = load_messages()
	for code in (
		"ERR_JS_SYNTAX",
		"ERR_NODE_NOT_FOUND",
		"ERR_RENDER_MISSING",
		"ERR_EVENT_ARGUMENTS",
	):
		assert messages[code]["message"]


def test_compile_error_uses_node_location():
	node = Identifier("x")
	node.loc = Location(3, 4)
	error = compile_error("ERR_RENDER_EMPTY", node, detail="(x)")
	assert error.location == (3, 4)
	assert error.message.endswith(" (x)")
	assert str(error) == f"[ERR_RENDER_EMPTY] {error.message} (3:4)"


def test_explicit_location_wins():
	node = Identifier("x")
	node.loc = Location(3, 4)
	error = compile_error("ERR_RENDER_EMPTY", node, location=Location(1, 0))
	assert error.location == (1, 0)


def test_unknown_code_falls_back_to_code():
	error = compile_error("ERR_NOPE")  # type: ignore[arg-type]
	assert error.message == "ERR_NOPE"
	assert error.hint is None
	assert str(error) == "[ERR_NOPE] ERR_NOPE"


class TestCodeFrame:
	def test_marks_line_and_column(self):
		frame = code_frame("a\nbcd\nef", Location(2, 1))
		assert frame.splitlines() == [
			"     1 | a",
			">    2 | bcd",
			"       |  ^",
			"     3 | ef",
		]

	def test_first_line_has_no_leading_context(self):
		frame = code_frame("one\ntwo\nthree", Location(1, 0))
		assert frame.splitlines()[0] == ">    1 | one"
		assert len(frame.splitlines()) == 3

	def test_tabs_are_expanded(self):
		frame = code_frame("\tx", Location(1, 1))
		assert frame.splitlines() == [">    1 |     x", "       |     ^"]

	def test_out_of_range_line_is_clamped(self):
		frame = code_frame("only", Location(9, 0))
		assert frame.splitlines()[0] == ">    1 | only"

	def test_empty_source(self):
		assert code_frame("", Location(1, 0)) == ""


class TestReport:
	@pytest.fixture
	def error(self) -> CompileError:
		return CompileError("ERR_RENDER_EMPTY", "empty", "add markup", Location(1, 2))

	def test_reporter_receives_diagnostic(self, error: CompileError, capsys):
		seen: list[Diagnostic] = []
		diagnostic = report_error(error, "abcdef", reporter=seen.append, filename="a.js")
		assert seen == [diagnostic]
		assert diagnostic.id == "ERR_RENDER_EMPTY"
		assert diagnostic.hint == "add markup"
		assert diagnostic.frame == ">    1 | abcdef\n       |   ^"
		assert diagnostic.headline() == "a.js:1:2 [ERR_RENDER_EMPTY] empty"
		assert capsys.readouterr().err == ""

	def test_without_reporter_prints_to_stderr(self, error: CompileError, capsys):
		report_error(error, "abcdef")
		err = capsys.readouterr().err
		assert "<source>:1:2 [ERR_RENDER_EMPTY] empty" in err
		assert "hint: add markup" in err

	def test_error_without_location(self):
		seen: list[Diagnostic] = []
		report_error(CompileError("ERR_RENDER_MISSING", "missing"), "x", reporter=seen.append)
		assert seen[0].loc is None
		assert seen[0].frame is None
		assert seen[0].headline() == "<source> [ERR_RENDER_MISSING] missing"
