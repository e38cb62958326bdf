from hene.template.interpolation import (
	Segment,
	find_interpolations,
	has_interpolation,
	split_segments,
)
from hene.template.parser import ElementNode, TextNode, parse_template, protect, restore

# =============================================================================
# Interpolation scanning
# =============================================================================


class TestInterpolation:
	def test_finds_spans_with_nested_braces(self):
		spans = find_interpolations("a ${b} c ${ {x: 1}.x } d")
		assert [s.expression for s in spans] == ["b", " {x: 1}.x "]
		assert spans[0].start == 2 and spans[0].end == 6

	def test_unterminated_is_plain_text(self):
		assert find_interpolations("a ${b") == []
		assert not has_interpolation("cost: $5 {x}")

	def test_split_segments(self):
		assert split_segments("x${a}${b}y") == [
			Segment("x"),
			Segment("a", dynamic=True),
			Segment("b", dynamic=True),
			Segment("y"),
		]

	def test_segment_source(self):
		assert Segment("a()", dynamic=True).source == "${a()}"
		assert Segment("plain").source == "plain"


# =============================================================================
# Template parser
# =============================================================================


class TestTemplateParser:
	def test_protect_and_restore(self):
		protected, originals = protect('<a title="${x > 1}">${"<b>"}</a>')
		assert protected == '<a title="__HENE_EXPR_0__">__HENE_EXPR_1__</a>'
		assert originals == ["${x > 1}", '${"<b>"}']
		assert restore(protected, originals) == '<a title="${x > 1}">${"<b>"}</a>'

	def test_tree(self):
		nodes = parse_template('<div a="${x > 1}">hi<br>there</div><!-- c -->')
		assert nodes == [
			ElementNode(
				"div",
				{"a": "${x > 1}"},
				[TextNode("hi"), ElementNode("br"), TextNode("there")],
			)
		]

	def test_whitespace_only_text_dropped(self):
		nodes = parse_template("\n  <p>\n    a\n  </p>\n")
		assert nodes == [ElementNode("p", {}, [TextNode("\n    a\n  ")])]

	def test_attributes(self):
		[node] = parse_template('<input DISABLED value="1" value="2">')
		assert isinstance(node, ElementNode)
		assert node.attributes == {"disabled": "", "value": "1"}
		assert node.children == []

	def test_self_closing_non_void(self):
		nodes = parse_template("<span/><b>x</b>")
		assert [n.tag for n in nodes if isinstance(n, ElementNode)] == ["span", "b"]

	def test_stray_end_tag_ignored(self):
		assert parse_template("<p>x</span></p>") == [ElementNode("p", {}, [TextNode("x")])]

	def test_end_tag_closes_nearest_open_element(self):
		nodes = parse_template("<div><p>a</div><b></b>")
		assert nodes == [
			ElementNode("div", {}, [ElementNode("p", {}, [TextNode("a")])]),
			ElementNode("b"),
		]

	def test_character_references_decoded(self):
		assert parse_template("<p>&amp; &lt;</p>") == [ElementNode("p", {}, [TextNode("& <")])]

	def test_interpolation_with_markup_kept_verbatim(self):
		[node] = parse_template("<p>${a < b ? '<i>' : ''}</p>")
		assert isinstance(node, ElementNode)
		assert node.children == [TextNode("${a < b ? '<i>' : ''}")]
