"""
Tests for RT markup parsing (react_templates.markup).

This module covers:
- Elements, attributes and text
- Void and self-closing elements, raw text elements
- Comments
- Error reporting with positions
- Whitespace normalization
"""

import pytest
from react_templates.errors import ParseError, Position
from react_templates.markup import (
	Comment,
	Element,
	Text,
	normalize_whitespace,
	parse_markup,
)

# =============================================================================
# Structure
# =============================================================================


class TestElements:
	"""Test element and attribute parsing."""

	def test_single_element(self):
		(node,) = parse_markup("<div></div>")
		assert isinstance(node, Element)
		assert node.tag == "div"
		assert node.attrs == []
		assert node.children == []

	def test_self_closing(self):
		(node,) = parse_markup("<MyComp />")
		assert isinstance(node, Element)
		assert node.tag == "MyComp"
		assert node.children == []

	def test_attribute_forms(self):
		(node,) = parse_markup('<div a="1" b=\'2\' c={x + 1} d=plain e></div>')
		assert isinstance(node, Element)
		assert [(a.name, a.value) for a in node.attrs] == [
			("a", "1"),
			("b", "2"),
			("c", "{x + 1}"),
			("d", "plain"),
			("e", None),
		]

	def test_attribute_case_preserved(self):
		(node,) = parse_markup('<button onClick="{this.go}"/>')
		assert isinstance(node, Element)
		assert node.get("onClick") == "{this.go}"
		assert node.has("onClick")
		assert not node.has("onclick")

	def test_braced_value_may_contain_quotes_and_braces(self):
		(node,) = parse_markup("<div style={{color: '}'}}/>")
		assert isinstance(node, Element)
		assert node.get("style") == "{{color: '}'}}"

	def test_nested_children(self):
		(node,) = parse_markup("<ul><li>a</li><li>b</li></ul>")
		assert isinstance(node, Element)
		assert [c.tag for c in node.children if isinstance(c, Element)] == ["li", "li"]
		first = node.children[0]
		assert isinstance(first, Element)
		assert first.children == [Text("a", Position(1, 9), 8)]

	def test_void_elements_need_no_closing_tag(self):
		(node,) = parse_markup("<div><br><input type=text></div>")
		assert isinstance(node, Element)
		assert [c.tag for c in node.children if isinstance(c, Element)] == ["br", "input"]

	def test_stray_void_closing_tag_ignored(self):
		(node,) = parse_markup("<div><input></input></div>")
		assert isinstance(node, Element)
		assert len(node.children) == 1

	def test_positions(self):
		(node,) = parse_markup("<div>\n  <span/>\n</div>")
		assert isinstance(node, Element)
		assert node.position == Position(1, 1)
		span = node.children[1]
		assert isinstance(span, Element)
		assert span.position == Position(2, 3)


class TestText:
	"""Test text and interpolation scanning."""

	def test_interpolation_kept_in_text(self):
		(node,) = parse_markup("<p>Hello {name}!</p>")
		assert isinstance(node, Element)
		(text,) = node.children
		assert isinstance(text, Text)
		assert text.value == "Hello {name}!"

	def test_angle_bracket_inside_expression(self):
		(node,) = parse_markup("<p>{a < b ? '<b>' : ''}</p>")
		assert isinstance(node, Element)
		(text,) = node.children
		assert isinstance(text, Text)
		assert text.value == "{a < b ? '<b>' : ''}"

	def test_raw_text_elements(self):
		(node,) = parse_markup("<style>.a > .b { color: red }</style>")
		assert isinstance(node, Element)
		(text,) = node.children
		assert isinstance(text, Text)
		assert text.value == ".a > .b { color: red }"

	def test_comments_preserved(self):
		nodes = parse_markup("<!-- top --><div><!--inner--></div>")
		assert isinstance(nodes[0], Comment)
		assert nodes[0].value == " top "
		div = nodes[1]
		assert isinstance(div, Element)
		assert div.children == [Comment("inner", Position(1, 18))]


# =============================================================================
# Errors
# =============================================================================


class TestParseErrors:
	"""Test structured parse failures."""

	def test_unterminated_tag(self):
		with pytest.raises(ParseError, match="Unterminated tag <div>") as info:
			parse_markup("<div>")
		assert info.value.position == Position(1, 1)

	def test_unterminated_open_tag(self):
		with pytest.raises(ParseError, match="Unterminated tag <div>"):
			parse_markup('<div class="a"')

	def test_mismatched_closing_tag(self):
		with pytest.raises(ParseError, match="expected </div>, found </span>") as info:
			parse_markup("\n<div></span>")
		assert info.value.position == Position(2, 6)

	def test_unexpected_closing_tag(self):
		with pytest.raises(ParseError, match="Unexpected closing tag </p>"):
			parse_markup("<div></div></p>")

	def test_unterminated_expression_in_text(self):
		with pytest.raises(ParseError, match="Unterminated expression"):
			parse_markup("<div>{a</div>")

	def test_unterminated_attribute_expression(self):
		with pytest.raises(ParseError, match="Malformed expression in attribute 'x'"):
			parse_markup("<div x={a></div>")

	def test_unterminated_comment(self):
		with pytest.raises(ParseError, match="Unterminated comment"):
			parse_markup("<div><!-- oops</div>")

	def test_empty_expression(self):
		with pytest.raises(ParseError, match="Empty expression"):
			parse_markup('<div title="a{}b"></div>')


# =============================================================================
# Whitespace
# =============================================================================


class TestNormalizeWhitespace:
	"""Test HTML whitespace collapsing."""

	def test_collapses_runs(self):
		nodes = normalize_whitespace(parse_markup("<p>  a \n\t b  </p>"))
		p = nodes[0]
		assert isinstance(p, Element)
		(text,) = p.children
		assert isinstance(text, Text)
		assert text.value == " a b "

	def test_drops_blank_lines(self):
		nodes = normalize_whitespace(parse_markup("<div>\n  <span/>\n</div>"))
		div = nodes[0]
		assert isinstance(div, Element)
		assert len(div.children) == 1

	def test_expressions_untouched(self):
		nodes = normalize_whitespace(parse_markup("<p>a  {'x  y'}</p>"))
		p = nodes[0]
		assert isinstance(p, Element)
		(text,) = p.children
		assert isinstance(text, Text)
		assert text.value == "a {'x  y'}"

	def test_preserved_elements(self):
		nodes = normalize_whitespace(
			parse_markup("<div><pre>  a  b  </pre><span rt-pre>  c  </span></div>")
		)
		div = nodes[0]
		assert isinstance(div, Element)
		pre, span = div.children
		assert isinstance(pre, Element) and isinstance(span, Element)
		assert pre.children[0] == Text("  a  b  ", Position(1, 11), 10)
		assert isinstance(span.children[0], Text)
		assert span.children[0].value == "  c  "
