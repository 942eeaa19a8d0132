"""
Tests for prop templates: explicit rt-template children and configured
component -> child -> prop mappings.
"""

from typing import Any

import pytest
from react_templates import ResolutionError, compile_template
from react_templates.markup import Element, parse_markup
from react_templates.options import PropTemplateSpec
from react_templates.prop_templates import PropTemplateExtractor


def split_module(source: str, **options: Any) -> tuple[str, str]:
	"""(hoisted functions, render expression) of a commonjs module."""
	code = compile_template(source, options)
	head, epilogue = code.rsplit("module.exports = function ", 1)
	functions = head.split('var _ = require("lodash");\n', 1)[1]
	return functions, epilogue.partition("{\nreturn ")[2].removesuffix(";\n};\n")


LIST_MAPPING = {"List": {"Row": {"prop": "renderRow", "arguments": ["item"]}}}


# =============================================================================
# Extractor
# =============================================================================


class TestExtractor:
	def test_split_separates_triggers(self):
		(root,) = parse_markup("<List><Row><b/></Row><i/></List>")
		assert isinstance(root, Element)
		extractor = PropTemplateExtractor(
			{"List": {"Row": PropTemplateSpec("renderRow", ("item",))}}
		)
		remaining, lifted = extractor.split(root)
		assert [c.tag for c in remaining if isinstance(c, Element)] == ["i"]
		(child,) = lifted
		assert child.spec == PropTemplateSpec("renderRow", ("item",))
		assert isinstance(child.body, Element) and child.body.tag == "b"

	def test_mapping_only_applies_to_configured_parent(self):
		(root,) = parse_markup("<Table><Row/></Table>")
		assert isinstance(root, Element)
		extractor = PropTemplateExtractor({"List": {"Row": PropTemplateSpec("renderRow")}})
		remaining, lifted = extractor.split(root)
		assert lifted == []
		assert len(remaining) == 1


# =============================================================================
# Compiled output
# =============================================================================


class TestMappedTemplates:
	def test_configured_child_lifted(self):
		functions, body = split_module(
			"<List><Row><span>{item}</span></Row></List>", prop_templates=LIST_MAPPING
		)
		assert body == 'React.createElement(List, {"renderRow": renderRow1.bind(this)})'
		assert functions == (
			"function renderRow1(item) {\n"
			'return React.createElement("span", {}, item);\n'
			"}\n"
		)

	def test_argument_names_string(self):
		mapping = {"List": {"Row": {"prop": "renderRow", "argumentNames": "item, index"}}}
		functions, _ = split_module(
			"<List><Row><b>{index}</b></Row></List>", prop_templates=mapping
		)
		assert functions.startswith("function renderRow1(item, index) {\n")

	def test_native_list_view_defaults(self):
		source = (
			'<ListView dataSource="{this.ds}">'
			"<Row><Text>{rowData.name}</Text></Row>"
			"</ListView>"
		)
		functions, body = split_module(source, native=True)
		assert body == (
			'React.createElement(React.ListView, {"dataSource": this.ds, '
			'"renderRow": renderRow1.bind(this)})'
		)
		assert functions == (
			"function renderRow1(rowData, sectionID, rowID, highlightRow) {\n"
			"return React.createElement(React.Text, {}, rowData.name);\n"
			"}\n"
		)

	def test_user_mapping_overrides_native_defaults(self):
		mapping = {"ListView": {"Row": {"prop": "renderItem", "arguments": ["it"]}}}
		functions, _ = split_module(
			"<ListView><Row><Text/></Row></ListView>", native=True, prop_templates=mapping
		)
		assert functions.startswith("function renderItem1(it) {\n")


class TestExplicitTemplates:
	def test_rt_template(self):
		source = (
			"<List>"
			'<rt-template prop="renderItem" arguments="item, i">'
			"<b>{item}</b>"
			"</rt-template>"
			"</List>"
		)
		functions, body = split_module(source)
		assert body == 'React.createElement(List, {"renderItem": renderItem1.bind(this)})'
		assert functions == (
			"function renderItem1(item, i) {\n"
			'return React.createElement("b", {}, item);\n'
			"}\n"
		)

	def test_captures_enclosing_bindings(self):
		source = (
			"<div>"
			'<List rt-repeat="group in groups">'
			'<rt-template prop="renderItem" arguments="item">'
			"<b>{group.name}{item}</b>"
			"</rt-template>"
			"</List>"
			"</div>"
		)
		functions, body = split_module(source)
		assert body == 'React.createElement("div", {}, _.map(groups, repeatGroup1.bind(this)))'
		assert functions == (
			"function renderItem2(group, groupIndex, item) {\n"
			'return React.createElement("b", {}, "" + group.name + item);\n'
			"}\n"
			"function repeatGroup1(group, groupIndex) {\n"
			'return React.createElement(List, {"renderItem": renderItem2.bind(this, group, groupIndex)});\n'
			"}\n"
		)

	def test_whitespace_and_comments_around_body_ignored(self):
		source = '<List>\n<rt-template prop="r">\n  <!-- c -->\n  <b/>\n</rt-template>\n</List>'
		functions, _ = split_module(source)
		assert functions == 'function r1() {\nreturn React.createElement("b", {});\n}\n'


class TestTemplateErrors:
	def test_body_must_have_single_root(self):
		with pytest.raises(ResolutionError, match="exactly one root, found 2"):
			compile_template('<List><rt-template prop="r"><b/><i/></rt-template></List>')

	def test_empty_body(self):
		with pytest.raises(ResolutionError, match="exactly one root, found 0"):
			compile_template('<List><rt-template prop="r"></rt-template></List>')

	def test_two_templates_for_one_prop(self):
		source = (
			"<List>"
			'<rt-template prop="r"><b/></rt-template>'
			'<rt-template prop="r"><i/></rt-template>'
			"</List>"
		)
		with pytest.raises(ResolutionError, match="more than one template for prop 'r'"):
			compile_template(source)

	def test_prop_also_set_as_attribute(self):
		source = '<List r="{x}"><rt-template prop="r"><b/></rt-template></List>'
		with pytest.raises(ResolutionError, match="set both as an attribute and as a template"):
			compile_template(source)

	def test_missing_prop_name(self):
		with pytest.raises(ResolutionError, match="requires a 'prop' attribute"):
			compile_template("<List><rt-template><b/></rt-template></List>")

	def test_template_as_root(self):
		with pytest.raises(ResolutionError, match="direct child"):
			compile_template('<rt-template prop="r"><b/></rt-template>')
