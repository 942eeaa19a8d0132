"""
Tests for web / native target modes and their version thresholds.
"""

from typing import Any

import pytest
from react_templates import ConfigurationError, compile_output, compile_template
from react_templates.errors import Diagnostics
from react_templates.options import CompileOptions
from react_templates.targets import NativeTarget, WebTarget, select_target


def render_expr(source: str, **options: Any) -> str:
	code = compile_template(source, options)
	epilogue = code.rsplit("module.exports = function ", 1)[1]
	return epilogue.partition("{\nreturn ")[2].removesuffix(";\n};\n")


def preamble(source: str, **options: Any) -> list[str]:
	code = compile_template(source, options)
	return [line for line in code.splitlines() if line.startswith("var ")]


# =============================================================================
# Web
# =============================================================================


class TestWebVersions:
	def test_dom_factories_below_0_13(self):
		assert render_expr("<div><span/><Foo/></div>", target_version="0.12.2") == (
			'React.DOM.div({}, React.DOM.span({}), React.createElement(Foo, {}))'
		)
		assert preamble("<div/>", target_version="0.12.2")[0] == (
			'var React = require("react/addons");'
		)

	def test_create_element_with_addons_at_0_13(self):
		assert render_expr("<div/>", target_version="0.13.1") == 'React.createElement("div", {})'
		assert preamble("<div/>", target_version="0.13.1")[0] == (
			'var React = require("react/addons");'
		)

	def test_react_module_from_0_14(self):
		assert preamble("<div/>", target_version="0.14.0") == [
			'var React = require("react");',
			'var _ = require("lodash");',
		]

	def test_svg_tags_widened_at_15(self):
		old = compile_output("<svg><symbol/></svg>", {"target_version": "0.14.0"})
		new = compile_output("<svg><symbol/></svg>", {"target_version": "15.0.0"})
		assert [d.code for d in old.diagnostics] == ["unknown-tag"]
		assert new.diagnostics == ()

	def test_unknown_tag_warning(self):
		result = compile_output("<div><blink/></div>")
		assert [d.code for d in result.diagnostics] == ["unknown-tag"]
		assert 'React.createElement("blink", {})' in result.code

	def test_custom_elements_not_reported(self):
		assert compile_output("<div><x-foo/></div>").diagnostics == ()

	def test_dotted_tag_is_component(self):
		assert render_expr("<div><UI.Button/></div>") == (
			'React.createElement("div", {}, React.createElement(UI.Button, {}))'
		)

	def test_import_path_overrides(self):
		assert preamble(
			"<div/>", react_import_path="preact-compat", lodash_import_path="lodash-es"
		) == [
			'var React = require("preact-compat");',
			'var _ = require("lodash-es");',
		]


# =============================================================================
# Native
# =============================================================================


class TestNativeVersions:
	def test_primitives_on_react_below_0_29(self):
		source = "<View><Text>hi</Text></View>"
		assert render_expr(source, native=True) == (
			'React.createElement(React.View, {}, React.createElement(React.Text, {}, "hi"))'
		)
		assert preamble(source, native=True) == [
			'var React = require("react-native");',
			'var _ = require("lodash");',
		]

	def test_primitives_on_react_native_from_0_29(self):
		options = {"native": True, "native_target_version": "0.29.0"}
		assert render_expr("<View/>", **options) == "React.createElement(ReactNative.View, {})"
		assert preamble("<View/>", **options) == [
			'var React = require("react");',
			'var ReactNative = require("react-native");',
			'var _ = require("lodash");',
		]

	def test_dotted_primitive(self):
		assert render_expr("<View><TabBarIOS.Item/></View>", native=True) == (
			"React.createElement(React.View, {}, React.createElement(React.TabBarIOS.Item, {}))"
		)

	def test_no_web_attribute_renames(self):
		assert render_expr('<View class="a"/>', native=True) == (
			'React.createElement(React.View, {"class": "a"})'
		)

	def test_lowercase_tag_reported(self):
		result = compile_output("<View><div/></View>", {"native": True})
		assert [d.code for d in result.diagnostics] == ["unknown-tag"]


# =============================================================================
# Strategy selection
# =============================================================================


class TestSelectTarget:
	def test_web_by_default(self):
		target = select_target(CompileOptions())
		assert isinstance(target, WebTarget)
		assert target.react_module == "react"

	def test_native(self):
		target = select_target(CompileOptions(native=True, native_target_version="0.30"))
		assert isinstance(target, NativeTarget)
		assert [d.local for d in target.dependencies()] == ["React", "ReactNative", "_"]

	def test_resolve_tag(self):
		target = select_target(CompileOptions(target_version="0.12.0"))
		diagnostics = Diagnostics()
		ref = target.resolve_tag("div", None, diagnostics)
		assert ref.dom_factory
		assert not target.resolve_tag("Foo", None, diagnostics).dom_factory
		assert len(diagnostics) == 0

	def test_invalid_version(self):
		with pytest.raises(ConfigurationError, match="Invalid version 'latest'"):
			compile_template("<div/>", {"target_version": "latest"})
