"""
Tests for templates embedded in host scripts (react_templates.embedded).
"""

import pytest
from react_templates import (
	CompileContext,
	CompileOptions,
	ParseError,
	Position,
	ResolutionError,
	compile_embedded,
)

COMPILED_DIV = (
	"(function () {\n"
	"return function () {\n"
	'return React.createElement("div", {});\n'
	"};\n"
	"})()"
)


class TestCompileEmbedded:
	def test_region_spliced_in_place(self):
		source = "var t = <template><div/></template>;\nmodule.exports = t;\n"
		assert compile_embedded(source) == f"var t = {COMPILED_DIV};\nmodule.exports = t;\n"

	def test_multiple_regions(self):
		source = "a(<template><div/></template>, <template><div/></template>);"
		assert compile_embedded(source) == f"a({COMPILED_DIV}, {COMPILED_DIV});"

	def test_host_text_without_templates_untouched(self):
		source = "var x = 1; // <div/>\n"
		assert compile_embedded(source) == source

	def test_hoisted_functions_stay_inside_expression(self):
		source = 'var t = <template><ul><li rt-repeat="x in xs">{x}</li></ul></template>;'
		assert compile_embedded(source) == (
			"var t = (function () {\n"
			"function repeatX1(x, xIndex) {\n"
			'return React.createElement("li", {}, x);\n'
			"}\n"
			"return function () {\n"
			'return React.createElement("ul", {}, _.map(xs, repeatX1.bind(this)));\n'
			"};\n"
			"})();"
		)

	def test_context_options_apply(self):
		context = CompileContext(CompileOptions(native=True, modules="amd", name="ignored"))
		result = compile_embedded("<template><View/></template>", context)
		assert "React.createElement(React.View, {})" in result
		assert "define(" not in result

	def test_context_not_mutated(self):
		context = CompileContext(CompileOptions(modules="es6"))
		compile_embedded("<template><div/></template>", context)
		assert context.options.modules == "es6"


class TestEmbeddedErrors:
	def test_error_position_relative_to_host(self):
		source = "var a = 1;\nvar t = <template><div></template>;"
		with pytest.raises(ParseError, match="Unterminated tag <div>") as info:
			compile_embedded(source, filename="view.jsrt")
		assert info.value.position == Position(2, 19)
		assert str(info.value).startswith("view.jsrt:2:19: ")

	def test_runtime_interpolation_rejected(self):
		with pytest.raises(ParseError, match="cannot contain"):
			compile_embedded("x = <template><div>${a}</div></template>")

	def test_unterminated_region(self):
		with pytest.raises(ParseError, match="Unterminated embedded template"):
			compile_embedded("x = <template><div/>")

	def test_imports_not_supported(self):
		source = '<template><rt-require dependency="a" as="A"/><div/></template>'
		with pytest.raises(ResolutionError, match="not supported in embedded templates"):
			compile_embedded(source)

	def test_failure_in_later_region_raises(self):
		source = "a = <template><div/></template>; b = <template><p></template>;"
		with pytest.raises(ParseError):
			compile_embedded(source)
