"""
Module dialects: the boilerplate wrapped around a compiled render function.

Every dialect renders the same sections in the same order:

	preamble (imports, wrapper opening)
	pass-through comments
	hoisted helper functions
	epilogue (render function, export, wrapper closing)
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import Any, ClassVar, override

from mako.template import Template

from react_templates.errors import ConfigurationError
from react_templates.expressions import is_identifier
from react_templates.nodes import Comment, Literal, emit
from react_templates.options import CompileOptions, ModuleFormat
from react_templates.render_tree import ImportSpec


@dataclass(slots=True)
class ModuleParts:
	"""Everything a dialect needs to assemble the module text."""

	body: str
	imports: list[ImportSpec] = field(default_factory=list)
	functions: list[str] = field(default_factory=list)
	comments: list[str] = field(default_factory=list)
	params: tuple[str, ...] = ()
	name: str | None = None


def _quote(value: str) -> str:
	return emit(Literal(value))


def _member(spec: ImportSpec) -> str:
	"""Property access selecting the imported binding from a module value."""
	if spec.kind == "default":
		return ".default"
	if spec.kind == "named":
		return f".{spec.member}"
	return ""


def _es_import(spec: ImportSpec) -> str:
	source = _quote(spec.source)
	if spec.kind in ("module", "namespace"):
		return f"import * as {spec.local} from {source};"
	if spec.kind == "default":
		return f"import {spec.local} from {source};"
	if spec.member == spec.local:
		return f"import {{ {spec.member} }} from {source};"
	return f"import {{ {spec.member} as {spec.local} }} from {source};"


def _ts_import(spec: ImportSpec) -> str:
	if spec.kind == "module":
		return f"import {spec.local} = require({_quote(spec.source)});"
	return _es_import(spec)


_EMPTY = Template("")


class ModuleDialect(ABC):
	format: ClassVar[ModuleFormat]
	preamble_template: ClassVar[Template] = _EMPTY
	epilogue_template: ClassVar[Template] = _EMPTY

	def context(self, parts: ModuleParts) -> dict[str, Any]:
		return {
			"name": parts.name,
			"imports": parts.imports,
			"params": ", ".join(parts.params),
			"body": parts.body,
			"q": _quote,
			"member": _member,
		}

	def preamble(self, parts: ModuleParts) -> str:
		return self.preamble_template.render_unicode(**self.context(parts)).strip("\n")

	def epilogue(self, parts: ModuleParts) -> str:
		return self.epilogue_template.render_unicode(**self.context(parts)).strip("\n")

	def render(self, parts: ModuleParts) -> str:
		sections = [
			self.preamble(parts),
			*(emit(Comment(c)) for c in parts.comments),
			*parts.functions,
			self.epilogue(parts),
		]
		return "\n".join(s for s in sections if s) + "\n"


class CommonJSDialect(ModuleDialect):
	format = "commonjs"
	preamble_template = Template(
		"""\
"use strict";
% for imp in imports:
var ${imp.local} = require(${q(imp.source)})${member(imp)};
% endfor
"""
	)
	epilogue_template = Template(
		"""\
module.exports = function (${params}) {
return ${body};
};
"""
	)


class AMDDialect(ModuleDialect):
	format = "amd"
	preamble_template = Template(
		"""\
define(${q(name)}, [${", ".join(q(imp.source) for imp in imports)}], function (${", ".join(locals_)}) {
"use strict";
% for imp, local in zip(imports, locals_):
% if local != imp.local:
var ${imp.local} = ${local}${member(imp)};
% endif
% endfor
"""
	)
	epilogue_template = Template(
		"""\
return function (${params}) {
return ${body};
};
});
"""
	)

	@override
	def context(self, parts: ModuleParts) -> dict[str, Any]:
		ctx = super().context(parts)
		# default and named imports arrive as the whole module, renamed below
		ctx["locals_"] = [
			imp.local if imp.kind in ("module", "namespace") else f"${i}"
			for i, imp in enumerate(parts.imports)
		]
		return ctx


class GlobalsDialect(ModuleDialect):
	format = "none"
	preamble_template = Template("var ${name} = function (${params}) {\n")
	epilogue_template = Template(
		"""\
return ${body};
};
"""
	)

	@override
	def render(self, parts: ModuleParts) -> str:
		if parts.name is None or not is_identifier(parts.name):
			raise ConfigurationError(
				f"Module format 'none' needs a valid identifier as 'name', got {parts.name!r}"
			)
		return super().render(parts)


class ES6Dialect(ModuleDialect):
	format = "es6"
	preamble_template = Template(
		"""\
% for imp in imports:
${statement(imp)}
% endfor
"""
	)
	epilogue_template = Template(
		"""\
export default function (${params}) {
return ${body};
}
"""
	)

	@override
	def context(self, parts: ModuleParts) -> dict[str, Any]:
		ctx = super().context(parts)
		ctx["statement"] = _es_import
		return ctx


class TypeScriptDialect(ES6Dialect):
	format = "typescript"
	epilogue_template = Template(
		"""\
var fn = function (${params}) {
return ${body};
};
export = fn;
"""
	)

	@override
	def context(self, parts: ModuleParts) -> dict[str, Any]:
		ctx = super().context(parts)
		ctx["statement"] = _ts_import
		return ctx


class EmbeddedDialect(ModuleDialect):
	"""Self-invoking expression spliced into a host script. Imports are the host's."""

	format = "jsrt"
	preamble_template = Template("(function () {\n")
	epilogue_template = Template(
		"""\
return function (${params}) {
return ${body};
};
})()
"""
	)


DIALECTS: dict[str, type[ModuleDialect]] = {
	cls.format: cls
	for cls in (
		CommonJSDialect,
		AMDDialect,
		GlobalsDialect,
		ES6Dialect,
		TypeScriptDialect,
		EmbeddedDialect,
	)
}


def select_dialect(options: CompileOptions) -> ModuleDialect:
	return DIALECTS[options.modules]()
