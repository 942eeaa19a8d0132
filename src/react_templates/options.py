from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Literal, TypeAlias, cast, get_args

from react_templates.errors import ConfigurationError

ModuleFormat = Literal["none", "commonjs", "amd", "es6", "typescript", "jsrt"]

MODULE_FORMATS: tuple[str, ...] = get_args(ModuleFormat)
MODULE_ALIASES: dict[str, str] = {"typed": "typescript", "globals": "none"}

# Dialects whose wrapper assigns the template to an explicit identifier
NAMED_FORMATS = frozenset({"none", "amd"})

Version: TypeAlias = tuple[int, ...]

_VERSION_RE = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+][\w.-]*)?\s*$")


def parse_version(value: str) -> Version:
	"""`0.29.0` -> (0, 29, 0). Missing components count as zero."""
	m = _VERSION_RE.match(value)
	if m is None:
		raise ConfigurationError(f"Invalid version '{value}'")
	return tuple(int(g or 0) for g in m.groups())


@dataclass(slots=True, frozen=True)
class PropTemplateSpec:
	"""Child tag lifted into a function-valued prop of its parent component."""

	prop: str
	arguments: tuple[str, ...] = ()

	@staticmethod
	def coerce(value: Any) -> PropTemplateSpec:
		if isinstance(value, PropTemplateSpec):
			return value
		if not isinstance(value, Mapping) or "prop" not in value:
			raise ConfigurationError(
				f"Prop template entries need a 'prop' name, got {value!r}"
			)
		raw = cast(Mapping[str, Any], value)
		args = raw.get("arguments", raw.get("argumentNames", ()))
		if isinstance(args, str):
			args = [a.strip() for a in args.split(",") if a.strip()]
		return PropTemplateSpec(str(raw["prop"]), tuple(str(a) for a in args))


PropTemplateMap: TypeAlias = Mapping[str, Mapping[str, PropTemplateSpec]]


def _freeze_prop_templates(value: Any) -> PropTemplateMap:
	if not value:
		return MappingProxyType({})
	if not isinstance(value, Mapping):
		raise ConfigurationError("propTemplates must be a mapping")
	frozen: dict[str, Mapping[str, PropTemplateSpec]] = {}
	for component, children in cast(Mapping[str, Any], value).items():
		if not isinstance(children, Mapping):
			raise ConfigurationError(
				f"propTemplates['{component}'] must map child tags to prop specs"
			)
		frozen[str(component)] = MappingProxyType(
			{
				str(child): PropTemplateSpec.coerce(spec)
				for child, spec in cast(Mapping[str, Any], children).items()
			}
		)
	return MappingProxyType(frozen)


# camelCase keys accepted from JS-style option objects
_CAMEL_KEYS: dict[str, str] = {
	"targetVersion": "target_version",
	"nativeTargetVersion": "native_target_version",
	"propTemplates": "prop_templates",
	"normalizeHtmlWhitespace": "normalize_html_whitespace",
	"reactImportPath": "react_import_path",
	"lodashImportPath": "lodash_import_path",
}


@dataclass(slots=True, frozen=True)
class CompileOptions:
	"""Immutable configuration for one compile call.

	Attributes:
	    modules: Module dialect wrapping the generated code.
	    name: Identifier for the `none` (global) and `amd` dialects.
	    target_version: React version for web output.
	    native: Generate native-primitive factories.
	    native_target_version: React Native version for native output.
	    autobind: Bind bare `this.method` references to the component.
	    prop_templates: component -> child tag -> PropTemplateSpec.
	    normalize_html_whitespace: Collapse insignificant whitespace in text.
	    comments: Pass top-level template comments through to the module.
	    react_import_path: Override the module React is imported from.
	    lodash_import_path: Module the `_` helper is imported from.
	"""

	modules: ModuleFormat = "commonjs"
	name: str | None = None
	target_version: str = "0.14.0"
	native: bool = False
	native_target_version: str = "0.9.0"
	autobind: bool = False
	prop_templates: PropTemplateMap = field(
		default_factory=lambda: MappingProxyType({})
	)
	normalize_html_whitespace: bool = False
	comments: bool = False
	react_import_path: str | None = None
	lodash_import_path: str = "lodash"

	def __post_init__(self) -> None:
		modules = MODULE_ALIASES.get(self.modules, self.modules)
		if modules not in MODULE_FORMATS:
			raise ConfigurationError(
				f"Unknown module format '{self.modules}', expected one of "
				+ ", ".join(f for f in MODULE_FORMATS if f != "jsrt")
			)
		object.__setattr__(self, "modules", modules)
		object.__setattr__(
			self, "prop_templates", _freeze_prop_templates(self.prop_templates)
		)
		# Fail early on malformed versions
		parse_version(self.target_version)
		parse_version(self.native_target_version)

	@property
	def target(self) -> Version:
		return parse_version(self.target_version)

	@property
	def native_target(self) -> Version:
		return parse_version(self.native_target_version)

	def validate(self) -> None:
		"""Check cross-field requirements that only matter at emit time."""
		if self.modules in NAMED_FORMATS and not self.name:
			raise ConfigurationError(
				f"Module format '{self.modules}' requires a 'name' option"
			)

	def with_(self, **changes: Any) -> CompileOptions:
		return replace(self, **changes)

	@staticmethod
	def from_mapping(values: Mapping[str, Any]) -> CompileOptions:
		"""Build options from a JS-style (camelCase) or snake_case mapping."""
		known = {f.name for f in fields(CompileOptions)}
		kwargs: dict[str, Any] = {}
		for key, value in values.items():
			name = _CAMEL_KEYS.get(key, key)
			if name not in known:
				raise ConfigurationError(f"Unknown option '{key}'")
			if value is None and name not in ("name", "react_import_path"):
				continue
			kwargs[name] = value
		return CompileOptions(**kwargs)

	@staticmethod
	def coerce(value: CompileOptions | Mapping[str, Any] | None) -> CompileOptions:
		if value is None:
			return CompileOptions()
		if isinstance(value, CompileOptions):
			return value
		return CompileOptions.from_mapping(value)
