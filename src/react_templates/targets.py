"""
Target-mode strategies: how tags turn into element factory calls.

Each strategy is picked once per compile from (mode, version range) and
answers three questions: which bindings the module needs, how a tag is
referenced, and what the construction call looks like.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeVar, override

from react_templates.errors import Diagnostics, Position
from react_templates.nodes import Call, Expr, Identifier, Literal, Member
from react_templates.options import CompileOptions, PropTemplateMap, PropTemplateSpec, Version
from react_templates.render_tree import ImportSpec, TagRef

logger = logging.getLogger(__name__)

_P = TypeVar("_P", "WebProfile", "NativeProfile")

REACT = "React"
REACT_NATIVE = "ReactNative"
LODASH = "_"

# =============================================================================
# Tag tables
# =============================================================================

_HTML_0_12 = """
a abbr address area article aside audio b base bdi bdo big blockquote body br
button canvas caption cite code col colgroup data datalist dd del details dfn
div dl dt em embed fieldset figcaption figure footer form h1 h2 h3 h4 h5 h6
head header hr html i iframe img input ins kbd keygen label legend li link
main map mark menu menuitem meta meter nav noscript object ol optgroup option
output p param pre progress q rp rt ruby s samp script section select small
source span strong style sub summary sup table tbody td textarea tfoot th
thead time title tr track u ul var video wbr
circle defs ellipse g line linearGradient mask path pattern polygon polyline
radialGradient rect stop svg text tspan
"""
_HTML_0_13 = "dialog image"
_HTML_0_14 = "picture clipPath"
_HTML_15 = """
animate animateMotion animateTransform desc feBlend feColorMatrix
feComponentTransfer feComposite feConvolveMatrix feDiffuseLighting
feDisplacementMap feDistantLight feFlood feGaussianBlur feImage feMerge
feMergeNode feMorphology feOffset fePointLight feSpecularLighting feSpotLight
feTile feTurbulence filter foreignObject marker metadata mpath switch symbol
textPath use view
"""

DOM_TAGS_0_12 = frozenset(_HTML_0_12.split())
DOM_TAGS_0_13 = DOM_TAGS_0_12 | frozenset(_HTML_0_13.split())
DOM_TAGS_0_14 = DOM_TAGS_0_13 | frozenset(_HTML_0_14.split())
DOM_TAGS_15 = DOM_TAGS_0_14 | frozenset(_HTML_15.split())

NATIVE_PRIMITIVES = frozenset(
	"""
ActivityIndicator ActivityIndicatorIOS DatePickerIOS DrawerLayoutAndroid Image
ListView MapView Modal Navigator NavigatorIOS Picker PickerIOS
ProgressBarAndroid ProgressViewIOS RefreshControl ScrollView
SegmentedControlIOS Slider SliderIOS SnapshotViewIOS StatusBar Switch
SwitchIOS TabBarIOS TabBarIOS.Item Text TextInput ToolbarAndroid
TouchableHighlight TouchableNativeFeedback TouchableOpacity
TouchableWithoutFeedback View ViewPagerAndroid WebView
""".split()
)

NATIVE_PROP_TEMPLATES: PropTemplateMap = MappingProxyType(
	{
		"ListView": MappingProxyType(
			{
				"Row": PropTemplateSpec(
					"renderRow", ("rowData", "sectionID", "rowID", "highlightRow")
				),
				"Footer": PropTemplateSpec("renderFooter"),
				"Header": PropTemplateSpec("renderHeader"),
				"ScrollComponent": PropTemplateSpec("renderScrollComponent", ("props",)),
				"SectionHeader": PropTemplateSpec(
					"renderSectionHeader", ("sectionData", "sectionID")
				),
				"Separator": PropTemplateSpec(
					"renderSeparator", ("sectionID", "rowID", "adjacentRowHighlighted")
				),
			}
		)
	}
)

WEB_ATTRIBUTE_RENAMES = MappingProxyType({"class": "className", "for": "htmlFor"})


# =============================================================================
# Version ranges
# =============================================================================


@dataclass(slots=True, frozen=True)
class VersionRange:
	"""Half-open range [low, high)."""

	low: Version
	high: Version | None = None

	def __contains__(self, version: Version) -> bool:
		if version < self.low:
			return False
		return self.high is None or version < self.high


@dataclass(slots=True, frozen=True)
class WebProfile:
	versions: VersionRange
	react_module: str
	dom_tags: frozenset[str]
	# React.DOM.tag(props, ...) instead of React.createElement("tag", ...)
	dom_factories: bool = False


@dataclass(slots=True, frozen=True)
class NativeProfile:
	versions: VersionRange
	react_module: str
	# Binding the primitives hang off (React.View vs ReactNative.View)
	primitives_binding: str
	primitives_module: str | None = None


WEB_PROFILES: tuple[WebProfile, ...] = (
	WebProfile(VersionRange((0, 0, 0), (0, 13, 0)), "react/addons", DOM_TAGS_0_12, True),
	WebProfile(VersionRange((0, 13, 0), (0, 14, 0)), "react/addons", DOM_TAGS_0_13),
	WebProfile(VersionRange((0, 14, 0), (15, 0, 0)), "react", DOM_TAGS_0_14),
	WebProfile(VersionRange((15, 0, 0)), "react", DOM_TAGS_15),
)

NATIVE_PROFILES: tuple[NativeProfile, ...] = (
	NativeProfile(VersionRange((0, 0, 0), (0, 29, 0)), "react-native", REACT),
	NativeProfile(
		VersionRange((0, 29, 0)), "react", REACT_NATIVE, primitives_module="react-native"
	),
)


def _select(profiles: Sequence[_P], version: Version) -> _P:
	for profile in profiles:
		if version in profile.versions:
			return profile
	return profiles[0]


# =============================================================================
# Strategies
# =============================================================================


class TargetMode(ABC):
	"""Element construction strategy for one (mode, version range)."""

	options: CompileOptions

	def __init__(self, options: CompileOptions) -> None:
		self.options = options

	@property
	@abstractmethod
	def react_module(self) -> str: ...

	def dependencies(self) -> list[ImportSpec]:
		"""Bindings every generated module starts with."""
		react = self.options.react_import_path or self.react_module
		return [
			ImportSpec(REACT, react),
			ImportSpec(LODASH, self.options.lodash_import_path),
		]

	def prop_templates(self) -> PropTemplateMap:
		return self.options.prop_templates

	@abstractmethod
	def resolve_tag(
		self, tag: str, position: Position | None, diagnostics: Diagnostics
	) -> TagRef: ...

	def rename_attribute(self, name: str) -> str:
		return name

	def factory_call(self, ref: TagRef, props: Expr, children: Sequence[Expr]) -> Expr:
		"""React.createElement(tag, props, ...children)"""
		create = Member(Identifier(REACT), "createElement")
		return Call(create, [ref.expr, props, *children])


def _is_component_name(tag: str) -> bool:
	return "." in tag or tag[:1].isupper()


class WebTarget(TargetMode):
	profile: WebProfile

	def __init__(self, options: CompileOptions) -> None:
		super().__init__(options)
		self.profile = _select(WEB_PROFILES, options.target)
		logger.debug(
			"Web target %s -> react module '%s'",
			options.target_version,
			self.profile.react_module,
		)

	@property
	@override
	def react_module(self) -> str:
		return self.profile.react_module

	@override
	def resolve_tag(
		self, tag: str, position: Position | None, diagnostics: Diagnostics
	) -> TagRef:
		if _is_component_name(tag):
			return TagRef(Identifier(tag), name=tag)
		known = tag in self.profile.dom_tags
		if not known and "-" not in tag:
			diagnostics.warn(
				"unknown-tag",
				f"<{tag}> is not a known DOM tag for React {self.options.target_version}",
				position,
			)
		return TagRef(
			Literal(tag), dom_factory=known and self.profile.dom_factories, name=tag
		)

	@override
	def rename_attribute(self, name: str) -> str:
		return WEB_ATTRIBUTE_RENAMES.get(name, name)

	@override
	def factory_call(self, ref: TagRef, props: Expr, children: Sequence[Expr]) -> Expr:
		if ref.dom_factory:
			dom = Member(Member(Identifier(REACT), "DOM"), ref.name)
			return Call(dom, [props, *children])
		return super().factory_call(ref, props, children)


class NativeTarget(TargetMode):
	profile: NativeProfile

	def __init__(self, options: CompileOptions) -> None:
		super().__init__(options)
		self.profile = _select(NATIVE_PROFILES, options.native_target)
		logger.debug(
			"Native target %s -> primitives on '%s'",
			options.native_target_version,
			self.profile.primitives_binding,
		)

	@property
	@override
	def react_module(self) -> str:
		return self.profile.react_module

	@override
	def dependencies(self) -> list[ImportSpec]:
		deps = super().dependencies()
		if self.profile.primitives_module is not None:
			deps.insert(
				1, ImportSpec(self.profile.primitives_binding, self.profile.primitives_module)
			)
		return deps

	@override
	def prop_templates(self) -> PropTemplateMap:
		merged: dict[str, dict[str, PropTemplateSpec]] = {
			comp: dict(children) for comp, children in NATIVE_PROP_TEMPLATES.items()
		}
		for comp, children in self.options.prop_templates.items():
			merged.setdefault(comp, {}).update(children)
		return MappingProxyType(
			{comp: MappingProxyType(children) for comp, children in merged.items()}
		)

	@override
	def resolve_tag(
		self, tag: str, position: Position | None, diagnostics: Diagnostics
	) -> TagRef:
		if tag in NATIVE_PRIMITIVES:
			return TagRef(Identifier(f"{self.profile.primitives_binding}.{tag}"), name=tag)
		if _is_component_name(tag):
			return TagRef(Identifier(tag), name=tag)
		diagnostics.warn(
			"unknown-tag", f"<{tag}> is not a native primitive or component", position
		)
		return TagRef(Literal(tag), name=tag)


def select_target(options: CompileOptions) -> TargetMode:
	if options.native:
		return NativeTarget(options)
	return WebTarget(options)
