"""Reserved `rt-*` names and the table that dispatches them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from react_templates.errors import Diagnostics, ResolutionError
from react_templates.expressions import RepeatClause, parse_repeat, parse_scope, unwrap_braces
from react_templates.markup import Attribute, Element

DIRECTIVE_PREFIX = "rt-"


class Directive(Enum):
	CONDITIONAL = "conditional"
	ITERATION = "iteration"
	SCOPE = "scope"
	REQUIRE = "require"
	IMPORT = "import"
	PROP_TRIGGER = "prop-trigger"
	VIRTUAL = "virtual"
	CLASS = "class"
	PROPS = "props"
	PRE = "pre"
	STATELESS = "stateless"


# Tags with directive meaning
TAG_DIRECTIVES: dict[str, Directive] = {
	"rt-require": Directive.REQUIRE,
	"rt-import": Directive.IMPORT,
	"rt-template": Directive.PROP_TRIGGER,
	"rt-virtual": Directive.VIRTUAL,
}


@dataclass(slots=True)
class ElementDirectives:
	"""Directive attributes of one element, parsed, plus its plain attributes."""

	conditional: str | None = None
	iteration: RepeatClause | None = None
	scope: list[tuple[str, str]] | None = None
	class_map: str | None = None
	props: str | None = None
	pre: bool = False
	stateless: bool = False
	attributes: list[Attribute] = field(default_factory=list)
	seen: dict[Directive, Attribute] = field(default_factory=dict)


def _require_value(attr: Attribute) -> str:
	if attr.value is None or not attr.value.strip():
		raise ResolutionError(f"{attr.name} requires a value", attr.position)
	return attr.value


def _on_if(d: ElementDirectives, attr: Attribute) -> None:
	d.conditional = unwrap_braces(_require_value(attr))


def _on_repeat(d: ElementDirectives, attr: Attribute) -> None:
	d.iteration = parse_repeat(_require_value(attr), attr.position)


def _on_scope(d: ElementDirectives, attr: Attribute) -> None:
	d.scope = parse_scope(_require_value(attr), attr.position)


def _on_class(d: ElementDirectives, attr: Attribute) -> None:
	d.class_map = _require_value(attr).strip()


def _on_props(d: ElementDirectives, attr: Attribute) -> None:
	d.props = unwrap_braces(_require_value(attr))


def _on_pre(d: ElementDirectives, attr: Attribute) -> None:
	d.pre = True


def _on_stateless(d: ElementDirectives, attr: Attribute) -> None:
	d.stateless = True


ATTRIBUTE_DIRECTIVES: dict[
	str, tuple[Directive, Callable[[ElementDirectives, Attribute], None]]
] = {
	"rt-if": (Directive.CONDITIONAL, _on_if),
	"rt-repeat": (Directive.ITERATION, _on_repeat),
	"rt-scope": (Directive.SCOPE, _on_scope),
	"rt-class": (Directive.CLASS, _on_class),
	"rt-props": (Directive.PROPS, _on_props),
	"rt-pre": (Directive.PRE, _on_pre),
	"rt-stateless": (Directive.STATELESS, _on_stateless),
}


def collect_directives(element: Element, diagnostics: Diagnostics) -> ElementDirectives:
	"""Split an element's attributes into parsed directives and plain attributes.

	Unknown `rt-*` attributes are reported and kept as plain attributes.
	"""
	result = ElementDirectives()
	for attr in element.attrs:
		entry = ATTRIBUTE_DIRECTIVES.get(attr.name)
		if entry is None:
			if attr.name.startswith(DIRECTIVE_PREFIX):
				diagnostics.warn(
					"unknown-directive",
					f"Unknown directive '{attr.name}' on <{element.tag}>, passed through as an attribute",
					attr.position,
				)
			result.attributes.append(attr)
			continue
		kind, handler = entry
		if kind in result.seen:
			raise ResolutionError(
				f"Duplicate '{attr.name}' on <{element.tag}>", attr.position
			)
		result.seen[kind] = attr
		handler(result, attr)
	return result
