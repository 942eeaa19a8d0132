"""
Prop-template extraction.

A child is lifted out of its parent's children and compiled into a separate
function when it is either an explicit `<rt-template prop="..." arguments="...">`
or a tag configured for the parent in the prop-template mapping, e.g.
`{"List": {"Row": PropTemplateSpec("renderRow", ("rowData",))}}`.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass

from react_templates.directives import TAG_DIRECTIVES, Directive
from react_templates.errors import ParseError, ResolutionError
from react_templates.expressions import is_identifier, parse_name_list
from react_templates.markup import Comment, Element, TemplateNode, Text
from react_templates.options import PropTemplateMap, PropTemplateSpec

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiftedChild:
	spec: PropTemplateSpec
	trigger: Element
	body: TemplateNode


class PropTemplateExtractor:
	mapping: PropTemplateMap

	def __init__(self, mapping: PropTemplateMap) -> None:
		self.mapping = mapping

	def spec_for(self, parent: Element, child: Element) -> PropTemplateSpec | None:
		if TAG_DIRECTIVES.get(child.tag) is Directive.PROP_TRIGGER:
			return self._explicit_spec(child)
		children = self.mapping.get(parent.tag)
		if children is None:
			return None
		return children.get(child.tag)

	def split(
		self, parent: Element, taken_props: Collection[str] = ()
	) -> tuple[list[TemplateNode], list[LiftedChild]]:
		"""Separate template children from regular children of `parent`."""
		remaining: list[TemplateNode] = []
		lifted: list[LiftedChild] = []
		by_prop: dict[str, Element] = {}
		for child in parent.children:
			if not isinstance(child, Element):
				remaining.append(child)
				continue
			spec = self.spec_for(parent, child)
			if spec is None:
				remaining.append(child)
				continue
			if spec.prop in by_prop:
				raise ResolutionError(
					f"<{parent.tag}> has more than one template for prop '{spec.prop}'",
					child.position,
				)
			if spec.prop in taken_props:
				raise ResolutionError(
					f"Prop '{spec.prop}' of <{parent.tag}> is set both as an attribute and as a template",
					child.position,
				)
			by_prop[spec.prop] = child
			lifted.append(LiftedChild(spec, child, self._body(child)))
			logger.debug(
				"Lifted <%s> into prop '%s' of <%s>", child.tag, spec.prop, parent.tag
			)
		return remaining, lifted

	def _explicit_spec(self, trigger: Element) -> PropTemplateSpec:
		prop = trigger.get("prop")
		if not prop or not is_identifier(prop.strip()):
			raise ResolutionError(
				"rt-template requires a 'prop' attribute naming the target prop",
				trigger.position,
			)
		try:
			arguments = parse_name_list(trigger.get("arguments") or "")
		except ParseError as exc:
			raise ParseError(exc.message, trigger.position) from None
		return PropTemplateSpec(prop.strip(), arguments)

	def _body(self, trigger: Element) -> TemplateNode:
		content = [
			c
			for c in trigger.children
			if not isinstance(c, Comment) and not (isinstance(c, Text) and not c.value.strip())
		]
		if len(content) != 1:
			raise ResolutionError(
				f"<{trigger.tag}> template must have exactly one root, found {len(content)}",
				trigger.position,
			)
		return content[0]
