"""
Directive resolution: parsed markup -> render tree.

Wrapper order for one element, outermost first:

	Iteration (rt-repeat) > ScopeBinding (rt-scope) > Conditional (rt-if) > element

so rt-scope expressions and rt-if conditions can both use the loop item.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from react_templates.directives import (
	TAG_DIRECTIVES,
	Directive,
	ElementDirectives,
	collect_directives,
)
from react_templates.errors import Diagnostics, ParseError, ResolutionError
from react_templates.expressions import (
	Interpolation,
	Segment,
	decode_entities,
	is_identifier,
	is_method_reference,
	parse_arrow,
	parse_style,
	split_interpolations,
)
from react_templates.markup import (
	RAW_TEXT_ELEMENTS,
	Attribute,
	Comment,
	Element,
	TemplateNode,
	Text,
	is_insignificant,
)
from react_templates.nodes import (
	Call,
	Expr,
	Function,
	Identifier,
	Literal,
	Member,
	Object,
	Raw,
	RawStmt,
	Return,
	StmtNode,
	bind,
	concat,
)
from react_templates.options import CompileOptions
from react_templates.prop_templates import LiftedChild, PropTemplateExtractor
from react_templates.render_tree import (
	Conditional,
	ImportSpec,
	ImportTable,
	Iteration,
	PropTemplate,
	PropTemplateRef,
	PropValue,
	RenderNode,
	ResolvedTemplate,
	ScopeBinding,
	TagNode,
	TextNode,
	VirtualNode,
)
from react_templates.scope import Binding, ScopeStack
from react_templates.targets import LODASH, TargetMode

logger = logging.getLogger(__name__)

_EVENT_RE = re.compile(r"^on[A-Z]")


class Resolver:
	"""Resolves one template. Not reusable across compiles."""

	source: str
	options: CompileOptions
	target: TargetMode
	diagnostics: Diagnostics
	scope: ScopeStack
	imports: ImportTable
	prop_templates: list[PropTemplate]
	extractor: PropTemplateExtractor

	def __init__(
		self,
		source: str,
		options: CompileOptions,
		target: TargetMode,
		diagnostics: Diagnostics,
	) -> None:
		self.source = source
		self.options = options
		self.target = target
		self.diagnostics = diagnostics
		self.scope = ScopeStack()
		self.imports = ImportTable()
		for dep in target.dependencies():
			self.imports.add(dep)
		self.prop_templates = []
		self.extractor = PropTemplateExtractor(target.prop_templates())

	def resolve(self, nodes: Sequence[TemplateNode]) -> ResolvedTemplate:
		comments: list[str] = []
		roots: list[Element] = []
		for node in nodes:
			if isinstance(node, Comment):
				if self.options.comments:
					comments.append(node.value)
			elif isinstance(node, Text):
				if node.value.strip():
					raise ParseError(
						f"Text '{node.value.strip()[:20]}' outside of the root element",
						node.position,
					)
			elif TAG_DIRECTIVES.get(node.tag) in (Directive.REQUIRE, Directive.IMPORT):
				self._hoist_import(node)
			else:
				roots.append(node)

		if len(roots) != 1:
			position = roots[1].position if len(roots) > 1 else None
			raise ResolutionError(
				f"Template must have exactly one root element, found {len(roots)}",
				position,
			)
		root = roots[0]
		if root.tag == "rt-virtual":
			raise ResolutionError("rt-virtual may not be the root element", root.position)
		if root.has("rt-repeat"):
			raise ResolutionError(
				"The root element may not have rt-repeat", root.position
			)

		stateless = root.has("rt-stateless")
		if stateless:
			self.scope = ScopeStack(
				[Binding("props", "render"), Binding("context", "render")]
			)
		body = self._resolve_element(root, is_root=True)
		assert body is not None
		return ResolvedTemplate(
			root=body,
			imports=self.imports,
			prop_templates=self.prop_templates,
			stateless=stateless,
			comments=comments,
		)

	# --- Imports -----------------------------------------------------------

	def _hoist_import(self, element: Element) -> None:
		if self.options.modules == "jsrt":
			raise ResolutionError(
				f"<{element.tag}> is not supported in embedded templates", element.position
			)
		if element.tag == "rt-require":
			spec = self._require_spec(element)
		else:
			spec = self._import_spec(element)
		if not is_identifier(spec.local):
			raise ResolutionError(
				f"'{spec.local}' is not a valid local name for {spec.describe()}",
				element.position,
			)
		self.imports.add(spec)
		if self.options.modules == "none":
			self.diagnostics.warn(
				"unsupported-import",
				f"Module format 'none' cannot import {spec.describe()}, "
				+ f"'{spec.local}' is assumed to be a global",
				element.position,
			)
		logger.debug("Hoisted import %s as '%s'", spec.describe(), spec.local)

	def _require_spec(self, element: Element) -> ImportSpec:
		dependency = element.get("dependency")
		local = element.get("as")
		if not dependency or not local:
			raise ResolutionError(
				"rt-require needs both 'dependency' and 'as' attributes", element.position
			)
		return ImportSpec(local.strip(), dependency.strip(), position=element.position)

	def _import_spec(self, element: Element) -> ImportSpec:
		name = (element.get("name") or "").strip()
		source = (element.get("from") or "").strip()
		local = (element.get("as") or "").strip()
		if not name or not source:
			raise ResolutionError(
				"rt-import needs both 'name' and 'from' attributes", element.position
			)
		if name == "*":
			if not local:
				raise ResolutionError("rt-import of '*' needs an 'as' attribute", element.position)
			return ImportSpec(local, source, "namespace", position=element.position)
		if name == "default":
			if not local:
				raise ResolutionError(
					"rt-import of 'default' needs an 'as' attribute", element.position
				)
			return ImportSpec(local, source, "default", position=element.position)
		if not is_identifier(name):
			raise ResolutionError(f"Cannot import '{name}' from '{source}'", element.position)
		return ImportSpec(local or name, source, "named", name, position=element.position)

	# --- Scope -------------------------------------------------------------

	@contextmanager
	def _frame(self, bindings: list[Binding]) -> Iterator[None]:
		with self.scope.frame(bindings) as shadowed:
			for outer in shadowed:
				self.diagnostics.warn(
					"shadowed-binding",
					f"'{outer.name}' shadows an outer {outer.source} binding",
					next((b.position for b in bindings if b.name == outer.name), None),
				)
			yield

	def _captured(self, own: Sequence[str] = ()) -> tuple[str, ...]:
		return tuple(name for name in self.scope.visible() if name not in own)

	# --- Elements ----------------------------------------------------------

	def _resolve_element(
		self, element: Element, *, is_root: bool = False, pre: bool = False
	) -> RenderNode | None:
		kind = TAG_DIRECTIVES.get(element.tag)
		if kind in (Directive.REQUIRE, Directive.IMPORT):
			self._hoist_import(element)
			return None
		if kind is Directive.PROP_TRIGGER:
			raise ResolutionError(
				"rt-template must be a direct child of the element receiving the prop",
				element.position,
			)

		directives = collect_directives(element, self.diagnostics)
		if directives.stateless and not is_root:
			self.diagnostics.warn(
				"unknown-directive",
				f"rt-stateless only applies to the root element, ignored on <{element.tag}>",
				directives.seen[Directive.STATELESS].position,
			)

		repeat = directives.iteration
		if repeat is None:
			return self._resolve_scoped(element, directives, pre)
		captured = self._captured((repeat.item, repeat.index))
		position = directives.seen[Directive.ITERATION].position
		bindings = [
			Binding(repeat.item, "item", position),
			Binding(repeat.index, "index", position),
		]
		with self._frame(bindings):
			body = self._resolve_scoped(element, directives, pre)
		return Iteration(
			repeat.collection, repeat.item, repeat.index, body, captured, element.position
		)

	def _resolve_scoped(
		self, element: Element, directives: ElementDirectives, pre: bool
	) -> RenderNode:
		if directives.scope is None:
			return self._resolve_conditional(element, directives, pre)
		captured = self._captured()
		position = directives.seen[Directive.SCOPE].position
		with self._frame([Binding(name, "scope", position) for name, _ in directives.scope]):
			body = self._resolve_conditional(element, directives, pre)
		return ScopeBinding(directives.scope, body, captured, element.position)

	def _resolve_conditional(
		self, element: Element, directives: ElementDirectives, pre: bool
	) -> RenderNode:
		node = self._build(element, directives, pre)
		if directives.conditional is None:
			return node
		return Conditional(directives.conditional, node, element.position)

	def _build(
		self, element: Element, directives: ElementDirectives, pre: bool
	) -> RenderNode:
		pre = pre or directives.pre or element.tag.lower() in RAW_TEXT_ELEMENTS
		if element.tag == "rt-virtual":
			if directives.attributes:
				self.diagnostics.warn(
					"unknown-directive",
					"Attributes on rt-virtual are ignored",
					directives.attributes[0].position,
				)
			return VirtualNode(self._resolve_children(element.children, pre))

		ref = self.target.resolve_tag(element.tag, element.position, self.diagnostics)
		props = self._props(element, directives)
		children, lifted = self.extractor.split(element, {name for name, _ in props})
		for child in lifted:
			props.append((child.spec.prop, PropTemplateRef(self._lift(element, child))))
		spread = Raw(directives.props) if directives.props is not None else None
		return TagNode(
			element.tag,
			ref,
			props,
			self._resolve_children(children, pre),
			spread,
			element.position,
		)

	def _lift(self, owner: Element, child: LiftedChild) -> PropTemplate:
		arguments = child.spec.arguments
		captured = self._captured(arguments)
		bindings = [Binding(a, "argument", child.trigger.position) for a in arguments]
		with self._frame(bindings):
			body = self._resolve_node(child.body, pre=False)
		if body is None:
			raise ResolutionError(
				f"Template for prop '{child.spec.prop}' of <{owner.tag}> renders nothing",
				child.trigger.position,
			)
		template = PropTemplate(
			owner.tag, child.spec.prop, arguments, body, captured, child.trigger.position
		)
		self.prop_templates.append(template)
		return template

	def _resolve_children(
		self, children: Sequence[TemplateNode], pre: bool
	) -> list[RenderNode]:
		result: list[RenderNode] = []
		for child in children:
			node = self._resolve_node(child, pre)
			if node is not None:
				result.append(node)
		return result

	def _resolve_node(self, node: TemplateNode, pre: bool) -> RenderNode | None:
		if isinstance(node, Comment):
			return None
		if isinstance(node, Text):
			return self._text(node, pre)
		return self._resolve_element(node, pre=pre)

	# --- Text and attribute values -----------------------------------------

	def _text(self, node: Text, pre: bool) -> TextNode | None:
		if pre:
			return TextNode(Literal(node.value))
		if is_insignificant(node.value):
			return None
		if node.offset >= 0 and self.source.startswith(node.value, node.offset):
			segments = split_interpolations(node.value, source=self.source, offset=node.offset)
		else:
			segments = split_interpolations(node.value, node.position)
		return TextNode(_segments_expr(segments))

	def _props(
		self, element: Element, directives: ElementDirectives
	) -> list[tuple[str, PropValue]]:
		props: list[tuple[str, PropValue]] = []
		index: dict[str, int] = {}
		for attr in directives.attributes:
			name = self.target.rename_attribute(attr.name)
			value = self._attribute_value(name, attr)
			if name in index:
				self.diagnostics.warn(
					"duplicate-attribute",
					f"Attribute '{name}' appears more than once on <{element.tag}>, last value wins",
					attr.position,
				)
				props[index[name]] = (name, value)
				continue
			index[name] = len(props)
			props.append((name, value))

		if directives.class_map is not None:
			classes = _class_names(directives.class_map)
			if "className" in index:
				static = props[index["className"]][1]
				assert not isinstance(static, PropTemplateRef)
				props[index["className"]] = (
					"className",
					concat([static, Literal(" "), classes]),
				)
			else:
				props.append(("className", classes))
		return props

	def _attribute_value(self, name: str, attr: Attribute) -> Expr:
		if attr.value is None:
			return Literal(True)
		value = attr.value
		if name == "style" and not value.strip().startswith("{"):
			return self._style(attr)
		if _EVENT_RE.match(name) and not value.strip().startswith("{"):
			arrow = parse_arrow(value)
			if arrow is not None:
				body: list[StmtNode]
				if arrow.block:
					body = [RawStmt(arrow.body)] if arrow.body else []
				else:
					body = [Return(Raw(arrow.body))]
				return bind(Function(arrow.params, body))
		segments = split_interpolations(value, source=self.source, offset=attr.value_offset)
		if len(segments) == 1 and isinstance(segments[0], Interpolation):
			code = segments[0].code
			if self.options.autobind and is_method_reference(code):
				return bind(Raw(code))
			return Raw(code)
		return _segments_expr(segments)

	def _style(self, attr: Attribute) -> Expr:
		assert attr.value is not None
		try:
			declarations = parse_style(attr.value)
		except ParseError as exc:
			raise ParseError(exc.message, attr.position) from None
		return Object(
			[
				(name, _segments_expr(split_interpolations(value, attr.position)))
				for name, value in declarations
			]
		)


def _segments_expr(segments: Sequence[Segment]) -> Expr:
	"""Literal text and interpolations as one string-valued expression."""
	parts: list[Expr] = [
		Literal(decode_entities(s)) if isinstance(s, str) else Raw(s.code)
		for s in segments
	]
	if not parts:
		return Literal("")
	if len(parts) == 1:
		return parts[0]
	# Force string concatenation when the first two parts are expressions
	if not isinstance(parts[0], Literal) and not isinstance(parts[1], Literal):
		parts.insert(0, Literal(""))
	return concat(parts)


def _class_names(class_map: str) -> Expr:
	"""_.keys(_.pickBy(map, _.identity)).join(" ")"""
	lodash = Identifier(LODASH)
	picked = Call(Member(lodash, "pickBy"), [Raw(class_map), Member(lodash, "identity")])
	keys = Call(Member(lodash, "keys"), [picked])
	return Call(Member(keys, "join"), [Literal(" ")])
