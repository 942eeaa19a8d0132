"""
Code emission: render tree -> JavaScript.

Iterations, scopes and prop templates become named functions hoisted to
module level. Each takes the bindings visible at its use site as leading
parameters, so the nesting of template scopes never depends on closures:

	function repeatItem1(items, item, itemIndex) { ... }
	_.map(items, repeatItem1.bind(this, ...captured))

Inner functions are registered before the functions that reference them.
"""

from __future__ import annotations

import logging
import re

from react_templates.nodes import (
	NULL,
	THIS,
	Array,
	Call,
	Expr,
	Function,
	Identifier,
	Member,
	Object,
	Raw,
	Return,
	StmtNode,
	Ternary,
	Var,
	bind,
	emit,
)
from react_templates.render_tree import (
	Conditional,
	Iteration,
	PropTemplate,
	PropTemplateRef,
	RenderNode,
	ResolvedTemplate,
	ScopeBinding,
	TagNode,
	TextNode,
	VirtualNode,
)
from react_templates.targets import LODASH, TargetMode

logger = logging.getLogger(__name__)

_NAME_CHARS = re.compile(r"[^\w$]")


def _capitalize(name: str) -> str:
	name = _NAME_CHARS.sub("", name)
	return name[:1].upper() + name[1:]


class Emitter:
	"""Assembles the render expression and the hoisted functions it uses."""

	template: ResolvedTemplate
	target: TargetMode
	functions: list[Function]
	_counter: int
	_template_names: dict[int, str]

	def __init__(self, template: ResolvedTemplate, target: TargetMode) -> None:
		self.template = template
		self.target = target
		self.functions = []
		self._counter = 0
		self._template_names = {}

	def emit(self) -> tuple[list[str], str]:
		"""Returns (hoisted function sources, render expression source)."""
		body = self.expr(self.template.root)
		return [emit(fn) for fn in self.functions], emit(body)

	@property
	def params(self) -> tuple[str, ...]:
		return ("props", "context") if self.template.stateless else ()

	def _next_name(self, stem: str) -> str:
		self._counter += 1
		return f"{stem}{self._counter}"

	# --- Nodes -------------------------------------------------------------

	def expr(self, node: RenderNode) -> Expr:
		"""A single expression for `node`. Fragments become arrays."""
		exprs = self.exprs(node)
		if len(exprs) == 1:
			return exprs[0]
		return Array(exprs)

	def exprs(self, node: RenderNode) -> list[Expr]:
		if isinstance(node, TagNode):
			return [self._tag(node)]
		if isinstance(node, TextNode):
			return [node.value]
		if isinstance(node, VirtualNode):
			return self._children(node.children)
		if isinstance(node, Conditional):
			return [Ternary(Raw(node.test), self.expr(node.body), NULL)]
		if isinstance(node, Iteration):
			return [self._iteration(node)]
		if isinstance(node, ScopeBinding):
			return [self._scope(node)]
		raise TypeError(f"Unsupported render node: {type(node).__name__}")

	def _children(self, children: list[RenderNode]) -> list[Expr]:
		result: list[Expr] = []
		for child in children:
			result.extend(self.exprs(child))
		return result

	def _tag(self, node: TagNode) -> Expr:
		entries: list[tuple[str, Expr]] = []
		for name, value in node.props:
			if isinstance(value, PropTemplateRef):
				entries.append((name, self._prop_template(value.template)))
			else:
				entries.append((name, value))
		props: Expr = Object(entries)
		if node.spread is not None:
			assign = Member(Identifier(LODASH), "assign")
			props = Call(assign, [Object([]), props, node.spread])
		return self.target.factory_call(node.ref, props, self._children(node.children))

	def _iteration(self, node: Iteration) -> Expr:
		name = self._next_name(f"repeat{_capitalize(node.item)}")
		body = self.expr(node.body)
		params = [*node.captured, node.item, node.index]
		self.functions.append(Function(params, [Return(body)], name))
		logger.debug("Hoisted iteration over '%s' as %s", node.collection, name)
		mapper = bind(Identifier(name), *(Identifier(c) for c in node.captured))
		return Call(Member(Identifier(LODASH), "map"), [Raw(node.collection), mapper])

	def _scope(self, node: ScopeBinding) -> Expr:
		name = self._next_name("scope" + "".join(_capitalize(n) for n, _ in node.bindings))
		statements: list[StmtNode] = [Var(n, Raw(e)) for n, e in node.bindings]
		statements.append(Return(self.expr(node.body)))
		self.functions.append(Function(list(node.captured), statements, name))
		call = Member(Identifier(name), "call")
		return Call(call, [THIS, *(Identifier(c) for c in node.captured)])

	def _prop_template(self, template: PropTemplate) -> Expr:
		key = id(template)
		name = self._template_names.get(key)
		if name is None:
			name = self._next_name(template.prop)
			self._template_names[key] = name
			body = self.expr(template.body)
			params = [*template.captured, *template.arguments]
			self.functions.append(Function(params, [Return(body)], name))
			logger.debug(
				"Hoisted template for %s.%s as %s", template.owner, template.prop, name
			)
		return bind(Identifier(name), *(Identifier(c) for c in template.captured))
