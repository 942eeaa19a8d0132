"""
Intermediate render-tree produced by the directive resolver.

Directive semantics are explicit wrapper nodes here (`Conditional`,
`Iteration`, `ScopeBinding`) and attribute values are already JavaScript
expression nodes, so the emitter only has to assemble structure.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from react_templates.errors import Position, ResolutionError
from react_templates.nodes import Expr

ImportKind = Literal["module", "namespace", "default", "named"]


@dataclass(slots=True, frozen=True)
class ImportSpec:
	"""A binding the generated module needs from another module.

	kind:
	- "module": the module value itself (`rt-require`, React, lodash)
	- "namespace": `import * as local`
	- "default": the default export
	- "named": a single named export `member`
	"""

	local: str
	source: str
	kind: ImportKind = "module"
	member: str | None = None
	position: Position | None = field(default=None, compare=False)

	def describe(self) -> str:
		if self.kind == "named":
			return f"'{self.member}' from '{self.source}'"
		if self.kind == "module":
			return f"'{self.source}'"
		return f"{self.kind} of '{self.source}'"


class ImportTable:
	"""Imports keyed by local name, in declaration order."""

	__slots__: tuple[str, ...] = ("_entries",)
	_entries: dict[str, ImportSpec]

	def __init__(self) -> None:
		self._entries = {}

	def add(self, spec: ImportSpec) -> None:
		existing = self._entries.get(spec.local)
		if existing is None:
			self._entries[spec.local] = spec
			return
		if existing != spec:
			raise ResolutionError(
				f"'{spec.local}' is imported twice with different sources: "
				+ f"{existing.describe()} and {spec.describe()}",
				spec.position,
			)

	def get(self, local: str) -> ImportSpec | None:
		return self._entries.get(local)

	def __contains__(self, local: str) -> bool:
		return local in self._entries

	def __iter__(self) -> Iterator[ImportSpec]:
		return iter(self._entries.values())

	def __len__(self) -> int:
		return len(self._entries)


@dataclass(slots=True, frozen=True)
class TagRef:
	"""How the element factory refers to a tag.

	`dom_factory` selects the legacy `React.DOM.tag(...)` call convention.
	"""

	expr: Expr
	dom_factory: bool = False
	name: str = ""


# =============================================================================
# Render nodes
# =============================================================================


@dataclass(slots=True)
class PropTemplate:
	"""A child fragment lifted into a function-valued prop of `owner`.

	`captured` are the enclosing bindings the generated function receives
	ahead of its own `arguments`.
	"""

	owner: str
	prop: str
	arguments: tuple[str, ...]
	body: RenderNode
	captured: tuple[str, ...] = ()
	position: Position | None = None


@dataclass(slots=True)
class PropTemplateRef:
	"""Prop value standing for the generated function of a `PropTemplate`."""

	template: PropTemplate


PropValue: TypeAlias = Expr | PropTemplateRef


@dataclass(slots=True)
class TagNode:
	tag: str
	ref: TagRef
	props: list[tuple[str, PropValue]] = field(default_factory=list)
	children: list[RenderNode] = field(default_factory=list)
	# rt-props: object merged over the static props
	spread: Expr | None = None
	position: Position | None = None


@dataclass(slots=True)
class TextNode:
	value: Expr


@dataclass(slots=True)
class VirtualNode:
	"""rt-virtual: children rendered without a wrapper element."""

	children: list[RenderNode] = field(default_factory=list)


@dataclass(slots=True)
class Conditional:
	test: str
	body: RenderNode
	position: Position | None = None


@dataclass(slots=True)
class Iteration:
	collection: str
	item: str
	index: str
	body: RenderNode
	captured: tuple[str, ...] = ()
	position: Position | None = None


@dataclass(slots=True)
class ScopeBinding:
	# (name, expression) pairs, evaluated in order
	bindings: list[tuple[str, str]]
	body: RenderNode
	captured: tuple[str, ...] = ()
	position: Position | None = None


RenderNode: TypeAlias = (
	TagNode | TextNode | VirtualNode | Conditional | Iteration | ScopeBinding
)


@dataclass(slots=True)
class ResolvedTemplate:
	root: RenderNode
	imports: ImportTable
	prop_templates: list[PropTemplate] = field(default_factory=list)
	# rt-stateless: render function receives (props, context)
	stateless: bool = False
	comments: list[str] = field(default_factory=list)

