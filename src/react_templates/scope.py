from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal

from react_templates.errors import Position

BindingSource = Literal["render", "item", "index", "scope", "argument"]


@dataclass(slots=True, frozen=True)
class Binding:
	"""A name introduced by a directive, with where it came from."""

	name: str
	source: BindingSource
	position: Position | None = None


class ScopeStack:
	"""Nested binding frames for one template subtree.

	Lookup walks from the innermost frame outwards. Names that resolve to no
	frame are left alone: they belong to the component instance or globals.
	"""

	__slots__: tuple[str, ...] = ("frames",)
	frames: list[dict[str, Binding]]

	def __init__(self, root: Iterable[Binding] = ()) -> None:
		self.frames = [{b.name: b for b in root}]

	def push(self, bindings: Iterable[Binding]) -> list[Binding]:
		"""Push a frame. Returns the outer bindings that the new frame shadows."""
		frame: dict[str, Binding] = {}
		shadowed: list[Binding] = []
		for b in bindings:
			outer = self.lookup(b.name)
			if outer is not None and b.name not in frame:
				shadowed.append(outer)
			frame[b.name] = b
		self.frames.append(frame)
		return shadowed

	def pop(self) -> dict[str, Binding]:
		if len(self.frames) == 1:
			raise RuntimeError("Cannot pop the root scope frame")
		return self.frames.pop()

	@contextmanager
	def frame(self, bindings: Iterable[Binding]) -> Iterator[list[Binding]]:
		shadowed = self.push(bindings)
		try:
			yield shadowed
		finally:
			self.pop()

	def lookup(self, name: str) -> Binding | None:
		for frame in reversed(self.frames):
			if name in frame:
				return frame[name]
		return None

	def __contains__(self, name: str) -> bool:
		return self.lookup(name) is not None

	def visible(self) -> tuple[str, ...]:
		"""Every bound name in scope, outermost first, each listed once."""
		seen: dict[str, None] = {}
		for frame in self.frames:
			for name in frame:
				seen.setdefault(name, None)
		return tuple(seen)

	@property
	def depth(self) -> int:
		return len(self.frames)
