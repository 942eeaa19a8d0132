"""
Tolerant parser for RT template markup.

Produces a strict tree of `Element`, `Text` and `Comment` nodes. Tag and
attribute names keep their case (`MyComp`, `onClick`), attribute values may be
quoted literals or brace-delimited expressions, and braces inside text are
skipped as a unit so `{a < b}` never opens a tag.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from react_templates.errors import ParseError, Position
from react_templates.expressions import (
	find_closing_brace,
	join_segments,
	split_interpolations,
)

VOID_ELEMENTS = frozenset(
	{
		"area",
		"base",
		"br",
		"col",
		"embed",
		"hr",
		"img",
		"input",
		"keygen",
		"link",
		"meta",
		"param",
		"source",
		"track",
		"wbr",
	}
)

# Content of these elements is read verbatim up to the closing tag
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

# Whitespace inside these elements is significant
PRESERVE_WHITESPACE = frozenset({"pre", "textarea", "script", "style"})

_TAG_NAME_RE = re.compile(r"[A-Za-z][\w.:-]*")
_ATTR_NAME_RE = re.compile(r"[^\s\"'<>/=]+")


@dataclass(slots=True)
class Attribute:
	name: str
	# None for bare boolean attributes: <input disabled>
	value: str | None
	position: Position
	# Offset of the first character of the value in the source
	value_offset: int = -1


@dataclass(slots=True)
class Element:
	tag: str
	attrs: list[Attribute] = field(default_factory=list)
	children: list[TemplateNode] = field(default_factory=list)
	position: Position = field(default_factory=lambda: Position(1, 1))

	def get(self, name: str) -> str | None:
		for attr in self.attrs:
			if attr.name == name:
				return attr.value
		return None

	def attr(self, name: str) -> Attribute | None:
		for attr in self.attrs:
			if attr.name == name:
				return attr
		return None

	def has(self, name: str) -> bool:
		return self.attr(name) is not None


@dataclass(slots=True)
class Text:
	value: str
	position: Position = field(default_factory=lambda: Position(1, 1))
	offset: int = -1


@dataclass(slots=True)
class Comment:
	value: str
	position: Position = field(default_factory=lambda: Position(1, 1))


TemplateNode: TypeAlias = Element | Text | Comment


class MarkupParser:
	"""Single-pass recursive scanner over template source."""

	source: str
	pos: int

	def __init__(self, source: str) -> None:
		self.source = source
		self.pos = 0

	def parse(self) -> list[TemplateNode]:
		nodes, closing = self._parse_children(None)
		if closing is not None:
			name, offset = closing
			raise ParseError(
				f"Unexpected closing tag </{name}>", Position.at(self.source, offset)
			)
		return nodes

	def _position(self, offset: int | None = None) -> Position:
		return Position.at(self.source, self.pos if offset is None else offset)

	# --- Content -----------------------------------------------------------

	def _parse_children(
		self, parent: Element | None
	) -> tuple[list[TemplateNode], tuple[str, int] | None]:
		"""Parse nodes until a closing tag or EOF. Returns the closing tag seen."""
		src = self.source
		children: list[TemplateNode] = []
		while self.pos < len(src):
			if src.startswith("<!--", self.pos):
				children.append(self._parse_comment())
				continue
			if src.startswith("</", self.pos):
				start = self.pos
				self.pos += 2
				m = _TAG_NAME_RE.match(src, self.pos)
				if m is None:
					raise ParseError("Malformed closing tag", self._position(start))
				self.pos = m.end()
				self._skip_ws()
				if not src.startswith(">", self.pos):
					raise ParseError(
						f"Unterminated closing tag </{m.group(0)}", self._position(start)
					)
				self.pos += 1
				if m.group(0).lower() in VOID_ELEMENTS:
					continue
				return children, (m.group(0), start)
			if src[self.pos] == "<" and _TAG_NAME_RE.match(src, self.pos + 1):
				children.append(self._parse_element())
				continue
			children.append(self._parse_text())
		if parent is not None:
			raise ParseError(
				f"Unterminated tag <{parent.tag}>: missing </{parent.tag}>",
				parent.position,
			)
		return children, None

	def _parse_comment(self) -> Comment:
		start = self.pos
		end = self.source.find("-->", start + 4)
		if end < 0:
			raise ParseError("Unterminated comment", self._position(start))
		self.pos = end + 3
		return Comment(self.source[start + 4 : end], self._position(start))

	def _parse_text(self) -> Text:
		src = self.source
		start = self.pos
		i = start
		while i < len(src):
			ch = src[i]
			if ch == "{":
				end = find_closing_brace(src, i)
				if end < 0:
					raise ParseError(
						"Unterminated expression: missing '}'", self._position(i)
					)
				i = end + 1
				continue
			if ch == "<" and (
				src.startswith("<!--", i)
				or src.startswith("</", i)
				or _TAG_NAME_RE.match(src, i + 1)
			):
				break
			i += 1
		self.pos = i
		return Text(src[start:i], self._position(start), start)

	# --- Elements ----------------------------------------------------------

	def _parse_element(self) -> Element:
		src = self.source
		start = self.pos
		m = _TAG_NAME_RE.match(src, start + 1)
		assert m is not None
		element = Element(m.group(0), position=self._position(start))
		self.pos = m.end()

		self_closing = False
		while True:
			self._skip_ws()
			if self.pos >= len(src):
				raise ParseError(
					f"Unterminated tag <{element.tag}>", element.position
				)
			if src.startswith("/>", self.pos):
				self.pos += 2
				self_closing = True
				break
			if src[self.pos] == ">":
				self.pos += 1
				break
			element.attrs.append(self._parse_attribute(element))

		if self_closing or element.tag.lower() in VOID_ELEMENTS:
			return element

		if element.tag.lower() in RAW_TEXT_ELEMENTS:
			self._parse_raw_text(element)
			return element

		children, closing = self._parse_children(element)
		element.children = children
		assert closing is not None
		name, offset = closing
		if name != element.tag:
			raise ParseError(
				f"Mismatched closing tag: expected </{element.tag}>, found </{name}>",
				self._position(offset),
			)
		return element

	def _parse_raw_text(self, element: Element) -> None:
		close = re.compile(rf"</{re.escape(element.tag)}\s*>", re.IGNORECASE)
		m = close.search(self.source, self.pos)
		if m is None:
			raise ParseError(
				f"Unterminated tag <{element.tag}>: missing </{element.tag}>",
				element.position,
			)
		if m.start() > self.pos:
			element.children.append(
				Text(self.source[self.pos : m.start()], self._position(), self.pos)
			)
		self.pos = m.end()

	def _parse_attribute(self, element: Element) -> Attribute:
		src = self.source
		start = self.pos
		m = _ATTR_NAME_RE.match(src, start)
		if m is None:
			raise ParseError(
				f"Malformed attribute in <{element.tag}>", self._position(start)
			)
		name = m.group(0)
		self.pos = m.end()
		self._skip_ws()
		if not src.startswith("=", self.pos):
			return Attribute(name, None, self._position(start))
		self.pos += 1
		self._skip_ws()
		if self.pos >= len(src):
			raise ParseError(f"Unterminated tag <{element.tag}>", element.position)

		ch = src[self.pos]
		if ch in ('"', "'"):
			# Attribute values do not support backslash escapes
			end = src.find(ch, self.pos + 1)
			if end < 0:
				raise ParseError(
					f"Unterminated value for attribute '{name}'", self._position(start)
				)
			value = src[self.pos + 1 : end]
			value_offset = self.pos + 1
			self.pos = end + 1
		elif ch == "{":
			end = find_closing_brace(src, self.pos)
			if end < 0:
				raise ParseError(
					f"Malformed expression in attribute '{name}': missing '}}'",
					self._position(start),
				)
			value = src[self.pos : end + 1]
			value_offset = self.pos
			self.pos = end + 1
		else:
			vm = re.compile(r"[^\s>]+").match(src, self.pos)
			assert vm is not None
			value = vm.group(0)
			if value.endswith("/") and src.startswith(">", vm.end()):
				value = value[:-1]
			value_offset = self.pos
			self.pos = value_offset + len(value)

		# Interpolations must be balanced, report them against the attribute
		split_interpolations(value, source=src, offset=value_offset)
		return Attribute(name, value, self._position(start), value_offset)

	def _skip_ws(self) -> None:
		src = self.source
		while self.pos < len(src) and src[self.pos].isspace():
			self.pos += 1


def parse_markup(source: str) -> list[TemplateNode]:
	"""Parse template source into a list of top-level nodes."""
	return MarkupParser(source).parse()


# =============================================================================
# Whitespace normalization
# =============================================================================

_WS_RUN = re.compile(r"\s+")


def is_insignificant(text: str) -> bool:
	"""Whitespace-only text spanning a line break carries no content."""
	return not text.strip() and "\n" in text


def normalize_whitespace(
	nodes: Sequence[TemplateNode], *, preserve: bool = False
) -> list[TemplateNode]:
	"""Collapse runs of whitespace in text nodes following HTML rules.

	Whitespace-only nodes that span a line break are dropped. Content of
	`PRESERVE_WHITESPACE` elements and of elements marked `rt-pre` is left as is.
	Interpolated expressions are never touched.
	"""
	result: list[TemplateNode] = []
	for node in nodes:
		if isinstance(node, Element):
			keep = (
				preserve
				or node.tag.lower() in PRESERVE_WHITESPACE
				or node.has("rt-pre")
			)
			node.children = normalize_whitespace(node.children, preserve=keep)
			result.append(node)
		elif isinstance(node, Text) and not preserve:
			if is_insignificant(node.value):
				continue
			segments = split_interpolations(node.value, node.position)
			collapsed = [
				_WS_RUN.sub(" ", s) if isinstance(s, str) else s for s in segments
			]
			node.value = join_segments(collapsed)
			result.append(node)
		else:
			result.append(node)
	return result
