"""
Minimal scanning of host-language expressions embedded in templates.

Expressions are never parsed into an AST. We only need to know where they
end (balanced braces, string literals) and to recognize a handful of
directive micro-syntaxes.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from react_templates.errors import ParseError, Position

IDENTIFIER = r"[A-Za-z_$][\w$]*"

_IDENT_RE = re.compile(rf"^{IDENTIFIER}$")
_PATH_RE = re.compile(rf"^{IDENTIFIER}(?:\.{IDENTIFIER})*$")
_METHOD_REF_RE = re.compile(rf"^this(?:\.{IDENTIFIER})+$")
_REPEAT_RE = re.compile(
	rf"^\s*({IDENTIFIER})\s*(?:,\s*({IDENTIFIER})\s*)?\s+in\s+(\S[\s\S]*?)\s*$"
)
_SCOPE_ITEM_RE = re.compile(rf"^\s*(\S[\s\S]*?)\s+as\s+({IDENTIFIER})\s*$")
_ARROW_RE = re.compile(
	rf"^\s*(?:\(\s*((?:{IDENTIFIER}\s*(?:,\s*{IDENTIFIER}\s*)*)?)\)|({IDENTIFIER}))\s*=>\s*(\S[\s\S]*?)\s*$"
)

_QUOTES = {'"', "'", "`"}
_OPENERS = {"{": "}", "(": ")", "[": "]"}


@dataclass(slots=True, frozen=True)
class Interpolation:
	"""An `{expression}` segment of text or of an attribute value."""

	code: str
	position: Position | None = None


Segment = str | Interpolation


def skip_string(text: str, start: int) -> int:
	"""Return the index just past the string literal opening at `start`, or -1."""
	quote = text[start]
	i = start + 1
	while i < len(text):
		ch = text[i]
		if ch == "\\":
			i += 2
			continue
		if ch == quote:
			return i + 1
		i += 1
	return -1


def find_closing_brace(text: str, start: int) -> int:
	"""Index of the `}` matching the `{` at `start`, or -1 when unbalanced."""
	depth = 0
	i = start
	while i < len(text):
		ch = text[i]
		if ch in _QUOTES:
			i = skip_string(text, i)
			if i < 0:
				return -1
			continue
		if ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				return i
		i += 1
	return -1


def split_interpolations(
	text: str,
	position: Position | None = None,
	*,
	source: str | None = None,
	offset: int = 0,
) -> list[Segment]:
	"""Split text into literal strings and `{expression}` interpolations.

	`source`/`offset` locate the text in the full template so that errors and
	interpolations carry absolute positions.
	"""
	segments: list[Segment] = []
	i = 0
	literal_start = 0
	while i < len(text):
		if text[i] != "{":
			i += 1
			continue
		end = find_closing_brace(text, i)
		pos = Position.at(source, offset + i) if source is not None else position
		if end < 0:
			raise ParseError("Unterminated expression: missing '}'", pos)
		if i > literal_start:
			segments.append(text[literal_start:i])
		code = text[i + 1 : end].strip()
		if not code:
			raise ParseError("Empty expression '{}'", pos)
		segments.append(Interpolation(code, pos))
		i = end + 1
		literal_start = i
	if literal_start < len(text):
		segments.append(text[literal_start:])
	return segments


def join_segments(segments: list[Segment]) -> str:
	return "".join(s if isinstance(s, str) else "{" + s.code + "}" for s in segments)


def unwrap_braces(value: str) -> str:
	"""Strip one pair of enclosing braces when they wrap the whole value."""
	stripped = value.strip()
	if stripped.startswith("{") and find_closing_brace(stripped, 0) == len(stripped) - 1:
		return stripped[1:-1].strip()
	return stripped


def decode_entities(text: str) -> str:
	return html.unescape(text)


def is_identifier(name: str) -> bool:
	return _IDENT_RE.match(name) is not None


def is_simple_path(code: str) -> bool:
	return _PATH_RE.match(code.strip()) is not None


def is_method_reference(code: str) -> bool:
	"""`this.handler` or `this.a.b`: a bare reference to a method of the component."""
	return _METHOD_REF_RE.match(code.strip()) is not None


def split_top_level(text: str, sep: str) -> list[str]:
	"""Split on `sep` outside of strings and brackets."""
	parts: list[str] = []
	depth = 0
	start = 0
	i = 0
	while i < len(text):
		ch = text[i]
		if ch in _QUOTES:
			end = skip_string(text, i)
			i = len(text) if end < 0 else end
			continue
		if ch in _OPENERS:
			depth += 1
		elif ch in _OPENERS.values():
			depth -= 1
		elif ch == sep and depth == 0:
			parts.append(text[start:i])
			start = i + 1
		i += 1
	parts.append(text[start:])
	return parts


@dataclass(slots=True, frozen=True)
class RepeatClause:
	item: str
	index: str
	collection: str


def parse_repeat(value: str, position: Position | None = None) -> RepeatClause:
	"""`item in items` or `item, i in items`. The index defaults to `<item>Index`."""
	m = _REPEAT_RE.match(unwrap_braces(value))
	if m is None:
		raise ParseError(
			f"rt-repeat must look like 'item in collection', got '{value}'", position
		)
	item, index, collection = m.group(1), m.group(2), m.group(3)
	return RepeatClause(item, index or f"{item}Index", collection)


def parse_scope(value: str, position: Position | None = None) -> list[tuple[str, str]]:
	"""`expr as name; other as alias` -> [(name, expr), (alias, other)]"""
	bindings: list[tuple[str, str]] = []
	for part in split_top_level(unwrap_braces(value), ";"):
		if not part.strip():
			continue
		m = _SCOPE_ITEM_RE.match(part)
		if m is None:
			raise ParseError(
				f"rt-scope entries must look like 'expression as name', got '{part.strip()}'",
				position,
			)
		bindings.append((m.group(2), m.group(1)))
	if not bindings:
		raise ParseError("rt-scope must declare at least one binding", position)
	return bindings


@dataclass(slots=True, frozen=True)
class ArrowHandler:
	params: tuple[str, ...]
	body: str
	# body holds statements (`{ ... }` with the braces stripped), not an expression
	block: bool = False


def parse_arrow(value: str) -> ArrowHandler | None:
	"""Recognize `(a, b) => expr`, `a => expr` and `(a) => { stmts }` handlers."""
	m = _ARROW_RE.match(value)
	if m is None:
		return None
	if m.group(2):
		params: tuple[str, ...] = (m.group(2),)
	else:
		params = tuple(p.strip() for p in (m.group(1) or "").split(",") if p.strip())
	body = m.group(3)
	if body.startswith("{"):
		if find_closing_brace(body, 0) != len(body) - 1:
			return None
		return ArrowHandler(params, body[1:-1].strip(), block=True)
	return ArrowHandler(params, body)


def parse_name_list(value: str) -> tuple[str, ...]:
	names = tuple(n.strip() for n in value.split(",") if n.strip())
	for n in names:
		if not is_identifier(n):
			raise ParseError(f"'{n}' is not a valid identifier")
	return names


# =============================================================================
# Style attribute
# =============================================================================

_VENDOR_PREFIXES = {"webkit": "Webkit", "moz": "Moz", "ms": "ms", "o": "O"}


def camel_case_style(name: str) -> str:
	"""`background-color` -> `backgroundColor`, `-webkit-transform` -> `WebkitTransform`."""
	name = name.strip()
	prefix = ""
	if name.startswith("-"):
		vendor, _, rest = name[1:].partition("-")
		prefix = _VENDOR_PREFIXES.get(vendor.lower(), vendor.capitalize())
		name = rest
	head, *tail = name.split("-")
	camel = head + "".join(t[:1].upper() + t[1:] for t in tail)
	if prefix:
		return prefix + camel[:1].upper() + camel[1:]
	return camel


def parse_style(value: str) -> list[tuple[str, str]]:
	"""Split a CSS declaration list into (camelCasedName, rawValue) pairs."""
	declarations: list[tuple[str, str]] = []
	for decl in split_top_level(value, ";"):
		if not decl.strip():
			continue
		name, sep, val = decl.partition(":")
		if not sep or not name.strip():
			raise ParseError(f"Malformed style declaration '{decl.strip()}'")
		declarations.append((camel_case_style(name), val.strip()))
	return declarations
