from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import override

from react_templates.expressions import is_simple_path, split_top_level

# =============================================================================
# Base classes
# =============================================================================


class Node(ABC):
	"""Base class for all JavaScript AST nodes."""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def emit(self, out: list[str]) -> None:
		"""Emit this node as JavaScript code into the output buffer."""


class Expr(Node, ABC):
	"""Base class for expression nodes."""

	__slots__: tuple[str, ...] = ()

	def precedence(self) -> int:
		"""Operator precedence (higher = binds tighter). Default: primary (20)."""
		return 20


class StmtNode(Node, ABC):
	"""Base class for statement nodes."""

	__slots__: tuple[str, ...] = ()


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(slots=True)
class Identifier(Expr):
	"""JS identifier: x, React, this"""

	name: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.name)


THIS = Identifier("this")


@dataclass(slots=True)
class Literal(Expr):
	"""JS literal: 42, "hello", true, null"""

	value: int | float | str | bool | None

	@override
	def emit(self, out: list[str]) -> None:
		if self.value is None:
			out.append("null")
		elif isinstance(self.value, bool):
			out.append("true" if self.value else "false")
		elif isinstance(self.value, str):
			out.append('"')
			out.append(_escape_string(self.value))
			out.append('"')
		else:
			out.append(str(self.value))


NULL = Literal(None)

_LITERAL_RE = re.compile(r"""^(?:\d+(?:\.\d+)?|"[^"\\]*"|'[^'\\]*'|true|false|null)$""")


@dataclass(slots=True)
class Raw(Expr):
	"""Host-language expression copied verbatim from the template.

	We do not parse it, so anything that is not obviously primary gets
	parenthesized whenever an operator binds around it.
	"""

	code: str

	@override
	def precedence(self) -> int:
		code = self.code.strip()
		if is_simple_path(code) or _LITERAL_RE.match(code):
			return 20
		if len(split_top_level(code, ",")) > 1:
			return _PRECEDENCE[","]
		return 2

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.code.strip())


@dataclass(slots=True)
class Array(Expr):
	"""JS array: [a, b, c]"""

	elements: Sequence[Expr]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("[")
		for i, e in enumerate(self.elements):
			if i > 0:
				out.append(", ")
			_emit_arg(e, out)
		out.append("]")


@dataclass(slots=True)
class Object(Expr):
	"""JS object: {"key": value}"""

	props: Sequence[tuple[str, Expr]]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("{")
		for i, (k, v) in enumerate(self.props):
			if i > 0:
				out.append(", ")
			out.append('"')
			out.append(_escape_string(k))
			out.append('": ')
			_emit_arg(v, out)
		out.append("}")


@dataclass(slots=True)
class Member(Expr):
	"""JS member access: obj.prop"""

	obj: Expr
	prop: str

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.obj, out)
		out.append(".")
		out.append(self.prop)


@dataclass(slots=True)
class Call(Expr):
	"""JS function call: fn(args)"""

	callee: Expr
	args: Sequence[Expr]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.callee, out)
		out.append("(")
		for i, a in enumerate(self.args):
			if i > 0:
				out.append(", ")
			_emit_arg(a, out)
		out.append(")")


@dataclass(slots=True)
class Binary(Expr):
	"""JS binary expression: x + y, a && b"""

	left: Expr
	op: str
	right: Expr

	@override
	def precedence(self) -> int:
		return _PRECEDENCE.get(self.op, 0)

	@override
	def emit(self, out: list[str]) -> None:
		_emit_paren(self.left, self.op, "left", out)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_paren(self.right, self.op, "right", out)


@dataclass(slots=True)
class Ternary(Expr):
	"""JS ternary expression: cond ? a : b"""

	cond: Expr
	then: Expr
	else_: Expr

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["?:"]

	@override
	def emit(self, out: list[str]) -> None:
		if self.cond.precedence() <= _PRECEDENCE["?:"]:
			out.append("(")
			self.cond.emit(out)
			out.append(")")
		else:
			self.cond.emit(out)
		out.append(" ? ")
		_emit_arg(self.then, out)
		out.append(" : ")
		_emit_arg(self.else_, out)


@dataclass(slots=True)
class Function(Expr):
	"""JS function: function name(params) { ... }

	Used both as hoisted declarations (with a name) and as inline expressions.
	"""

	params: Sequence[str]
	body: Sequence[StmtNode]
	name: str | None = None

	@override
	def emit(self, out: list[str]) -> None:
		out.append("function ")
		if self.name:
			out.append(self.name)
		out.append("(")
		out.append(", ".join(self.params))
		out.append(") {\n")
		for stmt in self.body:
			stmt.emit(out)
			out.append("\n")
		out.append("}")


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass(slots=True)
class Return(StmtNode):
	"""JS return statement: return expr;"""

	value: Expr | None = None

	@override
	def emit(self, out: list[str]) -> None:
		out.append("return")
		if self.value is not None:
			out.append(" ")
			self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class Var(StmtNode):
	"""JS variable declaration: var x = expr;"""

	target: str
	value: Expr

	@override
	def emit(self, out: list[str]) -> None:
		out.append("var ")
		out.append(self.target)
		out.append(" = ")
		self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class RawStmt(StmtNode):
	"""Statements copied verbatim from template source, e.g. a handler block body."""

	code: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.code)


@dataclass(slots=True)
class Comment(StmtNode):
	"""JS block comment: /* text */"""

	text: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append("/*")
		out.append(self.text.replace("*/", "* /"))
		out.append("*/")


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as JavaScript code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)


def concat(parts: Sequence[Expr]) -> Expr:
	"""Left-folded string concatenation: a + b + c"""
	if not parts:
		return Literal("")
	result = parts[0]
	for p in parts[1:]:
		result = Binary(result, "+", p)
	return result


def bind(fn: Expr, *args: Expr) -> Call:
	"""fn.bind(this, ...args)"""
	return Call(Member(fn, "bind"), [THIS, *args])


# Operator precedence table (higher = binds tighter)
_PRECEDENCE: dict[str, int] = {
	# Primary
	".": 20,
	"[]": 20,
	"()": 20,
	# Unary
	"!": 17,
	# Multiplicative
	"*": 15,
	"/": 15,
	"%": 15,
	# Additive
	"+": 14,
	"-": 14,
	# Relational
	"<": 12,
	"<=": 12,
	">": 12,
	">=": 12,
	"===": 12,
	"!==": 12,
	# Logical
	"&&": 7,
	"||": 6,
	# Ternary
	"?:": 4,
	# Comma
	",": 1,
}


def _escape_string(s: str) -> str:
	"""Escape for double-quoted JS string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u00a0", "\\u00A0")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _emit_paren(node: Expr, parent_op: str, side: str, out: list[str]) -> None:
	"""Emit child with parens if needed for precedence."""
	needs_parens = False
	if isinstance(node, Ternary):
		needs_parens = True
	else:
		child_prec = node.precedence()
		parent_prec = _PRECEDENCE.get(parent_op, 0)
		if child_prec < parent_prec:
			needs_parens = True
		elif child_prec == parent_prec and isinstance(node, Binary):
			needs_parens = side == "right"

	if needs_parens:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_primary(node: Expr, out: list[str]) -> None:
	"""Emit with parens if not primary precedence."""
	if node.precedence() < 20 or isinstance(node, Ternary):
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_arg(node: Expr, out: list[str]) -> None:
	"""Emit an argument/element/property value. Only comma expressions need parens."""
	if node.precedence() <= _PRECEDENCE[","]:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)
