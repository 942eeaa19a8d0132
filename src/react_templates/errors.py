from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

DiagnosticCode = Literal[
	"unknown-directive",
	"unknown-tag",
	"shadowed-binding",
	"duplicate-attribute",
	"unsupported-import",
]


@dataclass(slots=True, frozen=True)
class Position:
	"""1-based line/column of a construct in template source."""

	line: int
	column: int

	@staticmethod
	def at(source: str, offset: int) -> Position:
		line = source.count("\n", 0, offset) + 1
		last_nl = source.rfind("\n", 0, offset)
		return Position(line, offset - last_nl)

	def shifted(self, origin: Position) -> Position:
		"""Translate a position relative to an embedded region starting at `origin`."""
		if self.line == 1:
			return Position(origin.line, origin.column + self.column - 1)
		return Position(origin.line + self.line - 1, self.column)

	def __str__(self) -> str:
		return f"{self.line}:{self.column}"


class RTError(Exception):
	"""Base class for fatal compilation errors."""

	message: str
	position: Position | None
	filename: str | None

	def __init__(
		self,
		message: str,
		position: Position | None = None,
		*,
		filename: str | None = None,
	) -> None:
		super().__init__(message)
		self.message = message
		self.position = position
		self.filename = filename

	def with_filename(self, filename: str) -> RTError:
		self.filename = filename
		return self

	def __str__(self) -> str:
		loc = ""
		if self.filename:
			loc = self.filename + ":"
		if self.position is not None:
			loc += f"{self.position}:"
		return f"{loc} {self.message}" if loc else self.message


class ParseError(RTError):
	"""Malformed markup: unterminated tag, mismatched close or malformed expression."""


class ResolutionError(RTError):
	"""Semantic error found while resolving directives, imports or prop templates."""


class ConfigurationError(ResolutionError):
	"""Invalid or incomplete compile options."""


@dataclass(slots=True, frozen=True)
class Diagnostic:
	"""Non-fatal finding. Compilation continues."""

	code: DiagnosticCode
	message: str
	position: Position | None = None

	def __str__(self) -> str:
		if self.position is None:
			return f"[{self.code}] {self.message}"
		return f"{self.position}: [{self.code}] {self.message}"


class Diagnostics:
	"""Per-call collector; also forwards every finding to the logger."""

	__slots__: tuple[str, ...] = ("items",)
	items: list[Diagnostic]

	def __init__(self) -> None:
		self.items = []

	def warn(
		self,
		code: DiagnosticCode,
		message: str,
		position: Position | None = None,
	) -> None:
		diag = Diagnostic(code, message, position)
		self.items.append(diag)
		logger.warning("%s", diag)

	def __iter__(self) -> Iterator[Diagnostic]:
		return iter(self.items)

	def __len__(self) -> int:
		return len(self.items)


__all__ = [
	"ConfigurationError",
	"Diagnostic",
	"DiagnosticCode",
	"Diagnostics",
	"ParseError",
	"Position",
	"RTError",
	"ResolutionError",
]
