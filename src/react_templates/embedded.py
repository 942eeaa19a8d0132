"""
Templates embedded in host scripts (`.jsrt`).

Every `<template>...</template>` region is compiled to a self-invoking
render-function expression and spliced back in place. The rest of the host
text is copied through untouched.
"""

from __future__ import annotations

import logging
import re

from react_templates.compiler import CompileContext, compile_template
from react_templates.errors import ParseError, Position, RTError

logger = logging.getLogger(__name__)

TEMPLATE_OPEN = "<template>"
TEMPLATE_CLOSE = "</template>"

_REGION_RE = re.compile(r"<template>([\s\S]*?)</template>")


def compile_embedded(
	source: str, context: CompileContext | None = None, *, filename: str | None = None
) -> str:
	"""Compile every embedded template region of `source`.

	The output is built only after all regions compiled, so a failing region
	never leaves a partially spliced result behind.
	"""
	context = context or CompileContext()
	options = context.options.with_(modules="jsrt", name=None)
	pieces: list[str] = []
	last = 0
	for m in _REGION_RE.finditer(source):
		region = m.group(1)
		origin = Position.at(source, m.start(1))
		runtime = region.find("${")
		if runtime >= 0:
			raise ParseError(
				"Embedded templates cannot contain '${' interpolation",
				Position.at(source, m.start(1) + runtime),
				filename=filename,
			)
		try:
			code = compile_template(region, options)
		except RTError as exc:
			if exc.position is not None:
				exc.position = exc.position.shifted(origin)
			if filename is not None:
				exc.with_filename(filename)
			raise
		pieces.append(source[last : m.start()])
		pieces.append(code.rstrip().removesuffix(";"))
		last = m.end()

	unclosed = source.find(TEMPLATE_OPEN, last)
	if unclosed >= 0:
		raise ParseError(
			f"Unterminated embedded template: missing {TEMPLATE_CLOSE}",
			Position.at(source, unclosed),
			filename=filename,
		)
	pieces.append(source[last:])
	logger.debug("Spliced %d embedded templates", len(pieces) // 2)
	return "".join(pieces)
