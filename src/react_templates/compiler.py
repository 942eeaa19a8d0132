"""
Compilation entry points.

Each call runs the full pipeline on its own state:

	source -> markup tree -> render tree -> JS nodes -> module text
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from react_templates.dialects import ModuleParts, select_dialect
from react_templates.emitter import Emitter
from react_templates.errors import Diagnostic, Diagnostics, RTError
from react_templates.markup import normalize_whitespace, parse_markup
from react_templates.options import CompileOptions
from react_templates.resolver import Resolver
from react_templates.targets import select_target

logger = logging.getLogger(__name__)

OptionsLike = CompileOptions | Mapping[str, Any] | None


@dataclass(slots=True, frozen=True)
class CompiledOutput:
	code: str
	diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(slots=True, frozen=True)
class CompileContext:
	"""Read-only defaults shared by every template compiled from one host file."""

	options: CompileOptions = field(default_factory=CompileOptions)


def compile_output(
	source: str, options: OptionsLike = None, *, filename: str | None = None
) -> CompiledOutput:
	"""Compile RT template source into a module. Warnings are returned, not raised."""
	opts = CompileOptions.coerce(options)
	diagnostics = Diagnostics()
	try:
		opts.validate()
		nodes = parse_markup(source)
		if opts.normalize_html_whitespace:
			nodes = normalize_whitespace(nodes)
		target = select_target(opts)
		resolved = Resolver(source, opts, target, diagnostics).resolve(nodes)
		emitter = Emitter(resolved, target)
		functions, body = emitter.emit()
		parts = ModuleParts(
			body=body,
			imports=list(resolved.imports),
			functions=functions,
			comments=resolved.comments,
			params=emitter.params,
			name=opts.name,
		)
		code = select_dialect(opts).render(parts)
	except RTError as exc:
		if filename is not None and exc.filename is None:
			exc.with_filename(filename)
		raise
	logger.debug(
		"Compiled %s (%s, %d hoisted functions, %d warnings)",
		filename or "<template>",
		opts.modules,
		len(functions),
		len(diagnostics),
	)
	return CompiledOutput(code, tuple(diagnostics))


def compile_template(
	source: str, options: OptionsLike = None, *, filename: str | None = None
) -> str:
	"""Compile RT template source into JavaScript/TypeScript module text."""
	return compile_output(source, options, filename=filename).code
