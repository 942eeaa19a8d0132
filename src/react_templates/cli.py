"""
Command-line interface for react-templates.

`rt` compiles `.rt` templates into modules next to the source file and
`.jsrt` host scripts into plain scripts.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from react_templates.compiler import CompileContext, compile_output
from react_templates.embedded import compile_embedded
from react_templates.errors import RTError
from react_templates.options import NAMED_FORMATS, CompileOptions

cli = typer.Typer(
	name="rt",
	help="Compile RT templates into React render functions",
	no_args_is_help=True,
)

EMBEDDED_SUFFIX = ".jsrt"


def _configure_logging(verbose: bool) -> None:
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		format="%(message)s",
		handlers=[RichHandler(show_time=False, show_path=False)],
		force=True,
	)


def output_path(source: Path, options: CompileOptions) -> Path:
	if source.suffix == EMBEDDED_SUFFIX:
		return source.with_suffix(".js")
	suffix = ".ts" if options.modules == "typescript" else ".js"
	return source.with_name(source.name + suffix)


def _compile_file(path: Path, options: CompileOptions) -> str:
	source = path.read_text(encoding="utf-8")
	if path.suffix == EMBEDDED_SUFFIX:
		return compile_embedded(source, CompileContext(options), filename=str(path))
	if options.modules in NAMED_FORMATS and not options.name:
		options = options.with_(name=path.name.split(".")[0])
	return compile_output(source, options, filename=str(path)).code


@cli.command()
def main(
	files: list[Path] = typer.Argument(..., help="Template files (.rt or .jsrt)"),
	modules: str = typer.Option(
		"commonjs",
		"--modules",
		"-m",
		help="Module format: commonjs, amd, es6, typescript or none",
	),
	name: str | None = typer.Option(
		None, "--name", help="Module name for 'none' and 'amd' (defaults to the file name)"
	),
	target_version: str = typer.Option("0.14.0", "--target-version", "-t"),
	native: bool = typer.Option(False, "--native", help="Target React Native"),
	native_target_version: str = typer.Option("0.9.0", "--native-target-version"),
	autobind: bool = typer.Option(False, "--autobind", help="Bind this.method references"),
	normalize_whitespace: bool = typer.Option(False, "--normalize-whitespace"),
	prop_templates: str | None = typer.Option(
		None, "--prop-templates", help="JSON mapping component -> child tag -> prop spec"
	),
	stdout: bool = typer.Option(False, "--stdout", help="Print output instead of writing files"),
	verbose: bool = typer.Option(False, "--verbose", "-v"),
):
	"""Compile RT templates."""
	_configure_logging(verbose)
	console = Console(stderr=True)

	raw: dict[str, Any] = {
		"modules": modules,
		"name": name,
		"target_version": target_version,
		"native": native,
		"native_target_version": native_target_version,
		"autobind": autobind,
		"normalize_html_whitespace": normalize_whitespace,
	}
	if prop_templates:
		try:
			raw["prop_templates"] = json.loads(prop_templates)
		except json.JSONDecodeError as exc:
			console.print(
				f"--prop-templates is not valid JSON: {exc}", style="red", markup=False, soft_wrap=True
			)
			raise typer.Exit(1) from None
	try:
		options = CompileOptions.from_mapping(raw)
	except RTError as exc:
		console.print(str(exc), style="red", markup=False, soft_wrap=True)
		raise typer.Exit(1) from None

	failed = 0
	for path in files:
		if not path.is_file():
			console.print(f"{path}: no such file", style="red", markup=False, soft_wrap=True)
			failed += 1
			continue
		try:
			code = _compile_file(path, options)
		except RTError as exc:
			console.print(
				str(exc.with_filename(str(path))), style="red", markup=False, soft_wrap=True
			)
			failed += 1
			continue
		if stdout:
			typer.echo(code, nl=False)
			continue
		target = output_path(path, options)
		target.write_text(code, encoding="utf-8")
		console.print(f"{path} -> {target}", style="green", markup=False, soft_wrap=True)

	if failed:
		raise typer.Exit(1)
