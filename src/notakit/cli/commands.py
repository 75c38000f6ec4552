"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from notakit.config import Settings, load_config
from notakit.core.models import ParsingResult
from notakit.core.pipeline import run_convert, run_export, run_parse


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _echo_blocks(result: ParsingResult) -> None:
    for b in result.blocks:
        flag = '' if b.metadata.is_valid else '  [invalid]'
        typer.echo(f"  {b.metadata.start_line:>4}-{b.metadata.end_line:<4} {b.type}{flag}")


def _echo_diagnostics(result: ParsingResult) -> None:
    for e in result.metadata.errors:
        typer.echo(f"    error: {e}")
    for w in result.metadata.warnings:
        typer.echo(f"    warning: {w}")


def parse_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file or directory to parse")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the full parsing result as JSON")] = False,
    ):
    """Parse Markdown into typed blocks and list them with their line ranges."""
    settings = _settings()
    try:
        results = run_parse(path, settings.default_ai_model)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        _fail(f"No Markdown files found at {path}")

    for src, result in results:
        if as_json:
            typer.echo(result.model_dump_json(indent=2))
            continue
        m = result.metadata
        typer.echo(f"{src}: {len(result.blocks)} block(s), {m.invalid_blocks} invalid, {m.total_lines} line(s)")
        _echo_blocks(result)


def convert_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file or directory to convert")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    ):
    """Convert Markdown into editor document-tree JSON files."""
    settings = _settings(overrides={"output_dir": out})
    output_dir = Path(settings.output_dir)
    try:
        results = run_convert(path, output_dir, settings.default_ai_model)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Converted {len(results)} document(s) to {output_dir}/")


def check_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file or directory to validate")],
    ):
    """Validate Markdown blocks; exits 1 if any block is invalid."""
    settings = _settings()
    try:
        results = run_parse(path, settings.default_ai_model)
    except RuntimeError as e:
        _fail(str(e))

    invalid = 0
    for src, result in results:
        m = result.metadata
        status = "ok" if m.invalid_blocks == 0 else f"{m.invalid_blocks} invalid block(s)"
        typer.echo(f"{src}: {status}")
        _echo_diagnostics(result)
        invalid += m.invalid_blocks

    typer.echo(f"Checked {len(results)} document(s), {invalid} invalid block(s)")
    if invalid:
        raise typer.Exit(1)


def export_cmd(
    path: Annotated[str, typer.Argument(help="Root document (.md or .json)")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    root_id: Annotated[Optional[str], typer.Option("--root-id", help="Id of the root document")] = None,
    ):
    """Export a document and every document it links to as a static HTML zip archive."""
    settings = _settings(overrides={"output_dir": out})
    if not Path(path).is_file():
        _fail(f"No such file: {path}")
    try:
        archive_path = run_export(path, settings, root_id)
    except RuntimeError as e:
        _fail(str(e))
    typer.echo(f"Exported {path} -> {archive_path}")
