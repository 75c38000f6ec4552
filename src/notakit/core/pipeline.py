"""Pipeline step functions behind the CLI: parse, convert, and export files"""

import asyncio
import json
from pathlib import Path

from notakit.config import Settings
from notakit.core.convert import convert_to_tiptap, to_document
from notakit.core.models import ParsingResult
from notakit.core.parse import MarkdownParser
from notakit.core.utils.slug import archive_name
from notakit.export.sources import MD_EXTENSIONS, DirectoryFetcher, load_document
from notakit.export.walker import Exporter


def discover_files(path: Path) -> list[Path]:
    """Return sorted Markdown files under path, or [path] if it is a Markdown file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def run_parse(path: str, ai_model: str = "gpt-4") -> list[tuple[Path, ParsingResult]]:
    """Parse every Markdown file under path. Returns (source_path, result) pairs."""
    parser = MarkdownParser(ai_model=ai_model)
    results = []
    for p in discover_files(Path(path)):
        try:
            results.append((p, parser.parse(p.read_text(encoding='utf-8'))))
        except Exception as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e
    return results


def run_convert(path: str, output_dir: Path, ai_model: str = "gpt-4") -> list[tuple[Path, Path]]:
    """Write a document-tree JSON file per Markdown file. Returns (source_path, json_path) pairs."""
    output_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for p, parsed in run_parse(path, ai_model):
        out_file = output_dir / f"{p.stem}.json"
        try:
            doc = to_document(convert_to_tiptap(parsed.blocks))
            out_file.write_text(json.dumps(doc, indent=2), encoding='utf-8')
        except Exception as e:
            raise RuntimeError(f"Failed to convert {p}: {e}") from e
        results.append((p, out_file))
    return results


def run_export(path: str, settings: Settings, root_id: str = None) -> Path:
    """Export the document at path, following links to sibling files, into a zip archive.

    Returns the archive path (<output_dir>/<title>_export.zip).
    """
    source = Path(path)
    parser = MarkdownParser(ai_model=settings.default_ai_model)
    try:
        root = load_document(source, parser)
        if root_id:
            root = root.model_copy(update={"id": root_id})
        data = asyncio.run(Exporter(settings).export_document(root, DirectoryFetcher(source.parent, parser)))
    except Exception as e:
        raise RuntimeError(f"Failed to export {source}: {e}") from e

    output_dir = Path(settings.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    archive_path = output_dir / archive_name(root.title)
    archive_path.write_bytes(data)
    return archive_path
