"""Loading export documents from Markdown or JSON files on disk"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from notakit.core.convert import convert_to_tiptap, to_document
from notakit.core.models import ExportDocument
from notakit.core.parse import MarkdownParser
from notakit.core.utils.slug import safe_id


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
MD_EXTENSIONS = ('.md', '.markdown')
SOURCE_EXTENSIONS = MD_EXTENSIONS + ('.json',)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def _from_markdown(path: Path, parser: MarkdownParser) -> ExportDocument:
    fm, body = split_frontmatter(path.read_text(encoding='utf-8'))
    result = parser.parse(body)
    if result.metadata.invalid_blocks:
        logger.warning("%s: %d invalid block(s)", path, result.metadata.invalid_blocks)
    return ExportDocument(
        id=str(fm.get("id") or path.stem),
        title=str(fm.get("title") or path.stem),
        content=to_document(convert_to_tiptap(result.blocks)),
        citations=fm.get("citations") or [],
    )


def _from_json(path: Path) -> ExportDocument:
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid document in {path}: expected an object")
    if data.get("type") == "doc":
        return ExportDocument(id=path.stem, title=path.stem, content=data)
    return ExportDocument.model_validate({"id": path.stem, "title": path.stem, **data})


def load_document(path: Path, parser: MarkdownParser = None) -> ExportDocument:
    """Load a .md (optional YAML frontmatter: id, title, citations) or .json document.

    Raises ValueError for unsupported suffixes and malformed content.
    """
    path = Path(path)
    if path.suffix in MD_EXTENSIONS:
        return _from_markdown(path, parser or MarkdownParser())
    if path.suffix == '.json':
        return _from_json(path)
    raise ValueError(f"Unsupported document type: {path.suffix or path.name}")


class DirectoryFetcher:
    """Async fetch capability resolving ids to sibling <id>.md / <id>.json files."""

    def __init__(self, directory: Path, parser: MarkdownParser = None):
        self.directory = Path(directory)
        self.parser = parser or MarkdownParser()

    def find(self, doc_id: str) -> Optional[Path]:
        if safe_id(doc_id) != doc_id:
            return None
        for suffix in SOURCE_EXTENSIONS:
            candidate = self.directory / f"{doc_id}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    async def __call__(self, doc_id: str) -> Optional[ExportDocument]:
        path = self.find(doc_id)
        if path is None:
            return None
        doc = await asyncio.to_thread(load_document, path, self.parser)
        logger.debug("Fetched %r from %s", doc_id, path)
        return doc
