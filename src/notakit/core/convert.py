"""Conversion of parsed blocks into editor document-tree nodes"""

import logging
from typing import Any, Callable

from notakit.core.models import ParsedBlock
from notakit.core.utils.hashing import sha256


logger = logging.getLogger(__name__)

Node = dict[str, Any]


def _text(text: str, marks: list[dict] = None) -> Node:
    node = {"type": "text", "text": text}
    if marks:
        node["marks"] = marks
    return node


def _paragraph(text: str, marks: list[dict] = None) -> Node:
    return {"type": "paragraph", "content": [_text(text, marks)]}


def _text_content(text: str) -> list[Node]:
    """Editor text nodes must be non-empty; an empty body has no content."""
    return [_text(text)] if text else []


def _heading(block: ParsedBlock) -> Node:
    a = block.attributes
    return {"type": "heading", "attrs": {"level": a["level"]}, "content": _text_content(a["text"])}


def _text_block(block: ParsedBlock) -> Node:
    # inline $...$ stays literal; the editor re-interprets it on insert
    content = (block.attributes.get("content") or '').strip()
    return _paragraph(content or ' ')


def _code(block: ParsedBlock) -> Node:
    a = block.attributes
    return {"type": "codeBlock", "attrs": {"language": a["language"]}, "content": _text_content(a["content"])}


def _math(block: ParsedBlock) -> Node:
    a = block.attributes
    return {"type": "math", "attrs": {"latex": a["latex"], "displayMode": a.get("display_mode", True)}}


def _table(block: ParsedBlock) -> Node:
    """notaTable node; ids derive from the source text and positions so re-conversion is stable."""
    a = block.attributes
    columns = [{"id": f"col-{i}", "title": h, "type": "text"} for i, h in enumerate(a["headers"])]
    rows = [
        {
            "id": f"row-{r}",
            "cells": {col["id"]: (row[i] if i < len(row) else '') for i, col in enumerate(columns)},
        }
        for r, row in enumerate(a["rows"])
    ]
    table_id = f"table-{sha256(block.metadata.raw_text)[:12]}"
    return {
        "type": "notaTable",
        "attrs": {"tableData": {"id": table_id, "name": "Markdown Table", "columns": columns, "rows": rows}},
    }


def _quote(block: ParsedBlock) -> Node:
    return {"type": "blockquote", "content": [_paragraph(block.attributes["content"])]}


def _list(block: ParsedBlock) -> Node:
    a = block.attributes
    return {
        "type": "orderedList" if a["list_type"] == "ordered" else "bulletList",
        "content": [{"type": "listItem", "content": [_paragraph(item)]} for item in a["items"]],
    }


def _link(block: ParsedBlock) -> Node:
    a = block.attributes
    return _paragraph(a["text"], marks=[{"type": "link", "attrs": {"href": a["url"]}}])


def _image(block: ParsedBlock) -> Node:
    a = block.attributes
    image = {"src": a["src"], "alt": a["alt"], "title": a["title"]}
    return {"type": "subfigure", "attrs": {"images": [image], "layout": "horizontal"}}


def _images(block: ParsedBlock) -> Node:
    return {"type": "subfigure", "attrs": {"images": list(block.attributes["images"]), "layout": "horizontal"}}


def _executable(block: ParsedBlock) -> Node:
    a = block.attributes
    return {
        "type": "executableCodeBlock",
        "attrs": {"language": a["language"], **a.get("options", {})},
        "content": _text_content(a["content"]),
    }


def _simple(node_type: str, **names: str) -> Callable[[ParsedBlock], Node]:
    """Node whose attrs copy block attributes, renamed node_attr=block_attr."""
    def convert(block: ParsedBlock) -> Node:
        return {"type": node_type, "attrs": {k: block.attributes.get(v) for k, v in names.items()}}
    return convert


def _mermaid(block: ParsedBlock) -> Node:
    return {"type": "mermaid", "attrs": {"content": block.attributes["content"], "theme": "default"}}


def _citation(block: ParsedBlock) -> Node:
    return {"type": "citation", "attrs": {"citationKey": block.attributes["citation_key"], "citationData": {}}}


def _youtube(block: ParsedBlock) -> Node:
    return {"type": "youtube", "attrs": {"videoId": block.attributes["video_id"], "title": ''}}


def _theorem(block: ParsedBlock) -> Node:
    a = block.attributes
    return {
        "type": "theorem",
        "attrs": {"title": a["title"], "content": a["content"], "theoremType": "theorem", "tags": []},
    }


def _ai_generation(block: ParsedBlock) -> Node:
    a = block.attributes
    return {
        "type": "aiGeneration",
        "attrs": {"prompt": a["prompt"], "model": a["model"], "timestamp": a["timestamp"]},
    }


CONVERTERS: dict[str, Callable[[ParsedBlock], Node]] = {
    "heading":             _heading,
    "text":                _text_block,
    "code":                _code,
    "math":                _math,
    "table":               _table,
    "quote":               _quote,
    "list":                _list,
    "horizontalRule":      lambda block: {"type": "horizontalRule"},
    "link":                _link,
    "image":               _image,
    "multipleImages":      _images,
    "executableCodeBlock": _executable,
    "mermaid":             _mermaid,
    "citation":            _citation,
    "bibliography":        _simple("bibliography", citations="citations"),
    "youtube":             _youtube,
    "theorem":             _theorem,
    "aiGeneration":        _ai_generation,
    "confusionMatrix":     _simple("confusionMatrix", matrixData="matrix_data", title="title", source="source"),
    "pipeline":            _simple("pipeline", title="title", description="description", nodes="nodes", edges="edges"),
    "drawio":              _simple("drawio", diagramData="diagram_data", width="width", height="height"),
}


def convert_block(block: ParsedBlock) -> Node:
    """Map one block to its document node; unknown types echo raw content as a paragraph."""
    converter = CONVERTERS.get(block.type)
    if converter is None:
        logger.debug("No converter for block type %r, falling back to paragraph", block.type)
        return _paragraph(block.content or ' ')
    return converter(block)


def convert_to_tiptap(blocks: list[ParsedBlock]) -> list[Node]:
    """Convert blocks to document nodes, preserving order."""
    return [convert_block(b) for b in blocks]


def to_document(nodes: list[Node]) -> Node:
    """Wrap top-level nodes in a doc node."""
    return {"type": "doc", "content": nodes}
