"""Unit tests for core/emit.py"""

import pytest

from notakit.core.convert import convert_to_tiptap, to_document
from notakit.core.emit import emit_markdown
from notakit.core.parse import parse_markdown


def _types(text: str) -> list[str]:
    return [n["type"] for n in convert_to_tiptap(parse_markdown(text).blocks)]


@pytest.mark.parametrize("text", [
    "# Title\n\nSome text\n\n```python\nprint(1)\n```\n\n- a\n- b\n",
    "1. first\n2. second\n\n> quoted\n\n---\n",
    "$$\nE = mc^2\n$$\n\n| a | b |\n|---|---|\n| 1 | 2 |\n",
    '![cat](cat.png "Nap")\n\n```mermaid\ngraph TD\n```\n',
    "\\begin{theorem}[Euclid]\nThere are infinitely many primes.\n\\end{theorem}\n\n@doe2020 @smith2021\n",
    "```{python, timeout=5}\nx = 1\n```\n\n[site](https://example.com)\n",
])
def test_round_trip_preserves_node_types(text):
    nodes = convert_to_tiptap(parse_markdown(text).blocks)
    assert _types(emit_markdown(nodes)) == [n["type"] for n in nodes]


def test_emit_accepts_doc_node():
    doc = to_document([{"type": "heading", "attrs": {"level": 2}, "content": [{"type": "text", "text": "Hi"}]}])
    assert emit_markdown(doc) == "## Hi\n"


def test_emit_table():
    nodes = convert_to_tiptap(parse_markdown("| a | b |\n|---|---|\n| 1 | 2 |").blocks)
    assert emit_markdown(nodes) == "| a | b |\n|---|---|\n| 1 | 2 |\n"


def test_emit_link_paragraph():
    node = {"type": "paragraph", "content": [
        {"type": "text", "text": "site", "marks": [{"type": "link", "attrs": {"href": "https://x.org"}}]},
    ]}
    assert emit_markdown([node]) == "[site](https://x.org)\n"


def test_emit_unknown_node_uses_text():
    node = {"type": "callout", "content": [{"type": "text", "text": "note"}]}
    assert emit_markdown([node]) == "note\n"


def test_emit_empty():
    assert emit_markdown([]) == ''
