"""Unit tests for core/pipeline.py"""

import io
import json
import zipfile
from pathlib import Path

import pytest

from notakit.config import Settings
from notakit.core.pipeline import discover_files, run_convert, run_export, run_parse


# --- discover_files ---

def test_discover_files_walks_directory(tmp_path):
    (tmp_path / "b.md").write_text("# B\n")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "a.markdown").write_text("# A\n")
    (tmp_path / "notes.txt").write_text("ignored")
    assert discover_files(tmp_path) == sorted([tmp_path / "b.md", tmp_path / "sub" / "a.markdown"])


def test_discover_files_single_file(tmp_path):
    (tmp_path / "one.md").write_text("# One\n")
    (tmp_path / "one.txt").write_text("x")
    assert discover_files(tmp_path / "one.md") == [tmp_path / "one.md"]
    assert discover_files(tmp_path / "one.txt") == []


# --- run_parse ---

def test_run_parse_returns_pairs(tmp_path):
    """run_parse returns one (source_path, result) pair per Markdown file."""
    (tmp_path / "hello.md").write_text("# Hello\n\nWorld\n")
    [(src, result)] = run_parse("hello.md")
    assert src == Path("hello.md")
    assert [b.type for b in result.blocks] == ["heading", "text"]


def test_run_parse_uses_ai_model(tmp_path):
    (tmp_path / "ai.md").write_text("```ai\nSummarize\n```\n")
    [(_, result)] = run_parse("ai.md", ai_model="local-llm")
    assert result.blocks[0].attributes["model"] == "local-llm"


# --- run_convert ---

def test_run_convert_writes_doc_json(tmp_path):
    """run_convert writes one <stem>.json document tree per Markdown file."""
    (tmp_path / "hello.md").write_text("# Hello\n\nWorld\n")
    [(src, out_file)] = run_convert("hello.md", tmp_path / "out")
    assert out_file == tmp_path / "out" / "hello.json"
    doc = json.loads(out_file.read_text())
    assert doc["type"] == "doc"
    assert [n["type"] for n in doc["content"]] == ["heading", "paragraph"]


# --- run_export ---

@pytest.fixture(name="linked_docs")
def linked_docs_fixture(tmp_path):
    (tmp_path / "root.md").write_text("# Home\n\n[child](/nota/child)\n")
    (tmp_path / "child.md").write_text("---\ntitle: Child\n---\n# Child page\n\n[back](/nota/root)\n")
    return tmp_path


def test_run_export_writes_archive(linked_docs):
    """run_export writes <output_dir>/<title>_export.zip holding the root and linked pages."""
    archive = run_export("root.md", Settings(output_dir=str(linked_docs / "dist")))
    assert archive == linked_docs / "dist" / "root_export.zip"

    with zipfile.ZipFile(io.BytesIO(archive.read_bytes())) as zf:
        names = zf.namelist()
        index = zf.read("index.html").decode()
        child = zf.read("pages/child.html").decode()
    assert "pages/child.html" in names
    assert 'href="pages/child.html"' in index
    assert 'href="../index.html"' in child
    assert "<title>Child</title>" in child


def test_run_export_root_id_override(linked_docs):
    archive = run_export("root.md", Settings(output_dir="dist"), root_id="home")
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
    assert "index.html" in names
    assert "pages/root.html" in names


def test_run_export_wraps_failures(tmp_path):
    (tmp_path / "notes.txt").write_text("x")
    with pytest.raises(RuntimeError, match="Failed to export notes.txt"):
        run_export("notes.txt", Settings())
