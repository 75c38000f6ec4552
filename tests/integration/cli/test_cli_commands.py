"""Integration tests for the parse, convert, check and export commands"""

import json
import zipfile

from typer.testing import CliRunner

from notakit.cli.cli import app


runner = CliRunner()


def test_parse_cmd_lists_blocks(tmp_path):
    (tmp_path / "hello.md").write_text("# Hello\n\nWorld\n")
    result = runner.invoke(app, ["parse", "hello.md"])
    assert result.exit_code == 0, result.output
    assert "hello.md: 2 block(s), 0 invalid, 4 line(s)" in result.output
    assert "heading" in result.output


def test_parse_cmd_json(tmp_path):
    (tmp_path / "hello.md").write_text("# Hello\n")
    result = runner.invoke(app, ["parse", "hello.md", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["blocks"][0]["type"] == "heading"
    assert data["metadata"]["valid_blocks"] == 1


def test_parse_cmd_no_files(tmp_path):
    result = runner.invoke(app, ["parse", "missing"])
    assert result.exit_code == 1
    assert "No Markdown files found at missing" in result.output


def test_convert_cmd_writes_json(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "a.md").write_text("# A\n")
    (tmp_path / "docs" / "b.md").write_text("text\n")
    result = runner.invoke(app, ["convert", "docs", "--out-dir", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert "Converted 2 document(s)" in result.output
    doc = json.loads((tmp_path / "out" / "a.json").read_text())
    assert doc["content"][0]["type"] == "heading"


def test_check_cmd_ok(tmp_path):
    (tmp_path / "ok.md").write_text("# Fine\n")
    result = runner.invoke(app, ["check", "ok.md"])
    assert result.exit_code == 0, result.output
    assert "ok.md: ok" in result.output
    assert "Checked 1 document(s), 0 invalid block(s)" in result.output


def test_check_cmd_fails_on_invalid_blocks(tmp_path):
    (tmp_path / "bad.md").write_text("```python\n\n```\n")
    result = runner.invoke(app, ["check", "bad.md"])
    assert result.exit_code == 1
    assert "bad.md: 1 invalid block(s)" in result.output
    assert "error: Code block content cannot be empty" in result.output


def test_export_cmd_writes_archive(tmp_path):
    (tmp_path / "root.md").write_text("---\ntitle: My Notes\n---\n# Notes\n\n[child](/nota/child)\n")
    (tmp_path / "child.md").write_text("# Child\n")
    result = runner.invoke(app, ["export", "root.md", "--out-dir", "exports"])
    assert result.exit_code == 0, result.output
    archive = tmp_path / "exports" / "my_notes_export.zip"
    assert archive.exists()
    with zipfile.ZipFile(archive) as zf:
        assert {"index.html", "pages/child.html"} <= set(zf.namelist())


def test_export_cmd_missing_file(tmp_path):
    result = runner.invoke(app, ["export", "nope.md"])
    assert result.exit_code == 1
    assert "No such file: nope.md" in result.output


def test_invalid_config_yaml_fails_cleanly(tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    (tmp_path / "a.md").write_text("# A\n")
    result = runner.invoke(app, ["parse", "a.md"])
    assert result.exit_code == 1
    assert "Error: Invalid config.yaml" in result.output
