"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from notakit.config import MATH_FONTS_CSS, load_config


def test_load_config_defaults():
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.output_dir == "dist"
    assert settings.pages_dir == "pages"
    assert settings.assets_dir == "assets"
    assert settings.math_stylesheet_url == MATH_FONTS_CSS
    assert settings.log_level == "WARNING"


def test_load_config_uses_env_output_dir(monkeypatch):
    """NOTAKIT_OUTPUT_DIR env var is picked up by load_config."""
    monkeypatch.setenv("NOTAKIT_OUTPUT_DIR", "exports")
    assert load_config().output_dir == "exports"


def test_load_config_reads_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("default_ai_model: local-llm\nparser_config: commonmark\n")
    settings = load_config()
    assert settings.default_ai_model == "local-llm"
    assert settings.parser_config == "commonmark"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """NOTAKIT_OUTPUT_DIR takes precedence over config.yaml output_dir."""
    (tmp_path / "config.yaml").write_text("output_dir: from-yaml\n")
    monkeypatch.setenv("NOTAKIT_OUTPUT_DIR", "from-env")
    assert load_config().output_dir == "from-env"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("NOTAKIT_OUTPUT_DIR", "from-env")
    assert load_config(overrides={"output_dir": "from-cli"}).output_dir == "from-cli"
    assert load_config(overrides={"output_dir": None}).output_dir == "from-env"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_env_log_level(monkeypatch):
    monkeypatch.setenv("NOTAKIT_LOG_LEVEL", "DEBUG")
    assert load_config().log_level == "DEBUG"


def test_invalid_log_level_rejected(monkeypatch):
    monkeypatch.setenv("NOTAKIT_LOG_LEVEL", "LOUD")
    with pytest.raises(ValidationError):
        load_config()


@pytest.mark.parametrize("pattern", [r"/nota/[a-z]+", r"/nota/(unclosed"])
def test_invalid_internal_link_pattern_rejected(pattern):
    """The pattern must compile and capture the document id in group 1."""
    with pytest.raises(ValidationError, match="internal_link_pattern"):
        load_config(overrides={"internal_link_pattern": pattern})


def test_custom_internal_link_pattern():
    settings = load_config(overrides={"internal_link_pattern": r"#doc-(\w+)"})
    assert settings.internal_link_pattern == r"#doc-(\w+)"
