"""Application configuration: settings schema and config.yaml loader"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"
MATH_FONTS_CSS = "https://fred-wang.github.io/MathFonts/LatinModern/mathfonts.css"


class Settings(BaseModel):
    app_name:       str = "notakit"
    output_dir:     str = Field(default="dist",     description="Directory for exported archives")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt preset for theorem bodies")
    assets_dir:     str = Field(default="assets",   description="Archive folder for extracted binaries")
    pages_dir:      str = Field(default="pages",    description="Archive folder for linked documents")
    internal_link_pattern: str = Field(
        default=r"/nota/([A-Za-z0-9_-]+)", description="Regex matching internal document hrefs; group 1 is the id"
    )
    math_stylesheet_url: str = Field(
        default=MATH_FONTS_CSS, description="MathML font stylesheet linked from every exported page; empty for none"
    )
    default_ai_model: str = Field(default="gpt-4", description="Model recorded on parsed ```ai blocks")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator("internal_link_pattern")
    @classmethod
    def _check_link_pattern(cls, value: str) -> str:
        try:
            compiled = re.compile(value)
        except re.error as e:
            raise ValueError(f"internal_link_pattern is not a valid regex: {e}") from e
        if compiled.groups < 1:
            raise ValueError("internal_link_pattern must capture the document id in group 1")
        return value


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then NOTAKIT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"NOTAKIT_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
