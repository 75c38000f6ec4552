"""Static LaTeX -> MathML rendering for exported pages"""

import logging
import re
from html import escape
from typing import Optional

from latex2mathml.converter import convert
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class MathConfig(BaseModel):
    """Per-renderer math settings; passed explicitly, never held globally."""
    macros:      dict[str, str] = Field(default_factory=dict, description=r"Macro expansions, e.g. {'\\RR': '\\mathbb{R}'}")
    error_color: str = Field(default="#cc0000", description="Text color of the fallback error span")
    max_length:  int = Field(default=10_000, ge=1, description="Longer LaTeX sources are refused")


class LatexRenderer:
    """Renders LaTeX to MathML markup with an explicit MathConfig."""

    def __init__(self, config: MathConfig = None):
        self.config = config or MathConfig()
        self._macros = [
            (re.compile(re.escape(name) + r'(?![A-Za-z])'), body)
            for name, body in self.config.macros.items()
        ]

    def _expand(self, latex: str) -> str:
        for pattern, body in self._macros:
            latex = pattern.sub(lambda _: body, latex)
        return latex

    def _convert(self, latex: str, display_mode: bool) -> str:
        if len(latex) > self.config.max_length:
            raise ValueError(f"LaTeX source exceeds {self.config.max_length} characters")
        return convert(self._expand(latex), display="block" if display_mode else "inline")

    def try_render(self, latex: str, display_mode: bool = False) -> Optional[str]:
        """Return MathML markup, or None if the LaTeX could not be rendered."""
        try:
            return self._convert(latex, display_mode)
        except Exception as e:
            logger.warning("Could not render LaTeX %r: %s", latex, e)
            return None

    def render(self, latex: str, display_mode: bool = False) -> str:
        """Return MathML markup, or an error span showing the source; never raises."""
        markup = self.try_render(latex, display_mode)
        if markup is not None:
            return markup
        return (
            f'<span class="math-error" style="color:{escape(self.config.error_color)}" '
            f'title="Invalid LaTeX">{escape(latex)}</span>'
        )
