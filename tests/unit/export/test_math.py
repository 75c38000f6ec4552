"""Unit tests for export/math.py"""

from notakit.export.math import LatexRenderer, MathConfig


def test_render_inline_and_block():
    renderer = LatexRenderer()
    inline = renderer.render("x^2")
    block = renderer.render("x^2", display_mode=True)
    assert inline.startswith("<math")
    assert "<msup>" in inline
    assert 'display="block"' in block


def test_macros_are_expanded():
    renderer = LatexRenderer(MathConfig(macros={r"\RR": r"\mathbb{R}"}))
    assert renderer._expand(r"x \in \RR") == r"x \in \mathbb{R}"
    assert renderer._expand(r"\RRx") == r"\RRx"


def test_too_long_source_falls_back_to_error_span():
    renderer = LatexRenderer(MathConfig(max_length=3))
    assert renderer.try_render("x^2+1") is None
    assert renderer.render("x<y+1") == (
        '<span class="math-error" style="color:#cc0000" title="Invalid LaTeX">x&lt;y+1</span>'
    )


class _BrokenRenderer(LatexRenderer):
    def _convert(self, latex, display_mode):
        raise RuntimeError("parse error")


def test_render_never_raises(caplog):
    renderer = _BrokenRenderer(MathConfig(error_color="red"))
    assert renderer.render(r"\frac{") == (
        r'<span class="math-error" style="color:red" title="Invalid LaTeX">\frac{</span>'
    )
    assert "Could not render LaTeX" in caplog.text
