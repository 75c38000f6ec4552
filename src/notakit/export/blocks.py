"""Static re-rendering of custom block placeholders in an exported HTML document"""

import json
import logging
import re
from collections import defaultdict
from typing import Iterable, Union

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from markdown_it import MarkdownIt

from notakit.core.models import CitationRecord
from notakit.export.citations import format_bibliography_entry, number_citations
from notakit.export.markup import add_class, has_class, parse_fragment
from notakit.export.math import LatexRenderer


logger = logging.getLogger(__name__)

INLINE_MATH_RE = re.compile(r'\$\$([\s\S]+?)\$\$|(?<!\\)\$(?!\s)([^$\n]+?)(?<!\s)\$')
NO_MATH_TAGS = frozenset({"code", "pre", "math", "script", "style"})
MATH_CLASSES = ("math-block", "math-inline", "math-display", "math-error")


def _el(soup: BeautifulSoup, name: str, text: str = None, **attrs: str) -> Tag:
    """Tag with optional text; class_ maps to the class attribute."""
    if "class_" in attrs:
        attrs["class"] = attrs.pop("class_")
    return soup.new_tag(name, attrs=attrs, string=text)


def _wrap(soup: BeautifulSoup, name: str, children: Iterable[PageElement], **attrs: str) -> Tag:
    tag = _el(soup, name, **attrs)
    tag.extend(list(children))
    return tag


def _set_children(tag: Tag, children: Iterable[PageElement]) -> None:
    tag.clear()
    tag.extend(list(children))


def _is_citation(tag: Tag) -> bool:
    return tag.name == "span" and tag.get("data-type") == "citation"


def _skip_inline_math(node: NavigableString) -> bool:
    return any(
        parent.name in NO_MATH_TAGS or any(has_class(parent, c) for c in MATH_CLASSES)
        for parent in node.parents
    )


class BlockRenderer:
    """Replaces placeholders left by the document renderer with static markup, in place."""

    def __init__(self, latex: LatexRenderer = None, markdown: MarkdownIt = None, parser_config: str = "gfm-like"):
        self.latex = latex or LatexRenderer()
        self.markdown = markdown or MarkdownIt(parser_config, options_update={"linkify": False})

    def render(
        self,
        root: BeautifulSoup,
        citations: Iterable[Union[CitationRecord, dict]] = None,
        ) -> BeautifulSoup:
        """Render every custom block under root; returns root for chaining."""
        self.render_math(root)
        self.render_tables(root)
        self.render_confusion_matrices(root)
        self.render_theorems(root)
        self.render_pipelines(root)
        self.render_diagrams(root)
        self.render_youtube(root)
        self.render_citations(root, citations)
        self.render_inline_math(root)
        return root

    # --- math ---

    def _math_node(self, root: BeautifulSoup, latex: str, display: bool) -> Tag:
        markup = self.latex.render(latex, display)
        return _wrap(root, "div" if display else "span", parse_fragment(markup),
                     class_="math-block" if display else "math-inline")

    def render_math(self, root: BeautifulSoup) -> None:
        for div in root.find_all("div", attrs={"data-type": "math"}):
            display = div.get("data-display") != "false"
            div.replace_with(self._math_node(root, div.get("data-latex") or '', display))

    def render_inline_math(self, root: BeautifulSoup) -> None:
        """Render $..$ and $$..$$ spans in text nodes; unrenderable spans stay as raw text."""
        for node in root.find_all(string=re.compile(r'\$')):
            if type(node) is not NavigableString or _skip_inline_math(node):
                continue
            text = str(node)
            parts: list[PageElement] = []
            pos, rendered = 0, False
            for m in INLINE_MATH_RE.finditer(text):
                display = m.group(1) is not None
                markup = self.latex.try_render((m.group(1) if display else m.group(2)).strip(), display)
                if markup is None:
                    continue
                if m.start() > pos:
                    parts.append(NavigableString(text[pos:m.start()]))
                parts.append(_wrap(root, "span", parse_fragment(markup),
                                   class_="math-display" if display else "math-inline"))
                pos, rendered = m.end(), True
            if not rendered:
                continue
            if pos < len(text):
                parts.append(NavigableString(text[pos:]))
            node.replace_with(*parts)

    # --- data blocks ---

    def render_tables(self, root: BeautifulSoup) -> None:
        for div in root.find_all("div", attrs={"data-type": "data-table"}):
            try:
                data = json.loads(div.get("data-table-data") or '')
                columns, rows = data["columns"], data["rows"]
                head = _el(root, "tr")
                for col in columns:
                    head.append(_el(root, "th", str(col.get("title", ''))))
                body = _el(root, "tbody")
                for row in rows:
                    tr = _el(root, "tr")
                    cells = row.get("cells") or {}
                    for col in columns:
                        value = cells.get(col["id"])
                        tr.append(_el(root, "td", '' if value is None else str(value)))
                    body.append(tr)
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning("Leaving data table unrendered: %s", e)
                continue
            div.replace_with(_wrap(root, "table", [_wrap(root, "thead", [head]), body], class_="nota-data-table"))

    def _matrix_table(self, root: BeautifulSoup, matrix: list, labels: list) -> Tag:
        head = _el(root, "tr")
        head.append(_el(root, "th"))
        for label in labels:
            head.append(_el(root, "th", str(label)))
        body = _el(root, "tbody")
        for i, row in enumerate(matrix):
            tr = _el(root, "tr")
            tr.append(_el(root, "th", str(labels[i])))
            for j, value in enumerate(row):
                cell = _el(root, "td", str(value))
                if i == j:
                    add_class(cell, "confusion-matrix-cell-high")
                elif value:
                    add_class(cell, "confusion-matrix-cell-low")
                tr.append(cell)
            body.append(tr)
        return _wrap(root, "table", [_wrap(root, "thead", [head]), body], class_="confusion-matrix-table")

    def render_confusion_matrices(self, root: BeautifulSoup) -> None:
        for el in root.find_all("confusion-matrix"):
            container = _el(root, "div", class_="confusion-matrix-block")
            container.append(_el(root, "h4", el.get("data-title") or "Confusion Matrix"))
            matrix, labels = el.get("data-matrix"), el.get("data-labels")
            if matrix and labels:
                try:
                    container.append(self._matrix_table(root, json.loads(matrix), json.loads(labels)))
                except (ValueError, IndexError, TypeError) as e:
                    logger.warning("Confusion matrix rendered without data: %s", e)
            el.replace_with(container)

    # --- prose blocks ---

    def render_theorems(self, root: BeautifulSoup) -> None:
        """Numbered per theorem type: 'Theorem 1 (Title)', 'Lemma 1', ..."""
        counters: dict[str, int] = defaultdict(int)
        for div in root.find_all("div", attrs={"data-type": "theorem"}):
            kind = div.get("data-theorem-type") or "theorem"
            counters[kind] += 1
            header = f"{kind.capitalize()} {counters[kind]}"
            title = div.get("data-title") or ''
            if title and title.lower() != kind.lower():
                header += f" ({title})"
            body = parse_fragment(self.markdown.render(div.get("data-content") or ''))
            div.replace_with(_wrap(root, "div", [
                _el(root, "div", header, class_="theorem-header"),
                _wrap(root, "div", body, class_="theorem-content"),
            ], class_=f"theorem theorem-{kind}"))

    def render_pipelines(self, root: BeautifulSoup) -> None:
        for el in root.find_all("div", attrs={"data-type": "pipeline"}):
            el.replace_with(_wrap(root, "div", [
                _el(root, "h3", el.get("title") or "Execution Pipeline"),
                _el(root, "p", "Pipeline Visualization (Interactive Only)"),
            ], class_="pipeline-placeholder"))

    def render_diagrams(self, root: BeautifulSoup) -> None:
        for el in root.find_all("div", class_="drawio-diagram"):
            el.attrs.pop("data-diagram", None)
            _set_children(el, [_el(root, "div", "Diagram (Interactive Only)", class_="drawio-placeholder")])
        for el in root.find_all("div", attrs={"data-type": "mermaid"}):
            source = el.get("data-content") or ''
            el.replace_with(_wrap(root, "div", [
                _el(root, "p", "Mermaid Diagram (Interactive Only)"),
                _wrap(root, "pre", [_el(root, "code", source, class_="language-mermaid")]),
            ], class_="mermaid-placeholder"))

    def render_youtube(self, root: BeautifulSoup) -> None:
        for el in root.find_all("div", attrs={"data-type": "youtube"}):
            video_id = el.get("data-video-id") or ''
            if video_id:
                inner = _el(root, "a", "Watch on YouTube", href=f"https://www.youtube.com/watch?v={video_id}")
            else:
                inner = _el(root, "p", "YouTube video")
            el.replace_with(_wrap(root, "div", [inner], class_="youtube-embed"))

    # --- citations ---

    def render_citations(self, root: BeautifulSoup, citations: Iterable[Union[CitationRecord, dict]] = None) -> dict[str, int]:
        """Number citations by first appearance and fill bibliography placeholders.

        Only citation spans are counted. Each bibliography lists the cited keys in number
        order and is removed when nothing is cited. Returns the key -> number mapping.
        """
        records: dict[str, CitationRecord] = {}
        for c in citations or []:
            record = c if isinstance(c, CitationRecord) else CitationRecord.model_validate(c)
            records[record.key] = record

        spans = root.find_all(_is_citation)
        numbers = number_citations([span.get("data-citation-key") or '' for span in spans])

        for span in spans:
            n = numbers.get(span.get("data-citation-key") or '')
            if n is None:
                continue
            span["data-citation-number"] = str(n)
            add_class(span, "citation-reference")
            _set_children(span, [_el(root, "a", f"[{n}]", href=f"#ref-{n}")])

        for block in root.find_all(attrs={"data-type": "bibliography"}):
            if not numbers:
                block.decompose()
                continue
            add_class(block, "bibliography-block")
            items = _el(root, "ul", class_="bibliography-list")
            for key, n in sorted(numbers.items(), key=lambda kv: kv[1]):
                items.append(_el(root, "li", format_bibliography_entry(n, records.get(key), key),
                                 id=f"ref-{n}", class_="bibliography-item"))
            _set_children(block, [_el(root, "h2", "References"), items])
        return numbers
