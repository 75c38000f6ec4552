"""Document-tree -> BeautifulSoup rendering with a per-node-type extension set"""

import json
import logging
from typing import Any, Callable, Union

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

from notakit.export.markup import new_document


logger = logging.getLogger(__name__)

DocNode = dict[str, Any]
Rendered = Union[PageElement, list[PageElement]]
Extension = Callable[[BeautifulSoup, DocNode, list[PageElement]], Rendered]


def _attrs(node: DocNode) -> dict[str, Any]:
    return node.get("attrs") or {}


def _tag(soup: BeautifulSoup, name: str, attrs: dict[str, str] = None, children: list[PageElement] = ()) -> Tag:
    tag = soup.new_tag(name, attrs=attrs or {})
    tag.extend(list(children))
    return tag


def _wrap(name: str) -> Extension:
    """Extension that wraps rendered children in a single tag."""
    return lambda soup, node, children: _tag(soup, name, children=children)


def _heading(soup, node, children):
    level = min(max(int(_attrs(node).get("level") or 1), 1), 6)
    return _tag(soup, f"h{level}", children=children)


def _ordered_list(soup, node, children):
    start = _attrs(node).get("start")
    return _tag(soup, "ol", {"start": str(start)} if start not in (None, 1) else {}, children)


def _code_block(soup, node, children):
    language = _attrs(node).get("language")
    code = _tag(soup, "code", {"class": f"language-{language}"} if language else {}, children)
    return _tag(soup, "pre", children=[code])


def _image(soup, node, children):
    a = _attrs(node)
    attrs = {"src": a.get("src") or ''}
    if a.get("alt"):
        attrs["alt"] = a["alt"]
    if a.get("title"):
        attrs["title"] = a["title"]
    return _tag(soup, "img", attrs)


def _math(soup, node, children):
    a = _attrs(node)
    display = a.get("displayMode", True)
    return _tag(soup, "div", {
        "data-type": "math",
        "data-latex": a.get("latex") or '',
        "data-display": "true" if display else "false",
    })


def _citation(soup, node, children):
    a = _attrs(node)
    attrs = {"data-type": "citation", "data-citation-key": a.get("citationKey") or ''}
    number = a.get("citationNumber")
    if number is not None:
        attrs["data-citation-number"] = str(number)
    return _tag(soup, "span", attrs, [NavigableString(f"[{number if number is not None else '?'}]")])


def _bibliography(soup, node, children):
    keys = _attrs(node).get("citations") or []
    return _tag(soup, "div", {"data-type": "bibliography", "data-citations": ",".join(keys)})


def _theorem(soup, node, children):
    a = _attrs(node)
    return _tag(soup, "div", {
        "data-type": "theorem",
        "data-title": a.get("title") or '',
        "data-theorem-type": a.get("theoremType") or "theorem",
        "data-content": a.get("content") or '',
    })


def _nota_table(soup, node, children):
    data = _attrs(node).get("tableData") or {}
    return _tag(soup, "div", {"data-type": "data-table", "data-table-data": json.dumps(data)})


def _confusion_matrix(soup, node, children):
    a = _attrs(node)
    data, labels = a.get("matrixData"), a.get("labels")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            pass
    if isinstance(data, dict):
        labels = labels or data.get("labels")
        data = data.get("matrix")

    attrs = {"data-title": a.get("title") or "Confusion Matrix"}
    if data is not None:
        attrs["data-matrix"] = data if isinstance(data, str) else json.dumps(data)
    if labels is not None:
        attrs["data-labels"] = json.dumps(labels)
    return _tag(soup, "confusion-matrix", attrs)


def _pipeline(soup, node, children):
    return _tag(soup, "div", {"data-type": "pipeline", "title": _attrs(node).get("title") or ''})


def _drawio(soup, node, children):
    return _tag(soup, "div", {"class": "drawio-diagram", "data-diagram": _attrs(node).get("diagramData") or ''})


def _mermaid(soup, node, children):
    return _tag(soup, "div", {"data-type": "mermaid", "data-content": _attrs(node).get("content") or ''})


def _youtube(soup, node, children):
    return _tag(soup, "div", {"data-type": "youtube", "data-video-id": _attrs(node).get("videoId") or ''})


def _sub_nota_link(soup, node, children):
    a = _attrs(node)
    title = a.get("targetNotaTitle") or ''
    return _tag(soup, "span", {
        "data-type": "sub-nota-link",
        "data-target-nota-id": a.get("targetNotaId") or '',
        "data-target-nota-title": title,
    }, [NavigableString(title)] if title else children)


def _executable_code(soup, node, children):
    a = _attrs(node)
    parts: list[PageElement] = [_code_block(soup, node, children)]
    if a.get("output"):
        parts.append(_tag(soup, "div", {"class": "export-code-output", "data-output": a["output"]}))
    return _tag(soup, "div", {"class": "executable-code-block"}, parts)


def _subfigure(soup, node, children):
    a = _attrs(node)
    images = [_image(soup, {"attrs": image}, []) for image in a.get("images") or []]
    figure = _tag(soup, "figure", {"class": "subfigure", "data-layout": a.get("layout") or "horizontal"}, images)
    if a.get("caption"):
        figure.append(soup.new_tag("figcaption", string=a["caption"]))
    return figure


def _ai_generation(soup, node, children):
    a = _attrs(node)
    return _tag(soup, "div", {"data-type": "ai-generation", "data-model": a.get("model") or ''},
                [soup.new_tag("p", string=a.get("prompt") or '')])


def default_extensions() -> dict[str, Extension]:
    """Node renderers mirroring the editor's node names."""
    return {
        "paragraph":           _wrap("p"),
        "heading":             _heading,
        "blockquote":          _wrap("blockquote"),
        "bulletList":          _wrap("ul"),
        "orderedList":         _ordered_list,
        "listItem":            _wrap("li"),
        "codeBlock":           _code_block,
        "horizontalRule":      lambda soup, node, children: soup.new_tag("hr"),
        "hardBreak":           lambda soup, node, children: soup.new_tag("br"),
        "image":               _image,
        "table":               _wrap("table"),
        "tableRow":            _wrap("tr"),
        "tableHeader":         _wrap("th"),
        "tableCell":           _wrap("td"),
        "math":                _math,
        "citation":            _citation,
        "bibliography":        _bibliography,
        "theorem":             _theorem,
        "notaTable":           _nota_table,
        "confusionMatrix":     _confusion_matrix,
        "pipeline":            _pipeline,
        "drawio":              _drawio,
        "mermaid":             _mermaid,
        "youtube":             _youtube,
        "subNotaLink":         _sub_nota_link,
        "executableCodeBlock": _executable_code,
        "subfigure":           _subfigure,
        "aiGeneration":        _ai_generation,
    }


MARKS: dict[str, Callable[[BeautifulSoup, dict], Tag]] = {
    "bold":        lambda soup, a: soup.new_tag("strong"),
    "italic":      lambda soup, a: soup.new_tag("em"),
    "code":        lambda soup, a: soup.new_tag("code"),
    "strike":      lambda soup, a: soup.new_tag("s"),
    "underline":   lambda soup, a: soup.new_tag("u"),
    "superscript": lambda soup, a: soup.new_tag("sup"),
    "subscript":   lambda soup, a: soup.new_tag("sub"),
    "link":        lambda soup, a: soup.new_tag("a", attrs={"href": a.get("href") or ''}),
}


def _text(soup: BeautifulSoup, node: DocNode) -> PageElement:
    out: PageElement = NavigableString(node.get("text", ''))
    for mark in reversed(node.get("marks") or []):
        make = MARKS.get(mark.get("type"))
        if make is None:
            continue
        wrapper = make(soup, mark.get("attrs") or {})
        wrapper.append(out)
        out = wrapper
    return out


def _render(soup: BeautifulSoup, node: DocNode, extensions: dict[str, Extension]) -> list[PageElement]:
    if node.get("type") == "text":
        return [_text(soup, node)]

    children = [c for child in node.get("content") or [] for c in _render(soup, child, extensions)]
    extension = extensions.get(node.get("type"))
    if extension is None:
        logger.debug("No extension for node type %r, rendering children only", node.get("type"))
        return children
    rendered = extension(soup, node, children)
    return rendered if isinstance(rendered, list) else [rendered]


def render_to_html_tree(content: DocNode, extensions: dict[str, Extension] = None) -> BeautifulSoup:
    """Render a doc node (or a single node) into a new soup."""
    extensions = default_extensions() if extensions is None else extensions
    soup = new_document()
    nodes = (content.get("content") or []) if content.get("type") == "doc" else [content]
    for node in nodes:
        soup.extend(_render(soup, node, extensions))
    return soup
