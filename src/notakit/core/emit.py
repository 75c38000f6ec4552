"""Serialize editor document nodes back to Markdown the parser recognizes"""

import json
from typing import Any, Callable

Node = dict[str, Any]


def _plain(node: Node) -> str:
    """Concatenate the text of node and its descendants."""
    if node.get("type") == "text":
        return node.get("text", '')
    return ''.join(_plain(child) for child in node.get("content", []))


def _inline(node: Node) -> str:
    """Paragraph text with link marks written back as [text](href)."""
    parts = []
    for child in node.get("content", []):
        text = _plain(child)
        link = next((m for m in child.get("marks", []) if m.get("type") == "link"), None)
        parts.append(f"[{text}]({link['attrs']['href']})" if link else text)
    return ''.join(parts)


def _fence(info: str, body: str) -> str:
    return f"```{info}\n{body}\n```"


def _list(node: Node, ordered: bool) -> str:
    items = [_inline(item["content"][0]) if item.get("content") else '' for item in node.get("content", [])]
    return '\n'.join(f"{i + 1}. {t}" if ordered else f"- {t}" for i, t in enumerate(items))


def _table(node: Node) -> str:
    data = node["attrs"]["tableData"]
    columns = data.get("columns", [])
    lines = [
        "| " + " | ".join(c["title"] for c in columns) + " |",
        "|" + "|".join("---" for _ in columns) + "|",
    ]
    for row in data.get("rows", []):
        lines.append("| " + " | ".join(str(row["cells"].get(c["id"], '')) for c in columns) + " |")
    return '\n'.join(lines)


def _image(image: dict) -> str:
    title = f' "{image["title"]}"' if image.get("title") else ''
    return f"![{image.get('alt', '')}]({image['src']}{title})"


def _executable(node: Node) -> str:
    attrs = dict(node.get("attrs", {}))
    language = attrs.pop("language", "python")
    options = ", ".join(f"{k}={v}" for k, v in attrs.items() if v not in (None, ''))
    info = "{" + language + (f", {options}" if options else '') + "}"
    return _fence(info, _plain(node))


def _theorem(node: Node) -> str:
    attrs = node["attrs"]
    title = attrs.get("title") or ''
    option = f"[{title}]" if title and title != "Theorem" else ''
    return f"\\begin{{theorem}}{option}\n{attrs.get('content', '')}\n\\end{{theorem}}"


def _confusion_matrix(node: Node) -> str:
    data = node["attrs"].get("matrixData")
    return _fence("confusion-matrix", data if isinstance(data, str) else json.dumps(data))


EMITTERS: dict[str, Callable[[Node], str]] = {
    "heading":             lambda n: f"{'#' * n['attrs']['level']} {_plain(n)}",
    "paragraph":           _inline,
    "codeBlock":           lambda n: _fence(n["attrs"].get("language") or '', _plain(n)),
    "executableCodeBlock": _executable,
    "math":                lambda n: f"$$\n{n['attrs']['latex']}\n$$",
    "notaTable":           _table,
    "blockquote":          lambda n: '\n'.join(f"> {_inline(p)}" for p in n.get("content", [])),
    "bulletList":          lambda n: _list(n, ordered=False),
    "orderedList":         lambda n: _list(n, ordered=True),
    "horizontalRule":      lambda n: "---",
    "subfigure":           lambda n: '\n'.join(_image(i) for i in n["attrs"].get("images", [])),
    "mermaid":             lambda n: _fence("mermaid", n["attrs"]["content"]),
    "citation":            lambda n: f"@{n['attrs']['citationKey']}",
    "bibliography":        lambda n: ' '.join(f"@{k}" for k in n["attrs"].get("citations", [])),
    "youtube":             lambda n: f"![youtube](https://www.youtube.com/watch?v={n['attrs']['videoId']})",
    "theorem":             _theorem,
    "aiGeneration":        lambda n: _fence("ai", n["attrs"].get("prompt", '')),
    "confusionMatrix":     _confusion_matrix,
    "pipeline":            lambda n: _fence("pipeline", n["attrs"].get("description", '')),
    "drawio":              lambda n: _fence("drawio", n["attrs"].get("diagramData", '')),
}


def emit_markdown(nodes: list[Node]) -> str:
    """Return Markdown for top-level nodes, separated by blank lines.

    Accepts a list of nodes or a doc node. Unknown node types emit their plain text.
    """
    if isinstance(nodes, dict):
        nodes = nodes.get("content", [])
    parts = []
    for node in nodes:
        emitter = EMITTERS.get(node.get("type"), _plain)
        if text := emitter(node):
            parts.append(text)
    return "\n\n".join(parts) + "\n" if parts else ''
