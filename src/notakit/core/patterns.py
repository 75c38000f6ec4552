"""Block pattern registry: one regex rule per block type, with attribute extraction and validation.

Every pattern is applied to the whole document (multiline mode), never line by
line, so multi-line constructs anchor on their own delimiters. Several patterns
deliberately match the same text at different granularities (``multipleImages``
vs ``image``, ``bibliography`` vs ``citation``, custom fences vs ``code``); the
parser keeps whichever has the lowest ``priority`` when matches start on the
same line.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import urlparse

from notakit.core.models import ValidationResult


Attributes = dict[str, Any]

IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)\s]+)(?:\s+"([^"]+)")?\)')
CITATION_KEY_RE = re.compile(r'(?<!\w)@([A-Za-z0-9_-]+)')
YOUTUBE_ID_RES = (
    re.compile(r'(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([A-Za-z0-9_-]{11})'),
    re.compile(r'^([A-Za-z0-9_-]{11})$'),
)
MERMAID_KEYWORDS = (
    "graph", "flowchart", "sequenceDiagram", "classDiagram", "stateDiagram",
    "erDiagram", "gantt", "pie", "journey", "gitGraph", "mindmap", "timeline",
)


@dataclass(frozen=True)
class BlockPattern:
    """A named rule recognizing one block type."""
    name:       str
    pattern:    re.Pattern
    block_type: str
    priority:   int
    attributes: Callable[[re.Match], Attributes]
    validate:   Callable[[Attributes], ValidationResult]
    inline:     bool = False    # may occur inside prose; only a match alone on its lines is a block


# --- helpers ---

def parse_table_row(row: str) -> list[str]:
    """Split '| a | b |' into ['a', 'b'], dropping the outer empty cells."""
    return [cell.strip() for cell in row.strip().split('|')[1:-1]]


def parse_options(options: str) -> dict[str, str]:
    """Parse 'k=v, k2=v2' into a dict; pairs without a key or value are ignored."""
    parsed = {}
    for pair in options.split(','):
        key, _, value = (s.strip() for s in pair.partition('='))
        if key and value:
            parsed[key] = value
    return parsed


def extract_youtube_id(url: str) -> str:
    """Return the 11-char video id from a YouTube URL or bare id, else ''."""
    for pattern in YOUTUBE_ID_RES:
        if m := pattern.search(url.strip()):
            return m.group(1)
    return ''


def _images(text: str) -> list[dict[str, str]]:
    return [
        {"alt": m.group(1) or '', "src": m.group(2), "title": m.group(3) or ''}
        for m in IMAGE_RE.finditer(text)
    ]


def _required(attrs: Attributes, field: str, message: str) -> list[str]:
    return [] if attrs.get(field) else [message]


def _looks_like_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and (parsed.netloc or parsed.path))


# --- validators ---

def _validate_heading(attrs: Attributes) -> ValidationResult:
    errors = _required(attrs, "text", "Heading content cannot be empty")
    if attrs.get("level", 0) > 6:
        errors.append("Heading level cannot exceed 6")
    return ValidationResult.of(errors)


def _validate_table(attrs: Attributes) -> ValidationResult:
    errors = _required(attrs, "headers", "Table must have headers")
    warnings = [] if attrs.get("rows") else ["Table has no data rows"]
    return ValidationResult.of(errors, warnings)


def _validate_link(attrs: Attributes) -> ValidationResult:
    errors = _required(attrs, "text", "Link text cannot be empty")
    errors += _required(attrs, "url", "Link URL cannot be empty")
    warnings = [] if _looks_like_url(attrs.get("url", '')) else ["Link URL may not be valid"]
    return ValidationResult.of(errors, warnings)


def _validate_image(attrs: Attributes) -> ValidationResult:
    errors = _required(attrs, "src", "Image source cannot be empty")
    warnings = [] if attrs.get("alt") else ["Image should have alt text for accessibility"]
    return ValidationResult.of(errors, warnings)


def _validate_images(attrs: Attributes) -> ValidationResult:
    images = attrs.get("images") or []
    errors = [] if images else ["Multiple images block must contain at least one image"]
    warnings = ["Consider using single image pattern for single images"] if len(images) == 1 else []
    return ValidationResult.of(errors, warnings)


def _validate_executable(attrs: Attributes) -> ValidationResult:
    errors = _required(attrs, "language", "Executable code block must specify a language")
    errors += _required(attrs, "content", "Executable code block content cannot be empty")
    return ValidationResult.of(errors)


def _validate_mermaid(attrs: Attributes) -> ValidationResult:
    content = attrs.get("content", '')
    errors = [] if content else ["Mermaid diagram content cannot be empty"]
    warnings = [] if any(k in content for k in MERMAID_KEYWORDS) else [
        "Mermaid content may not be valid diagram syntax"
    ]
    return ValidationResult.of(errors, warnings)


def _validate_bibliography(attrs: Attributes) -> ValidationResult:
    citations = attrs.get("citations") or []
    errors = [] if citations else ["Bibliography must contain at least one citation"]
    warnings = ["Consider using single citation pattern for single citations"] if len(citations) == 1 else []
    return ValidationResult.of(errors, warnings)


def _requires(field: str, message: str) -> Callable[[Attributes], ValidationResult]:
    """Validator that only checks one required attribute."""
    return lambda attrs: ValidationResult.of(_required(attrs, field, message))


def _always_valid(_attrs: Attributes) -> ValidationResult:
    return ValidationResult()


# --- registry ---

def _fence(tag: str) -> re.Pattern:
    return re.compile(rf'^```{tag}\s*\n([\s\S]*?)\n```$', re.M)


def _table_attributes(m: re.Match) -> Attributes:
    rows = [row for row in m.group(0).split('\n') if row.strip()]
    return {"headers": parse_table_row(rows[0]), "rows": [parse_table_row(r) for r in rows[2:]]}


def _list_attributes(m: re.Match) -> Attributes:
    text = m.group(0)
    items = [
        re.sub(r'^\s*(?:[-*+]|\d+\.)\s+', '', line).strip()
        for line in text.split('\n') if line.strip()
    ]
    ordered = re.match(r'^\s*\d+\.', text) is not None
    return {"list_type": "ordered" if ordered else "unordered", "items": items}


def default_patterns(ai_model: str = "gpt-4") -> tuple[BlockPattern, ...]:
    """Return the built-in patterns sorted by priority (lowest first)."""
    patterns = [
        BlockPattern(
            name="youtube", block_type="youtube", priority=10,
            pattern=re.compile(r'^!\[youtube\]\(([^)]+)\)$', re.M),
            attributes=lambda m: {"video_id": extract_youtube_id(m.group(1))},
            validate=_requires("video_id", "YouTube video ID could not be extracted"),
        ),
        BlockPattern(
            name="executableCode", block_type="executableCodeBlock", priority=20,
            pattern=re.compile(r'^```\{(\w+)(?:\s*,\s*([^}]+))?\}\n([\s\S]*?)\n```$', re.M),
            attributes=lambda m: {
                "language": m.group(1),
                "options": parse_options(m.group(2)) if m.group(2) else {},
                "content": m.group(3),
            },
            validate=_validate_executable,
        ),
        BlockPattern(
            name="mermaid", block_type="mermaid", priority=30,
            pattern=_fence("mermaid"),
            attributes=lambda m: {"content": m.group(1).strip()},
            validate=_validate_mermaid,
        ),
        BlockPattern(
            name="aiGeneration", block_type="aiGeneration", priority=40,
            pattern=_fence("ai"),
            attributes=lambda m: {
                "prompt": m.group(1).strip(),
                "model": ai_model,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            validate=_requires("prompt", "AI generation prompt cannot be empty"),
        ),
        BlockPattern(
            name="confusionMatrix", block_type="confusionMatrix", priority=50,
            pattern=_fence("confusion-matrix"),
            attributes=lambda m: {"matrix_data": m.group(1).strip(), "title": "Confusion Matrix", "source": "markdown"},
            validate=_requires("matrix_data", "Confusion matrix data cannot be empty"),
        ),
        BlockPattern(
            name="pipeline", block_type="pipeline", priority=60,
            pattern=_fence("pipeline"),
            attributes=lambda m: {"description": m.group(1).strip(), "title": "Pipeline", "nodes": [], "edges": []},
            validate=_requires("description", "Pipeline description cannot be empty"),
        ),
        BlockPattern(
            name="drawio", block_type="drawio", priority=70,
            pattern=_fence("drawio"),
            attributes=lambda m: {"diagram_data": m.group(1).strip(), "width": 800, "height": 600},
            validate=_requires("diagram_data", "DrawIO diagram data cannot be empty"),
        ),
        BlockPattern(
            name="codeBlock", block_type="code", priority=80,
            pattern=re.compile(r'^```(\w+)?\n([\s\S]*?)\n```$', re.M),
            attributes=lambda m: {"language": m.group(1) or "text", "content": m.group(2)},
            validate=_requires("content", "Code block content cannot be empty"),
        ),
        BlockPattern(
            name="mathBlock", block_type="math", priority=90,
            pattern=re.compile(r'^\$\$([\s\S]*?)\$\$$', re.M),
            attributes=lambda m: {"latex": m.group(1).strip(), "display_mode": True},
            validate=_requires("latex", "Math content cannot be empty"),
        ),
        BlockPattern(
            name="theorem", block_type="theorem", priority=100,
            pattern=re.compile(r'^\\begin\{theorem\}(?:\[([^\]]+)\])?\s*\n([\s\S]*?)\n\\end\{theorem\}$', re.M),
            attributes=lambda m: {"title": m.group(1) or "Theorem", "content": m.group(2).strip()},
            validate=_requires("content", "Theorem content cannot be empty"),
        ),
        BlockPattern(
            name="table", block_type="table", priority=110,
            pattern=re.compile(r'^(\|.*\|)\n(\|[ \t\-:|]+\|)(?:\n((?:\|.*\|\n?)*))?$', re.M),
            attributes=_table_attributes,
            validate=_validate_table,
        ),
        BlockPattern(
            name="heading", block_type="heading", priority=120,
            pattern=re.compile(r'^(#{1,6})[ \t]+(.+)$', re.M),
            attributes=lambda m: {"level": len(m.group(1)), "text": m.group(2).strip()},
            validate=_validate_heading,
        ),
        BlockPattern(
            name="blockquote", block_type="quote", priority=130,
            pattern=re.compile(r'^(>[ \t]+.+\n?)+$', re.M),
            attributes=lambda m: {"content": re.sub(r'^>[ \t]+', '', m.group(0), flags=re.M).strip()},
            validate=_requires("content", "Blockquote content cannot be empty"),
        ),
        BlockPattern(
            name="list", block_type="list", priority=140,
            pattern=re.compile(r'^((?:[ \t]*[-*+][ \t]+.+\n?)+|(?:[ \t]*\d+\.[ \t]+.+\n?)+)$', re.M),
            attributes=_list_attributes,
            validate=_requires("items", "List must have at least one item"),
        ),
        BlockPattern(
            name="horizontalRule", block_type="horizontalRule", priority=150,
            pattern=re.compile(r'^[ \t]*[-*_]{3,}[ \t]*$', re.M),
            attributes=lambda m: {},
            validate=_always_valid,
        ),
        BlockPattern(
            name="multipleImages", block_type="multipleImages", priority=160,
            pattern=re.compile(IMAGE_RE.pattern + r'(?:[ \t]*\n?[ \t]*' + IMAGE_RE.pattern + r')+'),
            attributes=lambda m: {"images": _images(m.group(0))},
            validate=_validate_images,
            inline=True,
        ),
        BlockPattern(
            name="image", block_type="image", priority=170,
            pattern=IMAGE_RE,
            attributes=lambda m: {"alt": m.group(1) or '', "src": m.group(2), "title": m.group(3) or ''},
            validate=_validate_image,
            inline=True,
        ),
        BlockPattern(
            name="bibliography", block_type="bibliography", priority=180,
            pattern=re.compile(r'(?<!\w)@[A-Za-z0-9_-]+(?:[ \t]+@[A-Za-z0-9_-]+)+'),
            attributes=lambda m: {"citations": CITATION_KEY_RE.findall(m.group(0))},
            validate=_validate_bibliography,
            inline=True,
        ),
        BlockPattern(
            name="citation", block_type="citation", priority=190,
            pattern=CITATION_KEY_RE,
            attributes=lambda m: {"citation_key": m.group(1)},
            validate=_requires("citation_key", "Citation key cannot be empty"),
            inline=True,
        ),
        BlockPattern(
            name="link", block_type="link", priority=200,
            pattern=re.compile(r'(?<!!)\[([^\]]+)\]\(([^)]+)\)'),
            attributes=lambda m: {"text": m.group(1), "url": m.group(2)},
            validate=_validate_link,
            inline=True,
        ),
    ]
    return tuple(sorted(patterns, key=lambda p: p.priority))
