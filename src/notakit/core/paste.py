"""Paste/insertion adapter: decide whether text is Markdown and turn it into insertable nodes"""

import logging
import re

from notakit.core.convert import convert_to_tiptap
from notakit.core.models import PasteMetadata, PasteResult, ParsingResult
from notakit.core.parse import MarkdownParser


logger = logging.getLogger(__name__)

MARKDOWN_HINTS = (
    re.compile(r'^#{1,6}\s+.+', re.M),                   # headings
    re.compile(r'\*\*[^*]+\*\*|\*[^*]+\*'),              # bold / italic
    re.compile(r'```[\s\S]*?```'),                       # fenced code
    re.compile(r'`[^`]+`'),                              # inline code
    re.compile(r'\[[^\]]+\]\([^)]+\)'),                  # links
    re.compile(r'!\[[^\]]*\]\([^)]+\)'),                 # images
    re.compile(r'^[ \t]*[-*+]\s+.+|^[ \t]*\d+\.\s+.+', re.M),
    re.compile(r'^>\s+.+', re.M),                        # blockquotes
    re.compile(r'^\|.*\|$', re.M),                       # tables
    re.compile(r'\$[^$\n]+\$|\$\$[\s\S]*?\$\$'),         # math
    re.compile(r'^[ \t]*[-*_]{3,}[ \t]*$', re.M),        # rules
    re.compile(r'```\{[^}]+\}[\s\S]*?```'),              # executable fences
    re.compile(r'```mermaid[\s\S]*?```'),
    re.compile(r'(?<!\w)@[A-Za-z0-9_-]+'),               # citations
)


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def _message(valid: int, invalid: int, errors: list[str], warnings: list[str]) -> str:
    if valid == 0:
        return "No valid blocks could be parsed from the content."
    message = f"Successfully parsed {_plural(valid, 'block')}"
    if invalid:
        message += f" ({_plural(invalid, 'invalid block')} skipped)"
    if warnings:
        message += f". {_plural(len(warnings), 'warning')} found."
    if errors:
        message += f". {_plural(len(errors), 'error')} encountered."
    return message


def is_markdown_content(text: str) -> bool:
    """Heuristic: True if any common Markdown construct appears in text."""
    if not text or not text.strip():
        return False
    return any(p.search(text) for p in MARKDOWN_HINTS)


def handle_paste(text: str, parser: MarkdownParser = None) -> PasteResult:
    """Parse pasted text and convert only its valid blocks."""
    parser = parser or MarkdownParser()
    result = parser.parse(text)

    if not result.blocks:
        return PasteResult(
            success=False,
            metadata=PasteMetadata(errors=["No valid blocks found in the pasted content"]),
            message="No valid markdown blocks detected. The content may not be in markdown format.",
        )

    valid = [b for b in result.blocks if b.metadata.is_valid]
    invalid = len(result.blocks) - len(valid)
    errors, warnings = result.metadata.errors, result.metadata.warnings
    paste = PasteResult(
        success=bool(valid),
        blocks=convert_to_tiptap(valid),
        metadata=PasteMetadata(
            total_blocks=len(result.blocks),
            valid_blocks=len(valid),
            invalid_blocks=invalid,
            errors=errors,
            warnings=warnings,
        ),
        message=_message(len(valid), invalid, errors, warnings),
    )
    logger.info("Paste parsed: %s", paste.message)
    return paste


def _block_types(result: ParsingResult) -> list[str]:
    return list(dict.fromkeys(b.type for b in result.blocks))


def get_quick_preview(text: str, parser: MarkdownParser = None) -> dict:
    """Distinct block types (in order of appearance) and the block count."""
    result = (parser or MarkdownParser()).parse(text)
    return {"block_types": _block_types(result), "total_blocks": len(result.blocks)}


def validate_block_types(text: str, allowed: list[str], parser: MarkdownParser = None) -> dict:
    """Check that every block type found in text is in allowed."""
    found = _block_types((parser or MarkdownParser()).parse(text))
    invalid = [t for t in found if t not in allowed]
    return {"is_valid": not invalid, "invalid_types": invalid}


def get_improvement_suggestions(text: str, parser: MarkdownParser = None) -> list[str]:
    result = (parser or MarkdownParser()).parse(text)
    suggestions = []
    if result.metadata.errors:
        suggestions.append("Fix validation errors before inserting blocks")
    if result.metadata.warnings:
        suggestions.append("Address warnings for better content quality")

    blocks = result.blocks
    if any(b.type == "image" and not b.attributes.get("alt") for b in blocks):
        suggestions.append("Consider adding alt text to images for accessibility")
    if any(b.type == "table" and not b.attributes.get("rows") for b in blocks):
        suggestions.append("Tables should have data rows for better readability")
    if any(b.type == "code" and b.attributes.get("language") == "text" for b in blocks):
        suggestions.append("Specify language for code blocks to enable syntax highlighting")
    return suggestions


def clean_markdown_content(text: str) -> str:
    """Normalize line endings, strip trailing spaces, collapse blank-line runs."""
    text = text.replace('\r\n', '\n')
    text = re.sub(r'[ \t]+$', '', text, flags=re.M)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()
