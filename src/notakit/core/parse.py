"""Markdown parser engine: pattern matching, text-gap inference, and overlap resolution"""

import logging
import re
from typing import Iterable, Optional

from notakit.core.models import BlockMetadata, ParsedBlock, ParsingResult, ValidationResult
from notakit.core.patterns import BlockPattern, default_patterns


logger = logging.getLogger(__name__)

TEXT_PRIORITY = 10_000


def line_number(text: str, offset: int) -> int:
    """Return the 1-based line containing offset (newlines before it + 1)."""
    return text.count('\n', 0, offset) + 1


def stands_alone(text: str, match: re.Match) -> bool:
    """True if nothing but whitespace shares the match's first and last lines."""
    line_start = text.rfind('\n', 0, match.start()) + 1
    line_end = text.find('\n', match.end())
    if line_end == -1:
        line_end = len(text)
    return not (text[line_start:match.start()].strip() or text[match.end():line_end].strip())


def _text_block(lines: list[str], start: int, end: int) -> Optional[ParsedBlock]:
    """Build a text block for 1-based lines [start, end], or None if only whitespace."""
    content = '\n'.join(lines[start - 1:end]).strip()
    if not content:
        return None
    return ParsedBlock(
        type="text",
        content=content,
        attributes={"content": content},
        metadata=BlockMetadata(start_line=start, end_line=end, raw_text=content),
    )


def extract_text_blocks(text: str, blocks: Iterable[ParsedBlock]) -> list[ParsedBlock]:
    """Return text blocks for every run of lines not covered by any block."""
    lines = text.split('\n')
    covered = [False] * (len(lines) + 2)
    for b in blocks:
        for n in range(b.metadata.start_line, b.metadata.end_line + 1):
            covered[n] = True

    text_blocks = []
    start = None
    for n in range(1, len(lines) + 1):
        if not covered[n] and start is None:
            start = n
        elif covered[n] and start is not None:
            if block := _text_block(lines, start, n - 1):
                text_blocks.append(block)
            start = None
    if start is not None and (block := _text_block(lines, start, len(lines))):
        text_blocks.append(block)
    return text_blocks


def remove_overlapping(blocks: list[ParsedBlock]) -> list[ParsedBlock]:
    """Keep blocks (in the given order) whose line range intersects no earlier kept block."""
    kept: list[ParsedBlock] = []
    for block in blocks:
        start, end = block.metadata.start_line, block.metadata.end_line
        if not any(start <= k.metadata.end_line and end >= k.metadata.start_line for k in kept):
            kept.append(block)
    return kept


class MarkdownParser:
    """Applies a fixed, priority-ordered pattern table to raw Markdown."""

    def __init__(self, patterns: Iterable[BlockPattern] = None, ai_model: str = "gpt-4"):
        source = default_patterns(ai_model) if patterns is None else patterns
        self._patterns: tuple[BlockPattern, ...] = tuple(sorted(source, key=lambda p: p.priority))
        self._by_type = {}
        for p in self._patterns:
            self._by_type.setdefault(p.block_type, p)

    @property
    def patterns(self) -> tuple[BlockPattern, ...]:
        return self._patterns

    def _build_block(self, pattern: BlockPattern, text: str, match: re.Match) -> ParsedBlock:
        raw = match.group(0)
        block = ParsedBlock(
            type=pattern.block_type,
            content=raw,
            attributes=pattern.attributes(match),
            metadata=BlockMetadata(
                start_line=line_number(text, match.start()),
                end_line=line_number(text, match.end()),
                raw_text=raw,
            ),
        )
        result = pattern.validate(block.attributes)
        block.metadata.is_valid = result.is_valid
        block.metadata.errors = list(result.errors)
        block.metadata.warnings = list(result.warnings)
        return block

    def parse(self, text: str) -> ParsingResult:
        """Parse text into ordered, non-overlapping blocks plus aggregate diagnostics.

        Errors and warnings of every match are aggregated, including matches
        that overlap resolution later discards.
        """
        errors: list[str] = []
        warnings: list[str] = []
        ranked: list[tuple[int, int, ParsedBlock]] = []

        for pattern in self._patterns:
            for match in pattern.pattern.finditer(text):
                if pattern.inline and not stands_alone(text, match):
                    continue
                try:
                    block = self._build_block(pattern, text, match)
                except Exception:
                    logger.exception("Error parsing %s block at offset %d", pattern.name, match.start())
                    errors.append(f"Failed to parse {pattern.name} block")
                    continue
                ranked.append((block.metadata.start_line, pattern.priority, block))
                errors.extend(block.metadata.errors)
                warnings.extend(block.metadata.warnings)

        for block in extract_text_blocks(text, (b for _, _, b in ranked)):
            ranked.append((block.metadata.start_line, TEXT_PRIORITY, block))

        ranked.sort(key=lambda r: (r[0], r[1]))
        blocks = remove_overlapping([b for _, _, b in ranked])
        logger.debug("Parsed %d blocks (%d candidates)", len(blocks), len(ranked))
        return ParsingResult.from_blocks(blocks, len(text.split('\n')), errors, warnings)

    def validate_block(self, block: ParsedBlock) -> ValidationResult:
        """Re-run the validator registered for the block's type."""
        if block.type == "text":
            return ValidationResult()
        pattern = self._by_type.get(block.type)
        if pattern is None:
            return ValidationResult(is_valid=False, errors=["Unknown block type"])
        return pattern.validate(block.attributes)

    def reparse_block(self, block: ParsedBlock, content: str) -> ParsedBlock:
        """Return a new block of the same type parsed from edited content.

        Line numbers are kept from the original block's start. If the edited
        content no longer matches the block's pattern the new block is invalid.
        """
        start = block.metadata.start_line
        end = start + content.count('\n')
        if block.type == "text":
            return ParsedBlock(
                type="text", content=content, attributes={"content": content.strip()},
                metadata=BlockMetadata(start_line=start, end_line=end, raw_text=content),
            )

        pattern = self._by_type.get(block.type)
        match = pattern.pattern.search(content) if pattern else None
        if match is None:
            return ParsedBlock(
                type=block.type, content=content, attributes={},
                metadata=BlockMetadata(
                    start_line=start, end_line=end, raw_text=content, is_valid=False,
                    errors=[f"Content is no longer a valid {block.type} block"],
                ),
            )
        new = self._build_block(pattern, content, match)
        offset = start - 1
        new.metadata.start_line += offset
        new.metadata.end_line += offset
        return new

    @staticmethod
    def get_fix_suggestions(block: ParsedBlock) -> list[str]:
        suggestions = []
        if block.metadata.errors:
            suggestions.append("Review and fix validation errors before inserting")
        if block.metadata.warnings:
            suggestions.append("Consider addressing warnings for better content quality")
        return suggestions


def parse_markdown(text: str, parser: MarkdownParser = None) -> ParsingResult:
    """Parse text with a fresh (or the given) MarkdownParser."""
    return (parser or MarkdownParser()).parse(text)
