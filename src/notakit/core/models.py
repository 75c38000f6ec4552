"""Data models for the parse, paste and export pipeline"""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class ValidationResult(BaseModel):
    """Outcome of a block validator."""
    is_valid: bool = True
    errors:   list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def of(cls, errors: list[str], warnings: list[str] = None) -> "ValidationResult":
        """Build a result whose validity is derived from the error list."""
        return cls(is_valid=not errors, errors=errors, warnings=warnings or [])


class BlockMetadata(BaseModel):
    start_line: int                 # 1-based, inclusive
    end_line:   int                 # 1-based, inclusive
    raw_text:   str
    is_valid:   bool = True
    errors:     list[str] = Field(default_factory=list)
    warnings:   list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_span(self):
        if self.start_line > self.end_line:
            raise ValueError(f"start_line {self.start_line} is after end_line {self.end_line}")
        return self


class ParsedBlock(BaseModel):
    """One recognized span of source text."""
    type:       str
    content:    str
    attributes: dict[str, Any] = Field(default_factory=dict)
    metadata:   BlockMetadata


class ParsingMetadata(BaseModel):
    total_lines:    int
    valid_blocks:   int
    invalid_blocks: int
    warnings: list[str] = Field(default_factory=list)
    errors:   list[str] = Field(default_factory=list)


class ParsingResult(BaseModel):
    blocks:   list[ParsedBlock]
    metadata: ParsingMetadata

    @classmethod
    def from_blocks(
        cls,
        blocks: list[ParsedBlock],
        total_lines: int,
        errors: list[str] = None,
        warnings: list[str] = None,
        ) -> "ParsingResult":
        """Build a result with valid/invalid counts derived from blocks."""
        valid = sum(1 for b in blocks if b.metadata.is_valid)
        return cls(
            blocks=blocks,
            metadata=ParsingMetadata(
                total_lines=total_lines,
                valid_blocks=valid,
                invalid_blocks=len(blocks) - valid,
                warnings=list(warnings or []),
                errors=list(errors or []),
            ),
        )


class CitationRecord(BaseModel):
    """Bibliographic data for one citation key, supplied by the host application."""
    key:     str
    authors: list[str] = Field(default_factory=list)
    title:   str = ""
    year:    Optional[str] = None
    journal: Optional[str] = None
    volume:  Optional[str] = None
    pages:   Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_numbers(cls, data: Any) -> Any:
        # YAML frontmatter yields ints for year/volume
        if isinstance(data, dict):
            data = dict(data)
            for name in ("year", "volume", "pages"):
                if isinstance(data.get(name), int):
                    data[name] = str(data[name])
        return data


class ExportDocument(BaseModel):
    """A document queued for export: id, title, document tree and its citations."""
    id:        str
    title:     str = "Untitled"
    content:   dict[str, Any] = Field(default_factory=lambda: {"type": "doc", "content": []})
    citations: list[CitationRecord] = Field(default_factory=list)


class PasteMetadata(BaseModel):
    total_blocks:   int = 0
    valid_blocks:   int = 0
    invalid_blocks: int = 0
    errors:   list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PasteResult(BaseModel):
    success:  bool
    blocks:   list[dict[str, Any]] = Field(default_factory=list)
    metadata: PasteMetadata = Field(default_factory=PasteMetadata)
    message:  str = ""
