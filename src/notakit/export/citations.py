"""Citation numbering and bibliography formatting"""

from typing import Any, Iterable, Iterator, Optional

from notakit.core.models import CitationRecord


def number_citations(keys: Iterable[str]) -> dict[str, int]:
    """Assign 1, 2, ... to distinct keys in first-appearance order."""
    numbers: dict[str, int] = {}
    for key in keys:
        if key and key not in numbers:
            numbers[key] = len(numbers) + 1
    return numbers


def format_bibliography_entry(number: int, record: Optional[CitationRecord], key: str) -> str:
    """'[n] A & B (Year). Title. Journal, Volume, Pages.' with missing fields omitted.

    Falls back to '[n] key' when there is no record or it carries no usable fields.
    """
    entry = f"[{number}]"
    if record is None:
        return f"{entry} {key}"

    authors = " & ".join(a for a in record.authors if a)
    if authors:
        entry += f" {authors}"
    if record.year:
        entry += f" ({record.year})"
    if authors or record.year:
        entry += "."
    if record.title:
        entry += f" {record.title}."
    venue = ", ".join(v for v in (record.journal, record.volume, record.pages) if v)
    if venue:
        entry += f" {venue}."
    return entry if entry != f"[{number}]" else f"{entry} {key}"


def _walk(node: dict[str, Any]) -> Iterator[dict[str, Any]]:
    yield node
    for child in node.get("content") or []:
        yield from _walk(child)


def get_ordered_citation_keys(doc: dict[str, Any]) -> list[str]:
    """Citation keys of a document tree in document order, repeats included."""
    return [
        n["attrs"]["citationKey"]
        for n in _walk(doc)
        if n.get("type") == "citation" and (n.get("attrs") or {}).get("citationKey")
    ]


def update_citation_numbers(doc: dict[str, Any]) -> int:
    """Set citationNumber on every citation node of doc; returns how many nodes changed."""
    numbers = number_citations(get_ordered_citation_keys(doc))
    changed = 0
    for node in _walk(doc):
        if node.get("type") != "citation":
            continue
        attrs = node.setdefault("attrs", {})
        number = numbers.get(attrs.get("citationKey"))
        if number is not None and attrs.get("citationNumber") != number:
            attrs["citationNumber"] = number
            changed += 1
    return changed
