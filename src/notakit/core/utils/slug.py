"""Filename helpers for document pages and export archives"""

import re


def safe_id(doc_id: str) -> str:
    """Make a document id usable as a single archive path segment."""
    return re.sub(r'[^A-Za-z0-9_-]', '_', doc_id) or '_'


def archive_name(title: str) -> str:
    """Return the download name for an export of the titled document."""
    return f"{re.sub(r'[^a-z0-9]', '_', title, flags=re.I).lower()}_export.zip"
