"""Extraction of inline base64 images and code outputs into archive assets"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from notakit.export.archive import ArchiveFolder
from notakit.export.markup import add_class, parse_fragment


logger = logging.getLogger(__name__)

DATA_URI_RE = re.compile(r'^data:image/([A-Za-z0-9.+-]+)?;base64,(.*)$', re.S)
OUTPUT_IMAGE_RE = re.compile(r'src="(data:image/[^;]+;base64[^"]+)"')
HTML_RE = re.compile(r'<[a-z][\s\S]*>', re.I)
EXTENSIONS = {"svg+xml": "svg", "x-icon": "ico"}


class AssetStore:
    """Writes decoded assets into one archive folder with globally sequential names."""

    def __init__(self, folder: ArchiveFolder):
        self.folder = folder
        self.counter = 0

    def add(self, stem: str, data_uri: str) -> Optional[str]:
        """Store a data:image URI as '<stem>_<n>.<ext>'; returns the file name, or None if unusable."""
        m = DATA_URI_RE.match(data_uri.strip())
        if m is None:
            return None
        subtype = (m.group(1) or "png").lower()
        name = f"{stem}_{self.counter}.{EXTENSIONS.get(subtype, subtype)}"
        try:
            self.folder.file(name, m.group(2), base64=True)
        except ValueError as e:
            logger.warning("Skipping undecodable %s asset: %s", stem, e)
            return None
        self.counter += 1
        return name


def extract_code_outputs(root: BeautifulSoup, store: AssetStore, prefix: str = '') -> int:
    """Materialize .export-code-output[data-output] payloads; returns how many were rendered.

    An embedded image becomes an asset, HTML is inlined, anything else is shown as preformatted text.
    """
    count = 0
    for div in root.find_all(class_="export-code-output"):
        output = div.attrs.pop("data-output", None)
        if not output:
            continue
        add_class(div, "output")
        m = OUTPUT_IMAGE_RE.search(output)
        name = store.add("output", m.group(1)) if m else None
        if name:
            children = [root.new_tag("img", attrs={"src": f"{prefix}{store.folder.prefix}/{name}"})]
        elif HTML_RE.search(output):
            children = parse_fragment(output)
        else:
            children = [root.new_tag("pre", string=output)]
        div.clear()
        div.extend(children)
        count += 1
    return count


def extract_images(root: BeautifulSoup, store: AssetStore, prefix: str = '') -> int:
    """Move data:image sources of <img> tags into the archive; returns how many moved."""
    count = 0
    for img in root.find_all("img"):
        src = img.get("src") or ''
        if not src.startswith("data:image"):
            continue
        name = store.add("image", src)
        if name:
            img["src"] = f"{prefix}{store.folder.prefix}/{name}"
            count += 1
    return count
