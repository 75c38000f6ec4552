"""Unit tests for export/assets.py"""

import base64

from bs4 import BeautifulSoup

from notakit.export.archive import ArchiveBuilder
from notakit.export.assets import AssetStore, extract_code_outputs, extract_images
from notakit.export.markup import PARSER


PNG_URI = "data:image/png;base64,iVBORw0KGgo="


def _body(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, PARSER)


def _store():
    archive = ArchiveBuilder()
    return archive, AssetStore(archive.folder("assets"))


def test_store_add_names_sequentially():
    archive, store = _store()
    assert store.add("image", PNG_URI) == "image_0.png"
    assert store.add("output", "data:image/svg+xml;base64,PHN2Zy8+") == "output_1.svg"
    assert archive.read("assets/image_0.png") == base64.b64decode("iVBORw0KGgo=")
    assert store.counter == 2


def test_store_rejects_bad_payload_without_counting():
    _, store = _store()
    assert store.add("image", "https://example.com/a.png") is None
    assert store.add("image", "data:image/png;base64,@@@") is None
    assert store.counter == 0


def test_extract_images():
    archive, store = _store()
    body = _body(f'<img src="{PNG_URI}"><img src="remote.png">')
    assert extract_images(body, store, prefix="../") == 1
    assert [img.get("src") for img in body.find_all("img")] == ["../assets/image_0.png", "remote.png"]
    assert archive.names == ["assets/image_0.png"]


def test_extract_code_output_image():
    _, store = _store()
    body = _body('<div class="export-code-output"></div>')
    body.contents[0]["data-output"] = f'<img src="{PNG_URI}">'
    assert extract_code_outputs(body, store) == 1
    assert str(body) == '<div class="export-code-output output"><img src="assets/output_0.png"/></div>'


def test_extract_code_output_html_and_text():
    _, store = _store()
    body = _body('<div class="export-code-output"></div><div class="export-code-output"></div>')
    body.contents[0]["data-output"] = "<b>done</b>"
    body.contents[1]["data-output"] = "1 < 2"
    assert extract_code_outputs(body, store) == 2
    assert str(body) == (
        '<div class="export-code-output output"><b>done</b></div>'
        '<div class="export-code-output output"><pre>1 &lt; 2</pre></div>'
    )
    assert store.counter == 0


def test_code_output_without_payload_is_untouched():
    _, store = _store()
    body = _body('<div class="export-code-output"></div>')
    assert extract_code_outputs(body, store) == 0
    assert str(body) == '<div class="export-code-output"></div>'
