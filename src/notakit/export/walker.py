"""Export graph walker: breadth-first export of a document and everything it links to"""

import asyncio
import logging
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag

from notakit.config import Settings
from notakit.core.models import ExportDocument
from notakit.core.utils.slug import safe_id
from notakit.export.archive import ArchiveBuilder
from notakit.export.assets import AssetStore, extract_code_outputs, extract_images
from notakit.export.blocks import BlockRenderer
from notakit.export.math import LatexRenderer
from notakit.export.render import Extension, default_extensions, render_to_html_tree
from notakit.export.template import render_page


logger = logging.getLogger(__name__)

DocumentLike = Union[ExportDocument, Mapping[str, Any]]
FetchDocument = Callable[[str], Awaitable[Optional[DocumentLike]]]

ROOT_ID = "root"


def as_document(doc_id: str, doc: DocumentLike) -> ExportDocument:
    """Coerce a fetched document (model or mapping) into an ExportDocument with the given id."""
    if isinstance(doc, ExportDocument):
        return doc.model_copy(update={"id": doc_id})
    return ExportDocument.model_validate({**doc, "id": doc_id})


def _is_link(el: Tag) -> bool:
    return (el.name == "span" and el.get("data-type") == "sub-nota-link") or (el.name == "a" and bool(el.get("href")))


@dataclass
class ExportContext:
    """Mutable state of one export call."""
    archive:        ArchiveBuilder
    assets:         AssetStore
    root_id:        str = ROOT_ID
    fetch_document: Optional[FetchDocument] = None
    queue:          deque = field(default_factory=deque)
    visited:        set[str] = field(default_factory=set)
    page_names:     dict[str, str] = field(default_factory=dict)

    @property
    def image_counter(self) -> int:
        return self.assets.counter


class Exporter:
    """Renders a root document and, transitively, every document it links to into one zip archive.

    The root page is written to index.html and every other page to <pages_dir>/<name>.html;
    links are rewritten relative to the page that contains them.
    """

    def __init__(
        self,
        settings: Settings = None,
        extensions: dict[str, Extension] = None,
        renderer: BlockRenderer = None,
        latex: LatexRenderer = None,
        ):
        self.settings = settings or Settings()
        self.extensions = default_extensions() if extensions is None else extensions
        self.renderer = renderer or BlockRenderer(latex, parser_config=self.settings.parser_config)
        self._internal_link = re.compile(self.settings.internal_link_pattern)

    # --- paths ---

    def page_name(self, ctx: ExportContext, doc_id: str) -> str:
        """File stem of a non-root page; ids that sanitize alike get _2, _3, ... in first-seen order."""
        name = ctx.page_names.get(doc_id)
        if name is None:
            base = name = safe_id(doc_id)
            taken = set(ctx.page_names.values())
            n = 2
            while name in taken:
                name = f"{base}_{n}"
                n += 1
            ctx.page_names[doc_id] = name
        return name

    def page_path(self, ctx: ExportContext, doc_id: str) -> str:
        if doc_id == ctx.root_id:
            return "index.html"
        return f"{self.settings.pages_dir}/{self.page_name(ctx, doc_id)}.html"

    def href(self, ctx: ExportContext, current_id: str, target_id: str) -> str:
        """Path of target's page relative to current's page."""
        from_root = current_id == ctx.root_id
        if target_id == ctx.root_id:
            return "index.html" if from_root else "../index.html"
        if from_root:
            return self.page_path(ctx, target_id)
        return f"{self.page_name(ctx, target_id)}.html"

    # --- traversal ---

    async def _follow(self, ctx: ExportContext, target_id: str) -> None:
        """Fetch and enqueue target unless already visited; failures leave the link dangling."""
        if ctx.fetch_document is None or target_id in ctx.visited:
            return
        ctx.visited.add(target_id)
        try:
            fetched = await ctx.fetch_document(target_id)
            if fetched is None:
                logger.warning("Linked document %r not found; link left dangling", target_id)
                return
            ctx.queue.append(as_document(target_id, fetched))
        except Exception as e:
            logger.warning("Failed to fetch linked document %r: %s", target_id, e)

    async def _process_links(self, ctx: ExportContext, doc_id: str, soup: BeautifulSoup) -> None:
        for el in soup.find_all(_is_link):
            if el.name == "span":
                target_id = el.get("data-target-nota-id")
                if not target_id:
                    continue
                title = el.get_text() or el.get("data-target-nota-title") or "Sub Nota"
                el.replace_with(soup.new_tag("a", attrs={
                    "href": self.href(ctx, doc_id, target_id),
                    "class": "nota-link sub-nota-link",
                }, string=title))
            else:
                m = self._internal_link.search(el.get("href"))
                if not m or not m.group(1):
                    continue
                target_id = m.group(1)
                el["href"] = self.href(ctx, doc_id, target_id)
            await self._follow(ctx, target_id)

    async def _export_page(self, ctx: ExportContext, doc: ExportDocument) -> None:
        prefix = '' if doc.id == ctx.root_id else '../'
        soup = render_to_html_tree(doc.content, self.extensions)
        await self._process_links(ctx, doc.id, soup)
        extract_code_outputs(soup, ctx.assets, prefix)
        extract_images(soup, ctx.assets, prefix)
        self.renderer.render(soup, doc.citations)

        path = self.page_path(ctx, doc.id)
        ctx.archive.file(path, render_page(doc.title, soup.decode(), self.settings.math_stylesheet_url))
        logger.info("Exported %r to %s", doc.id, path)

    async def export_document(self, root: DocumentLike, fetch_document: FetchDocument = None) -> bytes:
        """Export root and every reachable linked document; returns zip bytes.

        Linked documents are fetched one at a time, in link order, and each id is
        fetched at most once even when links form a cycle.
        """
        root_id = root.id if isinstance(root, ExportDocument) else (root.get("id") or ROOT_ID)
        root_doc = as_document(root_id, root)

        archive = ArchiveBuilder()
        ctx = ExportContext(
            archive=archive,
            assets=AssetStore(archive.folder(self.settings.assets_dir)),
            root_id=root_id,
            fetch_document=fetch_document,
        )
        archive.folder(self.settings.pages_dir)
        ctx.queue.append(root_doc)
        ctx.visited.add(root_id)

        pages = 0
        while ctx.queue:
            await self._export_page(ctx, ctx.queue.popleft())
            pages += 1

        logger.info("Export complete: %d page(s), %d asset(s)", pages, ctx.image_counter)
        return await asyncio.to_thread(archive.generate)


async def export_document(
    root: DocumentLike,
    fetch_document: FetchDocument = None,
    settings: Settings = None,
    ) -> bytes:
    """Export with a fresh Exporter."""
    return await Exporter(settings).export_document(root, fetch_document)
