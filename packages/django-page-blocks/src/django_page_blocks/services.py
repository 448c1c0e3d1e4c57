"""Services for django-page-blocks.

Entry points used by views, management commands and host projects:
reading and saving page documents, and rendering a page for display.
"""

from dataclasses import dataclass, field

from asgiref.sync import async_to_sync
from django.utils.safestring import SafeString

from .conf import get_default_meta
from .documents import BlockDiagnostic, PageDocument
from .registry import BlockRegistry
from .renderer import BlockRenderer, RenderedBlock, RenderResult
from .store import DocumentStore


@dataclass
class RenderedPage:
    """A page ready for a template: metadata plus rendered blocks."""

    page_key: str
    seo_title: str
    seo_description: str
    blocks: list[RenderedBlock] = field(default_factory=list)
    diagnostics: list[BlockDiagnostic] = field(default_factory=list)

    @property
    def html(self) -> SafeString:
        return RenderResult(blocks=self.blocks).html

    def to_dict(self) -> dict:
        return {
            "page_key": self.page_key,
            "seo_title": self.seo_title,
            "seo_description": self.seo_description,
            "blocks": [b.to_dict() for b in self.blocks],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def get_page_document(page_key: str, store: DocumentStore | None = None) -> PageDocument:
    """Get a page document; a page never saved yields an empty document."""
    store = store or DocumentStore()
    return store.get(page_key) or PageDocument.empty()


def save_page_document(
    page_key: str, document: PageDocument, store: DocumentStore | None = None
) -> PageDocument:
    """Replace the stored document for a page.

    Raises:
        DocumentSaveError: If the write fails
    """
    store = store or DocumentStore()
    store.put(page_key, document)
    return document


def resolve_meta(page_key: str, document: PageDocument) -> tuple[str, str]:
    """Page title and description, falling back to ``PAGE_BLOCKS_DEFAULT_META``."""
    defaults = get_default_meta(page_key)
    return (
        document.seo_title or defaults["seo_title"],
        document.seo_description or defaults["seo_description"],
    )


async def arender_page(
    page_key: str,
    store: DocumentStore | None = None,
    renderer: BlockRenderer | None = None,
) -> RenderedPage:
    """Load and render a page.

    Args:
        page_key: Page to render
        store: Document store (default: DocumentStore)
        renderer: Block renderer (default: BlockRenderer)

    Returns:
        RenderedPage with every renderable block; skipped blocks appear
        only in ``diagnostics``
    """
    store = store or DocumentStore()
    renderer = renderer or BlockRenderer()

    document = await store.aget(page_key) or PageDocument.empty()
    result = await renderer.render(document.blocks)
    seo_title, seo_description = resolve_meta(page_key, document)

    return RenderedPage(
        page_key=page_key,
        seo_title=seo_title,
        seo_description=seo_description,
        blocks=result.blocks,
        diagnostics=result.diagnostics,
    )


def render_page(page_key: str, **kwargs) -> RenderedPage:
    """Synchronous wrapper around ``arender_page``."""
    return async_to_sync(arender_page)(page_key, **kwargs)


def list_block_types() -> list[dict]:
    """Describe every registered block type for editor UIs."""
    return [
        {
            "type": plugin.name,
            "label": plugin.label,
            "icon": plugin.icon,
            "category": plugin.category,
            "dynamic": plugin.is_dynamic,
            "collection": plugin.collection,
            "defaults": plugin.default_payload(),
            "schema": plugin.get_schema(),
            "item_templates": plugin.item_templates,
        }
        for plugin in sorted(BlockRegistry.all(), key=lambda p: (p.category, p.name))
    ]
