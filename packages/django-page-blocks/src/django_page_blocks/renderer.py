"""Block renderer.

Turns a page document's block list into HTML fragments, one per block,
in document order. Dispatch goes through the block registry:

- unknown type: nothing is emitted, a diagnostic is recorded
- static type: the render strategy is called with the block data
- dynamic type: items are fetched, then the strategy renders them

Blocks render concurrently; each block's failure is contained at that
block, so a broken payload or an unreachable collection only removes
that one block from the page.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from asgiref.sync import async_to_sync
from django.utils.safestring import SafeString, mark_safe

from .documents import BlockDiagnostic, BlockInstance, parse_blocks
from .dynamic import CollectionFetcher, render_dynamic_block
from .exceptions import CollectionFetchError
from .registry import BlockRegistry

logger = logging.getLogger(__name__)


@dataclass
class RenderedBlock:
    """HTML for one block, tagged with the block's identity."""

    block_id: str
    block_type: str
    html: SafeString

    def to_dict(self) -> dict:
        return {"id": self.block_id, "type": self.block_type, "html": str(self.html)}


@dataclass
class RenderResult:
    """Rendered blocks in document order plus what was skipped and why."""

    blocks: list[RenderedBlock] = field(default_factory=list)
    diagnostics: list[BlockDiagnostic] = field(default_factory=list)

    @property
    def html(self) -> SafeString:
        return mark_safe("\n".join(str(b.html) for b in self.blocks))


class BlockRenderer:
    """Render block lists using the block registry.

    Args:
        registry: Registry to resolve block types (default: BlockRegistry)
        fetcher_factory: Builds the per-render collection fetcher
    """

    def __init__(self, registry=BlockRegistry, fetcher_factory=CollectionFetcher):
        self.registry = registry
        self.fetcher_factory = fetcher_factory

    async def render(self, blocks: Iterable) -> RenderResult:
        """Render blocks concurrently, keeping document order."""
        instances = _as_instances(blocks)
        # Static-only pages never touch the collection cache.
        fetcher = self.fetcher_factory() if any(self._is_dynamic(i) for i in instances) else None
        outcomes = await asyncio.gather(
            *(self._render_block(instance, fetcher) for instance in instances)
        )

        result = RenderResult()
        for rendered, diagnostic in outcomes:
            if diagnostic is not None:
                result.diagnostics.append(diagnostic)
            if rendered is not None:
                result.blocks.append(rendered)
        return result

    def render_sync(self, blocks: Iterable) -> RenderResult:
        """Synchronous entry point for code outside an event loop."""
        return async_to_sync(self.render)(blocks)

    def _is_dynamic(self, instance: BlockInstance) -> bool:
        plugin = self.registry.get(instance.type)
        return plugin is not None and plugin.is_dynamic

    async def _render_block(
        self, instance: BlockInstance, fetcher: CollectionFetcher | None
    ) -> tuple[RenderedBlock | None, BlockDiagnostic | None]:
        plugin = self.registry.get(instance.type)
        if plugin is None or plugin.renderer is None:
            logger.warning(f"Skipping block {instance.id}: unknown block type {instance.type!r}")
            return None, BlockDiagnostic(
                instance.id, instance.type, "unknown_type", f"Unknown block type: {instance.type}"
            )

        try:
            if plugin.is_dynamic:
                html = await render_dynamic_block(plugin, instance, fetcher)
            else:
                html = plugin.renderer(instance.data)
        except CollectionFetchError as e:
            logger.warning(f"Skipping block {instance.id} ({instance.type}): {e}")
            return None, BlockDiagnostic(instance.id, instance.type, "fetch_failed", str(e))
        except Exception as e:
            logger.exception(f"Render strategy for block {instance.id} ({instance.type}) failed")
            return None, BlockDiagnostic(instance.id, instance.type, "render_failed", str(e))

        if not html or not str(html).strip():
            return None, None
        return RenderedBlock(instance.id, instance.type, mark_safe(html)), None


def _as_instances(blocks: Iterable) -> list[BlockInstance]:
    blocks = list(blocks or [])
    if all(isinstance(b, BlockInstance) for b in blocks):
        return blocks
    return parse_blocks(blocks)
