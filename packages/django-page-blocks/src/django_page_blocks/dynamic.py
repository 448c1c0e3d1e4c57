"""Dynamic blocks bound to live collections.

A dynamic block stores only its parameters (``count`` plus optional
``title``/``subtitle`` overrides). Its items come from a collection source
queried at render time, newest first.

Sources are looked up by entity name, either registered in code:

    CollectionRegistry.register("news", ModelCollectionSource("news.NewsPost"))

or configured in settings:

    PAGE_BLOCKS_COLLECTIONS = {
        "news": {"model": "news.NewsPost", "url": "/news/{identifier}/"},
        "products": "shop.collections.RecentProducts",
    }

Results are cached briefly in the Django cache so the same block on
several pages does not re-query. A failing or empty collection makes the
block render nothing; it never breaks the page.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from asgiref.sync import sync_to_async
from django.apps import apps
from django.core.cache import caches
from django.db import close_old_connections
from django.utils.formats import date_format
from django.utils.html import format_html, strip_tags
from django.utils.module_loading import import_string

from .conf import get_allowed_counts, get_setting
from .documents import BlockInstance
from .exceptions import CollectionFetchError, CollectionNotConfiguredError
from .html import get_text, heading, join, link_button, paragraph, safe_url
from .registry import BlockPlugin, BlockRegistry

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 100

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class CollectionItem:
    """Summary of one collection entry, as shown in a dynamic block."""

    id: str
    title: str
    identifier: str
    image_url: str = ""
    published_at: datetime | None = None
    excerpt: str = ""
    url: str = ""


def make_excerpt(content: Any, max_length: int = EXCERPT_LENGTH) -> str:
    """Plain-text excerpt of HTML content."""
    if not isinstance(content, str) or not content:
        return ""
    text = _WHITESPACE_RE.sub(" ", strip_tags(content)).strip()
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


class CollectionSource(ABC):
    """A queryable collection a dynamic block can bind to."""

    @abstractmethod
    async def query_recent(self, count: int) -> list[CollectionItem]:
        """Return up to ``count`` items, newest first.

        Returning fewer items than requested is normal.
        """
        pass


class ModelCollectionSource(CollectionSource):
    """Collection backed by a Django model.

    Args:
        model: Model class or ``"app_label.ModelName"``
        date_field: Field ordering the collection, newest first
        title_field: Field used as item title
        identifier_field: Field used in item URLs (falls back to pk)
        image_field: Optional image URL field
        content_field: Optional HTML body used for the excerpt
        filters: Fixed queryset filters, e.g. ``{"is_published": True}``
        url: Item URL template with ``{identifier}`` and ``{id}`` placeholders
    """

    def __init__(
        self,
        model,
        date_field: str = "published_at",
        title_field: str = "title",
        identifier_field: str = "slug",
        image_field: str = "image_url",
        content_field: str = "content",
        filters: dict | None = None,
        url: str = "",
    ):
        self.model = model
        self.date_field = date_field
        self.title_field = title_field
        self.identifier_field = identifier_field
        self.image_field = image_field
        self.content_field = content_field
        self.filters = filters or {}
        self.url = url

    def get_model(self):
        if isinstance(self.model, str):
            return apps.get_model(self.model)
        return self.model

    def get_queryset(self):
        qs = self.get_model()._default_manager.all()
        if self.filters:
            qs = qs.filter(**self.filters)
        return qs.order_by(f"-{self.date_field}")

    async def query_recent(self, count: int) -> list[CollectionItem]:
        """Run the query on its own worker thread.

        Django's async ORM funnels every query through one shared thread, so
        a slow collection would hold sibling queries inside their timeout.
        """
        return await sync_to_async(self.fetch_recent, thread_sensitive=False)(count)

    def fetch_recent(self, count: int) -> list[CollectionItem]:
        try:
            return [self.to_item(obj) for obj in self.get_queryset()[:count]]
        finally:
            close_old_connections()

    def to_item(self, obj) -> CollectionItem:
        identifier = str(getattr(obj, self.identifier_field, "") or obj.pk)
        url = self.url.format(identifier=identifier, id=obj.pk) if self.url else ""
        return CollectionItem(
            id=str(obj.pk),
            title=str(getattr(obj, self.title_field, "") or ""),
            identifier=identifier,
            image_url=str(getattr(obj, self.image_field, "") or ""),
            published_at=getattr(obj, self.date_field, None),
            excerpt=make_excerpt(getattr(obj, self.content_field, "")),
            url=url,
        )


class CollectionRegistry:
    """Sources registered in code, keyed by entity name."""

    _sources: dict[str, CollectionSource] = {}

    @classmethod
    def register(cls, entity: str, source: CollectionSource) -> None:
        cls._sources[entity] = source

    @classmethod
    def unregister(cls, entity: str) -> None:
        cls._sources.pop(entity, None)

    @classmethod
    def get(cls, entity: str) -> CollectionSource | None:
        return cls._sources.get(entity)

    @classmethod
    def clear(cls) -> None:
        cls._sources.clear()


def get_collection_source(entity: str) -> CollectionSource:
    """Resolve the source for an entity.

    Code registrations win over ``PAGE_BLOCKS_COLLECTIONS``.

    Raises:
        CollectionNotConfiguredError: If nothing is configured for ``entity``
    """
    source = CollectionRegistry.get(entity)
    if source is not None:
        return source

    config = (get_setting("COLLECTIONS") or {}).get(entity)
    if isinstance(config, dict) and config.get("model"):
        options = dict(config)
        return ModelCollectionSource(options.pop("model"), **options)
    if isinstance(config, str) and config:
        target = import_string(config)
        return target() if isinstance(target, type) else target

    raise CollectionNotConfiguredError(f"No collection source configured for {entity!r}")


def normalize_count(value: Any) -> int:
    """Clamp a requested item count to the allowed set.

    Anything outside ``PAGE_BLOCKS_ALLOWED_COUNTS`` falls back to the first
    allowed value.
    """
    allowed = get_allowed_counts()
    if isinstance(value, bool):
        return allowed[0]
    try:
        count = int(value)
    except (TypeError, ValueError):
        return allowed[0]
    return count if count in allowed else allowed[0]


class CollectionFetcher:
    """Fetches collection items for one render.

    - serves recent identical queries from the Django cache
    - runs one query for identical requests made concurrently
    - bounds each query by ``PAGE_BLOCKS_FETCH_TIMEOUT``
    - reports every failure as ``CollectionFetchError``; failures are not cached
    """

    def __init__(
        self,
        resolve: Callable[[str], CollectionSource] = get_collection_source,
        cache_alias: str | None = None,
        ttl: int | None = None,
        timeout: float | None = None,
    ):
        self.resolve = resolve
        self.cache = caches[cache_alias or get_setting("CACHE_ALIAS")]
        self.ttl = get_setting("CACHE_TTL") if ttl is None else ttl
        self.timeout = get_setting("FETCH_TIMEOUT") if timeout is None else timeout
        self._inflight: dict[str, asyncio.Future] = {}

    @staticmethod
    def cache_key(entity: str, count: int) -> str:
        return f"page_blocks:collection:{entity}:{count}"

    async def fetch(self, entity: str, count: int) -> list[CollectionItem]:
        key = self.cache_key(entity, count)
        cached = await self.cache.aget(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(entity, count, key))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, key=key: self._inflight.pop(key, None))
        # One waiter being cancelled must not cancel the shared query.
        return await asyncio.shield(task)

    async def _load(self, entity: str, count: int, key: str) -> list[CollectionItem]:
        try:
            source = self.resolve(entity)
            items = await asyncio.wait_for(source.query_recent(count), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise CollectionFetchError(f"Query for {entity!r} timed out after {self.timeout}s") from e
        except CollectionFetchError:
            raise
        except Exception as e:
            raise CollectionFetchError(f"Query for {entity!r} failed: {e}") from e

        items = list(items or [])[:count]
        await self.cache.aset(key, items, self.ttl)
        return items


async def render_dynamic_block(
    plugin: BlockPlugin, instance: BlockInstance, fetcher: CollectionFetcher
) -> str:
    """Fetch a dynamic block's items and render them.

    Returns "" when the collection is empty.

    Raises:
        CollectionFetchError: If the items could not be fetched
    """
    count = normalize_count(instance.data.get("count"))
    items = await fetcher.fetch(plugin.collection, count)
    if not items:
        return ""
    return plugin.renderer(instance.data, items)


def dynamic_block(
    name: str,
    label: str,
    collection: str,
    defaults: dict | None = None,
    schema: dict | Callable[[], dict] | None = None,
    icon: str = "newspaper",
    category: str = "dynamic",
):
    """Decorator to register a collection-bound block renderer.

    The decorated function receives the block data and the fetched items
    (never empty).

    Example:
        @dynamic_block(name="dynamic_events", label="Events", collection="events")
        def render_events(data, items):
            ...
    """

    def decorator(func: Callable[[dict, list[CollectionItem]], str]):
        BlockRegistry.register(
            BlockPlugin(
                name=name,
                label=label,
                defaults=defaults or {},
                renderer=func,
                schema=schema,
                icon=icon,
                category=category,
                collection=collection,
            )
        )
        return func

    return decorator


def _collection_schema() -> dict:
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "subtitle": {"type": "string"},
            "count": {"type": "integer", "enum": list(get_allowed_counts())},
        },
    }


def render_item_card(item: CollectionItem, url_prefix: str) -> str:
    href = safe_url(item.url) or f"{url_prefix}/{item.identifier}"
    image_url = safe_url(item.image_url)
    return format_html(
        '<a class="collection-card" href="{}">{}{}{}{}</a>',
        href,
        format_html('<img src="{}" alt="{}">', image_url, item.title) if image_url else "",
        format_html(
            '<time datetime="{}">{}</time>',
            item.published_at.isoformat(),
            date_format(item.published_at, "DATE_FORMAT"),
        )
        if isinstance(item.published_at, datetime) else "",
        heading("h3", item.title, "card-title"),
        paragraph(item.excerpt, "card-text"),
    )


def render_collection(
    block_type: str,
    data: dict,
    items: list[CollectionItem],
    default_title: str,
    url_prefix: str,
    more_label: str,
) -> str:
    """Shared layout for the built-in dynamic blocks."""
    return format_html(
        '<section class="block block-{} bg-muted"><div class="container">'
        '<header class="collection-header">{}{}{}</header>'
        '<div class="grid columns-3">{}</div></div></section>',
        block_type,
        heading("h2", get_text(data, "title") or default_title, "section-title"),
        paragraph(get_text(data, "subtitle"), "section-subtitle"),
        link_button(more_label, url_prefix, "button button-outline"),
        join(render_item_card(item, url_prefix) for item in items),
    )


@dynamic_block(
    name="dynamic_news",
    label="Latest News",
    collection="news",
    defaults={"title": "Company news", "subtitle": "", "count": 3},
    schema=_collection_schema,
)
def render_dynamic_news(data: dict, items: list[CollectionItem]) -> str:
    """Render the most recent news posts."""
    return render_collection("dynamic-news", data, items, "Company news", "/news", "All news")


@dynamic_block(
    name="dynamic_products",
    label="New Products",
    collection="products",
    icon="package",
    defaults={"title": "New products", "subtitle": "", "count": 3},
    schema=_collection_schema,
)
def render_dynamic_products(data: dict, items: list[CollectionItem]) -> str:
    """Render the most recently added products."""
    return render_collection("dynamic-products", data, items, "New products", "/products", "All products")
