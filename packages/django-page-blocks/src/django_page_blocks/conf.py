"""django-page-blocks configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    PAGE_BLOCKS_CACHE_TTL = 120
    PAGE_BLOCKS_COLLECTIONS = {
        "news": {"model": "news.NewsPost", "url": "/news/{identifier}/"},
    }
    PAGE_BLOCKS_DEFAULT_META = {
        "home_page": {"seo_title": "Acme", "seo_description": "Valves and fittings"},
    }
"""

from django.conf import settings


DEFAULTS = {
    # Cache used for dynamic collection results
    "CACHE_ALIAS": "default",
    # Seconds a collection query result stays fresh
    "CACHE_TTL": 300,
    # Seconds before a single collection fetch is abandoned
    "FETCH_TIMEOUT": 5.0,
    # Item counts a dynamic block may request; the first is the fallback
    "ALLOWED_COUNTS": (3, 4, 6),
    # entity -> {"model": "app_label.Model", ...} or dotted path to a source
    "COLLECTIONS": {},
    # page_key -> {"seo_title": ..., "seo_description": ...}
    "DEFAULT_META": {},
    # Rich text sanitizer allow-lists
    "ALLOWED_TAGS": [
        "p", "br", "b", "strong", "i", "em", "u",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li",
        "table", "thead", "tbody", "tr", "td", "th",
        "a", "span", "div", "blockquote", "pre", "code",
    ],
    "ALLOWED_ATTRIBUTES": ["class", "href", "target", "rel"],
}


def get_setting(name: str, default=None):
    """Get a setting with PAGE_BLOCKS_ prefix.

    Falls back to the package default, then to ``default``.
    """
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"PAGE_BLOCKS_{name}", default)


def get_default_meta(page_key: str) -> dict:
    """Fallback SEO metadata for a page key."""
    meta = get_setting("DEFAULT_META") or {}
    entry = meta.get(page_key) or {}
    return {
        "seo_title": entry.get("seo_title", "") or "",
        "seo_description": entry.get("seo_description", "") or "",
    }


def get_allowed_counts() -> tuple[int, ...]:
    """Item counts a dynamic block may request."""
    counts = tuple(int(c) for c in get_setting("ALLOWED_COUNTS") or ())
    return counts or DEFAULTS["ALLOWED_COUNTS"]
