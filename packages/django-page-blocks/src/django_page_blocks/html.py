"""HTML helpers shared by block render strategies.

Payload fields are never trusted to be present or well-typed, so each
reader here takes a default and falls back to it rather than raising.
Plain text goes through Django's escaping (``format_html``); rich text
fields go through ``sanitize_html``.
"""

import re
from typing import Any

import bleach
from django.utils.html import format_html, format_html_join
from django.utils.safestring import SafeString, mark_safe

from .conf import get_setting

_CSS_TOKEN_RE = re.compile(r"^[A-Za-z0-9_:/.\- ]{1,80}$")
_URL_SCHEME_RE = re.compile(r"^(https?:|mailto:|tel:)", re.IGNORECASE)


def sanitize_html(html: Any) -> SafeString:
    """Strip everything but the allow-listed tags and attributes."""
    if not isinstance(html, str) or not html:
        return mark_safe("")
    clean = bleach.clean(
        html,
        tags=set(get_setting("ALLOWED_TAGS")),
        attributes=list(get_setting("ALLOWED_ATTRIBUTES")),
        strip=True,
    )
    return mark_safe(clean)


def get_text(data: Any, key: str, default: str = "") -> str:
    """Read a string field; numbers are stringified, anything else defaults."""
    if not isinstance(data, dict):
        return default
    value = data.get(key)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def get_int(data: Any, key: str, default: int) -> int:
    if not isinstance(data, dict):
        return default
    value = data.get(key)
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_bool(data: Any, key: str, default: bool = False) -> bool:
    if not isinstance(data, dict):
        return default
    value = data.get(key)
    return value if isinstance(value, bool) else default


def get_list(data: Any, key: str) -> list:
    if not isinstance(data, dict):
        return []
    value = data.get(key)
    return value if isinstance(value, list) else []


def get_mapping(data: Any, key: str) -> dict | None:
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    return value if isinstance(value, dict) else None


def css_token(data: Any, key: str, default: str) -> str:
    """Read a CSS class token, rejecting anything that is not a plain class list."""
    value = get_text(data, key, default)
    return value if _CSS_TOKEN_RE.match(value) else default


def heading(tag: str, text: str, css_class: str) -> SafeString:
    """Render a heading element, or nothing if ``text`` is empty."""
    if not text:
        return mark_safe("")
    return format_html('<{} class="{}">{}</{}>', mark_safe(tag), css_class, text, mark_safe(tag))


def paragraph(text: str, css_class: str) -> SafeString:
    if not text:
        return mark_safe("")
    return format_html('<p class="{}">{}</p>', css_class, text)


def rich_text(html: Any, css_class: str) -> SafeString:
    clean = sanitize_html(html)
    if not clean:
        return mark_safe("")
    return format_html('<div class="{}">{}</div>', css_class, clean)


def safe_url(value: Any, default: str = "") -> str:
    """Allow relative links and http(s), mailto and tel targets only."""
    if not isinstance(value, str):
        return default
    value = value.strip()
    if not value:
        return default
    if value.startswith(("/", "#", "?")) and not value.startswith("//"):
        return value
    if _URL_SCHEME_RE.match(value):
        return value
    return default


def link_button(text: str, href: str, css_class: str = "button") -> SafeString:
    """Render a call-to-action link; both label and target are required."""
    href = safe_url(href)
    if not text or not href:
        return mark_safe("")
    return format_html('<a href="{}" class="{}">{}</a>', href, css_class, text)


def join(fragments) -> SafeString:
    """Concatenate already-safe fragments."""
    return format_html_join("", "{}", ((f,) for f in fragments if f))
