"""Built-in block types for django-page-blocks.

Provides the standard marketing page blocks. Importing this module
registers them; the app config does so on startup.

Every strategy reads its payload through the ``html`` field readers, so a
block saved with missing or mistyped fields still renders.
"""

from django.utils.html import format_html

from .html import (
    css_token,
    get_bool,
    get_int,
    get_list,
    get_mapping,
    get_text,
    heading,
    join,
    link_button,
    paragraph,
    rich_text,
    safe_url,
)
from .registry import block

_STRING = {"type": "string"}


def _section(block_type: str, bg: str, inner) -> str:
    return format_html(
        '<section class="block block-{} {}"><div class="container">{}</div></section>',
        block_type,
        bg,
        inner,
    )


def _items(data: dict, key: str) -> list[dict]:
    """List items that are mappings; anything else in the list is skipped."""
    return [item for item in get_list(data, key) if isinstance(item, dict)]


@block(
    name="hero",
    label="Hero Banner",
    category="layout",
    icon="image",
    defaults={"title": "Title", "subtitle": "", "cta_text": "", "cta_href": ""},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "subtitle": _STRING,
            "cta_text": _STRING,
            "cta_href": _STRING,
            "cta_variant": _STRING,
        },
    },
)
def render_hero(data: dict) -> str:
    """Render a hero banner section."""
    variant = css_token(data, "cta_variant", "default")
    return _section(
        "hero",
        "bg-hero",
        join([
            heading("h1", get_text(data, "title", "Title"), "hero-title"),
            paragraph(get_text(data, "subtitle"), "hero-subtitle"),
            link_button(
                get_text(data, "cta_text"),
                get_text(data, "cta_href"),
                f"button button-{variant}",
            ),
        ]),
    )


@block(
    name="text",
    label="Text",
    category="content",
    icon="type",
    defaults={"title": "", "content": "", "centered": False, "max_width": "4xl"},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "content": _STRING,
            "centered": {"type": "boolean"},
            "max_width": _STRING,
            "bg_color": _STRING,
        },
    },
)
def render_text(data: dict) -> str:
    """Render a title plus rich text body."""
    width = css_token(data, "max_width", "4xl")
    align = " text-center" if get_bool(data, "centered") else ""
    return _section(
        "text",
        css_token(data, "bg_color", "bg-background"),
        format_html(
            '<div class="max-w-{}{}">{}</div>',
            width,
            align,
            join([
                heading("h2", get_text(data, "title"), "section-title"),
                rich_text(data.get("content") if isinstance(data, dict) else None, "prose"),
            ]),
        ),
    )


@block(
    name="features",
    label="Feature Cards",
    category="content",
    icon="layout-grid",
    defaults={"title": "", "subtitle": "", "features": [], "columns": 4},
    item_templates={"features": {"icon": "Star", "title": "", "description": ""}},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "subtitle": _STRING,
            "columns": {"type": "integer", "minimum": 1, "maximum": 6},
            "features": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {"icon": _STRING, "title": _STRING, "description": _STRING},
                },
            },
        },
    },
)
def render_features(data: dict) -> str:
    """Render a grid of feature cards."""
    columns = min(max(get_int(data, "columns", 4), 1), 6)
    cards = [
        format_html(
            '<div class="feature-card">{}{}{}</div>',
            format_html('<span class="icon" data-icon="{}"></span>', css_token(f, "icon", ""))
            if css_token(f, "icon", "") else "",
            heading("h3", get_text(f, "title"), "card-title"),
            paragraph(get_text(f, "description"), "card-text"),
        )
        for f in _items(data, "features")
    ]
    return _section(
        "features",
        css_token(data, "bg_color", "bg-muted"),
        join([
            heading("h2", get_text(data, "title"), "section-title"),
            paragraph(get_text(data, "subtitle"), "section-subtitle"),
            format_html('<div class="grid columns-{}">{}</div>', columns, join(cards)),
        ]),
    )


@block(
    name="image_text",
    label="Image and Text",
    category="media",
    icon="image",
    defaults={"title": "", "content": "", "image_url": "", "reverse": False, "stats": []},
    item_templates={"stats": {"value": "", "label": ""}},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "content": _STRING,
            "image_url": _STRING,
            "image_alt": _STRING,
            "reverse": {"type": "boolean"},
            "stats": {
                "type": "array",
                "items": {"type": "object", "properties": {"value": _STRING, "label": _STRING}},
            },
            "badge": {
                "type": ["object", "null"],
                "properties": {"value": _STRING, "label": _STRING},
            },
        },
    },
)
def render_image_text(data: dict) -> str:
    """Render text beside an image, with optional stats and badge."""
    stats = [
        format_html(
            '<div class="stat"><div class="stat-value">{}</div><div class="stat-label">{}</div></div>',
            get_text(s, "value"),
            get_text(s, "label"),
        )
        for s in _items(data, "stats")
    ]
    text_column = join([
        heading("h2", get_text(data, "title"), "section-title"),
        rich_text(data.get("content") if isinstance(data, dict) else None, "prose"),
        format_html('<div class="stats">{}</div>', join(stats)) if stats else "",
    ])

    image_url = safe_url(get_text(data, "image_url"))
    badge = get_mapping(data, "badge")
    media_column = join([
        format_html('<img src="{}" alt="{}">', image_url, get_text(data, "image_alt"))
        if image_url else "",
        format_html(
            '<div class="badge"><div class="badge-value">{}</div><div class="badge-label">{}</div></div>',
            get_text(badge, "value"),
            get_text(badge, "label"),
        )
        if badge else "",
    ])

    reverse = " reverse" if get_bool(data, "reverse") else ""
    return _section(
        "image-text",
        css_token(data, "bg_color", "bg-background"),
        format_html(
            '<div class="split{}"><div class="split-text">{}</div><div class="split-media">{}</div></div>',
            reverse,
            text_column,
            media_column,
        ),
    )


@block(
    name="timeline",
    label="Timeline",
    category="content",
    icon="clock",
    defaults={"title": "", "milestones": []},
    item_templates={"milestones": {"year": "", "title": "", "description": ""}},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "milestones": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "year": {"type": ["string", "integer"]},
                        "title": _STRING,
                        "description": _STRING,
                    },
                },
            },
        },
    },
)
def render_timeline(data: dict) -> str:
    """Render milestones in order."""
    milestones = [
        format_html(
            '<li class="milestone"><span class="milestone-year">{}</span>{}{}</li>',
            get_text(m, "year"),
            heading("h3", get_text(m, "title"), "milestone-title"),
            paragraph(get_text(m, "description"), "milestone-text"),
        )
        for m in _items(data, "milestones")
    ]
    return _section(
        "timeline",
        css_token(data, "bg_color", "bg-background"),
        join([
            heading("h2", get_text(data, "title"), "section-title"),
            format_html('<ol class="timeline">{}</ol>', join(milestones)),
        ]),
    )


@block(
    name="cta",
    label="Call to Action",
    category="marketing",
    icon="zap",
    defaults={"title": "", "subtitle": "", "cta_text": "", "cta_href": ""},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "subtitle": _STRING,
            "cta_text": _STRING,
            "cta_href": _STRING,
        },
    },
)
def render_cta(data: dict) -> str:
    """Render a call-to-action band."""
    return _section(
        "cta",
        css_token(data, "bg_color", "bg-secondary"),
        join([
            heading("h2", get_text(data, "title"), "section-title"),
            paragraph(get_text(data, "subtitle"), "section-subtitle"),
            link_button(get_text(data, "cta_text"), get_text(data, "cta_href")),
        ]),
    )


@block(
    name="numbered_cards",
    label="Numbered Cards",
    category="content",
    icon="list",
    defaults={"title": "", "cards": [], "columns": 3},
    item_templates={"cards": {"title": "", "description": ""}},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "columns": {"type": "integer", "minimum": 1, "maximum": 6},
            "cards": {
                "type": "array",
                "items": {"type": "object", "properties": {"title": _STRING, "description": _STRING}},
            },
        },
    },
)
def render_numbered_cards(data: dict) -> str:
    """Render cards numbered by position."""
    columns = min(max(get_int(data, "columns", 3), 1), 6)
    cards = [
        format_html(
            '<div class="numbered-card"><span class="number">{}</span>{}{}</div>',
            index,
            heading("h3", get_text(c, "title"), "card-title"),
            paragraph(get_text(c, "description"), "card-text"),
        )
        for index, c in enumerate(_items(data, "cards"), start=1)
    ]
    return _section(
        "numbered-cards",
        css_token(data, "bg_color", "bg-muted"),
        join([
            heading("h2", get_text(data, "title"), "section-title"),
            format_html('<div class="grid columns-{}">{}</div>', columns, join(cards)),
        ]),
    )


@block(
    name="checklist",
    label="Checklist",
    category="content",
    icon="check-square",
    defaults={"title": "", "subtitle": "", "items": [], "sidebar": None},
    item_templates={"items": ""},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "subtitle": _STRING,
            "items": {"type": "array", "items": _STRING},
            "sidebar": {
                "type": ["object", "null"],
                "properties": {
                    "title": _STRING,
                    "content": _STRING,
                    "cta_text": _STRING,
                    "cta_href": _STRING,
                },
            },
        },
    },
)
def render_checklist(data: dict) -> str:
    """Render a checklist with an optional sidebar panel."""
    items = [
        format_html('<li class="check-item">{}</li>', item)
        for item in get_list(data, "items")
        if isinstance(item, str) and item
    ]
    sidebar = get_mapping(data, "sidebar")
    aside = ""
    if sidebar:
        aside = format_html(
            '<aside class="sidebar">{}{}{}</aside>',
            heading("h3", get_text(sidebar, "title"), "sidebar-title"),
            rich_text(sidebar.get("content"), "sidebar-text"),
            link_button(get_text(sidebar, "cta_text"), get_text(sidebar, "cta_href")),
        )
    return _section(
        "checklist",
        css_token(data, "bg_color", "bg-background"),
        format_html(
            '<div class="checklist-main">{}{}<ul class="checklist">{}</ul></div>{}',
            heading("h2", get_text(data, "title"), "section-title"),
            paragraph(get_text(data, "subtitle"), "section-subtitle"),
            join(items),
            aside,
        ),
    )


@block(
    name="steps",
    label="Process Steps",
    category="content",
    icon="footprints",
    defaults={"title": "", "steps": []},
    item_templates={"steps": {"title": "", "description": ""}},
    schema={
        "type": "object",
        "properties": {
            "title": _STRING,
            "steps": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "number": {"type": ["string", "integer"]},
                        "title": _STRING,
                        "description": _STRING,
                    },
                },
            },
        },
    },
)
def render_steps(data: dict) -> str:
    """Render process steps; an explicit ``number`` overrides the position."""
    steps = [
        format_html(
            '<div class="step"><span class="number">{}</span>{}{}</div>',
            get_text(s, "number") or index,
            heading("h4", get_text(s, "title"), "step-title"),
            paragraph(get_text(s, "description"), "step-text"),
        )
        for index, s in enumerate(_items(data, "steps"), start=1)
    ]
    return _section(
        "steps",
        css_token(data, "bg_color", "bg-muted"),
        join([
            heading("h2", get_text(data, "title"), "section-title"),
            format_html('<div class="steps count-{}">{}</div>', len(steps), join(steps)),
        ]),
    )
