"""Block Registry for page content blocks.

Maps a block type tag to its default payload, render strategy and editor
schema. Built-in types register when the app is ready; the registry is
treated as read-only afterwards.

Lookups never raise: an unregistered type is an expected case, because
stored documents may reference types a later deploy removed.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import jsonschema

logger = logging.getLogger(__name__)


@dataclass
class BlockPlugin:
    """Definition of a content block type.

    Attributes:
        name: Unique identifier for the block type
        label: Human-readable display name
        defaults: Payload for a freshly added block
        renderer: Render strategy; ``(data) -> str`` for static blocks,
            ``(data, items) -> str`` for dynamic blocks
        schema: Optional JSON Schema describing editable fields, or a
            callable returning one when it depends on settings
        icon: Icon name for UI (default: square)
        category: Grouping category (default: content)
        item_templates: Template for a new item, per list field
        collection: Collection entity for dynamic blocks, None otherwise
    """

    name: str
    label: str
    defaults: dict = field(default_factory=dict)
    renderer: Callable[..., str] | None = None
    schema: dict | Callable[[], dict] | None = None
    icon: str = "square"
    category: str = "content"
    item_templates: dict[str, Any] = field(default_factory=dict)
    collection: str | None = None

    @property
    def is_dynamic(self) -> bool:
        return self.collection is not None

    def default_payload(self) -> dict:
        return copy.deepcopy(self.defaults)

    def get_schema(self) -> dict | None:
        return self.schema() if callable(self.schema) else self.schema

    def new_item(self, field_name: str) -> Any:
        """A fresh item for a list field, from its template."""
        return copy.deepcopy(self.item_templates.get(field_name, {}))


class BlockRegistry:
    """Central registry for content block types."""

    _plugins: dict[str, BlockPlugin] = {}

    @classmethod
    def register(cls, plugin: BlockPlugin) -> None:
        """Register a block plugin."""
        if plugin.name in cls._plugins:
            logger.debug(f"Replacing block plugin {plugin.name!r}")
        cls._plugins[plugin.name] = plugin

    @classmethod
    def unregister(cls, name: str) -> None:
        """Unregister a block plugin by name."""
        cls._plugins.pop(name, None)

    @classmethod
    def get(cls, name: str) -> BlockPlugin | None:
        """Get a block plugin by name."""
        return cls._plugins.get(name)

    @classmethod
    def all(cls) -> list[BlockPlugin]:
        """Get all registered plugins."""
        return list(cls._plugins.values())

    @classmethod
    def get_by_category(cls, category: str) -> list[BlockPlugin]:
        """Get all plugins in a category."""
        return [p for p in cls._plugins.values() if p.category == category]

    @classmethod
    def clear(cls) -> None:
        """Clear all registered plugins (for testing)."""
        cls._plugins.clear()

    @classmethod
    def default_payload(cls, block_type: str) -> dict | None:
        """Initial data for a new block, or None if the type is unknown."""
        plugin = cls.get(block_type)
        if plugin is None:
            return None
        return plugin.default_payload()

    @classmethod
    def render_strategy(cls, block_type: str) -> Callable[..., str] | None:
        """Render function for a block type, or None."""
        plugin = cls.get(block_type)
        if plugin is None:
            return None
        return plugin.renderer

    @classmethod
    def validate_block(cls, block_type: str, data: dict) -> list[str]:
        """Validate block data against its schema.

        Validation is advisory: renderers default every field, so these
        messages are shown to operators but never block saving or rendering.

        Args:
            block_type: The block type name
            data: The block data to validate

        Returns:
            List of error messages (empty if valid)
        """
        plugin = cls.get(block_type)
        if plugin is None:
            return [f"Unknown block type: {block_type}"]

        schema = plugin.get_schema()
        if schema is None:
            return []

        validator_cls = jsonschema.validators.validator_for(schema)
        validator = validator_cls(schema)
        return [
            _format_error(error)
            for error in sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        ]


def _format_error(error: jsonschema.ValidationError) -> str:
    path = ".".join(str(p) for p in error.path)
    return f"{path}: {error.message}" if path else error.message


def block(
    name: str,
    label: str,
    defaults: dict | None = None,
    schema: dict | Callable[[], dict] | None = None,
    icon: str = "square",
    category: str = "content",
    item_templates: dict | None = None,
):
    """Decorator to register a function as a static block renderer.

    The decorated function becomes the block's render strategy.

    Example:
        @block(name="quote", label="Quote", defaults={"text": ""})
        def render_quote(data):
            return format_html("<blockquote>{}</blockquote>", data.get("text", ""))
    """

    def decorator(func: Callable[[dict], str]) -> Callable[[dict], str]:
        BlockRegistry.register(
            BlockPlugin(
                name=name,
                label=label,
                defaults=defaults or {},
                renderer=func,
                schema=schema,
                icon=icon,
                category=category,
                item_templates=item_templates or {},
            )
        )
        return func

    return decorator
