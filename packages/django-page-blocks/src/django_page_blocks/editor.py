"""Block editor.

Holds an in-memory working copy of one page document, mutates it through
a small closed set of operations and persists it on explicit commit.

Block ids are assigned once in ``add_block`` and never touched again, so
an operator's selection survives reorders and edits. Nothing is written
to the store until ``commit()``; a failed commit keeps the working copy
so the operator can retry.

Usage:
    editor = BlockEditor("home_page")
    editor.load()
    new = editor.add_block("text")
    editor.update_block_data(new.id, {"title": "Why us"})
    editor.move_block(new.id, "up")
    if editor.has_changes:
        editor.commit()
"""

import logging
from typing import Any

from .documents import BlockDiagnostic, BlockInstance, PageDocument, generate_block_id
from .exceptions import InvalidOperationError, UnknownBlockTypeError
from .registry import BlockRegistry
from .store import DocumentStore

logger = logging.getLogger(__name__)

DIRECTIONS = ("up", "down")

# Recommended lengths for search snippets
SEO_TITLE_MAX = 60
SEO_DESCRIPTION_MAX = 160


class BlockEditor:
    """Working copy of a page document with change tracking."""

    def __init__(self, page_key: str, store: DocumentStore | None = None, registry=BlockRegistry):
        self.page_key = page_key
        self.store = store or DocumentStore()
        self.registry = registry
        self.document = PageDocument.empty()
        self._baseline = PageDocument.empty()

    # -- loading and saving ---------------------------------------------

    def load(self) -> PageDocument:
        """Load the stored document; a page with none starts empty."""
        stored = self.store.get(self.page_key)
        if stored is None:
            logger.debug(f"No document for {self.page_key!r}, starting empty")
            stored = PageDocument.empty()
        self.document = stored.copy()
        self._baseline = stored.copy()
        return self.document

    def commit(self) -> PageDocument:
        """Persist the working copy, replacing the stored document.

        On success the saved state becomes the new baseline. On failure the
        working copy is left untouched and the error propagates.

        Raises:
            DocumentSaveError: If the store rejects the write
        """
        snapshot = self.document.copy()
        self.store.put(self.page_key, snapshot)
        self._baseline = snapshot
        return self.document

    @property
    def has_changes(self) -> bool:
        """Whether the working copy differs from the last load or commit."""
        return self.document.to_dict() != self._baseline.to_dict()

    # -- block operations -----------------------------------------------

    @property
    def blocks(self) -> list[BlockInstance]:
        return self.document.blocks

    def get_block(self, block_id: str) -> BlockInstance | None:
        return self.document.get_block(block_id)

    def add_block(self, block_type: str) -> BlockInstance:
        """Append a new block with a fresh id and the type's default payload.

        Raises:
            UnknownBlockTypeError: If ``block_type`` is not registered
        """
        data = self.registry.default_payload(block_type)
        if data is None:
            raise UnknownBlockTypeError(f"Unknown block type: {block_type}")

        instance = BlockInstance(
            id=generate_block_id(set(self.document.block_ids())),
            type=block_type,
            data=data,
        )
        self.document.blocks.append(instance)
        return instance

    def remove_block(self, block_id: str) -> bool:
        """Remove a block. Returns False if no block has that id."""
        idx = self.document.index_of(block_id)
        if idx is None:
            return False
        del self.document.blocks[idx]
        return True

    def move_block(self, block_id: str, direction: str) -> bool:
        """Swap a block with its neighbour.

        Moving the first block up or the last block down is a no-op.

        Returns:
            True if the order changed
        """
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

        idx = self.document.index_of(block_id)
        if idx is None:
            return False

        target = idx - 1 if direction == "up" else idx + 1
        if target < 0 or target >= len(self.document.blocks):
            return False

        blocks = self.document.blocks
        blocks[idx], blocks[target] = blocks[target], blocks[idx]
        return True

    def update_block_data(self, block_id: str, fields: dict) -> BlockInstance | None:
        """Shallow-merge ``fields`` into a block's data.

        Fields not mentioned are preserved. Returns None if no block has
        that id.
        """
        if not isinstance(fields, dict):
            raise TypeError(f"fields must be a mapping, got {type(fields).__name__}")

        instance = self.document.get_block(block_id)
        if instance is None:
            return None
        instance.data = {**instance.data, **fields}
        return instance

    def update_document_meta(self, fields: dict) -> PageDocument:
        """Shallow-merge into ``seo_title`` / ``seo_description``."""
        unknown = set(fields) - set(PageDocument.META_FIELDS)
        if unknown:
            raise ValueError(f"Unknown page metadata fields: {sorted(unknown)}")

        for name, value in fields.items():
            setattr(self.document, name, "" if value is None else str(value))
        return self.document

    # -- list fields ------------------------------------------------------

    def add_list_item(self, block_id: str, field_name: str, item: Any = None) -> BlockInstance | None:
        """Append an item to a list field; defaults to the type's item template."""
        instance = self.document.get_block(block_id)
        if instance is None:
            return None

        if item is None:
            plugin = self.registry.get(instance.type)
            item = plugin.new_item(field_name) if plugin else {}

        items = self._list_field(instance, field_name)
        return self.update_block_data(block_id, {field_name: items + [item]})

    def update_list_item(
        self, block_id: str, field_name: str, index: int, value: Any
    ) -> BlockInstance | None:
        """Change one list item.

        A mapping merged into a mapping item keeps the item's other keys;
        any other value replaces the item. Out-of-range indexes are a no-op.
        """
        instance = self.document.get_block(block_id)
        if instance is None:
            return None

        items = self._list_field(instance, field_name)
        if not 0 <= index < len(items):
            return None

        current = items[index]
        if isinstance(current, dict) and isinstance(value, dict):
            items[index] = {**current, **value}
        else:
            items[index] = value
        return self.update_block_data(block_id, {field_name: items})

    def remove_list_item(self, block_id: str, field_name: str, index: int) -> BlockInstance | None:
        instance = self.document.get_block(block_id)
        if instance is None:
            return None

        items = self._list_field(instance, field_name)
        if not 0 <= index < len(items):
            return None

        del items[index]
        return self.update_block_data(block_id, {field_name: items})

    @staticmethod
    def _list_field(instance: BlockInstance, field_name: str) -> list:
        value = instance.data.get(field_name)
        return list(value) if isinstance(value, list) else []

    # -- inspection -------------------------------------------------------

    def describe_blocks(self) -> list[dict]:
        """Summaries for an editor block list, unknown types included."""
        summary = []
        for index, instance in enumerate(self.document.blocks):
            plugin = self.registry.get(instance.type)
            summary.append({
                "id": instance.id,
                "type": instance.type,
                "index": index,
                "label": plugin.label if plugin else instance.type,
                "icon": plugin.icon if plugin else "help-circle",
                "known": plugin is not None,
                "dynamic": bool(plugin and plugin.is_dynamic),
            })
        return summary

    def diagnostics(self) -> list[BlockDiagnostic]:
        """Advisory problems in the working copy. Never blocks a commit."""
        found = []
        for instance in self.document.blocks:
            if self.registry.get(instance.type) is None:
                found.append(BlockDiagnostic(
                    instance.id, instance.type, "unknown_type",
                    f"Unknown block type: {instance.type or '(empty)'}",
                ))
                continue
            for message in self.registry.validate_block(instance.type, instance.data):
                found.append(BlockDiagnostic(instance.id, instance.type, "invalid_data", message))

        if len(self.document.seo_title) > SEO_TITLE_MAX:
            found.append(BlockDiagnostic(
                "", "", "seo_length",
                f"seo_title is {len(self.document.seo_title)} characters (recommended {SEO_TITLE_MAX})",
            ))
        if len(self.document.seo_description) > SEO_DESCRIPTION_MAX:
            found.append(BlockDiagnostic(
                "", "", "seo_length",
                f"seo_description is {len(self.document.seo_description)} characters "
                f"(recommended {SEO_DESCRIPTION_MAX})",
            ))
        return found


def _require(op: dict, key: str, kind: type):
    value = op.get(key)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise InvalidOperationError(f"Operation {op.get('op')!r} needs {key!r} ({kind.__name__})")
    return value


def apply_operation(editor: BlockEditor, op: Any):
    """Apply one JSON-style operation to an editor.

    Example:
        apply_operation(editor, {"op": "move_block", "id": "block_1", "direction": "up"})

    Raises:
        InvalidOperationError: If the operation is unknown or malformed
        UnknownBlockTypeError: If ``add_block`` names an unregistered type
    """
    if not isinstance(op, dict):
        raise InvalidOperationError("Operation must be an object")

    name = op.get("op")
    if name == "add_block":
        return editor.add_block(_require(op, "type", str))
    if name == "remove_block":
        return editor.remove_block(_require(op, "id", str))
    if name == "move_block":
        direction = _require(op, "direction", str)
        if direction not in DIRECTIONS:
            raise InvalidOperationError(f"Invalid direction: {direction!r}")
        return editor.move_block(_require(op, "id", str), direction)
    if name == "update_block_data":
        return editor.update_block_data(_require(op, "id", str), _require(op, "data", dict))
    if name == "update_document_meta":
        fields = _require(op, "fields", dict)
        try:
            return editor.update_document_meta(fields)
        except ValueError as e:
            raise InvalidOperationError(str(e)) from e
    if name == "add_list_item":
        return editor.add_list_item(_require(op, "id", str), _require(op, "field", str), op.get("item"))
    if name == "update_list_item":
        if "value" not in op:
            raise InvalidOperationError("Operation 'update_list_item' needs 'value'")
        return editor.update_list_item(
            _require(op, "id", str), _require(op, "field", str), _require(op, "index", int), op["value"]
        )
    if name == "remove_list_item":
        return editor.remove_list_item(
            _require(op, "id", str), _require(op, "field", str), _require(op, "index", int)
        )
    raise InvalidOperationError(f"Unknown operation: {name!r}")
