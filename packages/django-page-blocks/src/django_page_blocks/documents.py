"""Page document data model.

A page document is an ordered list of typed blocks plus page-level SEO
metadata. This is the durable contract shared by the editor, the store
and the renderer:

    {
        "blocks": [{"id": "block_...", "type": "hero", "data": {...}}],
        "seo_title": "...",
        "seo_description": "...",
    }

Parsing is tolerant: documents written by older deploys, or damaged by
hand edits, still load. Unknown block types are preserved as-is.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


def generate_block_id(existing: set[str] | None = None) -> str:
    """Generate a block id not present in ``existing``."""
    existing = existing or set()
    while True:
        block_id = f"block_{uuid.uuid4().hex[:16]}"
        if block_id not in existing:
            return block_id


@dataclass
class BlockInstance:
    """One typed content unit within a page.

    Attributes:
        id: Opaque identifier, unique within its document, never regenerated
        type: Registry key selecting defaults and render strategy
        data: Open payload; every reader defaults missing fields
    """

    id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "data": copy.deepcopy(self.data)}


@dataclass
class PageDocument:
    """Full representation of one page's blocks and metadata."""

    blocks: list[BlockInstance] = field(default_factory=list)
    seo_title: str = ""
    seo_description: str = ""

    META_FIELDS = ("seo_title", "seo_description")

    @classmethod
    def empty(cls) -> "PageDocument":
        return cls()

    @classmethod
    def from_dict(cls, raw: Any) -> "PageDocument":
        """Build a document from stored JSON, repairing what it can.

        - non-mapping input yields an empty document
        - non-list ``blocks`` yields no blocks
        - non-mapping block entries are dropped
        - missing or duplicate ids are replaced with fresh ones
        - non-string ``type`` becomes ``""`` (rendered as unknown)
        - non-mapping ``data`` becomes ``{}``
        """
        if not isinstance(raw, dict):
            return cls()
        return cls(
            blocks=parse_blocks(raw.get("blocks")),
            seo_title=_as_text(raw.get("seo_title")),
            seo_description=_as_text(raw.get("seo_description")),
        )

    def to_dict(self) -> dict:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "seo_title": self.seo_title,
            "seo_description": self.seo_description,
        }

    def copy(self) -> "PageDocument":
        return copy.deepcopy(self)

    def block_ids(self) -> list[str]:
        return [b.id for b in self.blocks]

    def index_of(self, block_id: str) -> int | None:
        for idx, b in enumerate(self.blocks):
            if b.id == block_id:
                return idx
        return None

    def get_block(self, block_id: str) -> BlockInstance | None:
        idx = self.index_of(block_id)
        return None if idx is None else self.blocks[idx]


@dataclass(frozen=True)
class BlockDiagnostic:
    """A non-fatal problem found while editing or rendering a block.

    Attributes:
        block_id: Block the problem belongs to, "" for page-level problems
        block_type: Type tag of that block
        kind: Machine-readable category, e.g. ``unknown_type``
        message: Human-readable explanation
    """

    block_id: str
    block_type: str
    kind: str
    message: str

    def to_dict(self) -> dict:
        return {
            "block_id": self.block_id,
            "block_type": self.block_type,
            "kind": self.kind,
            "message": self.message,
        }


def parse_blocks(raw_blocks: Any) -> list[BlockInstance]:
    """Parse a stored block list into BlockInstance objects."""
    if not isinstance(raw_blocks, list):
        if raw_blocks is not None:
            logger.warning(f"Ignoring non-list blocks value: {type(raw_blocks).__name__}")
        return []

    blocks: list[BlockInstance] = []
    seen: set[str] = set()
    for position, raw in enumerate(raw_blocks):
        if isinstance(raw, BlockInstance):
            raw = raw.to_dict()
        if not isinstance(raw, dict):
            logger.warning(f"Dropping malformed block at position {position}")
            continue

        block_id = raw.get("id")
        if not isinstance(block_id, str) or not block_id or block_id in seen:
            new_id = generate_block_id(seen)
            logger.warning(f"Block at position {position} had id {block_id!r}, assigned {new_id}")
            block_id = new_id
        seen.add(block_id)

        block_type = raw.get("type")
        if not isinstance(block_type, str):
            block_type = ""

        data = raw.get("data")
        if not isinstance(data, dict):
            data = {}

        blocks.append(BlockInstance(id=block_id, type=block_type, data=copy.deepcopy(data)))
    return blocks


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
