"""Page document store.

Thin persistence gateway between page documents and ``PageRecord`` rows.
Documents are read wholesale and replaced wholesale at their page key;
there is no partial update and no explicit create step.
"""

import logging

from django.db import DatabaseError, transaction

from .documents import PageDocument
from .exceptions import DocumentSaveError
from .models import PageRecord

logger = logging.getLogger(__name__)


class DocumentStore:
    """Load and save page documents by page key."""

    def get(self, page_key: str) -> PageDocument | None:
        """Return the stored document, or None if the page has none yet."""
        record = PageRecord.objects.filter(page_key=page_key).first()
        if record is None:
            return None
        return record.to_document()

    async def aget(self, page_key: str) -> PageDocument | None:
        """Async variant of ``get`` for the render path."""
        record = await PageRecord.objects.filter(page_key=page_key).afirst()
        if record is None:
            return None
        return record.to_document()

    def put(self, page_key: str, document: PageDocument) -> PageRecord:
        """Replace the document stored at ``page_key`` (upsert).

        Raises:
            DocumentSaveError: If the database rejects the write
        """
        payload = document.to_dict()
        try:
            with transaction.atomic():
                record, created = PageRecord.objects.update_or_create(
                    page_key=page_key,
                    defaults={
                        "blocks": payload["blocks"],
                        "seo_title": payload["seo_title"],
                        "seo_description": payload["seo_description"],
                    },
                )
        except DatabaseError as e:
            logger.error(f"Failed to save page document {page_key!r}: {e}")
            raise DocumentSaveError(f"Could not save page {page_key!r}: {e}") from e

        action = "Created" if created else "Replaced"
        logger.info(f"{action} page document {page_key!r} ({len(document.blocks)} blocks)")
        return record

    def delete(self, page_key: str) -> bool:
        """Remove a stored document. Returns True if one existed."""
        deleted, _ = PageRecord.objects.filter(page_key=page_key).delete()
        return deleted > 0

    def keys(self) -> list[str]:
        """All page keys that have a stored document."""
        return list(PageRecord.objects.order_by("page_key").values_list("page_key", flat=True))
