"""Models for django-page-blocks."""

from django.db import models

from .documents import PageDocument


class PageRecord(models.Model):
    """Stored page document, one row per page key.

    The block list is kept as opaque JSON: the storage layer never
    validates block payloads, so documents written by any version of the
    block registry stay readable.

    Attributes:
        page_key: Stable external identifier of the page (e.g. ``home_page``)
        blocks: Ordered list of ``{"id", "type", "data"}`` mappings
        seo_title: Page title for search engines
        seo_description: Meta description
    """

    page_key = models.CharField(max_length=100, unique=True)
    blocks = models.JSONField(default=list, blank=True)
    seo_title = models.CharField(max_length=255, blank=True, default="")
    seo_description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["page_key"]
        verbose_name = "page document"
        verbose_name_plural = "page documents"

    def __str__(self):
        return f"{self.page_key} ({len(self.blocks or [])} blocks)"

    def to_document(self) -> PageDocument:
        return PageDocument.from_dict({
            "blocks": self.blocks,
            "seo_title": self.seo_title,
            "seo_description": self.seo_description,
        })
