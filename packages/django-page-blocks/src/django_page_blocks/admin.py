"""Django admin configuration for django-page-blocks."""

from django.contrib import admin

from .models import PageRecord


@admin.register(PageRecord)
class PageRecordAdmin(admin.ModelAdmin):
    """Admin for stored page documents.

    Blocks are edited through the editor API; the admin exposes the raw
    JSON for inspection and repair.
    """

    list_display = ["page_key", "seo_title", "block_count", "updated_at"]
    search_fields = ["page_key", "seo_title", "seo_description"]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {
            "fields": ["page_key"],
        }),
        ("SEO", {
            "fields": ["seo_title", "seo_description"],
        }),
        ("Blocks", {
            "fields": ["blocks"],
            "classes": ["collapse"],
        }),
        ("System", {
            "fields": ["created_at", "updated_at"],
            "classes": ["collapse"],
        }),
    ]

    @admin.display(description="Blocks")
    def block_count(self, obj):
        return len(obj.blocks) if isinstance(obj.blocks, list) else 0
