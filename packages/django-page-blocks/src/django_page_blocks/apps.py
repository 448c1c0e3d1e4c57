from django.apps import AppConfig


class PageBlocksConfig(AppConfig):
    name = "django_page_blocks"
    verbose_name = "Page Blocks"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        # Built-in block types register themselves on import.
        from . import blocks, dynamic  # noqa: F401
