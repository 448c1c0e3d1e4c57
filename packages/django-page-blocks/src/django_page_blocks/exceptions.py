"""Exceptions for django-page-blocks."""


class PageBlocksError(Exception):
    """Base exception for page block errors."""
    pass


class UnknownBlockTypeError(PageBlocksError):
    """Raised when a block type is not registered."""
    pass


class InvalidOperationError(PageBlocksError):
    """Raised when an editor operation is malformed."""
    pass


class DocumentSaveError(PageBlocksError):
    """Raised when a page document cannot be persisted."""
    pass


class CollectionFetchError(PageBlocksError):
    """Raised when a dynamic collection query fails."""
    pass


class CollectionNotConfiguredError(CollectionFetchError):
    """Raised when no source is configured for a collection entity."""
    pass
