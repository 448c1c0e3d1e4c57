import pytest
from django.core.cache import caches


@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test with an empty collection cache."""
    caches["default"].clear()
    yield
    caches["default"].clear()


@pytest.fixture
def block_registry():
    """Registry with built-ins; registrations made by a test are undone."""
    from django_page_blocks.registry import BlockRegistry

    saved = dict(BlockRegistry._plugins)
    yield BlockRegistry
    BlockRegistry._plugins.clear()
    BlockRegistry._plugins.update(saved)


@pytest.fixture
def collection_registry():
    """Collection sources registered by a test are undone afterwards."""
    from django_page_blocks.dynamic import CollectionRegistry

    saved = dict(CollectionRegistry._sources)
    yield CollectionRegistry
    CollectionRegistry._sources.clear()
    CollectionRegistry._sources.update(saved)


@pytest.fixture
def memory_store():
    """In-memory stand-in for DocumentStore."""
    return MemoryStore()


class MemoryStore:
    """DocumentStore with dict storage and switchable write failures."""

    def __init__(self):
        self.documents = {}
        self.fail_writes = False
        self.writes = 0

    def get(self, page_key):
        document = self.documents.get(page_key)
        return document.copy() if document is not None else None

    async def aget(self, page_key):
        return self.get(page_key)

    def put(self, page_key, document):
        from django_page_blocks.exceptions import DocumentSaveError

        if self.fail_writes:
            raise DocumentSaveError(f"Could not save page {page_key!r}: disk full")
        self.writes += 1
        self.documents[page_key] = document.copy()


@pytest.fixture
def user(db):
    """Create a test user."""
    from django.contrib.auth import get_user_model
    User = get_user_model()
    return User.objects.create_user(
        username="testuser",
        email="test@example.com",
        password="testpass123",
    )


@pytest.fixture
def staff_user(db):
    """Create a test staff user."""
    from django.contrib.auth import get_user_model
    User = get_user_model()
    return User.objects.create_user(
        username="staffuser",
        email="staff@example.com",
        password="testpass123",
        is_staff=True,
    )
