"""Tests for the seed_pages management command."""

from io import StringIO

import pytest
from django.core.management import call_command


@pytest.mark.django_db
class TestSeedPages:
    """Tests for seed_pages."""

    def test_seeds_standard_pages(self):
        from django_page_blocks.store import DocumentStore

        out = StringIO()
        call_command("seed_pages", stdout=out)

        store = DocumentStore()
        assert store.keys() == ["about_page", "contacts_page", "home_page", "suppliers_page"]
        home = store.get("home_page")
        assert home.seo_title
        assert [b.type for b in home.blocks][0] == "hero"
        assert "Seeded: home_page" in out.getvalue()

    def test_seeded_blocks_are_known_and_valid(self):
        from django_page_blocks.registry import BlockRegistry
        from django_page_blocks.store import DocumentStore

        call_command("seed_pages", stdout=StringIO())

        store = DocumentStore()
        for key in store.keys():
            document = store.get(key)
            assert len(set(document.block_ids())) == len(document.blocks)
            for instance in document.blocks:
                assert BlockRegistry.validate_block(instance.type, instance.data) == [], (key, instance.type)

    def test_existing_pages_left_alone(self):
        from django_page_blocks.documents import PageDocument
        from django_page_blocks.store import DocumentStore

        store = DocumentStore()
        store.put("home_page", PageDocument(seo_title="Custom"))

        out = StringIO()
        call_command("seed_pages", stdout=out)

        assert store.get("home_page").seo_title == "Custom"
        assert "Skipping existing page: home_page" in out.getvalue()

    def test_force_overwrites(self):
        from django_page_blocks.documents import PageDocument
        from django_page_blocks.store import DocumentStore

        store = DocumentStore()
        store.put("home_page", PageDocument(seo_title="Custom"))

        call_command("seed_pages", "--force", stdout=StringIO())

        assert store.get("home_page").seo_title != "Custom"
        assert store.get("home_page").blocks
