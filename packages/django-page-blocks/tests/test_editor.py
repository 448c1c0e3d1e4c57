"""Tests for django-page-blocks block editor."""

import pytest


def make_editor(store, document=None, page_key="home_page"):
    from django_page_blocks.documents import PageDocument
    from django_page_blocks.editor import BlockEditor

    if document is not None:
        store.put(page_key, PageDocument.from_dict(document))
    editor = BlockEditor(page_key, store=store)
    editor.load()
    return editor


SCENARIO = {
    "blocks": [{"id": "b1", "type": "hero", "data": {"title": "X"}}],
    "seo_title": "T",
}


class TestLoadAndCommit:
    """Tests for load/commit and change tracking."""

    def test_load_missing_page_is_empty(self, memory_store):
        editor = make_editor(memory_store)
        assert editor.blocks == []
        assert editor.has_changes is False

    def test_load_existing(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        assert [b.id for b in editor.blocks] == ["b1"]
        assert editor.document.seo_title == "T"

    def test_edits_not_persisted_until_commit(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        editor.add_block("text")

        assert editor.has_changes is True
        assert len(memory_store.get("home_page").blocks) == 1

    def test_commit_persists_and_resets_changes(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        new = editor.add_block("text")
        editor.commit()

        assert editor.has_changes is False
        assert memory_store.get("home_page").block_ids() == ["b1", new.id]

    def test_commit_failure_keeps_working_copy(self, memory_store):
        """A failed commit surfaces the error and keeps local edits for retry."""
        from django_page_blocks.exceptions import DocumentSaveError

        editor = make_editor(memory_store, SCENARIO)
        new = editor.add_block("cta")
        memory_store.fail_writes = True

        with pytest.raises(DocumentSaveError):
            editor.commit()

        assert editor.has_changes is True
        assert editor.get_block(new.id) is not None

        memory_store.fail_writes = False
        editor.commit()
        assert editor.has_changes is False
        assert new.id in memory_store.get("home_page").block_ids()

    def test_later_edits_do_not_leak_into_store(self, memory_store):
        """The committed snapshot is independent of the working copy."""
        editor = make_editor(memory_store, SCENARIO)
        editor.commit()
        editor.update_block_data("b1", {"title": "Changed"})

        assert memory_store.get("home_page").get_block("b1").data["title"] == "X"

    def test_revert_to_baseline_clears_changes(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        editor.update_block_data("b1", {"title": "Y"})
        editor.update_block_data("b1", {"title": "X"})
        assert editor.has_changes is False


class TestAddBlock:
    """Tests for add_block."""

    def test_appends_with_defaults(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        new = editor.add_block("text")

        assert editor.blocks[-1] is new
        assert new.id not in ("b1", "")
        assert new.data == {"title": "", "content": "", "centered": False, "max_width": "4xl"}

    def test_defaults_not_shared(self, memory_store):
        editor = make_editor(memory_store)
        first = editor.add_block("features")
        second = editor.add_block("features")
        first.data["features"].append({"title": "x"})
        assert second.data["features"] == []

    def test_unknown_type_rejected(self, memory_store):
        from django_page_blocks.exceptions import UnknownBlockTypeError

        editor = make_editor(memory_store)
        with pytest.raises(UnknownBlockTypeError):
            editor.add_block("mystery")
        assert editor.blocks == []

    def test_dynamic_defaults(self, memory_store):
        editor = make_editor(memory_store)
        news = editor.add_block("dynamic_news")
        products = editor.add_block("dynamic_products")
        assert news.data == {"title": "Company news", "subtitle": "", "count": 3}
        assert products.data["title"] == "New products"


class TestRemoveAndMove:
    """Tests for remove_block and move_block."""

    def test_remove(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        assert editor.remove_block("b1") is True
        assert editor.blocks == []

    def test_remove_missing_is_noop(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        assert editor.remove_block("nope") is False
        assert editor.has_changes is False

    def test_move_swaps_neighbours(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        new = editor.add_block("text")
        assert editor.move_block(new.id, "up") is True
        assert [b.id for b in editor.blocks] == [new.id, "b1"]

    def test_boundary_moves_are_noops(self, memory_store):
        """First block up and last block down leave the order alone."""
        editor = make_editor(memory_store, SCENARIO)
        last = editor.add_block("text")
        before = [b.id for b in editor.blocks]

        assert editor.move_block("b1", "up") is False
        assert editor.move_block(last.id, "down") is False
        assert [b.id for b in editor.blocks] == before

    def test_invalid_direction(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        with pytest.raises(ValueError):
            editor.move_block("b1", "left")


class TestUpdateBlockData:
    """Tests for update_block_data and document metadata."""

    def test_shallow_merge(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        editor.update_block_data("b1", {"subtitle": "Sub"})
        assert editor.get_block("b1").data == {"title": "X", "subtitle": "Sub"}

    def test_missing_block(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        assert editor.update_block_data("nope", {"title": "Y"}) is None

    def test_rejects_non_mapping(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        with pytest.raises(TypeError):
            editor.update_block_data("b1", ["title"])

    def test_update_document_meta(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        editor.update_document_meta({"seo_description": "D"})
        assert editor.document.seo_title == "T"
        assert editor.document.seo_description == "D"

    def test_update_document_meta_none_becomes_empty(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        editor.update_document_meta({"seo_title": None})
        assert editor.document.seo_title == ""

    def test_update_document_meta_unknown_field(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        with pytest.raises(ValueError):
            editor.update_document_meta({"og_image": "x"})


class TestListItems:
    """Tests for the list field helpers."""

    def test_add_uses_item_template(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("features")
        editor.add_list_item(block.id, "features")
        assert editor.get_block(block.id).data["features"] == [
            {"icon": "Star", "title": "", "description": ""}
        ]

    def test_add_string_item(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("checklist")
        editor.add_list_item(block.id, "items")
        editor.add_list_item(block.id, "items", "Certified products")
        assert editor.get_block(block.id).data["items"] == ["", "Certified products"]

    def test_update_merges_mapping_items(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("steps")
        editor.add_list_item(block.id, "steps")
        editor.update_list_item(block.id, "steps", 0, {"title": "Apply"})
        assert editor.get_block(block.id).data["steps"] == [{"title": "Apply", "description": ""}]

    def test_update_replaces_scalar_items(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("checklist")
        editor.add_list_item(block.id, "items", "old")
        editor.update_list_item(block.id, "items", 0, "new")
        assert editor.get_block(block.id).data["items"] == ["new"]

    def test_out_of_range_is_noop(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("checklist")
        assert editor.update_list_item(block.id, "items", 3, "x") is None
        assert editor.remove_list_item(block.id, "items", -1) is None
        assert editor.get_block(block.id).data["items"] == []

    def test_remove(self, memory_store):
        editor = make_editor(memory_store)
        block = editor.add_block("checklist")
        for item in ("a", "b", "c"):
            editor.add_list_item(block.id, "items", item)
        editor.remove_list_item(block.id, "items", 1)
        assert editor.get_block(block.id).data["items"] == ["a", "c"]

    def test_non_list_field_treated_as_empty(self, memory_store):
        editor = make_editor(memory_store, {
            "blocks": [{"id": "b1", "type": "checklist", "data": {"items": "broken"}}],
        })
        editor.add_list_item("b1", "items", "a")
        assert editor.get_block("b1").data["items"] == ["a"]


class TestIdStability:
    """Block ids never change after creation."""

    def test_ids_survive_every_operation(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)
        a = editor.add_block("features")
        b = editor.add_block("checklist")
        ids = {"b1", a.id, b.id}

        editor.move_block(b.id, "up")
        editor.move_block("b1", "down")
        editor.update_block_data(a.id, {"title": "New"})
        editor.update_document_meta({"seo_title": "Other"})
        editor.add_list_item(a.id, "features")
        editor.update_list_item(a.id, "features", 0, {"title": "Fast"})
        editor.remove_list_item(a.id, "features", 0)
        editor.commit()

        assert set(editor.document.block_ids()) == ids
        assert set(memory_store.get("home_page").block_ids()) == ids


class TestScenario:
    """Worked editing scenario end to end."""

    def test_add_move_edit_commit(self, memory_store):
        editor = make_editor(memory_store, SCENARIO)

        new = editor.add_block("text")
        assert [b.id for b in editor.blocks] == ["b1", new.id]
        assert new.data["title"] == ""
        assert new.data["centered"] is False

        editor.move_block(new.id, "up")
        assert [b.id for b in editor.blocks] == [new.id, "b1"]

        editor.update_block_data(new.id, {"title": "Why us"})
        editor.commit()

        stored = memory_store.get("home_page")
        assert stored.block_ids() == [new.id, "b1"]
        assert stored.get_block(new.id).data["title"] == "Why us"
        assert stored.get_block("b1").data == {"title": "X"}
        assert stored.seo_title == "T"


@pytest.mark.django_db
class TestDatabaseBackedEditor:
    """The editor with the default DocumentStore."""

    def test_commit_and_reload(self):
        from django_page_blocks.editor import BlockEditor

        editor = BlockEditor("about_page")
        editor.load()
        block = editor.add_block("timeline")
        editor.add_list_item(block.id, "milestones")
        editor.update_document_meta({"seo_title": "About"})
        editor.commit()

        reloaded = BlockEditor("about_page")
        reloaded.load()
        assert reloaded.document.to_dict() == editor.document.to_dict()
        assert reloaded.has_changes is False


class TestInspection:
    """Tests for describe_blocks and diagnostics."""

    def test_describe_blocks(self, memory_store):
        editor = make_editor(memory_store, {
            "blocks": [
                {"id": "b1", "type": "hero", "data": {}},
                {"id": "b2", "type": "legacy_slider", "data": {}},
                {"id": "b3", "type": "dynamic_news", "data": {}},
            ],
        })
        summary = editor.describe_blocks()
        assert summary[0]["label"] == "Hero Banner"
        assert summary[1] == {
            "id": "b2",
            "type": "legacy_slider",
            "index": 1,
            "label": "legacy_slider",
            "icon": "help-circle",
            "known": False,
            "dynamic": False,
        }
        assert summary[2]["dynamic"] is True

    def test_diagnostics(self, memory_store):
        editor = make_editor(memory_store, {
            "blocks": [
                {"id": "b1", "type": "hero", "data": {"title": 5}},
                {"id": "b2", "type": "legacy_slider", "data": {}},
                {"id": "b3", "type": "text", "data": {"title": "ok"}},
            ],
            "seo_title": "x" * 61,
            "seo_description": "y" * 160,
        })
        kinds = [(d.block_id, d.kind) for d in editor.diagnostics()]
        assert kinds == [("b1", "invalid_data"), ("b2", "unknown_type"), ("", "seo_length")]

    def test_diagnostics_do_not_block_commit(self, memory_store):
        editor = make_editor(memory_store, {
            "blocks": [{"id": "b1", "type": "legacy_slider", "data": {}}],
        })
        editor.update_document_meta({"seo_title": "x" * 100})
        editor.commit()
        assert memory_store.get("home_page").seo_title == "x" * 100


class TestApplyOperation:
    """Tests for JSON-style editor operations."""

    def test_add_block(self, memory_store):
        from django_page_blocks.editor import apply_operation

        editor = make_editor(memory_store)
        block = apply_operation(editor, {"op": "add_block", "type": "cta"})
        assert editor.blocks == [block]

    def test_full_sequence(self, memory_store):
        from django_page_blocks.editor import apply_operation

        editor = make_editor(memory_store, SCENARIO)
        new = apply_operation(editor, {"op": "add_block", "type": "checklist"})
        apply_operation(editor, {"op": "move_block", "id": new.id, "direction": "up"})
        apply_operation(editor, {"op": "update_block_data", "id": new.id, "data": {"title": "Req"}})
        apply_operation(editor, {"op": "add_list_item", "id": new.id, "field": "items", "item": "a"})
        apply_operation(editor, {"op": "update_list_item", "id": new.id, "field": "items", "index": 0, "value": "b"})
        apply_operation(editor, {"op": "add_list_item", "id": new.id, "field": "items"})
        apply_operation(editor, {"op": "remove_list_item", "id": new.id, "field": "items", "index": 1})
        apply_operation(editor, {"op": "update_document_meta", "fields": {"seo_title": "New"}})
        apply_operation(editor, {"op": "remove_block", "id": "b1"})

        assert [b.id for b in editor.blocks] == [new.id]
        assert editor.get_block(new.id).data["items"] == ["b"]
        assert editor.get_block(new.id).data["title"] == "Req"
        assert editor.document.seo_title == "New"

    @pytest.mark.parametrize("op", [
        "not an object",
        {"op": "explode"},
        {"op": "add_block"},
        {"op": "move_block", "id": "b1", "direction": "sideways"},
        {"op": "update_block_data", "id": "b1", "data": "title"},
        {"op": "update_document_meta", "fields": {"robots": "noindex"}},
        {"op": "update_list_item", "id": "b1", "field": "items", "index": 0},
        {"op": "remove_list_item", "id": "b1", "field": "items", "index": True},
    ])
    def test_invalid_operations(self, memory_store, op):
        from django_page_blocks.editor import apply_operation
        from django_page_blocks.exceptions import InvalidOperationError

        editor = make_editor(memory_store, SCENARIO)
        with pytest.raises(InvalidOperationError):
            apply_operation(editor, op)

    def test_unknown_block_type(self, memory_store):
        from django_page_blocks.editor import apply_operation
        from django_page_blocks.exceptions import UnknownBlockTypeError

        editor = make_editor(memory_store)
        with pytest.raises(UnknownBlockTypeError):
            apply_operation(editor, {"op": "add_block", "type": "mystery"})
