"""
Unit tests for the dynamic tech collection.
"""

import itertools

import pytest

import signup_form.tech_collection as tech_collection
from signup_form.exceptions import UnknownEntryError
from signup_form.schema_engine import ErrorCode, validate
from signup_form.tech_collection import TechCollection


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


class TestTechCollection:
    """Test class for TechCollection."""

    def setup_method(self):
        self.state = {}
        self.collection = TechCollection(self.state, id_factory=sequential_ids())

    def test_starts_empty(self):
        assert len(self.collection) == 0
        assert self.collection.current_entries() == ()
        assert self.state == {"techs_entries": {}, "techs_order": []}

    def test_append_adds_entry_at_end_with_default_knowledge(self):
        self.collection.append("Go", "50")
        entry = self.collection.append()

        assert len(self.collection) == 2
        assert entry.stable_id == "id2"
        assert entry.title == ""
        assert entry.knowledge == 0
        assert [e.title for e in self.collection.current_entries()] == ["Go", ""]

    def test_append_generates_unique_ids(self):
        ids = iter(["dup", "dup", "fresh"])
        collection = TechCollection({}, id_factory=lambda: next(ids))

        first = collection.append()
        second = collection.append()

        assert first.stable_id == "dup"
        assert second.stable_id == "fresh"

    def test_default_ids_are_unique(self):
        collection = TechCollection({})

        ids = {collection.append().stable_id for _ in range(20)}

        assert len(ids) == 20

    def test_remove_at_keeps_order_and_ids_of_others(self):
        for title in ["Go", "Rust", "Python"]:
            self.collection.append(title, "50")

        removed = self.collection.remove_at(1)

        assert removed.stable_id == "id2"
        assert removed.title == "Rust"
        entries = self.collection.current_entries()
        assert [(e.stable_id, e.title) for e in entries] == [("id1", "Go"), ("id3", "Python")]

    @pytest.mark.parametrize("position", [-1, 2, 99, None, "0", True])
    def test_remove_at_out_of_bounds_is_a_no_op(self, position):
        self.collection.append("Go", "50")
        self.collection.append("Rust", "80")
        before = self.collection.current_entries()

        assert self.collection.remove_at(position) is None
        assert self.collection.current_entries() == before

    def test_remove_on_empty_collection_is_a_no_op(self):
        assert self.collection.remove_at(0) is None
        assert len(self.collection) == 0

    def test_append_then_remove_last_restores_previous_content(self):
        self.collection.append("Go", "50")
        self.collection.append("Rust", "80")
        before = self.collection.to_raw()

        self.collection.append()
        self.collection.remove_at(len(self.collection) - 1)

        assert self.collection.to_raw() == before

    def test_to_raw_strips_stable_ids(self):
        self.collection.append("Go", "50")

        assert self.collection.to_raw() == [{"title": "Go", "knowledge": "50"}]

    def test_update_changes_fields(self):
        entry = self.collection.append()

        updated = self.collection.update(entry.stable_id, title="Elixir", knowledge="70")

        assert updated.title == "Elixir"
        assert updated.knowledge == "70"
        assert self.collection.to_raw() == [{"title": "Elixir", "knowledge": "70"}]

    def test_update_unknown_id_raises(self):
        with pytest.raises(UnknownEntryError) as exc_info:
            self.collection.update("missing", title="Go")

        assert exc_info.value.stable_id == "missing"
        assert exc_info.value.get_full_details()["error_type"] == "UnknownEntryError"

    def test_update_unknown_field_raises(self):
        entry = self.collection.append()

        with pytest.raises(ValueError):
            self.collection.update(entry.stable_id, colour="red")

    def test_widget_keys_follow_stable_id_across_removal(self):
        self.collection.append("Go")
        second = self.collection.append("Rust")
        key_before = self.collection.widget_key(second.stable_id, "title")

        self.collection.remove_at(0)

        entry = self.collection.current_entries()[0]
        assert self.collection.widget_key(entry.stable_id, "title") == key_before
        assert self.collection.field_path(0, "title") == "techs.0.title"

    def test_remove_forgets_widget_state_of_removed_entry(self):
        first = self.collection.append("Go")
        second = self.collection.append("Rust")
        self.state[self.collection.widget_key(first.stable_id, "title")] = "Go"
        self.state[self.collection.widget_key(second.stable_id, "title")] = "Rust"

        self.collection.remove_at(0)

        assert "techs_id1_title" not in self.state
        assert self.state["techs_id2_title"] == "Rust"

    def test_sync_from_widgets_copies_widget_values(self):
        first = self.collection.append()
        second = self.collection.append()
        self.state[self.collection.widget_key(first.stable_id, "title")] = "Go"
        self.state[self.collection.widget_key(first.stable_id, "knowledge")] = "55"
        self.state[self.collection.widget_key(second.stable_id, "knowledge")] = "10"

        self.collection.sync_from_widgets()

        assert self.collection.to_raw() == [
            {"title": "Go", "knowledge": "55"},
            {"title": "", "knowledge": "10"},
        ]

    def test_reset_empties_and_seeds(self):
        first = self.collection.append("Go")
        self.state[self.collection.widget_key(first.stable_id, "title")] = "Go"

        self.collection.reset([{"title": "Rust", "knowledge": "80"}, {}])

        assert "techs_id1_title" not in self.state
        assert self.collection.to_raw() == [
            {"title": "Rust", "knowledge": "80"},
            {"title": "", "knowledge": 0},
        ]

    def test_state_is_shared_between_instances(self):
        self.collection.append("Go")

        other = TechCollection(self.state)

        assert other.to_raw() == [{"title": "Go", "knowledge": 0}]

    def test_custom_key_prefixes_state(self):
        collection = TechCollection(self.state, key="skills")
        collection.append("Go")

        assert "skills_order" in self.state
        assert collection.field_path(0, "knowledge") == "skills.0.knowledge"

    def test_defaults_to_streamlit_session_state(self, monkeypatch):
        session_state = {}
        monkeypatch.setattr(tech_collection.st, "session_state", session_state)

        TechCollection().append("Go")

        assert len(session_state["techs_order"]) == 1


class TestCollectionValidation:
    """The collection as seen by the schema engine."""

    def test_error_paths_are_recomputed_after_removal(self):
        collection = TechCollection({}, id_factory=sequential_ids())
        collection.append("Go", "50")
        collection.append("", "50")
        collection.append("Rust", "80")
        raw = {"techs": collection.to_raw()}

        first = validate(raw)
        assert ("techs.1.title", ErrorCode.REQUIRED) in first.error_codes()

        collection.remove_at(0)
        second = validate({"techs": collection.to_raw()})

        assert ("techs.0.title", ErrorCode.REQUIRED) in second.error_codes()
        assert ("techs.1.title", ErrorCode.REQUIRED) not in second.error_codes()

    def test_validated_length_matches_collection(self):
        collection = TechCollection({})
        collection.append("Go", "50")

        assert ("techs", ErrorCode.TOO_FEW) in validate({"techs": collection.to_raw()}).error_codes()

        collection.append("Rust", "80")
        codes = validate({"techs": collection.to_raw()}).error_codes()

        assert not any(path.startswith("techs") for path, _ in codes)
