"""
Tests for the form storage backends and FormStore.

MemoryStorage runs everywhere; JsonFileStorage writes under pytest's tmp_path.
"""

import json

import pytest

from form_designer.kernel.designer import Designer
from form_designer.kernel.models import FormConfigError
from form_designer.kernel.storage import FormNotFound, FormStore, JsonFileStorage, MemoryStorage


@pytest.fixture
def memory():
    return MemoryStorage()


@pytest.fixture
def files(tmp_path):
    return JsonFileStorage(tmp_path / "forms")


def sample_designer():
    designer = Designer()
    group = designer.add_node("group")
    designer.add_node("input", parent_id=group)
    designer.add_node("select")
    return designer


class TestMemoryStorage:
    def test_put_and_get(self, memory):
        memory.put("f1", "{}")
        assert memory.get("f1") == "{}"

    def test_get_nonexistent(self, memory):
        assert memory.get("nope") is None

    def test_delete(self, memory):
        memory.put("f1", "{}")
        memory.delete("f1")
        memory.delete("f1")
        assert memory.get("f1") is None


class TestJsonFileStorage:
    def test_put_creates_directory(self, files):
        files.put("f1", '{"components": []}')
        assert (files.directory / "f1.json").read_text(encoding="utf-8") == '{"components": []}'

    def test_get_nonexistent(self, files):
        assert files.get("f1") is None

    def test_delete_missing_is_fine(self, files):
        files.delete("f1")

    def test_rejects_path_like_ids(self, files):
        with pytest.raises(ValueError):
            files.put("../escape", "{}")


class TestFormStore:
    def test_save_and_load(self, memory):
        store = FormStore(memory)
        original = sample_designer()
        store.save("contract", original)

        loaded = store.load("contract")
        assert loaded.document == original.document
        assert len(loaded.history) == 0

    def test_saved_payload_is_json(self, memory):
        FormStore(memory).save("f", sample_designer())
        data = json.loads(memory.get("f"))
        assert len(data["components"]) == 3

    def test_load_into_existing_designer(self, memory):
        store = FormStore(memory)
        store.save("f", sample_designer())
        target = Designer()
        target.add_node("textarea")
        assert store.load("f", target) is target
        assert len(target.components) == 3

    def test_load_missing(self, memory):
        with pytest.raises(FormNotFound):
            FormStore(memory).load("missing")

    def test_load_invalid_json(self, memory):
        memory.put("broken", "{not json")
        with pytest.raises(FormConfigError):
            FormStore(memory).load("broken")

    def test_load_invalid_shape(self, memory):
        memory.put("bad", json.dumps({"components": [{"id": "a"}]}))
        with pytest.raises(FormConfigError):
            FormStore(memory).load("bad")

    def test_round_trip_through_files(self, files):
        store = FormStore(files)
        original = sample_designer()
        store.save("f1", original)
        assert store.load("f1").document == original.document
        store.delete("f1")
        with pytest.raises(FormNotFound):
            store.load("f1")
