"""
Designer -- Undo / Redo

Covers:
  - every applied mutation records exactly one history entry
  - rejected mutations record nothing and leave the document untouched
  - undo restores the previous document, redo re-applies
  - a new mutation after undo drops the redo tail
  - the log is capped, oldest entries fall off
  - undo of rules.set restores the previous rule set in the engine
  - load_document and clear reset the log
"""

import copy

from form_designer.kernel.designer import Designer
from form_designer.kernel.types import LogicRule


def hide_rule(source, target):
    return LogicRule(
        id="r1", kind="visibility", source_component_id=source, condition="equals",
        comparison_value="yes", target_component_id=target, action="hidden",
    )


# ============================================================================
# 1. Recording
# ============================================================================


class TestRecording:
    def test_each_mutation_records_one_entry(self, designer):
        a = designer.add_node("input")
        designer.add_node("input")
        designer.update_node(a, {"label": "Name"})
        designer.move_node(a, 1)
        assert len(designer.history) == 4
        assert [e.type for e in designer.history.entries] == [
            "component.add", "component.add", "component.update", "component.move",
        ]
        assert designer.history.current_step == 3

    def test_rejected_mutation_not_recorded(self, designer):
        designer.add_node("input")
        before = copy.deepcopy(designer.document)
        assert designer.move_node("ghost", 0) is False
        assert designer.delete_node("ghost") is False
        assert designer.update_node("ghost", {"label": "x"}) is False
        assert designer.add_node("input", parent_id="ghost") is None
        assert len(designer.history) == 1
        assert designer.document == before

    def test_invalid_payload_not_recorded(self, designer):
        assert designer.update_node("", {"label": "x"}) is False
        assert len(designer.history) == 0

    def test_batch_is_one_entry(self, designer):
        a = designer.add_node("input")
        b = designer.add_node("input")
        assert designer.batch_update([
            {"id": a, "fields": {"label": "A"}},
            {"id": b, "fields": {"label": "B"}},
        ])
        assert len(designer.history) == 3
        designer.undo()
        assert designer.get_component(a)["label"] == "Single-line text"
        assert designer.get_component(b)["label"] == "Single-line text"


# ============================================================================
# 2. Undo / redo
# ============================================================================


class TestUndoRedo:
    def test_undo_restores_previous_document(self, designer):
        designer.add_node("input")
        snapshot = copy.deepcopy(designer.document)
        designer.add_node("input", position=0)
        assert designer.undo() is True
        assert designer.document == snapshot

    def test_undo_to_empty(self, designer):
        designer.add_node("input")
        designer.undo()
        assert designer.document["components"] == {}
        assert designer.history.current_step == -1
        assert designer.undo() is False

    def test_redo_reapplies(self, designer):
        a = designer.add_node("input")
        designer.update_node(a, {"label": "Name"})
        after = copy.deepcopy(designer.document)
        designer.undo()
        assert designer.get_component(a)["label"] == "Single-line text"
        assert designer.redo() is True
        assert designer.document == after
        assert designer.redo() is False

    def test_undo_restores_deleted_subtree_parent(self, designer):
        group = designer.add_node("group")
        child = designer.add_node("input", parent_id=group)
        designer.delete_node(group)
        assert designer.get_component(group) is None
        designer.undo()
        assert designer.get_component(group) is not None
        assert [c["id"] for c in designer.get_siblings(group)] == [child]

    def test_new_mutation_drops_redo_tail(self, designer):
        designer.add_node("input")
        designer.add_node("input")
        designer.undo()
        designer.add_node("textarea")
        assert len(designer.history) == 2
        assert designer.history.can_redo is False
        assert designer.redo() is False

    def test_undo_is_not_recorded(self, designer):
        designer.add_node("input")
        designer.add_node("input")
        designer.undo()
        designer.redo()
        assert len(designer.history) == 2

    def test_undo_clears_stale_selection(self, designer):
        node_id = designer.add_node("input")
        assert designer.selected_id == node_id
        designer.undo()
        assert designer.selected_id is None

    def test_undo_rules_resyncs_engine(self, designer):
        source = designer.add_node("input")
        target = designer.add_node("input")
        designer.set_rules([hide_rule(source, target)])
        designer.enter_preview()
        designer.set_value(source, "yes")
        assert designer.get_computed_props(target) == {"visibility": "hidden"}

        designer.undo()
        assert designer.rules == []
        assert designer.logic.rules == []
        assert designer.get_computed_props(target) == {}

        designer.redo()
        assert designer.get_computed_props(target) == {"visibility": "hidden"}


# ============================================================================
# 3. Limits and resets
# ============================================================================


class TestLimits:
    def test_oldest_entries_dropped(self):
        designer = Designer(history_limit=3)
        for _ in range(5):
            designer.add_node("input")
        assert len(designer.history) == 3
        assert designer.history.current_step == 2
        while designer.undo():
            pass
        # the first two adds are outside the log and stay applied
        assert len(designer.components) == 2

    def test_load_document_clears_history(self, designer):
        designer.add_node("input")
        designer.load_document({"components": []})
        assert len(designer.history) == 0
        assert designer.undo() is False

    def test_clear_resets_everything(self, designer):
        node_id = designer.add_node("input")
        designer.copy_node(node_id)
        designer.clear()
        assert designer.components == []
        assert len(designer.history) == 0
        assert designer.clipboard is None
        assert designer.selected_id is None
