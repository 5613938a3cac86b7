"""
Form Designer Reducer -- Add and Move Tests

Covers:
  - component.add appends by default, inserts at a position, clamps position
  - add shifts later siblings only in its own sibling group
  - add under an unknown parent is rejected, duplicate ids are rejected
  - column resolution: last column by default, clamping, ignored outside containers
  - component.move within a group (pure reorder), across groups, into columns
  - move rejects unknown ids, unknown parents, and cycles
  - the input document is never mutated
"""

import copy

from form_designer.kernel.actions import make_action
from form_designer.kernel.reducer import empty_document, get_siblings, reduce
from form_designer.kernel.tests.helpers import add, orders


def move(doc, node_id, position=None, parent_id=None, column_index=None):
    return reduce(doc, make_action(
        "component.move", id=node_id, position=position, parent_id=parent_id, column_index=column_index,
    ))


# ============================================================================
# 1. component.add
# ============================================================================


class TestAdd:
    def test_add_appends_by_default(self, abc_doc):
        doc = add(abc_doc, "d")
        assert orders(doc) == {"a": 0, "b": 1, "c": 2, "d": 3}

    def test_add_at_position_shifts_later_siblings(self, abc_doc):
        doc = add(abc_doc, "d", position=1)
        assert orders(doc) == {"a": 0, "d": 1, "b": 2, "c": 3}

    def test_add_at_zero(self, abc_doc):
        doc = add(abc_doc, "d", position=0)
        assert [c["id"] for c in get_siblings(doc)] == ["d", "a", "b", "c"]

    def test_position_clamped_high(self, abc_doc):
        doc = add(abc_doc, "d", position=99)
        assert orders(doc)["d"] == 3

    def test_position_clamped_low(self, abc_doc):
        doc = add(abc_doc, "d", position=-5)
        assert orders(doc) == {"d": 0, "a": 1, "b": 2, "c": 3}

    def test_add_into_group_does_not_touch_root(self, abc_doc):
        doc = add(abc_doc, "g", type="group")
        doc = add(doc, "x", parent_id="g")
        doc = add(doc, "y", parent_id="g", position=0)
        assert orders(doc) == {"a": 0, "b": 1, "c": 2, "g": 3}
        assert orders(doc, "g") == {"y": 0, "x": 1}

    def test_add_under_unknown_parent_rejected(self, abc_doc):
        result = reduce(abc_doc, make_action("component.add", id="x", type="input", parent_id="ghost"))
        assert not result.applied
        assert "PARENT_NOT_FOUND" in result.error
        assert result.document is abc_doc

    def test_duplicate_id_rejected(self, abc_doc):
        result = reduce(abc_doc, make_action("component.add", id="a", type="input"))
        assert not result.applied
        assert "COMPONENT_EXISTS" in result.error

    def test_created_id_reported(self):
        result = reduce(empty_document(), make_action("component.add", id="x", type="input"))
        assert result.created_id == "x"

    def test_props_are_copied(self):
        props = {"options": [1, 2]}
        doc = add(empty_document(), "x", props=props)
        props["options"].append(3)
        assert doc["components"]["x"]["props"]["options"] == [1, 2]

    def test_input_document_not_mutated(self, abc_doc):
        before = copy.deepcopy(abc_doc)
        add(abc_doc, "d", position=0)
        assert abc_doc == before


# ============================================================================
# 2. Columns
# ============================================================================


class TestColumns:
    def _with_columns(self, columns=3):
        return add(empty_document(), "cols", type="columnContainer", props={"columns": columns})

    def test_default_is_last_column(self):
        doc = add(self._with_columns(), "x", parent_id="cols")
        assert doc["components"]["x"]["column_index"] == 2

    def test_explicit_column(self):
        doc = add(self._with_columns(), "x", parent_id="cols", column_index=0)
        assert doc["components"]["x"]["column_index"] == 0

    def test_column_out_of_range_clamped(self):
        result = reduce(self._with_columns(), make_action(
            "component.add", id="x", type="input", parent_id="cols", column_index=7,
        ))
        assert result.applied
        assert result.document["components"]["x"]["column_index"] == 2
        assert any(w.code == "COLUMN_CLAMPED" for w in result.warnings)

    def test_each_column_is_its_own_group(self):
        doc = self._with_columns(2)
        doc = add(doc, "l1", parent_id="cols", column_index=0)
        doc = add(doc, "r1", parent_id="cols", column_index=1)
        doc = add(doc, "l2", parent_id="cols", column_index=0)
        assert orders(doc, "cols", 0) == {"l1": 0, "l2": 1}
        assert orders(doc, "cols", 1) == {"r1": 0}

    def test_column_ignored_outside_column_container(self):
        doc = add(empty_document(), "g", type="group")
        result = reduce(doc, make_action("component.add", id="x", type="input", parent_id="g", column_index=1))
        assert result.applied
        assert result.document["components"]["x"]["column_index"] is None
        assert any(w.code == "COLUMN_IGNORED" for w in result.warnings)


# ============================================================================
# 3. component.move
# ============================================================================


class TestMove:
    def test_move_to_front(self, abc_doc):
        """A,B,C at 0,1,2; move B to 0 gives B:0, A:1, C:2."""
        result = move(abc_doc, "b", 0)
        assert result.applied
        assert orders(result.document) == {"b": 0, "a": 1, "c": 2}

    def test_move_to_end(self, abc_doc):
        result = move(abc_doc, "a", 2)
        assert [c["id"] for c in get_siblings(result.document)] == ["b", "c", "a"]

    def test_move_without_position_appends(self, abc_doc):
        result = move(abc_doc, "a")
        assert orders(result.document) == {"b": 0, "c": 1, "a": 2}

    def test_move_into_group_resequences_both_groups(self, abc_doc):
        doc = add(abc_doc, "g", type="group")
        doc = add(doc, "x", parent_id="g")
        result = move(doc, "b", 0, parent_id="g")
        assert result.applied
        assert orders(result.document) == {"a": 0, "c": 1, "g": 2}
        assert orders(result.document, "g") == {"b": 0, "x": 1}
        assert result.document["components"]["b"]["parent_id"] == "g"

    def test_move_out_to_root(self, abc_doc):
        doc = add(abc_doc, "g", type="group")
        doc = add(doc, "x", parent_id="g")
        result = move(doc, "x", 1)
        assert orders(result.document) == {"a": 0, "x": 1, "b": 2, "c": 3, "g": 4}
        assert orders(result.document, "g") == {}

    def test_move_between_columns(self):
        doc = add(empty_document(), "cols", type="columnContainer", props={"columns": 2})
        doc = add(doc, "x", parent_id="cols", column_index=0)
        doc = add(doc, "y", parent_id="cols", column_index=0)
        doc = add(doc, "z", parent_id="cols", column_index=1)
        result = move(doc, "x", 0, parent_id="cols", column_index=1)
        assert orders(result.document, "cols", 0) == {"y": 0}
        assert orders(result.document, "cols", 1) == {"x": 0, "z": 1}

    def test_move_out_of_column_container_clears_column(self):
        doc = add(empty_document(), "cols", type="columnContainer")
        doc = add(doc, "x", parent_id="cols", column_index=0)
        result = move(doc, "x", 0)
        assert result.document["components"]["x"]["column_index"] is None

    def test_unknown_id_rejected(self, abc_doc):
        result = move(abc_doc, "ghost", 0)
        assert not result.applied
        assert result.document is abc_doc

    def test_unknown_parent_rejected(self, abc_doc):
        result = move(abc_doc, "a", 0, parent_id="ghost")
        assert not result.applied
        assert "PARENT_NOT_FOUND" in result.error

    def test_move_under_itself_rejected(self):
        doc = add(empty_document(), "g", type="group")
        result = move(doc, "g", 0, parent_id="g")
        assert not result.applied
        assert "CYCLE" in result.error

    def test_move_under_descendant_rejected(self):
        doc = add(empty_document(), "outer", type="group")
        doc = add(doc, "inner", type="group", parent_id="outer")
        doc = add(doc, "leaf", parent_id="inner")
        result = move(doc, "outer", 0, parent_id="leaf")
        assert not result.applied
        assert "CYCLE" in result.error

    def test_move_under_sibling_allowed(self):
        doc = add(empty_document(), "g1", type="group")
        doc = add(doc, "g2", type="group")
        result = move(doc, "g1", 0, parent_id="g2")
        assert result.applied
        assert orders(result.document) == {"g2": 0}
        assert orders(result.document, "g2") == {"g1": 0}
