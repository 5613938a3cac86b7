"""Document builders shared by the reducer and placement tests."""

from form_designer.kernel.actions import make_action
from form_designer.kernel.reducer import reduce


def add(doc, node_id, *, type="input", parent_id=None, column_index=None, position=None, props=None):
    """Reduce one component.add and return the new document (asserts it applied)."""
    result = reduce(doc, make_action(
        "component.add",
        id=node_id,
        type=type,
        label=node_id.upper(),
        props=props or {},
        parent_id=parent_id,
        column_index=column_index,
        position=position,
    ))
    assert result.applied, result.error
    return result.document


def orders(doc, parent_id=None, column_index=None):
    """{id: order} for one sibling group."""
    return {
        c["id"]: c["order"]
        for c in doc["components"].values()
        if c["parent_id"] == parent_id and c["column_index"] == column_index
    }
