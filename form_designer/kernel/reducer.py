"""
Form Designer Kernel — Reducer

Pure function: (document, action) → ReduceResult
No side effects. No IO. Deterministic: ids for new components are chosen by
the caller and travel in the action payload, so replaying the same actions
produces the same document every time.

The document is a flat arena. Each component carries `parent_id`, `order` and
`column_index`; children are found by filtering, never through embedded child
lists. A sibling group is every component sharing (parent_id, column_index),
and every handler leaves each group's orders as exactly 0..n-1.

Unknown ids are rejections, not exceptions. The caller treats a rejection as
a no-op.
"""

from __future__ import annotations

import copy
from typing import Any

from form_designer.kernel.types import (
    COLUMN_CONTAINER,
    DEFAULT_LAYOUT,
    DEFAULT_THEME,
    IMMUTABLE_FIELDS,
    STRUCTURAL_FIELDS,
    ReduceResult,
    Warning,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def empty_document() -> dict[str, Any]:
    """The document before any component is placed."""
    return {
        "components": {},
        "layout": copy.deepcopy(DEFAULT_LAYOUT),
        "theme": copy.deepcopy(DEFAULT_THEME),
        "rules": [],
    }


def reduce(document: dict[str, Any], action: dict[str, Any]) -> ReduceResult:
    """
    Apply one action to the document.
    Returns new document + applied flag + warnings/errors.

    The input document is never modified (deep copy before mutation).
    """
    handler = _HANDLERS.get(action.get("type", ""))
    if handler is None:
        return ReduceResult(
            document=document,
            applied=False,
            error=f"UNKNOWN_ACTION: {action.get('type')}",
        )

    result = handler(copy.deepcopy(document), action.get("payload", {}))
    if not result.applied:
        # Handlers may have touched their copy before rejecting.
        result.document = document
    return result


def replay(actions: list[dict[str, Any]], document: dict[str, Any] | None = None) -> dict[str, Any]:
    """Rebuild a document by reducing over all actions. Rejections are skipped."""
    doc = document if document is not None else empty_document()
    for action in actions:
        result = reduce(doc, action)
        if result.applied:
            doc = result.document
    return doc


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def get_component(document: dict[str, Any], component_id: str | None) -> dict[str, Any] | None:
    if component_id is None:
        return None
    return document["components"].get(component_id)


def group_key(node: dict[str, Any]) -> tuple[str | None, int | None]:
    """The sibling group a node belongs to."""
    return node.get("parent_id"), node.get("column_index")


def get_siblings(
    document: dict[str, Any],
    parent_id: str | None = None,
    column_index: int | None = None,
) -> list[dict[str, Any]]:
    """
    One sibling group, sorted by order.

    parent_id=None is the root. A parent that no longer exists still has its
    (dangling) children returned when queried by id; they never show up under
    the root.
    """
    group = [
        c
        for c in document["components"].values()
        if c.get("parent_id") == parent_id and c.get("column_index") == column_index
    ]
    return sorted(group, key=lambda c: c.get("order", 0))


def get_children(document: dict[str, Any], parent_id: str) -> list[dict[str, Any]]:
    """Every direct child of a parent across all its columns, column-major."""
    children = [c for c in document["components"].values() if c.get("parent_id") == parent_id]
    return sorted(children, key=lambda c: (c.get("column_index") or 0, c.get("order", 0)))


def get_ancestors(document: dict[str, Any], component_id: str) -> list[str]:
    """Parent chain from the nearest parent upwards. Stops at the root or at a dangling parent."""
    ancestors: list[str] = []
    seen: set[str] = {component_id}
    current = get_component(document, component_id)
    while current is not None:
        parent_id = current.get("parent_id")
        if parent_id is None or parent_id in seen:
            break
        ancestors.append(parent_id)
        seen.add(parent_id)
        current = get_component(document, parent_id)
    return ancestors


def get_descendants(document: dict[str, Any], component_id: str) -> set[str]:
    """All ids whose parent chain passes through component_id."""
    return {cid for cid in document["components"] if component_id in get_ancestors(document, cid)}


def iter_tree(document: dict[str, Any], parent_id: str | None = None, depth: int = 0):
    """
    Depth-first walk from parent_id (root by default), yielding (node, depth).
    Column containers yield their columns in index order. Children of deleted
    parents are unreachable from the root and are not yielded.
    """
    parent = get_component(document, parent_id)
    if is_column_container(parent):
        groups = [get_siblings(document, parent_id, i) for i in range(column_count(parent))]
    else:
        groups = [get_siblings(document, parent_id)]

    for group in groups:
        for node in group:
            yield node, depth
            yield from iter_tree(document, node["id"], depth + 1)


def normalize_orders(document: dict[str, Any]) -> int:
    """
    Renumber every sibling group whose orders are not exactly 0..n-1, keeping
    the existing relative order. Mutates the document in place; returns how
    many groups were renumbered.
    """
    keys = {group_key(c) for c in document["components"].values()}
    fixed = 0
    for parent_id, column_index in keys:
        group = get_siblings(document, parent_id, column_index)
        if [c.get("order") for c in group] != list(range(len(group))):
            _resequence(document, parent_id, column_index)
            fixed += 1
    return fixed


def is_column_container(node: dict[str, Any] | None) -> bool:
    return node is not None and node.get("type") == COLUMN_CONTAINER


def column_count(node: dict[str, Any]) -> int:
    """Number of columns of a column container (at least 1)."""
    columns = node.get("props", {}).get("columns", 2)
    try:
        return max(1, int(columns))
    except (TypeError, ValueError):
        return 1


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(doc: dict, code: str, msg: str) -> ReduceResult:
    return ReduceResult(document=doc, applied=False, error=f"{code}: {msg}")


def _ok(doc: dict, warnings: list[Warning] | None = None, created_id: str | None = None) -> ReduceResult:
    return ReduceResult(document=doc, applied=True, warnings=warnings or [], created_id=created_id)


def _resequence(doc: dict, parent_id: str | None, column_index: int | None, exclude: str | None = None) -> list[dict]:
    """Renumber one group 0..n-1 in its current order. Returns the group, sorted."""
    group = [c for c in get_siblings(doc, parent_id, column_index) if c["id"] != exclude]
    for i, node in enumerate(group):
        node["order"] = i
    return group


def _insert(
    doc: dict,
    node: dict,
    parent_id: str | None,
    column_index: int | None,
    position: int | None,
) -> None:
    """
    Place node into a group at position (clamped into [0, len(group)]),
    shifting the siblings at or after it.
    """
    group = _resequence(doc, parent_id, column_index, exclude=node["id"])
    if position is None or position > len(group):
        position = len(group)
    position = max(0, position)

    for sibling in group:
        if sibling["order"] >= position:
            sibling["order"] += 1

    node["parent_id"] = parent_id
    node["column_index"] = column_index
    node["order"] = position
    doc["components"][node["id"]] = node


def _detach(doc: dict, node: dict) -> None:
    """Close the gap a node leaves in its current group."""
    parent_id, column_index = group_key(node)
    _resequence(doc, parent_id, column_index, exclude=node["id"])


def _resolve_column(
    doc: dict,
    parent_id: str | None,
    column_index: int | None,
    warnings: list[Warning],
) -> int | None:
    """
    Normalize a column index against its parent:
    - only column containers have columns; anywhere else the index is dropped
    - no index under a column container means its last column
    - an out-of-range index is clamped
    """
    parent = get_component(doc, parent_id)
    if not is_column_container(parent):
        if column_index is not None:
            warnings.append(Warning(
                code="COLUMN_IGNORED",
                message=f"'{parent_id or 'root'}' is not a column container; column {column_index} ignored",
            ))
        return None

    columns = column_count(parent)
    if column_index is None:
        return columns - 1
    if not 0 <= column_index < columns:
        clamped = min(max(column_index, 0), columns - 1)
        warnings.append(Warning(
            code="COLUMN_CLAMPED",
            message=f"Column {column_index} out of range for '{parent_id}', using {clamped}",
        ))
        return clamped
    return column_index


def _creates_cycle(doc: dict, component_id: str, new_parent_id: str | None) -> bool:
    if new_parent_id is None:
        return False
    if new_parent_id == component_id:
        return True
    return component_id in get_ancestors(doc, new_parent_id)


def _new_node(p: dict, node_id: str) -> dict[str, Any]:
    return {
        "id": node_id,
        "type": p["type"],
        "label": p.get("label") or "",
        "parent_id": None,
        "order": 0,
        "column_index": None,
        "props": copy.deepcopy(p.get("props", {})),
    }


# ---------------------------------------------------------------------------
# Component handlers
# ---------------------------------------------------------------------------


def _handle_add(doc: dict, p: dict) -> ReduceResult:
    node_id = p["id"]
    parent_id = p.get("parent_id")
    warnings: list[Warning] = []

    if node_id in doc["components"]:
        return _reject(doc, "COMPONENT_EXISTS", node_id)
    if parent_id is not None and parent_id not in doc["components"]:
        return _reject(doc, "PARENT_NOT_FOUND", parent_id)

    column_index = _resolve_column(doc, parent_id, p.get("column_index"), warnings)
    _insert(doc, _new_node(p, node_id), parent_id, column_index, p.get("position"))
    return _ok(doc, warnings, created_id=node_id)


def _handle_paste(doc: dict, p: dict) -> ReduceResult:
    source = p["component"]
    return _handle_add(doc, {
        **p,
        "type": source["type"],
        "label": source.get("label", ""),
        "props": source.get("props", {}),
    })


def _handle_move(doc: dict, p: dict) -> ReduceResult:
    node_id = p["id"]
    new_parent_id = p.get("parent_id")
    warnings: list[Warning] = []

    node = get_component(doc, node_id)
    if node is None:
        return _reject(doc, "COMPONENT_NOT_FOUND", node_id)
    if new_parent_id is not None and new_parent_id not in doc["components"]:
        return _reject(doc, "PARENT_NOT_FOUND", new_parent_id)
    if _creates_cycle(doc, node_id, new_parent_id):
        return _reject(doc, "CYCLE", f"cannot move '{node_id}' under '{new_parent_id}'")

    column_index = _resolve_column(doc, new_parent_id, p.get("column_index"), warnings)
    _detach(doc, node)
    _insert(doc, node, new_parent_id, column_index, p.get("position"))
    return _ok(doc, warnings)


def _handle_reorder(doc: dict, p: dict) -> ReduceResult:
    ordered_ids: list[str] = p["ids"]

    nodes = [get_component(doc, cid) for cid in ordered_ids]
    if not nodes:
        return _reject(doc, "REORDER_EMPTY", "no ids given")
    missing = [cid for cid, n in zip(ordered_ids, nodes) if n is None]
    if missing:
        return _reject(doc, "COMPONENT_NOT_FOUND", ", ".join(missing))

    key = group_key(nodes[0])
    group_ids = {c["id"] for c in get_siblings(doc, *key)}
    if len(set(ordered_ids)) != len(ordered_ids) or set(ordered_ids) != group_ids:
        return _reject(doc, "REORDER_MISMATCH", "ids must be exactly one full sibling group")

    for i, node in enumerate(nodes):
        node["order"] = i
    return _ok(doc)


def _handle_remove(doc: dict, p: dict) -> ReduceResult:
    node_id = p["id"]
    node = get_component(doc, node_id)
    if node is None:
        return _reject(doc, "COMPONENT_NOT_FOUND", node_id)

    # Children stay where they are, pointing at a parent that no longer exists.
    _detach(doc, node)
    del doc["components"][node_id]
    return _ok(doc)


def _handle_duplicate(doc: dict, p: dict) -> ReduceResult:
    source = get_component(doc, p["source_id"])
    if source is None:
        return _reject(doc, "COMPONENT_NOT_FOUND", p["source_id"])
    new_id = p["id"]
    if new_id in doc["components"]:
        return _reject(doc, "COMPONENT_EXISTS", new_id)

    clone = copy.deepcopy(source)
    clone["id"] = new_id
    parent_id, column_index = group_key(source)
    _insert(doc, clone, parent_id, column_index, source["order"] + 1)
    return _ok(doc, created_id=new_id)


def _apply_fields(doc: dict, node: dict, fields: dict[str, Any], warnings: list[Warning]) -> str | None:
    """
    Apply one partial update to node. Returns an error string when the entry
    cannot be applied; nothing is changed in that case.
    """
    structural = {k: fields[k] for k in STRUCTURAL_FIELDS if k in fields}
    if structural:
        parent_id = structural.get("parent_id", node.get("parent_id"))
        if parent_id is not None and parent_id not in doc["components"]:
            return f"PARENT_NOT_FOUND: {parent_id}"
        if _creates_cycle(doc, node["id"], parent_id):
            return f"CYCLE: cannot move '{node['id']}' under '{parent_id}'"

    for key, value in fields.items():
        if key in IMMUTABLE_FIELDS:
            warnings.append(Warning(code="IMMUTABLE_FIELD_IGNORED", message=f"'{key}' of '{node['id']}' is immutable"))
        elif key in STRUCTURAL_FIELDS:
            continue
        elif key == "label":
            node["label"] = value
        elif key == "props" and isinstance(value, dict):
            node["props"].update(value)
        else:
            node["props"][key] = value

    if structural:
        same_parent = structural.get("parent_id", node.get("parent_id")) == node.get("parent_id")
        parent_id = structural.get("parent_id", node.get("parent_id"))
        if "column_index" in structural:
            requested_column = structural["column_index"]
        else:
            requested_column = node.get("column_index") if same_parent else None
        column_index = _resolve_column(doc, parent_id, requested_column, warnings)

        if "order" in structural:
            position = structural["order"]
        elif (parent_id, column_index) == group_key(node):
            position = node["order"]
        else:
            position = None

        _detach(doc, node)
        _insert(doc, node, parent_id, column_index, position)

    if is_column_container(node):
        _fold_columns(doc, node, warnings)
    return None


def _fold_columns(doc: dict, container: dict, warnings: list[Warning]) -> None:
    """Append children of columns past the container's column count to its last column."""
    last = column_count(container) - 1
    stranded = sorted(
        (
            c
            for c in doc["components"].values()
            if c.get("parent_id") == container["id"] and (c.get("column_index") or 0) > last
        ),
        key=lambda c: (c["column_index"], c.get("order", 0)),
    )
    for child in stranded:
        _detach(doc, child)
        _insert(doc, child, container["id"], last, None)
    if stranded:
        warnings.append(Warning(
            code="COLUMNS_MERGED",
            message=f"{len(stranded)} component(s) moved into column {last} of '{container['id']}'",
        ))


def _handle_update(doc: dict, p: dict) -> ReduceResult:
    node = get_component(doc, p["id"])
    if node is None:
        return _reject(doc, "COMPONENT_NOT_FOUND", p["id"])

    warnings: list[Warning] = []
    error = _apply_fields(doc, node, p.get("fields", {}), warnings)
    if error:
        return _reject(doc, *error.split(": ", 1))
    return _ok(doc, warnings)


def _handle_batch_update(doc: dict, p: dict) -> ReduceResult:
    warnings: list[Warning] = []
    applied = 0

    for entry in p["updates"]:
        node = get_component(doc, entry.get("id"))
        if node is None:
            warnings.append(Warning(code="COMPONENT_NOT_FOUND", message=f"'{entry.get('id')}' skipped"))
            continue
        error = _apply_fields(doc, node, entry.get("fields", {}), warnings)
        if error:
            warnings.append(Warning(code="UPDATE_SKIPPED", message=error))
            continue
        applied += 1

    if applied == 0:
        return _reject(doc, "NOTHING_APPLIED", "no update in the batch matched a component")
    return _ok(doc, warnings)


# ---------------------------------------------------------------------------
# Layout / theme handlers
# ---------------------------------------------------------------------------


def _merge(target: dict, partial: dict) -> None:
    for key, value in partial.items():
        if value is None:
            target.pop(key, None)
        else:
            target[key] = value


def _handle_layout_update(doc: dict, p: dict) -> ReduceResult:
    _merge(doc["layout"], p["layout"])
    return _ok(doc)


def _handle_theme_update(doc: dict, p: dict) -> ReduceResult:
    _merge(doc["theme"], p["theme"])
    return _ok(doc)


def _handle_rules_set(doc: dict, p: dict) -> ReduceResult:
    # Rules may name components that do not exist; they stay inert.
    doc["rules"] = copy.deepcopy(p["rules"])
    return _ok(doc)


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Any] = {
    "component.add": _handle_add,
    "component.move": _handle_move,
    "component.reorder": _handle_reorder,
    "component.remove": _handle_remove,
    "component.duplicate": _handle_duplicate,
    "component.update": _handle_update,
    "component.batch_update": _handle_batch_update,
    "component.paste": _handle_paste,
    "layout.update": _handle_layout_update,
    "theme.update": _handle_theme_update,
    "rules.set": _handle_rules_set,
}
