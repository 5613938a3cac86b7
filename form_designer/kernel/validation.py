"""
Form Designer Kernel — Document Checks

Nothing here raises. Every check returns a list of human-readable messages
and the caller decides whether to block (submission, save, CI).

- validate_required: required fields without a value (what a submit button checks)
- check_integrity:   ordering, column and parent-cycle violations (should always be empty)
- find_dangling:     references to components that no longer exist (allowed, reported)
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from form_designer.kernel.logic import LogicEngine
from form_designer.kernel.reducer import (
    column_count,
    get_ancestors,
    get_component,
    group_key,
    is_column_container,
    iter_tree,
)
from form_designer.kernel.types import LogicRule


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list | tuple | dict | set):
        return len(value) == 0
    return False


def validate_required(document: dict[str, Any], logic: LogicEngine) -> list[str]:
    """
    One message per required component, reachable from the root and not
    hidden by a rule, whose runtime value is empty.
    """
    errors: list[str] = []
    for node, _depth in iter_tree(document):
        if not node.get("props", {}).get("required"):
            continue
        if logic.get_computed_props(node["id"]).get("visibility") == "hidden":
            continue
        if _is_empty(logic.get_value(node["id"])):
            errors.append(f"{node.get('label') or node['id']} is required")
    return errors


def check_integrity(document: dict[str, Any]) -> list[str]:
    """Sibling groups whose orders are not exactly 0..n-1, children in missing columns, and parent cycles."""
    errors: list[str] = []

    groups: dict[tuple[str | None, int | None], list[int]] = defaultdict(list)
    for node in document["components"].values():
        groups[group_key(node)].append(node.get("order", -1))

    for (parent_id, column_index), orders in sorted(groups.items(), key=lambda kv: (kv[0][0] or "", kv[0][1] or 0)):
        if sorted(orders) != list(range(len(orders))):
            where = parent_id or "root"
            if column_index is not None:
                where = f"{where}[{column_index}]"
            errors.append(f"Order of {where} is {sorted(orders)}, expected 0..{len(orders) - 1}")

    for component_id, node in document["components"].items():
        container = get_component(document, node.get("parent_id"))
        if is_column_container(container):
            columns = column_count(container)
            column_index = node.get("column_index")
            if column_index is None or not 0 <= column_index < columns:
                errors.append(
                    f"'{component_id}' is in column {column_index} of '{container['id']}', which has {columns}"
                )

        ancestors = get_ancestors(document, component_id)
        last = ancestors[-1] if ancestors else component_id
        tail = get_component(document, last)
        # get_ancestors stops early only at the root, a dangling parent, or a repeat
        if tail is not None and tail.get("parent_id") is not None:
            parent = tail["parent_id"]
            if parent == component_id or parent in ancestors:
                errors.append(f"Parent chain of '{component_id}' loops")

    return errors


def find_dangling(document: dict[str, Any], rules: list[LogicRule] | None = None) -> list[str]:
    """Components under deleted parents and rules naming deleted components."""
    components = document["components"]
    notes: list[str] = []

    for node in components.values():
        parent_id = node.get("parent_id")
        if parent_id is not None and parent_id not in components:
            notes.append(f"'{node['id']}' has missing parent '{parent_id}'")

    if rules is None:
        rules = [LogicRule.from_dict(r) for r in document.get("rules", [])]
    for rule in rules:
        for end, component_id in (("source", rule.source_component_id), ("target", rule.target_component_id)):
            if component_id not in components:
                notes.append(f"Rule '{rule.id}' {end} '{component_id}' does not exist")

    return notes
