"""
Form Designer Kernel — Drop Target Resolution

Turns the droppable areas under the pointer at the end of a drag into one
concrete placement (sibling group + position).

A single gesture often overlaps several areas at once (a column inside a
column container inside a group). The rules below are checked in this fixed
order and the first match wins:

  1. root canvas                 → append at the root
  2. group content area          → append inside the group
  3. column container body       → append to its last column
  4. a specific column           → append to that column
  5. after a specific component  → insert right after it in its group
                                   (new components, or moves from another group)
  6. same-parent reorder         → take the hovered sibling's position
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from form_designer.kernel.reducer import (
    column_count,
    get_ancestors,
    get_component,
    group_key,
    is_column_container,
)
from form_designer.kernel.types import GROUP, DropTarget, Placement


def resolve_drop(
    document: dict[str, Any],
    targets: Iterable[DropTarget],
    active_id: str | None = None,
) -> Placement | None:
    """
    Resolve a drop. active_id is the component being dragged, or None when a
    new component is dragged in from the library. Returns None when nothing
    under the pointer accepts the drop.
    """
    hits = list(targets)
    active = get_component(document, active_id)

    for rule in _RULES:
        placement = rule(document, hits, active)
        if placement is not None:
            return placement
    return None


# ---------------------------------------------------------------------------
# Rules, in priority order
# ---------------------------------------------------------------------------


def _of_kind(hits: list[DropTarget], kind: str) -> list[DropTarget]:
    return [h for h in hits if h.kind == kind]


def _within(document: dict, component_id: str, active: dict | None) -> bool:
    """True when component_id is the dragged node or lies below it."""
    if active is None:
        return False
    return component_id == active["id"] or active["id"] in get_ancestors(document, component_id)


def _root_canvas(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    if _of_kind(hits, "canvas"):
        return Placement(parent_id=None, column_index=None, position=None, rule="canvas")
    return None


def _group_area(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    for hit in _of_kind(hits, "group"):
        group = get_component(document, hit.component_id)
        if group is not None and group["type"] == GROUP and not _within(document, group["id"], active):
            return Placement(parent_id=group["id"], column_index=None, position=None, rule="group")
    return None


def _column_container_body(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    for hit in _of_kind(hits, "column_container"):
        container = get_component(document, hit.component_id)
        if is_column_container(container) and not _within(document, container["id"], active):
            last = column_count(container) - 1
            return Placement(parent_id=container["id"], column_index=last, position=None, rule="column_container")
    return None


def _column(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    for hit in _of_kind(hits, "column"):
        container = get_component(document, hit.component_id)
        if not is_column_container(container) or _within(document, container["id"], active):
            continue
        if hit.column_index is not None and 0 <= hit.column_index < column_count(container):
                return Placement(
                    parent_id=container["id"], column_index=hit.column_index, position=None, rule="column"
                )
    return None


def _after_component(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    for hit in _of_kind(hits, "component"):
        over = get_component(document, hit.component_id)
        if over is None or _within(document, over["id"], active):
            continue
        if active is not None and group_key(active) == group_key(over):
            continue  # handled by the same-parent reorder rule
        parent_id, column_index = group_key(over)
        return Placement(parent_id=parent_id, column_index=column_index, position=over["order"] + 1, rule="after")
    return None


def _same_parent(document: dict, hits: list[DropTarget], active: dict | None) -> Placement | None:
    if active is None:
        return None
    for hit in _of_kind(hits, "component"):
        over = get_component(document, hit.component_id)
        if over is None or over["id"] == active["id"]:
            continue
        if group_key(active) == group_key(over):
            parent_id, column_index = group_key(over)
            return Placement(parent_id=parent_id, column_index=column_index, position=over["order"], rule="reorder")
    return None


_RULES = (
    _root_canvas,
    _group_area,
    _column_container_body,
    _column,
    _after_component,
    _same_parent,
)
