"""
Form Designer Kernel — Shared Types

Data classes and constants used across the reducer, history log, rule engine,
placement resolver, and designer. These are the contracts that bind the kernel
together.

Document structure (plain dicts, deep-copied on every mutation):
- components: dict[component_id, node] — flat arena, no embedded child lists
- layout: dict — opaque layout config (columns, gutter, responsive, ...)
- theme: dict — opaque theme config
- rules: list[dict] — logic rules, stored as plain dicts
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Component kinds
# ---------------------------------------------------------------------------

COLUMN_CONTAINER = "columnContainer"
GROUP = "group"

# Types whose children live in the group's own content area
CONTAINER_TYPES: set[str] = {GROUP, COLUMN_CONTAINER}

CATEGORIES: set[str] = {"basic", "layout", "project", "contract", "article", "finance"}

# ---------------------------------------------------------------------------
# Action type registry
# ---------------------------------------------------------------------------

ACTION_TYPES: set[str] = {
    "component.add",
    "component.move",
    "component.reorder",
    "component.remove",
    "component.duplicate",
    "component.update",
    "component.batch_update",
    "component.paste",
    "layout.update",
    "theme.update",
    "rules.set",
}

# Node keys that only move semantics may change
STRUCTURAL_FIELDS: set[str] = {"parent_id", "column_index", "order"}
IMMUTABLE_FIELDS: set[str] = {"id", "type"}

# ---------------------------------------------------------------------------
# Logic rules
# ---------------------------------------------------------------------------

RULE_KINDS: set[str] = {"visibility", "linkage"}

CONDITIONS: set[str] = {
    "equals",
    "not_equals",
    "greater_than",
    "less_than",
    "contains",
    "not_contains",
}

# camelCase spellings used by the editor UI, plus the short legacy names
CONDITION_ALIASES: dict[str, str] = {
    "notEquals": "not_equals",
    "greaterThan": "greater_than",
    "lessThan": "less_than",
    "notContains": "not_contains",
    "greater": "greater_than",
    "less": "less_than",
}

VISIBILITY_ACTIONS: set[str] = {"visible", "hidden", "admin-only"}

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_LAYOUT: dict[str, Any] = {
    "columns": 1,
    "gutter": 16,
    "responsive": True,
}

DEFAULT_THEME: dict[str, str] = {
    "primary_color": "#1890ff",
    "background_color": "#ffffff",
    "border_color": "#d9d9d9",
    "border_radius": "6px",
    "font_size": "14px",
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class LogicRule:
    """
    A declarative rule: when `condition(source value, comparison_value)` holds,
    either override the target's visibility or write a literal into its value.

    Rules are inert data. They are never validated against the document, so a
    rule may point at components that no longer exist.
    """

    id: str
    kind: str
    source_component_id: str
    condition: str
    comparison_value: str = ""
    target_component_id: str = ""
    action: str | None = None  # visibility rules
    target_value: Any = None  # linkage rules

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "source_component_id": self.source_component_id,
            "condition": self.condition,
            "comparison_value": self.comparison_value,
            "target_component_id": self.target_component_id,
        }
        if self.action is not None:
            d["action"] = self.action
        if self.target_value is not None:
            d["target_value"] = self.target_value
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LogicRule:
        return cls(
            id=d.get("id", ""),
            kind=d.get("kind", "visibility"),
            source_component_id=d.get("source_component_id", ""),
            condition=normalize_condition(d.get("condition", "")),
            comparison_value=str(d.get("comparison_value", "")),
            target_component_id=d.get("target_component_id", ""),
            action=d.get("action"),
            target_value=d.get("target_value"),
        )


@dataclass
class Warning:
    """A non-fatal issue encountered during reduction."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ReduceResult:
    """
    Result of applying one action to a document.
    The reducer never throws — it always returns one of these.
    """

    document: dict[str, Any]
    applied: bool
    warnings: list[Warning] = field(default_factory=list)
    error: str | None = None
    created_id: str | None = None  # set by add / duplicate / paste


@dataclass
class HistoryEntry:
    """
    One recorded mutation. `action` is the tagged record that was reduced;
    `before` and `after` are full document snapshots around it.
    """

    action: dict[str, Any]
    before: dict[str, Any]
    after: dict[str, Any]
    timestamp: str = ""

    @property
    def type(self) -> str:
        return self.action.get("type", "")


@dataclass
class DropTarget:
    """
    One droppable area under the pointer at the end of a drag gesture.

    kind:
      "canvas"            — the root canvas background
      "group"             — a group's content area (component_id = group)
      "column_container"  — a column container's body (component_id = container)
      "column"            — one column (component_id = container, column_index)
      "component"         — a component in the canvas (component_id = it)
    """

    kind: str
    component_id: str | None = None
    column_index: int | None = None


@dataclass
class Placement:
    """Where a resolved drop lands: a sibling group and a position in it."""

    parent_id: str | None
    column_index: int | None
    position: int | None  # None = append
    rule: str  # which priority rule matched


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_condition(condition: str) -> str:
    """Map editor/legacy condition spellings onto the canonical snake_case names."""
    return CONDITION_ALIASES.get(condition, condition)


def new_component_id() -> str:
    """Fresh, unique component id."""
    return f"component_{uuid.uuid4().hex[:12]}"


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
