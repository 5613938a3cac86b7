"""
Form Designer Kernel — Designer

One editable form: document + history log + rule engine + clipboard +
selection, bundled behind a single object. Nothing here is process-wide;
every Designer is independent, so several forms (or tests) can coexist.

Every structural change goes validate → reduce → record. A rejected action is
a silent no-op: the document and history stay untouched and the method
returns None/False, so optimistic UIs never see an exception for a stale id.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

from form_designer.kernel.actions import make_action
from form_designer.kernel.history import HistoryLog
from form_designer.kernel.logic import LogicEngine
from form_designer.kernel.models import FormConfig, dump_form_config, parse_form_config
from form_designer.kernel.placement import resolve_drop
from form_designer.kernel.primitives import validate_action
from form_designer.kernel.reducer import (
    empty_document,
    get_component,
    get_siblings,
    normalize_orders,
    reduce,
)
from form_designer.kernel.registry import ComponentRegistry
from form_designer.kernel.types import DropTarget, LogicRule, ReduceResult, new_component_id

logger = logging.getLogger(__name__)


class Designer:
    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        *,
        history_limit: int | None = None,
        max_passes: int | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ComponentRegistry()
        self.document: dict[str, Any] = empty_document()
        self.history = HistoryLog(limit=history_limit)
        self.logic = LogicEngine(max_passes=max_passes)
        self.selected_id: str | None = None
        self.clipboard: dict[str, Any] | None = None
        self.preview = False

    # ------------------------------------------------------------------
    # Core apply
    # ------------------------------------------------------------------

    def _apply(self, action: dict[str, Any]) -> ReduceResult | None:
        """Validate, reduce and record one action. Returns None when rejected."""
        errors = validate_action(action["type"], action["payload"])
        if errors:
            logger.debug("designer: %s invalid: %s", action["type"], "; ".join(errors))
            return None

        result = reduce(self.document, action)
        if not result.applied:
            logger.debug("designer: %s rejected: %s", action["type"], result.error)
            return None

        for warning in result.warnings:
            logger.debug("designer: %s warning %s: %s", action["type"], warning.code, warning.message)

        self.history.record(action, self.document, result.document)
        self.document = result.document
        return result

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def load_document(self, config: FormConfig | dict[str, Any]) -> None:
        """
        Replace the document wholesale. Clears history, clipboard, selection
        and runtime values. Raises FormConfigError on malformed input.
        """
        parsed = parse_form_config(config)
        document = empty_document()
        document["components"] = {c.id: c.to_node() for c in parsed.components}
        document["layout"] = copy.deepcopy(parsed.layout)
        document["theme"] = copy.deepcopy(parsed.theme)
        document["rules"] = [r.model_dump() for r in parsed.rules]

        fixed = normalize_orders(document)
        if fixed:
            logger.warning("designer: renumbered %d sibling group(s) with non-contiguous order", fixed)

        self.document = document
        self.history.clear()
        self.selected_id = None
        self.clipboard = None
        self.logic.reset()
        self.logic.set_rules(self.rules)
        if self.preview:
            self.logic.initialize_values(self.components)

    def export_document(self) -> dict[str, Any]:
        """Persisted FormConfig dict for the current document."""
        return dump_form_config(self.document)

    def clear(self) -> None:
        """Start over with an empty form."""
        self.document = empty_document()
        self.history.clear()
        self.selected_id = None
        self.clipboard = None
        self.logic.reset()
        self.logic.set_rules([])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def components(self) -> list[dict[str, Any]]:
        return list(self.document["components"].values())

    @property
    def rules(self) -> list[LogicRule]:
        return [LogicRule.from_dict(r) for r in self.document["rules"]]

    @property
    def generation(self) -> int:
        return self.logic.generation

    def get_component(self, component_id: str) -> dict[str, Any] | None:
        return get_component(self.document, component_id)

    def get_siblings(self, parent_id: str | None = None, column_index: int | None = None) -> list[dict[str, Any]]:
        return get_siblings(self.document, parent_id, column_index)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_node(
        self,
        type: str,
        position: int | None = None,
        parent_id: str | None = None,
        column_index: int | None = None,
    ) -> str | None:
        """Add a registry-seeded component. Selects and returns its id."""
        meta = self.registry.get(type)
        if meta is None:
            logger.debug("designer: unknown component type %s", type)
            return None

        result = self._apply(make_action(
            "component.add",
            id=new_component_id(),
            type=meta.type,
            label=meta.default_label,
            props=meta.new_props(),
            parent_id=parent_id,
            column_index=column_index,
            position=position,
        ))
        if result is None:
            return None
        self.selected_id = result.created_id
        return result.created_id

    def move_node(
        self,
        component_id: str,
        target_order: int | None,
        new_parent_id: str | None = None,
        new_column_index: int | None = None,
    ) -> bool:
        return self._apply(make_action(
            "component.move",
            id=component_id,
            position=target_order,
            parent_id=new_parent_id,
            column_index=new_column_index,
        )) is not None

    def reorder_siblings(self, ordered_ids: list[str]) -> bool:
        return self._apply(make_action("component.reorder", ids=list(ordered_ids))) is not None

    def delete_node(self, component_id: str) -> bool:
        if self._apply(make_action("component.remove", id=component_id)) is None:
            return False
        if self.selected_id == component_id:
            self.selected_id = None
        return True

    def duplicate_node(self, component_id: str) -> str | None:
        result = self._apply(make_action("component.duplicate", id=new_component_id(), source_id=component_id))
        if result is None:
            return None
        self.selected_id = result.created_id
        return result.created_id

    def update_node(self, component_id: str, fields: dict[str, Any]) -> bool:
        return self._apply(make_action("component.update", id=component_id, fields=dict(fields))) is not None

    def batch_update(self, updates: Iterable[dict[str, Any]]) -> bool:
        """Apply [{id, fields}, ...] as one history entry."""
        entries = [{"id": u.get("id"), "fields": dict(u.get("fields", {}))} for u in updates]
        if not entries:
            return False
        return self._apply(make_action("component.batch_update", updates=entries)) is not None

    def copy_node(self, component_id: str) -> bool:
        node = self.get_component(component_id)
        if node is None:
            return False
        self.clipboard = copy.deepcopy(node)
        return True

    def paste_node(
        self,
        position: int | None = None,
        parent_id: str | None = None,
        column_index: int | None = None,
    ) -> str | None:
        """Insert a fresh-id clone of the clipboard. Selects and returns its id."""
        if self.clipboard is None:
            return None
        result = self._apply(make_action(
            "component.paste",
            id=new_component_id(),
            component=self.clipboard,
            parent_id=parent_id,
            column_index=column_index,
            position=position,
        ))
        if result is None:
            return None
        self.selected_id = result.created_id
        return result.created_id

    def select_node(self, component_id: str | None) -> None:
        if component_id is None or component_id in self.document["components"]:
            self.selected_id = component_id

    def update_layout(self, layout: dict[str, Any]) -> bool:
        return self._apply(make_action("layout.update", layout=dict(layout))) is not None

    def update_theme(self, theme: dict[str, Any]) -> bool:
        return self._apply(make_action("theme.update", theme=dict(theme))) is not None

    def set_rules(self, rules: Iterable[LogicRule]) -> bool:
        rule_dicts = [r.to_dict() for r in rules]
        if self._apply(make_action("rules.set", rules=rule_dicts)) is None:
            return False
        self.logic.set_rules(self.rules)
        return True

    def drop(
        self,
        targets: Iterable[DropTarget],
        *,
        active_id: str | None = None,
        component_type: str | None = None,
    ) -> str | None:
        """
        Finish a drag gesture. Moves active_id, or adds a new component of
        component_type, at the highest-priority target. Returns the id placed.
        """
        if active_id is None and component_type is None:
            return None
        if active_id is not None and self.get_component(active_id) is None:
            return None

        placement = resolve_drop(self.document, targets, active_id)
        if placement is None:
            return None

        if active_id is not None:
            moved = self.move_node(active_id, placement.position, placement.parent_id, placement.column_index)
            return active_id if moved else None
        return self.add_node(component_type, placement.position, placement.parent_id, placement.column_index)

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, document: dict[str, Any] | None) -> bool:
        if document is None:
            return False
        rules_changed = document["rules"] != self.document["rules"]
        self.document = document
        if self.selected_id not in document["components"]:
            self.selected_id = None
        if rules_changed:
            self.logic.set_rules(self.rules)
        return True

    # ------------------------------------------------------------------
    # Runtime values
    # ------------------------------------------------------------------

    def enter_preview(self) -> None:
        """Start evaluating: install rules and seed values from defaults."""
        self.preview = True
        self.logic.set_rules(self.rules)
        self.logic.initialize_values(self.components)

    def exit_preview(self) -> None:
        self.preview = False
        self.logic.reset()

    def set_value(self, component_id: str, value: Any) -> None:
        self.logic.set_value(component_id, value)

    def get_value(self, component_id: str) -> Any:
        return self.logic.get_value(component_id)

    def get_computed_props(self, component_id: str) -> dict[str, Any]:
        return self.logic.get_computed_props(component_id)
