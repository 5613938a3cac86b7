"""
Form Designer Kernel — Action Validation

Validates action payloads before they reach the reducer.
Validation is structural (well-formed?) not semantic (will it apply?).
The reducer handles semantic checks (does the component exist? would the
move create a cycle?).
"""

from __future__ import annotations

from typing import Any

from form_designer.kernel.types import ACTION_TYPES, RULE_KINDS

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_action(type: str, payload: Any) -> list[str]:
    """
    Validate an action's type and payload structure.
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []

    if type not in ACTION_TYPES:
        errors.append(f"Unknown action type: {type}")
        return errors

    if not isinstance(payload, dict):
        errors.append("Payload must be a non-null object")
        return errors

    validator = _VALIDATORS.get(type)
    if validator:
        errors.extend(validator(payload))

    return errors


# ---------------------------------------------------------------------------
# Shared checks
# ---------------------------------------------------------------------------


def _require_str(p: dict, key: str, action: str) -> list[str]:
    if key not in p:
        return [f"{action} requires '{key}'"]
    if not isinstance(p[key], str) or not p[key]:
        return [f"'{key}' must be a non-empty string"]
    return []


def _optional_int(p: dict, key: str) -> list[str]:
    value = p.get(key)
    if value is None:
        return []
    if not isinstance(value, int) or isinstance(value, bool):
        return [f"'{key}' must be an integer"]
    return []


def _optional_str(p: dict, key: str) -> list[str]:
    value = p.get(key)
    if value is not None and not isinstance(value, str):
        return [f"'{key}' must be a string"]
    return []


def _placement(p: dict) -> list[str]:
    return _optional_str(p, "parent_id") + _optional_int(p, "column_index") + _optional_int(p, "position")


# ---------------------------------------------------------------------------
# Per-action validators
# ---------------------------------------------------------------------------


def _validate_add(p: dict) -> list[str]:
    errors = _require_str(p, "id", "component.add") + _require_str(p, "type", "component.add")
    errors += _optional_str(p, "label")
    if "props" in p and not isinstance(p["props"], dict):
        errors.append("'props' must be an object")
    return errors + _placement(p)


def _validate_paste(p: dict) -> list[str]:
    errors = _require_str(p, "id", "component.paste")
    component = p.get("component")
    if not isinstance(component, dict) or "type" not in component:
        errors.append("component.paste requires a 'component' object with a 'type'")
    else:
        errors.extend(f"component: {e}" for e in _optional_str(component, "label"))
    return errors + _placement(p)


def _validate_move(p: dict) -> list[str]:
    return _require_str(p, "id", "component.move") + _placement(p)


def _validate_reorder(p: dict) -> list[str]:
    ids = p.get("ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        return ["component.reorder requires 'ids' as a list of strings"]
    return []


def _validate_remove(p: dict) -> list[str]:
    return _require_str(p, "id", "component.remove")


def _validate_duplicate(p: dict) -> list[str]:
    return _require_str(p, "id", "component.duplicate") + _require_str(p, "source_id", "component.duplicate")


def _validate_fields(fields: Any) -> list[str]:
    if not isinstance(fields, dict):
        return ["'fields' must be an object"]
    errors = _optional_str(fields, "parent_id") + _optional_int(fields, "column_index") + _optional_int(fields, "order")
    if "label" in fields and not isinstance(fields["label"], str):
        errors.append("'label' must be a string")
    if "props" in fields and not isinstance(fields["props"], dict):
        errors.append("'props' must be an object")
    return errors


def _validate_update(p: dict) -> list[str]:
    errors = _require_str(p, "id", "component.update")
    if "fields" not in p:
        errors.append("component.update requires 'fields'")
    else:
        errors.extend(_validate_fields(p["fields"]))
    return errors


def _validate_batch_update(p: dict) -> list[str]:
    updates = p.get("updates")
    if not isinstance(updates, list) or not updates:
        return ["component.batch_update requires a non-empty 'updates' list"]
    errors: list[str] = []
    for i, entry in enumerate(updates):
        if not isinstance(entry, dict) or "id" not in entry:
            errors.append(f"updates[{i}] requires 'id'")
            continue
        errors.extend(f"updates[{i}]: {e}" for e in _validate_fields(entry.get("fields", {})))
    return errors


def _validate_layout_update(p: dict) -> list[str]:
    if not isinstance(p.get("layout"), dict):
        return ["layout.update requires a 'layout' object"]
    return []


def _validate_theme_update(p: dict) -> list[str]:
    if not isinstance(p.get("theme"), dict):
        return ["theme.update requires a 'theme' object"]
    return []


def _validate_rules_set(p: dict) -> list[str]:
    rules = p.get("rules")
    if not isinstance(rules, list) or not all(isinstance(r, dict) for r in rules):
        return ["rules.set requires 'rules' as a list of objects"]

    errors: list[str] = []
    for i, rule in enumerate(rules):
        if rule.get("kind") not in RULE_KINDS:
            errors.append(f"rules[{i}]: 'kind' must be one of {sorted(RULE_KINDS)}")
        for key in ("source_component_id", "target_component_id", "condition"):
            if not isinstance(rule.get(key), str):
                errors.append(f"rules[{i}]: '{key}' must be a string")
        errors.extend(f"rules[{i}]: {e}" for e in _optional_str(rule, "id") + _optional_str(rule, "action"))
    return errors


_VALIDATORS: dict[str, Any] = {
    "component.add": _validate_add,
    "component.paste": _validate_paste,
    "component.move": _validate_move,
    "component.reorder": _validate_reorder,
    "component.remove": _validate_remove,
    "component.duplicate": _validate_duplicate,
    "component.update": _validate_update,
    "component.batch_update": _validate_batch_update,
    "layout.update": _validate_layout_update,
    "theme.update": _validate_theme_update,
    "rules.set": _validate_rules_set,
}
