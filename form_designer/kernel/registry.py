"""
Form Designer Kernel — Component Registry

Metadata for every component kind the designer can place: display name,
category, and the default props a freshly added node starts from.

The set of kinds is closed per registry instance but extensible: callers
register new kinds before building documents that use them.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from form_designer.kernel.types import CATEGORIES, COLUMN_CONTAINER, GROUP


@dataclass
class ComponentMeta:
    type: str
    name: str
    category: str
    description: str = ""
    default_props: dict[str, Any] = field(default_factory=dict)

    def new_props(self) -> dict[str, Any]:
        """Independent copy of the default props (label excluded)."""
        props = copy.deepcopy(self.default_props)
        props.pop("label", None)
        return props

    @property
    def default_label(self) -> str:
        return self.default_props.get("label") or self.name


_OPTIONS = [
    {"label": "Option 1", "value": "option1", "default_selected": False},
    {"label": "Option 2", "value": "option2", "default_selected": False},
    {"label": "Option 3", "value": "option3", "default_selected": False},
]

_FIELD = {"required": False, "disabled": False}


class ComponentRegistry:
    """Component kind → ComponentMeta."""

    def __init__(self, *, with_defaults: bool = True) -> None:
        self._components: dict[str, ComponentMeta] = {}
        if with_defaults:
            self._register_defaults()

    def register(self, meta: ComponentMeta) -> None:
        if meta.category not in CATEGORIES:
            raise ValueError(f"Unknown component category: {meta.category}")
        self._components[meta.type] = meta

    def get(self, type: str) -> ComponentMeta | None:
        return self._components.get(type)

    def __contains__(self, type: object) -> bool:
        return type in self._components

    def all(self) -> list[ComponentMeta]:
        return list(self._components.values())

    def by_category(self, category: str) -> list[ComponentMeta]:
        return [m for m in self._components.values() if m.category == category]

    # -- defaults --

    def _register_defaults(self) -> None:
        # Basic inputs
        self.register(ComponentMeta(
            type="input", name="Single-line text", category="basic",
            default_props={"label": "Single-line text", "placeholder": "Enter text", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="textarea", name="Multi-line text", category="basic",
            default_props={
                "label": "Multi-line text", "placeholder": "Enter text", **_FIELD,
                "max_length": 500, "show_char_count": True,
            },
        ))
        self.register(ComponentMeta(
            type="presetText", name="Preset text", category="basic",
            default_props={"label": "Preset text", "content": "Preset text content", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="number", name="Number", category="basic",
            default_props={"label": "Number", "placeholder": "Enter a number", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="date", name="Date", category="basic",
            default_props={"label": "Date", **_FIELD, "show_time_picker": False},
        ))
        self.register(ComponentMeta(
            type="select", name="Dropdown", category="basic",
            default_props={
                "label": "Dropdown", "required": False, "options": _OPTIONS,
                "select_mode": "single", "allow_clear": True, "default_value": "",
                "placeholder": "Please select",
            },
        ))
        self.register(ComponentMeta(
            type="radio", name="Choice", category="basic",
            default_props={
                "label": "Choice", **_FIELD, "allow_multiple": False,
                "option_layout": "vertical", "options": _OPTIONS,
            },
        ))
        self.register(ComponentMeta(
            type="checkbox", name="Checkbox", category="basic",
            default_props={"label": "Checkbox", **_FIELD, "options": _OPTIONS},
        ))
        self.register(ComponentMeta(
            type="upload", name="File upload", category="basic",
            default_props={"label": "File upload", **_FIELD, "max_file_size": 10, "max_file_count": 1},
        ))
        self.register(ComponentMeta(
            type="slider", name="Slider", category="basic",
            default_props={"label": "Slider", "min": 0, "max": 100, "step": 1, "default_value": 0},
        ))
        self.register(ComponentMeta(
            type="html", name="HTML content", category="basic",
            default_props={"label": "HTML content", "html_content": "<p>HTML content</p>"},
        ))

        # Layout
        self.register(ComponentMeta(
            type=GROUP, name="Group", category="layout",
            description="Groups related fields under one heading",
            default_props={"label": "Group"},
        ))
        self.register(ComponentMeta(
            type=COLUMN_CONTAINER, name="Columns", category="layout",
            description="Multi-column layout; each column is its own sibling group",
            default_props={"label": "Columns", "columns": 2},
        ))
        self.register(ComponentMeta(
            type="divider", name="Divider", category="layout",
            default_props={"label": "Divider", "content": ""},
        ))
        self.register(ComponentMeta(
            type="steps", name="Steps", category="layout",
            default_props={"label": "Steps", "current": 1, "steps": []},
        ))

        # Domain fields
        self.register(ComponentMeta(
            type="projectName", name="Project name", category="project",
            default_props={"label": "Project name", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="client", name="Client", category="project",
            default_props={"label": "Client", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="contractName", name="Contract name", category="contract",
            default_props={"label": "Contract name", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="signature", name="Signature", category="contract",
            default_props={"label": "Signature", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="articleTitle", name="Article title", category="article",
            default_props={"label": "Article title", **_FIELD},
        ))
        self.register(ComponentMeta(
            type="amount", name="Amount", category="finance",
            default_props={"label": "Amount", **_FIELD, "precision": 2},
        ))
        self.register(ComponentMeta(
            type="paymentMethod", name="Payment method", category="finance",
            default_props={"label": "Payment method", **_FIELD, "options": []},
        ))
