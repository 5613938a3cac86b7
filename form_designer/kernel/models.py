"""
Persisted form shape.

FormConfig = {components: [...], layout: {...}, theme: {...}, rules: [...]}

Accepts the camelCase keys the editor UI writes (parentId, columnIndex,
defaultValue, logicRules, sourceComponent, ...) as well as snake_case, and
always dumps snake_case. Component fields the kernel does not know about are
folded into the component's opaque `props` bag.
"""

from __future__ import annotations

import copy
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from form_designer.kernel.types import DEFAULT_LAYOUT, DEFAULT_THEME, normalize_condition


class FormConfigError(Exception):
    """Persisted form config is malformed."""
    pass


class ComponentNodeModel(BaseModel):
    """One component as stored."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    label: str = ""
    parent_id: str | None = Field(default=None, alias="parentId")
    order: int = Field(default=0, ge=0)
    column_index: int | None = Field(default=None, alias="columnIndex", ge=0)
    default_value: Any = Field(default=None, alias="defaultValue")
    props: dict[str, Any] = Field(default_factory=dict)

    def to_node(self) -> dict[str, Any]:
        """Kernel dict form. Extra fields and default_value land in props."""
        props = copy.deepcopy(self.props)
        props.update(copy.deepcopy(self.model_extra or {}))
        if self.default_value is not None:
            props["default_value"] = self.default_value
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "parent_id": self.parent_id,
            "order": self.order,
            "column_index": self.column_index,
            "props": props,
        }


class LogicRuleModel(BaseModel):
    """A visibility or linkage rule as stored."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    id: str = ""
    kind: Literal["visibility", "linkage"] = Field(alias="type")
    source_component_id: str = Field(alias="sourceComponent")
    condition: str
    comparison_value: str = Field(default="", alias="value")
    target_component_id: str = Field(alias="targetComponent")
    action: str | None = None
    target_value: Any = Field(default=None, alias="targetValue")

    @field_validator("condition")
    @classmethod
    def _canonical_condition(cls, v: str) -> str:
        return normalize_condition(v)

    @field_validator("comparison_value", mode="before")
    @classmethod
    def _comparison_as_string(cls, v: Any) -> str:
        return "" if v is None else str(v)


class FormConfig(BaseModel):
    """The minimal round-trippable form document."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    components: list[ComponentNodeModel] = Field(default_factory=list)
    layout: dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_LAYOUT))
    theme: dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_THEME))
    rules: list[LogicRuleModel] = Field(default_factory=list, alias="logicRules")

    @model_validator(mode="before")
    @classmethod
    def _rules_from_layout(cls, data: Any) -> Any:
        # The editor keeps rules under layout.logicRules
        if isinstance(data, dict) and "rules" not in data and "logicRules" not in data:
            layout = data.get("layout")
            if isinstance(layout, dict) and "logicRules" in layout:
                data = dict(data)
                layout = dict(layout)
                data["rules"] = layout.pop("logicRules")
                data["layout"] = layout
        return data

    @model_validator(mode="after")
    def _unique_ids(self) -> FormConfig:
        seen: set[str] = set()
        for component in self.components:
            if component.id in seen:
                raise ValueError(f"duplicate component id: {component.id}")
            seen.add(component.id)
        return self


def parse_form_config(data: Any) -> FormConfig:
    """Validate raw (JSON-decoded) data. Raises FormConfigError."""
    if isinstance(data, FormConfig):
        return data
    try:
        return FormConfig.model_validate(data)
    except ValidationError as e:
        raise FormConfigError(str(e)) from e


def dump_form_config(document: dict[str, Any]) -> dict[str, Any]:
    """Kernel document → persisted dict (snake_case)."""
    components = sorted(
        document["components"].values(),
        key=lambda c: (c.get("parent_id") or "", c.get("column_index") or 0, c.get("order", 0)),
    )
    config = FormConfig(
        components=[ComponentNodeModel.model_validate(c) for c in components],
        layout=document.get("layout", {}),
        theme=document.get("theme", {}),
        rules=[LogicRuleModel.model_validate(r) for r in document.get("rules", [])],
    )
    return config.model_dump(mode="json")
