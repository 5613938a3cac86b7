"""
Form Designer Kernel — Runtime Value Store

Current runtime value per component id, kept apart from each component's
design-time `default_value` prop.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any


class ValueStore:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def get(self, component_id: str, default: Any = None) -> Any:
        return self._values.get(component_id, default)

    def set(self, component_id: str, value: Any) -> None:
        self._values[component_id] = value

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def seed(self, nodes: Iterable[dict[str, Any]]) -> int:
        """
        Give every node not yet in the store its configured default value
        (empty string when it has none). Returns how many were seeded.
        """
        seeded = 0
        for node in nodes:
            if node["id"] in self._values:
                continue
            default = node.get("props", {}).get("default_value")
            self._values[node["id"]] = "" if default is None else default
            seeded += 1
        return seeded

    def clear(self) -> None:
        self._values.clear()

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)
