"""
Form Designer Kernel — Rule Engine

Evaluates visibility and linkage rules against the runtime value store.

Every `set_value` runs one evaluation pass over the rules in declaration
order. A linkage rule writes its literal into the store immediately, so later
rules in the same pass read the new value: chains declared in dependency
order resolve in one pass. There is no fixed point and, by default, no cycle
handling. A cyclic rule set settles on whatever the last pass left behind and
may flip on the next change. `max_passes > 1` repeats the pass until values
stop changing or the bound is hit; `find_rule_cycles` reports the linkage
loops.

`generation` goes up whenever derived state may have changed. Consumers keep
the last generation they rendered and re-fetch computed props when it moves.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from form_designer.config import settings
from form_designer.kernel.types import LogicRule
from form_designer.kernel.values import ValueStore

logger = logging.getLogger(__name__)

# Leading numeric prefix, the way parseFloat reads "12px" as 12
_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# ---------------------------------------------------------------------------
# Condition evaluation
# ---------------------------------------------------------------------------


def stringify(value: Any) -> str:
    """Render a runtime value the way the editor compares it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list | tuple):
        return ",".join(stringify(v) for v in value)
    return str(value)


def parse_number(text: str) -> float | None:
    match = _NUMBER_RE.match(text)
    if match is None:
        return None
    return float(match.group(1))


def check_condition(source_value: Any, condition: str, comparison_value: Any) -> bool:
    """
    Compare a source value against a rule's comparison value.

    greater_than / less_than compare numerically when both sides parse as
    numbers and fall back to string ordering otherwise. Unknown conditions
    never match.
    """
    source = stringify(source_value)
    target = stringify(comparison_value)

    if condition == "equals":
        return source == target
    if condition == "not_equals":
        return source != target
    if condition in ("greater_than", "less_than"):
        a, b = parse_number(source), parse_number(target)
        if a is None or b is None:
            a, b = source, target  # type: ignore[assignment]
        return a > b if condition == "greater_than" else a < b  # type: ignore[operator]
    if condition == "contains":
        return target in source
    if condition == "not_contains":
        return target not in source
    return False


def find_rule_cycles(rules: Iterable[LogicRule]) -> list[list[str]]:
    """
    Cycles in the linkage graph (source component → target component).
    Each cycle is returned once, as the list of component ids along it.
    """
    graph: dict[str, set[str]] = {}
    for rule in rules:
        if rule.kind == "linkage":
            graph.setdefault(rule.source_component_id, set()).add(rule.target_component_id)

    cycles: list[list[str]] = []
    seen: set[frozenset[str]] = set()
    done: set[str] = set()

    def visit(node: str, path: list[str]) -> None:
        for nxt in sorted(graph.get(node, ())):
            if nxt in path:
                cycle = path[path.index(nxt):]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif nxt not in done:
                visit(nxt, path + [nxt])
        done.add(node)

    for start in sorted(graph):
        if start not in done:
            visit(start, [start])
    return cycles


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class LogicEngine:
    """Rule list + value store + cached overrides + generation counter."""

    def __init__(self, rules: Iterable[LogicRule] = (), *, max_passes: int | None = None) -> None:
        self.values = ValueStore()
        self.rules: list[LogicRule] = list(rules)
        self.overrides: dict[str, dict[str, Any]] = {}
        self.generation = 0
        self.max_passes = max_passes if max_passes is not None else settings.RULE_MAX_PASSES

    # -- rules --

    def set_rules(self, rules: Iterable[LogicRule]) -> None:
        self.rules = list(rules)
        cycles = find_rule_cycles(self.rules)
        if cycles:
            logger.warning(
                "logic: %d linkage cycle(s), results depend on declaration order: %s",
                len(cycles),
                [" -> ".join(c + c[:1]) for c in cycles],
            )
        self.generation += 1

    # -- values --

    def get_value(self, component_id: str) -> Any:
        return self.values.get(component_id)

    def set_value(self, component_id: str, value: Any) -> None:
        """Write one value, then re-evaluate every rule."""
        self.values.set(component_id, value)
        self.evaluate()

    def initialize_values(self, nodes: Iterable[dict[str, Any]]) -> None:
        seeded = self.values.seed(nodes)
        if seeded:
            self.generation += 1

    def reset(self) -> None:
        self.values.clear()
        self.overrides = {}
        self.generation += 1

    # -- evaluation --

    def evaluate(self) -> dict[str, dict[str, Any]]:
        """
        Run the evaluation pass (repeated up to max_passes while values keep
        changing) and bump the generation once. Returns the new overrides.
        """
        for _ in range(self.max_passes):
            before = self.values.to_dict()
            self.overrides = self._run_pass()
            if self.values.to_dict() == before:
                break
        self.generation += 1
        return self.overrides

    def _run_pass(self) -> dict[str, dict[str, Any]]:
        overrides: dict[str, dict[str, Any]] = {}
        for rule in self.rules:
            source_value = self.values.get(rule.source_component_id, "")
            if not check_condition(source_value, rule.condition, rule.comparison_value):
                continue

            target = overrides.setdefault(rule.target_component_id, {})
            if rule.kind == "visibility":
                target["visibility"] = rule.action
            elif rule.kind == "linkage":
                self.values.set(rule.target_component_id, rule.target_value)
                target["value"] = rule.target_value
        return overrides

    def get_computed_props(self, component_id: str) -> dict[str, Any]:
        """
        Props the rules currently impose on one component, recomputed from the
        live values rather than read from the cached overrides. Later matching
        rules win over earlier ones for the same prop.
        """
        props: dict[str, Any] = {}
        for rule in self.rules:
            if rule.target_component_id != component_id:
                continue
            source_value = self.values.get(rule.source_component_id, "")
            if not check_condition(source_value, rule.condition, rule.comparison_value):
                continue
            if rule.kind == "visibility":
                props["visibility"] = rule.action
            elif rule.kind == "linkage":
                props["default_value"] = rule.target_value
        return props
