"""
Form Designer Kernel — the pure engine.

Components:
  reducer     — (document, action) → document  (pure, deterministic)
  history     — snapshot-per-entry undo/redo log
  logic       — visibility/linkage rule evaluation over runtime values
  placement   — fixed-priority drop target resolution
  designer    — one form: document + history + rules + clipboard
  storage     — load/save designers by form id
"""

from form_designer.kernel.designer import Designer
from form_designer.kernel.logic import LogicEngine, check_condition, find_rule_cycles
from form_designer.kernel.models import FormConfig, FormConfigError, parse_form_config
from form_designer.kernel.primitives import validate_action
from form_designer.kernel.reducer import empty_document, get_siblings, reduce, replay
from form_designer.kernel.registry import ComponentMeta, ComponentRegistry
from form_designer.kernel.storage import FormNotFound, FormStore, JsonFileStorage, MemoryStorage
from form_designer.kernel.types import DropTarget, LogicRule

__all__ = [
    "Designer",
    "LogicEngine",
    "check_condition",
    "find_rule_cycles",
    "FormConfig",
    "FormConfigError",
    "parse_form_config",
    "validate_action",
    "empty_document",
    "get_siblings",
    "reduce",
    "replay",
    "ComponentMeta",
    "ComponentRegistry",
    "FormNotFound",
    "FormStore",
    "JsonFileStorage",
    "MemoryStorage",
    "DropTarget",
    "LogicRule",
]
