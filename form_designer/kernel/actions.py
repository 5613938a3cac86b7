"""
Form Designer Kernel — Action Construction

Factory for well-formed action records. The designer wraps every mutation in
one of these before handing it to the reducer; the same record becomes the
`action` of the HistoryEntry. Tests use it to build actions concisely.
"""

from __future__ import annotations

from typing import Any

from form_designer.kernel.types import now_iso


def make_action(
    action_type: str,
    payload: dict[str, Any] | None = None,
    *,
    timestamp: str | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """
    Build an action record: {"type", "payload", "timestamp"}.

    Payload keys may be passed either as a dict or as keyword arguments;
    keyword arguments win on conflict. Keys whose value is None are dropped so
    optional parameters stay absent rather than explicit.
    """
    merged: dict[str, Any] = dict(payload or {})
    merged.update(fields)
    return {
        "type": action_type,
        "payload": {k: v for k, v in merged.items() if v is not None},
        "timestamp": timestamp or now_iso(),
    }
