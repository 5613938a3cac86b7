"""
Form Designer Kernel — Persistence

The persistence collaborator: forms stored as JSON text, keyed by form id.
FormStore sits between a storage backend and the designer: it loads a stored
form into a fresh Designer and saves a Designer's document back.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from form_designer.config import settings
from form_designer.kernel.designer import Designer
from form_designer.kernel.models import FormConfigError

logger = logging.getLogger(__name__)

_FORM_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class FormNotFound(Exception):
    """Form does not exist in storage."""
    pass


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class FormStorage:
    """
    Abstract storage interface.
    Implement with a database or object store in production, in-memory for tests.
    """

    def get(self, form_id: str) -> str | None:
        """Fetch the JSON text of a form. Returns None if not found."""
        raise NotImplementedError

    def put(self, form_id: str, payload: str) -> None:
        """Write the JSON text of a form."""
        raise NotImplementedError

    def delete(self, form_id: str) -> None:
        """Delete a form. Missing forms are ignored."""
        raise NotImplementedError


class MemoryStorage(FormStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.forms: dict[str, str] = {}

    def get(self, form_id: str) -> str | None:
        return self.forms.get(form_id)

    def put(self, form_id: str, payload: str) -> None:
        self.forms[form_id] = payload

    def delete(self, form_id: str) -> None:
        self.forms.pop(form_id, None)


class JsonFileStorage(FormStorage):
    """One `<form_id>.json` file per form under a directory."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory if directory is not None else settings.STORAGE_DIR)

    def _path(self, form_id: str) -> Path:
        if not _FORM_ID_RE.match(form_id):
            raise ValueError(f"Invalid form id: {form_id!r}")
        return self.directory / f"{form_id}.json"

    def get(self, form_id: str) -> str | None:
        path = self._path(form_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, form_id: str, payload: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(form_id).write_text(payload, encoding="utf-8")

    def delete(self, form_id: str) -> None:
        self._path(form_id).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class FormStore:
    """Loads and saves designers by form id."""

    def __init__(self, storage: FormStorage):
        self._storage = storage

    def load(self, form_id: str, designer: Designer | None = None) -> Designer:
        """
        Read a form into a designer (a fresh one unless given).
        Raises FormNotFound or FormConfigError.
        """
        payload = self._storage.get(form_id)
        if payload is None:
            raise FormNotFound(form_id)

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise FormConfigError(f"Failed to parse form {form_id}: {e}") from e

        designer = designer if designer is not None else Designer()
        designer.load_document(data)
        logger.info("storage: loaded form %s (%d components)", form_id, len(designer.document["components"]))
        return designer

    def save(self, form_id: str, designer: Designer) -> None:
        payload = json.dumps(designer.export_document(), ensure_ascii=False, indent=2)
        self._storage.put(form_id, payload)
        logger.info("storage: saved form %s", form_id)

    def delete(self, form_id: str) -> None:
        self._storage.delete(form_id)
