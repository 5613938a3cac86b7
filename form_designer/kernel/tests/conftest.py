"""
Kernel test configuration.

Shared fixtures: a fresh Designer per test, and a three-component root
document for reducer tests that work on plain dicts.
"""

import pytest

from form_designer.kernel.designer import Designer
from form_designer.kernel.reducer import empty_document
from form_designer.kernel.tests.helpers import add


@pytest.fixture
def designer():
    return Designer(history_limit=50, max_passes=1)


@pytest.fixture
def abc_doc():
    """Root with A, B, C at orders 0, 1, 2."""
    doc = empty_document()
    for node_id in ("a", "b", "c"):
        doc = add(doc, node_id)
    return doc
