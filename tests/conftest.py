# tests/conftest.py

import pytest

from meta_search import registry
from meta_search.dispatch import clear_builder_classes
from meta_search.wheres import reset_wheres


@pytest.fixture(autouse=True)
def _restore_search_declarations():
    """Undo registry and where changes a test makes on the shared test models."""
    snapshot = dict(registry._registries)
    yield
    with registry._lock:
        registry._registries.clear()
        registry._registries.update(snapshot)
    reset_wheres()
    clear_builder_classes()
