# backend/tests/conftest.py - Pytest Configuration
import pytest

from bioflow.config import EditorConfig
from bioflow.workflow import WorkflowStore, get_node_catalog


@pytest.fixture
def config():
    """Plain defaults, independent of the environment"""
    return EditorConfig()


@pytest.fixture
def catalog():
    return get_node_catalog()


@pytest.fixture
def store(catalog, config):
    """Fresh store holding the single default workflow"""
    with WorkflowStore(catalog=catalog, config=config) as s:
        yield s


@pytest.fixture
def workflow_id(store):
    return store.current_workflow().id
