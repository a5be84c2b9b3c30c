"""
Pytest configuration and fixtures for tooldeck tests.
"""

import sys
from pathlib import Path
from uuid import uuid4

import pytest

# Add the repository root to path for imports
# This allows `from tooldeck.domain import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from tooldeck.config import EngineSettings, get_settings  # noqa: E402
from tooldeck.domain import app as app_aggregate  # noqa: E402
from tooldeck.domain import resource as resource_aggregate  # noqa: E402
from tooldeck.domain.inputs import Input, InputType  # noqa: E402
from tooldeck.domain.values import DatabaseConfig  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start each test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def space_id():
    return uuid4()


@pytest.fixture
def folder_id():
    return uuid4()


@pytest.fixture
def settings():
    """Default settings with structured run logging switched off."""
    return EngineSettings(log_events=False)


@pytest.fixture
def http_resource(space_id):
    """HTTP Resource with one value in each key-value category."""
    return resource_aggregate.create_http(
        name="Users API",
        description="Internal users service",
        space_id=space_id,
        base_url="https://api.example.com/v1",
        url_parameters=[("token", "abc")],
        headers=[("Authorization", "Bearer secret")],
        body=[("source", "tooldeck")],
    ).unwrap()


@pytest.fixture
def sql_resource(space_id):
    database = DatabaseConfig.create(
        database_name="analytics",
        host="db.internal",
        port=5432,
        username="reporter",
        password="hunter2",
    ).unwrap()
    return resource_aggregate.create_sql(
        name="Analytics DB",
        description="Reporting replica",
        space_id=space_id,
        database=database,
    ).unwrap()


@pytest.fixture
def id_input():
    return Input.create("id", InputType.integer(), required=True).unwrap()


@pytest.fixture
def make_app(folder_id, http_resource):
    """Factory for Apps bound to http_resource (or another Resource state)."""

    def _make(resource=None, **overrides):
        params = {
            "name": "Get user",
            "folder_id": folder_id,
            "resource": resource if resource is not None else http_resource.state,
            "http_method": "GET",
        }
        params.update(overrides)
        return app_aggregate.create(**params)

    return _make
