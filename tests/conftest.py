"""
Global pytest configuration and fixtures for the Asana connector tests.

This file contains shared fixtures that are available to all test modules
without explicit import.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Generator

import pytest  # type: ignore
from faker import Faker  # type: ignore

# Add the project root to Python path
project_root: Path = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from asana_connector.connectors.sources.asana.connector import AsanaConnector  # noqa: E402
from asana_connector.sources.external.asana.asana import AsanaDataSource  # noqa: E402
from tests.fixtures.asana_fixtures import FakeAsana  # noqa: E402

# Initialize Faker for generating test data
fake: Faker = Faker()


# ============================================================================
# Session-level fixtures
# ============================================================================


@pytest.fixture(scope="session")
def faker_instance() -> Faker:
    """
    Provide a Faker instance for generating test data.

    Returns:
        Configured Faker instance
    """
    return fake


# ============================================================================
# Function-level fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """
    Reset environment state around each test.
    Tests that set ASANA_* variables must not leak them into later tests.
    """
    original_env: Dict[str, str] = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fake_asana() -> FakeAsana:
    """An empty in-memory Asana API; tests register the routes they need."""
    return FakeAsana()


@pytest.fixture
def data_source(fake_asana: FakeAsana) -> AsanaDataSource:
    """AsanaDataSource talking to `fake_asana`."""
    return fake_asana.data_source()


@pytest.fixture
def connector(data_source: AsanaDataSource) -> AsanaConnector:
    """AsanaConnector with a small page size, not yet validated."""
    return AsanaConnector(data_source, page_size=2)
