"""
Pytest configuration and fixtures for the test suite.

Defines markers for selective test execution:
    pytest -m unit          # Fast unit tests
    pytest -m integration   # Integration tests
    pytest -m resilience    # Retry and credential challenge tests
    pytest -m e2e           # End-to-end CLI tests

Fixtures are centralized in tests/fixtures/ for reuse across all test modules.
"""

import copy
import os
import sys

import pytest

# IMPORTANT: Patch tenacity's sleep function BEFORE any other imports
# This must happen before tenacity.Retrying class is defined (which captures defaults)
import tenacity.nap
tenacity.nap.sleep = lambda seconds: None

# Add src to path for imports
src_dir = os.path.join(os.path.dirname(__file__), '..', 'src')
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

# Add tests directory to path for fixtures import
tests_dir = os.path.dirname(__file__)
if tests_dir not in sys.path:
    # Ensure src directory stays ahead of tests for module resolution
    sys.path.insert(1, tests_dir)

from fluree_migrate.core.iri import IRIResolver
from fluree_migrate.formats.jsonld import SchemaModelBuilder

# Import centralized fixtures
from fixtures import (
    SOURCE_URL,
    PERSON_SCHEMA,
    CRM_SCHEMA,
    PERSON_ROWS,
    SAMPLE_MIGRATION_CONFIG,
    MINIMAL_MIGRATION_CONFIG,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Integration tests across pipeline stages")
    config.addinivalue_line("markers", "resilience: Retry, backoff and credential challenge tests")
    config.addinivalue_line("markers", "e2e: End-to-end CLI tests")


# =============================================================================
# IRI Fixtures
# =============================================================================

@pytest.fixture
def source_url():
    """v2 ledger URL used throughout the tests."""
    return SOURCE_URL


@pytest.fixture
def resolver():
    """IRI resolver with source-derived base and vocab."""
    return IRIResolver(SOURCE_URL)


# =============================================================================
# Schema Fixtures
# =============================================================================

@pytest.fixture
def person_schema():
    """Raw schema with one person collection (name, friends)."""
    return copy.deepcopy(PERSON_SCHEMA)


@pytest.fixture
def crm_schema():
    """Raw schema covering every v2 datatype across two collections."""
    return copy.deepcopy(CRM_SCHEMA)


@pytest.fixture
def person_model(resolver, person_schema):
    """SchemaModel built from the person schema."""
    model, _ = SchemaModelBuilder(resolver).build(person_schema)
    return model


@pytest.fixture
def crm_model(resolver, crm_schema):
    """SchemaModel built from the CRM schema."""
    model, _ = SchemaModelBuilder(resolver).build(crm_schema)
    return model


@pytest.fixture
def person_rows():
    """Compact query rows for Ada and Bob."""
    return copy.deepcopy(PERSON_ROWS)


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def sample_config_dict():
    """Full migration configuration dictionary."""
    return copy.deepcopy(SAMPLE_MIGRATION_CONFIG)


@pytest.fixture
def minimal_config_dict():
    """Smallest valid migration configuration."""
    return copy.deepcopy(MINIMAL_MIGRATION_CONFIG)
