"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- An in-memory Supabase client
- Repository fixtures
"""

import os

import pytest

# Set test environment variables BEFORE any imports
# Settings are loaded when marketplace.core.config is first imported
os.environ["ENVIRONMENT"] = "development"
os.environ["SUPABASE_URL"] = "http://localhost:54321"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ.pop("SUPABASE_SERVICE_KEY", None)

from marketplace.repositories import (  # noqa: E402
    OrdersRepository,
    ProfilesRepository,
    ProvidersRepository,
)
from tests.fake_supabase import FakeSupabaseClient  # noqa: E402


@pytest.fixture
def client():
    """Empty in-memory backend."""
    return FakeSupabaseClient()


@pytest.fixture
def orders_repo(client):
    return OrdersRepository(client)


@pytest.fixture
def strict_orders_repo(client):
    return OrdersRepository(client, strict_transitions=True)


@pytest.fixture
def providers_repo(client):
    return ProvidersRepository(client)


@pytest.fixture
def profiles_repo(client):
    return ProfilesRepository(client)
