"""
Tests for client construction and the repository container.
"""

import pytest

from marketplace.core.config_validator import load_config
from marketplace.core.exceptions import ClientConfigurationError
from marketplace.database import client as client_module
from marketplace.database import create_supabase_client
from marketplace.models.orders import OrderStatus
from marketplace.repositories import (
    OrdersRepository,
    ProfilesRepository,
    ProvidersRepository,
    Repositories,
)
from tests.factories import make_order


class TestCreateSupabaseClient:
    async def test_missing_url(self):
        with pytest.raises(ClientConfigurationError) as exc_info:
            await create_supabase_client(supabase_url="", supabase_key="anon")

        assert exc_info.value.details == {"missing_field": "supabase_url"}

    async def test_missing_key(self):
        with pytest.raises(ClientConfigurationError, match="SUPABASE_KEY"):
            await create_supabase_client(supabase_url="http://localhost:54321", supabase_key="")

    async def test_uses_explicit_credentials(self, monkeypatch):
        calls = []

        async def fake_acreate_client(url, key):
            calls.append((url, key))
            return "client"

        monkeypatch.setattr(client_module, "acreate_client", fake_acreate_client)

        result = await create_supabase_client(supabase_url="https://p.supabase.co", supabase_key="anon")

        assert result == "client"
        assert calls == [("https://p.supabase.co", "anon")]

    async def test_defaults_to_settings(self, monkeypatch):
        from marketplace.core.config import settings

        async def fake_acreate_client(url, key):
            return (url, key)

        monkeypatch.setattr(client_module, "acreate_client", fake_acreate_client)

        result = await create_supabase_client()

        assert result == (settings.supabase_url, settings.supabase_key)

    async def test_backend_failure_wrapped(self, monkeypatch):
        async def failing_acreate_client(url, key):
            raise ValueError("Invalid API key")

        monkeypatch.setattr(client_module, "acreate_client", failing_acreate_client)

        with pytest.raises(ClientConfigurationError, match="Invalid API key") as exc_info:
            await create_supabase_client(supabase_url="https://p.supabase.co", supabase_key="bad")

        assert exc_info.value.code == "CONFIGURATION_ERROR"


class TestRepositories:
    def test_builds_each_repository(self, client):
        repos = Repositories(client)

        assert isinstance(repos.orders, OrdersRepository)
        assert isinstance(repos.providers, ProvidersRepository)
        assert isinstance(repos.profiles, ProfilesRepository)
        assert repos.orders.client is repos.providers.client is client
        assert repos.orders.strict_transitions is False

    def test_instances_are_not_shared(self, client):
        assert Repositories(client).orders is not Repositories(client).orders

    async def test_settings_applied(self, client, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "http://localhost:54321")
        monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
        monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
        config = load_config("staging", default_page_size=2, max_page_size=3)
        client.seed("orders", [make_order(order_number=f"ORD-{i}") for i in range(5)])

        repos = Repositories(client, config)
        default_page = await repos.orders.list_orders()
        capped_page = await repos.orders.list_orders(limit=50)
        created = await repos.orders.create(make_order(status="pending"))
        illegal = await repos.orders.update_status(created.data.id, OrderStatus.DELIVERED)

        assert repos.providers.page_size == 2
        assert len(default_page.data) == 2
        assert len(capped_page.data) == 3
        assert illegal.error is not None
        assert illegal.error.code == "INVALID_STATUS_TRANSITION"
