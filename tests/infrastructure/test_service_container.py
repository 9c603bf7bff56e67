"""Tests for configuration and the service container."""

from unittest.mock import AsyncMock

import pytest
from cachetools import TTLCache

from agency_admin.domain.services.claim_events import ClaimEventBus
from agency_admin.infrastructure.admin_api.http_adapter import HttpAdminAPIAdapter
from agency_admin.infrastructure.config import AdminAPIConfig, ConsoleConfig, SupabaseConfig
from agency_admin.infrastructure.dependencies import (
    ServiceContainer,
    get_service_container,
    get_user_admin_service,
)
from agency_admin.infrastructure.notifications import CollectingNotifier
from agency_admin.infrastructure.supabase.conversation_adapter import SupabaseConversationStore


@pytest.fixture
def console_env(monkeypatch):
    monkeypatch.setenv("ADMIN_API_BASE_URL", "https://admin.example.com")
    monkeypatch.setenv("ADMIN_API_TOKEN", "token-123")
    monkeypatch.setenv("ADMIN_API_TIMEOUT", "12.5")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("ADMIN_USER_ID", "admin-1")
    monkeypatch.setenv("ROLE_HISTORY_CACHE_TTL", "60")


@pytest.fixture
def fresh_container():
    get_service_container.cache_clear()
    yield
    get_service_container.cache_clear()


class TestConfig:
    def test_from_env(self, console_env):
        admin = AdminAPIConfig.from_env()
        supabase = SupabaseConfig.from_env()
        console = ConsoleConfig.from_env()

        assert (admin.base_url, admin.token, admin.timeout) == ("https://admin.example.com", "token-123", 12.5)
        assert (supabase.url, supabase.key) == ("https://project.supabase.co", "anon-key")
        assert (console.admin_user_id, console.role_history_cache_ttl) == ("admin-1", 60)

    def test_server_defaults(self, monkeypatch):
        monkeypatch.delenv("HOST", raising=False)
        monkeypatch.delenv("PORT", raising=False)

        console = ConsoleConfig.from_env()

        assert (console.host, console.port) == ("0.0.0.0", 8000)

    def test_defaults(self, monkeypatch):
        for name in ("ADMIN_API_BASE_URL", "ADMIN_API_TOKEN", "ADMIN_API_TIMEOUT", "ADMIN_USER_ID"):
            monkeypatch.delenv(name, raising=False)

        admin = AdminAPIConfig.from_env()

        assert admin.base_url == "http://localhost:3000"
        assert admin.token is None
        assert ConsoleConfig.from_env().admin_user_id is None


class TestServiceContainer:
    def test_services_are_wired(self, console_env):
        container = ServiceContainer()

        assert isinstance(container.get_admin_api(), HttpAdminAPIAdapter)
        assert isinstance(container.get_event_bus(), ClaimEventBus)
        assert isinstance(container.get_conversation_store(), SupabaseConversationStore)
        cache = container.get("role_history_cache")
        assert isinstance(cache, TTLCache)
        assert cache.ttl == 60

    def test_unknown_service(self, console_env):
        with pytest.raises(KeyError, match="Service 'missing' not found"):
            ServiceContainer().get("missing")

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, console_env):
        container = ServiceContainer()
        admin_api = AsyncMock()
        role_store = AsyncMock()
        conversation_store = AsyncMock()
        container.register("admin_api", admin_api)
        container.register("role_store", role_store)
        container.register("conversation_store", conversation_store)

        await container.startup()
        await container.startup()
        await container.shutdown()

        admin_api.initialize.assert_awaited_once()
        role_store.initialize.assert_awaited_once()
        admin_api.shutdown.assert_awaited_once()
        role_store.shutdown.assert_awaited_once()
        conversation_store.initialize.assert_awaited_once()
        conversation_store.shutdown.assert_awaited_once()

    def test_global_container_is_shared(self, console_env, fresh_container):
        assert get_service_container() is get_service_container()

    @pytest.mark.asyncio
    async def test_user_admin_service_uses_shared_settings(self, console_env, fresh_container, admin_api):
        container = get_service_container()
        role_store = AsyncMock()
        role_store.is_available = True
        container.register("role_store", role_store)

        service = await get_user_admin_service(admin_api, CollectingNotifier())

        assert service.acting_user_id == "admin-1"
        assert service.role_store is role_store
        assert service._history is container.get("role_history_cache")
