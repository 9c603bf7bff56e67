"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict

from cachetools import TTLCache
from dotenv import load_dotenv
from fastapi import Depends

from ..domain.ports.admin_api import AdminAPIProvider
from ..domain.services.agency_admin_service import AgencyAdminService
from ..domain.services.claim_events import ClaimEventBus
from ..domain.services.claim_review_service import ClaimActionExecutor
from ..domain.services.message_moderation_service import MessageModerationService
from ..domain.services.user_admin_service import UserAdminService
from .admin_api.http_adapter import HttpAdminAPIAdapter
from .config import AdminAPIConfig, ConsoleConfig, SupabaseConfig
from .notifications import CollectingNotifier
from .supabase.conversation_adapter import SupabaseConversationStore
from .supabase.rest_adapter import SupabaseRoleStore

load_dotenv()

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(self):
        """Initialize service container."""
        self._services: Dict[str, Any] = {}
        self._initialized = False
        self._setup_services()

    def _setup_services(self):
        """Setup all services and their dependencies."""
        logger.info("🔧 Setting up service container...")

        console_config = ConsoleConfig.from_env()
        if not console_config.admin_user_id:
            logger.warning("⚠️ ADMIN_USER_ID not set - self-protection checks are disabled")

        supabase_config = SupabaseConfig.from_env()
        self._services = {
            "console_config": console_config,
            "admin_api": HttpAdminAPIAdapter(config=AdminAPIConfig.from_env()),
            "role_store": SupabaseRoleStore(config=supabase_config),
            "conversation_store": SupabaseConversationStore(config=supabase_config),
            "event_bus": ClaimEventBus(),
            "role_history_cache": TTLCache(
                maxsize=1024, ttl=console_config.role_history_cache_ttl
            ),
        }

        logger.info("✅ Service container setup completed")

    async def startup(self) -> None:
        """Open the HTTP clients."""
        if self._initialized:
            return
        await self.get_admin_api().initialize()
        await self.get_role_store().initialize()
        await self.get_conversation_store().initialize()
        self._initialized = True
        logger.info("🚀 Adapters initialized")

    async def shutdown(self) -> None:
        """Close the HTTP clients."""
        await self.get_admin_api().shutdown()
        await self.get_role_store().shutdown()
        await self.get_conversation_store().shutdown()
        self._initialized = False
        logger.info("👋 Adapters shut down")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def register(self, service_name: str, service: Any) -> None:
        """Replace or add a service (used to plug in test doubles)."""
        self._services[service_name] = service

    def get_admin_api(self) -> AdminAPIProvider:
        return self.get("admin_api")

    def get_role_store(self) -> SupabaseRoleStore:
        return self.get("role_store")

    def get_conversation_store(self) -> SupabaseConversationStore:
        return self.get("conversation_store")

    def get_event_bus(self) -> ClaimEventBus:
        return self.get("event_bus")

    def get_console_config(self) -> ConsoleConfig:
        return self.get("console_config")


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_notifier() -> CollectingNotifier:
    """FastAPI dependency: one notifier per request."""
    return CollectingNotifier()


async def get_admin_api() -> AdminAPIProvider:
    """FastAPI dependency for the admin API client."""
    admin_api = get_service_container().get_admin_api()
    if not admin_api.is_available:
        await admin_api.initialize()
    return admin_api


def get_event_bus() -> ClaimEventBus:
    """FastAPI dependency for the claim event bus."""
    return get_service_container().get_event_bus()


def get_console_config() -> ConsoleConfig:
    """FastAPI dependency for console settings."""
    return get_service_container().get_console_config()


def get_claim_executor(
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    event_bus: ClaimEventBus = Depends(get_event_bus),
) -> ClaimActionExecutor:
    """FastAPI dependency for the approve/reject executor."""
    return ClaimActionExecutor(admin_api, event_bus)


def get_agency_admin_service(
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> AgencyAdminService:
    """FastAPI dependency for the agency admin service."""
    return AgencyAdminService(admin_api, notifier)


async def get_user_admin_service(
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> UserAdminService:
    """FastAPI dependency for the user admin service."""
    container = get_service_container()
    role_store = container.get_role_store()
    if not role_store.is_available:
        await role_store.initialize()
    return UserAdminService(
        admin_api,
        role_store,
        notifier,
        acting_user_id=container.get_console_config().admin_user_id,
        history_cache=container.get("role_history_cache"),
    )


async def get_message_moderation_service(
    notifier: CollectingNotifier = Depends(get_notifier),
) -> MessageModerationService:
    """FastAPI dependency for the conversation moderation service."""
    store = get_service_container().get_conversation_store()
    if not store.is_available:
        await store.initialize()
    return MessageModerationService(store, notifier)
