"""Configuration for the admin console, read from the environment."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AdminAPIConfig(BaseModel):
    """Configuration for the admin REST API client."""

    base_url: str = Field(default="http://localhost:3000", description="Admin API origin")
    token: Optional[str] = Field(default=None, description="Bearer token sent with every request")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @classmethod
    def from_env(cls) -> "AdminAPIConfig":
        """Create configuration from environment variables."""
        token = os.getenv("ADMIN_API_TOKEN") or None
        if not token:
            logger.warning("⚠️ ADMIN_API_TOKEN not set - admin API requests will be unauthenticated")
        return cls(
            base_url=os.getenv("ADMIN_API_BASE_URL", "http://localhost:3000"),
            token=token,
            timeout=float(os.getenv("ADMIN_API_TIMEOUT", "30")),
        )


class SupabaseConfig(BaseModel):
    """Configuration for the Supabase REST (PostgREST) client."""

    url: str = Field(default="", description="Supabase project URL")
    key: str = Field(default="", description="Supabase API key")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @classmethod
    def from_env(cls) -> "SupabaseConfig":
        """Create configuration from environment variables."""
        url = os.getenv("SUPABASE_URL", "")
        key = os.getenv("SUPABASE_KEY", "")
        if not url or not key:
            logger.warning("⚠️ SUPABASE_URL or SUPABASE_KEY not found in environment variables")
        else:
            logger.info(f"✅ Supabase configured: {url}")
        return cls(url=url, key=key)


class ConsoleConfig(BaseModel):
    """Settings of the console itself."""

    admin_user_id: Optional[str] = Field(default=None, description="Signed-in admin's user id")
    role_history_cache_ttl: int = Field(default=300, description="Role history cache TTL in seconds")
    host: str = Field(default="0.0.0.0", description="Interface the console API binds to")
    port: int = Field(default=8000, description="Port the console API listens on")

    @classmethod
    def from_env(cls) -> "ConsoleConfig":
        """Create configuration from environment variables."""
        return cls(
            admin_user_id=os.getenv("ADMIN_USER_ID") or None,
            role_history_cache_ttl=int(os.getenv("ROLE_HISTORY_CACHE_TTL", "300")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )
