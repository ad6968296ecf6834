"""
Identity Provider Factory

Provides a single entry point for obtaining the identity provider.

Usage:
    from restaurant_api.services.identity import get_identity_provider

    # Returns MockIdentityProvider or SupabaseIdentityProvider based on ENV_MODE
    provider = get_identity_provider()

Environment Switching:
    - ENV_MODE=development → MockIdentityProvider (in-memory accounts)
    - ENV_MODE=staging → SupabaseIdentityProvider (staging project)
    - ENV_MODE=production → SupabaseIdentityProvider (live project)
"""

import logging
from functools import lru_cache

from restaurant_api.core.config import get_settings
from restaurant_api.services.identity.base import (
    BaseIdentityProvider,
    Identity,
    LocallySynthesized,
    ProviderAccount,
    ProviderIssued,
    ProviderSession,
    synthesize_local_identity,
)
from restaurant_api.services.identity.mock import MockIdentityProvider
from restaurant_api.services.identity.supabase import SupabaseIdentityProvider

logger = logging.getLogger(__name__)


@lru_cache()
def get_identity_provider() -> BaseIdentityProvider:
    """
    Get the configured identity provider instance.

    The instance is cached so the mock provider keeps its accounts and
    sessions across requests.

    Raises:
        ValueError: If production mode but Supabase is not configured
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Identity Provider: Using MockIdentityProvider (development mode)")
        return MockIdentityProvider(
            failure_rate=settings.mock_identity_failure_rate,
            latency=settings.mock_latency_seconds,
        )
    else:
        logger.info(
            f"Identity Provider: Using SupabaseIdentityProvider "
            f"({settings.env_mode.value} mode)"
        )
        return SupabaseIdentityProvider()


def reset_identity_provider() -> None:
    """
    Clear the cached identity provider instance.

    The next call to get_identity_provider() will create a new instance.
    """
    get_identity_provider.cache_clear()
    logger.debug("Identity provider cache cleared")


__all__ = [
    "get_identity_provider",
    "reset_identity_provider",
    "BaseIdentityProvider",
    "Identity",
    "LocallySynthesized",
    "ProviderAccount",
    "ProviderIssued",
    "ProviderSession",
    "synthesize_local_identity",
    "MockIdentityProvider",
    "SupabaseIdentityProvider",
]
