"""
Core module initialization.
Exports configuration, logging utilities and error types.
"""

from restaurant_api.core.config import get_settings, Settings, EnvironmentMode
from restaurant_api.core.errors import (
    RestaurantAPIError,
    DomainError,
    ExhaustionError,
    StorageError,
    IdentityProviderError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "RestaurantAPIError",
    "DomainError",
    "ExhaustionError",
    "StorageError",
    "IdentityProviderError",
]
