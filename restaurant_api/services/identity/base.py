"""
Identity Provider Abstract Base Class

Defines the interface contract for identity provider implementations.
Both MockIdentityProvider and SupabaseIdentityProvider implement these
methods, so signup orchestration behaves the same whichever is active.

Every method raises IdentityProviderError on failure. Callers decide
whether a failure is fatal (sign in) or only recorded (signup).

Design Pattern: Strategy Pattern
    - Runtime switching between the mock provider and Supabase Auth
    - Tests run the full signup flow against the in-memory provider
"""

import random
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass
class ProviderAccount:
    """
    An account as seen by the identity provider.

    Attributes:
        id: Provider-issued user id
        email: Login email
        email_confirmed: Whether the provider considers the email confirmed
        metadata: User metadata (name, role, restaurantId, restaurantCode)
    """
    id: str
    email: str
    email_confirmed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def role(self) -> str:
        return self.metadata.get("role") or "user"


@dataclass
class ProviderSession:
    """Tokens returned by a successful password sign in."""
    access_token: str
    refresh_token: Optional[str]
    account: ProviderAccount


# =============================================================================
# TEAM MEMBER IDENTITY
# =============================================================================

@dataclass(frozen=True)
class ProviderIssued:
    """Team member identity backed by a real identity provider account."""
    id: str

    @property
    def value(self) -> str:
        return self.id


@dataclass(frozen=True)
class LocallySynthesized:
    """Placeholder identity used when the provider call failed; needs reconciliation."""
    token: str

    @property
    def value(self) -> str:
        return self.token


Identity = Union[ProviderIssued, LocallySynthesized]

_BASE36 = string.digits + string.ascii_lowercase


def synthesize_local_identity() -> LocallySynthesized:
    """Build an ``emp_<epoch ms>_<9 base-36 chars>`` placeholder identity."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return LocallySynthesized(f"emp_{int(time.time() * 1000)}_{suffix}")


class BaseIdentityProvider(ABC):
    """
    Abstract base class for identity providers.

    Example:
        >>> provider = get_identity_provider()  # Mock or Supabase
        >>> account = await provider.create_account(
        ...     "owner@example.com", "s3cret!", {"role": "manager"}
        ... )
        >>> print(account.id)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "supabase")."""
        pass

    @abstractmethod
    async def create_account(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
        email_confirmed: bool = False,
    ) -> ProviderAccount:
        """Create a credential for ``email``."""
        pass

    @abstractmethod
    async def confirm_account(self, account_id: str) -> ProviderAccount:
        """Mark the account's email as confirmed."""
        pass

    @abstractmethod
    async def list_accounts_by_email(self, email: str) -> list[ProviderAccount]:
        """Return accounts registered with ``email`` (case-insensitive)."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> ProviderSession:
        """Exchange email and password for a session."""
        pass

    @abstractmethod
    async def get_user(self, access_token: str) -> ProviderAccount:
        """Resolve the account behind an access token."""
        pass

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check provider connectivity."""
        pass
