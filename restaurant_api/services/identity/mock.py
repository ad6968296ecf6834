"""
Mock Identity Provider

Simulates Supabase Auth in memory for development and tests.
No network calls are made; accounts live for the lifetime of the process.

Behavior:
    - Rejects duplicate emails like the real provider
    - Fails account creation with probability ``failure_rate``
    - Issues opaque ``mock_...`` access tokens on sign in
"""

import asyncio
import hashlib
import logging
import random
import uuid
from typing import Any

from restaurant_api.core.errors import IdentityProviderError
from restaurant_api.services.identity.base import (
    BaseIdentityProvider,
    ProviderAccount,
    ProviderSession,
)

logger = logging.getLogger(__name__)


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class MockIdentityProvider(BaseIdentityProvider):
    """
    In-memory implementation of the identity provider.

    Attributes:
        failure_rate: Probability that create_account fails (0.0-1.0)
        latency: Simulated response time in seconds
    """

    def __init__(self, failure_rate: float = 0.0, latency: float = 0.0):
        self.failure_rate = failure_rate
        self.latency = latency
        self.accounts: dict[str, ProviderAccount] = {}
        self._passwords: dict[str, str] = {}
        self._sessions: dict[str, str] = {}
        logger.info(f"MockIdentityProvider initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def _get(self, account_id: str) -> ProviderAccount:
        account = self.accounts.get(account_id)
        if account is None:
            raise IdentityProviderError("User not found", status_code=404)
        return account

    async def create_account(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
        email_confirmed: bool = False,
    ) -> ProviderAccount:
        await self._simulate_latency()

        if self._should_fail():
            logger.warning(f"Mock account creation failed (simulated) for {email}")
            raise IdentityProviderError("Simulated account creation failure", status_code=500)

        if await self.list_accounts_by_email(email):
            raise IdentityProviderError(
                "A user with this email address has already been registered",
                status_code=422,
            )

        account = ProviderAccount(
            id=str(uuid.uuid4()),
            email=email,
            email_confirmed=email_confirmed,
            metadata=dict(metadata),
        )
        self.accounts[account.id] = account
        self._passwords[account.id] = _hash_password(password)

        logger.info(f"Mock account created for {email} (ID: {account.id})")
        return account

    async def confirm_account(self, account_id: str) -> ProviderAccount:
        await self._simulate_latency()
        account = self._get(account_id)
        account.email_confirmed = True
        return account

    async def list_accounts_by_email(self, email: str) -> list[ProviderAccount]:
        wanted = email.lower()
        return [a for a in self.accounts.values() if a.email.lower() == wanted]

    async def sign_in(self, email: str, password: str) -> ProviderSession:
        await self._simulate_latency()

        for account in await self.list_accounts_by_email(email):
            if self._passwords.get(account.id) == _hash_password(password):
                token = f"mock_{uuid.uuid4().hex}"
                self._sessions[token] = account.id
                return ProviderSession(
                    access_token=token,
                    refresh_token=f"mock_refresh_{uuid.uuid4().hex[:16]}",
                    account=account,
                )

        raise IdentityProviderError("Invalid login credentials", status_code=400)

    async def get_user(self, access_token: str) -> ProviderAccount:
        account_id = self._sessions.get(access_token)
        if account_id is None:
            raise IdentityProviderError("Invalid or expired token", status_code=401)
        return self._get(account_id)

    async def sign_out(self, access_token: str) -> None:
        if self._sessions.pop(access_token, None) is None:
            raise IdentityProviderError("Invalid or expired token", status_code=401)

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
