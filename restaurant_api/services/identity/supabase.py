"""
Supabase Identity Provider Implementation

Production implementation using the Supabase Auth (GoTrue) REST API.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY must be set
    - Admin calls use the service role key; user calls use the anon key

API Documentation:
    https://supabase.com/docs/reference/api/auth
"""

import logging
from typing import Any, Optional

import httpx

from restaurant_api.core.config import get_settings
from restaurant_api.core.errors import IdentityProviderError
from restaurant_api.services.identity.base import (
    BaseIdentityProvider,
    ProviderAccount,
    ProviderSession,
)

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 1000


def _account_from_user(user: dict[str, Any]) -> ProviderAccount:
    return ProviderAccount(
        id=user["id"],
        email=user.get("email") or "",
        email_confirmed=user.get("email_confirmed_at") is not None,
        metadata=user.get("user_metadata") or {},
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    return (
        body.get("msg")
        or body.get("message")
        or body.get("error_description")
        or body.get("error")
        or f"HTTP {response.status_code}"
    )


class SupabaseIdentityProvider(BaseIdentityProvider):
    """
    Identity provider backed by Supabase Auth.

    Example:
        >>> provider = SupabaseIdentityProvider()
        >>> account = await provider.create_account(
        ...     "owner@example.com", "s3cret!", {"role": "manager"}
        ... )
    """

    def __init__(
        self,
        url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            url: Supabase project URL (defaults to SUPABASE_URL)
            service_role_key: Admin key (defaults to SUPABASE_SERVICE_ROLE_KEY)
            anon_key: Public key (defaults to SUPABASE_ANON_KEY)
            timeout: HTTP timeout in seconds
            transport: Custom httpx transport (used by tests)

        Raises:
            ValueError: If the project URL or keys are not configured
        """
        settings = get_settings()

        self._url = (url or settings.supabase_url or "").rstrip("/")
        self._service_role_key = service_role_key or settings.supabase_service_role_key
        self._anon_key = anon_key or settings.supabase_anon_key
        self._timeout = timeout or settings.identity_timeout_seconds
        self._transport = transport

        if not (self._url and self._service_role_key and self._anon_key):
            raise ValueError(
                "SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY are "
                "required for production mode. Set them in your .env file or "
                "environment variables."
            )

        logger.info("SupabaseIdentityProvider initialized")

    @property
    def provider_name(self) -> str:
        return "supabase"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._url}/auth/v1",
            timeout=self._timeout,
            transport=self._transport,
        )

    def _admin_headers(self) -> dict[str, str]:
        return {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
        }

    def _user_headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Supabase request {method} {path} failed: {e}")
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"Supabase {method} {path} returned {response.status_code}: {message}")
            raise IdentityProviderError(message, status_code=response.status_code)

        return response

    async def create_account(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
        email_confirmed: bool = False,
    ) -> ProviderAccount:
        response = await self._request(
            "POST",
            "/admin/users",
            headers=self._admin_headers(),
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirmed,
                "user_metadata": metadata,
            },
        )
        account = _account_from_user(response.json())
        logger.info(f"Supabase account created for {email} (ID: {account.id})")
        return account

    async def confirm_account(self, account_id: str) -> ProviderAccount:
        response = await self._request(
            "PUT",
            f"/admin/users/{account_id}",
            headers=self._admin_headers(),
            json={"email_confirm": True},
        )
        return _account_from_user(response.json())

    async def list_accounts_by_email(self, email: str) -> list[ProviderAccount]:
        wanted = email.lower()
        matches = []
        page = 1

        while True:
            response = await self._request(
                "GET",
                "/admin/users",
                headers=self._admin_headers(),
                params={"page": page, "per_page": USERS_PAGE_SIZE},
            )
            users = response.json().get("users", [])
            matches.extend(
                _account_from_user(u) for u in users
                if (u.get("email") or "").lower() == wanted
            )
            if len(users) < USERS_PAGE_SIZE:
                return matches
            page += 1

    async def sign_in(self, email: str, password: str) -> ProviderSession:
        response = await self._request(
            "POST",
            "/token",
            headers=self._user_headers(),
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        body = response.json()
        return ProviderSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
            account=_account_from_user(body["user"]),
        )

    async def get_user(self, access_token: str) -> ProviderAccount:
        response = await self._request(
            "GET",
            "/user",
            headers=self._user_headers(access_token),
        )
        return _account_from_user(response.json())

    async def sign_out(self, access_token: str) -> None:
        await self._request(
            "POST",
            "/logout",
            headers=self._user_headers(access_token),
        )

    async def health_check(self) -> bool:
        """Check that the Auth server answers its health endpoint."""
        try:
            await self._request("GET", "/health", headers=self._user_headers())
            return True
        except IdentityProviderError:
            return False
