"""
Request Authentication

Resolves the bearer token of a request to the identity provider account
behind it, and guards resolvers that need a signed-in user.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from restaurant_api.core.errors import AuthenticationError, IdentityProviderError
from restaurant_api.services.identity.base import BaseIdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: str
    role: str = "user"


@dataclass
class AuthContext:
    user: Optional[AuthUser] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    token = header.removeprefix("Bearer ").strip()
    return token or None


async def verify_token(
    authorization: Optional[str],
    provider: BaseIdentityProvider,
) -> AuthContext:
    """Never raises: an invalid token yields an unauthenticated context."""
    token = extract_bearer_token(authorization)
    if token is None:
        return AuthContext()

    try:
        account = await provider.get_user(token)
    except IdentityProviderError as e:
        logger.warning(f"Token verification failed: {e.message}")
        return AuthContext()

    return AuthContext(
        user=AuthUser(id=account.id, email=account.email, role=account.role),
        access_token=token,
    )


def require_auth(auth: AuthContext) -> AuthUser:
    if not auth.is_authenticated:
        raise AuthenticationError("Authentication required")
    return auth.user
