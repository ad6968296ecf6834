"""
Application Error Types

Business-rule failures (DomainError subclasses) are converted to
``success: false`` payloads by the services that raise them. Infrastructure
failures (StorageError, ExhaustionError) propagate to the GraphQL error
boundary.
"""

from typing import Optional


class RestaurantAPIError(Exception):
    """Base class for all errors raised by this application."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExhaustionError(RestaurantAPIError):
    """No unused restaurant code was found within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Unable to generate unique restaurant code after {attempts} attempts"
        )
        self.attempts = attempts


class StorageError(RestaurantAPIError):
    """Unexpected persistence failure."""


class IdentityProviderError(RestaurantAPIError):
    """The identity provider rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(RestaurantAPIError):
    """The request carries no valid access token."""


# =============================================================================
# DOMAIN ERRORS
# =============================================================================

class DomainError(RestaurantAPIError):
    """A business rule rejected the request."""

    code = "DOMAIN_ERROR"


class InvalidCodeError(DomainError):
    code = "INVALID_CODE"

    def __init__(self, message: str = "Invalid email or verification code"):
        super().__init__(message)


class ExpiredCodeError(DomainError):
    code = "EXPIRED_CODE"

    def __init__(
        self,
        message: str = "Verification code has expired. Please request a new one.",
    ):
        super().__init__(message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class DuplicateEmailError(DomainError):
    code = "DUPLICATE_EMAIL"

    def __init__(
        self,
        message: str = "Email is already registered for this restaurant",
    ):
        super().__init__(message)


class AccountLinkedError(DomainError):
    code = "ACCOUNT_ALREADY_LINKED"

    def __init__(
        self,
        message: str = "This account is already linked to a team member",
    ):
        super().__init__(message)
