"""
Notification Service Abstract Base Class

Defines the interface for sending account emails (verification codes).
Supports both Mock (development) and Real (production) implementations.

Delivery failures are reported through NotificationResult, never raised.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


DEFAULT_EXPIRY = timedelta(hours=24)


def describe_expiry(expires_in: timedelta) -> str:
    """Render a code lifetime as "24 hours", "1 hour" or "30 minutes"."""
    minutes = int(expires_in.total_seconds() // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"


def verification_email_text(
    name: str,
    code: str,
    restaurant_name: str,
    expires_in: timedelta = DEFAULT_EXPIRY,
) -> str:
    return (
        f"Hi {name}!\n"
        f"Your verification code for {restaurant_name} is {code}.\n"
        f"It expires in {describe_expiry(expires_in)}."
    )


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send an email."""
        pass

    @abstractmethod
    async def send_verification_code(
        self,
        to_email: str,
        name: str,
        code: str,
        restaurant_name: str,
        expires_in: timedelta = DEFAULT_EXPIRY,
    ) -> NotificationResult:
        """Send an email verification code to a new manager."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
