"""
Mock Notification Service

Simulates email sending for development.
No actual messages are sent - verification codes are just logged.
"""

import asyncio
import random
import uuid
import logging
from datetime import timedelta
from typing import Optional

from restaurant_api.services.notifications.base import (
    DEFAULT_EXPIRY,
    BaseNotificationService,
    NotificationResult,
    verification_email_text,
)

logger = logging.getLogger(__name__)


class MockNotificationService(BaseNotificationService):
    """Mock notification service for development."""

    def __init__(self, failure_rate: float = 0.0, latency: float = 0.0):
        self.failure_rate = failure_rate
        self.latency = latency
        self.outbox: list[dict[str, Optional[str]]] = []
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Simulate sending email."""
        await self._simulate_latency()

        if self._should_fail():
            logger.warning(f"Mock email failed (simulated) to {to_email}")
            return NotificationResult(
                success=False,
                error_message="Simulated email failure",
                provider="mock"
            )

        message_id = f"email_mock_{uuid.uuid4().hex[:12]}"
        self.outbox.append({
            "to": to_email,
            "subject": subject,
            "body": body_text or body_html,
            "message_id": message_id,
        })
        logger.info(f"Mock email sent to {to_email}: {subject} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def send_verification_code(
        self,
        to_email: str,
        name: str,
        code: str,
        restaurant_name: str,
        expires_in: timedelta = DEFAULT_EXPIRY,
    ) -> NotificationResult:
        logger.info(f"Email Verification Code for {to_email}: {code}")
        message = verification_email_text(name, code, restaurant_name, expires_in)
        return await self.send_email(
            to_email=to_email,
            subject=f"Your verification code - {restaurant_name}",
            body_html=f"<p>{message}</p>",
            body_text=message,
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
