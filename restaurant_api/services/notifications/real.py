"""
Real Notification Service

Production implementation using SendGrid for email.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from restaurant_api.services.notifications.base import (
    DEFAULT_EXPIRY,
    BaseNotificationService,
    NotificationResult,
    describe_expiry,
    verification_email_text,
)
from restaurant_api.core.config import get_settings

logger = logging.getLogger(__name__)


class RealNotificationService(BaseNotificationService):
    """Production notification service using SendGrid."""

    def __init__(self):
        settings = get_settings()

        if settings.sendgrid_api_key:
            self.sendgrid_client = SendGridAPIClient(settings.sendgrid_api_key)
            self.sendgrid_from_email = settings.sendgrid_from_email
        else:
            self.sendgrid_client = None
            logger.warning("SendGrid credentials not configured")

        logger.info("RealNotificationService initialized")

    @property
    def provider_name(self) -> str:
        return "sendgrid"

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send email via SendGrid."""
        if not self.sendgrid_client:
            return NotificationResult(
                success=False,
                error_message="SendGrid not configured",
                provider="sendgrid"
            )

        try:
            message = Mail(
                from_email=self.sendgrid_from_email,
                to_emails=to_email,
                subject=subject,
                html_content=body_html,
                plain_text_content=body_text
            )

            # The SendGrid client is blocking
            response = await asyncio.to_thread(self.sendgrid_client.send, message)

            logger.info(f"Email sent to {to_email}: {response.status_code}")

            return NotificationResult(
                success=response.status_code in [200, 201, 202],
                message_id=response.headers.get('X-Message-Id'),
                provider="sendgrid"
            )

        except Exception as e:
            logger.error(f"SendGrid error: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="sendgrid"
            )

    async def send_verification_code(
        self,
        to_email: str,
        name: str,
        code: str,
        restaurant_name: str,
        expires_in: timedelta = DEFAULT_EXPIRY,
    ) -> NotificationResult:
        """Send the manager verification code."""
        email_html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h1 style="color: #ff4757;">Verify your email</h1>
            <p>Hi {name},</p>
            <p>Use this code to activate your manager account for <strong>{restaurant_name}</strong>:</p>
            <div style="background: #f8f9fa; padding: 15px; border-radius: 8px; margin: 20px 0;
                        font-size: 28px; letter-spacing: 6px; text-align: center;">
                <strong>{code}</strong>
            </div>
            <p style="color: #666; font-size: 12px;">This code expires in {describe_expiry(expires_in)}.</p>
        </div>
        """
        return await self.send_email(
            to_email=to_email,
            subject=f"Your verification code - {restaurant_name}",
            body_html=email_html,
            body_text=verification_email_text(name, code, restaurant_name, expires_in),
        )

    async def health_check(self) -> bool:
        return self.sendgrid_client is not None
