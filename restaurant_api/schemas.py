"""
Pydantic Schemas for Request/Response Validation

- Signup, join and verification requests validated before any
  orchestration step runs
- REST responses (health, errors)
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import re

from restaurant_api.models import JobType


EMAIL_PATTERN = re.compile(r'^[\w\.\+-]+@[\w\.-]+\.\w+$')


def _validate_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError('Invalid email format')
    return v.lower()


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class RestaurantSignupRequest(BaseModel):
    """Owner signup: a new restaurant plus its manager account."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza Palace"])
    address: str = Field(..., min_length=1, max_length=255, examples=["350 Fifth Avenue"])
    phone: str = Field(..., min_length=7, max_length=20, examples=["555-123-4567"])
    manager_email: str = Field(..., examples=["owner@pizzapalace.com"])
    manager_name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    manager_password: str = Field(..., min_length=6, max_length=128)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        cleaned = re.sub(r'[^\d]', '', v)
        if len(cleaned) < 7:
            raise ValueError('Phone number must have at least 7 digits')
        return v

    @field_validator('manager_email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


class JoinRestaurantRequest(BaseModel):
    """Staff signup with a restaurant code."""
    restaurant_code: str = Field(..., min_length=7, max_length=7, examples=["4A7B21C"])
    name: str = Field(..., min_length=1, max_length=100, examples=["John Smith"])
    email: str = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=6, max_length=128)
    job_type: JobType = Field(..., examples=["WAITER"])

    @field_validator('restaurant_code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator('job_type')
    @classmethod
    def validate_job_type(cls, v: JobType) -> JobType:
        if v == JobType.MANAGER:
            raise ValueError('Managers are registered when the restaurant is created')
        return v


class VerifyEmailRequest(BaseModel):
    email: str
    verification_code: str = Field(..., min_length=6, max_length=6)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator('verification_code')
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError('Verification code must be numeric')
        return v


class SignUpRequest(BaseModel):
    """Plain identity provider account, not tied to a restaurant."""
    email: str
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    identity_provider: str
    notification_service: str
    timestamp: datetime
