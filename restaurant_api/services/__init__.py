"""
                        Services Module

Business logic and external collaborators. External services follow the
hybrid architecture pattern: a Mock implementation for development and
a Real implementation for production.

Services:
    - codes: restaurant and verification code generation
    - signup: owner signup, email verification, staff join, invitations
    - storage: persistence used by signup orchestration
    - identity: Supabase Auth identity provider
    - notifications: SendGrid verification emails
    - auth: bearer token verification
"""

from restaurant_api.services.codes import CodeGenerator
from restaurant_api.services.signup import SignupOrchestrator
from restaurant_api.services.storage import RestaurantStore

__all__ = ["CodeGenerator", "SignupOrchestrator", "RestaurantStore"]
