"""
Authentication Resolvers

Sign up, sign in and sign out against the identity provider, the current
user's profile, and attaching a signed-in account to a team member row.
"""

import dataclasses
import logging

import strawberry
from pydantic import ValidationError
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.core.errors import AuthenticationError, IdentityProviderError
from restaurant_api.gql.inputs import SignInInput, SignUpInput
from restaurant_api.gql.restaurant import validation_message
from restaurant_api.gql.types import (
    AuthPayload,
    MessagePayload,
    Restaurant,
    RestaurantTeam,
    TeamMemberPayload,
    User,
    UserProfile,
)
from restaurant_api.schemas import SignUpRequest
from restaurant_api.services.auth import require_auth
from restaurant_api.services.identity import ProviderAccount
from restaurant_api.services.signup import InvitationResult

logger = logging.getLogger(__name__)


def _user(account: ProviderAccount) -> User:
    return User(id=account.id, email=account.email, role=account.role)


def _team_member_payload(info: Info, result: InvitationResult) -> TeamMemberPayload:
    user = info.context.auth.user
    return TeamMemberPayload(
        success=result.success,
        message=result.message,
        team_member=RestaurantTeam.from_model(result.member) if result.member else None,
        user=User(id=user.id, email=user.email, role=user.role) if user else None,
    )


@strawberry.type
class AuthQuery:
    @strawberry.field
    def me(self, info: Info) -> User:
        user = require_auth(info.context.auth)
        return User(id=user.id, email=user.email, role=user.role)

    @strawberry.field
    async def user_profile(self, info: Info) -> UserProfile:
        user = require_auth(info.context.auth)
        store = info.context.store

        member = await store.fetch_one(
            select(models.RestaurantTeam).where(models.RestaurantTeam.uuid == user.id)
        )
        restaurant = None
        if member is not None:
            restaurant = await store.get(models.Restaurant, member.restaurant_id)

        return UserProfile(
            id=user.id,
            email=user.email,
            role=user.role,
            team_member=RestaurantTeam.from_model(member) if member else None,
            restaurant=Restaurant.from_model(restaurant) if restaurant else None,
        )


@strawberry.type
class AuthMutation:
    @strawberry.mutation
    async def sign_up(self, info: Info, input: SignUpInput) -> AuthPayload:
        try:
            request = SignUpRequest(**dataclasses.asdict(input))
        except ValidationError as e:
            return AuthPayload(success=False, message=validation_message(e))

        email = request.email
        metadata = {"role": request.role or "user"}
        if request.name:
            metadata["name"] = request.name

        try:
            account = await info.context.identity.create_account(
                email=email,
                password=request.password,
                metadata=metadata,
                email_confirmed=True,
            )
        except IdentityProviderError as e:
            logger.warning(f"Sign up failed for {email}: {e.message}")
            return AuthPayload(success=False, message=e.message)

        return AuthPayload(success=True, message="User created successfully", user=_user(account))

    @strawberry.mutation
    async def sign_in(self, info: Info, input: SignInInput) -> AuthPayload:
        try:
            session = await info.context.identity.sign_in(
                input.email.strip().lower(), input.password
            )
        except IdentityProviderError as e:
            logger.info(f"Sign in failed for {input.email}: {e.message}")
            return AuthPayload(success=False, message=e.message)

        return AuthPayload(
            success=True,
            message="Signed in successfully",
            user=_user(session.account),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )

    @strawberry.mutation
    async def sign_out(self, info: Info) -> MessagePayload:
        auth = info.context.auth
        if not auth.is_authenticated:
            return MessagePayload(success=False, message="Authentication required")

        try:
            await info.context.identity.sign_out(auth.access_token)
        except IdentityProviderError as e:
            return MessagePayload(success=False, message=e.message)

        return MessagePayload(success=True, message="Signed out successfully")

    @strawberry.mutation
    async def link_user_to_team_member(
        self,
        info: Info,
        existing_uuid: str,
    ) -> TeamMemberPayload:
        try:
            user = require_auth(info.context.auth)
        except AuthenticationError as e:
            return TeamMemberPayload(success=False, message=e.message)

        result = await info.context.signup.link_account(existing_uuid, user.id)
        return _team_member_payload(info, result)

    @strawberry.mutation
    async def complete_invitation(
        self,
        info: Info,
        temp_uuid: str,
    ) -> TeamMemberPayload:
        try:
            user = require_auth(info.context.auth)
        except AuthenticationError as e:
            return TeamMemberPayload(success=False, message=e.message)

        result = await info.context.signup.complete_invitation(temp_uuid, user.id)
        return _team_member_payload(info, result)
