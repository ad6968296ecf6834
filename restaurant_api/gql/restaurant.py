"""
Restaurant Resolvers

Restaurant CRUD plus the signup mutations backed by SignupOrchestrator:
owner signup, email verification, verification code resend and staff join.
"""

import dataclasses
import logging
from typing import List, Optional

import strawberry
from pydantic import ValidationError
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.core.errors import NotFoundError
from restaurant_api.gql.inputs import (
    CreateRestaurantInput,
    JoinRestaurantInput,
    UpdateRestaurantInput,
    VerifyEmailInput,
)
from restaurant_api.gql.types import (
    CreateRestaurantPayload,
    JoinRestaurantPayload,
    ResendVerificationPayload,
    Restaurant,
    VerifyEmailPayload,
)
from restaurant_api.schemas import (
    JoinRestaurantRequest,
    RestaurantSignupRequest,
    VerifyEmailRequest,
)

logger = logging.getLogger(__name__)


def validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid input").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


@strawberry.type
class RestaurantQuery:
    @strawberry.field
    async def restaurants(self, info: Info) -> List[Restaurant]:
        rows = await info.context.store.fetch_all(
            select(models.Restaurant).order_by(models.Restaurant.id)
        )
        return [Restaurant.from_model(r) for r in rows]

    @strawberry.field
    async def restaurant(self, info: Info, id: int) -> Optional[Restaurant]:
        row = await info.context.store.get(models.Restaurant, id)
        return Restaurant.from_model(row) if row else None


@strawberry.type
class RestaurantMutation:
    @strawberry.mutation
    async def create_restaurant(
        self,
        info: Info,
        input: CreateRestaurantInput,
    ) -> CreateRestaurantPayload:
        try:
            request = RestaurantSignupRequest(**dataclasses.asdict(input))
        except ValidationError as e:
            return CreateRestaurantPayload(success=False, message=validation_message(e))

        logger.info(f"Creating restaurant {request.name} for {request.manager_email}")
        result = await info.context.signup.create_restaurant(request)

        return CreateRestaurantPayload(
            success=result.success,
            message=result.message,
            restaurant=Restaurant.from_model(result.restaurant) if result.restaurant else None,
            restaurant_code=result.restaurant_code,
            account_created=result.account_created,
            email_sent=result.email_sent,
        )

    @strawberry.mutation
    async def verify_email(self, info: Info, input: VerifyEmailInput) -> VerifyEmailPayload:
        try:
            request = VerifyEmailRequest(**dataclasses.asdict(input))
        except ValidationError:
            return VerifyEmailPayload(
                success=False,
                message="Invalid email or verification code",
                error_code="INVALID_CODE",
            )

        result = await info.context.signup.verify_email(
            request.email, request.verification_code
        )
        return VerifyEmailPayload(
            success=result.success,
            message=result.message,
            restaurant_code=result.restaurant_code,
            error_code=result.error_code,
        )

    @strawberry.mutation
    async def resend_verification_code(
        self,
        info: Info,
        email: str,
    ) -> ResendVerificationPayload:
        result = await info.context.signup.resend_verification_code(email.strip().lower())
        return ResendVerificationPayload(
            success=result.success,
            message=result.message,
            email_sent=result.email_sent,
            error_code=result.error_code,
        )

    @strawberry.mutation
    async def join_restaurant(
        self,
        info: Info,
        input: JoinRestaurantInput,
    ) -> JoinRestaurantPayload:
        try:
            request = JoinRestaurantRequest(**dataclasses.asdict(input))
        except ValidationError as e:
            return JoinRestaurantPayload(success=False, message=validation_message(e))

        result = await info.context.signup.join_restaurant(request)
        return JoinRestaurantPayload(
            success=result.success,
            message=result.message,
            restaurant_name=result.restaurant_name,
            account_created=result.account_created,
            email_sent=result.email_sent,
            error_code=result.error_code,
        )

    @strawberry.mutation
    async def update_restaurant(
        self,
        info: Info,
        id: int,
        input: UpdateRestaurantInput,
    ) -> Restaurant:
        store = info.context.store
        row = await store.get(models.Restaurant, id)
        if row is None:
            raise NotFoundError(f"Restaurant with ID {id} does not exist")

        for field, value in dataclasses.asdict(input).items():
            if value is not None:
                setattr(row, field, value)

        return Restaurant.from_model(await store.save(row))

    @strawberry.mutation
    async def delete_restaurant(self, info: Info, id: int) -> bool:
        store = info.context.store
        row = await store.get(models.Restaurant, id)
        if row is None:
            return False
        await store.delete(row)
        logger.info(f"Restaurant #{id} deleted")
        return True
