"""
Team Resolvers

Listing and managing the staff of a restaurant. Invited members without an
identity provider account get a locally synthesized placeholder uuid that
``completeInvitation`` later re-keys.
"""

import logging
from typing import List

import strawberry
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.core.errors import AccountLinkedError, NotFoundError
from restaurant_api.gql.inputs import CreateRestaurantTeamInput
from restaurant_api.gql.types import RestaurantTeam
from restaurant_api.services.identity import ProviderIssued, synthesize_local_identity

logger = logging.getLogger(__name__)


@strawberry.type
class TeamQuery:
    @strawberry.field
    async def restaurant_team(self, info: Info, restaurant_id: int) -> List[RestaurantTeam]:
        rows = await info.context.store.fetch_all(
            select(models.RestaurantTeam)
            .where(models.RestaurantTeam.restaurant_id == restaurant_id)
            .order_by(models.RestaurantTeam.job_type, models.RestaurantTeam.created_at)
        )
        return [RestaurantTeam.from_model(r) for r in rows]


@strawberry.type
class TeamMutation:
    @strawberry.mutation
    async def create_restaurant_team(
        self,
        info: Info,
        input: CreateRestaurantTeamInput,
    ) -> RestaurantTeam:
        store = info.context.store

        restaurant = await store.get_restaurant(input.restaurant_id)
        if restaurant is None:
            raise NotFoundError(f"Restaurant with ID {input.restaurant_id} does not exist")

        # A known account id is active at once; otherwise the row waits for completeInvitation
        if input.uuid and await store.find_member(input.uuid) is not None:
            raise AccountLinkedError()

        identity = ProviderIssued(input.uuid) if input.uuid else synthesize_local_identity()
        member = await store.create_team_member(
            identity=identity,
            name=input.name,
            email=input.email.strip().lower() if input.email else None,
            job_type=input.job_type,
            restaurant_id=input.restaurant_id,
            is_active=input.uuid is not None,
            email_verified=input.uuid is not None,
        )
        logger.info(f"Team member {member.uuid} added to {restaurant.name} as {member.job_type.value}")
        return RestaurantTeam.from_model(member)

    @strawberry.mutation
    async def delete_restaurant_team(self, info: Info, uuid: str) -> bool:
        store = info.context.store
        member = await store.find_member(uuid)
        if member is None:
            return False
        await store.delete(member)
        logger.info(f"Team member {uuid} removed")
        return True
