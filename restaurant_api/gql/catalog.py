"""
Menu Resolvers

Categories and the items listed under them.
"""

import dataclasses
import logging
from typing import List, Optional

import strawberry
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.core.errors import NotFoundError
from restaurant_api.gql.inputs import CreateCategoryInput, CreateItemInput, UpdateItemInput
from restaurant_api.gql.types import Category, Item

logger = logging.getLogger(__name__)


@strawberry.type
class CatalogQuery:
    @strawberry.field
    async def categories(self, info: Info, restaurant_id: int) -> List[Category]:
        rows = await info.context.store.fetch_all(
            select(models.Category).where(models.Category.restaurant_id == restaurant_id)
        )
        return [Category.from_model(r) for r in rows]

    @strawberry.field
    async def items(self, info: Info, category_id: int) -> List[Item]:
        rows = await info.context.store.fetch_all(
            select(models.Item).where(models.Item.category_id == category_id)
        )
        return [Item.from_model(r) for r in rows]

    @strawberry.field
    async def item(self, info: Info, id: int) -> Optional[Item]:
        row = await info.context.store.get(models.Item, id)
        return Item.from_model(row) if row else None


@strawberry.type
class CatalogMutation:
    @strawberry.mutation
    async def create_category(self, info: Info, input: CreateCategoryInput) -> Category:
        store = info.context.store

        restaurant = await store.get(models.Restaurant, input.restaurant_id)
        if restaurant is None:
            logger.error(f"Restaurant with ID {input.restaurant_id} not found")
            raise NotFoundError(f"Restaurant with ID {input.restaurant_id} does not exist")

        category = await store.save(
            models.Category(name=input.name, restaurant_id=input.restaurant_id)
        )
        logger.info(f"Category #{category.id} created for {restaurant.name}")
        return Category.from_model(category)

    @strawberry.mutation
    async def delete_category(self, info: Info, id: int) -> bool:
        store = info.context.store
        row = await store.get(models.Category, id)
        if row is None:
            return False
        await store.delete(row)
        return True

    @strawberry.mutation
    async def create_item(self, info: Info, input: CreateItemInput) -> Item:
        item = await info.context.store.save(models.Item(**dataclasses.asdict(input)))
        return Item.from_model(item)

    @strawberry.mutation
    async def update_item(self, info: Info, id: int, input: UpdateItemInput) -> Item:
        store = info.context.store
        row = await store.get(models.Item, id)
        if row is None:
            raise NotFoundError(f"Item with ID {id} does not exist")

        for field, value in dataclasses.asdict(input).items():
            if value is not None:
                setattr(row, field, value)

        return Item.from_model(await store.save(row))

    @strawberry.mutation
    async def delete_item(self, info: Info, id: int) -> bool:
        store = info.context.store
        row = await store.get(models.Item, id)
        if row is None:
            return False
        await store.delete(row)
        return True
