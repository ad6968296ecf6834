"""
GraphQL Object Types

Each type mirrors one ORM model. Foreign-key relationships are exposed as
field resolvers that query the related rows on demand.
"""

from datetime import datetime
from typing import List, Optional

import strawberry
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.models import IdentitySource, JobType, OrderItemState

strawberry.enum(JobType)
strawberry.enum(OrderItemState)
strawberry.enum(IdentitySource)


@strawberry.type
class Restaurant:
    id: int
    name: str
    address: str
    phone: str
    restaurant_code: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, m: models.Restaurant) -> "Restaurant":
        return cls(
            id=m.id,
            name=m.name,
            address=m.address,
            phone=m.phone,
            restaurant_code=m.restaurant_code,
            created_at=m.created_at,
        )

    @strawberry.field
    async def invoices(self, info: Info) -> List["Invoice"]:
        rows = await info.context.store.fetch_all(
            select(models.Invoice).where(models.Invoice.restaurant_id == self.id)
        )
        return [Invoice.from_model(r) for r in rows]

    @strawberry.field
    async def rtables(self, info: Info) -> List["RTable"]:
        rows = await info.context.store.fetch_all(
            select(models.RTable).where(models.RTable.restaurant_id == self.id)
        )
        return [RTable.from_model(r) for r in rows]

    @strawberry.field
    async def categories(self, info: Info) -> List["Category"]:
        rows = await info.context.store.fetch_all(
            select(models.Category).where(models.Category.restaurant_id == self.id)
        )
        return [Category.from_model(r) for r in rows]

    @strawberry.field
    async def restaurant_team(self, info: Info) -> List["RestaurantTeam"]:
        rows = await info.context.store.fetch_all(
            select(models.RestaurantTeam).where(models.RestaurantTeam.restaurant_id == self.id)
        )
        return [RestaurantTeam.from_model(r) for r in rows]


async def _restaurant(info: Info, restaurant_id: int) -> Optional[Restaurant]:
    row = await info.context.store.get(models.Restaurant, restaurant_id)
    return Restaurant.from_model(row) if row else None


@strawberry.type
class Category:
    id: int
    name: str
    restaurant_id: int

    @classmethod
    def from_model(cls, m: models.Category) -> "Category":
        return cls(id=m.id, name=m.name, restaurant_id=m.restaurant_id)

    @strawberry.field
    async def items(self, info: Info) -> List["Item"]:
        rows = await info.context.store.fetch_all(
            select(models.Item).where(models.Item.category_id == self.id)
        )
        return [Item.from_model(r) for r in rows]

    @strawberry.field
    async def restaurant(self, info: Info) -> Optional[Restaurant]:
        return await _restaurant(info, self.restaurant_id)


@strawberry.type
class Item:
    id: int
    name: str
    description: Optional[str]
    image: Optional[str]
    price: float
    category_id: int

    @classmethod
    def from_model(cls, m: models.Item) -> "Item":
        return cls(
            id=m.id,
            name=m.name,
            description=m.description,
            image=m.image,
            price=m.price,
            category_id=m.category_id,
        )

    @strawberry.field
    async def order_items(self, info: Info) -> List["OrderItem"]:
        rows = await info.context.store.fetch_all(
            select(models.OrderItem).where(models.OrderItem.item_id == self.id)
        )
        return [OrderItem.from_model(r) for r in rows]

    @strawberry.field
    async def category(self, info: Info) -> Optional[Category]:
        row = await info.context.store.get(models.Category, self.category_id)
        return Category.from_model(row) if row else None


@strawberry.type
class RTable:
    id: int
    name: str
    restaurant_id: int

    @classmethod
    def from_model(cls, m: models.RTable) -> "RTable":
        return cls(id=m.id, name=m.name, restaurant_id=m.restaurant_id)

    @strawberry.field
    async def orders(self, info: Info) -> List["Order"]:
        rows = await info.context.store.fetch_all(
            select(models.Order).where(models.Order.table_id == self.id)
        )
        return [Order.from_model(r) for r in rows]

    @strawberry.field
    async def restaurant(self, info: Info) -> Optional[Restaurant]:
        return await _restaurant(info, self.restaurant_id)


@strawberry.type
class Order:
    id: int
    table_id: int
    invoice_id: Optional[int]
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, m: models.Order) -> "Order":
        return cls(
            id=m.id,
            table_id=m.table_id,
            invoice_id=m.invoice_id,
            created_at=m.created_at,
        )

    @strawberry.field
    async def order_items(self, info: Info) -> List["OrderItem"]:
        rows = await info.context.store.fetch_all(
            select(models.OrderItem).where(models.OrderItem.order_id == self.id)
        )
        return [OrderItem.from_model(r) for r in rows]

    @strawberry.field
    async def rtable(self, info: Info) -> Optional[RTable]:
        row = await info.context.store.get(models.RTable, self.table_id)
        return RTable.from_model(row) if row else None

    @strawberry.field
    async def invoice(self, info: Info) -> Optional["Invoice"]:
        if self.invoice_id is None:
            return None
        row = await info.context.store.get(models.Invoice, self.invoice_id)
        return Invoice.from_model(row) if row else None


@strawberry.type
class OrderItem:
    id: int
    order_id: int
    item_id: int
    quantity: int
    price: float
    state: OrderItemState
    updated_at: Optional[datetime]

    @classmethod
    def from_model(cls, m: models.OrderItem) -> "OrderItem":
        return cls(
            id=m.id,
            order_id=m.order_id,
            item_id=m.item_id,
            quantity=m.quantity,
            price=m.price,
            state=m.state,
            updated_at=m.updated_at,
        )

    @strawberry.field
    async def order(self, info: Info) -> Optional[Order]:
        row = await info.context.store.get(models.Order, self.order_id)
        return Order.from_model(row) if row else None

    @strawberry.field
    async def item(self, info: Info) -> Optional[Item]:
        row = await info.context.store.get(models.Item, self.item_id)
        return Item.from_model(row) if row else None


@strawberry.type
class Invoice:
    id: int
    total: float
    restaurant_id: int
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, m: models.Invoice) -> "Invoice":
        return cls(
            id=m.id,
            total=m.total,
            restaurant_id=m.restaurant_id,
            created_at=m.created_at,
        )

    @strawberry.field
    async def restaurant(self, info: Info) -> Optional[Restaurant]:
        return await _restaurant(info, self.restaurant_id)

    @strawberry.field
    async def orders(self, info: Info) -> List[Order]:
        rows = await info.context.store.fetch_all(
            select(models.Order).where(models.Order.invoice_id == self.id)
        )
        return [Order.from_model(r) for r in rows]


@strawberry.type
class RestaurantTeam:
    uuid: str
    identity_source: IdentitySource
    name: str
    email: Optional[str]
    job_type: JobType
    restaurant_id: int
    is_active: bool
    email_verified: bool
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, m: models.RestaurantTeam) -> "RestaurantTeam":
        # The verification code itself is never exposed
        return cls(
            uuid=m.uuid,
            identity_source=m.identity_source,
            name=m.name,
            email=m.email,
            job_type=m.job_type,
            restaurant_id=m.restaurant_id,
            is_active=m.is_active,
            email_verified=m.email_verified,
            created_at=m.created_at,
        )

    @strawberry.field
    async def restaurant(self, info: Info) -> Optional[Restaurant]:
        return await _restaurant(info, self.restaurant_id)


# =============================================================================
# AUTH
# =============================================================================

@strawberry.type
class User:
    id: str
    email: str
    role: str


@strawberry.type
class UserProfile:
    id: str
    email: str
    role: str
    team_member: Optional[RestaurantTeam]
    restaurant: Optional[Restaurant]


# =============================================================================
# PAYLOADS
# =============================================================================

@strawberry.type
class CreateRestaurantPayload:
    success: bool
    message: str
    restaurant: Optional[Restaurant] = None
    restaurant_code: Optional[str] = None
    account_created: bool = False
    email_sent: bool = False


@strawberry.type
class VerifyEmailPayload:
    success: bool
    message: str
    restaurant_code: Optional[str] = None
    error_code: Optional[str] = None


@strawberry.type
class ResendVerificationPayload:
    success: bool
    message: str
    email_sent: bool = False
    error_code: Optional[str] = None


@strawberry.type
class JoinRestaurantPayload:
    success: bool
    message: str
    restaurant_name: Optional[str] = None
    account_created: bool = False
    email_sent: bool = False
    error_code: Optional[str] = None


@strawberry.type
class AuthPayload:
    success: bool
    message: str
    user: Optional[User] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


@strawberry.type
class MessagePayload:
    success: bool
    message: str


@strawberry.type
class TeamMemberPayload:
    success: bool
    message: str
    team_member: Optional[RestaurantTeam] = None
    user: Optional[User] = None
