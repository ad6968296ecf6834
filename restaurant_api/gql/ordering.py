"""
Ordering Resolvers

Dining tables, orders, the items within an order and invoices.
"""

import logging
from typing import List, Optional

import strawberry
from sqlalchemy import select
from strawberry.types import Info

from restaurant_api import models
from restaurant_api.core.errors import NotFoundError
from restaurant_api.gql.inputs import (
    CreateInvoiceInput,
    CreateOrderInput,
    CreateOrderItemInput,
    CreateRTableInput,
    UpdateOrderItemStateInput,
)
from restaurant_api.gql.types import Invoice, Order, OrderItem, RTable

logger = logging.getLogger(__name__)


async def _delete(info: Info, model: type, key: int) -> bool:
    store = info.context.store
    row = await store.get(model, key)
    if row is None:
        return False
    await store.delete(row)
    return True


@strawberry.type
class OrderingQuery:
    @strawberry.field
    async def rtables(self, info: Info, restaurant_id: int) -> List[RTable]:
        rows = await info.context.store.fetch_all(
            select(models.RTable).where(models.RTable.restaurant_id == restaurant_id)
        )
        return [RTable.from_model(r) for r in rows]

    @strawberry.field
    async def orders(self, info: Info, table_id: Optional[int] = None) -> List[Order]:
        query = select(models.Order).order_by(models.Order.created_at.desc(), models.Order.id.desc())
        if table_id is not None:
            query = query.where(models.Order.table_id == table_id)

        rows = await info.context.store.fetch_all(query)
        return [Order.from_model(r) for r in rows]

    @strawberry.field
    async def order(self, info: Info, id: int) -> Optional[Order]:
        row = await info.context.store.get(models.Order, id)
        return Order.from_model(row) if row else None

    @strawberry.field
    async def order_items(self, info: Info, order_id: int) -> List[OrderItem]:
        rows = await info.context.store.fetch_all(
            select(models.OrderItem)
            .where(models.OrderItem.order_id == order_id)
            .order_by(models.OrderItem.id)
        )
        return [OrderItem.from_model(r) for r in rows]

    @strawberry.field
    async def invoices(self, info: Info, restaurant_id: int) -> List[Invoice]:
        rows = await info.context.store.fetch_all(
            select(models.Invoice)
            .where(models.Invoice.restaurant_id == restaurant_id)
            .order_by(models.Invoice.created_at.desc(), models.Invoice.id.desc())
        )
        return [Invoice.from_model(r) for r in rows]


@strawberry.type
class OrderingMutation:
    @strawberry.mutation(name="createRTable")
    async def create_rtable(self, info: Info, input: CreateRTableInput) -> RTable:
        table = await info.context.store.save(
            models.RTable(name=input.name, restaurant_id=input.restaurant_id)
        )
        return RTable.from_model(table)

    @strawberry.mutation(name="deleteRTable")
    async def delete_rtable(self, info: Info, id: int) -> bool:
        return await _delete(info, models.RTable, id)

    @strawberry.mutation
    async def create_order(self, info: Info, input: CreateOrderInput) -> Order:
        # Invoice is attached later by createInvoice
        order = await info.context.store.save(models.Order(table_id=input.table_id))
        logger.info(f"Order #{order.id} opened for table {order.table_id}")
        return Order.from_model(order)

    @strawberry.mutation
    async def delete_order(self, info: Info, id: int) -> bool:
        return await _delete(info, models.Order, id)

    @strawberry.mutation
    async def create_order_item(self, info: Info, input: CreateOrderItemInput) -> OrderItem:
        order_item = await info.context.store.save(
            models.OrderItem(
                order_id=input.order_id,
                item_id=input.item_id,
                quantity=input.quantity,
                price=input.price,
            )
        )
        return OrderItem.from_model(order_item)

    @strawberry.mutation
    async def update_order_item_state(
        self,
        info: Info,
        input: UpdateOrderItemStateInput,
    ) -> OrderItem:
        store = info.context.store
        row = await store.get(models.OrderItem, input.id)
        if row is None:
            raise NotFoundError(f"Order item with ID {input.id} does not exist")

        row.state = input.state
        return OrderItem.from_model(await store.save(row))

    @strawberry.mutation
    async def delete_order_item(self, info: Info, id: int) -> bool:
        return await _delete(info, models.OrderItem, id)

    @strawberry.mutation
    async def create_invoice(self, info: Info, input: CreateInvoiceInput) -> Invoice:
        invoice = await info.context.store.create_invoice(
            total=input.total,
            restaurant_id=input.restaurant_id,
            order_ids=list(input.order_ids),
        )
        logger.info(f"Invoice #{invoice.id} created for {len(input.order_ids)} orders")
        return Invoice.from_model(invoice)
