"""
GraphQL Input Types
"""

from typing import List, Optional

import strawberry

from restaurant_api.models import JobType, OrderItemState


@strawberry.input
class CreateRestaurantInput:
    name: str
    address: str
    phone: str
    manager_email: str
    manager_name: str
    manager_password: str


@strawberry.input
class UpdateRestaurantInput:
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


@strawberry.input
class VerifyEmailInput:
    email: str
    verification_code: str


@strawberry.input
class JoinRestaurantInput:
    restaurant_code: str
    name: str
    email: str
    password: str
    job_type: JobType


@strawberry.input
class CreateCategoryInput:
    name: str
    restaurant_id: int


@strawberry.input
class CreateItemInput:
    name: str
    price: float
    category_id: int
    description: Optional[str] = None
    image: Optional[str] = None


@strawberry.input
class UpdateItemInput:
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None


@strawberry.input
class CreateRTableInput:
    name: str
    restaurant_id: int


@strawberry.input
class CreateOrderInput:
    table_id: int


@strawberry.input
class CreateOrderItemInput:
    order_id: int
    item_id: int
    quantity: int
    price: float


@strawberry.input
class UpdateOrderItemStateInput:
    id: int
    state: OrderItemState


@strawberry.input
class CreateInvoiceInput:
    total: float
    restaurant_id: int
    order_ids: List[int]


@strawberry.input
class CreateRestaurantTeamInput:
    """Invite record; without a uuid a local placeholder identity is assigned."""
    name: str
    job_type: JobType
    restaurant_id: int
    email: Optional[str] = None
    uuid: Optional[str] = None


@strawberry.input
class SignUpInput:
    email: str
    password: str
    name: Optional[str] = None
    role: Optional[str] = None


@strawberry.input
class SignInInput:
    email: str
    password: str
