"""
SQLAlchemy Database Models

Restaurant ordering domain:
- Restaurants with their menu (categories, items) and tables
- Orders, order items and invoices
- Restaurant team members (managers and staff) linked to identity provider accounts
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Enum, Boolean, ForeignKey
from sqlalchemy.sql import func
from restaurant_api.database import Base
import enum


class JobType(str, enum.Enum):
    """Role of a team member inside a restaurant."""
    MANAGER = "MANAGER"
    CHEF = "CHEF"
    WAITER = "WAITER"


class OrderItemState(str, enum.Enum):
    """Kitchen workflow of a single ordered item."""
    PENDING = "PENDING"
    COOKING = "COOKING"
    READY = "READY"
    DELIVERED = "DELIVERED"


class IdentitySource(str, enum.Enum):
    """Where a team member's uuid came from."""
    PROVIDER = "PROVIDER"  # identity provider user id
    LOCAL = "LOCAL"  # synthesized placeholder awaiting reconciliation


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)

    # 7 characters: 4 digits + 3 uppercase letters, shared with staff to join
    restaurant_code = Column(String(7), nullable=True, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name} - {self.restaurant_code}>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    restaurant_id = Column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    price = Column(Float, nullable=False)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self):
        return f"<Item #{self.id} - {self.name} - {self.price}>"


class RTable(Base):
    """A physical table in the restaurant dining room."""
    __tablename__ = "rtables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    restaurant_id = Column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def __repr__(self):
        return f"<RTable #{self.id} - {self.name}>"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    total = Column(Float, nullable=False)
    restaurant_id = Column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Invoice #{self.id} - {self.total}>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_id = Column(
        Integer, ForeignKey("rtables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Set once the order is billed
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Order #{self.id} - table {self.table_id}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(
        Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)
    state = Column(
        Enum(OrderItemState),
        default=OrderItemState.PENDING,
        nullable=False,
        index=True
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<OrderItem #{self.id} - item {self.item_id} x{self.quantity} - {self.state.value}>"


class RestaurantTeam(Base):
    """
    A manager or staff account scoped to one restaurant.

    Managers start inactive and unverified with a verification code;
    staff start active and verified with no code.
    """
    __tablename__ = "restaurant_team"

    # Identity provider user id, or a local emp_... placeholder
    uuid = Column(String(64), primary_key=True)
    identity_source = Column(
        Enum(IdentitySource),
        default=IdentitySource.PROVIDER,
        nullable=False,
    )

    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    job_type = Column(Enum(JobType), nullable=False, index=True)
    restaurant_id = Column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # =========================================================================
    # ACTIVATION
    # =========================================================================
    is_active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_code = Column(String(6), nullable=True)
    code_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<RestaurantTeam {self.uuid} - {self.email} - {self.job_type.value}>"
