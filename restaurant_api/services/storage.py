"""
Restaurant Storage

Point lookups and single-row writes used by signup orchestration, plus the
generic reads and writes behind the GraphQL resolvers. Every write commits
immediately; any SQLAlchemy failure is rolled back and re-raised as
StorageError.
"""

import asyncio
import functools
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.core.errors import StorageError
from restaurant_api.models import (
    IdentitySource,
    Invoice,
    JobType,
    Order,
    Restaurant,
    RestaurantTeam,
)
from restaurant_api.services.identity.base import Identity, LocallySynthesized, ProviderIssued

logger = logging.getLogger(__name__)


def identity_of(member: RestaurantTeam) -> Identity:
    """Rebuild the tagged identity of a stored team member."""
    if member.identity_source == IdentitySource.LOCAL:
        return LocallySynthesized(member.uuid)
    return ProviderIssued(member.uuid)


def _storage_op(func):
    # Serializes access to the session: GraphQL resolves sibling fields concurrently
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        async with self._lock:
            try:
                return await func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Storage failure in {func.__name__}: {e}")
                await self.session.rollback()
                raise StorageError(f"Storage failure in {func.__name__}") from e
    return wrapper


class RestaurantStore:
    """Storage collaborator over one request-scoped AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._lock = asyncio.Lock()

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    # =========================================================================
    # GENERIC ACCESS
    # =========================================================================

    @_storage_op
    async def fetch_all(self, statement: Select) -> list[Any]:
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    @_storage_op
    async def fetch_one(self, statement: Select) -> Optional[Any]:
        result = await self.session.execute(statement)
        return result.scalars().first()

    @_storage_op
    async def get(self, model: type, key: Any) -> Optional[Any]:
        return await self.session.get(model, key)

    @_storage_op
    async def save(self, obj: Any) -> Any:
        return await self._save(obj)

    @_storage_op
    async def delete(self, obj: Any) -> None:
        await self.session.delete(obj)
        await self.session.commit()

    @_storage_op
    async def create_invoice(
        self,
        total: float,
        restaurant_id: int,
        order_ids: list[int],
    ) -> Invoice:
        """Create an invoice and attach the orders to it in one transaction."""
        invoice = Invoice(total=total, restaurant_id=restaurant_id)
        self.session.add(invoice)
        await self.session.flush()

        if order_ids:
            await self.session.execute(
                update(Order)
                .where(Order.id.in_(order_ids))
                .values(invoice_id=invoice.id)
            )

        await self.session.commit()
        await self.session.refresh(invoice)
        return invoice

    # =========================================================================
    # RESTAURANTS
    # =========================================================================

    @_storage_op
    async def restaurant_code_exists(self, code: str) -> bool:
        result = await self.session.execute(
            select(Restaurant.id).where(Restaurant.restaurant_code == code)
        )
        return result.scalar_one_or_none() is not None

    @_storage_op
    async def get_restaurant(self, restaurant_id: int) -> Optional[Restaurant]:
        return await self.session.get(Restaurant, restaurant_id)

    @_storage_op
    async def get_restaurant_by_code(self, code: str) -> Optional[Restaurant]:
        result = await self.session.execute(
            select(Restaurant).where(Restaurant.restaurant_code == code)
        )
        return result.scalar_one_or_none()

    @_storage_op
    async def create_restaurant(
        self,
        name: str,
        address: str,
        phone: str,
        restaurant_code: str,
    ) -> Restaurant:
        restaurant = Restaurant(
            name=name,
            address=address,
            phone=phone,
            restaurant_code=restaurant_code,
        )
        return await self._save(restaurant)

    # =========================================================================
    # TEAM MEMBERS
    # =========================================================================

    @_storage_op
    async def find_member(self, uuid: str) -> Optional[RestaurantTeam]:
        return await self.session.get(RestaurantTeam, uuid)

    @_storage_op
    async def find_member_in_restaurant(
        self,
        email: str,
        restaurant_id: int,
    ) -> Optional[RestaurantTeam]:
        result = await self.session.execute(
            select(RestaurantTeam)
            .where(RestaurantTeam.email == email)
            .where(RestaurantTeam.restaurant_id == restaurant_id)
            .limit(1)
        )
        return result.scalars().first()

    @_storage_op
    async def find_pending_verification(
        self,
        email: str,
        code: str,
    ) -> Optional[RestaurantTeam]:
        """Exact match on (email, verification code, not yet verified)."""
        result = await self.session.execute(
            select(RestaurantTeam)
            .where(RestaurantTeam.email == email)
            .where(RestaurantTeam.email_verification_code == code)
            .where(RestaurantTeam.email_verified.is_(False))
            .limit(1)
        )
        return result.scalars().first()

    @_storage_op
    async def find_pending_by_email(self, email: str) -> Optional[RestaurantTeam]:
        result = await self.session.execute(
            select(RestaurantTeam)
            .where(RestaurantTeam.email == email)
            .where(RestaurantTeam.email_verified.is_(False))
            .where(RestaurantTeam.email_verification_code.is_not(None))
            .order_by(RestaurantTeam.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    @_storage_op
    async def create_team_member(
        self,
        identity: Identity,
        name: str,
        email: Optional[str],
        job_type: JobType,
        restaurant_id: int,
        is_active: bool,
        email_verified: bool,
        verification_code: Optional[str] = None,
        code_expires_at: Optional[datetime] = None,
    ) -> RestaurantTeam:
        source = (
            IdentitySource.LOCAL
            if isinstance(identity, LocallySynthesized)
            else IdentitySource.PROVIDER
        )
        member = RestaurantTeam(
            uuid=identity.value,
            identity_source=source,
            name=name,
            email=email,
            job_type=job_type,
            restaurant_id=restaurant_id,
            is_active=is_active,
            email_verified=email_verified,
            email_verification_code=verification_code,
            code_expires_at=code_expires_at,
        )
        return await self._save(member)

    @_storage_op
    async def mark_verified(self, member: RestaurantTeam) -> RestaurantTeam:
        member.email_verified = True
        member.is_active = True
        member.email_verification_code = None
        member.code_expires_at = None
        return await self._save(member)

    @_storage_op
    async def replace_verification_code(
        self,
        member: RestaurantTeam,
        code: str,
        expires_at: datetime,
    ) -> RestaurantTeam:
        member.email_verification_code = code
        member.code_expires_at = expires_at
        return await self._save(member)

    @_storage_op
    async def rekey_member(
        self,
        member: RestaurantTeam,
        account_id: str,
        activate: bool = False,
    ) -> RestaurantTeam:
        """Point a team member at a provider account id, optionally activating it."""
        member.uuid = account_id
        member.identity_source = IdentitySource.PROVIDER
        if activate:
            member.is_active = True
            member.email_verified = True
        return await self._save(member)
