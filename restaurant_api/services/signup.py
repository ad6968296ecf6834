"""
Signup Orchestration

Sequences identity provider account creation, team member persistence and
verification code issuance for:
    - Owner signup (new restaurant + pending manager)
    - Email verification of a pending manager
    - Staff join with a restaurant code
    - Invitation completion / account linking

An identity provider failure never aborts a flow: the team member is stored
with a locally synthesized identity and ``account_created`` stays False so
the client can ask for remediation. Nothing written before the provider
call is rolled back.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from restaurant_api.core.errors import (
    AccountLinkedError,
    DomainError,
    DuplicateEmailError,
    ExpiredCodeError,
    IdentityProviderError,
    InvalidCodeError,
    NotFoundError,
)
from restaurant_api.models import IdentitySource, JobType, Restaurant, RestaurantTeam
from restaurant_api.schemas import JoinRestaurantRequest, RestaurantSignupRequest
from restaurant_api.services.codes import CodeGenerator
from restaurant_api.services.identity.base import (
    BaseIdentityProvider,
    Identity,
    ProviderIssued,
    synthesize_local_identity,
)
from restaurant_api.services.notifications.base import BaseNotificationService
from restaurant_api.services.storage import RestaurantStore, identity_of

logger = logging.getLogger(__name__)

DEFAULT_CODE_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class RestaurantSignupResult:
    success: bool
    message: str
    restaurant: Optional[Restaurant] = None
    restaurant_code: Optional[str] = None
    manager: Optional[RestaurantTeam] = None
    account_created: bool = False
    email_sent: bool = False


@dataclass
class VerificationResult:
    success: bool
    message: str
    restaurant_code: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class ResendResult:
    success: bool
    message: str
    email_sent: bool = False
    error_code: Optional[str] = None


@dataclass
class JoinResult:
    success: bool
    message: str
    restaurant_name: Optional[str] = None
    member: Optional[RestaurantTeam] = None
    account_created: bool = False
    email_sent: bool = False
    error_code: Optional[str] = None


@dataclass
class InvitationResult:
    success: bool
    message: str
    member: Optional[RestaurantTeam] = None
    error_code: Optional[str] = None


class SignupOrchestrator:
    """
    Multi-step signup flows with partial-failure bookkeeping.

    Args:
        store: Storage collaborator
        identity: Identity provider collaborator
        notifier: Email delivery for verification codes
        codes: Code generator (default: CSPRNG-backed)
        clock: Returns the current aware UTC time
        code_ttl: Lifetime of a verification code
    """

    def __init__(
        self,
        store: RestaurantStore,
        identity: BaseIdentityProvider,
        notifier: BaseNotificationService,
        codes: Optional[CodeGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        code_ttl: timedelta = DEFAULT_CODE_TTL,
    ):
        self.store = store
        self.identity = identity
        self.notifier = notifier
        self.codes = codes or CodeGenerator()
        self.clock = clock or utcnow
        self.code_ttl = code_ttl

    async def _create_identity(
        self,
        email: str,
        password: str,
        metadata: dict,
        email_confirmed: bool,
    ) -> tuple[Identity, bool]:
        """Returns the member identity and whether the provider account exists."""
        try:
            account = await self.identity.create_account(
                email=email,
                password=password,
                metadata=metadata,
                email_confirmed=email_confirmed,
            )
        except IdentityProviderError as e:
            fallback = synthesize_local_identity()
            logger.error(
                f"Failed to create {self.identity.provider_name} account for {email}: "
                f"{e.message}. Using placeholder identity {fallback.value}"
            )
            return fallback, False
        return ProviderIssued(account.id), True

    async def _send_code(
        self,
        member: RestaurantTeam,
        code: str,
        restaurant_name: str,
    ) -> bool:
        result = await self.notifier.send_verification_code(
            to_email=member.email,
            name=member.name,
            code=code,
            restaurant_name=restaurant_name,
            expires_in=self.code_ttl,
        )
        if not result.success:
            logger.warning(
                f"Verification email to {member.email} failed: {result.error_message}"
            )
        return result.success

    # =========================================================================
    # OWNER SIGNUP
    # =========================================================================

    async def create_restaurant(self, request: RestaurantSignupRequest) -> RestaurantSignupResult:
        """
        Create a restaurant with a pending manager.

        Raises:
            ExhaustionError: no unused restaurant code could be found
            StorageError: persistence failed
        """
        restaurant_code = await self.codes.generate_unique_restaurant_code(
            self.store.restaurant_code_exists
        )

        restaurant = await self.store.create_restaurant(
            name=request.name,
            address=request.address,
            phone=request.phone,
            restaurant_code=restaurant_code,
        )
        logger.info(f"Restaurant #{restaurant.id} created with code {restaurant_code}")

        verification_code = self.codes.generate_email_verification_code()
        code_expires_at = self.clock() + self.code_ttl

        identity, account_created = await self._create_identity(
            email=request.manager_email,
            password=request.manager_password,
            metadata={
                "name": request.manager_name,
                "role": "manager",
                "restaurantId": str(restaurant.id),
                "restaurantCode": restaurant_code,
            },
            email_confirmed=False,
        )

        manager = await self.store.create_team_member(
            identity=identity,
            name=request.manager_name,
            email=request.manager_email,
            job_type=JobType.MANAGER,
            restaurant_id=restaurant.id,
            is_active=False,  # activated by email verification
            email_verified=False,
            verification_code=verification_code,
            code_expires_at=code_expires_at,
        )

        email_sent = False
        if account_created:
            email_sent = await self._send_code(manager, verification_code, restaurant.name)

        if account_created and email_sent:
            message = (
                f"Restaurant created successfully! Restaurant Code: {restaurant_code}. "
                f"Verification code sent to {request.manager_email}"
            )
        else:
            message = (
                f"Restaurant created successfully! Restaurant Code: {restaurant_code}. "
                f"Please check account creation."
            )

        return RestaurantSignupResult(
            success=True,
            message=message,
            restaurant=restaurant,
            restaurant_code=restaurant_code,
            manager=manager,
            account_created=account_created,
            email_sent=email_sent,
        )

    # =========================================================================
    # EMAIL VERIFICATION
    # =========================================================================

    async def _verify(self, email: str, code: str) -> RestaurantTeam:
        member = await self.store.find_pending_verification(email, code)
        if member is None:
            raise InvalidCodeError()

        if member.code_expires_at is not None and _as_utc(member.code_expires_at) < self.clock():
            raise ExpiredCodeError()

        return await self.store.mark_verified(member)

    async def _confirm_provider_account(self, member: RestaurantTeam) -> None:
        """Best effort: verification already succeeded locally."""
        identity = identity_of(member)
        try:
            if isinstance(identity, ProviderIssued):
                account_ids = [identity.id]
            else:
                accounts = await self.identity.list_accounts_by_email(member.email)
                account_ids = [a.id for a in accounts]

            for account_id in account_ids:
                await self.identity.confirm_account(account_id)
                logger.info(f"Email confirmed in {self.identity.provider_name} for {member.email}")
        except IdentityProviderError as e:
            logger.error(f"Failed to confirm provider account for {member.email}: {e.message}")

    async def verify_email(self, email: str, code: str) -> VerificationResult:
        try:
            member = await self._verify(email, code)
        except DomainError as e:
            logger.info(f"Email verification rejected for {email}: {e.code}")
            return VerificationResult(success=False, message=e.message, error_code=e.code)

        await self._confirm_provider_account(member)

        restaurant = await self.store.get_restaurant(member.restaurant_id)
        return VerificationResult(
            success=True,
            message="Email verified successfully! You can now access your restaurant dashboard.",
            restaurant_code=restaurant.restaurant_code if restaurant else None,
        )

    async def resend_verification_code(self, email: str) -> ResendResult:
        """Supersede a pending manager's code with a fresh one."""
        member = await self.store.find_pending_by_email(email)
        if member is None:
            error = NotFoundError("No pending verification found for this email")
            return ResendResult(success=False, message=error.message, error_code=error.code)

        code = self.codes.generate_email_verification_code()
        member = await self.store.replace_verification_code(
            member, code, self.clock() + self.code_ttl
        )

        restaurant = await self.store.get_restaurant(member.restaurant_id)
        email_sent = await self._send_code(
            member, code, restaurant.name if restaurant else "your restaurant"
        )

        return ResendResult(
            success=True,
            message=(
                f"A new verification code was sent to {email}"
                if email_sent
                else "A new verification code was issued but the email could not be sent."
            ),
            email_sent=email_sent,
        )

    # =========================================================================
    # STAFF JOIN
    # =========================================================================

    async def _validate_join(self, request: JoinRestaurantRequest) -> Restaurant:
        restaurant = await self.store.get_restaurant_by_code(request.restaurant_code)
        if restaurant is None:
            raise NotFoundError("Invalid restaurant code")

        existing = await self.store.find_member_in_restaurant(request.email, restaurant.id)
        if existing is not None:
            raise DuplicateEmailError()

        return restaurant

    async def join_restaurant(self, request: JoinRestaurantRequest) -> JoinResult:
        try:
            restaurant = await self._validate_join(request)
        except DomainError as e:
            logger.info(f"Join rejected for {request.email}: {e.code}")
            return JoinResult(success=False, message=e.message, error_code=e.code)

        identity, account_created = await self._create_identity(
            email=request.email,
            password=request.password,
            metadata={
                "name": request.name,
                "role": request.job_type.value.lower(),
                "restaurantId": str(restaurant.id),
                "restaurantCode": restaurant.restaurant_code,
            },
            email_confirmed=True,  # staff skip email verification
        )

        member = await self.store.create_team_member(
            identity=identity,
            name=request.name,
            email=request.email,
            job_type=request.job_type,
            restaurant_id=restaurant.id,
            is_active=True,
            email_verified=True,
        )
        logger.info(
            f"Team member created: {member.email}, emailVerified: {member.email_verified}, "
            f"isActive: {member.is_active}"
        )

        if account_created:
            message = f"Successfully joined {restaurant.name}! You can now sign in immediately."
        else:
            message = f"Successfully joined {restaurant.name}! Please check account creation."

        return JoinResult(
            success=True,
            message=message,
            restaurant_name=restaurant.name,
            member=member,
            account_created=account_created,
            email_sent=False,
        )

    # =========================================================================
    # INVITATIONS
    # =========================================================================

    async def _claim_member(
        self,
        uuid: str,
        account_id: str,
        missing_message: str,
    ) -> RestaurantTeam:
        """
        Find a placeholder row that a signed-in account may take over.

        Only LOCAL rows without a pending verification code qualify: a
        pending manager leaves that state through ``verify_email`` alone,
        and rows already keyed to a provider account belong to someone.
        """
        member = await self.store.find_member(uuid)
        if member is None or member.identity_source != IdentitySource.LOCAL:
            raise NotFoundError(missing_message)
        if member.email_verification_code is not None:
            raise NotFoundError(missing_message)

        if await self.store.find_member(account_id) is not None:
            raise AccountLinkedError()

        return member

    async def complete_invitation(self, temp_uuid: str, account_id: str) -> InvitationResult:
        """Re-key an invited placeholder to the signed-in account and activate it."""
        try:
            member = await self._claim_member(temp_uuid, account_id, "Invalid invitation link")
        except DomainError as e:
            logger.info(f"Invitation {temp_uuid} rejected for {account_id}: {e.code}")
            return InvitationResult(success=False, message=e.message, error_code=e.code)

        member = await self.store.rekey_member(member, account_id, activate=True)
        restaurant = await self.store.get_restaurant(member.restaurant_id)

        return InvitationResult(
            success=True,
            message=f"Welcome to {restaurant.name}! Your account is now active.",
            member=member,
        )

    async def link_account(self, existing_uuid: str, account_id: str) -> InvitationResult:
        try:
            member = await self._claim_member(existing_uuid, account_id, "Team member not found")
        except DomainError as e:
            logger.info(f"Linking {existing_uuid} rejected for {account_id}: {e.code}")
            return InvitationResult(success=False, message=e.message, error_code=e.code)

        member = await self.store.rekey_member(member, account_id)
        return InvitationResult(
            success=True,
            message="User linked to team member successfully",
            member=member,
        )
