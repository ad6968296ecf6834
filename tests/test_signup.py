"""
Signup Orchestration Tests

Owner signup, email verification, resend, staff join and invitations,
including identity provider and notifier failures.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from restaurant_api.core.errors import ExhaustionError
from restaurant_api.models import IdentitySource, JobType, Restaurant, RestaurantTeam
from restaurant_api.schemas import JoinRestaurantRequest, RestaurantSignupRequest
from restaurant_api.services.codes import CodeGenerator
from restaurant_api.services.identity import (
    LocallySynthesized,
    MockIdentityProvider,
    synthesize_local_identity,
)
from restaurant_api.services.notifications import MockNotificationService
from restaurant_api.services.notifications.base import describe_expiry
from restaurant_api.services.signup import SignupOrchestrator


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def signup_request(**overrides) -> RestaurantSignupRequest:
    data = {
        "name": "Pizza Palace",
        "address": "350 Fifth Avenue",
        "phone": "555-123-4567",
        "manager_email": "Owner@PizzaPalace.com",
        "manager_name": "Jane Doe",
        "manager_password": "s3cret!",
    }
    data.update(overrides)
    return RestaurantSignupRequest(**data)


def join_request(restaurant_code: str, **overrides) -> JoinRestaurantRequest:
    data = {
        "restaurant_code": restaurant_code,
        "name": "John Smith",
        "email": "john@example.com",
        "password": "waiter123",
        "job_type": JobType.WAITER,
    }
    data.update(overrides)
    return JoinRestaurantRequest(**data)


async def count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def orchestrator(store, identity, notifier, clock):
    return SignupOrchestrator(store=store, identity=identity, notifier=notifier, clock=clock)


class TestOwnerSignup:

    async def test_creates_restaurant_and_pending_manager(self, orchestrator, identity, notifier, clock):
        result = await orchestrator.create_restaurant(signup_request())

        assert result.success
        assert result.account_created
        assert result.email_sent
        assert result.message == (
            f"Restaurant created successfully! Restaurant Code: {result.restaurant_code}. "
            f"Verification code sent to owner@pizzapalace.com"
        )

        assert result.restaurant.restaurant_code == result.restaurant_code
        manager = result.manager
        assert manager.job_type == JobType.MANAGER
        assert manager.email == "owner@pizzapalace.com"
        assert manager.is_active is False
        assert manager.email_verified is False
        assert manager.identity_source == IdentitySource.PROVIDER
        assert manager.uuid in identity.accounts
        assert len(manager.email_verification_code) == 6

        account = identity.accounts[manager.uuid]
        assert account.email_confirmed is False
        assert account.metadata["role"] == "manager"
        assert account.metadata["restaurantCode"] == result.restaurant_code
        assert account.metadata["restaurantId"] == str(result.restaurant.id)

        assert len(notifier.outbox) == 1
        assert notifier.outbox[0]["to"] == "owner@pizzapalace.com"
        assert manager.email_verification_code in notifier.outbox[0]["body"]

    async def test_code_expires_after_ttl(self, orchestrator, clock):
        result = await orchestrator.create_restaurant(signup_request())
        expires_at = result.manager.code_expires_at.replace(tzinfo=timezone.utc)
        assert expires_at == clock.now + timedelta(hours=24)

    async def test_provider_failure_keeps_records(self, session, store, notifier):
        orchestrator = SignupOrchestrator(
            store=store,
            identity=MockIdentityProvider(failure_rate=1.0),
            notifier=notifier,
        )

        result = await orchestrator.create_restaurant(signup_request())

        assert result.success
        assert result.account_created is False
        assert result.email_sent is False
        assert result.message.endswith("Please check account creation.")
        assert result.manager.identity_source == IdentitySource.LOCAL
        assert result.manager.uuid.startswith("emp_")
        assert notifier.outbox == []

        assert await count(session, Restaurant) == 1
        assert await count(session, RestaurantTeam) == 1

    async def test_notifier_failure_is_reported(self, store, identity):
        orchestrator = SignupOrchestrator(
            store=store,
            identity=identity,
            notifier=MockNotificationService(failure_rate=1.0),
        )

        result = await orchestrator.create_restaurant(signup_request())

        assert result.success
        assert result.account_created
        assert result.email_sent is False
        assert result.message.endswith("Please check account creation.")

    async def test_email_states_configured_code_lifetime(self, store, identity, notifier, clock):
        orchestrator = SignupOrchestrator(
            store=store,
            identity=identity,
            notifier=notifier,
            clock=clock,
            code_ttl=timedelta(hours=2),
        )

        result = await orchestrator.create_restaurant(signup_request())

        assert result.manager.code_expires_at.replace(tzinfo=timezone.utc) == clock.now + timedelta(hours=2)
        assert "It expires in 2 hours." in notifier.outbox[0]["body"]
        assert "24 hours" not in notifier.outbox[0]["body"]

    async def test_exhaustion_aborts_before_any_write(self, session, identity, notifier):
        class AlwaysTaken:
            async def restaurant_code_exists(self, code):
                return True

        orchestrator = SignupOrchestrator(
            store=AlwaysTaken(),
            identity=identity,
            notifier=notifier,
            codes=CodeGenerator(max_attempts=5),
        )

        with pytest.raises(ExhaustionError):
            await orchestrator.create_restaurant(signup_request())

        assert identity.accounts == {}
        assert notifier.outbox == []

    async def test_restaurant_codes_are_unique(self, orchestrator):
        codes = set()
        for i in range(20):
            result = await orchestrator.create_restaurant(
                signup_request(manager_email=f"owner{i}@example.com")
            )
            codes.add(result.restaurant_code)
        assert len(codes) == 20


class TestEmailVerification:

    async def test_valid_code_activates_manager(self, orchestrator, store, identity):
        signup = await orchestrator.create_restaurant(signup_request())
        code = signup.manager.email_verification_code

        result = await orchestrator.verify_email("owner@pizzapalace.com", code)

        assert result.success
        assert result.message == (
            "Email verified successfully! You can now access your restaurant dashboard."
        )
        assert result.restaurant_code == signup.restaurant_code

        manager = await store.find_member(signup.manager.uuid)
        assert manager.email_verified is True
        assert manager.is_active is True
        assert manager.email_verification_code is None
        assert manager.code_expires_at is None
        assert identity.accounts[manager.uuid].email_confirmed is True

    async def test_wrong_code_is_rejected(self, orchestrator, store):
        signup = await orchestrator.create_restaurant(signup_request())
        code = signup.manager.email_verification_code
        wrong = "100000" if code != "100000" else "100001"

        result = await orchestrator.verify_email("owner@pizzapalace.com", wrong)

        assert result.success is False
        assert result.error_code == "INVALID_CODE"
        assert result.message == "Invalid email or verification code"
        manager = await store.find_member(signup.manager.uuid)
        assert manager.email_verified is False
        assert manager.email_verification_code == code

    async def test_unknown_email_is_rejected(self, orchestrator):
        await orchestrator.create_restaurant(signup_request())
        result = await orchestrator.verify_email("nobody@example.com", "123456")
        assert result.error_code == "INVALID_CODE"

    async def test_expired_code_leaves_record_unchanged(self, orchestrator, store, clock):
        signup = await orchestrator.create_restaurant(signup_request())
        code = signup.manager.email_verification_code

        clock.now += timedelta(hours=24, seconds=1)
        result = await orchestrator.verify_email("owner@pizzapalace.com", code)

        assert result.success is False
        assert result.error_code == "EXPIRED_CODE"
        assert result.message == "Verification code has expired. Please request a new one."

        manager = await store.find_member(signup.manager.uuid)
        assert manager.email_verified is False
        assert manager.is_active is False
        assert manager.email_verification_code == code

    async def test_code_at_exact_expiry_is_accepted(self, orchestrator, clock):
        signup = await orchestrator.create_restaurant(signup_request())

        clock.now += timedelta(hours=24)
        result = await orchestrator.verify_email(
            "owner@pizzapalace.com", signup.manager.email_verification_code
        )
        assert result.success

    async def test_code_cannot_be_reused(self, orchestrator):
        signup = await orchestrator.create_restaurant(signup_request())
        code = signup.manager.email_verification_code

        assert (await orchestrator.verify_email("owner@pizzapalace.com", code)).success
        again = await orchestrator.verify_email("owner@pizzapalace.com", code)
        assert again.error_code == "INVALID_CODE"

    async def test_local_identity_is_confirmed_by_email_lookup(self, store, notifier, clock):
        """A placeholder manager still confirms a provider account found by email."""
        identity = MockIdentityProvider()
        orchestrator = SignupOrchestrator(
            store=store, identity=identity, notifier=notifier, clock=clock
        )
        restaurant = await store.create_restaurant(
            name="Late Night Diner", address="2 Elm St", phone="5550001111",
            restaurant_code="1A2B3C4",
        )
        account = await identity.create_account("late@example.com", "pass123", {})
        await store.create_team_member(
            identity=synthesize_local_identity(),
            name="Late Manager",
            email="late@example.com",
            job_type=JobType.MANAGER,
            restaurant_id=restaurant.id,
            is_active=False,
            email_verified=False,
            verification_code="654321",
            code_expires_at=clock.now + timedelta(hours=1),
        )

        result = await orchestrator.verify_email("late@example.com", "654321")

        assert result.success
        assert identity.accounts[account.id].email_confirmed is True


class TestResendVerificationCode:

    async def test_resend_replaces_code_and_expiry(self, orchestrator, store, notifier, clock):
        signup = await orchestrator.create_restaurant(signup_request())
        old_code = signup.manager.email_verification_code

        clock.now += timedelta(hours=23)
        result = await orchestrator.resend_verification_code("owner@pizzapalace.com")

        assert result.success
        assert result.email_sent
        manager = await store.find_member(signup.manager.uuid)
        assert manager.code_expires_at.replace(tzinfo=timezone.utc) == clock.now + timedelta(hours=24)
        assert len(notifier.outbox) == 2
        assert manager.email_verification_code in notifier.outbox[-1]["body"]

        new_code = manager.email_verification_code
        if new_code != old_code:
            stale = await orchestrator.verify_email("owner@pizzapalace.com", old_code)
            assert stale.error_code == "INVALID_CODE"
        assert (await orchestrator.verify_email("owner@pizzapalace.com", new_code)).success

    async def test_resend_without_pending_verification(self, orchestrator):
        result = await orchestrator.resend_verification_code("ghost@example.com")

        assert result.success is False
        assert result.error_code == "NOT_FOUND"
        assert result.message == "No pending verification found for this email"

    async def test_resend_after_verification_is_rejected(self, orchestrator):
        signup = await orchestrator.create_restaurant(signup_request())
        await orchestrator.verify_email(
            "owner@pizzapalace.com", signup.manager.email_verification_code
        )

        result = await orchestrator.resend_verification_code("owner@pizzapalace.com")
        assert result.error_code == "NOT_FOUND"


class TestStaffJoin:

    async def test_join_creates_active_member(self, orchestrator, identity):
        signup = await orchestrator.create_restaurant(signup_request())

        result = await orchestrator.join_restaurant(join_request(signup.restaurant_code.lower()))

        assert result.success
        assert result.account_created
        assert result.email_sent is False
        assert result.restaurant_name == "Pizza Palace"
        assert result.message == (
            "Successfully joined Pizza Palace! You can now sign in immediately."
        )

        member = result.member
        assert member.job_type == JobType.WAITER
        assert member.is_active is True
        assert member.email_verified is True
        assert member.email_verification_code is None
        account = identity.accounts[member.uuid]
        assert account.email_confirmed is True
        assert account.metadata["role"] == "waiter"

    async def test_invalid_restaurant_code(self, orchestrator, session, identity):
        result = await orchestrator.join_restaurant(join_request("0000XYZ"))

        assert result.success is False
        assert result.error_code == "NOT_FOUND"
        assert result.message == "Invalid restaurant code"
        assert identity.accounts == {}
        assert await count(session, RestaurantTeam) == 0

    async def test_duplicate_email_makes_no_writes(self, orchestrator, session, identity):
        signup = await orchestrator.create_restaurant(signup_request())
        assert (await orchestrator.join_restaurant(join_request(signup.restaurant_code))).success
        accounts_before = len(identity.accounts)

        result = await orchestrator.join_restaurant(
            join_request(signup.restaurant_code, name="Someone Else", password="other123")
        )

        assert result.success is False
        assert result.error_code == "DUPLICATE_EMAIL"
        assert result.message == "Email is already registered for this restaurant"
        assert len(identity.accounts) == accounts_before
        assert await count(session, RestaurantTeam) == 2

    async def test_provider_failure_falls_back_to_local_identity(self, store, notifier):
        owner_flow = SignupOrchestrator(
            store=store, identity=MockIdentityProvider(), notifier=notifier
        )
        signup = await owner_flow.create_restaurant(signup_request())

        failing = SignupOrchestrator(
            store=store, identity=MockIdentityProvider(failure_rate=1.0), notifier=notifier
        )
        result = await failing.join_restaurant(join_request(signup.restaurant_code))

        assert result.success
        assert result.account_created is False
        assert result.message == (
            "Successfully joined Pizza Palace! Please check account creation."
        )
        assert result.member.uuid.startswith("emp_")
        assert result.member.identity_source == IdentitySource.LOCAL


class TestInvitations:

    async def invite(self, store) -> RestaurantTeam:
        restaurant = await store.create_restaurant(
            name="Sushi Bar", address="9 Ocean Dr", phone="5559876543",
            restaurant_code="7Q8R9S1",
        )
        return await store.create_team_member(
            identity=synthesize_local_identity(),
            name="Invited Chef",
            email="chef@example.com",
            job_type=JobType.CHEF,
            restaurant_id=restaurant.id,
            is_active=False,
            email_verified=False,
        )

    async def test_complete_invitation_rekeys_placeholder(self, orchestrator, store):
        invited = await self.invite(store)
        temp_uuid = invited.uuid
        assert invited.identity_source == IdentitySource.LOCAL

        result = await orchestrator.complete_invitation(temp_uuid, "provider-account-1")

        assert result.success
        assert result.message == "Welcome to Sushi Bar! Your account is now active."
        assert result.member.uuid == "provider-account-1"
        assert result.member.identity_source == IdentitySource.PROVIDER
        assert result.member.is_active is True
        assert await store.find_member(temp_uuid) is None
        assert (await store.find_member("provider-account-1")).name == "Invited Chef"

    async def test_invalid_invitation_link(self, orchestrator):
        result = await orchestrator.complete_invitation("emp_0_missing", "provider-account-1")

        assert result.success is False
        assert result.message == "Invalid invitation link"
        assert result.error_code == "NOT_FOUND"

    async def test_link_account_keeps_activation_state(self, orchestrator, store):
        invited = await self.invite(store)

        result = await orchestrator.link_account(invited.uuid, "provider-account-2")

        assert result.success
        assert result.message == "User linked to team member successfully"
        assert result.member.uuid == "provider-account-2"
        assert result.member.is_active is False

    async def test_link_unknown_member(self, orchestrator):
        result = await orchestrator.link_account("nope", "provider-account-3")
        assert result.success is False
        assert result.message == "Team member not found"

    async def test_complete_invitation_also_verifies(self, orchestrator, store):
        invited = await self.invite(store)

        result = await orchestrator.complete_invitation(invited.uuid, "provider-account-1")

        assert result.member.email_verified is True

    async def test_pending_manager_is_not_an_invitation(self, store, clock):
        orchestrator = SignupOrchestrator(
            store=store,
            identity=MockIdentityProvider(failure_rate=1.0),
            notifier=MockNotificationService(),
            clock=clock,
        )
        signup = await orchestrator.create_restaurant(signup_request())
        manager_uuid = signup.manager.uuid
        code = signup.manager.email_verification_code
        assert signup.manager.identity_source == IdentitySource.LOCAL

        result = await orchestrator.complete_invitation(manager_uuid, "someone-else")

        assert result.success is False
        assert result.message == "Invalid invitation link"
        assert result.error_code == "NOT_FOUND"
        manager = await store.find_member(manager_uuid)
        assert manager.is_active is False
        assert manager.email_verified is False
        assert manager.email_verification_code == code
        assert await store.find_member("someone-else") is None

        linked = await orchestrator.link_account(manager_uuid, "someone-else")
        assert linked.success is False
        assert linked.message == "Team member not found"

    async def test_provider_keyed_member_cannot_be_claimed(self, orchestrator, store):
        signup = await orchestrator.create_restaurant(signup_request())
        joined = await orchestrator.join_restaurant(join_request(signup.restaurant_code))
        assert joined.member.identity_source == IdentitySource.PROVIDER

        result = await orchestrator.complete_invitation(joined.member.uuid, "someone-else")
        assert result.success is False
        assert result.error_code == "NOT_FOUND"

        linked = await orchestrator.link_account(joined.member.uuid, "someone-else")
        assert linked.success is False
        assert (await store.find_member(joined.member.uuid)).name == "John Smith"

    async def test_account_already_on_the_team(self, orchestrator, store):
        signup = await orchestrator.create_restaurant(signup_request())
        joined = await orchestrator.join_restaurant(join_request(signup.restaurant_code))
        account_id = joined.member.uuid
        invited = await self.invite(store)

        result = await orchestrator.complete_invitation(invited.uuid, account_id)

        assert result.success is False
        assert result.error_code == "ACCOUNT_ALREADY_LINKED"
        assert result.message == "This account is already linked to a team member"
        assert (await store.find_member(invited.uuid)).is_active is False

        linked = await orchestrator.link_account(invited.uuid, account_id)
        assert linked.success is False
        assert linked.error_code == "ACCOUNT_ALREADY_LINKED"


def test_local_identity_format():
    identity = synthesize_local_identity()
    assert isinstance(identity, LocallySynthesized)
    prefix, millis, suffix = identity.value.split("_")
    assert prefix == "emp"
    assert millis.isdigit()
    assert len(suffix) == 9
    assert suffix.isalnum() and suffix == suffix.lower()


def test_describe_expiry():
    assert describe_expiry(timedelta(hours=24)) == "24 hours"
    assert describe_expiry(timedelta(hours=1)) == "1 hour"
    assert describe_expiry(timedelta(minutes=90)) == "90 minutes"
