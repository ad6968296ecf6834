"""
GraphQL Request Context

One context per HTTP request: the request's database session wrapped in
RestaurantStore, the identity provider, the notifier and the caller's
authentication state.
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from restaurant_api.core.config import get_settings
from restaurant_api.database import get_db
from restaurant_api.services.auth import AuthContext, verify_token
from restaurant_api.services.codes import CodeGenerator
from restaurant_api.services.identity import BaseIdentityProvider, get_identity_provider
from restaurant_api.services.notifications import (
    BaseNotificationService,
    get_notification_service,
)
from restaurant_api.services.signup import SignupOrchestrator
from restaurant_api.services.storage import RestaurantStore


class GraphQLContext(BaseContext):
    def __init__(
        self,
        session: AsyncSession,
        identity: BaseIdentityProvider,
        notifier: BaseNotificationService,
        auth: Optional[AuthContext] = None,
        signup: Optional[SignupOrchestrator] = None,
    ):
        super().__init__()
        self.session = session
        self.identity = identity
        self.notifier = notifier
        self.auth = auth or AuthContext()
        self.store = RestaurantStore(session)
        self.signup = signup or self._build_orchestrator()

    def _build_orchestrator(self) -> SignupOrchestrator:
        settings = get_settings()
        return SignupOrchestrator(
            store=self.store,
            identity=self.identity,
            notifier=self.notifier,
            codes=CodeGenerator(max_attempts=settings.restaurant_code_max_attempts),
            code_ttl=timedelta(hours=settings.verification_code_ttl_hours),
        )


async def get_context(
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> GraphQLContext:
    """FastAPI dependency building the GraphQL context."""
    identity = get_identity_provider()
    auth = await verify_token(request.headers.get("authorization"), identity)
    return GraphQLContext(
        session=session,
        identity=identity,
        notifier=get_notification_service(),
        auth=auth,
    )
