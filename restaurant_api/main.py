"""
FastAPI Application Entry Point

Restaurant Ordering API
Supports both Mock services (development) and Real APIs (staging/production).

Endpoints:
    - POST /graphql: GraphQL API (GraphiQL on GET when enabled)
    - GET /: Navigation links
    - GET /health: System health check
"""

import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from strawberry.fastapi import GraphQLRouter

from restaurant_api.core.config import get_settings, setup_logging
from restaurant_api.database import get_db, init_db, engine
from restaurant_api.gql import get_context, schema
from restaurant_api.schemas import ErrorResponse, HealthResponse
from restaurant_api.services.identity import get_identity_provider
from restaurant_api.services.notifications import get_notification_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    identity = get_identity_provider()
    notifier = get_notification_service()
    logger.info(f"Identity Provider: {identity.provider_name}")
    logger.info(f"Notification Service: {notifier.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")

    logger.info(f"GraphQL endpoint ready at http://{settings.api_host}:{settings.api_port}/graphql")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "GraphQL API for restaurant ordering with owner signup, email "
        "verification and staff onboarding."
    ),
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

graphql_app = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.serve_graphql_ide else None,
)
app.include_router(graphql_app, prefix="/graphql")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "graphql": "/graphql",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify all system components are operational."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    identity = get_identity_provider()
    identity_status = "healthy" if await identity.health_check() else "unhealthy"

    notifier = get_notification_service()
    notifier_status = "healthy" if await notifier.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, identity_status, notifier_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        identity_provider=identity_status,
        notification_service=notifier_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    body = ErrorResponse(
        error="Internal Server Error",
        detail=str(exc) if settings.debug else "An unexpected error occurred",
    )
    return JSONResponse(status_code=500, content=body.model_dump())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "restaurant_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
