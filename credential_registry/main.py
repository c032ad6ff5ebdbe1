from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from credential_registry.api.credential_types import router as credential_types_router
from credential_registry.api.credentials import router as credentials_router
from credential_registry.api.health import router as health_router
from credential_registry.api.metrics_endpoint import router as metrics_router
from credential_registry.api.registry import router as registry_router
from credential_registry.core.config import SETTINGS
from credential_registry.core.logging import setup_logging
from credential_registry.db.engine import lifespan_db
from credential_registry.db.redis import lifespan_redis
from credential_registry.middleware.metrics import MetricsMiddleware
from credential_registry.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one side fails.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="credential-registry",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext (outermost) → Metrics → route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(registry_router)
app.include_router(credential_types_router)
app.include_router(credentials_router)

logger.info(
    "credential-registry started  env=%s log_level=%s port=%d owner=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.registry_owner or "-",
    "on" if SETTINGS.is_dev else "off",
)
