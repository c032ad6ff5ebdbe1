from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from credential_registry.core.config import SETTINGS
from credential_registry.core.identity import normalize_identity
from credential_registry.core.logging import caller_var
from credential_registry.db import engine as db_engine
from credential_registry.models.principal import Principal
from credential_registry.repos.credential_repo import InMemoryCredentialRepo
from credential_registry.repos.pg_credential_repo import PgCredentialRepo
from credential_registry.services import token_service
from credential_registry.services.event_publisher import EventPublisher
from credential_registry.services.registry_service import CredentialRegistry
from credential_registry.services.task_queue import task_queue

logger = logging.getLogger(__name__)

# tokenUrl is documentation only: tokens come from the external issuer.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# --- Module-level singletons ---
# The in-memory repo is shared by every request when no DATABASE_URL is
# configured.  The publisher is always shared so subscribers see every write.
memory_repo = InMemoryCredentialRepo()
event_publisher = EventPublisher(task_queue)
memory_registry = CredentialRegistry(
    memory_repo, event_publisher, owner=SETTINGS.registry_owner
)


async def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the calling identity.

    Async on purpose: the caller_var set here must stay visible to the
    endpoint, which a threadpool-run sync dependency would not allow.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    try:
        identity = normalize_identity(str(claims["sub"]))
    except ValueError as e:
        logger.warning("Token subject is not an identity: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a valid identity",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        identity=identity,
        roles=frozenset(claims.get("roles", [])),
    )
    caller_var.set(principal.identity)
    logger.debug(
        "Token validated for identity=%s roles=%s",
        principal.identity,
        principal.roles,
    )
    return principal


async def get_registry() -> AsyncGenerator[CredentialRegistry, None]:
    """Yield the registry backing this request.

    In-memory mode hands out the shared singleton.  With a database, each
    request gets a registry over its own session; the repo commits per
    operation, so nothing is left pending when the session closes.
    """
    if db_engine.async_session_factory is None:
        yield memory_registry
        return

    async with db_engine.async_session_factory() as session:
        yield CredentialRegistry(
            PgCredentialRepo(session),
            event_publisher,
            owner=SETTINGS.registry_owner,
        )
