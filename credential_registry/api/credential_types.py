"""Credential type endpoints.

- POST /v1/credential-types            register a type as the caller
- GET  /v1/credential-types/{type_id}  public lookup

The write response lists the notifications the call emitted, the way a
transaction receipt carries its logs, so a client can read the new
type_id from the TypeRegistered event without a second request.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from credential_registry.api.dependencies import get_registry, require_user
from credential_registry.api.schemas import Hash32
from credential_registry.models.credential import CredentialType
from credential_registry.models.principal import Principal
from credential_registry.services import registry_service
from credential_registry.services.registry_service import CredentialRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/credential-types", tags=["credential-types"])


class CredentialTypeIn(BaseModel):
    name: str = Field(max_length=255)


class CredentialTypeOut(BaseModel):
    type_id: str
    name: str
    creator: str
    exists: bool

    @staticmethod
    def from_type(credential_type: CredentialType) -> CredentialTypeOut:
        return CredentialTypeOut(
            type_id=credential_type.id,
            name=credential_type.name,
            creator=credential_type.creator,
            exists=credential_type.exists,
        )


class CredentialTypeCreatedOut(CredentialTypeOut):
    events: list[dict]


@router.post(
    "",
    response_model=CredentialTypeCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def register_type(
    body: CredentialTypeIn,
    principal: Annotated[Principal, Depends(require_user)],
    registry: Annotated[CredentialRegistry, Depends(get_registry)],
) -> CredentialTypeCreatedOut:
    try:
        credential_type, event = await registry.register_type_with_event(
            body.name, principal.identity
        )
    except registry_service.TypeAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"credential type already exists: {e.type_id}",
        ) from None
    except registry_service.InvalidTypeNameError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=str(e),
        ) from None

    return CredentialTypeCreatedOut(
        **CredentialTypeOut.from_type(credential_type).model_dump(),
        events=[event.to_payload()],
    )


@router.get("/{type_id}", response_model=CredentialTypeOut)
async def get_type(
    type_id: Hash32,
    registry: Annotated[CredentialRegistry, Depends(get_registry)],
) -> CredentialTypeOut:
    try:
        credential_type = await registry.get_type(type_id)
    except registry_service.UnknownTypeError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="credential type not found",
        ) from None
    return CredentialTypeOut.from_type(credential_type)
