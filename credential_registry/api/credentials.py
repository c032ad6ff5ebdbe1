"""Credential assignment and lookup endpoints.

- POST /v1/credentials                       assign a credential as the caller
- GET  /v1/identities/{owner}/credentials    an identity's full history

Any authenticated identity may assign any existing type to any recipient,
itself included.  The metadata hash is stored verbatim; resolving it to
the off-chain document is the client's job.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from credential_registry.api.dependencies import get_registry, require_user
from credential_registry.api.schemas import CredentialRecordOut, Hash32, Identity
from credential_registry.models.principal import Principal
from credential_registry.services import registry_service
from credential_registry.services.registry_service import CredentialRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["credentials"])


class CredentialAssignIn(BaseModel):
    recipient: Identity
    type_id: Hash32
    metadata_hash: Hash32


class CredentialAssignedOut(CredentialRecordOut):
    recipient: str
    events: list[dict]


@router.post(
    "/v1/credentials",
    response_model=CredentialAssignedOut,
    status_code=status.HTTP_201_CREATED,
)
async def assign_credential(
    body: CredentialAssignIn,
    principal: Annotated[Principal, Depends(require_user)],
    registry: Annotated[CredentialRegistry, Depends(get_registry)],
) -> CredentialAssignedOut:
    try:
        record, event = await registry.assign_credential_with_event(
            body.recipient,
            body.type_id,
            body.metadata_hash,
            principal.identity,
        )
    except registry_service.InvalidRecipientError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=str(e),
        ) from None
    except registry_service.UnknownTypeError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="credential type not found",
        ) from None

    return CredentialAssignedOut(
        **CredentialRecordOut.from_record(record).model_dump(),
        recipient=body.recipient,
        events=[event.to_payload()],
    )


@router.get(
    "/v1/identities/{owner}/credentials",
    response_model=list[CredentialRecordOut],
)
async def get_credentials_for(
    owner: Identity,
    registry: Annotated[CredentialRegistry, Depends(get_registry)],
) -> list[CredentialRecordOut]:
    records = await registry.get_credentials_for(owner)
    return [CredentialRecordOut.from_record(r) for r in records]
