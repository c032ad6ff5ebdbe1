from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from credential_registry.api.dependencies import get_registry
from credential_registry.services.registry_service import CredentialRegistry

router = APIRouter(prefix="/v1/registry", tags=["registry"])


class RegistryInfoOut(BaseModel):
    # Recorded at bootstrap; no operation checks it.
    owner: str | None


@router.get("", response_model=RegistryInfoOut)
async def registry_info(
    registry: Annotated[CredentialRegistry, Depends(get_registry)],
) -> RegistryInfoOut:
    return RegistryInfoOut(owner=registry.owner)
