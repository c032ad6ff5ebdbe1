"""Pydantic types shared by the registry routers.

Identity and Hash32 run the core normalizers as validators, so a
malformed address or digest in a body or path is a 422 before any
registry code runs, and handlers only ever see canonical strings.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel

from credential_registry.core.identity import normalize_hash, normalize_identity
from credential_registry.models.credential import CredentialRecord

Identity = Annotated[str, AfterValidator(normalize_identity)]
Hash32 = Annotated[str, AfterValidator(normalize_hash)]


class CredentialRecordOut(BaseModel):
    type_id: str
    metadata_hash: str
    issuer: str

    @staticmethod
    def from_record(record: CredentialRecord) -> CredentialRecordOut:
        return CredentialRecordOut(
            type_id=record.type_id,
            metadata_hash=record.metadata_hash,
            issuer=record.issuer,
        )
