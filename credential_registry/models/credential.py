from __future__ import annotations

from dataclasses import dataclass

from credential_registry.core.identity import compute_type_id


@dataclass(frozen=True, slots=True)
class CredentialType:
    """Named credential category, fingerprinted by (name, creator).

    Created once by register_type and never mutated afterwards.
    """

    id: str  # 0x-prefixed keccak256 hex
    name: str
    creator: str  # checksummed identity

    @property
    def exists(self) -> bool:
        # Only stored types are ever materialized.
        return True

    @staticmethod
    def new(*, name: str, creator: str) -> CredentialType:
        return CredentialType(
            id=compute_type_id(name, creator),
            name=name,
            creator=creator,
        )


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """One issuance of a credential type to a recipient."""

    type_id: str
    metadata_hash: str  # opaque; never interpreted
    issuer: str
