"""Credential registry: type registration and credential assignment.

State lives behind a CredentialRepo with two indexes, types by id and
credential records by owner.  The rules:

  - A type id is keccak256(name || creator).  Registering the same name
    twice from the same caller is rejected; a different caller gets a
    different id and succeeds.
  - A credential may only reference a type that already exists, and may
    not be assigned to the null identity.
  - Records are append-only and returned in issuance order.  Identical
    records are allowed.

Nothing checks who the caller is beyond attributing the write to them.
Any identity may register types and may assign any existing type to any
recipient.  The registry owner is recorded at bootstrap and exposed, but
gates nothing.

Each write runs its check-then-write inside one repo transaction and
publishes its notification only after that transaction has committed.
A rejected call raises before anything is written and publishes nothing.
"""

from __future__ import annotations

import logging

from credential_registry.core.identity import is_zero_identity
from credential_registry.core.metrics import (
    CREDENTIALS_ASSIGNED,
    REGISTRY_REJECTIONS,
    TYPES_REGISTERED,
)
from credential_registry.models.credential import CredentialRecord, CredentialType
from credential_registry.models.events import CredentialAssigned, TypeRegistered
from credential_registry.repos.credential_repo import CredentialRepo, DuplicateTypeError
from credential_registry.services.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Base for every caller-correctable registry rejection."""


class InvalidTypeNameError(RegistryError, ValueError):
    pass


class TypeAlreadyExistsError(RegistryError):
    def __init__(self, type_id: str) -> None:
        super().__init__(f"credential type already exists: {type_id}")
        self.type_id = type_id


class InvalidRecipientError(RegistryError, ValueError):
    pass


class UnknownTypeError(RegistryError, LookupError):
    def __init__(self, type_id: str) -> None:
        super().__init__(f"unknown credential type: {type_id}")
        self.type_id = type_id


class CredentialRegistry:
    def __init__(
        self,
        repo: CredentialRepo,
        publisher: EventPublisher,
        *,
        owner: str | None = None,
    ) -> None:
        self._repo = repo
        self._publisher = publisher
        self.owner = owner

    async def register_type(self, name: str, caller: str) -> CredentialType:
        credential_type, _ = await self.register_type_with_event(name, caller)
        return credential_type

    async def register_type_with_event(
        self, name: str, caller: str
    ) -> tuple[CredentialType, TypeRegistered]:
        """Create a credential type attributed to `caller`.

        Returns the type and the TypeRegistered event that was published.
        Raises InvalidTypeNameError for a blank name and
        TypeAlreadyExistsError when caller already registered `name`.
        """
        if not name.strip():
            REGISTRY_REJECTIONS.labels(reason="invalid_name").inc()
            logger.warning("Rejected blank type name from caller=%s", caller)
            raise InvalidTypeNameError("type name must be non-empty")

        credential_type = CredentialType.new(name=name, creator=caller)

        try:
            async with self._repo.transaction():
                if await self._repo.get_type(credential_type.id) is not None:
                    raise DuplicateTypeError(credential_type.id)
                await self._repo.add_type(credential_type)
        except DuplicateTypeError:
            REGISTRY_REJECTIONS.labels(reason="already_exists").inc()
            logger.warning(
                "Rejected duplicate type name=%r caller=%s type_id=%s",
                name,
                caller,
                credential_type.id,
            )
            raise TypeAlreadyExistsError(credential_type.id) from None

        TYPES_REGISTERED.inc()
        logger.info(
            "Registered type_id=%s name=%r creator=%s",
            credential_type.id,
            name,
            caller,
        )
        event = TypeRegistered(
            type_id=credential_type.id,
            name=credential_type.name,
            creator=credential_type.creator,
        )
        await self._publisher.publish(event)
        return credential_type, event

    async def assign_credential(
        self,
        recipient: str,
        type_id: str,
        metadata_hash: str,
        caller: str,
    ) -> CredentialRecord:
        record, _ = await self.assign_credential_with_event(
            recipient, type_id, metadata_hash, caller
        )
        return record

    async def assign_credential_with_event(
        self,
        recipient: str,
        type_id: str,
        metadata_hash: str,
        caller: str,
    ) -> tuple[CredentialRecord, CredentialAssigned]:
        """Append a credential of `type_id` to `recipient`, issued by `caller`.

        Returns the record and the CredentialAssigned event that was published.
        """
        if is_zero_identity(recipient):
            REGISTRY_REJECTIONS.labels(reason="invalid_recipient").inc()
            logger.warning("Rejected assignment to null recipient by caller=%s", caller)
            raise InvalidRecipientError("recipient must not be the null identity")

        record = CredentialRecord(
            type_id=type_id,
            metadata_hash=metadata_hash,
            issuer=caller,
        )

        async with self._repo.transaction():
            if await self._repo.get_type(type_id) is None:
                REGISTRY_REJECTIONS.labels(reason="unknown_type").inc()
                logger.warning(
                    "Rejected assignment of unknown type_id=%s by caller=%s",
                    type_id,
                    caller,
                )
                raise UnknownTypeError(type_id)
            await self._repo.append_record(recipient, record)

        CREDENTIALS_ASSIGNED.inc()
        logger.info(
            "Assigned type_id=%s to recipient=%s issuer=%s",
            type_id,
            recipient,
            caller,
        )
        event = CredentialAssigned(
            recipient=recipient,
            type_id=type_id,
            metadata_hash=metadata_hash,
            issuer=caller,
        )
        await self._publisher.publish(event)
        return record, event

    async def get_type(self, type_id: str) -> CredentialType:
        async with self._repo.transaction():
            credential_type = await self._repo.get_type(type_id)
        if credential_type is None:
            raise UnknownTypeError(type_id)
        return credential_type

    async def get_credentials_for(self, owner: str) -> list[CredentialRecord]:
        async with self._repo.transaction():
            return await self._repo.list_records(owner)
