from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from credential_registry.models.credential import CredentialRecord, CredentialType


class DuplicateTypeError(Exception):
    """A type with this id is already stored."""


class CredentialRepo(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[None]: ...
    async def get_type(self, type_id: str) -> CredentialType | None: ...
    async def add_type(self, credential_type: CredentialType) -> None: ...
    async def append_record(self, owner: str, record: CredentialRecord) -> None: ...
    async def list_records(self, owner: str) -> list[CredentialRecord]: ...


class InMemoryCredentialRepo:
    """Process-local store.

    transaction() serializes callers on an asyncio.Lock so a
    read-check-write sequence never interleaves with another writer.
    """

    def __init__(self) -> None:
        self._types: dict[str, CredentialType] = {}
        self._records: dict[str, list[CredentialRecord]] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            yield

    async def get_type(self, type_id: str) -> CredentialType | None:
        return self._types.get(type_id)

    async def add_type(self, credential_type: CredentialType) -> None:
        if credential_type.id in self._types:
            raise DuplicateTypeError(credential_type.id)
        self._types[credential_type.id] = credential_type

    async def append_record(self, owner: str, record: CredentialRecord) -> None:
        self._records.setdefault(owner, []).append(record)

    async def list_records(self, owner: str) -> list[CredentialRecord]:
        return list(self._records.get(owner, []))

    def clear(self) -> None:
        self._types.clear()
        self._records.clear()
