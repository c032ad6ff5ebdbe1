"""PostgreSQL implementation of CredentialRepo."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from credential_registry.db.tables import CredentialRecordRow, CredentialTypeRow
from credential_registry.models.credential import CredentialRecord, CredentialType
from credential_registry.repos.credential_repo import DuplicateTypeError


class PgCredentialRepo:
    """Satisfies the CredentialRepo Protocol using PostgreSQL via SQLAlchemy.

    transaction() maps to a database transaction: it commits when the block
    exits cleanly and rolls back on any exception, so a rejected operation
    leaves no rows behind.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            async with self._session.begin_nested():
                yield
        else:
            async with self._session.begin():
                yield

    async def get_type(self, type_id: str) -> CredentialType | None:
        row = await self._session.get(CredentialTypeRow, type_id)
        if row is None:
            return None
        return _row_to_type(row)

    async def add_type(self, credential_type: CredentialType) -> None:
        row = CredentialTypeRow(
            id=credential_type.id,
            name=credential_type.name,
            creator=credential_type.creator,
        )
        self._session.add(row)
        try:
            await self._session.flush()
        except IntegrityError:
            # Lost a race with another replica inserting the same id.
            raise DuplicateTypeError(credential_type.id) from None

    async def append_record(self, owner: str, record: CredentialRecord) -> None:
        self._session.add(
            CredentialRecordRow(
                owner=owner,
                type_id=record.type_id,
                metadata_hash=record.metadata_hash,
                issuer=record.issuer,
            )
        )
        await self._session.flush()

    async def list_records(self, owner: str) -> list[CredentialRecord]:
        stmt = (
            select(CredentialRecordRow)
            .where(CredentialRecordRow.owner == owner)
            .order_by(CredentialRecordRow.seq)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_record(row) for row in rows]


def _row_to_type(row: CredentialTypeRow) -> CredentialType:
    return CredentialType(id=row.id, name=row.name, creator=row.creator)


def _row_to_record(row: CredentialRecordRow) -> CredentialRecord:
    return CredentialRecord(
        type_id=row.type_id,
        metadata_hash=row.metadata_hash,
        issuer=row.issuer,
    )
