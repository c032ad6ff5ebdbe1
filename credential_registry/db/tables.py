"""SQLAlchemy table definitions.

These back the frozen dataclasses in credential_registry/models/.
PgCredentialRepo converts between rows and domain objects.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from credential_registry.db.engine import Base

# 0x + 64 hex digits
_HASH_LEN = 66
# 0x + 40 hex digits
_IDENTITY_LEN = 42


class CredentialTypeRow(Base):
    __tablename__ = "credential_types"

    # The primary key is the (name, creator) fingerprint, so a duplicate
    # registration is rejected by the database even across API replicas.
    id: Mapped[str] = mapped_column(String(_HASH_LEN), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    creator: Mapped[str] = mapped_column(String(_IDENTITY_LEN), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class CredentialRecordRow(Base):
    __tablename__ = "credential_records"

    # Monotonic sequence = issuance order for getCredentialsFor.
    seq: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(
        String(_IDENTITY_LEN), nullable=False, index=True
    )
    type_id: Mapped[str] = mapped_column(
        String(_HASH_LEN), ForeignKey("credential_types.id"), nullable=False
    )
    metadata_hash: Mapped[str] = mapped_column(String(_HASH_LEN), nullable=False)
    issuer: Mapped[str] = mapped_column(String(_IDENTITY_LEN), nullable=False)
