"""Notifications emitted after a committed registry write."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class TypeRegistered:
    event_name: ClassVar[str] = "TypeRegistered"

    type_id: str
    name: str
    creator: str

    def to_payload(self) -> dict:
        return {"event": self.event_name, **asdict(self)}


@dataclass(frozen=True, slots=True)
class CredentialAssigned:
    event_name: ClassVar[str] = "CredentialAssigned"

    recipient: str
    type_id: str
    metadata_hash: str
    issuer: str

    def to_payload(self) -> dict:
        return {"event": self.event_name, **asdict(self)}


RegistryEvent = TypeRegistered | CredentialAssigned
