from __future__ import annotations

import asyncio

import pytest

from credential_registry.core.identity import compute_type_id
from credential_registry.models.credential import CredentialRecord
from credential_registry.models.events import CredentialAssigned, TypeRegistered
from credential_registry.repos.credential_repo import InMemoryCredentialRepo
from credential_registry.services import registry_service
from credential_registry.services.event_publisher import EventPublisher
from credential_registry.services.registry_service import CredentialRegistry
from credential_registry.services.task_queue import InMemoryTaskQueue
from tests.conftest import ISSUER, METADATA_A, METADATA_B, OTHER_ISSUER, USER, ZERO

UNREGISTERED_TYPE = "0x" + "ee" * 32


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def registry(events: list) -> CredentialRegistry:
    publisher = EventPublisher(InMemoryTaskQueue())
    publisher.subscribe(events.append)
    return CredentialRegistry(InMemoryCredentialRepo(), publisher)


# ---- register_type ----


def test_register_type_returns_type_attributed_to_caller(
    registry: CredentialRegistry,
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    assert ct.name == "NBA Player"
    assert ct.creator == ISSUER
    assert ct.id == compute_type_id("NBA Player", ISSUER)
    assert ct.exists is True


def test_register_type_rejects_same_name_from_same_caller(
    registry: CredentialRegistry,
) -> None:
    asyncio.run(registry.register_type("NBA Player", ISSUER))

    with pytest.raises(registry_service.TypeAlreadyExistsError) as excinfo:
        asyncio.run(registry.register_type("NBA Player", ISSUER))
    assert excinfo.value.type_id == compute_type_id("NBA Player", ISSUER)


def test_register_type_allows_same_name_from_different_caller(
    registry: CredentialRegistry,
) -> None:
    first = asyncio.run(registry.register_type("NBA Player", ISSUER))
    second = asyncio.run(registry.register_type("NBA Player", OTHER_ISSUER))

    assert first.id != second.id
    assert asyncio.run(registry.get_type(first.id)).creator == ISSUER
    assert asyncio.run(registry.get_type(second.id)).creator == OTHER_ISSUER


def test_register_type_rejects_blank_name(registry: CredentialRegistry) -> None:
    with pytest.raises(registry_service.InvalidTypeNameError, match="non-empty"):
        asyncio.run(registry.register_type("   ", ISSUER))


def test_register_type_emits_type_registered(
    registry: CredentialRegistry, events: list
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    assert events == [TypeRegistered(type_id=ct.id, name="NBA Player", creator=ISSUER)]


def test_duplicate_registration_emits_nothing(
    registry: CredentialRegistry, events: list
) -> None:
    asyncio.run(registry.register_type("NBA Player", ISSUER))
    events.clear()

    with pytest.raises(registry_service.TypeAlreadyExistsError):
        asyncio.run(registry.register_type("NBA Player", ISSUER))
    assert events == []


# ---- get_type ----


def test_get_type_reads_back_what_was_registered(
    registry: CredentialRegistry,
) -> None:
    ct = asyncio.run(registry.register_type("Hall of Fame", ISSUER))
    fetched = asyncio.run(registry.get_type(ct.id))
    assert (fetched.name, fetched.creator, fetched.exists) == ("Hall of Fame", ISSUER, True)


def test_get_type_unknown_raises(registry: CredentialRegistry) -> None:
    with pytest.raises(registry_service.UnknownTypeError):
        asyncio.run(registry.get_type(UNREGISTERED_TYPE))


# ---- assign_credential ----


def test_assign_credential_records_caller_as_issuer(
    registry: CredentialRegistry,
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    # Anyone may issue an existing type, not just its creator.
    record = asyncio.run(
        registry.assign_credential(USER, ct.id, METADATA_A, OTHER_ISSUER)
    )
    assert record == CredentialRecord(
        type_id=ct.id, metadata_hash=METADATA_A, issuer=OTHER_ISSUER
    )


def test_assign_credential_rejects_unknown_type_without_appending(
    registry: CredentialRegistry, events: list
) -> None:
    with pytest.raises(registry_service.UnknownTypeError):
        asyncio.run(
            registry.assign_credential(USER, UNREGISTERED_TYPE, METADATA_A, ISSUER)
        )
    assert asyncio.run(registry.get_credentials_for(USER)) == []
    assert events == []


def test_assign_credential_rejects_null_recipient(
    registry: CredentialRegistry, events: list
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    events.clear()

    with pytest.raises(registry_service.InvalidRecipientError):
        asyncio.run(registry.assign_credential(ZERO, ct.id, METADATA_A, ISSUER))
    assert asyncio.run(registry.get_credentials_for(ZERO)) == []
    assert events == []


def test_assign_credential_emits_credential_assigned(
    registry: CredentialRegistry, events: list
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    asyncio.run(registry.assign_credential(USER, ct.id, METADATA_A, ISSUER))

    assert events[-1] == CredentialAssigned(
        recipient=USER, type_id=ct.id, metadata_hash=METADATA_A, issuer=ISSUER
    )


def test_issuer_may_assign_to_itself(registry: CredentialRegistry) -> None:
    ct = asyncio.run(registry.register_type("Self Attested", ISSUER))
    asyncio.run(registry.assign_credential(ISSUER, ct.id, METADATA_A, ISSUER))
    assert len(asyncio.run(registry.get_credentials_for(ISSUER))) == 1


# ---- get_credentials_for ----


def test_get_credentials_for_unknown_owner_is_empty(
    registry: CredentialRegistry,
) -> None:
    assert asyncio.run(registry.get_credentials_for(USER)) == []


def test_credentials_returned_in_issuance_order(
    registry: CredentialRegistry,
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    hashes = ["0x" + f"{i:064x}" for i in range(5)]
    for h in hashes:
        asyncio.run(registry.assign_credential(USER, ct.id, h, ISSUER))

    records = asyncio.run(registry.get_credentials_for(USER))
    assert [r.metadata_hash for r in records] == hashes


def test_identical_assignments_are_not_deduplicated(
    registry: CredentialRegistry,
) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    for _ in range(3):
        asyncio.run(registry.assign_credential(USER, ct.id, METADATA_A, ISSUER))

    assert len(asyncio.run(registry.get_credentials_for(USER))) == 3


def test_nba_player_scenario(registry: CredentialRegistry) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    asyncio.run(registry.assign_credential(USER, ct.id, METADATA_A, ISSUER))
    asyncio.run(registry.assign_credential(USER, ct.id, METADATA_B, ISSUER))

    assert asyncio.run(registry.get_credentials_for(USER)) == [
        CredentialRecord(type_id=ct.id, metadata_hash=METADATA_A, issuer=ISSUER),
        CredentialRecord(type_id=ct.id, metadata_hash=METADATA_B, issuer=ISSUER),
    ]
    fetched = asyncio.run(registry.get_type(ct.id))
    assert (fetched.name, fetched.creator, fetched.exists) == ("NBA Player", ISSUER, True)


def test_returned_list_is_a_copy(registry: CredentialRegistry) -> None:
    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    asyncio.run(registry.assign_credential(USER, ct.id, METADATA_A, ISSUER))

    asyncio.run(registry.get_credentials_for(USER)).clear()
    assert len(asyncio.run(registry.get_credentials_for(USER))) == 1


# ---- notification delivery ----


class _DownQueue:
    async def enqueue(self, queue: str, payload: dict):
        raise ConnectionError("redis unavailable")

    async def dequeue(self, queue: str, timeout: int = 0):
        return None

    async def queue_length(self, queue: str) -> int:
        return 0


def test_writes_succeed_when_queue_is_down() -> None:
    repo = InMemoryCredentialRepo()
    registry = CredentialRegistry(repo, EventPublisher(_DownQueue()))

    ct = asyncio.run(registry.register_type("NBA Player", ISSUER))
    record = asyncio.run(registry.assign_credential(USER, ct.id, METADATA_A, ISSUER))

    assert asyncio.run(registry.get_type(ct.id)) == ct
    assert asyncio.run(registry.get_credentials_for(USER)) == [record]


def test_with_event_returns_the_published_event(
    registry: CredentialRegistry, events: list
) -> None:
    ct, registered = asyncio.run(registry.register_type_with_event("NBA Player", ISSUER))
    record, assigned = asyncio.run(
        registry.assign_credential_with_event(USER, ct.id, METADATA_A, ISSUER)
    )

    assert events[0] is registered
    assert events[1] is assigned
    assert registered.type_id == ct.id
    assert (assigned.type_id, assigned.metadata_hash) == (record.type_id, record.metadata_hash)


# ---- concurrency ----


def test_concurrent_duplicate_registrations_admit_exactly_one(
    registry: CredentialRegistry,
) -> None:
    async def _race() -> list:
        return await asyncio.gather(
            *(registry.register_type("NBA Player", ISSUER) for _ in range(10)),
            return_exceptions=True,
        )

    results = asyncio.run(_race())
    created = [r for r in results if not isinstance(r, Exception)]
    rejected = [
        r for r in results if isinstance(r, registry_service.TypeAlreadyExistsError)
    ]
    assert len(created) == 1
    assert len(rejected) == 9


def test_owner_is_recorded_but_not_enforced() -> None:
    registry = CredentialRegistry(
        InMemoryCredentialRepo(),
        EventPublisher(InMemoryTaskQueue()),
        owner=OTHER_ISSUER,
    )
    assert registry.owner == OTHER_ISSUER
    # A non-owner can still register.
    ct = asyncio.run(registry.register_type("Open", ISSUER))
    assert ct.creator == ISSUER
