from __future__ import annotations

import pytest
from eth_utils import to_checksum_address
from fastapi.testclient import TestClient

from credential_registry.api.dependencies import memory_repo
from credential_registry.main import app
from credential_registry.services import token_service
from credential_registry.services.task_queue import task_queue

# Fixed identities so failures are easy to read.
ISSUER = to_checksum_address("0x" + "1a" * 20)
OTHER_ISSUER = to_checksum_address("0x" + "2b" * 20)
USER = to_checksum_address("0x" + "3c" * 20)
ZERO = "0x" + "00" * 20

METADATA_A = "0x" + "aa" * 32
METADATA_B = "0x" + "bb" * 32


@pytest.fixture(autouse=True)
def reset_registry_state() -> None:
    """Clear the shared in-memory registry between tests."""
    memory_repo.clear()


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Drop queued notifications between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(identity: str = ISSUER, roles: list[str] | None = None) -> str:
    """Create a valid ES256 JWT whose subject is `identity`."""
    return token_service.create_access_token(sub=identity, roles=roles)


def auth(identity: str = ISSUER) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(identity)}"}
