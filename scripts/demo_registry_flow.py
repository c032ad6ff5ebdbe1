"""Demo: the "NBA Player" credential journey against the in-memory registry.

Run with:
    python scripts/demo_registry_flow.py

Steps mirror what a client does end to end: register a type as the
issuer, pick the type_id out of the TypeRegistered event, assign two
credentials with hashed off-chain metadata, then read everything back.
"""

from __future__ import annotations

import json
import secrets

from eth_utils import to_checksum_address
from fastapi.testclient import TestClient

from credential_registry.core.identity import hash_metadata
from credential_registry.main import app
from credential_registry.services import token_service

FIRST_CREDENTIAL_METADATA = {
    "team": "Los Angeles Lakers",
    "position": "Forward",
    "years_of_experience": 20,
    "career_points": 38652,
}

SECOND_CREDENTIAL_METADATA = {
    "nickname": "Bobby the Legend",
    "preferred_hand": "Left",
    "career_high_score": 72,
    "championships_won": 3,
    "hall_of_fame_status": "Eligible",
}


def _random_identity() -> str:
    return to_checksum_address("0x" + secrets.token_hex(20))


def _auth(identity: str) -> dict[str, str]:
    token = token_service.create_access_token(sub=identity)
    return {"Authorization": f"Bearer {token}"}


def main() -> None:
    client = TestClient(app)
    issuer = _random_identity()
    user = _random_identity()
    first_hash = hash_metadata(json.dumps(FIRST_CREDENTIAL_METADATA, separators=(",", ":")))
    second_hash = hash_metadata(json.dumps(SECOND_CREDENTIAL_METADATA, separators=(",", ":")))

    # ── Step 1: register the type as the issuer ─────────────────────
    r = client.post(
        "/v1/credential-types", json={"name": "NBA Player"}, headers=_auth(issuer)
    )
    event = next(e for e in r.json()["events"] if e["event"] == "TypeRegistered")
    type_id = event["type_id"]
    print(f"1. POST /v1/credential-types       → {r.status_code}  type_id={type_id[:18]}…")

    # ── Step 2: registering it again is rejected ────────────────────
    r = client.post(
        "/v1/credential-types", json={"name": "NBA Player"}, headers=_auth(issuer)
    )
    print(f"2. POST /v1/credential-types (dup) → {r.status_code}  {r.json()['detail'][:40]}…")

    # ── Step 3: assign two credentials to the user ──────────────────
    for n, metadata_hash in enumerate((first_hash, second_hash), start=3):
        r = client.post(
            "/v1/credentials",
            json={"recipient": user, "type_id": type_id, "metadata_hash": metadata_hash},
            headers=_auth(issuer),
        )
        print(f"{n}. POST /v1/credentials            → {r.status_code}  metadata={metadata_hash[:18]}…")

    # ── Step 5: unknown type is rejected ────────────────────────────
    r = client.post(
        "/v1/credentials",
        json={
            "recipient": user,
            "type_id": "0x" + secrets.token_hex(32),
            "metadata_hash": first_hash,
        },
        headers=_auth(issuer),
    )
    print(f"5. POST /v1/credentials (unknown)  → {r.status_code}  {r.json()['detail']}")

    # ── Step 6: read back ───────────────────────────────────────────
    r = client.get(f"/v1/credential-types/{type_id}")
    print(f"6. GET  /v1/credential-types/…     → {r.status_code}  {r.json()}")

    r = client.get(f"/v1/identities/{user}/credentials")
    records = r.json()
    print(f"7. GET  /v1/identities/…/credentials → {r.status_code}  {len(records)} records")
    assert [c["metadata_hash"] for c in records] == [first_hash, second_hash]
    assert all(c["issuer"] == issuer for c in records)

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
