"""Bearer token handling on the write endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient

from credential_registry.services import token_service
from tests.conftest import ISSUER, mint_token


def _post(client: TestClient, token: str):
    return client.post(
        "/v1/credential-types",
        json={"name": "NBA Player"},
        headers={"Authorization": f"Bearer {token}"},
    )


def _claims(**overrides) -> dict:
    now = datetime.now(UTC)
    claims = {
        "sub": ISSUER,
        "iss": token_service.ISSUER,
        "aud": token_service.AUDIENCE,
        "exp": now + timedelta(minutes=5),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    claims.update(overrides)
    return claims


def test_missing_token_is_401(client: TestClient) -> None:
    resp = client.post("/v1/credential-types", json={"name": "NBA Player"})
    assert resp.status_code == 401


def test_garbage_token_is_401(client: TestClient) -> None:
    resp = _post(client, "not-a-jwt")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_expired_token_is_401(client: TestClient) -> None:
    past = datetime.now(UTC) - timedelta(hours=1)
    token = jwt.encode(
        _claims(exp=past, iat=past - timedelta(minutes=5)),
        token_service._private_key,
        algorithm=token_service.ALGORITHM,
    )
    resp = _post(client, token)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_token_signed_by_unknown_key_is_401(client: TestClient) -> None:
    stranger = ec.generate_private_key(ec.SECP256R1())
    token = jwt.encode(_claims(), stranger, algorithm=token_service.ALGORITHM)
    assert _post(client, token).status_code == 401


def test_wrong_audience_is_401(client: TestClient) -> None:
    token = jwt.encode(
        _claims(aud="someone-else"),
        token_service._private_key,
        algorithm=token_service.ALGORITHM,
    )
    assert _post(client, token).status_code == 401


def test_subject_that_is_not_an_identity_is_401(client: TestClient) -> None:
    resp = _post(client, mint_token("alice@example.com"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token subject is not a valid identity"


def test_lowercase_subject_is_attributed_checksummed(client: TestClient) -> None:
    resp = _post(client, mint_token(ISSUER.lower()))
    assert resp.status_code == 201
    assert resp.json()["creator"] == ISSUER
