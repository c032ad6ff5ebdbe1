"""Caller authentication: ES256 bearer tokens.

The registry does not log anyone in.  Callers present a JWT whose `sub`
claim is their account address; the token's signature is what makes that
identity "externally authenticated".

Key material:
- JWT_PUBLIC_KEY_FILE set: verify against that PEM public key (the
  issuer keeps the private half).  create_access_token is unavailable.
- Unset (dev/test): an ephemeral EC key pair is generated on import so
  tests and the demo script can mint tokens locally.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from credential_registry.core.config import SETTINGS

ALGORITHM = "ES256"
ISSUER = "credential-registry"
AUDIENCE = "credential-registry"
ACCESS_TOKEN_TTL_MIN = 15

if SETTINGS.jwt_public_key_file:
    _private_key: ec.EllipticCurvePrivateKey | None = None
    _public_key = serialization.load_pem_public_key(
        Path(SETTINGS.jwt_public_key_file).read_bytes()
    )
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
    _public_key = _private_key.public_key()


def create_access_token(*, sub: str, roles: list[str] | None = None) -> str:
    """Sign a token for `sub` with the local dev key."""
    if _private_key is None:
        raise RuntimeError(
            "JWT_PUBLIC_KEY_FILE is configured; tokens are minted by the external issuer"
        )
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["user"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 and validates exp, iss and aud.
    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
