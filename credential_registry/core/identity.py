"""Identity and hash primitives shared by every layer.

Identities are 20-byte account addresses and type ids / metadata hashes
are 32-byte digests.  Both travel as 0x-prefixed hex strings:

  identity  0x + 40 hex digits, stored in EIP-55 checksum form
  hash      0x + 64 hex digits, stored lowercase

Normalizing once at the boundary means repos and the service can compare
plain strings.

TYPE IDS
--------
A credential type id is keccak256 over the packed encoding of the type
name followed by the creator's 20 address bytes:

    keccak256(utf8(name) || bytes20(creator))

The id doubles as a uniqueness fingerprint: the same creator registering
the same name always lands on the same id, while two creators registering
the same name get two unrelated ids.
"""

from __future__ import annotations

import re

from eth_utils import is_checksum_address, keccak, to_canonical_address, to_checksum_address

_IDENTITY_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")

ZERO_IDENTITY = "0x" + "0" * 40


def normalize_identity(value: str) -> str:
    """Return the checksummed form of an address, or raise ValueError.

    All-lowercase and all-uppercase hex are accepted as-is.  Mixed case is
    treated as a checksum claim and must be a valid one.
    """
    value = value.strip()
    if not _IDENTITY_RE.match(value):
        raise ValueError("identity must be 0x followed by 40 hex digits")

    body = value[2:]
    if body != body.lower() and body != body.upper() and not is_checksum_address(value):
        raise ValueError("identity has an invalid checksum")

    return to_checksum_address(value)


def normalize_hash(value: str) -> str:
    """Return a lowercase 32-byte hex digest, or raise ValueError."""
    value = value.strip()
    if not _HASH_RE.match(value):
        raise ValueError("hash must be 0x followed by 64 hex digits")
    return value.lower()


def is_zero_identity(identity: str) -> bool:
    return int(identity, 16) == 0


def compute_type_id(name: str, creator: str) -> str:
    digest = keccak(name.encode("utf-8") + to_canonical_address(creator))
    return "0x" + digest.hex()


def hash_metadata(document: str) -> str:
    """keccak256 of a UTF-8 document, for callers that hash off-chain metadata."""
    return "0x" + keccak(text=document).hex()
