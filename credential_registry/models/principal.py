from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated JWT.

    identity: checksummed account address from the `sub` claim.  This is
              the "caller" every registry write is attributed to.
    roles:    platform roles carried in the token.  The registry records
              them for logging only; no operation gates on a role.
    """

    identity: str
    roles: frozenset[str]
