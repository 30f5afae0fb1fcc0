"""Deterministic run keys for cached results.

A run key identifies what ran: collection, environment, scope and
iteration count. Timeout is excluded since it does not change what ran.

The key is a 32-bit polynomial hash, so distinct runs can share a key
and overwrite each other's cached results. It is a lookup handle, not
a unique or cryptographic identifier.
"""

from __future__ import annotations

import json
import struct

KEY_PREFIX = "run_"

_MASK_32 = 0xFFFFFFFF


def canonical_run_identity(
    collection_id: str,
    environment_id: str | None = None,
    scope: str | None = None,
    iteration_count: int = 1,
) -> str:
    """Serialize identity fields in the fixed order used for hashing.

    Order: collection_id, environment_id, scope, iteration_count.
    Absent values serialize as null.
    """
    return json.dumps(
        [collection_id, environment_id, scope, iteration_count],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def string_hash(text: str) -> int:
    """Base-31 rolling hash with signed 32-bit wraparound.

    Runs over UTF-16 code units, so a character outside the BMP counts
    as its two surrogates. This keeps keys equal to those of JavaScript
    clients hashing with charCodeAt().
    """
    value = 0
    for (unit,) in struct.iter_unpack("<H", text.encode("utf-16-le")):
        value = (value * 31 + unit) & _MASK_32
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def derive_run_key(
    collection_id: str,
    environment_id: str | None = None,
    scope: str | None = None,
    iteration_count: int = 1,
) -> str:
    """Return the run key for a set of identity fields, e.g. ``run_1234``."""
    identity = canonical_run_identity(
        collection_id, environment_id, scope, iteration_count
    )
    return f"{KEY_PREFIX}{abs(string_hash(identity))}"
