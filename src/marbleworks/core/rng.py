"""Deterministic random number stream for marble generation.

Every marble is a pure function of its *seed key*: the requesting username
(empty when absent) followed by a millisecond Unix timestamp.  The key is
hashed to a 32-bit seed, and the seed drives a small 32-bit mixing generator
that yields uniform floats in ``[0, 1)``.

Both halves use explicit 32-bit wraparound arithmetic so that the produced
sequence is bit-for-bit identical to other implementations of the same
algorithms (xmur3-style string hash and mulberry32).  Python integers are
unbounded, so every multiply, add and shift is masked back to 32 bits.

Usage
-----
::

    from marbleworks.core.rng import seed_key, stream_for

    rng = stream_for(seed_key("alice", 1700000000000))
    first = rng()   # 0.09328846237622201

The stream is not cryptographically secure and must never be shared between
requests: each generation run builds its own.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

MASK32 = 0xFFFFFFFF

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def imul(a: int, b: int) -> int:
    """Multiply two 32-bit values, keeping the low 32 bits (unsigned)."""
    return (a * b) & MASK32


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & MASK32


def _code_units(text: str) -> list[int]:
    """Return *text* as UTF-16 code units.

    Characters outside the Basic Multilingual Plane contribute two units
    (a surrogate pair), matching how string length and character codes are
    counted by the reference hash.
    """
    raw = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(raw[i : i + 2], "little") for i in range(0, len(raw), 2)]


def hash_seed(key: str) -> int:
    """Derive a 32-bit unsigned seed from a string key.

    Args:
        key: Seed key, typically built by :func:`seed_key`.

    Returns:
        Integer in ``[0, 2**32)``.  Identical keys always hash identically.
    """
    units = _code_units(key)
    h = (1779033703 ^ len(units)) & MASK32
    for unit in units:
        h = imul(h ^ unit, 3432918353)
        h = _rotl(h, 13)

    # Avalanche finalisation.
    h = imul(h ^ (h >> 16), 2246822507)
    h = imul(h ^ (h >> 13), 3266489909)
    return (h ^ (h >> 16)) & MASK32


class Mulberry32:
    """Infinite stream of floats in ``[0, 1)`` from a 32-bit seed.

    Calling the instance advances the internal state and returns the next
    value.  The stream can only be restarted by constructing a new instance
    from the same seed.
    """

    def __init__(self, seed: int) -> None:
        self._state = seed & MASK32

    def __call__(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & MASK32
        t = self._state
        t = imul(t ^ (t >> 15), t | 1)
        t ^= (t + imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    def __iter__(self):
        while True:
            yield self()


def timestamp_ms(moment: datetime | None = None) -> int:
    """Convert a datetime to whole milliseconds since the Unix epoch.

    Naive datetimes are interpreted as UTC.  ``None`` means "now".
    """
    if moment is None:
        return time.time_ns() // 1_000_000
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // _ONE_MS


def seed_key(username: str | None, millis: int) -> str:
    """Build the seed key: username (or empty string) followed by the timestamp."""
    return f"{username or ''}{millis}"


def stream_for(key: str) -> Mulberry32:
    """Return a fresh random stream seeded from *key*."""
    return Mulberry32(hash_seed(key))
