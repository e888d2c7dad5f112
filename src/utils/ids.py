"""
Identifier and clock helpers.

Record ids are wall-clock tokens: epoch milliseconds plus a short
base-36 suffix drawn from an injectable random source.
"""

import random
import string
from datetime import datetime, timezone
from typing import Callable, Protocol

Clock = Callable[[], datetime]

_BASE36 = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 9


class RandomSource(Protocol):
    """The subset of `random.Random` the pipeline draws from."""

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...

    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq): ...  # type: ignore[no-untyped-def]


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def new_token(
    prefix: str | None = None,
    rng: RandomSource | None = None,
    clock: Clock | None = None,
) -> str:
    """
    Create a fresh record id.

    Args:
        prefix: Optional label, e.g. "conflict" -> "conflict_<ms>_<suffix>"
        rng: Random source for the suffix (module-level random if omitted)
        clock: Clock for the timestamp part

    Returns:
        Token string, unique for any realistic workload
    """
    rng = rng or random
    millis = int((clock or utc_now)().timestamp() * 1000)
    suffix = "".join(_BASE36[rng.randint(0, 35)] for _ in range(SUFFIX_LENGTH))

    token = f"{millis}_{suffix}"
    return f"{prefix}_{token}" if prefix else token
