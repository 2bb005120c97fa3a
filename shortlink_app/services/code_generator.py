"""
Random short code generation with collision checking.
"""

import logging
import random
import threading
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from shortlink_app.exceptions import CodeGenerationError
from shortlink_app.models.link import ShortLink

logger = logging.getLogger(__name__)

# Keyspaces below this size make collisions frequent enough to be worth a warning
SMALL_KEYSPACE = 10_000
# Log a warning every N consecutive collisions inside one generate() call
COLLISION_LOG_INTERVAL = 100


class CodeGenerator:
    """
    Generates random codes of a fixed length and checks the store for uniqueness.

    Each position is drawn uniformly and independently from the alphabet. The
    existence check only makes collisions unlikely; two concurrent generators
    can still pick the same free code, and the unique index on
    ``short_links.code`` decides which insert wins (see LinkService).

    One ``random.Random`` instance is shared by all requests. It is not a
    cryptographic source; uniqueness comes from the store, not the RNG.
    """

    def __init__(
        self,
        length: int,
        alphabet: str,
        max_attempts: Optional[int] = None,
        rng: Optional[random.Random] = None,
        reserved_codes: Iterable[str] = (),
    ):
        if length <= 0:
            raise ValueError(f"Code length must be positive, got {length}")
        if not alphabet:
            raise ValueError("Alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("Alphabet must not contain repeated characters")
        if max_attempts is not None and max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")

        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts
        self.reserved_codes = frozenset(reserved_codes)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

        if self.keyspace < SMALL_KEYSPACE:
            logger.warning(
                "Code keyspace is only %d (alphabet size %d, length %d); "
                "generation will stall as it fills up",
                self.keyspace, len(alphabet), length,
            )

    @property
    def keyspace(self) -> int:
        return len(self.alphabet) ** self.length

    def sample(self) -> str:
        """Draw one candidate code (no uniqueness check)."""
        with self._lock:
            return "".join(self._rng.choice(self.alphabet) for _ in range(self.length))

    async def generate(self, db: AsyncSession) -> str:
        """Return a code that no stored ShortLink uses at the time of the check."""
        attempts = 0
        while True:
            attempts += 1
            candidate = self.sample()

            # Codes equal to a fixed route (e.g. "health") could never be redirected
            if candidate not in self.reserved_codes:
                result = await db.execute(
                    select(ShortLink.id).where(ShortLink.code == candidate).limit(1)
                )
                if result.first() is None:
                    return candidate

            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise CodeGenerationError(
                    f"Could not generate unique code after {attempts} attempts"
                )
            if attempts % COLLISION_LOG_INTERVAL == 0:
                logger.warning(
                    "%d consecutive code collisions (keyspace %d)",
                    attempts, self.keyspace,
                )
