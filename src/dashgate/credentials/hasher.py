"""
One-way hashing of tenant API keys with Argon2id.

Stored values are PHC strings (``$argon2id$v=19$m=...,t=...,p=...$salt$hash``)
that embed their own salt and cost parameters, so hashes produced under an
older configuration still verify after the parameters change.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from dashgate.common.config import DashgateSettings


class ApiKeyHasher:
    """Hash and verify API key secrets."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: DashgateSettings) -> "ApiKeyHasher":
        return cls(
            time_cost=settings.hash_time_cost,
            memory_cost=settings.hash_memory_cost,
            parallelism=settings.hash_parallelism,
        )

    def hash(self, secret: str) -> str:
        """Hash a secret with a fresh random salt."""
        return self._hasher.hash(secret)

    def verify(self, candidate: str, stored_hash: str) -> bool:
        """Return True only if ``candidate`` produced ``stored_hash``.

        A malformed stored hash counts as a failed verification.
        """
        if not candidate or not stored_hash:
            return False
        try:
            return self._hasher.verify(stored_hash, candidate)
        except (VerificationError, InvalidHashError, ValueError):
            return False

    def needs_rehash(self, stored_hash: str) -> bool:
        """True if ``stored_hash`` was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(stored_hash)
        except (InvalidHashError, ValueError):
            return True
