"""Salted PBKDF2 password hashing."""

from __future__ import annotations

import binascii
import hashlib
import hmac
import secrets
from dataclasses import dataclass

from ..domain.constants import PASSWORD_SALT_LENGTH

DEFAULT_ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 390_000


@dataclass(slots=True)
class PasswordHash:
    """Structured representation of a stored hash (``algorithm$iterations$digest``).

    The salt lives in its own column on the user, not inside the encoded hash.
    """

    algorithm: str
    iterations: int
    digest: bytes

    @classmethod
    def parse(cls, encoded: str) -> "PasswordHash":
        try:
            algorithm, iterations, digest_hex = encoded.split("$")
            return cls(
                algorithm=algorithm,
                iterations=int(iterations),
                digest=binascii.unhexlify(digest_hex),
            )
        except (ValueError, binascii.Error) as exc:
            raise ValueError("invalid password hash format") from exc

    def encode(self) -> str:
        return f"{self.algorithm}${self.iterations}${self.digest.hex()}"


def _derive(password: str, salt: str, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
    )


@dataclass(slots=True)
class PasswordHasher:
    """Hash and verify passwords against a per-user salt."""

    iterations: int = DEFAULT_ITERATIONS

    @staticmethod
    def generate_salt() -> str:
        return secrets.token_hex(PASSWORD_SALT_LENGTH // 2)

    def hash_password(self, password: str, salt: str) -> str:
        digest = _derive(password, salt, self.iterations)
        return PasswordHash(DEFAULT_ALGORITHM, self.iterations, digest).encode()

    def verify_password(self, password: str, salt: str, encoded: str) -> bool:
        """Return ``True`` when ``password`` with ``salt`` matches ``encoded``."""

        if not encoded:
            return False
        try:
            parsed = PasswordHash.parse(encoded)
        except ValueError:
            return False
        if parsed.algorithm != DEFAULT_ALGORITHM:
            return False
        derived = _derive(password, salt, parsed.iterations)
        return hmac.compare_digest(derived, parsed.digest)


__all__ = ["PasswordHash", "PasswordHasher"]
