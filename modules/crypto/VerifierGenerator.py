#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registration path: username + password -> (salt, verifier).

The generator only validates input and calls SRP6Crypto; persisting the
result is the AccountStore's job.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass

from modules.AuthConfig import AuthConfig
from modules.AuthErrors import InvalidInputError
from modules.crypto.SRP6Crypto import SALT_LENGTH, SRP6Crypto


@dataclass(frozen=True)
class Credential:
    """Salt and verifier as stored in the account table (32 bytes each)."""

    salt: bytes
    verifier: bytes

    def __post_init__(self) -> None:
        if len(self.salt) != SALT_LENGTH:
            raise ValueError(f"salt must be {SALT_LENGTH} bytes, got {len(self.salt)}")
        if len(self.verifier) != SALT_LENGTH:
            raise ValueError(f"verifier must be {SALT_LENGTH} bytes, got {len(self.verifier)}")

    @property
    def salt_b64(self) -> str:
        return base64.b64encode(self.salt).decode("ascii")

    @property
    def verifier_b64(self) -> str:
        return base64.b64encode(self.verifier).decode("ascii")

    @classmethod
    def from_b64(cls, salt_b64: str, verifier_b64: str) -> "Credential":
        return cls(base64.b64decode(salt_b64), base64.b64decode(verifier_b64))

    def __repr__(self) -> str:
        return f"Credential(salt={self.salt_b64!r}, verifier=<{len(self.verifier)} bytes>)"


def _has_forbidden_chars(text: str) -> bool:
    return any(c == ":" or c.isspace() or not c.isprintable() for c in text)


class VerifierGenerator:
    """Validates registration input and derives SRP6 credentials."""

    def __init__(self, config: AuthConfig | None = None, crypto: SRP6Crypto | None = None) -> None:
        self.config = config or AuthConfig()
        self.crypto = crypto or SRP6Crypto(self.config.srp6, self.config.normalization)

    def validate_username(self, username: str) -> str:
        """Return the normalized (uppercase) username or raise InvalidInputError."""
        cfg = self.config
        if not isinstance(username, str):
            raise InvalidInputError("Username is required")
        # unicode uppercasing can grow a name ('ß' -> 'SS'); the column holds the normalized form
        normalized = self.crypto.normalize(username)
        if not cfg.min_username_length <= len(normalized) <= cfg.max_username_length:
            raise InvalidInputError(
                f"Username must be between {cfg.min_username_length} and "
                f"{cfg.max_username_length} characters"
            )
        if _has_forbidden_chars(username):
            raise InvalidInputError("Username contains invalid characters")
        return normalized

    def validate_password(self, password: str) -> None:
        cfg = self.config
        if not isinstance(password, str):
            raise InvalidInputError("Password is required")
        if len(password) < cfg.min_password_length:
            raise InvalidInputError(f"Password must be at least {cfg.min_password_length} characters")
        if len(password) > cfg.max_password_length:
            raise InvalidInputError(f"Password must be at most {cfg.max_password_length} characters")
        if any(not c.isprintable() for c in password):
            raise InvalidInputError("Password contains invalid characters")

    def compute_verifier(self, username: str, password: str, salt: bytes) -> bytes:
        return self.crypto.compute_verifier(username, password, salt)

    def generate_credential(self, username: str, password: str) -> Credential:
        """
        Produce a fresh salt and the matching verifier.

        Raises:
            InvalidInputError: username or password violates the policy.
        """
        self.validate_username(username)
        self.validate_password(password)

        salt, verifier = self.crypto.make_registration(username, password)
        return Credential(salt=salt, verifier=verifier)

    def check_password(self, username: str, password: str, credential: Credential) -> bool:
        return self.crypto.check_password(username, password, credential.salt, credential.verifier)
