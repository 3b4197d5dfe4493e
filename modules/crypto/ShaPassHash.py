#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import hashlib
import hmac

from modules.AuthConfig import AuthConfig, LegacyHashType
from modules.crypto.SRP6Crypto import SRP6Crypto


class ShaPassHash:
    """
    Implements the legacy account hash used by pre-SRP6 authentication
    (MaNGOS, older TrinityCore and AzerothCore forks with a
    ``sha_pass_hash`` column).

    This algorithm is *not* SRP6. It does not use salts, verifiers, or any
    challenge/response math. The default ``trinitycore`` type hashes:

        SHA1( UPPERCASE(username) + ":" + UPPERCASE(password) )

    which is exactly the identity hash of the SRP6 verifier, so both are
    produced by SRP6Crypto.compute_identity_hash.

    Two more types exist for custom web cores:
        * ``sha1``       SHA1(password)
        * ``vbulletin``  MD5(password + legacy_salt)
    """

    def __init__(self, config: AuthConfig | None = None, crypto: SRP6Crypto | None = None) -> None:
        self.config = config or AuthConfig()
        self.crypto = crypto or SRP6Crypto(self.config.srp6, self.config.normalization)

    def generate(self, username: str, password: str) -> str:
        """
        Compute the stored legacy hash for the configured hash type.

        Returns:
            Hex digest, uppercase unless ``uppercase_digest`` is off.
        """
        hash_type = self.config.legacy_hash

        if hash_type is LegacyHashType.TRINITYCORE:
            digest = self.crypto.compute_identity_hash(username, password)
        elif hash_type is LegacyHashType.SHA1:
            digest = hashlib.sha1(password.encode("utf-8")).hexdigest()
        else:
            salted = password + self.config.legacy_salt
            digest = hashlib.md5(salted.encode("utf-8")).hexdigest()

        return digest.upper() if self.config.uppercase_digest else digest.lower()

    def verify(self, username: str, password: str, stored_hash: str) -> bool:
        """
        Validate a cleartext password against an existing legacy hash.
        Hex case is ignored; the comparison is constant-time.
        """
        if not stored_hash:
            return False
        computed = self.generate(username, password).upper().encode("ascii")
        try:
            stored = stored_hash.strip().upper().encode("ascii")
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(computed, stored)


def legacy_hash(username: str, password: str) -> str:
    """SHA1(UPPER(username):UPPER(password)) as uppercase hex."""
    return SRP6Crypto().compute_identity_hash(username, password)
