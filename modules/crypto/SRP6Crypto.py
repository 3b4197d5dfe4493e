#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import base64
import binascii
import hashlib
import hmac
import os

from modules.AuthConfig import Normalization, SRP6Parameters
from modules.AuthErrors import MalformedInputError

SALT_LENGTH = 32
PRIVATE_EPHEMERAL_LENGTH = 32
DIGEST_LENGTH = 20


class SRP6Crypto:
    """
    Implements the SRP-6 math used by the AzerothCore account portal.
    This class is the only place where the formulas live; the verifier
    generator, the server exchange, the client helper and the legacy hash
    all call into it.

    Conventions (must stay bit-compatible with the account table):
        * big integers are unsigned, 32-byte big-endian
        * hash inputs are the *uppercase hex text* of the values, padded
          to 64 characters for A, B and S
        * username and password are uppercased before hashing

    The class provides:
        * Identity hash, x and verifier generation
        * Server-side B generation (classic k*v + g^b, or simplified g^b)
        * u, S, K, M1 and M2
        * Server-side verification of A + M1
    """

    def __init__(
        self,
        params: SRP6Parameters | None = None,
        normalization: Normalization = Normalization.ASCII,
    ) -> None:
        """Initialize SRP-6 core parameters."""
        self.params = params or SRP6Parameters()
        self.normalization = normalization

        self.N = self.params.N
        self.G = self.params.g
        self.k = self.params.k
        self.key_length = self.params.key_length

    # ======================================================================
    # Utility: uppercase normalization
    # ======================================================================

    @staticmethod
    def upper_skyfire(text: str) -> str:
        """
        Converts ASCII characters a–z to uppercase while leaving
        all non-basic-latin characters untouched.
        """
        result = []
        for char in text:
            code = ord(char)
            if 0x61 <= code <= 0x7A:  # 'a'–'z'
                result.append(chr(code - 0x20))
            else:
                result.append(char)
        return "".join(result)

    def normalize(self, text: str) -> str:
        """Uppercase a username or password the way the game server does."""
        if self.normalization is Normalization.UNICODE:
            return text.upper()
        return self.upper_skyfire(text)

    # ======================================================================
    # Hash helpers
    # ======================================================================

    @staticmethod
    def sha1(*parts: bytes) -> bytes:
        """
        Computes SHA-1 over concatenated byte sequences.

        Returns:
            bytes: SHA-1 digest (20 bytes).
        """
        sha = hashlib.sha1()
        for part in parts:
            if isinstance(part, int):
                raise TypeError("sha1(): pass ints as bytes explicitly")
            sha.update(part)
        return sha.digest()

    @classmethod
    def sha1_text(cls, *parts: str) -> bytes:
        """SHA-1 over the UTF-8 encoding of concatenated strings."""
        return cls.sha1(*(p.encode("utf-8") for p in parts))

    def pad_hex(self, value: int) -> str:
        """Uppercase hex, left padded to the full key width (64 chars)."""
        return f"{value:0{self.key_length * 2}X}"

    def int_to_bytes(self, value: int) -> bytes:
        """
        Convert integer into fixed-width big-endian bytes.
        Storage and wire fields are always 32 bytes.
        """
        return value.to_bytes(self.key_length, "big")

    @staticmethod
    def bytes_to_int(data: bytes) -> int:
        return int.from_bytes(data, "big")

    @staticmethod
    def constant_time_equals(left: bytes, right: bytes) -> bool:
        return hmac.compare_digest(left, right)

    # ======================================================================
    # Wire decoding
    # ======================================================================

    def decode_public_value(self, text: str, name: str = "A") -> int:
        """
        Parse a public ephemeral sent as hex (up to 64 characters).

        Raises:
            MalformedInputError: not hex, too long, or zero modulo N.
        """
        if not isinstance(text, str):
            raise MalformedInputError(f"{name} must be a hex string")
        text = text.strip()
        if not text or len(text) > self.key_length * 2:
            raise MalformedInputError(f"{name} must be 1..{self.key_length * 2} hex characters")
        # int(text, 16) alone would accept '0x' prefixes and underscores
        if not all(c in "0123456789abcdefABCDEF" for c in text):
            raise MalformedInputError(f"{name} is not valid hex")
        value = int(text, 16)
        if value % self.N == 0:
            raise MalformedInputError(f"{name} mod N is zero")
        return value

    @staticmethod
    def decode_proof(text: str, name: str = "M1") -> bytes:
        """
        Parse a 20-byte proof given either as 40 hex characters or as base64.

        Raises:
            MalformedInputError: neither encoding yields exactly 20 bytes.
        """
        if not isinstance(text, str):
            raise MalformedInputError(f"{name} must be a string")
        text = text.strip()

        # bytes.fromhex skips embedded spaces, so check the charset first
        if len(text) == DIGEST_LENGTH * 2 and all(c in "0123456789abcdefABCDEF" for c in text):
            return bytes.fromhex(text)

        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedInputError(f"{name} is neither hex nor base64")
        if len(raw) != DIGEST_LENGTH:
            raise MalformedInputError(f"{name} must decode to {DIGEST_LENGTH} bytes")
        return raw

    # ======================================================================
    # Account generation
    # ======================================================================

    @staticmethod
    def generate_salt() -> bytes:
        """Return a cryptographically secure 32-byte salt."""
        return os.urandom(SALT_LENGTH)

    def compute_identity_hash(self, username: str, password: str) -> str:
        """
        SHA1(UPPER(username) ":" UPPER(password)) as uppercase hex.

        This is also the legacy ``sha_pass_hash`` value.
        """
        identity = f"{self.normalize(username)}:{self.normalize(password)}"
        return self.sha1_text(identity).hex().upper()

    def compute_x(self, salt: bytes, identity_hash: str) -> int:
        """x = SHA1(HEX(salt) || identityHash), hashed as text, big-endian."""
        if len(salt) != SALT_LENGTH:
            raise ValueError(f"salt must be {SALT_LENGTH} bytes")
        digest = self.sha1_text(salt.hex().upper(), identity_hash.upper())
        return self.bytes_to_int(digest)

    def compute_verifier(self, username: str, password: str, salt: bytes) -> bytes:
        """
        Create the SRP verifier v = g^x mod N.

        Args:
            username (str): Username (uppercased here).
            password (str): Password (uppercased here).
            salt (bytes): 32-byte random salt.

        Returns:
            bytes: 32-byte big-endian verifier.
        """
        identity_hash = self.compute_identity_hash(username, password)
        x = self.compute_x(salt, identity_hash)
        return self.int_to_bytes(pow(self.G, x, self.N))

    def check_password(self, username: str, password: str, salt: bytes, verifier: bytes) -> bool:
        """
        Verify that username+password produces the expected verifier.

        Returns:
            bool: True if the verifier matches, False otherwise.
        """
        expected = self.compute_verifier(username, password, salt)
        return self.constant_time_equals(expected, verifier)

    def make_registration(self, username: str, password: str) -> tuple[bytes, bytes]:
        """
        Generate 32-byte salt + 32-byte verifier from username/password.

        Returns:
            (salt_bytes, verifier_bytes)
        """
        salt = self.generate_salt()
        return salt, self.compute_verifier(username, password, salt)

    # ======================================================================
    # Server-side B generation
    # ======================================================================

    @staticmethod
    def server_make_b_value() -> int:
        """
        Generate a random 32-byte private value b.

        Returns:
            int: Private server exponent b.
        """
        return int.from_bytes(os.urandom(PRIVATE_EPHEMERAL_LENGTH), "big")

    def compute_B(self, b_value: int, verifier: bytes) -> int:
        """B = (k*v + g^b) mod N. With k = 0 this is the simplified g^b."""
        if len(verifier) != self.key_length:
            raise ValueError(f"Verifier must be {self.key_length} bytes")
        v_int = self.bytes_to_int(verifier)
        return (self.k * v_int + pow(self.G, b_value, self.N)) % self.N

    def server_make_B(self, verifier: bytes) -> tuple[int, int]:
        """
        Generate b and compute the server public value B.

        Returns:
            (b, B) as integers.
        """
        b_value = self.server_make_b_value()
        return b_value, self.compute_B(b_value, verifier)

    # ======================================================================
    # Handshake math: u, S, K
    # ======================================================================

    def compute_u(self, a_public: int, b_public: int) -> int:
        """Scrambling parameter u = SHA1(pad(A) || pad(B))."""
        return self.bytes_to_int(self.sha1_text(self.pad_hex(a_public), self.pad_hex(b_public)))

    def compute_shared_secret(self, a_public: int, verifier: bytes, b_value: int, u_value: int) -> int:
        """
        Compute server shared secret S = (A * v^u)^b mod N.
        """
        v_int = self.bytes_to_int(verifier)
        base = (a_public * pow(v_int, u_value, self.N)) % self.N
        return pow(base, b_value, self.N)

    def compute_session_key(self, s_value: int) -> bytes:
        """K = SHA1(pad(S)), 20 bytes."""
        return self.sha1_text(self.pad_hex(s_value))

    # ======================================================================
    # Proof values M1 and M2
    # ======================================================================

    def compute_M1(self, a_public: int, b_public: int, k_bytes: bytes) -> bytes:
        """M1 = SHA1(pad(A) || pad(B) || HEX(K))."""
        return self.sha1_text(self.pad_hex(a_public), self.pad_hex(b_public), k_bytes.hex().upper())

    def compute_M2(self, a_public: int, m1_bytes: bytes, k_bytes: bytes) -> bytes:
        """M2 = SHA1(pad(A) || HEX(M1) || HEX(K))."""
        return self.sha1_text(self.pad_hex(a_public), m1_bytes.hex().upper(), k_bytes.hex().upper())

    # ======================================================================
    # Full server verification (A + M1)
    # ======================================================================

    def server_verify(
        self,
        verifier: bytes,
        b_value: int,
        b_public: int,
        a_public: int,
        m1_client: bytes,
    ) -> tuple[bool, bytes | None, bytes | None]:
        """
        Perform full server-side verification of the client's A + M1.

        Returns:
            (True, M2_bytes, K_bytes) on success, (False, None, None) on failure.
        """
        u_value = self.compute_u(a_public, b_public)
        s_value = self.compute_shared_secret(a_public, verifier, b_value, u_value)
        k_bytes = self.compute_session_key(s_value)
        m1_server = self.compute_M1(a_public, b_public, k_bytes)

        if not self.constant_time_equals(m1_server, m1_client):
            return False, None, None

        m2 = self.compute_M2(a_public, m1_client, k_bytes)
        return True, m2, k_bytes
