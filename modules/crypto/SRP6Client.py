#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SRP6Client – client-side SRP-6 mathematics for the account portal.

Purpose
-------
The browser or game launcher normally runs this part. It lives here so the
CLI can simulate a full login and so tests can drive the server exchange
end to end. All hashing goes through SRP6Crypto, which keeps the client and
the server on the same formulas.

N, g and B are taken from the challenge payload, never from configuration.
The multiplier k must match the server's ``b_formula`` (3 classic, 0
simplified).
"""

import base64
import os

from modules.AuthConfig import Normalization, SRP6Parameters
from modules.crypto.SRP6Crypto import SRP6Crypto, PRIVATE_EPHEMERAL_LENGTH


class SRP6Client:
    """
    Responsibilities
    ----------------
    * Compute A = g^a mod N
    * Compute shared secret S and session key K
    * Compute M1 proof sent to server
    * Check the server's M2
    """

    def __init__(
        self,
        username: str,
        password: str,
        k: int = 3,
        normalization: Normalization = Normalization.ASCII,
        a_value: int | None = None,
    ) -> None:
        self.username = username
        self.password = password
        self.k = k
        self.normalization = normalization

        # Client secret exponent (private key)
        self.a_int = a_value if a_value is not None else int.from_bytes(
            os.urandom(PRIVATE_EPHEMERAL_LENGTH), "big"
        )

        # Filled once the challenge arrives
        self.core: SRP6Crypto | None = None
        self.salt: bytes | None = None
        self.B_int: int | None = None
        self.A_int: int | None = None
        self.K: bytes | None = None
        self.M1: bytes | None = None

    # ------------------------------------------------------------------
    def load_challenge(self, challenge: dict) -> None:
        """
        Load SRP parameters from a ``{salt, B, N, g}`` payload.
        """
        params = SRP6Parameters(N=int(challenge["N"], 16), g=int(challenge["g"], 16), k=self.k)
        self.core = SRP6Crypto(params, self.normalization)
        self.salt = base64.b64decode(challenge["salt"])
        self.B_int = int(challenge["B"], 16)

        if self.B_int % params.N == 0:
            raise ValueError("Invalid server public value (B % N == 0)")

    # ------------------------------------------------------------------
    def compute_A(self) -> str:
        """
        Compute client public value A = g^a mod N.

        Returns:
            str: A as 64 uppercase hex characters.
        """
        if self.core is None:
            raise RuntimeError("load_challenge() must be called first")
        self.A_int = pow(self.core.G, self.a_int, self.core.N)
        return self.core.pad_hex(self.A_int)

    # ------------------------------------------------------------------
    def compute_shared_key(self) -> bytes:
        """
        Derive S = (B - k*g^x)^(a + u*x) mod N and K = SHA1(S).
        """
        if self.A_int is None:
            self.compute_A()

        core = self.core
        identity_hash = core.compute_identity_hash(self.username, self.password)
        x = core.compute_x(self.salt, identity_hash)
        u = core.compute_u(self.A_int, self.B_int)

        v = pow(core.G, x, core.N)
        g_b = (self.B_int - self.k * v) % core.N
        s_value = pow(g_b, self.a_int + u * x, core.N)

        self.K = core.compute_session_key(s_value)
        return self.K

    # ------------------------------------------------------------------
    def compute_M1(self) -> str:
        """
        Compute client proof value M1.

        Returns:
            str: 40 uppercase hex characters.
        """
        if self.K is None:
            self.compute_shared_key()
        self.M1 = self.core.compute_M1(self.A_int, self.B_int, self.K)
        return self.M1.hex().upper()

    def build_proof(self) -> dict:
        """Return the ``{A, M1}`` proof payload."""
        A = self.compute_A()
        return {"A": A, "M1": self.compute_M1()}

    def verify_server(self, M2: str) -> bool:
        """Check the server's M2 = SHA1(A || M1 || K)."""
        if self.M1 is None:
            raise RuntimeError("compute_M1() must be called first")
        expected = self.core.compute_M2(self.A_int, self.M1, self.K)
        try:
            received = bytes.fromhex(M2)
        except ValueError:
            return False
        return self.core.constant_time_equals(expected, received)
