#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import threading
from dataclasses import dataclass
from enum import Enum

from modules.AuthErrors import AuthenticationFailure, ProtocolStateError
from modules.crypto.SRP6Crypto import SRP6Crypto


class SessionState(str, Enum):
    AWAITING_CHALLENGE = "awaiting_challenge"
    CHALLENGE_ISSUED = "challenge_issued"
    AWAITING_PROOF = "awaiting_proof"
    VERIFIED = "verified"
    REJECTED = "rejected"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ProofResult:
    M2: bytes
    session_key: bytes

    def to_dict(self) -> dict:
        return {
            "M2": self.M2.hex().upper(),
            "sessionKey": self.session_key.hex().upper(),
        }


class SRP6Session:
    """
    Server side of one login attempt.
    Stores username, salt, verifier and the ephemeral b/B,
    and delegates math to SRP6Crypto.

    A decoy session (``known=False``) is used for usernames that do not
    exist: it issues a normal looking challenge and always ends REJECTED.
    """

    def __init__(
        self,
        username: str,
        salt: bytes,
        verifier: bytes,
        crypto: SRP6Crypto,
        known: bool = True,
    ) -> None:
        self.username = username
        self.salt = salt
        self.verifier = verifier
        self.core = crypto
        self.known = known

        self._lock = threading.Lock()
        self.state = SessionState.AWAITING_CHALLENGE

        self._b_value: int | None = None
        self.B: int | None = None

    def __repr__(self) -> str:
        return f"SRP6Session(username={self.username!r}, state={self.state.value})"

    # ------------------------------------------------------------------

    def build_challenge(self) -> dict:
        """
        Creates b and B and returns the challenge payload
        ``{salt, B, N, g}`` (salt base64, the rest uppercase hex).
        """
        with self._lock:
            if self.state is not SessionState.AWAITING_CHALLENGE:
                raise ProtocolStateError(f"challenge already issued (state={self.state.value})")

            self._b_value, self.B = self.core.server_make_B(self.verifier)
            self.state = SessionState.CHALLENGE_ISSUED

        return {
            "salt": base64.b64encode(self.salt).decode("ascii"),
            "B": self.core.pad_hex(self.B),
            "N": self.core.params.N_hex,
            "g": self.core.params.g_hex,
        }

    # ------------------------------------------------------------------

    def _claim(self) -> None:
        with self._lock:
            if self.state is not SessionState.CHALLENGE_ISSUED:
                raise ProtocolStateError(f"no challenge awaiting proof (state={self.state.value})")
            self.state = SessionState.AWAITING_PROOF

    def _discard_ephemeral(self) -> None:
        self._b_value = None

    def verify_proof(self, A: str, M1: str) -> ProofResult:
        """
        Validates client proof M1 for public value A.

        Raises:
            ProtocolStateError: the session is not in CHALLENGE_ISSUED.
            MalformedInputError: A or M1 cannot be decoded.
            AuthenticationFailure: the proof does not match.
        """
        self._claim()

        try:
            a_public = self.core.decode_public_value(A, "A")
            m1_client = self.core.decode_proof(M1, "M1")

            ok, M2, k_bytes = self.core.server_verify(
                verifier=self.verifier,
                b_value=self._b_value,
                b_public=self.B,
                a_public=a_public,
                m1_client=m1_client,
            )
        except Exception:
            self.state = SessionState.REJECTED
            raise
        finally:
            self._discard_ephemeral()

        if not ok or not self.known:
            self.state = SessionState.REJECTED
            raise AuthenticationFailure("client proof mismatch")

        self.state = SessionState.VERIFIED
        return ProofResult(M2=M2, session_key=k_bytes)

    # ------------------------------------------------------------------

    def expire(self) -> bool:
        """Move a pending session to EXPIRED. Returns True if it changed."""
        with self._lock:
            if self.state in (SessionState.CHALLENGE_ISSUED, SessionState.AWAITING_PROOF):
                self.state = SessionState.EXPIRED
                self._discard_ephemeral()
                return True
            return False
