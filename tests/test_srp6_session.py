#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Unit tests for the SRP6Session exchange state machine."""

from __future__ import annotations

import base64
import unittest

from modules.AuthConfig import SRP6Parameters
from modules.AuthErrors import (
    AuthenticationFailure,
    MalformedInputError,
    ProtocolStateError,
)
from modules.crypto.SRP6Client import SRP6Client
from modules.crypto.SRP6Crypto import SRP6Crypto
from modules.crypto.SRP6Session import SessionState, SRP6Session


class SRP6SessionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.core = SRP6Crypto()
        self.salt, self.verifier = self.core.make_registration("alice", "Secret123!")

    def _session(self, core: SRP6Crypto | None = None, **kwargs) -> SRP6Session:
        core = core or self.core
        verifier = core.compute_verifier("alice", "Secret123!", self.salt)
        return SRP6Session("ALICE", self.salt, verifier, core, **kwargs)

    def _proof(self, challenge: dict, password: str = "Secret123!", k: int = 3) -> dict:
        client = SRP6Client("alice", password, k=k)
        client.load_challenge(challenge)
        self.client = client
        return client.build_proof()

    # -------------------------------------------------------------
    # Challenge
    # -------------------------------------------------------------

    def test_build_challenge_payload(self) -> None:
        session = self._session()
        self.assertIs(session.state, SessionState.AWAITING_CHALLENGE)

        challenge = session.build_challenge()

        self.assertIs(session.state, SessionState.CHALLENGE_ISSUED)
        self.assertEqual(base64.b64decode(challenge["salt"]), self.salt)
        self.assertEqual(len(challenge["B"]), 64)
        self.assertEqual(challenge["B"], challenge["B"].upper())
        self.assertEqual(challenge["N"], "894B645E89E1535BBDAD5B8B290650530801B18EBFBF5E8FAB3C82872A3E9BB7")
        self.assertEqual(challenge["g"], "7")

    def test_challenge_only_once(self) -> None:
        session = self._session()
        session.build_challenge()

        with self.assertRaises(ProtocolStateError):
            session.build_challenge()

    # -------------------------------------------------------------
    # Proof
    # -------------------------------------------------------------

    def test_round_trip_verified(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge())

        result = session.verify_proof(proof["A"], proof["M1"])

        self.assertIs(session.state, SessionState.VERIFIED)
        self.assertEqual(result.session_key, self.client.K)
        self.assertTrue(self.client.verify_server(result.to_dict()["M2"]))

    def test_proof_accepts_base64_m1(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge())
        m1_b64 = base64.b64encode(bytes.fromhex(proof["M1"])).decode()

        session.verify_proof(proof["A"], m1_b64)

        self.assertIs(session.state, SessionState.VERIFIED)

    def test_wrong_password_rejected(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge(), password="WrongPass!")

        with self.assertRaises(AuthenticationFailure):
            session.verify_proof(proof["A"], proof["M1"])

        self.assertIs(session.state, SessionState.REJECTED)

    def test_simplified_formula_round_trip(self) -> None:
        core = SRP6Crypto(SRP6Parameters(k=0))
        session = self._session(core)
        proof = self._proof(session.build_challenge(), k=0)

        session.verify_proof(proof["A"], proof["M1"])

        self.assertIs(session.state, SessionState.VERIFIED)

    def test_classic_client_fails_against_simplified_server(self) -> None:
        core = SRP6Crypto(SRP6Parameters(k=0))
        session = self._session(core)
        proof = self._proof(session.build_challenge(), k=3)

        with self.assertRaises(AuthenticationFailure):
            session.verify_proof(proof["A"], proof["M1"])

    def test_decoy_session_always_rejected(self) -> None:
        """Even a correct proof fails on a session for an unknown account."""
        session = self._session(known=False)
        proof = self._proof(session.build_challenge())

        with self.assertRaises(AuthenticationFailure):
            session.verify_proof(proof["A"], proof["M1"])
        self.assertIs(session.state, SessionState.REJECTED)

    def test_malformed_inputs(self) -> None:
        cases = [
            ("not-hex", "00" * 20),
            ("0" * 64, "00" * 20),
            ("AB" * 32, "short"),
        ]
        for A, M1 in cases:
            with self.subTest(A=A, M1=M1):
                session = self._session()
                session.build_challenge()
                with self.assertRaises(MalformedInputError):
                    session.verify_proof(A, M1)
                self.assertIs(session.state, SessionState.REJECTED)

    # -------------------------------------------------------------
    # State errors
    # -------------------------------------------------------------

    def test_proof_before_challenge(self) -> None:
        session = self._session()
        with self.assertRaises(ProtocolStateError):
            session.verify_proof("AB" * 32, "00" * 20)

    def test_proof_only_once(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge())
        session.verify_proof(proof["A"], proof["M1"])

        with self.assertRaises(ProtocolStateError):
            session.verify_proof(proof["A"], proof["M1"])

    def test_expired_session_refuses_proof(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge())

        self.assertTrue(session.expire())
        self.assertIs(session.state, SessionState.EXPIRED)
        with self.assertRaises(ProtocolStateError):
            session.verify_proof(proof["A"], proof["M1"])

    def test_expire_ignores_terminal_sessions(self) -> None:
        session = self._session()
        proof = self._proof(session.build_challenge())
        session.verify_proof(proof["A"], proof["M1"])

        self.assertFalse(session.expire())
        self.assertIs(session.state, SessionState.VERIFIED)


if __name__ == "__main__":
    unittest.main()
