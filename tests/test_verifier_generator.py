#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Unit tests for VerifierGenerator and Credential."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from modules.AuthConfig import AuthConfig
from modules.AuthErrors import InvalidInputError
from modules.crypto import SRP6Crypto as srp6_crypto_module
from modules.crypto.VerifierGenerator import Credential, VerifierGenerator

FIXED_SALT = bytes(range(1, 33))
VERIFIER_HEX = "82271AA3CFD0F763C0FFC91872E4D9A6D40856FFE6B6E59D87E208515CA008F9"


class VerifierGeneratorTest(unittest.TestCase):
    def setUp(self) -> None:
        self.generator = VerifierGenerator(AuthConfig())

    def test_generate_credential_fixed_width(self) -> None:
        """Salt and verifier are 32 bytes for short, long and non-ASCII input."""
        cases = [
            ("abc", "12345678"),
            ("a" * 32, "p" * 16),
            ("jörmungandr", "pässwörd"),
            ("alice", "Secret123!"),
        ]
        for username, password in cases:
            with self.subTest(username=username):
                credential = self.generator.generate_credential(username, password)
                self.assertEqual(len(credential.salt), 32)
                self.assertEqual(len(credential.verifier), 32)

    def test_fresh_salt_each_call(self) -> None:
        first = self.generator.generate_credential("alice", "Secret123!")
        second = self.generator.generate_credential("alice", "Secret123!")

        self.assertNotEqual(first.salt, second.salt)
        self.assertNotEqual(first.verifier, second.verifier)

    def test_generate_credential_with_fixed_salt(self) -> None:
        """With os.urandom pinned the generator reproduces the frozen verifier."""
        with patch.object(srp6_crypto_module.os, "urandom", return_value=FIXED_SALT):
            credential = self.generator.generate_credential("TESTUSER", "PASSWORD1")

        self.assertEqual(credential.salt, FIXED_SALT)
        self.assertEqual(credential.verifier.hex().upper(), VERIFIER_HEX)

    def test_check_password(self) -> None:
        credential = self.generator.generate_credential("alice", "Secret123!")

        self.assertTrue(self.generator.check_password("ALICE", "SECRET123!", credential))
        self.assertFalse(self.generator.check_password("alice", "WrongPass!", credential))

    # -------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------

    def test_username_length_bounds(self) -> None:
        for username in ("ab", "x" * 33, ""):
            with self.subTest(username=username):
                with self.assertRaises(InvalidInputError):
                    self.generator.generate_credential(username, "Secret123!")

    def test_username_length_counts_normalized_form(self) -> None:
        """Unicode uppercasing of 'ß' yields 'SS' and may push a name past the column width."""
        username = "a" * 31 + "ß"
        unicode_generator = VerifierGenerator(AuthConfig.from_dict({"auth": {"normalization": "unicode"}}))

        with self.assertRaises(InvalidInputError):
            unicode_generator.validate_username(username)
        self.assertEqual(unicode_generator.validate_username("a" * 30 + "ß"), "A" * 30 + "SS")
        self.assertEqual(self.generator.validate_username(username), "A" * 31 + "ß")

    def test_username_forbidden_characters(self) -> None:
        for username in ("ali:ce", "ali ce", "tab\tbed", "bell\x07"):
            with self.subTest(username=username):
                with self.assertRaises(InvalidInputError):
                    self.generator.validate_username(username)

    def test_username_is_normalized(self) -> None:
        self.assertEqual(self.generator.validate_username("alice"), "ALICE")

    def test_password_policy(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            self.generator.generate_credential("alice", "short")
        self.assertIn("at least 8", ctx.exception.public_message)

        with self.assertRaises(InvalidInputError):
            self.generator.generate_credential("alice", "x" * 17)

        with self.assertRaises(InvalidInputError):
            self.generator.generate_credential("alice", None)

    def test_legacy_minimum_password_length(self) -> None:
        generator = VerifierGenerator(AuthConfig.from_dict({"auth": {"mode": "legacy"}}))

        credential = generator.generate_credential("alice", "abcd")
        self.assertEqual(len(credential.verifier), 32)
        with self.assertRaises(InvalidInputError):
            generator.generate_credential("alice", "abc")

    # -------------------------------------------------------------
    # Credential value object
    # -------------------------------------------------------------

    def test_credential_base64(self) -> None:
        credential = Credential(FIXED_SALT, bytes.fromhex(VERIFIER_HEX))
        restored = Credential.from_b64(credential.salt_b64, credential.verifier_b64)

        self.assertEqual(restored, credential)
        self.assertEqual(credential.salt_b64, "AQIDBAUGBwgJCgsMDQ4PEBESExQVFhcYGRobHB0eHyA=")

    def test_credential_rejects_wrong_width(self) -> None:
        with self.assertRaises(ValueError):
            Credential(b"\x00" * 31, b"\x00" * 32)
        with self.assertRaises(ValueError):
            Credential(b"\x00" * 32, b"\x00" * 33)

    def test_credential_repr_hides_verifier(self) -> None:
        credential = Credential(FIXED_SALT, bytes.fromhex(VERIFIER_HEX))
        self.assertNotIn("82271A", repr(credential))


if __name__ == "__main__":
    unittest.main()
