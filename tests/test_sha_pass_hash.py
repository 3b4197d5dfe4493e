import unittest

from modules.AuthConfig import AuthConfig
from modules.crypto.ShaPassHash import ShaPassHash, legacy_hash
from modules.crypto.SRP6Crypto import SRP6Crypto


def _hasher(**auth) -> ShaPassHash:
    return ShaPassHash(AuthConfig.from_dict({"auth": {"mode": "legacy", **auth}}))


class TestShaPassHash(unittest.TestCase):
    """Legacy sha_pass_hash generation and verification."""

    def test_trinitycore_vector(self) -> None:
        self.assertEqual(
            _hasher().generate("alice", "Secret123!"),
            "B9A1ADBAA0AD26FFD61DD77B90F465CEE5C83CEB",
        )

    def test_module_helper_matches(self) -> None:
        self.assertEqual(legacy_hash("Alice", "secret123!"), "B9A1ADBAA0AD26FFD61DD77B90F465CEE5C83CEB")

    def test_same_primitive_as_identity_hash(self) -> None:
        """The legacy hash and the SRP6 identity hash must never drift apart."""
        core = SRP6Crypto()
        for username, password in (("testuser", "password1"), ("Alice", "Secret123!"), ("zoë", "wachtwoord")):
            with self.subTest(username=username):
                self.assertEqual(
                    _hasher().generate(username, password),
                    core.compute_identity_hash(username, password),
                )

    def test_lowercase_digest(self) -> None:
        self.assertEqual(
            _hasher(uppercase_digest=False).generate("alice", "Secret123!"),
            "b9a1adbaa0ad26ffd61dd77b90f465cee5c83ceb",
        )

    def test_sha1_type(self) -> None:
        self.assertEqual(
            _hasher(legacy_hash="sha1").generate("ignored", "Secret123!"),
            "AF6DAF5F1A60C91F73361DD476C97E496BEDA065",
        )

    def test_vbulletin_type(self) -> None:
        self.assertEqual(
            _hasher(legacy_hash="vbulletin", legacy_salt="xyz").generate("ignored", "Secret123!"),
            "8D48BD5A38567D09D1E5A6E7023ED3E5",
        )

    def test_verify(self) -> None:
        hasher = _hasher()
        stored = hasher.generate("alice", "Secret123!")

        self.assertTrue(hasher.verify("ALICE", "secret123!", stored))
        self.assertTrue(hasher.verify("alice", "Secret123!", stored.lower()))
        self.assertFalse(hasher.verify("alice", "WrongPass!", stored))
        self.assertFalse(hasher.verify("alice", "Secret123!", ""))
        self.assertFalse(hasher.verify("alice", "Secret123!", "ÄÖ" * 20))


if __name__ == "__main__":
    unittest.main()
