"""Tests for the bcrypt password hashing policy."""

from __future__ import annotations

import unittest

from usersvc.security import DEFAULT_BCRYPT_ROUNDS, PasswordHasher


class PasswordHashingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_and_verify_round_trip(self) -> None:
        hashed = self.hasher.hash("supersecurepassword")
        self.assertNotEqual(hashed, "supersecurepassword")
        self.assertTrue(hashed.startswith("$2"))
        self.assertTrue(self.hasher.verify("supersecurepassword", hashed))
        self.assertFalse(self.hasher.verify("incorrect", hashed))

    def test_hashes_are_salted(self) -> None:
        first = self.hasher.hash("same-password")
        second = self.hasher.hash("same-password")
        self.assertNotEqual(first, second)
        self.assertTrue(self.hasher.verify("same-password", first))
        self.assertTrue(self.hasher.verify("same-password", second))

    def test_cost_factor_is_encoded_in_hash(self) -> None:
        hashed = self.hasher.hash("anothersecurepassword")
        self.assertEqual(hashed.split("$")[2], "04")

    def test_empty_password_still_hashes(self) -> None:
        hashed = self.hasher.hash("")
        self.assertTrue(self.hasher.verify("", hashed))
        self.assertFalse(self.hasher.verify("x", hashed))

    def test_verify_rejects_malformed_hash(self) -> None:
        self.assertFalse(self.hasher.verify("password", "not-a-hash"))
        self.assertFalse(self.hasher.verify("password", ""))

    def test_default_rounds(self) -> None:
        self.assertEqual(PasswordHasher().rounds, DEFAULT_BCRYPT_ROUNDS)

    def test_rejects_out_of_range_rounds(self) -> None:
        with self.assertRaises(ValueError):
            PasswordHasher(rounds=3)
        with self.assertRaises(ValueError):
            PasswordHasher(rounds=32)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
