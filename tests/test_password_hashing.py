"""Tests for the passlib-backed password hashing helpers."""

from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arivelab import database as database_module  # noqa: E402
from arivelab.database import Database  # noqa: E402


class PasswordHashingTests(unittest.TestCase):
    def test_hash_uses_pbkdf2_and_verifies(self) -> None:
        hashed = database_module._hash_password("supersecurepassword")

        self.assertTrue(hashed.startswith("$pbkdf2-sha256$"))
        self.assertNotIn("supersecurepassword", hashed)
        self.assertTrue(database_module._verify_password("supersecurepassword", hashed))
        self.assertFalse(database_module._verify_password("incorrect", hashed))

    def test_hashes_are_salted(self) -> None:
        first = database_module._hash_password("same-password")
        second = database_module._hash_password("same-password")
        self.assertNotEqual(first, second)

    def test_unrecognised_hash_does_not_verify(self) -> None:
        self.assertFalse(database_module._verify_password("anything", "not-a-real-hash"))

    def test_stored_hash_is_not_plaintext(self) -> None:
        with tempfile.TemporaryDirectory() as tempdir:
            database = Database(Path(tempdir) / "portal.sqlite3")
            database.initialize()
            user = database.create_user("Alice", "alice@example.com", "alice-password-1")

            with database._transaction() as conn:
                stored = conn.execute("SELECT password_hash FROM users WHERE id = ?", (user.id,)).fetchone()[0]

            self.assertNotEqual(stored, "alice-password-1")
            self.assertTrue(database.verify_user_password(user.id, "alice-password-1"))

            database.set_user_password(user.id, "a-brand-new-password")
            self.assertFalse(database.verify_user_password(user.id, "alice-password-1"))
            self.assertTrue(database.verify_user_password(user.id, "a-brand-new-password"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
