import os
import sys
import tempfile
import unittest
from unittest import mock

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud  # noqa: E402
from db import database as db_database  # noqa: E402
from db import seed  # noqa: E402
from utils import config  # noqa: E402
from db.identity import (  # noqa: E402
    AuthError,
    IdentityProvider,
    hash_password,
    verify_password,
)


class IdentityTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False
        self.identity = IdentityProvider()
        self.events = []

        async def listener(account):
            self.events.append(account.uid if account else None)

        self.unsubscribe = self.identity.on_auth_state_changed(listener)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_password_hashing(self):
        hashed = hash_password("secret1")
        self.assertNotIn("secret1", hashed)
        self.assertTrue(verify_password("secret1", hashed))
        self.assertFalse(verify_password("secret2", hashed))
        self.assertFalse(verify_password("secret1", "not-a-hash"))
        # salted
        self.assertNotEqual(hashed, hash_password("secret1"))

    async def test_create_account_does_not_sign_in(self):
        account = await self.identity.create_account(
            "  Ayse@Example.com ", "secret1", "Ayşe"
        )
        self.assertEqual(account.email, "ayse@example.com")
        self.assertIsNone(self.identity.current_user)
        self.assertEqual(self.events, [])

    async def test_create_account_errors(self):
        await self.identity.create_account("ayse@example.com", "secret1")

        with self.assertRaises(AuthError) as ctx:
            await self.identity.create_account("AYSE@example.com", "secret1")
        self.assertEqual(ctx.exception.code, AuthError.EMAIL_IN_USE)

        with self.assertRaises(AuthError) as ctx:
            await self.identity.create_account("new@example.com", "12345")
        self.assertEqual(ctx.exception.code, AuthError.WEAK_PASSWORD)

        with self.assertRaises(AuthError) as ctx:
            await self.identity.create_account("not-an-email", "secret1")
        self.assertEqual(ctx.exception.code, AuthError.INVALID_EMAIL)

    async def test_sign_in_and_out_notify_listeners(self):
        account = await self.identity.create_account("ayse@example.com", "secret1")

        with self.assertRaises(AuthError) as ctx:
            await self.identity.sign_in("ayse@example.com", "wrong-password")
        self.assertEqual(ctx.exception.code, AuthError.WRONG_PASSWORD)

        with self.assertRaises(AuthError) as ctx:
            await self.identity.sign_in("ghost@example.com", "secret1")
        self.assertEqual(ctx.exception.code, AuthError.USER_NOT_FOUND)
        self.assertEqual(self.events, [])

        signed_in = await self.identity.sign_in("Ayse@example.com", "secret1")
        self.assertEqual(signed_in.uid, account.uid)
        self.assertEqual(self.identity.current_user, signed_in)

        await self.identity.sign_out()
        self.assertIsNone(self.identity.current_user)
        self.assertEqual(self.events, [account.uid, None])

        self.unsubscribe()
        await self.identity.sign_in("ayse@example.com", "secret1")
        self.assertEqual(self.events, [account.uid, None])

    async def test_delete_account(self):
        account = await self.identity.create_account("ayse@example.com", "secret1")
        await self.identity.sign_in("ayse@example.com", "secret1")

        await self.identity.delete_account(account.uid)
        self.assertIsNone(self.identity.current_user)
        with self.assertRaises(AuthError) as ctx:
            await self.identity.sign_in("ayse@example.com", "secret1")
        self.assertEqual(ctx.exception.code, AuthError.USER_NOT_FOUND)

        # the address is free again
        await self.identity.create_account("ayse@example.com", "secret1")


class SeedTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False
        self.identity = IdentityProvider()

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_default_products_seeded_once(self):
        self.assertEqual(await seed.seed_default_products(), 3)
        self.assertEqual(await seed.seed_default_products(), 0)

        products = await crud.list_products()
        self.assertEqual(
            sorted(p.category for p in products), ["course", "ebook", "template"]
        )

    async def test_seed_admin(self):
        # nothing configured, nothing created
        with mock.patch.object(config, "ADMIN_EMAIL", ""), mock.patch.object(
            config, "ADMIN_PASSWORD", ""
        ):
            self.assertFalse(await seed.seed_admin(self.identity))

        self.assertTrue(
            await seed.seed_admin(self.identity, "admin@example.com", "secret1")
        )
        self.assertTrue(await crud.admin_exists())
        self.assertTrue(await crud.email_exists("admin@example.com"))

        # an admin already exists
        self.assertFalse(
            await seed.seed_admin(self.identity, "second@example.com", "secret1")
        )
        account = await self.identity.sign_in("admin@example.com", "secret1")
        self.assertTrue((await crud.get_user(account.uid)).is_admin)


if __name__ == "__main__":
    unittest.main()
