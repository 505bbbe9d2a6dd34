import os
import sys
import tempfile
import unittest
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud  # noqa: E402
from db import database as db_database  # noqa: E402
from db import documents  # noqa: E402
from db.models import CartItem  # noqa: E402


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    async def asyncSetUp(self):
        # Touch initialization by opening a connection
        async with db_database.connect() as conn:
            cur = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table';"
            )
            tables = {row[0] for row in await cur.fetchall()}
            await cur.close()
        self.assertTrue({"documents", "accounts"} <= tables)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def _add_product(self, name="Kitap", price="10.00", category="ebook"):
        return await crud.add_product(
            {
                "name": name,
                "description": f"{name} açıklaması",
                "price": Decimal(price),
                "category": category,
                "image": "",
            }
        )

    # ---------- Document store ----------

    async def test_document_store_basics(self):
        doc = await documents.add_document("things", {"a": 1, "id": "ignored"})
        self.assertIn("createdAt", doc)
        self.assertNotEqual(doc["id"], "ignored")

        got = await documents.get_document("things", doc["id"])
        self.assertEqual(got["a"], 1)
        self.assertEqual(got["id"], doc["id"])
        self.assertIsNone(await documents.get_document("things", "missing"))

        await documents.update_document("things", doc["id"], {"b": 2})
        got = await documents.get_document("things", doc["id"])
        self.assertEqual((got["a"], got["b"]), (1, 2))

        with self.assertRaises(documents.DocumentNotFoundError):
            await documents.update_document("things", "missing", {"b": 2})

        await documents.set_document("things", "fixed", {"x": 1, "y": 1})
        await documents.set_document("things", "fixed", {"y": 2}, merge=True)
        self.assertEqual(
            await documents.get_document("things", "fixed"),
            {"id": "fixed", "x": 1, "y": 2},
        )
        await documents.set_document("things", "fixed", {"y": 3})
        self.assertNotIn("x", await documents.get_document("things", "fixed"))

        await documents.delete_document("things", doc["id"])
        await documents.delete_document("things", doc["id"])
        self.assertIsNone(await documents.get_document("things", doc["id"]))

    async def test_query_filters_and_ordering(self):
        await documents.set_document("things", "a", {"kind": "x", "rank": 2})
        await documents.set_document("things", "b", {"kind": "y", "rank": 1})
        await documents.set_document("things", "c", {"kind": "x", "rank": 3})
        await documents.set_document("other", "d", {"kind": "x", "rank": 0})

        xs = await documents.query_documents("things", where={"kind": "x"})
        self.assertEqual([d["id"] for d in xs], ["a", "c"])

        ordered = await documents.query_documents("things", order_by="rank")
        self.assertEqual([d["id"] for d in ordered], ["b", "a", "c"])

        desc = await documents.query_documents(
            "things", order_by="rank", descending=True
        )
        self.assertEqual([d["id"] for d in desc], ["c", "a", "b"])

    # ---------- Products ----------

    async def test_product_crud(self):
        self.assertEqual(await crud.list_products(), [])

        first = await self._add_product("Birinci", "10.00")
        second = await self._add_product("İkinci", "20.50", "course")
        self.assertIsNotNone(first)
        self.assertEqual(second.price, Decimal("20.50"))
        self.assertTrue(first.created_at)

        # newest first
        products = await crud.list_products()
        self.assertEqual([p.id for p in products], [second.id, first.id])

        self.assertTrue(
            await crud.update_product(first.id, {"price": Decimal("12.00")})
        )
        self.assertEqual((await crud.get_product(first.id)).price, Decimal("12.00"))
        self.assertFalse(await crud.update_product("missing", {"name": "x"}))

        self.assertTrue(await crud.delete_product(first.id))
        self.assertIsNone(await crud.get_product(first.id))
        self.assertEqual([p.id for p in await crud.list_products()], [second.id])

    # ---------- Users & favorites ----------

    async def test_users_and_uniqueness(self):
        self.assertFalse(await crud.username_exists("ayse"))
        self.assertFalse(await crud.email_exists("ayse@example.com"))
        self.assertFalse(await crud.admin_exists())

        self.assertTrue(
            await crud.create_user("u1", "ayse", "Ayşe", "ayse@example.com")
        )
        user = await crud.get_user("u1")
        self.assertEqual(user.username, "ayse")
        self.assertEqual(user.role, "user")
        self.assertFalse(user.is_admin)
        self.assertIsNone(await crud.get_user("nobody"))

        self.assertTrue(await crud.username_exists("ayse"))
        self.assertTrue(await crud.email_exists("ayse@example.com"))
        self.assertFalse(await crud.username_exists("mehmet"))

        await crud.create_user("u2", "root", "Root", "root@example.com", "admin")
        self.assertTrue(await crud.admin_exists())

        self.assertEqual(await crud.get_favorites("u1"), [])
        self.assertTrue(await crud.update_favorites("u1", ["p1", "p2"]))
        self.assertEqual(await crud.get_favorites("u1"), ["p1", "p2"])
        self.assertEqual(await crud.get_favorites("nobody"), [])
        self.assertFalse(await crud.update_favorites("nobody", ["p1"]))

    # ---------- Carts ----------

    async def test_cart_operations(self):
        self.assertEqual(await crud.get_cart("u1"), [])

        items = [
            CartItem(id="p1", name="Bir", price=Decimal("10.00"), category="ebook"),
            CartItem(id="p2", name="İki", price=Decimal("5.50"), category="course"),
        ]
        self.assertTrue(await crud.update_cart("u1", items))
        self.assertTrue(await crud.update_cart("u2", items[:1]))
        self.assertEqual(await crud.get_cart("u1"), items)

        self.assertTrue(await crud.remove_product_from_carts("p1"))
        self.assertEqual([i.id for i in await crud.get_cart("u1")], ["p2"])
        self.assertEqual(await crud.get_cart("u2"), [])

        self.assertTrue(await crud.update_cart("u1", []))
        self.assertEqual(await crud.get_cart("u1"), [])

    async def test_cart_item_dict_conversion(self):
        item = CartItem(id="p1", name="Bir", price=Decimal("10.00"), category="ebook")
        raw = crud.cart_item_to_dict(item)
        self.assertEqual(raw["price"], "10.00")
        self.assertEqual(crud.cart_items_from_dicts([raw]), [item])

    # ---------- Orders ----------

    async def test_orders(self):
        items = [
            CartItem(id="p1", name="Bir", price=Decimal("100.00"), category="ebook"),
            CartItem(id="p2", name="İki", price=Decimal("0.10"), category="course"),
        ]
        first = await crud.add_order("u1", items[:1])
        second = await crud.add_order("u1", items)
        await crud.add_order("u2", items)

        self.assertEqual(first.total, Decimal("100.00"))
        self.assertEqual(second.total, Decimal("100.10"))
        self.assertEqual(second.status, "completed")
        self.assertEqual(
            [(line.product_id, line.quantity) for line in second.items],
            [("p1", 1), ("p2", 1)],
        )

        orders = await crud.list_orders("u1")
        self.assertEqual([o.id for o in orders], [second.id, first.id])
        self.assertEqual(await crud.list_orders("nobody"), [])

    # ---------- Reviews ----------

    async def test_reviews(self):
        r1 = await crud.add_review("p1", "u1", "Ayşe", "Harika")
        r2 = await crud.add_review("p1", "u2", "Mehmet", "İyi")
        await crud.add_review("p2", "u1", "Ayşe", "Başka ürün")

        reviews = await crud.list_reviews("p1")
        self.assertEqual([r.id for r in reviews], [r2.id, r1.id])
        self.assertEqual(reviews[1].author, "Ayşe")

        self.assertTrue(await crud.delete_review(r1.id))
        self.assertEqual([r.id for r in await crud.list_reviews("p1")], [r2.id])

    # ---------- Admin invitations ----------

    async def test_admin_invites_are_single_use(self):
        invite = await crud.create_admin_invite("admin-uid")
        self.assertTrue(invite.code)

        self.assertFalse(await crud.redeem_admin_invite("", "u1"))
        self.assertFalse(await crud.redeem_admin_invite("nope", "u1"))
        self.assertTrue(await crud.redeem_admin_invite(invite.code, "u1"))
        self.assertFalse(await crud.redeem_admin_invite(invite.code, "u2"))

        stored = await documents.get_document(crud.ADMIN_INVITES, invite.code)
        self.assertEqual(stored["redeemedBy"], "u1")

    # ---------- Failure handling ----------

    async def test_store_failures_return_failure_values(self):
        # a directory cannot be opened as a database
        db_database.DB_PATH = self.temp_dir.name
        db_database._initialized = False

        self.assertEqual(await crud.list_products(), [])
        self.assertIsNone(await crud.get_product("p1"))
        self.assertFalse(await crud.create_user("u1", "a", "A", "a@example.com"))
        # uniqueness checks refuse when the store cannot answer
        self.assertTrue(await crud.username_exists("a"))
        self.assertTrue(await crud.email_exists("a@example.com"))
        self.assertIsNone(await crud.add_order("u1", []))


if __name__ == "__main__":
    unittest.main()
