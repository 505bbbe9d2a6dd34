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

from db.models import CartItem, Order, OrderLine, Product, User  # noqa: E402
from utils import render  # noqa: E402
from utils.i18n import category_label, format_price  # noqa: E402
from utils.local_storage import LocalStorage, SessionStorage  # noqa: E402
from utils.pure import (  # noqa: E402
    checkout_summary,
    format_card_number,
    format_cvv,
    format_expiry_date,
    generate_markdown_table,
    is_valid_email,
    money,
    order_total,
    search_products,
    validate_card,
)


def _product(pid, name, category, price="10.00", description="Açıklama"):
    return Product(
        id=pid,
        name=name,
        description=description,
        price=Decimal(price),
        category=category,
    )


class MarkdownTableTestCase(unittest.TestCase):
    def test_table_with_headers_and_aligns(self):
        md = generate_markdown_table(["A", "B"], [["1", "2"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | 2 |")

    def test_first_row_as_header_and_escaping(self):
        md = generate_markdown_table(None, [["Ad", "Değer"], ["a|b", "x\ny"]])
        self.assertEqual(md.splitlines()[0], "| Ad | Değer |")
        self.assertEqual(md.splitlines()[2], "| a\\|b | x y |")

    def test_empty_rows_and_bad_aligns(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])


class MoneyAndSearchTestCase(unittest.TestCase):
    def test_money(self):
        self.assertEqual(money("10"), Decimal("10.00"))
        self.assertEqual(money("19,995"), Decimal("20.00"))
        self.assertEqual(money(Decimal("0.1")), Decimal("0.10"))
        for garbage in ("abc", "", "NaN", "inf"):
            with self.assertRaises(ValueError):
                money(garbage)

    def test_email(self):
        self.assertTrue(is_valid_email("a@b.co"))
        self.assertFalse(is_valid_email("a@b"))
        self.assertFalse(is_valid_email("a b@c.de"))
        self.assertFalse(is_valid_email(""))

    def test_search_over_name_description_and_category_label(self):
        products = [
            _product("1", "Python Rehberi", "ebook"),
            _product("2", "Logo Paketi", "template", description="Vektör logolar"),
            _product("3", "Editör", "software"),
        ]
        self.assertEqual([p.id for p in search_products(products, "python")], ["1"])
        self.assertEqual([p.id for p in search_products(products, "vektör")], ["2"])
        self.assertEqual([p.id for p in search_products(products, "şablon")], ["2"])
        self.assertEqual([p.id for p in search_products(products, "e-kitap")], ["1"])
        self.assertEqual(len(search_products(products, "")), 3)
        self.assertEqual(search_products(products, "yok"), [])


class CheckoutMathTestCase(unittest.TestCase):
    def test_summary_applies_twenty_percent_tax(self):
        items = [
            CartItem(id="1", name="A", price=Decimal("100.00"), category="ebook"),
        ]
        summary = checkout_summary(items, Decimal("0.20"))
        self.assertEqual(
            (summary.subtotal, summary.tax, summary.total),
            (Decimal("100.00"), Decimal("20.00"), Decimal("120.00")),
        )

    def test_summary_rounds_tax_to_cents(self):
        items = [
            CartItem(id="1", name="A", price=Decimal("0.10"), category="ebook"),
            CartItem(id="2", name="B", price=Decimal("0.20"), category="ebook"),
            CartItem(id="3", name="C", price=Decimal("79.99"), category="ebook"),
        ]
        summary = checkout_summary(items, Decimal("0.20"))
        self.assertEqual(summary.subtotal, Decimal("80.29"))
        self.assertEqual(summary.tax, Decimal("16.06"))
        self.assertEqual(summary.total, Decimal("96.35"))

    def test_empty_summary(self):
        summary = checkout_summary([], Decimal("0.20"))
        self.assertEqual(summary.total, Decimal("0.00"))

    def test_order_total(self):
        lines = [
            OrderLine(product_id="1", name="A", price=Decimal("2.50"), quantity=2),
            OrderLine(product_id="2", name="B", price=Decimal("1.00"), quantity=1),
        ]
        self.assertEqual(order_total(lines), Decimal("6.00"))


class CardInputTestCase(unittest.TestCase):
    def test_card_number_grouping(self):
        self.assertEqual(format_card_number("4111111111111111"), "4111 1111 1111 1111")
        self.assertEqual(format_card_number("4111-11"), "4111 11")
        self.assertEqual(format_card_number("41111111111111119999"), "4111 1111 1111 1111")
        self.assertEqual(format_card_number("abc"), "")

    def test_expiry_and_cvv(self):
        self.assertEqual(format_expiry_date("1"), "1")
        self.assertEqual(format_expiry_date("12"), "12/")
        self.assertEqual(format_expiry_date("1227"), "12/27")
        self.assertEqual(format_expiry_date("12/275"), "12/27")
        self.assertEqual(format_cvv("12a34"), "123")

    def test_validate_card(self):
        self.assertTrue(validate_card("Ayşe", "4111 1111 1111 1111", "12/27", "123"))
        self.assertFalse(validate_card(" ", "4111 1111 1111 1111", "12/27", "123"))
        self.assertFalse(validate_card("Ayşe", "4111 1111", "12/27", "123"))
        self.assertFalse(validate_card("Ayşe", "4111 1111 1111 1111", "13/27", "123"))
        self.assertFalse(validate_card("Ayşe", "4111 1111 1111 1111", "12/27", "12"))


class RenderTestCase(unittest.TestCase):
    def test_price_and_labels(self):
        self.assertEqual(format_price(Decimal("299.99")), "₺299.99")
        self.assertEqual(format_price(Decimal("5")), "₺5.00")
        self.assertEqual(category_label("course"), "Kurs")
        self.assertEqual(category_label("unknown"), "Diğer")

    def test_catalog_rows_mark_favorites(self):
        products = [_product("1", "A", "ebook"), _product("2", "B", "course")]
        rows = render.catalog_rows(products, ["2"])
        self.assertEqual([r[0] for r in rows], ["🤍", "❤️"])
        self.assertEqual(rows[1][2], "Kurs")
        self.assertEqual(rows[1][3], "₺10.00")

    def test_search_caption(self):
        self.assertEqual(render.search_caption("", 3), "3 ürün")
        self.assertIn("sonuç bulunamadı", render.search_caption("xyz", 0))
        self.assertEqual(
            render.search_caption(" kurs ", 2), '"kurs" için 2 sonuç bulundu'
        )

    def test_checkout_markdown_lists_totals(self):
        items = [CartItem(id="1", name="A", price=Decimal("100.00"), category="ebook")]
        md = render.checkout_markdown(items, checkout_summary(items, Decimal("0.20")))
        self.assertIn("| A | E-Kitap | ₺100.00 |", md)
        self.assertIn("₺20.00", md)
        self.assertIn("**Toplam:** ₺120.00", md)

    def test_order_markdown(self):
        self.assertIn("sipariş seçin", render.order_markdown(None))
        order = Order(
            id="abcdef123456",
            user_id="u1",
            created_at="2026-10-19T08:56:01.123+00:00",
            items=(OrderLine("1", "A", Decimal("10.00"), 1),),
            total=Decimal("10.00"),
            status="completed",
        )
        md = render.order_markdown(order)
        self.assertIn("Sipariş #abcdef12", md)
        self.assertIn("2026-10-19 08:56", md)
        self.assertEqual(render.order_rows([order])[0][3], "Tamamlandı")

    def test_user_info_table(self):
        self.assertIn("Misafir", render.user_info_table(None))
        admin = User(id="u1", username="root", name="Root", email="r@x.io", role="admin")
        self.assertIn("Yönetici", render.user_info_table(admin))


class StorageTestCase(unittest.TestCase):
    def test_session_storage(self):
        storage = SessionStorage()
        self.assertIsNone(storage.get_item("k"))
        storage.set_item("k", "v")
        self.assertEqual(storage.get_item("k"), "v")
        storage.remove_item("k")
        storage.remove_item("k")
        self.assertIsNone(storage.get_item("k"))

    def test_local_storage_persists(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "nested", "prefs.json")
            LocalStorage(path).set_item("theme", "light")
            self.assertEqual(LocalStorage(path).get_item("theme"), "light")

            storage = LocalStorage(path)
            storage.clear()
            self.assertIsNone(LocalStorage(path).get_item("theme"))

    def test_local_storage_ignores_unreadable_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "prefs.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            self.assertIsNone(LocalStorage(path).get_item("theme"))


if __name__ == "__main__":
    unittest.main()
