# projections of domain state into markdown fragments and table rows
from typing import Iterable, List, Optional, Sequence, Tuple

from db.models import CartItem, Order, Product, Review, User
from utils.i18n import category_icon, category_label, format_price
from utils.pure import CheckoutSummary, generate_markdown_table

CATALOG_COLUMNS = ("", "Ürün", "Kategori", "Fiyat", "Açıklama")
CART_COLUMNS = ("", "Ürün", "Kategori", "Fiyat")
ADMIN_COLUMNS = ("Ürün", "Kategori", "Fiyat", "Görsel")
ORDER_COLUMNS = ("Tarih", "Ürün Sayısı", "Toplam", "Durum")
REVIEW_COLUMNS = ("Yazar", "Tarih", "Yorum")


def _short(text: str, width: int = 60) -> str:
    text = " ".join((text or "").split())
    return text if len(text) <= width else text[: width - 1] + "…"


def _date(timestamp: str) -> str:
    # 2026-10-19T08:56:01.123+00:00 -> 2026-10-19 08:56
    return timestamp[:16].replace("T", " ") if timestamp else "-"


def catalog_rows(
    products: Iterable[Product], favorites: Sequence[str]
) -> List[Tuple[str, str, str, str, str]]:
    return [
        (
            "❤️" if p.id in favorites else "🤍",
            f"{category_icon(p.category)} {p.name}",
            category_label(p.category),
            format_price(p.price),
            _short(p.description),
        )
        for p in products
    ]


def search_caption(query: str, count: int) -> str:
    if not query.strip():
        return f"{count} ürün"
    if count == 0:
        return f'"{query.strip()}" için sonuç bulunamadı. Farklı bir arama terimi deneyin.'
    return f'"{query.strip()}" için {count} sonuç bulundu'


def cart_rows(items: Iterable[CartItem]) -> List[Tuple[str, str, str, str]]:
    return [
        (
            category_icon(item.category),
            item.name,
            category_label(item.category),
            format_price(item.price),
        )
        for item in items
    ]


def cart_total_caption(summary: CheckoutSummary, count: int) -> str:
    return f"Sepet ({count} ürün) · Toplam: {format_price(summary.subtotal)}"


def admin_rows(products: Iterable[Product]) -> List[Tuple[str, str, str, str]]:
    return [
        (
            p.name,
            category_label(p.category),
            format_price(p.price),
            "✓" if p.image else "-",
        )
        for p in products
    ]


def order_rows(orders: Iterable[Order]) -> List[Tuple[str, str, str, str]]:
    status_labels = {"completed": "Tamamlandı"}
    return [
        (
            _date(o.created_at),
            str(len(o.items)),
            format_price(o.total),
            status_labels.get(o.status, o.status),
        )
        for o in orders
    ]


def review_rows(reviews: Iterable[Review]) -> List[Tuple[str, str, str]]:
    return [(r.author, _date(r.created_at), _short(r.content, 80)) for r in reviews]


def checkout_markdown(items: Sequence[CartItem], summary: CheckoutSummary) -> str:
    rows = [[item.name, category_label(item.category), format_price(item.price)] for item in items]
    md = "### Sipariş Özeti\n\n"
    md += generate_markdown_table(["Ürün", "Kategori", "Fiyat"], rows, ["l", "l", "r"])
    md += (
        f"\n\n**Ara Toplam:** {format_price(summary.subtotal)}  \n"
        f"**KDV (%20):** {format_price(summary.tax)}  \n"
        f"**Toplam:** {format_price(summary.total)}"
    )
    return md


def product_markdown(product: Product, is_favorite: bool = False) -> str:
    heart = " ❤️" if is_favorite else ""
    table = generate_markdown_table(
        ["Özellik", "Değer"],
        [
            ["Kategori", f"{category_icon(product.category)} {category_label(product.category)}"],
            ["Fiyat", format_price(product.price)],
            ["Görsel", product.image or "-"],
            ["Eklenme", _date(product.created_at)],
        ],
        ["l", "l"],
    )
    return f"### {product.name}{heart}\n\n{product.description}\n\n{table}"


def order_markdown(order: Optional[Order]) -> str:
    if not order:
        return "### Detaylarını görmek için bir sipariş seçin."
    rows = [
        [line.name, str(line.quantity), format_price(line.price), format_price(line.price * line.quantity)]
        for line in order.items
    ]
    header = f"### Sipariş #{order.id[:8]}\nTarih: {_date(order.created_at)}\n\n"
    table = generate_markdown_table(
        ["Ürün", "Adet", "Birim Fiyat", "Tutar"], rows, ["l", "r", "r", "r"]
    )
    return header + table + f"\n\n**Toplam:** {format_price(order.total)}"


def user_info_table(user: Optional[User]) -> str:
    if not user:
        return generate_markdown_table(None, [["Durum", "Misafir"]], ["l", "l"])
    role = "Yönetici" if user.is_admin else "Üye"
    return generate_markdown_table(
        None,
        [["Ad", user.name], ["Kullanıcı", user.username], ["Rol", role]],
        ["l", "l"],
    )
