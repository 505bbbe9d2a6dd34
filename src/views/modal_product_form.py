from typing import Any, Dict, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, Select

from db.models import CATEGORIES, Product
from utils.i18n import category_label


class ProductFormModal(ModalScreen[Optional[Dict[str, Any]]]):
    """
    Add or edit a product. Returns the raw form fields, None when cancelled.
    Validation happens in the state so both paths share it.
    """

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        prod = self.product
        title = "Ürünü Düzenle" if prod else "Yeni Ürün"
        with Vertical(id="div-product-form"):
            yield Label(title, id="caption")
            yield Label("Ürün Adı")
            yield Input(value=prod.name if prod else "", id="input-prod-name")
            yield Label("Açıklama")
            yield Input(value=prod.description if prod else "", id="input-prod-desc")
            with Horizontal(id="hort-prod-price-cat"):
                with Vertical():
                    yield Label("Fiyat (₺)")
                    yield Input(
                        value=f"{prod.price:.2f}" if prod else "",
                        placeholder="0.00",
                        type="number",
                        validators=[Number(minimum=0.0)],
                        id="input-prod-price",
                    )
                with Vertical():
                    yield Label("Kategori")
                    yield Select(
                        [(category_label(c), c) for c in CATEGORIES],
                        value=prod.category if prod else "other",
                        allow_blank=False,
                        id="select-prod-category",
                    )
            yield Label("Görsel (URL)")
            yield Input(value=prod.image if prod else "", id="input-prod-image")
            with Horizontal(id="dialog"):
                yield Button("Vazgeç", id="btn-secondary")
                yield Button("Kaydet", variant="success", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-prod-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-primary")
    def handle_submit(self) -> None:
        self.dismiss(
            {
                "name": self.query_one("#input-prod-name", Input).value,
                "description": self.query_one("#input-prod-desc", Input).value,
                "price": self.query_one("#input-prod-price", Input).value,
                "category": self.query_one("#select-prod-category", Select).value,
                "image": self.query_one("#input-prod-image", Input).value,
            }
        )

    @on(Button.Pressed, "#btn-secondary")
    def handle_cancel(self) -> None:
        self.dismiss(None)
