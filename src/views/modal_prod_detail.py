from typing import Dict, List

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer

from db.models import Product, Review
from utils.i18n import MESSAGES
from utils.messages import StateChangedMessage
from utils.render import REVIEW_COLUMNS, product_markdown, review_rows
from views.modal_dialog import ConfirmDialogModal


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail with reviews, favorite and add-to-cart.
    Will return true if cart or favorites changed, false if not
    """

    def __init__(self, product_id: str) -> None:
        super().__init__()

        self._product_id = product_id
        self._prod: Product = None
        self._reviews: Dict[str, Review] = {}
        self._changed = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical(id="div-reviews"):
                yield Label("Yorumlar")
                yield DataTable(id="table-reviews")
                yield Input(placeholder="Yorumunuzu yazın...", id="input-review")
                with Horizontal():
                    yield Button("Yorum Yap", id="btn-add-review")
                    yield Button("Yorumu Sil", id="btn-delete-review", variant="error")
        with Horizontal(id="hort-prod-actions"):
            yield Button("Geri", id="btn-quit")
            yield Button("Favori", id="btn-favorite")
            yield Button("Sepete Ekle", id="btn-addcart", variant="primary")

    async def on_mount(self):
        self._prod = self.app.state.find_product(self._product_id)
        if not self._prod:
            self.notify(MESSAGES["product_not_found"], severity="error")
            self.dismiss(False)
            return

        table = self.query_one("#table-reviews", DataTable)
        table.cursor_type = "row"
        table.add_columns(*REVIEW_COLUMNS)

        await self.render_product()
        self.load_reviews()
        self.query_one("#btn-addcart").focus()

    async def render_product(self) -> None:
        state = self.app.state
        md = product_markdown(self._prod, state.is_favorite(self._prod.id))
        await self.query_one(MarkdownViewer).document.update(md)

        btn_fav = self.query_one("#btn-favorite", Button)
        btn_fav.label = "Favorilerden Çıkar" if state.is_favorite(self._prod.id) else "Favorilere Ekle"

        btn_addcart = self.query_one("#btn-addcart", Button)
        if any(item.id == self._prod.id for item in state.cart):
            btn_addcart.label = "Sepette"
            btn_addcart.disabled = True

        logged_in = state.user is not None
        self.query_one("#input-review").disabled = not logged_in
        self.query_one("#btn-add-review").disabled = not logged_in

    @work(exclusive=True, group="reviews")
    async def load_reviews(self) -> None:
        reviews: List[Review] = await self.app.state.load_reviews(self._product_id)
        self._reviews = {r.id: r for r in reviews}

        table = self.query_one("#table-reviews", DataTable)
        table.clear()
        for review, row in zip(reviews, review_rows(reviews)):
            table.add_row(*row, key=review.id)
        self._refresh_delete_button()

    def _selected_review(self) -> Review | None:
        table = self.query_one("#table-reviews", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._reviews.get(row_key.value)

    @on(DataTable.RowHighlighted, "#table-reviews")
    def _refresh_delete_button(self) -> None:
        review = self._selected_review()
        self.query_one("#btn-delete-review").disabled = not (
            review and self.app.state.can_delete_review(review)
        )

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(self._changed)

    def _mark_changed(self) -> None:
        self._changed = True
        self.app.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(self._changed)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True, group="addcart")
    async def handle_addcart(self):
        result = await self.app.state.add_to_cart(self._product_id)
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            self._mark_changed()
        await self.render_product()

    @on(Button.Pressed, "#btn-favorite")
    @work(exclusive=True, group="favorite")
    async def handle_favorite(self):
        result = await self.app.state.toggle_favorite(self._product_id)
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            self._mark_changed()
            await self.render_product()

    @on(Input.Submitted, "#input-review")
    @on(Button.Pressed, "#btn-add-review")
    @work(exclusive=True, group="add-review")
    async def handle_add_review(self):
        review_input = self.query_one("#input-review", Input)
        result = await self.app.state.add_review(self._product_id, review_input.value)
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            review_input.value = ""
            self.load_reviews()

    @on(Button.Pressed, "#btn-delete-review")
    @work(exclusive=True, group="delete-review")
    async def handle_delete_review(self):
        review = self._selected_review()
        if not review:
            return
        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Bu yorumu silmek istediğinizden emin misiniz?", "error")
        ):
            return
        result = await self.app.state.delete_review(review)
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            self.load_reviews()
