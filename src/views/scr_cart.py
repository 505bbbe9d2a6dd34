from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Label, Rule

from utils.i18n import MESSAGES
from utils.messages import StateChangedMessage
from utils.render import CART_COLUMNS, cart_rows, cart_total_caption
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import ConfirmDialogModal, SimpleDialogModal
from views.modal_prod_detail import ProdDetailModal


class CartScreen(BaseScreen):
    """
    Cart listing with removal and checkout
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Sepetiniz boş.", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Ürünü Çıkar", id="btn-remove")
            yield Button("Ödemeye Geç", id="btn-checkout", variant="primary")

    def on_mount(self):
        table = self.query_one("#table-cart", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*CART_COLUMNS)

    async def render_state(self) -> None:
        state = self.app.state
        table = self.query_one("#table-cart", DataTable)
        prev_row = table.cursor_row
        table.clear()
        for item, row in zip(state.cart, cart_rows(state.cart)):
            table.add_row(*row, key=item.id)
        if state.cart:
            table.move_cursor(row=min(prev_row, len(state.cart) - 1))

        self.query_one("#label-cart-total", Label).update(
            cart_total_caption(state.checkout_summary(), len(state.cart))
        )
        self.query_one("#btn-remove").disabled = not state.cart
        self.query_one("#btn-checkout").disabled = not state.cart

    def _selected_item_id(self) -> Optional[str]:
        table = self.query_one("#table-cart", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    @on(DataTable.RowSelected, "#table-cart")
    @work()
    async def handle_view_item(self, event: DataTable.RowSelected) -> None:
        if self.app.state.find_product(event.row_key.value):
            await self.app.push_screen_wait(ProdDetailModal(event.row_key.value))

    @on(Button.Pressed, "#btn-remove")
    @work()
    async def handle_remove_item(self):
        product_id = self._selected_item_id()
        if not product_id:
            return

        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Bu ürünü sepetten çıkarmak istiyor musunuz?")
        ):
            return
        result = await self.app.state.remove_from_cart(product_id)
        self.notify(result.message, severity=result.severity)
        self.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open up checkout screen
        """
        if not self.app.state.cart:
            self.notify(MESSAGES["cart_empty"], severity="warning")
            return

        if await self.app.push_screen_wait(CheckoutModal()):
            await self.app.push_screen_wait(
                SimpleDialogModal("Ödeme başarılı! Ürünleriniz hesabınıza tanımlandı.")
            )
        self.post_message(StateChangedMessage())
