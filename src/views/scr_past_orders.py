from typing import Dict

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import DataTable, Label, MarkdownViewer

from db.models import Order
from utils.render import ORDER_COLUMNS, order_markdown, order_rows
from views.base_screen import BaseScreen


class PastOrdersScreen(BaseScreen):
    """
    Signed-in users browse their past orders, newest first.

    Layout:
    - Markdown detail view at the top, showing the highlighted order.
    - Orders table below.
    """

    # Show some hints in footer
    BINDINGS = [
        Binding("up,down", "noop", "Sipariş Seç", show=True, key_display="↑↓"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield Label("", id="label-orders-info")
            yield DataTable(id="table-orders")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*ORDER_COLUMNS)

    def action_noop(self) -> None:
        pass

    async def render_state(self) -> None:
        state = self.app.state
        self._orders = {o.id: o for o in state.orders}

        table = self.query_one(DataTable)
        table.clear()
        for order, row in zip(state.orders, order_rows(state.orders)):
            table.add_row(*row, key=order.id)

        if not state.user:
            info = "Siparişlerinizi görmek için giriş yapın."
        elif not state.orders:
            info = "Henüz siparişiniz yok."
        else:
            info = f"{len(state.orders)} sipariş"
        self.query_one("#label-orders-info", Label).update(info)

        first = state.orders[0] if state.orders else None
        await self._render_detail(first)

    @on(DataTable.RowHighlighted, "#table-orders")
    async def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        await self._render_detail(self._orders.get(event.row_key.value))

    async def _render_detail(self, order: Order | None) -> None:
        await self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_markdown(order)
        )
