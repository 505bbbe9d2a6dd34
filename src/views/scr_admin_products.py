from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from utils.i18n import MESSAGES
from utils.messages import StateChangedMessage
from utils.render import ADMIN_COLUMNS, admin_rows, product_markdown
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDialogModal, SimpleDialogModal
from views.modal_product_form import ProductFormModal


class AdminProductsScreen(BaseScreen):
    """
    Admins add, edit and delete products, and hand out admin invite codes.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("", id="label-admin-info")
            yield DataTable(id="table-admin-products")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
        with Horizontal(id="hort-controls"):
            yield Button("Yeni Ürün", id="btn-new", variant="success")
            yield Button("Düzenle", id="btn-edit")
            yield Button("Sil", id="btn-delete", variant="error")
            yield Button("Davet Kodu", id="btn-invite")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*ADMIN_COLUMNS)

    async def render_state(self) -> None:
        state = self.app.state
        if not state.is_admin:
            self.notify(MESSAGES["unauthorized"], severity="error")
            await self.app.switch_mode("catalog")
            return

        table = self.query_one(DataTable)
        prev_row = table.cursor_row
        table.clear()
        for product, row in zip(state.products, admin_rows(state.products)):
            table.add_row(*row, key=product.id)
        if state.products:
            table.move_cursor(row=min(prev_row, len(state.products) - 1))

        self.query_one("#label-admin-info", Label).update(
            f"{len(state.products)} ürün"
        )
        self.query_one("#btn-edit").disabled = not state.products
        self.query_one("#btn-delete").disabled = not state.products
        await self._render_detail(self._selected_product_id())

    def _selected_product_id(self) -> Optional[str]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    @on(DataTable.RowHighlighted, "#table-admin-products")
    async def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        await self._render_detail(event.row_key.value)

    async def _render_detail(self, product_id: Optional[str]) -> None:
        product = self.app.state.find_product(product_id) if product_id else None
        md = product_markdown(product) if product else "### Ürün seçin."
        await self.query_one("#md-prod", MarkdownViewer).document.update(md)

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True)
    async def handle_new(self) -> None:
        fields = await self.app.push_screen_wait(ProductFormModal())
        if fields is None:
            return
        result = await self.app.state.create_product(fields)
        self.notify(result.message, severity=result.severity)
        if result.ok:
            self.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-edit")
    @work(exclusive=True)
    async def handle_edit(self) -> None:
        product = self.app.state.find_product(self._selected_product_id() or "")
        if not product:
            return
        fields = await self.app.push_screen_wait(ProductFormModal(product))
        if fields is None:
            return
        result = await self.app.state.update_product(product.id, fields)
        self.notify(result.message, severity=result.severity)
        if result.ok:
            self.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        product = self.app.state.find_product(self._selected_product_id() or "")
        if not product:
            return
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(
                f"'{product.name}' silinsin mi? Tüm sepetlerden de çıkarılacak.",
                "error",
            )
        ):
            return
        result = await self.app.state.delete_product(product.id)
        self.notify(result.message, severity=result.severity)
        self.post_message(StateChangedMessage())

    @on(Button.Pressed, "#btn-invite")
    @work(exclusive=True)
    async def handle_invite(self) -> None:
        result = await self.app.state.issue_admin_invite()
        if not result.ok:
            self.notify(result.message, severity=result.severity)
            return
        await self.app.push_screen_wait(SimpleDialogModal(result.message))
