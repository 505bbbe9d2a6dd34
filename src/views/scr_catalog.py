from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Input, Label

from utils.messages import StateChangedMessage
from utils.render import CATALOG_COLUMNS, catalog_rows, search_caption
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

# fixed view -> category mapping for the category pages
CATEGORY_VIEWS = {
    "ebooks": "ebook",
    "courses": "course",
    "software": "software",
    "templates": "template",
}


class AddToCartRequested(Message):
    bubble = True

    def __init__(self, product_id: str) -> None:
        super().__init__()
        self.product_id = product_id


class FavoriteToggleRequested(Message):
    bubble = True

    def __init__(self, product_id: str) -> None:
        super().__init__()
        self.product_id = product_id


class ProductTable(DataTable):
    """Product grid; rows are keyed by product id."""

    BINDINGS = [
        Binding("a", "add_to_cart", "Sepete Ekle", show=True),
        Binding("f", "favorite", "Favori", show=True),
    ]

    def selected_product_id(self) -> Optional[str]:
        if self.row_count == 0:
            return None
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        return row_key.value

    def action_add_to_cart(self):
        product_id = self.selected_product_id()
        if product_id:
            self.post_message(AddToCartRequested(product_id))

    def action_favorite(self):
        product_id = self.selected_product_id()
        if product_id:
            self.post_message(FavoriteToggleRequested(product_id))


class CatalogScreen(BaseScreen):
    """
    Product listing with live search. Subclasses narrow it to one
    category or to the user's favorites.
    """

    CATEGORY: Optional[str] = None
    FAVORITES_ONLY = False

    def __init__(self):
        super().__init__()
        self.query_str = ""

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(
            id="input-search", placeholder="Ürün, açıklama veya kategori ara..."
        )
        yield Label("", id="label-search-info")
        yield ProductTable(id="table-products")

    def on_mount(self):
        table = self.query_one(ProductTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*CATALOG_COLUMNS)

        self.query_one("#input-search").focus()

    def action_search(self):
        # this screen has its own result list
        self.query_one("#input-search").focus()

    def apply_query(self, query: str) -> None:
        """Run a search handed over from another screen."""
        search_input = self.query_one("#input-search", Input)
        self.query_str = query
        if search_input.value != query:
            search_input.value = query
        else:
            self.refresh_view()

    @on(Input.Changed, "#input-search")
    def handle_query_change(self, message: Input.Changed) -> None:
        self.query_str = message.value
        self.refresh_view()

    async def render_state(self) -> None:
        state = self.app.state
        products = state.browse(self.query_str, self.CATEGORY, self.FAVORITES_ONLY)

        table = self.query_one(ProductTable)
        prev_row = table.cursor_row
        table.clear()
        for product, row in zip(products, catalog_rows(products, state.favorites)):
            table.add_row(*row, key=product.id)
        if products:
            table.move_cursor(row=min(prev_row, len(products) - 1))

        info = search_caption(self.query_str, len(products))
        if self.FAVORITES_ONLY and not state.user:
            info = "Favorilerinizi görmek için giriş yapın."
        self.query_one("#label-search-info", Label).update(info)

    @on(DataTable.RowSelected, "#table-products")
    @work()
    async def handle_view_product(self, event: DataTable.RowSelected) -> None:
        await self.app.push_screen_wait(ProdDetailModal(event.row_key.value))

    @on(AddToCartRequested)
    @work()
    async def handle_add_to_cart(self, message: AddToCartRequested) -> None:
        result = await self.app.state.add_to_cart(message.product_id)
        self.notify(result.message, severity=result.severity)
        if result.ok:
            self.post_message(StateChangedMessage())

    @on(FavoriteToggleRequested)
    @work()
    async def handle_toggle_favorite(self, message: FavoriteToggleRequested) -> None:
        result = await self.app.state.toggle_favorite(message.product_id)
        self.notify(result.message, severity=result.severity)
        if result.ok:
            self.post_message(StateChangedMessage())


class EbooksScreen(CatalogScreen):
    CATEGORY = CATEGORY_VIEWS["ebooks"]


class CoursesScreen(CatalogScreen):
    CATEGORY = CATEGORY_VIEWS["courses"]


class SoftwareScreen(CatalogScreen):
    CATEGORY = CATEGORY_VIEWS["software"]


class TemplatesScreen(CatalogScreen):
    CATEGORY = CATEGORY_VIEWS["templates"]


class FavoritesScreen(CatalogScreen):
    FAVORITES_ONLY = True
