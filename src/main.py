from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils import config
from utils.i18n import MESSAGES
from utils.local_storage import LocalStorage
from utils.logger import get_logger
from utils.messages import (
    ModeSwitchedMessage,
    QuitRequestedMessage,
    SearchRequestedMessage,
    StateChangedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import AppState
from views.base_screen import BaseScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_cart import CartScreen
from views.scr_catalog import (
    CatalogScreen,
    CoursesScreen,
    EbooksScreen,
    FavoritesScreen,
    SoftwareScreen,
    TemplatesScreen,
)
from views.scr_login import LoginScreen
from views.scr_past_orders import PastOrdersScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Tema", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "ebooks": EbooksScreen,
        "courses": CoursesScreen,
        "software": SoftwareScreen,
        "templates": TemplatesScreen,
        "cart": CartScreen,
        "favorites": FavoritesScreen,
        "past_orders": PastOrdersScreen,
        "admin": AdminProductsScreen,
    }

    # sidebar menus, in display order
    SHOP_MODES = {
        "catalog": "Tüm Ürünler",
        "ebooks": "E-Kitaplar",
        "courses": "Kurslar",
        "software": "Yazılımlar",
        "templates": "Şablonlar",
        "cart": "Sepetim",
    }
    ACCOUNT_MODES = {"favorites": "Favorilerim", "past_orders": "Siparişlerim"}
    ADMIN_MODES = {"admin": "Ürün Yönetimi"}

    THEMES = {"dark": "textual-dark", "light": "solarized-light"}

    CSS_PATH = [
        "views/styles/index.tcss",
        "views/styles/login.tcss",
        "views/styles/catalog.tcss",
        "views/styles/cart.tcss",
        "views/styles/modals.tcss",
        "views/styles/admin.tcss",
    ]

    state: AppState

    def __init__(self):
        super().__init__()
        self.state = AppState(local_storage=LocalStorage(config.PREFS_PATH))

    @classmethod
    def mode_label(cls, mode: str) -> str:
        return {**cls.SHOP_MODES, **cls.ACCOUNT_MODES, **cls.ADMIN_MODES}.get(mode, mode)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.theme = self.THEMES[self.state.theme]
        self.main_flow()

    def action_switch_light(self):
        new_theme = self.state.toggle_theme()
        self.theme = self.THEMES[new_theme]
        self.notify(MESSAGES["theme_changed"].format(theme=self.theme))

    @work
    async def main_flow(self):
        await self.state.bootstrap()
        self.post_message(ModeSwitchedMessage(self.current_mode, "catalog"))
        await self.switch_mode("catalog")

    @work(exclusive=True, group="login")
    async def open_login(self):
        await self.push_screen_wait(LoginScreen())

    def refresh_active_screen(self) -> None:
        if isinstance(self.screen, BaseScreen):
            self.screen.refresh_view()

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        result = await self.state.logout()
        self.notify(result.message, severity=result.severity)
        self.refresh_active_screen()

    @on(ModeSwitchedMessage)
    def handle_mode_switch(self, message: ModeSwitchedMessage):
        _logger.debug(f"Mode {message.old_mode} -> {message.new_mode}")

    @on(StateChangedMessage)
    @on(UserLoginMessage)
    def handle_state_change(self):
        self.refresh_active_screen()

    @on(SearchRequestedMessage)
    @work
    async def handle_search_request(self, message: SearchRequestedMessage):
        if self.current_mode != "catalog":
            self.post_message(ModeSwitchedMessage(self.current_mode, "catalog"))
            await self.switch_mode("catalog")
        if isinstance(self.screen, CatalogScreen):
            self.screen.apply_query(message.query)

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        if self.state.user:
            await self.state.save_cart()
        _logger.info("Exiting")
        self.exit()


def run() -> None:
    StorefrontApp().run()


if __name__ == "__main__":
    run()
