from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize, ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import ModeSwitchedMessage, SearchRequestedMessage, UserLogoutMessage
from utils.render import user_info_table
from views.modal_dialog import ConfirmDialogModal, PromptModal, QuitDialogModal
from views.modal_resize import ResizeScreenPromptModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Hesap", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Giriş Yap", id="btn-auth", variant="primary")
        yield Label("Menü", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self):
        self.init_mode = self.app.current_mode

    async def refresh_user(self) -> None:
        """User info, login/logout button and the menu for the current role."""
        state = self.app.state
        await self.query_one("#md-userinfo", Markdown).update(user_info_table(state.user))

        btn_auth = self.query_one("#btn-auth", Button)
        if state.user:
            btn_auth.label = "Çıkış Yap"
            btn_auth.variant = "error"
        else:
            btn_auth.label = "Giriş Yap"
            btn_auth.variant = "primary"

        menu = dict(self.app.SHOP_MODES)
        menu["cart"] = f"{menu['cart']} ({len(state.cart)})"
        if state.user:
            menu.update(self.app.ACCOUNT_MODES)
        if state.is_admin:
            menu.update(self.app.ADMIN_MODES)

        list_menu = self.query_one("#list-menu", ListView)
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), name=k) for k, v in menu.items()]
        )
        self.highlight_item(self.init_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.name
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-auth")
    @work()
    async def handle_auth(self):
        if not self.app.state.user:
            self.app.open_login()
            return

        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Çıkış yapmak istediğinizden emin misiniz?")
        ):
            return
        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.name == mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.

    Subclasses draw themselves in render_state(), which runs whenever the
    screen is resumed and after every state change while it is active.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Çıkış", show=True),
        Binding("ctrl+f", "search", "Ara", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "DigiMarket",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        :return:
        """

        self.app.title = "DigiMarket"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if type(self) is v:
                self.sub_title = self.app.mode_label(k)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    async def on_resize(self, event: Resize) -> None:
        min_width = 60
        min_height = 20
        if event.size.width < min_width or event.size.height < min_height:
            self.app.push_screen(ResizeScreenPromptModal(min_width, min_height))

    @on(ScreenResume)
    def handle_resume(self) -> None:
        self.refresh_view()

    @work(exclusive=True, group="refresh")  # must exclusive, overlapping renders duplicate rows
    async def refresh_view(self) -> None:
        if self._show_sidebar:
            await self.query_one(Sidebar).refresh_user()
        await self.render_state()

    async def render_state(self) -> None:
        pass

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())

    @work()
    async def action_search(self):
        query = await self.app.push_screen_wait(
            PromptModal("Ürün Ara", "Ürün adı, açıklama veya kategori...")
        )
        if query is None:
            return
        self.post_message(SearchRequestedMessage(query))
