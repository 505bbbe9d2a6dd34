from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen


class LoginScreen(BaseScreen):
    """
    Login and sign up tabs.
    Returns True once a user is signed in, False if the visitor went back.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Giriş", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Giriş Yap", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("E-posta")
                    yield Input(placeholder="ornek@email.com", id="input-login-email")
                    yield Label("Şifre")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Geri", id="btn-back")
                        yield Button("Giriş Yap", id="btn-login", variant="primary")

            with TabPane("Kayıt Ol", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Kullanıcı Adı")
                    yield Input(placeholder="kullanici123", id="input-reg-username")
                    yield Label("Ad Soyad")
                    yield Input(placeholder="Ayşe Yılmaz", id="input-reg-name")
                    yield Label("E-posta")
                    yield Input(placeholder="ornek@email.com", id="input-reg-email")
                    yield Label("Şifre")
                    yield Input(
                        placeholder="En az 6 karakter", password=True, id="input-reg-pwd"
                    )
                    yield Label("Yönetici Davet Kodu (isteğe bağlı)")
                    yield Input(placeholder="", id="input-reg-invite")
                    with Container(id="div-reg-btns"):
                        yield Button("Kayıt Ol", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        # nothing to search from here
        if action == "search":
            return False
        return True

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(False)
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if event.key == "enter" and self.focused in (
            self.query_one("#input-reg-pwd"),
            self.query_one("#input-reg-invite"),
        ):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value
        pwd = self.query_one("#input-login-pwd", Input).value

        result = await self.app.state.login(email, pwd)
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            self.app.post_message(UserLoginMessage())
            self.dismiss(True)
        else:
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        result = await self.app.state.register(
            self.query_one("#input-reg-username", Input).value,
            self.query_one("#input-reg-name", Input).value,
            self.query_one("#input-reg-email", Input).value,
            self.query_one("#input-reg-pwd", Input).value,
            self.query_one("#input-reg-invite", Input).value,
        )
        self.app.notify(result.message, severity=result.severity)
        if result.ok:
            self.app.post_message(UserLoginMessage())
            self.dismiss(True)

    @on(Button.Pressed, "#btn-back")
    def handle_back(self) -> None:
        self.dismiss(False)
