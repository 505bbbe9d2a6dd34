from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from utils.i18n import MESSAGES
from utils.messages import StateChangedMessage
from utils.pure import format_card_number, format_cvv, format_expiry_date, validate_card
from utils.render import checkout_markdown
from views.modal_dialog import ConfirmDialogModal

# input id -> formatter applied while typing
CARD_FORMATTERS = {
    "input-card-number": format_card_number,
    "input-card-expiry": format_expiry_date,
    "input-card-cvv": format_cvv,
}


class CheckoutModal(ModalScreen[bool]):
    """
    A modal screen for check out, including the order summary and a card form.
    The card is only checked for shape, nothing is charged.
    Return True on success, False on failure.
    """

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Kart Sahibi")
            yield Input(placeholder="Ad Soyad", id="input-card-holder")
            yield Label("Kart Numarası")
            yield Input(placeholder="1234 5678 9012 3456", id="input-card-number")
            with Horizontal(id="hort-card-extra"):
                with Vertical():
                    yield Label("Son Kullanma")
                    yield Input(placeholder="AA/YY", id="input-card-expiry")
                with Vertical():
                    yield Label("CVV")
                    yield Input(placeholder="123", password=True, id="input-card-cvv")
            with Horizontal():
                yield Button("Geri", id="btn-quit")
                yield Button("Ödemeyi Tamamla", id="btn-submit", variant="primary")

    async def on_mount(self):
        state = self.app.state
        md = checkout_markdown(state.cart, state.checkout_summary())
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-card-holder").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Input.Changed)
    def handle_card_input(self, event: Input.Changed) -> None:
        formatter = CARD_FORMATTERS.get(event.input.id)
        if not formatter:
            return
        formatted = formatter(event.value)
        if formatted != event.value:
            event.input.value = formatted
            event.input.cursor_position = len(formatted)
        event.input.remove_class("-invalid")

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        holder = self.query_one("#input-card-holder", Input).value
        number = self.query_one("#input-card-number", Input).value
        expiry = self.query_one("#input-card-expiry", Input).value
        cvv = self.query_one("#input-card-cvv", Input).value

        if not validate_card(holder, number, expiry, cvv):
            for input_id in ("#input-card-holder", *(f"#{k}" for k in CARD_FORMATTERS)):
                self.query_one(input_id, Input).add_class("-invalid")
            self.notify(MESSAGES["card_invalid"], severity="error")
            return

        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Siparişi onaylıyor musunuz?", "positive")
        ):
            return

        result = await self.app.state.checkout()
        self.app.notify(result.message, severity=result.severity)
        self.app.post_message(StateChangedMessage())
        self.dismiss(result.ok)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
