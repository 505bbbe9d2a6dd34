from typing import Dict, Literal, Optional, Tuple

from typing_extensions import override

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from utils.messages import QuitRequestedMessage


class DialogModal(ModalScreen[bool]):
    """
    A simple dialog box, returns True for the primary button
    """

    VARIANT_MAP: Dict[
        str, Tuple[Literal["primary", "default", "success", "warning", "error"]]
    ] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "Tamam",
        secondary_text: str = "",
        tone: Literal["default", "positive", "warning", "error"] = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text,
                        variant=DialogModal.VARIANT_MAP[self.tone][1],
                        id="btn-secondary",
                    )
                yield Button(
                    self.primary_text,
                    variant=DialogModal.VARIANT_MAP[self.tone][0],
                    id="btn-primary",
                )

    def on_mount(self):
        # destructive dialogs focus the safe choice
        if not self.secondary_text or not self.tone == "error":
            self.query_one("#btn-primary").focus()
        else:
            self.query_one("#btn-secondary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(True)
        if event.button.id == "btn-secondary":
            self.dismiss(False)


class SimpleDialogModal(DialogModal):
    def __init__(self, caption: str):
        super().__init__(caption)


class ConfirmDialogModal(DialogModal):
    def __init__(self, caption: str, tone: Literal["positive", "warning", "error"] = "warning"):
        super().__init__(caption, "Evet", "Hayır", tone)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Çıkmak istediğinizden emin misiniz?", "Evet", "Hayır", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class PromptModal(ModalScreen[Optional[str]]):
    """
    Single line input. Returns the text, or None when cancelled.
    """

    def __init__(self, caption: str, placeholder: str = "", value: str = ""):
        super().__init__()
        self.caption = caption
        self.placeholder = placeholder
        self.initial_value = value

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            yield Input(value=self.initial_value, placeholder=self.placeholder, id="input-prompt")
            with Horizontal(id="dialog"):
                yield Button("Vazgeç", id="btn-secondary")
                yield Button("Tamam", variant="primary", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-prompt").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Input.Submitted, "#input-prompt")
    @on(Button.Pressed, "#btn-primary")
    def handle_submit(self) -> None:
        self.dismiss(self.query_one("#input-prompt", Input).value)

    @on(Button.Pressed, "#btn-secondary")
    def handle_cancel(self) -> None:
        self.dismiss(None)
