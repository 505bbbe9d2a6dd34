from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to log out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired after a login or registration went through, so the app can
    re-render the active screen for the new identity
    """

    bubble = True


class StateChangedMessage(Message):
    """
    Fired by any screen or modal after a mutation (cart, favorites, catalog,
    orders). The app re-renders the active screen; the others re-render when
    they are resumed.

    If posted from a modal, make sure to post at App level
    """

    bubble = True


class SearchRequestedMessage(Message):
    """
    Fired from a screen without a result list; the app switches to the
    catalog and runs the query there.
    """

    bubble = True

    def __init__(self, query: str) -> None:
        super().__init__()
        self.query = query


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
