# credential store and current-session tracking
from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

import aiosqlite

from db.database import connect
from db.documents import server_timestamp
from utils import config
from utils.logger import get_logger
from utils.pure import is_valid_email

_logger = get_logger(__name__)

_HASH_ITERATIONS = 100_000


class AuthError(Exception):
    """Identity provider failure, categorized by `code`."""

    EMAIL_IN_USE = "auth/email-already-in-use"
    WEAK_PASSWORD = "auth/weak-password"
    INVALID_EMAIL = "auth/invalid-email"
    USER_NOT_FOUND = "auth/user-not-found"
    WRONG_PASSWORD = "auth/wrong-password"
    INTERNAL = "auth/internal-error"

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code


@dataclass(frozen=True)
class Account:
    uid: str
    email: str
    display_name: str = ""


AuthListener = Callable[[Optional[Account]], Awaitable[None]]


def hash_password(password: str) -> str:
    """Salted PBKDF2-SHA256, stored as salt$hash."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _HASH_ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        salt, stored = password_hash.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _HASH_ITERATIONS
    )
    return secrets.compare_digest(digest.hex(), stored)


class IdentityProvider:
    """
    Issues and checks credentials and tracks the signed-in account.

    Subscribers registered with on_auth_state_changed are awaited, in
    registration order, after every sign in and sign out.
    """

    def __init__(self) -> None:
        self.current_user: Optional[Account] = None
        self._listeners: List[AuthListener] = []

    def on_auth_state_changed(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self.current_user)

    async def create_account(
        self, email: str, password: str, display_name: str = ""
    ) -> Account:
        """Create credentials for a new account. Does not sign in."""
        email = email.strip().lower()
        if not is_valid_email(email):
            raise AuthError(AuthError.INVALID_EMAIL)
        if len(password) < config.MIN_PASSWORD_LENGTH:
            raise AuthError(AuthError.WEAK_PASSWORD)

        uid = uuid.uuid4().hex
        try:
            async with connect() as conn:
                await conn.execute(
                    """
                    INSERT INTO accounts(uid, email, password_hash, display_name, created_at)
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    (uid, email, hash_password(password), display_name, server_timestamp()),
                )
                await conn.commit()
        except aiosqlite.IntegrityError as exc:
            raise AuthError(AuthError.EMAIL_IN_USE) from exc
        except aiosqlite.Error as exc:
            raise AuthError(AuthError.INTERNAL, str(exc)) from exc

        _logger.info(f"Account {uid} created for {email}")
        return Account(uid=uid, email=email, display_name=display_name)

    async def delete_account(self, uid: str) -> None:
        try:
            async with connect() as conn:
                await conn.execute("DELETE FROM accounts WHERE uid = ?;", (uid,))
                await conn.commit()
        except aiosqlite.Error as exc:
            raise AuthError(AuthError.INTERNAL, str(exc)) from exc
        if self.current_user and self.current_user.uid == uid:
            await self.sign_out()

    async def sign_in(self, email: str, password: str) -> Account:
        email = email.strip().lower()
        if not is_valid_email(email):
            raise AuthError(AuthError.INVALID_EMAIL)
        try:
            async with connect() as conn:
                cur = await conn.execute(
                    "SELECT uid, email, password_hash, display_name FROM accounts WHERE email = ?;",
                    (email,),
                )
                row = await cur.fetchone()
                await cur.close()
        except aiosqlite.Error as exc:
            raise AuthError(AuthError.INTERNAL, str(exc)) from exc

        if not row:
            raise AuthError(AuthError.USER_NOT_FOUND)
        if not verify_password(password, row[2]):
            raise AuthError(AuthError.WRONG_PASSWORD)

        self.current_user = Account(uid=row[0], email=row[1], display_name=row[3])
        _logger.info(f"Signed in {self.current_user.uid}")
        await self._notify()
        return self.current_user

    async def sign_out(self) -> None:
        if self.current_user:
            _logger.info(f"Signed out {self.current_user.uid}")
        self.current_user = None
        await self._notify()
