from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

import db.crud as crud
from db.identity import Account, AuthError, IdentityProvider
from db.models import CATEGORIES, CartItem, Order, Product, Review, User
from db.seed import seed_defaults
from utils import config
from utils.i18n import MESSAGES
from utils.local_storage import SessionStorage
from utils.logger import get_logger
from utils.pure import (
    CheckoutSummary,
    checkout_summary,
    filter_by_category,
    is_valid_email,
    money,
    search_products,
)

_logger = get_logger(__name__)

GUEST_CART_KEY = "guestCart"
THEME_KEY = "theme"

Severity = Literal["information", "warning", "error"]


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a user action, ready to be shown as a notification."""

    ok: bool
    message: str = ""
    severity: Severity = "information"
    payload: Any = None


def _ok(message: str = "", payload: Any = None) -> ActionResult:
    return ActionResult(True, message, "information", payload)


def _fail(message: str, severity: Severity = "error") -> ActionResult:
    return ActionResult(False, message, severity)


def clean_product_fields(
    fields: Dict[str, Any],
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Validate an admin product form.
    Returns (cleaned_fields, None) or (None, message).
    """
    name = str(fields.get("name") or "").strip()
    description = str(fields.get("description") or "").strip()
    category = str(fields.get("category") or "").strip()
    image = str(fields.get("image") or "").strip()
    if not name or not description:
        return None, MESSAGES["invalid_product"]
    try:
        price = money(fields.get("price"))
    except ValueError:
        return None, MESSAGES["invalid_price"]
    if price < 0:
        return None, MESSAGES["invalid_price"]
    if category not in CATEGORIES:
        return None, MESSAGES["invalid_category"]
    return {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "image": image,
    }, None


@dataclass
class AppState:
    """
    Centralized application state shared by screens.

    Fields:
      - identity: identity provider; every sign in/out reloads this state
      - session_storage: anonymous cart, lives as long as the app
      - local_storage: preferences that survive restarts (theme)
      - user: signed-in user document, None when browsing anonymously
      - products, cart, favorites, orders: what the screens render
    """

    identity: IdentityProvider = field(default_factory=IdentityProvider)
    session_storage: SessionStorage = field(default_factory=SessionStorage)
    local_storage: SessionStorage = field(default_factory=SessionStorage)

    user: Optional[User] = None
    products: List[Product] = field(default_factory=list)
    cart: List[CartItem] = field(default_factory=list)
    favorites: List[str] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._unsubscribe = self.identity.on_auth_state_changed(
            self.handle_identity_change
        )

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    # ---------------------------
    # Loading
    # ---------------------------

    async def bootstrap(self) -> None:
        """First-run seeding, then the initial load."""
        await seed_defaults(self.identity)
        await self.reload()

    async def handle_identity_change(self, account: Optional[Account]) -> None:
        self.user = await crud.get_user(account.uid) if account else None
        await self.reload()

    async def reload(self) -> None:
        """Replace catalog, cart, favorites and orders wholesale."""
        self.products = await crud.list_products()
        if self.user:
            self.cart = await crud.get_cart(self.user.id)
            self.favorites = await crud.get_favorites(self.user.id)
            self.orders = await crud.list_orders(self.user.id)
        else:
            self.cart = self._load_guest_cart()
            self.favorites = []
            self.orders = []
        _logger.debug(
            f"State reloaded: {len(self.products)} products, {len(self.cart)} in cart"
        )

    def _load_guest_cart(self) -> List[CartItem]:
        raw = self.session_storage.get_item(GUEST_CART_KEY)
        if not raw:
            return []
        try:
            return crud.cart_items_from_dicts(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            _logger.exception("Discarding unreadable guest cart")
            return []

    def _store_guest_cart(self, items: List[CartItem]) -> None:
        self.session_storage.set_item(
            GUEST_CART_KEY, json.dumps([crud.cart_item_to_dict(i) for i in items])
        )

    # ---------------------------
    # Auth & Registration
    # ---------------------------

    async def login(self, email: str, password: str) -> ActionResult:
        email = (email or "").strip().lower()
        if not email or not password:
            return _fail(MESSAGES["fields_required"])
        if not is_valid_email(email):
            return _fail(MESSAGES["invalid_email"])

        try:
            await self.identity.sign_in(email, password)
        except AuthError as exc:
            _logger.warning(f"Login failed for {email}: {exc.code}")
            if exc.code in (AuthError.USER_NOT_FOUND, AuthError.WRONG_PASSWORD):
                return _fail(MESSAGES["invalid_credentials"])
            if exc.code == AuthError.INVALID_EMAIL:
                return _fail(MESSAGES["invalid_email"])
            return _fail(MESSAGES["login_failed"])

        if self.user is None:
            # credentials are fine but there is no user document behind them
            await self.identity.sign_out()
            return _fail(MESSAGES["user_info_missing"])
        return _ok(MESSAGES["welcome"].format(name=self.user.name))

    async def register(
        self,
        username: str,
        name: str,
        email: str,
        password: str,
        invite_code: str = "",
    ) -> ActionResult:
        """
        Create the identity account and the user document, then sign in.

        The role is decided here once: admin only with an unused invitation
        code, user otherwise.
        """
        username = (username or "").strip()
        name = (name or "").strip()
        email = (email or "").strip().lower()
        invite_code = (invite_code or "").strip()

        if not username or not name or not email or not password:
            return _fail(MESSAGES["fields_required"])
        if not is_valid_email(email):
            return _fail(MESSAGES["invalid_email"])
        if len(password) < config.MIN_PASSWORD_LENGTH:
            return _fail(MESSAGES["weak_password"])
        if await crud.username_exists(username):
            return _fail(MESSAGES["username_taken"])
        if await crud.email_exists(email):
            return _fail(MESSAGES["email_taken"])

        try:
            account = await self.identity.create_account(email, password, name)
        except AuthError as exc:
            _logger.warning(f"Registration failed for {email}: {exc.code}")
            return _fail(
                {
                    AuthError.EMAIL_IN_USE: MESSAGES["email_taken"],
                    AuthError.WEAK_PASSWORD: MESSAGES["weak_password"],
                    AuthError.INVALID_EMAIL: MESSAGES["invalid_email"],
                }.get(exc.code, MESSAGES["register_failed"])
            )

        is_admin = bool(invite_code) and await crud.redeem_admin_invite(
            invite_code, account.uid
        )
        role = "admin" if is_admin else "user"
        if not await crud.create_user(account.uid, username, name, account.email, role):
            await self._discard_account(account.uid)
            return _fail(MESSAGES["register_failed"])

        try:
            await self.identity.sign_in(email, password)
        except AuthError as exc:
            _logger.error(f"Sign in after registration failed: {exc.code}")
            return _fail(MESSAGES["login_failed"])
        return _ok(MESSAGES["registered_admin" if is_admin else "registered"])

    async def _discard_account(self, uid: str) -> None:
        try:
            await self.identity.delete_account(uid)
        except AuthError:
            _logger.exception(f"Could not roll back account {uid}")

    async def logout(self) -> ActionResult:
        await self.save_cart()
        self.session_storage.remove_item(GUEST_CART_KEY)
        await self.identity.sign_out()
        return _ok(MESSAGES["logged_out"])

    # ---------------------------
    # Catalog
    # ---------------------------

    def find_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def search(self, query: str) -> List[Product]:
        return search_products(self.products, query)

    def browse(
        self,
        query: str = "",
        category: Optional[str] = None,
        favorites_only: bool = False,
    ) -> List[Product]:
        products = filter_by_category(self.products, category)
        if favorites_only:
            products = [p for p in products if p.id in self.favorites]
        return search_products(products, query)

    def is_favorite(self, product_id: str) -> bool:
        return product_id in self.favorites

    async def toggle_favorite(self, product_id: str) -> ActionResult:
        if not self.user:
            return _fail(MESSAGES["favorites_login"], "warning")
        if product_id in self.favorites:
            updated = [f for f in self.favorites if f != product_id]
            message = MESSAGES["favorite_removed"]
        else:
            updated = self.favorites + [product_id]
            message = MESSAGES["favorite_added"]
        if not await crud.update_favorites(self.user.id, updated):
            return _fail(MESSAGES["favorites_failed"])
        self.favorites = updated
        return _ok(message)

    # ---------------------------
    # Cart Management
    # ---------------------------

    async def _persist_cart(self, items: List[CartItem]) -> bool:
        if self.user:
            return await crud.update_cart(self.user.id, items)
        self._store_guest_cart(items)
        return True

    async def save_cart(self) -> bool:
        return await self._persist_cart(self.cart)

    async def add_to_cart(self, product_id: str) -> ActionResult:
        product = self.find_product(product_id)
        if not product:
            return _fail(MESSAGES["product_not_found"])
        if any(item.id == product_id for item in self.cart):
            return _fail(MESSAGES["cart_duplicate"], "warning")

        updated = self.cart + [
            CartItem(
                id=product.id,
                name=product.name,
                price=product.price,
                category=product.category,
                image=product.image,
                quantity=1,
            )
        ]
        if not await self._persist_cart(updated):
            return _fail(MESSAGES["cart_save_failed"])
        self.cart = updated
        return _ok(MESSAGES["cart_added"])

    async def remove_from_cart(self, product_id: str) -> ActionResult:
        updated = [item for item in self.cart if item.id != product_id]
        if not await self._persist_cart(updated):
            return _fail(MESSAGES["cart_save_failed"])
        self.cart = updated
        return _ok(MESSAGES["cart_removed"])

    # ---------------------------
    # Checkout & Orders
    # ---------------------------

    def checkout_summary(self) -> CheckoutSummary:
        return checkout_summary(self.cart, config.TAX_RATE)

    async def checkout(self) -> ActionResult:
        """
        Record the order (signed-in users only) and empty the cart.

        The cart is emptied even when the order could not be stored, unless
        STRICT_CHECKOUT is enabled.
        """
        if not self.cart:
            return _fail(MESSAGES["cart_empty"], "warning")

        order = None
        if self.user:
            order = await crud.add_order(self.user.id, self.cart)
            if order:
                self.orders.insert(0, order)
            else:
                _logger.warning(f"Order for {self.user.id} was not recorded")
                if config.STRICT_CHECKOUT:
                    return _fail(MESSAGES["order_failed"])

        self.cart = []
        await self.save_cart()
        return _ok(MESSAGES["order_placed"], payload=order)

    # ---------------------------
    # Reviews
    # ---------------------------

    async def load_reviews(self, product_id: str) -> List[Review]:
        return await crud.list_reviews(product_id)

    async def add_review(self, product_id: str, content: str) -> ActionResult:
        if not self.user:
            return _fail(MESSAGES["review_login"], "warning")
        content = (content or "").strip()
        if not content:
            return _fail(MESSAGES["review_empty"], "warning")
        if not self.find_product(product_id):
            return _fail(MESSAGES["product_not_found"])
        review = await crud.add_review(product_id, self.user.id, self.user.name, content)
        if not review:
            return _fail(MESSAGES["review_failed"])
        return _ok(MESSAGES["review_added"], payload=review)

    def can_delete_review(self, review: Review) -> bool:
        return self.user is not None and (
            self.user.is_admin or review.user_id == self.user.id
        )

    async def delete_review(self, review: Review) -> ActionResult:
        if not self.can_delete_review(review):
            return _fail(MESSAGES["review_forbidden"], "warning")
        if not await crud.delete_review(review.id):
            return _fail(MESSAGES["review_failed"])
        return _ok(MESSAGES["review_deleted"])

    # ---------------------------
    # Admin
    # ---------------------------

    async def create_product(self, fields: Dict[str, Any]) -> ActionResult:
        if not self.is_admin:
            return _fail(MESSAGES["unauthorized"])
        cleaned, error = clean_product_fields(fields)
        if error:
            return _fail(error, "warning")

        product = await crud.add_product(cleaned)
        if not product:
            return _fail(MESSAGES["product_save_failed"])
        self.products.insert(0, product)
        return _ok(MESSAGES["product_added"], payload=product)

    async def update_product(
        self, product_id: str, fields: Dict[str, Any]
    ) -> ActionResult:
        if not self.is_admin:
            return _fail(MESSAGES["unauthorized"])
        existing = self.find_product(product_id)
        if not existing:
            return _fail(MESSAGES["product_not_found"])
        cleaned, error = clean_product_fields(fields)
        if error:
            return _fail(error, "warning")

        if not await crud.update_product(product_id, cleaned):
            return _fail(MESSAGES["product_save_failed"])
        updated = dataclasses.replace(existing, **cleaned)
        self.products = [updated if p.id == product_id else p for p in self.products]
        return _ok(MESSAGES["product_updated"], payload=updated)

    async def delete_product(self, product_id: str) -> ActionResult:
        """Remove the product from the catalog and from every cart holding it."""
        if not self.is_admin:
            return _fail(MESSAGES["unauthorized"])
        if not await crud.delete_product(product_id):
            return _fail(MESSAGES["product_delete_failed"])

        self.products = [p for p in self.products if p.id != product_id]
        self.cart = [item for item in self.cart if item.id != product_id]
        await self.save_cart()
        guest_cart = self._load_guest_cart()
        if any(item.id == product_id for item in guest_cart):
            self._store_guest_cart([i for i in guest_cart if i.id != product_id])
        if not await crud.remove_product_from_carts(product_id):
            # the product is gone, some saved carts still list it
            return _fail(MESSAGES["product_cascade_failed"], "warning")
        return _ok(MESSAGES["product_deleted"])

    async def issue_admin_invite(self) -> ActionResult:
        if not self.is_admin:
            return _fail(MESSAGES["unauthorized"])
        invite = await crud.create_admin_invite(self.user.id)
        if not invite:
            return _fail(MESSAGES["invite_failed"])
        return _ok(MESSAGES["invite_created"].format(code=invite.code), payload=invite.code)

    # ---------------------------
    # Preferences
    # ---------------------------

    @property
    def theme(self) -> str:
        return self.local_storage.get_item(THEME_KEY) or "dark"

    def toggle_theme(self) -> str:
        new_theme = "light" if self.theme == "dark" else "dark"
        self.local_storage.set_item(THEME_KEY, new_theme)
        return new_theme
