# src/db/crud.py
"""
Data access layer: one small function per domain operation.

Every function catches store failures, logs them and returns a
failure-shaped value ([], None or False) instead of raising.
"""
from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import aiosqlite

from db import documents, models
from db.documents import DocumentNotFoundError, StoreError
from utils.logger import get_logger
from utils.pure import order_total

_logger = get_logger(__name__)

PRODUCTS = "products"
USERS = "users"
CARTS = "carts"
ORDERS = "orders"
REVIEWS = "reviews"
ADMIN_INVITES = "admin_invites"

_STORE_ERRORS = (StoreError, aiosqlite.Error)


# ---------------------------
# Document <-> model conversion
# ---------------------------


def _product_from_doc(doc: Dict[str, Any]) -> models.Product:
    return models.Product(
        id=doc["id"],
        name=doc.get("name", ""),
        description=doc.get("description", ""),
        price=Decimal(str(doc.get("price", "0"))),
        category=doc.get("category", "other"),
        image=doc.get("image") or "",
        created_at=doc.get("createdAt", ""),
    )


def _product_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(fields)
    if "price" in out:
        out["price"] = str(out["price"])
    return out


def _user_from_doc(doc: Dict[str, Any]) -> models.User:
    return models.User(
        id=doc["id"],
        username=doc.get("username", ""),
        name=doc.get("name", ""),
        email=doc.get("email", ""),
        role=doc.get("role", "user"),
        created_at=doc.get("createdAt", ""),
    )


def _cart_item_from_dict(item: Dict[str, Any]) -> models.CartItem:
    return models.CartItem(
        id=item["id"],
        name=item.get("name", ""),
        price=Decimal(str(item.get("price", "0"))),
        category=item.get("category", "other"),
        image=item.get("image") or "",
        quantity=int(item.get("quantity", 1)),
    )


def cart_item_to_dict(item: models.CartItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "price": str(item.price),
        "category": item.category,
        "image": item.image,
        "quantity": item.quantity,
    }


def cart_items_from_dicts(items: Sequence[Dict[str, Any]]) -> List[models.CartItem]:
    return [_cart_item_from_dict(i) for i in items]


def _order_from_doc(doc: Dict[str, Any]) -> models.Order:
    lines = tuple(
        models.OrderLine(
            product_id=line.get("productId", ""),
            name=line.get("name", ""),
            price=Decimal(str(line.get("price", "0"))),
            quantity=int(line.get("quantity", 1)),
        )
        for line in doc.get("items", [])
    )
    return models.Order(
        id=doc["id"],
        user_id=doc.get("userId", ""),
        created_at=doc.get("createdAt", ""),
        items=lines,
        total=Decimal(str(doc.get("total", "0"))),
        status=doc.get("status", models.ORDER_STATUS_COMPLETED),
    )


def _review_from_doc(doc: Dict[str, Any]) -> models.Review:
    return models.Review(
        id=doc["id"],
        product_id=doc.get("productId", ""),
        user_id=doc.get("userId", ""),
        author=doc.get("author", ""),
        content=doc.get("content", ""),
        created_at=doc.get("createdAt", ""),
    )


# ---------------------------
# Products
# ---------------------------


async def list_products() -> List[models.Product]:
    """All products, newest first."""
    try:
        docs = await documents.query_documents(
            PRODUCTS, order_by="createdAt", descending=True
        )
    except _STORE_ERRORS:
        _logger.exception("Error getting products")
        return []
    return [_product_from_doc(d) for d in docs]


async def get_product(product_id: str) -> Optional[models.Product]:
    try:
        doc = await documents.get_document(PRODUCTS, product_id)
    except _STORE_ERRORS:
        _logger.exception(f"Error getting product {product_id}")
        return None
    return _product_from_doc(doc) if doc else None


async def add_product(fields: Dict[str, Any]) -> Optional[models.Product]:
    """Create a product from name/description/price/category/image fields."""
    try:
        doc = await documents.add_document(PRODUCTS, _product_fields(fields))
    except _STORE_ERRORS:
        _logger.exception("Error adding product")
        return None
    return _product_from_doc(doc)


async def update_product(product_id: str, fields: Dict[str, Any]) -> bool:
    try:
        await documents.update_document(PRODUCTS, product_id, _product_fields(fields))
    except _STORE_ERRORS:
        _logger.exception(f"Error updating product {product_id}")
        return False
    return True


async def delete_product(product_id: str) -> bool:
    try:
        await documents.delete_document(PRODUCTS, product_id)
    except _STORE_ERRORS:
        _logger.exception(f"Error deleting product {product_id}")
        return False
    return True


# ---------------------------
# Users
# ---------------------------


async def get_user(uid: str) -> Optional[models.User]:
    try:
        doc = await documents.get_document(USERS, uid)
    except _STORE_ERRORS:
        _logger.exception(f"Error getting user {uid}")
        return None
    return _user_from_doc(doc) if doc else None


async def create_user(
    uid: str, username: str, name: str, email: str, role: str = "user"
) -> bool:
    try:
        await documents.set_document(
            USERS,
            uid,
            {
                "username": username,
                "name": name,
                "email": email,
                "role": role,
                "favorites": [],
                "createdAt": documents.server_timestamp(),
            },
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error creating user {uid}")
        return False
    return True


async def update_user(uid: str, fields: Dict[str, Any]) -> bool:
    try:
        await documents.update_document(USERS, uid, fields)
    except _STORE_ERRORS:
        _logger.exception(f"Error updating user {uid}")
        return False
    return True


async def _field_taken(field_name: str, value: str) -> bool:
    try:
        docs = await documents.query_documents(USERS, where={field_name: value})
    except _STORE_ERRORS:
        _logger.exception(f"Error checking {field_name}")
        return True  # assume taken on error
    return bool(docs)


async def username_exists(username: str) -> bool:
    """True if taken. Also True when the store cannot answer."""
    return await _field_taken("username", username)


async def email_exists(email: str) -> bool:
    """True if taken. Also True when the store cannot answer."""
    return await _field_taken("email", email)


async def admin_exists() -> bool:
    try:
        docs = await documents.query_documents(USERS, where={"role": "admin"})
    except _STORE_ERRORS:
        _logger.exception("Error checking admin")
        return False
    return bool(docs)


# ---------------------------
# Favorites
# ---------------------------


async def get_favorites(uid: str) -> List[str]:
    try:
        doc = await documents.get_document(USERS, uid)
    except _STORE_ERRORS:
        _logger.exception(f"Error getting favorites of {uid}")
        return []
    if not doc:
        return []
    return list(doc.get("favorites") or [])


async def update_favorites(uid: str, favorites: Sequence[str]) -> bool:
    return await update_user(uid, {"favorites": list(favorites)})


# ---------------------------
# Cart Management
# ---------------------------


async def get_cart(uid: str) -> List[models.CartItem]:
    try:
        doc = await documents.get_document(CARTS, uid)
    except _STORE_ERRORS:
        _logger.exception(f"Error getting cart of {uid}")
        return []
    if not doc:
        return []
    return cart_items_from_dicts(doc.get("items") or [])


async def update_cart(uid: str, items: Sequence[models.CartItem]) -> bool:
    """Replace the user's persisted cart."""
    try:
        await documents.set_document(
            CARTS,
            uid,
            {
                "items": [cart_item_to_dict(i) for i in items],
                "updatedAt": documents.server_timestamp(),
            },
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error updating cart of {uid}")
        return False
    return True


async def remove_product_from_carts(product_id: str) -> bool:
    """Drop a product from every persisted cart that holds it."""
    try:
        carts = await documents.query_documents(CARTS)
        for cart in carts:
            items = cart.get("items") or []
            kept = [i for i in items if i.get("id") != product_id]
            if len(kept) != len(items):
                await documents.set_document(
                    CARTS,
                    cart["id"],
                    {"items": kept, "updatedAt": documents.server_timestamp()},
                )
    except _STORE_ERRORS:
        _logger.exception(f"Error removing product {product_id} from carts")
        return False
    return True


# ---------------------------
# Checkout & Orders
# ---------------------------


async def list_orders(uid: str) -> List[models.Order]:
    """The user's orders, newest first."""
    try:
        docs = await documents.query_documents(
            ORDERS, where={"userId": uid}, order_by="createdAt", descending=True
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error getting orders of {uid}")
        return []
    return [_order_from_doc(d) for d in docs]


async def add_order(
    uid: str, items: Sequence[models.CartItem]
) -> Optional[models.Order]:
    """Record an order snapshot of the given cart lines with status `completed`."""
    lines = [
        models.OrderLine(
            product_id=i.id, name=i.name, price=i.price, quantity=i.quantity
        )
        for i in items
    ]
    try:
        doc = await documents.add_document(
            ORDERS,
            {
                "userId": uid,
                "items": [
                    {
                        "productId": line.product_id,
                        "name": line.name,
                        "price": str(line.price),
                        "quantity": line.quantity,
                    }
                    for line in lines
                ],
                "total": str(order_total(lines)),
                "status": models.ORDER_STATUS_COMPLETED,
            },
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error adding order for {uid}")
        return None
    return _order_from_doc(doc)


# ---------------------------
# Reviews
# ---------------------------


async def list_reviews(product_id: str) -> List[models.Review]:
    try:
        docs = await documents.query_documents(
            REVIEWS,
            where={"productId": product_id},
            order_by="createdAt",
            descending=True,
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error getting reviews of {product_id}")
        return []
    return [_review_from_doc(d) for d in docs]


async def add_review(
    product_id: str, user_id: str, author: str, content: str
) -> Optional[models.Review]:
    try:
        doc = await documents.add_document(
            REVIEWS,
            {
                "productId": product_id,
                "userId": user_id,
                "author": author,
                "content": content,
            },
        )
    except _STORE_ERRORS:
        _logger.exception(f"Error adding review to {product_id}")
        return None
    return _review_from_doc(doc)


async def delete_review(review_id: str) -> bool:
    try:
        await documents.delete_document(REVIEWS, review_id)
    except _STORE_ERRORS:
        _logger.exception(f"Error deleting review {review_id}")
        return False
    return True


# ---------------------------
# Admin invitations
# ---------------------------


async def create_admin_invite(created_by: str) -> Optional[models.AdminInvite]:
    code = secrets.token_urlsafe(12)
    created_at = documents.server_timestamp()
    try:
        await documents.set_document(
            ADMIN_INVITES,
            code,
            {"createdBy": created_by, "createdAt": created_at, "redeemedBy": ""},
        )
    except _STORE_ERRORS:
        _logger.exception("Error creating admin invite")
        return None
    return models.AdminInvite(code=code, created_by=created_by, created_at=created_at)


async def redeem_admin_invite(code: str, uid: str) -> bool:
    """
    Mark an unused invite as redeemed by `uid`. Returns False for unknown
    or already redeemed codes, and when the store fails.
    """
    if not code:
        return False
    try:
        doc = await documents.get_document(ADMIN_INVITES, code)
        if not doc or doc.get("redeemedBy"):
            return False
        await documents.update_document(
            ADMIN_INVITES,
            code,
            {"redeemedBy": uid, "redeemedAt": documents.server_timestamp()},
        )
    except DocumentNotFoundError:
        return False
    except _STORE_ERRORS:
        _logger.exception("Error redeeming admin invite")
        return False
    return True
