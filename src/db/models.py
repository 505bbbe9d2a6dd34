# provide dataclass models

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Tuple

Category = Literal["ebook", "course", "software", "template", "other"]
Role = Literal["user", "admin"]

CATEGORIES: Tuple[str, ...] = ("ebook", "course", "software", "template", "other")
ORDER_STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: Decimal
    category: str  # one of CATEGORIES
    image: str = ""  # optional image url
    created_at: str = ""


@dataclass(frozen=True)
class User:
    id: str  # identity provider uid
    username: str
    name: str
    email: str
    role: str  # "user" or "admin"
    created_at: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class CartItem:
    """Snapshot of a product at the time it was put in the cart."""

    id: str  # product id
    name: str
    price: Decimal
    category: str
    image: str = ""
    quantity: int = 1


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    name: str
    price: Decimal  # unit price at time of order
    quantity: int


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    created_at: str
    items: Tuple[OrderLine, ...]
    total: Decimal
    status: str = ORDER_STATUS_COMPLETED


@dataclass(frozen=True)
class Review:
    id: str
    product_id: str
    user_id: str
    author: str
    content: str
    created_at: str = ""


@dataclass(frozen=True)
class AdminInvite:
    code: str
    created_by: str
    created_at: str = ""
    redeemed_by: str = ""
