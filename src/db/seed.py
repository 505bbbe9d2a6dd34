# first-run data: default catalog and an optional configured admin
from decimal import Decimal
from typing import Optional

from db import crud
from db.identity import AuthError, IdentityProvider
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_PRODUCTS = [
    {
        "name": "Premium JavaScript Kursu",
        "description": "Sıfırdan ileri seviye JavaScript öğrenin. 50+ saat video içerik, pratik projeler ve sertifika.",
        "price": Decimal("299.99"),
        "category": "course",
        "image": "",
    },
    {
        "name": "Modern Web Tasarım Şablonları",
        "description": "20 adet profesyonel web sitesi şablonu. HTML, CSS ve JavaScript ile hazırlanmış.",
        "price": Decimal("149.99"),
        "category": "template",
        "image": "",
    },
    {
        "name": "Python Programlama E-Kitabı",
        "description": "500+ sayfa kapsamlı Python rehberi. Temel kavramlardan ileri düzey konulara kadar.",
        "price": Decimal("79.99"),
        "category": "ebook",
        "image": "",
    },
]


async def seed_default_products() -> int:
    """Insert the default catalog if there are no products yet. Returns the number inserted."""
    if await crud.list_products():
        return 0
    inserted = 0
    for product in DEFAULT_PRODUCTS:
        if await crud.add_product(product):
            inserted += 1
    _logger.info(f"Default products initialized ({inserted})")
    return inserted


async def seed_admin(
    identity: IdentityProvider,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> bool:
    """
    Provision the configured admin account when no admin exists.
    Returns True if an admin was created.
    """
    email = email or config.ADMIN_EMAIL
    password = password or config.ADMIN_PASSWORD
    if not email or not password:
        _logger.debug("No admin credentials configured, skipping admin seed.")
        return False
    if await crud.admin_exists():
        return False

    try:
        account = await identity.create_account(email, password, "System Admin")
    except AuthError as exc:
        _logger.warning(f"Could not seed admin {email}: {exc.code}")
        return False

    created = await crud.create_user(
        account.uid, "admin", "System Admin", account.email, role="admin"
    )
    if not created:
        try:
            await identity.delete_account(account.uid)
        except AuthError:
            _logger.exception(f"Could not roll back admin account {account.uid}")
        return False
    _logger.info(f"Default admin created: {account.email}")
    return True


async def seed_defaults(identity: IdentityProvider) -> None:
    await seed_default_products()
    await seed_admin(identity)
