import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Literal, Optional, Sequence

from utils.i18n import category_label

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CENT = Decimal("0.01")


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [[_escape_cell(str(cell)) for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def money(value) -> Decimal:
    """Coerce to a Decimal rounded to cents. Raises ValueError on garbage."""
    try:
        amount = Decimal(str(value).strip().replace(",", "."))
        if not amount.is_finite():
            raise ValueError(f"not a price: {value!r}")
        return amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"not a price: {value!r}") from exc


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


# ---------------------------
# Catalog
# ---------------------------


def normalize_query(query: str) -> str:
    return (query or "").strip().casefold()


def matches_query(product, query: str) -> bool:
    """Substring match over name, description and the localized category label."""
    needle = normalize_query(query)
    if not needle:
        return True
    haystacks = (product.name, product.description, category_label(product.category))
    return any(needle in (h or "").casefold() for h in haystacks)


def search_products(products: Iterable, query: str) -> list:
    """Filter products by query, keeping their order. Blank query keeps everything."""
    return [p for p in products if matches_query(p, query)]


def filter_by_category(products: Iterable, category: Optional[str]) -> list:
    if not category:
        return list(products)
    return [p for p in products if p.category == category]


# ---------------------------
# Checkout
# ---------------------------


@dataclass(frozen=True)
class CheckoutSummary:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def checkout_summary(items: Sequence, tax_rate: Decimal) -> CheckoutSummary:
    """Subtotal is the sum of line prices; tax is a flat rate on top."""
    subtotal = sum((Decimal(item.price) for item in items), Decimal("0")).quantize(_CENT)
    tax = (subtotal * tax_rate).quantize(_CENT, rounding=ROUND_HALF_UP)
    return CheckoutSummary(subtotal=subtotal, tax=tax, total=subtotal + tax)


def order_total(lines: Iterable) -> Decimal:
    return sum(
        (Decimal(line.price) * line.quantity for line in lines), Decimal("0")
    ).quantize(_CENT)


# ---------------------------
# Payment form input
# ---------------------------


def format_card_number(value: str) -> str:
    """Group card digits in blocks of four: 4111111111111111 -> 4111 1111 1111 1111"""
    digits = re.sub(r"\D", "", value or "")[:16]
    return " ".join(digits[i : i + 4] for i in range(0, len(digits), 4))


def format_expiry_date(value: str) -> str:
    digits = re.sub(r"\D", "", value or "")[:4]
    if len(digits) >= 2:
        return digits[:2] + "/" + digits[2:]
    return digits


def format_cvv(value: str) -> str:
    return re.sub(r"\D", "", value or "")[:3]


def validate_card(holder: str, number: str, expiry: str, cvv: str) -> bool:
    if not holder.strip():
        return False
    if len(re.sub(r"\D", "", number)) != 16:
        return False
    match = re.fullmatch(r"(\d{2})/(\d{2})", expiry.strip())
    if not match or not 1 <= int(match.group(1)) <= 12:
        return False
    return len(cvv.strip()) == 3 and cvv.strip().isdigit()
