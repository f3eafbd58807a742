# storefront/utils/card.py
"""Payment card helpers used by the checkout form.

Only classification and display formatting live here; card data is never
persisted beyond the detected card type.
"""
import re

# Checked in order, first match wins
CARD_TYPES = {
    "visa": re.compile(r"^4"),
    "mastercard": re.compile(r"^5[1-5]|^2[2-7]"),
    "amex": re.compile(r"^3[47]"),
    "discover": re.compile(r"^6(?:011|5)"),
}

AMEX_GROUPS = (4, 6, 5)
DEFAULT_GROUPS = (4, 4, 4, 4)


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def get_card_type(number: str) -> str:
    clean = _digits(number)
    for card_type, pattern in CARD_TYPES.items():
        if pattern.search(clean):
            return card_type
    return "unknown"


def format_card_number(value: str) -> str:
    """Group digits as XXXX XXXXXX XXXXX for amex, XXXX XXXX XXXX XXXX otherwise.

    Digits beyond the last group are dropped.
    """
    clean = _digits(value)
    groups = AMEX_GROUPS if CARD_TYPES["amex"].search(clean) else DEFAULT_GROUPS

    parts = []
    pos = 0
    for size in groups:
        chunk = clean[pos:pos + size]
        if not chunk:
            break
        parts.append(chunk)
        pos += size
    return " ".join(parts)


def format_expiry_date(value: str) -> str:
    clean = _digits(value)
    if len(clean) < 2:
        return clean

    month = clean[:2]
    if int(month) > 12:
        month = "12"
    rest = clean[2:]
    return month + ("/" + rest if rest else "")


def is_valid_expiry(value: str) -> bool:
    return re.fullmatch(r"(0[1-9]|1[0-2])/\d{2}", value or "") is not None
