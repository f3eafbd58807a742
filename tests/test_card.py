import pytest

from storefront.utils.card import (
    get_card_type, format_card_number, format_expiry_date, is_valid_expiry,
)


@pytest.mark.parametrize("number,expected", [
    ("4111111111111111", "visa"),
    ("5500000000000004", "mastercard"),
    ("2221000000000009", "mastercard"),
    ("340000000000009", "amex"),
    ("370000000000002", "amex"),
    ("6011000000000004", "discover"),
    ("6500000000000002", "discover"),
    ("9999000000000000", "unknown"),
    ("", "unknown"),
])
def test_card_type_detection(number, expected):
    assert get_card_type(number) == expected


def test_card_type_ignores_separators():
    assert get_card_type("4111 1111-1111 1111") == "visa"


def test_format_groups_regular_cards_in_fours():
    assert format_card_number("4111111111111111") == "4111 1111 1111 1111"
    assert format_card_number("41111") == "4111 1"


def test_format_groups_amex_4_6_5():
    assert format_card_number("340000000000009") == "3400 000000 00009"


def test_format_drops_digits_past_last_group():
    assert format_card_number("41111111111111112222") == "4111 1111 1111 1111"


def test_expiry_clamps_month():
    assert format_expiry_date("13") == "12"
    assert format_expiry_date("1925") == "12/25"


def test_expiry_inserts_separator():
    assert format_expiry_date("0125") == "01/25"
    assert format_expiry_date("01/25") == "01/25"
    assert format_expiry_date("0") == "0"


def test_expiry_validation():
    assert is_valid_expiry("01/25")
    assert not is_valid_expiry("00/25")
    assert not is_valid_expiry("1/25")
