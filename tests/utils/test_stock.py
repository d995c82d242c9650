import pytest

from utils.stock import format_stock, parse_stock_quantity, stock_quantity_or_none


@pytest.mark.parametrize(
    "stock, expected",
    [
        ("In Stock (50 kg)", 50),
        ("In Stock (7 piece)", 7),
        ("In Stock (100kg)", 100),
        ("Out of Stock", 10),  # No quantity, default applies
        ("In Stock", 10),
        ("", 10),
        ("In Stock (lots)", 10),
    ],
)
def test_parse_stock_quantity(stock, expected):
    assert parse_stock_quantity(stock) == expected


def test_parse_stock_quantity_custom_default():
    assert parse_stock_quantity("Out of Stock", default=0) == 0


def test_stock_quantity_or_none():
    assert stock_quantity_or_none("In Stock (3 bunch)") == 3
    assert stock_quantity_or_none("Out of Stock") is None
    assert stock_quantity_or_none(None) is None  # type: ignore [arg-type]


def test_format_stock():
    assert format_stock(50, "kg") == "In Stock (50 kg)"
    assert format_stock(0, "kg") == "Out of Stock"


def test_format_then_parse_keeps_quantity():
    assert parse_stock_quantity(format_stock(12, "dozen")) == 12
