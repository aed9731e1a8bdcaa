from decimal import Decimal

import pytest

from tallyra.core.config import settings
from tallyra.core.exceptions import InvalidAmount
from tallyra.schemas.session import ShopProfile
from tallyra.services.money import parse_amount, round2
from tallyra.services.upi import payment_uri, qr_image_url


def test_parse_amount_accepts_positive_numbers():
    assert parse_amount(" 18.50 ") == Decimal("18.50")
    assert parse_amount(7) == Decimal("7")
    assert parse_amount(2.5) == Decimal("2.5")


@pytest.mark.parametrize("raw", [None, "", "1.2.3", "-1", "0", "0.00", "inf", "nan"])
def test_parse_amount_rejects(raw):
    with pytest.raises(InvalidAmount) as excinfo:
        parse_amount(raw)

    assert excinfo.value.message == "invalid amount"


def test_round2_rounds_half_up():
    assert round2(Decimal("33.335")) == Decimal("33.34")
    assert round2(Decimal("10")) == Decimal("10.00")


def test_payment_uri():
    shop = ShopProfile(id="s", name="Ravi & Sons", currency="INR", upi_id="ravi@okbank")

    uri = payment_uri(shop, Decimal("120.50"))

    assert uri == (
        "upi://pay?pa=ravi@okbank&pn=Ravi%20%26%20Sons&am=120.50"
        "&cu=INR&tn=Payment%20to%20Ravi%20%26%20Sons"
    )


def test_payment_uri_without_upi_id():
    assert payment_uri(ShopProfile(id="s", name="Ravi"), Decimal("10")) == ""


def test_shop_currency_defaults_from_settings():
    assert ShopProfile(id="s", name="Ravi").currency == settings.default_currency


def test_qr_image_url_encodes_upi_string():
    url = qr_image_url("upi://pay?pa=ravi@okbank&am=10")

    assert url == (
        "https://api.qrserver.com/v1/create-qr-code/?size=300x300"
        "&data=upi%3A%2F%2Fpay%3Fpa%3Dravi%40okbank%26am%3D10&format=png&margin=10"
    )


def test_qr_image_url_cycles_through_services():
    assert qr_image_url("x", 1).startswith("https://quickchart.io/qr?text=x&")
    assert qr_image_url("x", 2).startswith("https://chart.googleapis.com/chart?")
    assert qr_image_url("x", 3) == qr_image_url("x", 0)


def test_qr_image_url_without_upi_string():
    assert qr_image_url("") == ""
