from decimal import Decimal

import pytest

from foodorder.domain.discount import apply_discount
from foodorder.domain.promotions import Promotion


def promo(**kw):
    kw.setdefault("code", "TEST")
    return Promotion(**kw)


def test_percent_discount_on_qualifying_cart():
    result = apply_discount(Decimal("100"), promo(code="NEO10", type="percent", value=Decimal("10"), min_order_total=Decimal("50")))
    assert result.discount_amount == Decimal("10.00")
    assert result.final_total == Decimal("90.00")


def test_amount_discount_is_capped_by_subtotal():
    result = apply_discount(Decimal("150"), promo(type="amount", value=Decimal("200")))
    assert result.discount_amount == Decimal("150")
    assert result.final_total == Decimal("0")


def test_max_discount_amount_caps_percent():
    result = apply_discount(Decimal("400"), promo(type="percent", value=Decimal("50"), max_discount_amount=Decimal("60")))
    assert result.discount_amount == Decimal("60")
    assert result.final_total == Decimal("340")


def test_no_promotion_means_no_discount():
    result = apply_discount(Decimal("42.50"), None)
    assert result.discount_amount == Decimal("0.00")
    assert result.final_total == Decimal("42.50")


def test_percent_rounds_half_up_to_cents():
    # 12.5% of 10.01 = 1.25125
    result = apply_discount(Decimal("10.01"), promo(type="percent", value=Decimal("12.5")))
    assert result.discount_amount == Decimal("1.25")
    assert result.final_total == Decimal("8.76")


@pytest.mark.parametrize("subtotal", ["0", "0.01", "33.33", "99.99", "1000"])
@pytest.mark.parametrize("kind,value", [("percent", "15"), ("percent", "100"), ("amount", "20"), ("amount", "5000")])
def test_discount_stays_within_bounds_and_sums_back(subtotal, kind, value):
    subtotal = Decimal(subtotal)
    result = apply_discount(subtotal, promo(type=kind, value=Decimal(value)))
    assert Decimal("0") <= result.discount_amount <= subtotal
    assert result.final_total >= 0
    assert result.final_total + result.discount_amount == subtotal


def test_accepts_float_subtotal():
    result = apply_discount(19.9, promo(type="amount", value=Decimal("5")))
    assert result.final_total == Decimal("14.9")
