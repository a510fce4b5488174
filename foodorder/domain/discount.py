# foodorder/domain/discount.py
from decimal import Decimal
from typing import NamedTuple

from foodorder.domain.promotions import Promotion
from foodorder.utils.money import D, ZERO, round_money


class DiscountResult(NamedTuple):
    discount_amount: Decimal
    final_total: Decimal


def apply_discount(subtotal, promotion: Promotion | None) -> DiscountResult:
    """
    Discount for a cart subtotal under an (already accepted) promotion.

    percent -> subtotal * value / 100, amount -> value; the result is capped
    by the subtotal and by max_discount_amount when the promotion has one.
    Minimum order total is not checked here, see promotions.check_applicable.
    """
    subtotal = D(subtotal)
    if subtotal < 0:
        subtotal = ZERO

    if promotion is None:
        return DiscountResult(ZERO, subtotal)

    if promotion.type == "percent":
        raw = subtotal * promotion.value / Decimal(100)
    else:
        raw = promotion.value

    discount = min(round_money(raw), subtotal)
    if promotion.max_discount_amount is not None:
        discount = min(discount, promotion.max_discount_amount)
    discount = max(discount, ZERO)

    return DiscountResult(discount, subtotal - discount)
