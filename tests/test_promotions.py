from decimal import Decimal

import pytest

from foodorder.domain.errors import InvalidPromotionCode, MinOrderNotMet, PromotionExpired
from foodorder.domain.promotions import (
    LegacyTimestamp,
    Millis,
    Promotion,
    check_applicable,
    classify_timestamp,
    ingest_promotion,
    ingest_promotions,
    is_visible,
    resolve_timestamp,
    visible_promotions,
)

NOW = 1_700_000_000_000


class FirestoreLikeTimestamp:
    def __init__(self, ms):
        self.ms = ms

    def toMillis(self):
        return self.ms


def promo(**kw):
    kw.setdefault("code", "KOD")
    kw.setdefault("value", Decimal("10"))
    return Promotion(**kw)


# --- visibility --------------------------------------------------------------

def test_public_active_promotion_is_visible():
    assert is_visible(promo(), "u1", NOW)


def test_inactive_promotion_is_hidden():
    assert not is_visible(promo(active=False), "u1", NOW)


def test_window_bounds():
    assert not is_visible(promo(starts_at=NOW + 1), "u1", NOW)
    assert not is_visible(promo(ends_at=NOW - 1), "u1", NOW)
    assert is_visible(promo(starts_at=NOW, ends_at=NOW), "u1", NOW)


def test_targeted_promotion_only_for_listed_users():
    p = promo(target_user_ids=frozenset({"u1", "u2"}))
    assert is_visible(p, "u1", NOW)
    assert not is_visible(p, "u3", NOW)


def test_visibility_is_idempotent():
    promos = [promo(code="A"), promo(code="B", active=False), promo(code="C", target_user_ids=frozenset({"x"}))]
    first = visible_promotions(promos, "u1", NOW)
    assert visible_promotions(promos, "u1", NOW) == first
    assert [p.code for p in first] == ["A"]


# --- timestamps --------------------------------------------------------------

def test_timestamp_shapes():
    assert classify_timestamp(123) == Millis(123)
    assert isinstance(classify_timestamp({"seconds": 1}), LegacyTimestamp)
    assert classify_timestamp("2024-01-01") is None
    assert classify_timestamp(True) is None
    assert classify_timestamp(None) is None


def test_resolve_timestamp_variants():
    assert resolve_timestamp(1_000) == 1_000
    assert resolve_timestamp(FirestoreLikeTimestamp(5_000)) == 5_000
    assert resolve_timestamp({"seconds": 2, "nanoseconds": 500_000_000}) == 2_500
    assert resolve_timestamp({"_seconds": 3}) == 3_000
    assert resolve_timestamp({"foo": "bar"}) is None
    assert resolve_timestamp([1, 2]) is None


# --- ingestion ---------------------------------------------------------------

def test_ingest_normalizes_record():
    p = ingest_promotion("neo10", {
        "title": "Hosgeldin",
        "value": "10",
        "minOrderTotal": 50,
        "startsAt": FirestoreLikeTimestamp(NOW - 1000),
        "endsAt": {"seconds": (NOW + 60_000) // 1000},
    })
    assert p.code == "NEO10"
    assert p.type == "percent"
    assert p.active is True
    assert p.value == Decimal("10")
    assert p.min_order_total == Decimal("50")
    assert p.starts_at == NOW - 1000
    assert p.ends_at == NOW + 60_000


def test_ingest_drops_non_positive_value():
    assert ingest_promotion("ZERO", {"value": 0}) is None
    assert ingest_promotion("NEG", {"value": -5}) is None
    assert ingest_promotion("BAD", {"value": "abc"}) is None


def test_ingest_drops_percentage_above_hundred():
    assert ingest_promotion("BIG", {"value": 150}) is None
    assert ingest_promotion("BIG", {"value": 150, "type": "percent"}) is None
    assert ingest_promotion("FULL", {"value": 100}).value == Decimal("100")
    assert ingest_promotion("AMT", {"value": 150, "type": "amount"}).value == Decimal("150")


def test_ingest_defaults():
    p = ingest_promotion("x", {"value": 5, "type": "weird", "maxDiscountAmount": 0, "targetUserIds": ["a", 3, ""]})
    assert p.type == "percent"
    assert p.max_discount_amount is None
    assert p.min_order_total == Decimal("0")
    assert p.target_user_ids == frozenset({"a"})


def test_ingest_many_sorts_newest_first_and_skips_invalid():
    docs = [
        ("OLD", {"value": 5, "createdAt": "2024-01-01T00:00:00+00:00"}),
        ("NONE", {"value": 0, "createdAt": "2024-06-01T00:00:00+00:00"}),
        ("NEW", {"value": 5, "createdAt": "2024-03-01T00:00:00+00:00"}),
    ]
    assert [p.code for p in ingest_promotions(docs)] == ["NEW", "OLD"]


# --- checkout gate -----------------------------------------------------------

def test_check_applicable_unknown_code():
    with pytest.raises(InvalidPromotionCode):
        check_applicable(None, "u1", Decimal("100"), NOW)


def test_check_applicable_not_targeted_user_is_invalid_code():
    with pytest.raises(InvalidPromotionCode):
        check_applicable(promo(target_user_ids=frozenset({"u2"})), "u1", Decimal("100"), NOW)


def test_check_applicable_expired():
    with pytest.raises(PromotionExpired):
        check_applicable(promo(ends_at=NOW - 1), "u1", Decimal("100"), NOW)
    with pytest.raises(PromotionExpired):
        check_applicable(promo(active=False), "u1", Decimal("100"), NOW)


def test_check_applicable_min_order():
    p = promo(min_order_total=Decimal("50"))
    with pytest.raises(MinOrderNotMet):
        check_applicable(p, "u1", Decimal("49.99"), NOW)
    assert check_applicable(p, "u1", Decimal("50"), NOW) is p
