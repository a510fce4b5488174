# foodorder/domain/promotions.py
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from foodorder.domain.errors import InvalidPromotionCode, MinOrderNotMet, PromotionExpired
from foodorder.utils.money import D

DEFAULT_PROMO_TITLE = "Kampanya"
DEFAULT_PROMO_IMAGE = "https://images.unsplash.com/photo-1556740749-887f6717d7e4?w=1200"


class Promotion(BaseModel):
    """Canonical promotion; every field already normalized at ingestion."""

    model_config = ConfigDict(frozen=True)

    code: str
    title: str = DEFAULT_PROMO_TITLE
    image_url: str = DEFAULT_PROMO_IMAGE
    type: Literal["percent", "amount"] = "percent"
    value: Decimal
    active: bool = True
    min_order_total: Decimal = Decimal("0")
    max_discount_amount: Optional[Decimal] = None
    target_user_ids: frozenset[str] = Field(default_factory=frozenset)
    starts_at: Optional[int] = None
    ends_at: Optional[int] = None
    created_at: Optional[str] = None

    @property
    def id(self) -> str:
        return self.code

    @property
    def is_targeted(self) -> bool:
        return len(self.target_user_ids) > 0


# --- timestamp shapes ------------------------------------------------------
# Stored documents carry startsAt/endsAt either as epoch millis or as a
# platform timestamp (toMillis() accessor, or its serialized seconds form).

class Millis(NamedTuple):
    value: int


class LegacyTimestamp(NamedTuple):
    raw: Any

    def to_millis(self) -> Optional[int]:
        raw = self.raw
        accessor = getattr(raw, "toMillis", None)
        if accessor is None and isinstance(raw, dict):
            accessor = raw.get("toMillis")
        if callable(accessor):
            value = accessor()
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
            return None
        if isinstance(raw, dict):
            seconds = raw.get("seconds", raw.get("_seconds"))
            nanos = raw.get("nanoseconds", raw.get("_nanoseconds", 0)) or 0
            if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
                return int(seconds * 1000 + nanos // 1_000_000)
        return None


def classify_timestamp(raw: Any) -> Millis | LegacyTimestamp | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return Millis(int(raw))
    if isinstance(raw, dict) or hasattr(raw, "toMillis"):
        return LegacyTimestamp(raw)
    return None


def resolve_timestamp(raw: Any) -> Optional[int]:
    tagged = classify_timestamp(raw)
    if isinstance(tagged, Millis):
        return tagged.value
    if isinstance(tagged, LegacyTimestamp):
        return tagged.to_millis()
    return None


# --- ingestion -------------------------------------------------------------

def _number(raw: Any) -> Optional[Decimal]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal, str)):
        return None
    try:
        value = D(raw)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def ingest_promotion(doc_id: str, data: dict) -> Optional[Promotion]:
    """
    Raw `promos` document -> Promotion, or None when the record must be
    ignored (non-positive value, or a percentage above 100).
    """
    value = _number(data.get("value")) or Decimal("0")
    if value <= 0:
        return None
    promo_type = "amount" if data.get("type") == "amount" else "percent"
    if promo_type == "percent" and value > 100:
        return None

    min_order = _number(data.get("minOrderTotal"))
    max_discount = _number(data.get("maxDiscountAmount"))
    targets = data.get("targetUserIds")
    created_at = data.get("createdAt")

    return Promotion(
        code=str(data.get("code") or doc_id).strip().upper(),
        title=data.get("title") or DEFAULT_PROMO_TITLE,
        image_url=data.get("imageUrl") or DEFAULT_PROMO_IMAGE,
        type=promo_type,
        value=value,
        active=data.get("active") is not False,
        min_order_total=min_order if min_order is not None and min_order > 0 else Decimal("0"),
        max_discount_amount=max_discount if max_discount is not None and max_discount > 0 else None,
        target_user_ids=frozenset(
            t for t in (targets if isinstance(targets, list) else []) if isinstance(t, str) and t
        ),
        starts_at=resolve_timestamp(data.get("startsAt")),
        ends_at=resolve_timestamp(data.get("endsAt")),
        created_at=created_at if isinstance(created_at, str) else None,
    )


def ingest_promotions(docs: Iterable[tuple[str, dict]]) -> List[Promotion]:
    """Whole `promos` snapshot, newest first."""
    promos = [p for p in (ingest_promotion(doc_id, data) for doc_id, data in docs) if p]
    return sorted(promos, key=lambda p: p.created_at or "", reverse=True)


# --- eligibility -----------------------------------------------------------

def is_within_window(promotion: Promotion, now: int) -> bool:
    if promotion.starts_at is not None and now < promotion.starts_at:
        return False
    if promotion.ends_at is not None and now > promotion.ends_at:
        return False
    return True


def is_targeted_at(promotion: Promotion, user_id: str) -> bool:
    return not promotion.is_targeted or user_id in promotion.target_user_ids


def is_visible(promotion: Promotion, user_id: str, now: int) -> bool:
    if not promotion.active:
        return False
    if not is_within_window(promotion, now):
        return False
    return is_targeted_at(promotion, user_id)


def visible_promotions(promotions: Iterable[Promotion], user_id: str, now: int) -> List[Promotion]:
    return [p for p in promotions if is_visible(p, user_id, now)]


def check_applicable(promotion: Promotion | None, user_id: str, subtotal, now: int) -> Promotion:
    """
    Checkout gate for a looked-up promotion. Raises the matching
    PromotionRejected subclass, returns the promotion when it applies.
    """
    if promotion is None or not is_targeted_at(promotion, user_id):
        raise InvalidPromotionCode()
    if not promotion.active or not is_within_window(promotion, now):
        raise PromotionExpired(promo_code=promotion.code)
    if D(subtotal) < promotion.min_order_total:
        raise MinOrderNotMet(
            promo_code=promotion.code,
            min_order_total=str(promotion.min_order_total),
        )
    return promotion
