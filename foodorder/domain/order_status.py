# foodorder/domain/order_status.py
import enum
import unicodedata
from typing import Optional

from foodorder.domain.errors import CancelWindowExpired, InvalidTransition, NotAuthorized
from foodorder.utils.settings import CANCEL_WINDOW_MS


class OrderStatus(str, enum.Enum):
    """Stored value is the localized label the clients display."""

    PENDING = "Beklemede"
    PREPARING = "Hazırlanıyor"
    OUT_FOR_DELIVERY = "Yolda"
    DELIVERED = "Teslim Edildi"
    REJECTED = "Reddedildi"
    CANCELLED = "İptal"


TERMINAL = frozenset({OrderStatus.DELIVERED, OrderStatus.REJECTED, OrderStatus.CANCELLED})

# (from, to) -> role allowed to trigger it
TRANSITIONS = {
    (OrderStatus.PENDING, OrderStatus.PREPARING): "seller",
    (OrderStatus.PENDING, OrderStatus.REJECTED): "seller",
    (OrderStatus.PENDING, OrderStatus.CANCELLED): "customer",
    (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY): "seller",
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED): "seller",
}


def normalize_status(value) -> str:
    """lowercase, strip diacritics, fold dotted/dotless i."""
    text = str(value or "").lower()
    text = text.replace("ı", "i").replace("İ", "i")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.strip()


_ALIASES = {
    "beklemede": OrderStatus.PENDING,
    "pending": OrderStatus.PENDING,
    "hazirlaniyor": OrderStatus.PREPARING,
    "preparing": OrderStatus.PREPARING,
    "yolda": OrderStatus.OUT_FOR_DELIVERY,
    "on-the-way": OrderStatus.OUT_FOR_DELIVERY,
    "out_for_delivery": OrderStatus.OUT_FOR_DELIVERY,
    "teslim edildi": OrderStatus.DELIVERED,
    "teslimedildi": OrderStatus.DELIVERED,
    "delivered": OrderStatus.DELIVERED,
    "reddedildi": OrderStatus.REJECTED,
    "rejected": OrderStatus.REJECTED,
    "iptal": OrderStatus.CANCELLED,
    "cancelled": OrderStatus.CANCELLED,
}


def parse_status(value) -> Optional[OrderStatus]:
    if isinstance(value, OrderStatus):
        return value
    return _ALIASES.get(normalize_status(value))


# statuses that produce the automatic customer notification
NOTIFY_ON = frozenset({OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED})


def should_notify(previous, new) -> bool:
    prev_norm, new_norm = normalize_status(previous), normalize_status(new)
    if not new_norm or prev_norm == new_norm:
        return False
    return parse_status(new) in NOTIFY_ON


def status_message(status, restaurant_name: str | None = None) -> str:
    store = f" ({restaurant_name})" if restaurant_name else ""
    parsed = parse_status(status)

    if parsed is OrderStatus.PREPARING:
        return f"Siparisin onaylandi, hazirlaniyor{store}."
    if parsed is OrderStatus.OUT_FOR_DELIVERY:
        return f"Siparisin yolda{store}."
    if parsed is OrderStatus.DELIVERED:
        return f"Siparisin teslim edildi{store}. Afiyet olsun."
    if parsed in (OrderStatus.CANCELLED, OrderStatus.REJECTED):
        return f"Siparisin iptal edildi{store}."

    return f"Siparis durumun guncellendi{store}: {status}"


def cancel_window_remaining_ms(created_at: int, now: int, window_ms: int = CANCEL_WINDOW_MS) -> int:
    return max(0, created_at + window_ms - now)


def check_transition(
    current,
    target,
    *,
    actor_role: str,
    actor_owns_order: bool,
    created_at: int,
    now: int,
    window_ms: int = CANCEL_WINDOW_MS,
) -> OrderStatus:
    """
    Validate one requested status change and return the canonical target.

    Nothing is mutated here: the caller writes the status only when this
    returns.
    """
    current_status = parse_status(current)
    target_status = parse_status(target)

    if current_status is None or target_status is None:
        raise InvalidTransition(current=str(current), target=str(target))

    required_role = TRANSITIONS.get((current_status, target_status))
    if required_role is None or required_role != actor_role:
        raise InvalidTransition(current=current_status.value, target=target_status.value)

    if not actor_owns_order:
        raise NotAuthorized()

    if target_status is OrderStatus.CANCELLED and now - created_at >= window_ms:
        raise CancelWindowExpired(created_at=created_at, now=now)

    return target_status


def next_statuses(current, actor_role: str) -> list[OrderStatus]:
    current_status = parse_status(current)
    return [to for (frm, to), role in TRANSITIONS.items() if frm is current_status and role == actor_role]
