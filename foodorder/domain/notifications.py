# foodorder/domain/notifications.py
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from foodorder.domain.promotions import resolve_timestamp

EXPO_TOKEN_PREFIX = "ExponentPushToken["
DEFAULT_TITLE = "Bildirim"

NotificationType = Literal["manual", "promotion", "order_status"]
TargetType = Literal["all", "users"]


class AppNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = DEFAULT_TITLE
    message: str = ""
    type: NotificationType = "manual"
    target_type: TargetType = "all"
    target_user_ids: frozenset[str] = Field(default_factory=frozenset)
    related_promo_code: Optional[str] = None
    related_order_id: Optional[str] = None
    created_at: int = 0
    created_by: Optional[str] = None
    read_by: frozenset[str] = Field(default_factory=frozenset)


class PushTarget(BaseModel):
    """The slice of a user record fan-out needs."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: str
    push_tokens: tuple[str, ...] = ()


def _str_set(raw: Any) -> frozenset[str]:
    return frozenset(v for v in (raw if isinstance(raw, list) else []) if isinstance(v, str))


def ingest_notification(doc_id: str, data: dict) -> AppNotification:
    created_at = data.get("createdAt")
    if isinstance(created_at, str):
        try:
            created_ms = int(datetime.fromisoformat(created_at.replace("Z", "+00:00")).timestamp() * 1000)
        except ValueError:
            created_ms = 0
    else:
        created_ms = resolve_timestamp(created_at) or 0

    ntype = data.get("type")
    return AppNotification(
        id=doc_id,
        title=data.get("title") if isinstance(data.get("title"), str) else DEFAULT_TITLE,
        message=data.get("message") if isinstance(data.get("message"), str) else "",
        type=ntype if ntype in ("promotion", "order_status") else "manual",
        target_type="users" if data.get("targetType") == "users" else "all",
        target_user_ids=_str_set(data.get("targetUserIds")),
        related_promo_code=data.get("relatedPromoCode") if isinstance(data.get("relatedPromoCode"), str) else None,
        related_order_id=data.get("relatedOrderId") if isinstance(data.get("relatedOrderId"), str) else None,
        created_at=created_ms,
        created_by=data.get("createdBy") if isinstance(data.get("createdBy"), str) else None,
        read_by=_str_set(data.get("readBy")),
    )


def is_visible_to(notification: AppNotification, user_id: str) -> bool:
    if notification.target_type == "all":
        return True
    return user_id in notification.target_user_ids


def unread_for(user_id: str, notifications: Iterable[AppNotification]) -> List[AppNotification]:
    unread = [
        n for n in notifications
        if is_visible_to(n, user_id) and user_id not in n.read_by
    ]
    return sorted(unread, key=lambda n: n.created_at, reverse=True)


def select_targets(notification: AppNotification, users: Iterable[PushTarget]) -> List[PushTarget]:
    """
    users-targeted: the listed ids that still exist (unknown ids dropped);
    all: every customer.
    """
    if notification.target_type == "users":
        wanted = notification.target_user_ids
        if not wanted:
            return []
        return [u for u in users if u.id in wanted]
    return [u for u in users if u.role == "customer"]


def valid_push_token(token: Any) -> bool:
    return isinstance(token, str) and token.startswith(EXPO_TOKEN_PREFIX)


def collect_tokens(users: Iterable[PushTarget]) -> List[str]:
    seen: dict[str, None] = {}
    for user in users:
        for token in user.push_tokens:
            if valid_push_token(token):
                seen.setdefault(token, None)
    return list(seen)


def build_push_messages(notification: AppNotification, tokens: Iterable[str]) -> List[dict]:
    return [
        {
            "to": token,
            "sound": "default",
            "title": notification.title or DEFAULT_TITLE,
            "body": notification.message or "",
            "channelId": "default",
            "data": {
                "notificationId": notification.id,
                "type": notification.type,
                "relatedPromoCode": notification.related_promo_code,
                "relatedOrderId": notification.related_order_id,
            },
        }
        for token in tokens
    ]


def chunked(items: list, size: int) -> List[list]:
    if size <= 0:
        raise ValueError("chunk size must be > 0")
    return [items[i:i + size] for i in range(0, len(items), size)]
