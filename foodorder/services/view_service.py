from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodorder.data.models.notification import NotificationModel
from foodorder.data.models.order import OrderModel
from foodorder.data.models.promotion import PromotionModel
from foodorder.domain import snapshots
from foodorder.domain.errors import NotAuthorized, NotFound
from foodorder.domain.snapshots import KnownOrders, SnapshotHub
from foodorder.repos.user_repo import UserRepo
from foodorder.services.notification_service import notification_to_dict
from foodorder.services.promotion_service import promotion_to_dict
from foodorder.utils.clock import Clock, now_ms
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

# process-wide; each seller dashboard alerts against the order ids it was last shown
hub = SnapshotHub()
known_orders = KnownOrders()

_SOURCES = {
    "orders": OrderModel,
    "promos": PromotionModel,
    "notifications": NotificationModel,
}


class ViewService:
    """Dashboard views: reload snapshots from the database, then project."""

    def __init__(
        self,
        db: Session,
        snapshot_hub: SnapshotHub | None = None,
        clock: Clock = now_ms,
        seen_orders: KnownOrders | None = None,
    ):
        self.db = db
        self.users = UserRepo(db)
        self.hub = snapshot_hub or hub
        self.seen_orders = seen_orders or known_orders
        self.clock = clock

    def refresh(self, *collections: str):
        for name in collections:
            model = _SOURCES[name]
            rows = self.db.execute(select(model)).scalars()
            table = self.hub.publish(name, ((row.id, row.as_document()) for row in rows))
            logger.debug(f"Snapshot {name}: {len(table)} records")

    def _user(self, user_id: str):
        user = self.users.get_user(user_id)
        if not user:
            raise NotFound("Kullanici bulunamadi.", user_id=user_id)
        return user

    def customer(self, user_id: str) -> Dict[str, Any]:
        user = self._user(user_id)
        self.refresh("promos", "notifications", "orders")
        view = snapshots.customer_view(
            user.id,
            self.hub.table("promos"),
            self.hub.table("notifications"),
            self.hub.table("orders"),
            self.clock(),
        )
        return {
            "promotions": [promotion_to_dict(p) for p in view.promotions],
            "unread": [notification_to_dict(n) for n in view.unread],
            "unread_count": view.unread_count,
            "orders": [dict(o) for o in view.orders],
        }

    def seller(self, user_id: str) -> Dict[str, Any]:
        user = self._user(user_id)
        if user.role != "seller" or not user.restaurant_id:
            raise NotAuthorized("Dukkan baglantisi bulunamadi.")
        self.refresh("orders")
        view = self.seen_orders.seller_view(user.id, user.restaurant_id, self.hub.table("orders"))
        if view.new_pending:
            logger.info(f"Restaurant {user.restaurant_id}: {len(view.new_pending)} new pending orders")
        return {
            "restaurant_id": user.restaurant_id,
            "orders": [dict(o) for o in view.orders],
            "open_count": view.open_count,
            "new_pending": [dict(o) for o in view.new_pending],
            "alert": snapshots.new_order_message(len(view.new_pending)) if view.new_pending else None,
        }

    def top_customers(self, user_id: str, limit: int = 5) -> list:
        if self._user(user_id).role != "admin":
            raise NotAuthorized()
        self.refresh("orders")
        return [c._asdict() for c in snapshots.top_customers(self.hub.table("orders"), limit)]
