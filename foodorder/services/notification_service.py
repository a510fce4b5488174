# foodorder/services/notification_service.py
import uuid
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodorder.celery_worker import celery_app
from foodorder.data.database import SessionLocal
from foodorder.data.models.notification import NotificationModel
from foodorder.data.models.order import OrderModel
from foodorder.domain import notifications as notes
from foodorder.domain.errors import NotFound, PersistenceError, ValidationError
from foodorder.domain.notifications import AppNotification, PushTarget
from foodorder.domain.order_status import should_notify, status_message
from foodorder.domain.promotions import Promotion
from foodorder.domain.schemas import NotificationCreate
from foodorder.repos.notification_repo import NotificationRepo
from foodorder.repos.user_repo import UserRepo
from foodorder.services.push_client import PushClient, PushReport
from foodorder.utils.clock import Clock, now_ms
from foodorder.utils.settings import NOTIFICATION_FEED_LIMIT
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_STATUS_TITLE = "Siparis Durumu"
SYSTEM_AUTHOR = "system"


def notification_from_model(model: NotificationModel) -> AppNotification:
    return notes.ingest_notification(model.id, model.as_document())


def notification_to_dict(n: AppNotification) -> Dict[str, Any]:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "target_type": n.target_type,
        "target_user_ids": sorted(n.target_user_ids),
        "related_promo_code": n.related_promo_code,
        "related_order_id": n.related_order_id,
        "created_at": n.created_at,
        "created_by": n.created_by,
    }


def _enqueue_fan_out(notification_id: str):
    send_push_for_notification_task.delay(notification_id)


class NotificationService:
    """
    Notification records plus push fan-out.

    Creating a record schedules the push through `dispatch` (the Celery
    task by default). Fan-out failures are reported, never raised into the
    business operation that produced the notification.
    """

    def __init__(
        self,
        db: Session,
        push_client: PushClient | None = None,
        dispatch: Callable[[str], Any] | None = None,
        clock: Clock = now_ms,
    ):
        self.repo = NotificationRepo(db)
        self.users = UserRepo(db)
        self.push_client = push_client
        self.dispatch = dispatch or _enqueue_fan_out
        self.clock = clock

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------
    def _create(self, **fields) -> AppNotification:
        model = NotificationModel(
            id=uuid.uuid4().hex,
            created_at=self.clock(),
            read_by=[],
            **fields,
        )
        try:
            created = self.repo.create_notification(model)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Notification could not be saved: {e}")
            raise PersistenceError() from e

        notification = notification_from_model(created)
        self._schedule_push(notification.id)
        return notification

    def _schedule_push(self, notification_id: str):
        try:
            self.dispatch(notification_id)
        except Exception as e:
            logger.warning(f"Push fan-out for {notification_id} not scheduled: {e}")

    def create_broadcast(self, payload: NotificationCreate, author_id: str) -> Dict[str, Any]:
        """Admin-authored manual or promotion notification."""
        target_ids = sorted({t.strip() for t in payload.target_user_ids if t.strip()})
        if payload.target_type == "users" and not target_ids:
            raise ValidationError("En az bir kullanici secmelisin.")

        notification = self._create(
            title=payload.title.strip(),
            message=payload.message.strip(),
            type=payload.type,
            target_type=payload.target_type,
            target_user_ids=target_ids if payload.target_type == "users" else [],
            related_promo_code=(payload.related_promo_code or "").strip().upper() or None,
            related_order_id=None,
            created_by=author_id,
        )
        logger.info(f"Notification {notification.id} ({notification.type}) created by {author_id}")
        return notification_to_dict(notification)

    def announce_promotion(self, promo: Promotion, author_id: str) -> Dict[str, Any]:
        payload = NotificationCreate(
            title=promo.title,
            message=f"{promo.code} koduyla indirim seni bekliyor!",
            type="promotion",
            target_type="users" if promo.is_targeted else "all",
            target_user_ids=sorted(promo.target_user_ids),
            related_promo_code=promo.code,
        )
        return self.create_broadcast(payload, author_id)

    def notify_order_status(self, order: OrderModel, previous_status: str) -> Optional[AppNotification]:
        """
        System notification for the customer after a status change.
        Only preparing / on-the-way / delivered produce one.
        """
        if not should_notify(previous_status, order.status) or not order.customer_id:
            return None

        notification = self._create(
            title=ORDER_STATUS_TITLE,
            message=status_message(order.status, order.restaurant_name),
            type="order_status",
            target_type="users",
            target_user_ids=[order.customer_id],
            related_promo_code=None,
            related_order_id=order.id,
            created_by=SYSTEM_AUTHOR,
        )
        logger.info(f"Order {order.id} status notification {notification.id} for {order.customer_id}")
        return notification

    # ------------------------------------------------------------------
    # fan-out
    # ------------------------------------------------------------------
    def resolve_targets(self, notification: AppNotification) -> List[PushTarget]:
        if notification.target_type == "users":
            candidates = self.users.get_users(notification.target_user_ids)
        else:
            candidates = self.users.list_by_role("customer")
        targets = [
            PushTarget(id=u.id, role=u.role, push_tokens=tuple(u.push_tokens or []))
            for u in candidates
        ]
        return notes.select_targets(notification, targets)

    def fan_out(self, notification_id: str) -> PushReport:
        model = self.repo.get_notification(notification_id)
        if not model:
            raise NotFound("Bildirim bulunamadi.", notification_id=notification_id)
        notification = notification_from_model(model)

        users = self.resolve_targets(notification)
        if not users:
            logger.info(f"No target users found for notification {notification_id}")
            return PushReport()

        tokens = notes.collect_tokens(users)
        if not tokens:
            logger.info(f"No push tokens found for notification {notification_id}")
            return PushReport()

        client = self.push_client or PushClient()
        report = client.send(notes.build_push_messages(notification, tokens))
        logger.info(
            f"Notification {notification_id}: {report.sent_batches}/{report.batches} batches sent "
            f"to {len(users)} users"
        )
        return report

    # ------------------------------------------------------------------
    # reader side
    # ------------------------------------------------------------------
    def feed(self) -> List[AppNotification]:
        return [notification_from_model(m) for m in self.repo.latest(NOTIFICATION_FEED_LIMIT)]

    def unread_for(self, user_id: str) -> List[Dict[str, Any]]:
        return [notification_to_dict(n) for n in notes.unread_for(user_id, self.feed())]

    def mark_all_read(self, user_id: str) -> Dict[str, List[str]]:
        """
        Mark every currently unread notification as read for the user.
        Marks are independent: a failing one is reported and skipped.
        """
        marked, failed = [], []
        for notification in notes.unread_for(user_id, self.feed()):
            try:
                if self.repo.add_reader(notification.id, user_id):
                    marked.append(notification.id)
                else:
                    failed.append(notification.id)
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.error(f"Mark read failed for {notification.id}/{user_id}: {e}")
                failed.append(notification.id)
        return {"marked": marked, "failed": failed}


@celery_app.task(name="foodorder.services.notification_service.send_push_for_notification_task")
def send_push_for_notification_task(notification_id: str):
    """
    Celery task: push one notification to every resolved target.
    """
    db = SessionLocal()
    try:
        report = NotificationService(db).fan_out(notification_id)
        return report.model_dump()
    finally:
        db.close()
