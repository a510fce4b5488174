# foodorder/repos/notification_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodorder.data.models.notification import NotificationModel


class NotificationRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, notification: NotificationModel) -> NotificationModel:
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_notification(self, notification_id: str) -> NotificationModel | None:
        return self.db.get(NotificationModel, notification_id)

    def latest(self, limit: int) -> List[NotificationModel]:
        q = select(NotificationModel).order_by(NotificationModel.created_at.desc()).limit(limit)
        return list(self.db.execute(q).scalars())

    def add_reader(self, notification_id: str, user_id: str) -> bool:
        notification = self.get_notification(notification_id)
        if notification is None:
            return False
        readers = list(notification.read_by or [])
        if user_id not in readers:
            # new list so the JSON column is flagged dirty
            notification.read_by = readers + [user_id]
            self.db.commit()
        return True

    def rollback(self):
        self.db.rollback()
