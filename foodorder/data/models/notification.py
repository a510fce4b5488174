from sqlalchemy import Column, String, BigInteger, JSON

from foodorder.data.database import Base


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False, default="")
    type = Column(String, nullable=False, default="manual")  # manual, promotion, order_status
    target_type = Column(String, nullable=False, default="all")  # all, users
    target_user_ids = Column(JSON, nullable=False, default=list)
    related_promo_code = Column(String, nullable=True)
    related_order_id = Column(String, nullable=True)
    created_at = Column(BigInteger, nullable=False, index=True)
    created_by = Column(String, nullable=True)
    read_by = Column(JSON, nullable=False, default=list)

    def as_document(self):
        return {
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "targetType": self.target_type,
            "targetUserIds": list(self.target_user_ids or []),
            "relatedPromoCode": self.related_promo_code,
            "relatedOrderId": self.related_order_id,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
            "readBy": list(self.read_by or []),
        }
