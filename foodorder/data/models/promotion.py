from sqlalchemy import Column, String, Boolean, BigInteger, Numeric, JSON

from foodorder.data.database import Base


class PromotionModel(Base):
    __tablename__ = "promos"

    # code, uppercased
    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    type = Column(String, nullable=False, default="percent")  # percent, amount
    value = Column(Numeric(10, 2), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    min_order_total = Column(Numeric(10, 2), nullable=False, default=0)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)
    target_user_ids = Column(JSON, nullable=False, default=list)
    starts_at = Column(BigInteger, nullable=True)
    ends_at = Column(BigInteger, nullable=True)
    created_at = Column(String, nullable=False)

    def as_document(self):
        return {
            "code": self.id,
            "title": self.title,
            "imageUrl": self.image_url,
            "type": self.type,
            "value": self.value,
            "active": self.active,
            "minOrderTotal": self.min_order_total,
            "maxDiscountAmount": self.max_discount_amount,
            "targetUserIds": list(self.target_user_ids or []),
            "startsAt": self.starts_at,
            "endsAt": self.ends_at,
            "createdAt": self.created_at,
        }
