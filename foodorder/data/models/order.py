from sqlalchemy import Column, Integer, String, BigInteger, Numeric, JSON

from foodorder.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    restaurant_id = Column(String, nullable=False, index=True)
    restaurant_name = Column(String, nullable=False, default="")
    customer_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # frozen [{id, name, price, quantity}]
    items = Column(JSON, nullable=False, default=list)

    total = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    final_total = Column(Numeric(10, 2), nullable=False)
    promo_code = Column(String, nullable=True)

    address = Column(String, nullable=False, default="")
    note = Column(String, nullable=True)
    payment_method = Column(String, nullable=False)

    status = Column(String, nullable=False, index=True)  # Beklemede, Hazırlanıyor, Yolda, ...
    version = Column(Integer, nullable=False, default=1)
    date = Column(String, nullable=False)
    created_at = Column(BigInteger, nullable=False, index=True)  # epoch ms

    def as_document(self):
        return {
            "id": self.id,
            "restaurantId": self.restaurant_id,
            "restaurantName": self.restaurant_name,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "items": list(self.items or []),
            "total": float(self.total or 0),
            "discount": float(self.discount or 0),
            "finalTotal": float(self.final_total or 0),
            "address": self.address,
            "note": self.note,
            "status": self.status,
            "date": self.date,
            "createdAt": self.created_at,
            "paymentMethod": self.payment_method,
        }
