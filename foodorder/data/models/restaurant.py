from sqlalchemy import Column, String, Numeric, BigInteger, JSON

from foodorder.data.database import Base


class RestaurantModel(Base):
    __tablename__ = "restaurants"

    id = Column(String, primary_key=True)
    owner_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    rating = Column(Numeric(3, 1), nullable=False, default=5)
    delivery_time = Column(String, nullable=False, default="")
    image_url = Column(String, nullable=True)

    # [{id, name, description, price, imageUrl}]
    menu = Column(JSON, nullable=False, default=list)
    created_at = Column(BigInteger, nullable=False)

    def as_document(self):
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "category": self.category,
            "rating": float(self.rating or 0),
            "deliveryTime": self.delivery_time,
            "image": self.image_url,
            "menu": list(self.menu or []),
            "createdAt": self.created_at,
        }
