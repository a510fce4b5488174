from sqlalchemy import Column, String, JSON

from foodorder.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    role = Column(String, nullable=False, default="customer", index=True)  # admin, seller, customer
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    restaurant_id = Column(String, nullable=True, index=True)

    # [{id, title, fullAddress, isDefault}]
    addresses = Column(JSON, nullable=False, default=list)
    push_tokens = Column(JSON, nullable=False, default=list)

    def as_document(self):
        return {
            "id": self.id,
            "role": self.role,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "restaurantId": self.restaurant_id,
            "addresses": list(self.addresses or []),
            "expoPushTokens": list(self.push_tokens or []),
        }
