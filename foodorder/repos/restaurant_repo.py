# foodorder/repos/restaurant_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodorder.data.models.restaurant import RestaurantModel


class RestaurantRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_restaurant(self, restaurant_id: str) -> RestaurantModel | None:
        return self.db.get(RestaurantModel, restaurant_id)

    def list_restaurants(self) -> List[RestaurantModel]:
        return list(self.db.execute(select(RestaurantModel).order_by(RestaurantModel.created_at)).scalars())

    def save(self, restaurant: RestaurantModel) -> RestaurantModel:
        self.db.add(restaurant)
        self.db.commit()
        self.db.refresh(restaurant)
        return restaurant

    def delete(self, restaurant: RestaurantModel):
        self.db.delete(restaurant)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
