import uuid
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodorder.data.models.restaurant import RestaurantModel
from foodorder.data.models.user import UserModel
from foodorder.domain.errors import NotAuthorized, NotFound, PersistenceError
from foodorder.domain.schemas import MenuItemIn, RestaurantCreate, RestaurantUpdate
from foodorder.repos.restaurant_repo import RestaurantRepo
from foodorder.utils.clock import Clock, now_ms
from foodorder.utils.money import D, round_money
from foodorder.utils.settings import SELLER_COMMISSION_RATE
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ITEM_IMAGE = "https://images.unsplash.com/photo-1546069901-ba9599a7e63c?w=400"


def restaurant_to_dict(r: RestaurantModel) -> Dict[str, Any]:
    return {
        "id": r.id,
        "owner_id": r.owner_id,
        "name": r.name,
        "category": r.category,
        "rating": r.rating,
        "delivery_time": r.delivery_time,
        "image_url": r.image_url,
        "menu": [
            {
                "id": m.get("id"),
                "name": m.get("name"),
                "description": m.get("description") or "",
                "price": D(m.get("price")),
                "image_url": m.get("imageUrl"),
            }
            for m in r.menu or []
        ],
    }


def price_with_commission(seller_price, rate=None) -> Decimal:
    rate = D(SELLER_COMMISSION_RATE if rate is None else rate)
    price = D(seller_price)
    return round_money(price + price * rate)


class RestaurantService:
    """
    Admin manages restaurants, a seller manages the menu of the one
    restaurant its account is linked to.
    """

    def __init__(self, db: Session, clock: Clock = now_ms):
        self.repo = RestaurantRepo(db)
        self.clock = clock

    def _save(self, restaurant: RestaurantModel) -> RestaurantModel:
        try:
            return self.repo.save(restaurant)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Restaurant {restaurant.id} could not be saved: {e}")
            raise PersistenceError() from e

    def require(self, restaurant_id: str) -> RestaurantModel:
        restaurant = self.repo.get_restaurant(restaurant_id)
        if not restaurant:
            raise NotFound("Restoran bulunamadi.", restaurant_id=restaurant_id)
        return restaurant

    def list_restaurants(self) -> List[Dict[str, Any]]:
        return [restaurant_to_dict(r) for r in self.repo.list_restaurants()]

    def get_restaurant(self, restaurant_id: str) -> Dict[str, Any]:
        return restaurant_to_dict(self.require(restaurant_id))

    def create_restaurant(self, payload: RestaurantCreate) -> Dict[str, Any]:
        restaurant = RestaurantModel(
            id=f"r{uuid.uuid4().hex[:12]}",
            owner_id=payload.owner_id,
            name=payload.name.strip(),
            category=payload.category.strip(),
            rating=5,
            delivery_time=payload.delivery_time.strip(),
            image_url=(payload.image_url or "").strip() or None,
            menu=[],
            created_at=self.clock(),
        )
        created = self._save(restaurant)
        logger.info(f"Restaurant {created.id} created")
        return restaurant_to_dict(created)

    def update_restaurant(self, restaurant_id: str, payload: RestaurantUpdate) -> Dict[str, Any]:
        restaurant = self.require(restaurant_id)
        for field, value in payload.model_dump(exclude_none=True).items():
            setattr(restaurant, field, value.strip() if isinstance(value, str) else value)
        return restaurant_to_dict(self._save(restaurant))

    def delete_restaurant(self, restaurant_id: str):
        restaurant = self.require(restaurant_id)
        try:
            self.repo.delete(restaurant)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Restaurant {restaurant_id} could not be deleted: {e}")
            raise PersistenceError() from e
        logger.info(f"Restaurant {restaurant_id} deleted")

    # menu ------------------------------------------------------------------
    def _own_restaurant(self, seller: UserModel, restaurant_id: str) -> RestaurantModel:
        if seller.role != "seller" or seller.restaurant_id != restaurant_id:
            raise NotAuthorized("Dukkan baglantisi bulunamadi.")
        return self.require(restaurant_id)

    def add_menu_item(self, seller: UserModel, restaurant_id: str, payload: MenuItemIn) -> Dict[str, Any]:
        restaurant = self._own_restaurant(seller, restaurant_id)
        item = {
            "id": f"m{uuid.uuid4().hex[:12]}",
            "name": payload.name.strip(),
            "description": payload.description.strip(),
            "imageUrl": (payload.image_url or "").strip() or DEFAULT_ITEM_IMAGE,
            "price": str(price_with_commission(payload.price)),
        }
        restaurant.menu = list(restaurant.menu or []) + [item]
        logger.info(f"Menu item {item['id']} added to {restaurant_id} by {seller.id}")
        return restaurant_to_dict(self._save(restaurant))

    def remove_menu_item(self, seller: UserModel, restaurant_id: str, item_id: str) -> Dict[str, Any]:
        restaurant = self._own_restaurant(seller, restaurant_id)
        menu = [m for m in restaurant.menu or [] if m.get("id") != item_id]
        if len(menu) == len(restaurant.menu or []):
            raise NotFound("Urun bulunamadi.", item_id=item_id)
        restaurant.menu = menu
        return restaurant_to_dict(self._save(restaurant))
