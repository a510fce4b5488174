from typing import Dict, Any

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from foodorder.domain import cart as carts
from foodorder.domain.cart import Cart, MenuItemSnapshot
from foodorder.domain.errors import NotFound, ValidationError
from foodorder.repos.restaurant_repo import RestaurantRepo
from foodorder.services.cart_cache import CartCache
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)


def cart_to_dict(customer_id: str, cart: Cart) -> Dict[str, Any]:
    return {
        "customer_id": customer_id,
        "restaurant_id": cart.restaurant_id,
        "restaurant_name": cart.restaurant_name,
        "items": [
            {
                "id": line.item.id,
                "name": line.item.name,
                "description": line.item.description,
                "price": line.item.price,
                "image_url": line.item.image_url,
                "quantity": line.quantity,
                "line_total": line.line_total,
            }
            for line in cart.lines
        ],
        "subtotal": carts.subtotal(cart),
    }


class CartService:
    """
    Per-customer cart kept in the key-value cache until checkout.
    queries (get) never fail: an unreadable cache is an empty cart.
    commands (add, set quantity, clear) write the whole cart back.
    """

    def __init__(self, db: Session, cache: CartCache):
        self.restaurants = RestaurantRepo(db)
        self.cache = cache

    #query
    def load(self, customer_id: str) -> Cart:
        try:
            raw = self.cache.load(customer_id)
        except RedisError as e:
            logger.warning(f"Cart cache unavailable for {customer_id}, using empty cart: {e}")
            return carts.EMPTY_CART
        return carts.load_cart(raw)

    def get_cart(self, customer_id: str) -> Dict[str, Any]:
        return cart_to_dict(customer_id, self.load(customer_id))

    #commands
    def _save(self, customer_id: str, cart: Cart):
        try:
            if cart.is_empty:
                self.cache.clear(customer_id)
            else:
                self.cache.store(customer_id, carts.dump_cart(cart))
        except RedisError as e:
            # best effort: the caller still gets the computed cart
            logger.error(f"Could not persist cart for {customer_id}: {e}")

    def _menu_item(self, restaurant_id: str, item_id: str):
        restaurant = self.restaurants.get_restaurant(restaurant_id)
        if not restaurant:
            raise NotFound("Restoran bulunamadi.", restaurant_id=restaurant_id)

        for entry in restaurant.menu or []:
            if entry.get("id") == item_id:
                try:
                    snapshot = MenuItemSnapshot(
                        id=entry["id"],
                        name=entry.get("name") or "",
                        description=entry.get("description") or "",
                        price=entry.get("price"),
                        image_url=entry.get("imageUrl"),
                    )
                except ValueError as e:
                    raise ValidationError("Urun fiyati gecersiz.", item_id=item_id) from e
                return restaurant, snapshot

        raise NotFound("Urun bulunamadi.", item_id=item_id)

    def add_item(
        self,
        customer_id: str,
        restaurant_id: str,
        item_id: str,
        replace: bool = False,
    ) -> Dict[str, Any]:
        """
        Add one unit of a menu item.

        A cart of another restaurant raises CrossRestaurantConflict unless
        the caller confirmed the switch with replace=True.
        """
        restaurant, item = self._menu_item(restaurant_id, item_id)
        current = self.load(customer_id)

        if replace and current.restaurant_id not in (None, restaurant.id):
            logger.info(f"Customer {customer_id} switches cart to restaurant {restaurant.id}")
            updated = carts.replace_with(item, restaurant.id, restaurant.name)
        else:
            updated = carts.add_item(current, item, restaurant.id, restaurant.name)

        self._save(customer_id, updated)
        logger.info(f"Item {item.id} added to cart of {customer_id}")
        return cart_to_dict(customer_id, updated)

    def set_quantity(self, customer_id: str, line_index: int, quantity) -> Dict[str, Any]:
        updated = carts.set_quantity(self.load(customer_id), line_index, quantity)
        self._save(customer_id, updated)
        return cart_to_dict(customer_id, updated)

    def clear(self, customer_id: str) -> Dict[str, Any]:
        self._save(customer_id, carts.EMPTY_CART)
        return cart_to_dict(customer_id, carts.EMPTY_CART)
