# foodorder/domain/cart.py
import json
import math
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from foodorder.domain.errors import CrossRestaurantConflict, ValidationError
from foodorder.utils.money import D, ZERO


class MenuItemSnapshot(BaseModel):
    """Copy of a menu item taken when it enters a cart."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: Decimal
    image_url: Optional[str] = None

    @field_validator("price")
    @classmethod
    def _positive_price(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("price must be > 0")
        return v


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: MenuItemSnapshot
    restaurant_id: str
    restaurant_name: str = ""
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.quantity


class Cart(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: tuple[CartLine, ...] = ()

    @property
    def restaurant_id(self) -> Optional[str]:
        return self.lines[0].restaurant_id if self.lines else None

    @property
    def restaurant_name(self) -> Optional[str]:
        return self.lines[0].restaurant_name if self.lines else None

    @property
    def is_empty(self) -> bool:
        return not self.lines


EMPTY_CART = Cart()


def add_item(cart: Cart, item: MenuItemSnapshot, restaurant_id: str, restaurant_name: str = "") -> Cart:
    if cart.lines and cart.restaurant_id != restaurant_id:
        raise CrossRestaurantConflict(
            current_restaurant_id=cart.restaurant_id,
            requested_restaurant_id=restaurant_id,
        )

    for idx, line in enumerate(cart.lines):
        if line.item.id == item.id:
            bumped = line.model_copy(update={"quantity": line.quantity + 1})
            return Cart(lines=cart.lines[:idx] + (bumped,) + cart.lines[idx + 1:])

    new_line = CartLine(item=item, restaurant_id=restaurant_id, restaurant_name=restaurant_name, quantity=1)
    return Cart(lines=cart.lines + (new_line,))


def replace_with(item: MenuItemSnapshot, restaurant_id: str, restaurant_name: str = "") -> Cart:
    """Confirmed restaurant switch: drop everything, start over with one line."""
    return add_item(EMPTY_CART, item, restaurant_id, restaurant_name)


def floor_quantity(qty) -> int:
    try:
        value = float(qty)
    except (TypeError, ValueError):
        raise ValidationError("Gecersiz adet.", quantity=qty)
    if not math.isfinite(value):
        raise ValidationError("Gecersiz adet.", quantity=qty)
    return max(0, math.floor(value))


def set_quantity(cart: Cart, line_index: int, qty) -> Cart:
    if line_index < 0 or line_index >= len(cart.lines):
        raise ValidationError("Sepet satiri bulunamadi.", line_index=line_index)

    qty = floor_quantity(qty)
    if qty <= 0:
        return Cart(lines=cart.lines[:line_index] + cart.lines[line_index + 1:])

    updated = cart.lines[line_index].model_copy(update={"quantity": qty})
    return Cart(lines=cart.lines[:line_index] + (updated,) + cart.lines[line_index + 1:])


def subtotal(cart: Cart) -> Decimal:
    return sum((line.line_total for line in cart.lines), ZERO)


# --- cached form -----------------------------------------------------------

def dump_cart(cart: Cart) -> str:
    return json.dumps(
        [
            {
                "restaurantId": line.restaurant_id,
                "restaurantName": line.restaurant_name,
                "quantity": line.quantity,
                "item": {
                    "id": line.item.id,
                    "name": line.item.name,
                    "description": line.item.description,
                    "price": str(line.item.price),
                    "imageUrl": line.item.image_url,
                },
            }
            for line in cart.lines
        ]
    )


def _parse_line(entry: Any) -> Optional[CartLine]:
    if not isinstance(entry, dict):
        return None
    restaurant_id = entry.get("restaurantId")
    item = entry.get("item")
    if not isinstance(restaurant_id, str) or not restaurant_id or not isinstance(item, dict):
        return None

    item_id, name = item.get("id"), item.get("name")
    if not isinstance(item_id, str) or not isinstance(name, str):
        return None
    try:
        price = D(item.get("price"))
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0:
        return None
    try:
        quantity = max(1, floor_quantity(entry.get("quantity")))
    except ValidationError:
        quantity = 1

    restaurant_name = entry.get("restaurantName")
    description = item.get("description")
    image_url = item.get("imageUrl")
    return CartLine(
        item=MenuItemSnapshot(
            id=item_id,
            name=name,
            description=description if isinstance(description, str) else "",
            price=price,
            image_url=image_url if isinstance(image_url, str) else None,
        ),
        restaurant_id=restaurant_id,
        restaurant_name=restaurant_name if isinstance(restaurant_name, str) else "",
        quantity=quantity,
    )


def load_cart(raw: str | bytes | None) -> Cart:
    """
    Rebuild a cached cart. Anything unreadable yields an empty cart, bad
    lines are skipped, lines from a second restaurant are dropped.
    """
    if not raw:
        return EMPTY_CART
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError):
        return EMPTY_CART
    if not isinstance(parsed, list):
        return EMPTY_CART

    lines: List[CartLine] = []
    for entry in parsed:
        line = _parse_line(entry)
        if line is None:
            continue
        if lines and line.restaurant_id != lines[0].restaurant_id:
            continue
        lines.append(line)
    return Cart(lines=tuple(lines))
