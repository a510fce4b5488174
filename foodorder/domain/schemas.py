# foodorder/domain/schemas.py
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- users -----------------------------------------------------------------

class AddressIn(BaseModel):
    """Address added from the profile screen."""

    title: str = Field(..., min_length=1, max_length=60, description="Ev, Is ...")
    full_address: str = Field(..., min_length=1)
    is_default: bool = False


class AddressOut(BaseModel):
    id: str
    title: str
    full_address: str
    is_default: bool = False


class UserCreate(BaseModel):
    id: str = Field(..., min_length=1, description="Identity provider uid")
    role: Literal["admin", "seller", "customer"] = "customer"
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    restaurant_id: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None


class UserRead(BaseModel):
    id: str
    role: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    restaurant_id: Optional[str] = None
    addresses: List[AddressOut] = []


class PushTokenIn(BaseModel):
    token: str = Field(..., min_length=1)


# --- restaurants -----------------------------------------------------------

class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    delivery_time: str = ""
    image_url: Optional[str] = None
    owner_id: Optional[str] = None


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    delivery_time: Optional[str] = None
    image_url: Optional[str] = None


class MenuItemIn(BaseModel):
    """Price as entered by the seller, before platform commission."""

    name: str = Field(..., min_length=1)
    description: str = ""
    price: Decimal = Field(..., gt=0)
    image_url: Optional[str] = None


class MenuItemOut(BaseModel):
    id: str
    name: str
    description: str = ""
    price: Decimal
    image_url: Optional[str] = None


class RestaurantOut(BaseModel):
    id: str
    owner_id: Optional[str] = None
    name: str
    category: str
    rating: Decimal
    delivery_time: str
    image_url: Optional[str] = None
    menu: List[MenuItemOut] = []


# --- carts -----------------------------------------------------------------

class CartItemIn(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    item_id: str = Field(..., min_length=1)
    replace: bool = Field(False, description="Confirmed clear-and-replace of another restaurant's cart")


class CartQuantityIn(BaseModel):
    quantity: float = Field(..., description="Floored to an integer; 0 or less removes the line")


class CartLineOut(BaseModel):
    id: str
    name: str
    description: str = ""
    price: Decimal
    image_url: Optional[str] = None
    quantity: int
    line_total: Decimal


class CartOut(BaseModel):
    customer_id: str
    restaurant_id: Optional[str] = None
    restaurant_name: Optional[str] = None
    items: List[CartLineOut]
    subtotal: Decimal


# --- orders ----------------------------------------------------------------

class CheckoutIn(BaseModel):
    customer_id: str = Field(..., min_length=1)
    promo_code: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None
    payment_method: Literal["cash", "card"] = "cash"


class OrderItemOut(BaseModel):
    id: str
    name: str
    price: Decimal
    quantity: int


class OrderOut(BaseModel):
    id: str
    restaurant_id: str
    restaurant_name: str
    customer_id: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[OrderItemOut]
    total: Decimal
    discount: Decimal
    final_total: Decimal
    promo_code: Optional[str] = None
    address: str
    note: Optional[str] = None
    status: str
    version: int
    date: str
    created_at: int
    payment_method: str
    cancel_remaining_ms: int = 0


class CheckoutOut(BaseModel):
    order: OrderOut
    promotion_error: Optional[str] = None


class StatusChangeIn(BaseModel):
    status: str = Field(..., min_length=1)
    expected_version: Optional[int] = Field(None, ge=1)


# --- promotions ------------------------------------------------------------

class PromotionCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    type: Literal["percent", "amount"] = "percent"
    value: Decimal = Field(..., gt=0)
    active: bool = True
    min_order_total: Decimal = Field(Decimal("0"), ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    special: bool = Field(False, description="Targeted at target_user_ids only")
    target_user_ids: List[str] = []
    starts_at: Optional[int] = None
    ends_at: Optional[int] = None
    announce: bool = Field(False, description="Also broadcast a promotion notification")


class PromotionOut(BaseModel):
    code: str
    title: str
    image_url: Optional[str] = None
    type: str
    value: Decimal
    active: bool
    min_order_total: Decimal
    max_discount_amount: Optional[Decimal] = None
    target_user_ids: List[str]
    starts_at: Optional[int] = None
    ends_at: Optional[int] = None
    created_at: Optional[str] = None


class PromotionValidateIn(BaseModel):
    code: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0)


class PromotionValidateOut(BaseModel):
    valid: bool
    code: str
    type: str
    value: Decimal
    discount_amount: Decimal
    final_total: Decimal


# --- notifications ---------------------------------------------------------

class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: Literal["manual", "promotion"] = "manual"
    target_type: Literal["all", "users"] = "all"
    target_user_ids: List[str] = []
    related_promo_code: Optional[str] = None


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    type: str
    target_type: str
    target_user_ids: List[str]
    related_promo_code: Optional[str] = None
    related_order_id: Optional[str] = None
    created_at: int
    created_by: Optional[str] = None


class MarkReadOut(BaseModel):
    marked: List[str]
    failed: List[str]
