import json
from decimal import Decimal

import pytest

from foodorder.domain.errors import (
    CrossRestaurantConflict,
    InvalidPromotionCode,
    MinOrderNotMet,
    NotAuthorized,
    NotFound,
    PromotionExpired,
    ValidationError,
)
from foodorder.domain.schemas import AddressIn, MenuItemIn, PromotionCreate, RestaurantCreate, UserCreate, UserUpdate
from foodorder.services.cart_cache import CartCache, cart_key
from foodorder.services.cart_service import CartService
from foodorder.services.restaurant_service import RestaurantService, price_with_commission
from foodorder.services.user_service import UserService

from conftest import DownRedis, add_restaurant, add_user


# --- carts -------------------------------------------------------------------

def test_cart_is_cached_per_customer(db, cart_service, redis_client):
    add_restaurant(db)
    cart = cart_service.add_item("c1", "r1", "m1")
    assert cart["subtotal"] == Decimal("50.00")
    assert cart["restaurant_name"] == "Burger House"
    stored = json.loads(redis_client.store[cart_key("c1")])
    assert stored[0]["item"]["id"] == "m1"
    assert redis_client.ttls[cart_key("c1")] == 3600
    assert cart_service.get_cart("c2")["items"] == []


def test_cart_switch_needs_confirmation(db, cart_service):
    add_restaurant(db, "r1")
    add_restaurant(db, "r2", name="Pizza")
    cart_service.add_item("c1", "r1", "m1")

    with pytest.raises(CrossRestaurantConflict):
        cart_service.add_item("c1", "r2", "m1")
    assert cart_service.get_cart("c1")["restaurant_id"] == "r1"

    cart = cart_service.add_item("c1", "r2", "m2", replace=True)
    assert cart["restaurant_id"] == "r2"
    assert [i["id"] for i in cart["items"]] == ["m2"]


def test_cart_quantity_and_clear(db, cart_service, redis_client):
    add_restaurant(db)
    cart_service.add_item("c1", "r1", "m1")
    cart = cart_service.set_quantity("c1", 0, 4.7)
    assert cart["items"][0]["quantity"] == 4
    assert cart["subtotal"] == Decimal("200.00")
    cart = cart_service.set_quantity("c1", 0, 0)
    assert cart["items"] == []
    assert cart_key("c1") not in redis_client.store


def test_unknown_menu_item(db, cart_service):
    add_restaurant(db)
    with pytest.raises(NotFound):
        cart_service.add_item("c1", "r1", "nope")
    with pytest.raises(NotFound):
        cart_service.add_item("c1", "ghost", "m1")


def test_corrupt_cached_cart_reads_as_empty(cart_service, redis_client):
    redis_client.store[cart_key("c1")] = "{broken"
    assert cart_service.get_cart("c1")["items"] == []


def test_cache_outage_reads_empty_cart(db):
    add_restaurant(db)
    svc = CartService(db, CartCache(client=DownRedis(), ttl=60))
    assert svc.get_cart("c1")["items"] == []
    # write failure is logged, the computed cart is still returned
    assert svc.add_item("c1", "r1", "m1")["subtotal"] == Decimal("50.00")


# --- promotions --------------------------------------------------------------

def test_create_and_validate_promotion(promotion_service):
    created = promotion_service.create_promotion(
        PromotionCreate(code=" neo10 ", title="Hosgeldin", value=Decimal("10"), min_order_total=Decimal("50"))
    )
    assert created["code"] == "NEO10"

    result = promotion_service.validate("neo10", "u1", Decimal("100"))
    assert result["valid"] is True
    assert result["discount_amount"] == Decimal("10.00")
    assert result["final_total"] == Decimal("90.00")

    with pytest.raises(MinOrderNotMet):
        promotion_service.validate("NEO10", "u1", Decimal("10"))
    with pytest.raises(InvalidPromotionCode):
        promotion_service.validate("YOK", "u1", Decimal("100"))


def test_promotion_rules(promotion_service):
    with pytest.raises(ValidationError):
        promotion_service.create_promotion(PromotionCreate(code="P", title="T", value=Decimal("150")))
    with pytest.raises(ValidationError):
        promotion_service.create_promotion(PromotionCreate(code="S", title="T", value=Decimal("5"), special=True))
    with pytest.raises(ValidationError):
        promotion_service.create_promotion(PromotionCreate(code="W", title="T", value=Decimal("5"), starts_at=10, ends_at=5))
    promotion_service.create_promotion(PromotionCreate(code="DUP", title="T", value=Decimal("5")))
    with pytest.raises(ValidationError):
        promotion_service.create_promotion(PromotionCreate(code="dup", title="T", value=Decimal("5")))


def test_special_promotion_visibility_and_expiry(promotion_service, clock):
    promotion_service.create_promotion(
        PromotionCreate(code="VIP", title="Ozel", type="amount", value=Decimal("30"), special=True, target_user_ids=["u1"])
    )
    promotion_service.create_promotion(
        PromotionCreate(code="SOON", title="Yakinda", value=Decimal("5"), ends_at=clock.now + 1000)
    )
    assert {p["code"] for p in promotion_service.visible_for("u1")} == {"VIP", "SOON"}
    assert {p["code"] for p in promotion_service.visible_for("u2")} == {"SOON"}

    clock.advance(1001)
    assert [p["code"] for p in promotion_service.visible_for("u1")] == ["VIP"]
    with pytest.raises(PromotionExpired):
        promotion_service.validate("SOON", "u1", Decimal("100"))


def test_delete_promotion_then_recreate(promotion_service):
    promotion_service.create_promotion(PromotionCreate(code="X", title="T", value=Decimal("5")))
    promotion_service.delete_promotion("x")
    assert promotion_service.find("X") is None
    promotion_service.create_promotion(PromotionCreate(code="X", title="T2", value=Decimal("7")))
    assert promotion_service.find("X").value == Decimal("7")
    with pytest.raises(NotFound):
        promotion_service.delete_promotion("NOPE")


# --- users -------------------------------------------------------------------

def test_user_create_is_idempotent(db):
    svc = UserService(db)
    first = svc.create_user(UserCreate(id="u1", name="Ayse", email=" AYSE@Mail.com "))
    again = svc.create_user(UserCreate(id="u1", name="Baska"))
    assert first["email"] == "ayse@mail.com"
    assert again["name"] == "Ayse"
    assert svc.update_profile("u1", UserUpdate(name="Ayse K", phone="555"))["phone"] == "555"


def test_addresses_keep_single_default(db):
    svc = UserService(db)
    svc.create_user(UserCreate(id="u1", name="Ayse"))

    user = svc.add_address("u1", AddressIn(title="Ev", full_address="Kadikoy"))
    assert [a["is_default"] for a in user["addresses"]] == [True]

    user = svc.add_address("u1", AddressIn(title="Is", full_address="Levent", is_default=True))
    assert [a["is_default"] for a in user["addresses"]] == [False, True]

    home, work = (a["id"] for a in user["addresses"])
    user = svc.set_default_address("u1", home)
    assert [a["is_default"] for a in user["addresses"]] == [True, False]

    user = svc.remove_address("u1", home)
    assert [(a["id"], a["is_default"]) for a in user["addresses"]] == [(work, True)]

    with pytest.raises(NotFound):
        svc.remove_address("u1", "missing")


def test_push_token_registration(db):
    svc = UserService(db)
    svc.create_user(UserCreate(id="u1", name="Ayse"))
    assert svc.register_push_token("u1", "ExponentPushToken[abc]")["tokens"] == 1
    assert svc.register_push_token("u1", "ExponentPushToken[abc]")["tokens"] == 1
    with pytest.raises(ValidationError):
        svc.register_push_token("u1", "apns-token")
    with pytest.raises(NotFound):
        svc.register_push_token("ghost", "ExponentPushToken[x]")


# --- restaurants -------------------------------------------------------------

def test_commission_markup():
    assert price_with_commission(Decimal("100")) == Decimal("120.00")
    assert price_with_commission(Decimal("12.99"), "0.2") == Decimal("15.59")


def test_seller_menu_management(db, clock):
    svc = RestaurantService(db, clock=clock)
    restaurant = svc.create_restaurant(RestaurantCreate(name="Kebapci", category="Kebap", delivery_time="20 dk"))
    seller = add_user(db, "s1", role="seller", restaurant_id=restaurant["id"])
    other = add_user(db, "s2", role="seller", restaurant_id="elsewhere")

    updated = svc.add_menu_item(seller, restaurant["id"], MenuItemIn(name="Adana", price=Decimal("100")))
    [item] = updated["menu"]
    assert item["price"] == Decimal("120.00")
    assert item["id"].startswith("m")

    with pytest.raises(NotAuthorized):
        svc.add_menu_item(other, restaurant["id"], MenuItemIn(name="Urfa", price=Decimal("90")))

    assert svc.remove_menu_item(seller, restaurant["id"], item["id"])["menu"] == []
    with pytest.raises(NotFound):
        svc.remove_menu_item(seller, restaurant["id"], item["id"])
