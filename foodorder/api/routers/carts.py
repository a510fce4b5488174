# foodorder/api/routers/carts.py
from fastapi import APIRouter, Depends

from foodorder.api.deps import get_cart_service
from foodorder.api.errors import to_http
from foodorder.domain.errors import FoodOrderError
from foodorder.domain.schemas import CartItemIn, CartOut, CartQuantityIn
from foodorder.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/{customer_id}", response_model=CartOut)
def get_cart(customer_id: str, svc: CartService = Depends(get_cart_service)):
    return svc.get_cart(customer_id)


@router.post("/{customer_id}/items", response_model=CartOut)
def add_item(customer_id: str, payload: CartItemIn, svc: CartService = Depends(get_cart_service)):
    """
    Adds one unit. 409 when the cart belongs to another restaurant;
    resend with replace=true once the customer confirmed.
    """
    try:
        return svc.add_item(
            customer_id=customer_id,
            restaurant_id=payload.restaurant_id,
            item_id=payload.item_id,
            replace=payload.replace,
        )
    except FoodOrderError as e:
        raise to_http(e)


@router.put("/{customer_id}/items/{index}", response_model=CartOut)
def set_quantity(
    customer_id: str,
    index: int,
    payload: CartQuantityIn,
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.set_quantity(customer_id, index, payload.quantity)
    except FoodOrderError as e:
        raise to_http(e)


@router.delete("/{customer_id}", response_model=CartOut)
def clear_cart(customer_id: str, svc: CartService = Depends(get_cart_service)):
    return svc.clear(customer_id)
