# foodorder/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodorder.api.deps import (
    get_cart_service,
    get_clock,
    get_notification_service,
    get_promotion_service,
)
from foodorder.api.errors import to_http
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError
from foodorder.domain.schemas import CheckoutIn, CheckoutOut, OrderOut, StatusChangeIn
from foodorder.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    cart_service=Depends(get_cart_service),
    promotion_service=Depends(get_promotion_service),
    notification_service=Depends(get_notification_service),
    clock=Depends(get_clock),
):
    return OrderService(db, cart_service, promotion_service, notification_service, clock=clock)


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(payload: CheckoutIn, svc: OrderService = Depends(get_service)):
    """
    Creates a Pending order from the customer's cart.
    A rejected promotion code does not fail the order: it is reported in
    promotion_error and the order is priced without discount.
    """
    try:
        return svc.checkout(payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    customer_id: Optional[str] = Query(None),
    restaurant_id: Optional[str] = Query(None),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(customer_id=customer_id, restaurant_id=restaurant_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, svc: OrderService = Depends(get_service)):
    try:
        return svc.get_order(order_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{order_id}/status", response_model=OrderOut)
def change_status(
    order_id: str,
    payload: StatusChangeIn,
    user_id: str = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.change_status(order_id, user_id, payload.status, payload.expected_version)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: str,
    user_id: str = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.cancel(order_id, user_id)
    except FoodOrderError as e:
        raise to_http(e)
