# foodorder/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from foodorder.data.database import get_db
from foodorder.services.cart_cache import CartCache
from foodorder.services.cart_service import CartService
from foodorder.services.notification_service import NotificationService
from foodorder.services.promotion_service import PromotionService
from foodorder.utils.clock import now_ms


def get_clock():
    return now_ms


def get_cart_cache() -> CartCache:
    return CartCache()


def get_push_dispatch():
    """None -> the Celery task."""
    return None


def get_cart_service(
    db: Session = Depends(get_db),
    cache: CartCache = Depends(get_cart_cache),
) -> CartService:
    return CartService(db=db, cache=cache)


def get_promotion_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> PromotionService:
    return PromotionService(db, clock=clock)


def get_notification_service(
    db: Session = Depends(get_db),
    dispatch=Depends(get_push_dispatch),
    clock=Depends(get_clock),
) -> NotificationService:
    return NotificationService(db, dispatch=dispatch, clock=clock)
