# foodorder/api/routers/promos.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodorder.api.deps import get_notification_service, get_promotion_service
from foodorder.api.errors import to_http
from foodorder.api.routers.restaurants import require_admin
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError
from foodorder.domain.schemas import (
    PromotionCreate,
    PromotionOut,
    PromotionValidateIn,
    PromotionValidateOut,
)
from foodorder.services.notification_service import NotificationService
from foodorder.services.promotion_service import PromotionService
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/promos", tags=["promos"])


@router.get("/", response_model=List[PromotionOut])
def list_promotions(svc: PromotionService = Depends(get_promotion_service)):
    return svc.list_promotions()


@router.get("/visible", response_model=List[PromotionOut])
def visible_promotions(user_id: str = Query(...), svc: PromotionService = Depends(get_promotion_service)):
    return svc.visible_for(user_id)


@router.post("/validate", response_model=PromotionValidateOut)
def validate_promotion(payload: PromotionValidateIn, svc: PromotionService = Depends(get_promotion_service)):
    try:
        return svc.validate(payload.code, payload.user_id, payload.subtotal)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/", response_model=PromotionOut, status_code=201)
def create_promotion(
    payload: PromotionCreate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: PromotionService = Depends(get_promotion_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    try:
        admin = require_admin(db, user_id)
        created = svc.create_promotion(payload)
    except FoodOrderError as e:
        raise to_http(e)

    if payload.announce:
        # promotion is committed at this point; announce failures are only logged
        try:
            notifications.announce_promotion(svc.find(created["code"]), admin.id)
        except FoodOrderError as e:
            logger.error(f"Announcement for promotion {created['code']} failed: {e.code}")
    return created


@router.delete("/{code}", status_code=204)
def delete_promotion(
    code: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: PromotionService = Depends(get_promotion_service),
):
    try:
        require_admin(db, user_id)
        svc.delete_promotion(code)
    except FoodOrderError as e:
        raise to_http(e)
