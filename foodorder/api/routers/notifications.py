# foodorder/api/routers/notifications.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodorder.api.deps import get_notification_service
from foodorder.api.errors import to_http
from foodorder.api.routers.restaurants import require_admin
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError
from foodorder.domain.schemas import MarkReadOut, NotificationCreate, NotificationOut
from foodorder.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/", response_model=NotificationOut, status_code=201)
def create_notification(
    payload: NotificationCreate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: NotificationService = Depends(get_notification_service),
):
    try:
        admin = require_admin(db, user_id)
        return svc.create_broadcast(payload, admin.id)
    except FoodOrderError as e:
        raise to_http(e)


@router.get("/unread", response_model=List[NotificationOut])
def unread_notifications(user_id: str = Query(...), svc: NotificationService = Depends(get_notification_service)):
    return svc.unread_for(user_id)


@router.post("/read-all", response_model=MarkReadOut)
def mark_all_read(user_id: str = Query(...), svc: NotificationService = Depends(get_notification_service)):
    return svc.mark_all_read(user_id)
