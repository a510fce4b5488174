# foodorder/api/routers/views.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodorder.api.deps import get_clock
from foodorder.api.errors import to_http
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError
from foodorder.services.view_service import ViewService

router = APIRouter(prefix="/views", tags=["views"])


def get_service(db: Session = Depends(get_db), clock=Depends(get_clock)):
    return ViewService(db, clock=clock)


@router.get("/customer")
def customer_view(user_id: str = Query(...), svc: ViewService = Depends(get_service)):
    try:
        return svc.customer(user_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.get("/seller")
def seller_view(user_id: str = Query(...), svc: ViewService = Depends(get_service)):
    try:
        return svc.seller(user_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.get("/admin/top-customers")
def top_customers(
    user_id: str = Query(...),
    limit: int = Query(5, ge=1, le=100),
    svc: ViewService = Depends(get_service),
):
    try:
        return svc.top_customers(user_id, limit)
    except FoodOrderError as e:
        raise to_http(e)
