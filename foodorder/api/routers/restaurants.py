from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodorder.api.deps import get_clock
from foodorder.api.errors import to_http
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError, NotAuthorized
from foodorder.domain.schemas import MenuItemIn, RestaurantCreate, RestaurantOut, RestaurantUpdate
from foodorder.services.restaurant_service import RestaurantService
from foodorder.services.user_service import UserService

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


def get_service(db: Session = Depends(get_db), clock=Depends(get_clock)):
    return RestaurantService(db, clock=clock)


def require_admin(db: Session, user_id: str):
    user = UserService(db).require(user_id)
    if user.role != "admin":
        raise NotAuthorized()
    return user


@router.get("/", response_model=List[RestaurantOut])
def list_restaurants(svc: RestaurantService = Depends(get_service)):
    return svc.list_restaurants()


@router.get("/{restaurant_id}", response_model=RestaurantOut)
def get_restaurant(restaurant_id: str, svc: RestaurantService = Depends(get_service)):
    try:
        return svc.get_restaurant(restaurant_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/", response_model=RestaurantOut, status_code=201)
def create_restaurant(
    payload: RestaurantCreate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: RestaurantService = Depends(get_service),
):
    try:
        require_admin(db, user_id)
        return svc.create_restaurant(payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.patch("/{restaurant_id}", response_model=RestaurantOut)
def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: RestaurantService = Depends(get_service),
):
    try:
        require_admin(db, user_id)
        return svc.update_restaurant(restaurant_id, payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.delete("/{restaurant_id}", status_code=204)
def delete_restaurant(
    restaurant_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: RestaurantService = Depends(get_service),
):
    try:
        require_admin(db, user_id)
        svc.delete_restaurant(restaurant_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{restaurant_id}/menu", response_model=RestaurantOut, status_code=201)
def add_menu_item(
    restaurant_id: str,
    payload: MenuItemIn,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: RestaurantService = Depends(get_service),
):
    try:
        seller = UserService(db).require(user_id)
        return svc.add_menu_item(seller, restaurant_id, payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.delete("/{restaurant_id}/menu/{item_id}", response_model=RestaurantOut)
def remove_menu_item(
    restaurant_id: str,
    item_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    svc: RestaurantService = Depends(get_service),
):
    try:
        seller = UserService(db).require(user_id)
        return svc.remove_menu_item(seller, restaurant_id, item_id)
    except FoodOrderError as e:
        raise to_http(e)
