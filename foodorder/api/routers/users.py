from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from foodorder.api.errors import to_http
from foodorder.data.database import get_db
from foodorder.domain.errors import FoodOrderError
from foodorder.domain.schemas import AddressIn, PushTokenIn, UserCreate, UserRead, UserUpdate
from foodorder.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.update_profile(user_id, payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{user_id}/addresses", response_model=UserRead, status_code=201)
def add_address(user_id: str, payload: AddressIn, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.add_address(user_id, payload)
    except FoodOrderError as e:
        raise to_http(e)


@router.delete("/{user_id}/addresses/{address_id}", response_model=UserRead)
def remove_address(user_id: str, address_id: str, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.remove_address(user_id, address_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{user_id}/addresses/{address_id}/default", response_model=UserRead)
def set_default_address(user_id: str, address_id: str, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.set_default_address(user_id, address_id)
    except FoodOrderError as e:
        raise to_http(e)


@router.post("/{user_id}/push-tokens")
def register_push_token(user_id: str, payload: PushTokenIn, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.register_push_token(user_id, payload.token)
    except FoodOrderError as e:
        raise to_http(e)
