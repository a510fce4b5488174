import uuid
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodorder.data.models.user import UserModel
from foodorder.domain.errors import NotFound, PersistenceError, ValidationError
from foodorder.domain.notifications import valid_push_token
from foodorder.domain.schemas import AddressIn, UserCreate, UserUpdate
from foodorder.repos.user_repo import UserRepo
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

NO_ADDRESS = "Adres belirtilmedi"


def user_to_dict(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "role": user.role,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "restaurant_id": user.restaurant_id,
        "addresses": [
            {
                "id": a.get("id"),
                "title": a.get("title") or "",
                "full_address": a.get("fullAddress") or "",
                "is_default": bool(a.get("isDefault")),
            }
            for a in user.addresses or []
        ],
    }


def default_address(user: UserModel) -> str:
    addresses = user.addresses or []
    for a in addresses:
        if a.get("isDefault") and a.get("fullAddress"):
            return a["fullAddress"]
    if addresses and addresses[0].get("fullAddress"):
        return addresses[0]["fullAddress"]
    return NO_ADDRESS


def _with_single_default(addresses: List[dict], default_id: str | None) -> List[dict]:
    if not addresses:
        return []
    if default_id is None or not any(a.get("id") == default_id for a in addresses):
        current = next((a.get("id") for a in addresses if a.get("isDefault")), None)
        default_id = current or addresses[0].get("id")
    return [{**a, "isDefault": a.get("id") == default_id} for a in addresses]


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def _save(self, user: UserModel) -> UserModel:
        try:
            return self.repo.save(user)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"User {user.id} could not be saved: {e}")
            raise PersistenceError() from e

    def require(self, user_id: str) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("Kullanici bulunamadi.", user_id=user_id)
        return user

    def create_user(self, payload: UserCreate) -> Dict[str, Any]:
        existing = self.repo.get_user(payload.id)
        if existing:
            return user_to_dict(existing)

        user = UserModel(
            id=payload.id,
            role=payload.role,
            name=payload.name.strip(),
            email=(payload.email or "").strip().lower() or None,
            phone=payload.phone,
            restaurant_id=payload.restaurant_id if payload.role == "seller" else None,
            addresses=[],
            push_tokens=[],
        )
        try:
            created = self.repo.create_user(user)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"User {payload.id} could not be created: {e}")
            raise PersistenceError() from e
        logger.info(f"User {created.id} created as {created.role}")
        return user_to_dict(created)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        return user_to_dict(self.require(user_id))

    def update_profile(self, user_id: str, payload: UserUpdate) -> Dict[str, Any]:
        user = self.require(user_id)
        if payload.name is not None:
            user.name = payload.name.strip()
        if payload.phone is not None:
            user.phone = payload.phone.strip() or None
        return user_to_dict(self._save(user))

    # addresses -------------------------------------------------------------
    def add_address(self, user_id: str, payload: AddressIn) -> Dict[str, Any]:
        user = self.require(user_id)
        address = {
            "id": f"a{uuid.uuid4().hex[:12]}",
            "title": payload.title.strip(),
            "fullAddress": payload.full_address.strip(),
            "isDefault": False,
        }
        addresses = list(user.addresses or []) + [address]
        user.addresses = _with_single_default(addresses, address["id"] if payload.is_default else None)
        return user_to_dict(self._save(user))

    def remove_address(self, user_id: str, address_id: str) -> Dict[str, Any]:
        user = self.require(user_id)
        addresses = [a for a in user.addresses or [] if a.get("id") != address_id]
        if len(addresses) == len(user.addresses or []):
            raise NotFound("Adres bulunamadi.", address_id=address_id)
        user.addresses = _with_single_default(addresses, None)
        return user_to_dict(self._save(user))

    def set_default_address(self, user_id: str, address_id: str) -> Dict[str, Any]:
        user = self.require(user_id)
        if not any(a.get("id") == address_id for a in user.addresses or []):
            raise NotFound("Adres bulunamadi.", address_id=address_id)
        user.addresses = _with_single_default(list(user.addresses), address_id)
        return user_to_dict(self._save(user))

    # push tokens -----------------------------------------------------------
    def register_push_token(self, user_id: str, token: str) -> Dict[str, Any]:
        token = token.strip()
        if not valid_push_token(token):
            raise ValidationError("Gecersiz bildirim anahtari.")
        user = self.require(user_id)
        tokens = list(user.push_tokens or [])
        if token not in tokens:
            user.push_tokens = tokens + [token]
            self._save(user)
            logger.info(f"Push token registered for {user_id}")
        return {"user_id": user.id, "tokens": len(user.push_tokens or [])}
