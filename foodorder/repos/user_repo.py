# foodorder/repos/user_repo.py
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodorder.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_users(self, user_ids: Iterable[str]) -> List[UserModel]:
        ids = list(set(user_ids))
        if not ids:
            return []
        return list(self.db.execute(select(UserModel).where(UserModel.id.in_(ids))).scalars())

    def list_by_role(self, role: str) -> List[UserModel]:
        return list(self.db.execute(select(UserModel).where(UserModel.role == role)).scalars())

    def list_users(self) -> List[UserModel]:
        return list(self.db.execute(select(UserModel)).scalars())

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def rollback(self):
        self.db.rollback()
