# foodorder/repos/promotion_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from foodorder.data.models.promotion import PromotionModel


class PromotionRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_promotion(self, code: str) -> PromotionModel | None:
        return self.db.get(PromotionModel, code.strip().upper())

    def list_promotions(self) -> List[PromotionModel]:
        return list(self.db.execute(select(PromotionModel)).scalars())

    def create_promotion(self, promo: PromotionModel) -> PromotionModel:
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)
        return promo

    def delete(self, promo: PromotionModel):
        self.db.delete(promo)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
