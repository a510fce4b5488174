# foodorder/services/promotion_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodorder.data.models.promotion import PromotionModel
from foodorder.domain import promotions as promos
from foodorder.domain.discount import apply_discount
from foodorder.domain.errors import NotFound, PersistenceError, ValidationError
from foodorder.domain.promotions import Promotion
from foodorder.domain.schemas import PromotionCreate
from foodorder.repos.promotion_repo import PromotionRepo
from foodorder.utils.clock import Clock, now_ms
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)


def promotion_from_model(model: PromotionModel) -> Promotion | None:
    return promos.ingest_promotion(model.id, model.as_document())


def promotion_to_dict(promo: Promotion) -> Dict[str, Any]:
    return {
        "code": promo.code,
        "title": promo.title,
        "image_url": promo.image_url,
        "type": promo.type,
        "value": promo.value,
        "active": promo.active,
        "min_order_total": promo.min_order_total,
        "max_discount_amount": promo.max_discount_amount,
        "target_user_ids": sorted(promo.target_user_ids),
        "starts_at": promo.starts_at,
        "ends_at": promo.ends_at,
        "created_at": promo.created_at,
    }


class PromotionService:
    """
    Promotions are keyed by their uppercase code and never updated in
    place: editing one means delete + create under the same code.
    """

    def __init__(self, db: Session, clock: Clock = now_ms):
        self.repo = PromotionRepo(db)
        self.clock = clock

    #queries
    def all_promotions(self) -> List[Promotion]:
        return promos.ingest_promotions((m.id, m.as_document()) for m in self.repo.list_promotions())

    def list_promotions(self) -> List[Dict[str, Any]]:
        return [promotion_to_dict(p) for p in self.all_promotions()]

    def visible_for(self, user_id: str) -> List[Dict[str, Any]]:
        now = self.clock()
        return [promotion_to_dict(p) for p in promos.visible_promotions(self.all_promotions(), user_id, now)]

    def find(self, code: str) -> Promotion | None:
        model = self.repo.get_promotion(code or "")
        return promotion_from_model(model) if model else None

    def resolve_for_checkout(self, code: str, user_id: str, subtotal) -> Promotion:
        """Raises InvalidPromotionCode / PromotionExpired / MinOrderNotMet."""
        return promos.check_applicable(self.find(code), user_id, subtotal, self.clock())

    def validate(self, code: str, user_id: str, subtotal) -> Dict[str, Any]:
        promo = self.resolve_for_checkout(code, user_id, subtotal)
        result = apply_discount(subtotal, promo)
        return {
            "valid": True,
            "code": promo.code,
            "type": promo.type,
            "value": promo.value,
            "discount_amount": result.discount_amount,
            "final_total": result.final_total,
        }

    #commands
    def create_promotion(self, payload: PromotionCreate) -> Dict[str, Any]:
        code = payload.code.strip().upper()
        title = payload.title.strip()
        if not code or not title:
            raise ValidationError("Lutfen promosyon adi ve kodu girin.")
        if payload.type == "percent" and payload.value > 100:
            raise ValidationError("Yuzde indirim 100'den buyuk olamaz.")
        if payload.special and not payload.target_user_ids:
            raise ValidationError("Ozel promosyon icin en az bir musteri secmelisin.")
        if payload.starts_at and payload.ends_at and payload.ends_at < payload.starts_at:
            raise ValidationError("Bitis tarihi baslangictan once olamaz.")

        if self.repo.get_promotion(code):
            raise ValidationError("Bu kod zaten kullaniliyor.", promo_code=code)

        model = PromotionModel(
            id=code,
            title=title,
            image_url=(payload.image_url or "").strip() or promos.DEFAULT_PROMO_IMAGE,
            type=payload.type,
            value=payload.value,
            active=payload.active,
            min_order_total=payload.min_order_total or Decimal("0"),
            max_discount_amount=payload.max_discount_amount or None,
            target_user_ids=sorted(set(payload.target_user_ids)) if payload.special else [],
            starts_at=payload.starts_at,
            ends_at=payload.ends_at,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        try:
            created = self.repo.create_promotion(model)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Promotion {code} could not be saved: {e}")
            raise PersistenceError() from e

        logger.info(f"Promotion {code} created ({payload.type} {payload.value})")
        return promotion_to_dict(promotion_from_model(created))

    def delete_promotion(self, code: str):
        model = self.repo.get_promotion(code)
        if not model:
            raise NotFound("Promosyon bulunamadi.", promo_code=code)
        try:
            self.repo.delete(model)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Promotion {model.id} could not be deleted: {e}")
            raise PersistenceError() from e
        logger.info(f"Promotion {model.id} deleted")
