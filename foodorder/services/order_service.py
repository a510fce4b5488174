# foodorder/services/order_service.py
import uuid
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodorder.data.models.order import OrderModel
from foodorder.domain import cart as carts
from foodorder.domain.discount import apply_discount
from foodorder.domain.errors import (
    ConcurrencyConflict,
    NotFound,
    PersistenceError,
    PromotionRejected,
    ValidationError,
)
from foodorder.domain.order_status import OrderStatus, cancel_window_remaining_ms, check_transition
from foodorder.repos.order_repo import OrderRepo
from foodorder.repos.user_repo import UserRepo
from foodorder.services.cart_service import CartService
from foodorder.services.notification_service import NotificationService
from foodorder.services.promotion_service import PromotionService
from foodorder.services.user_service import default_address
from foodorder.utils.clock import Clock, display_date, now_ms
from foodorder.utils.money import D
from foodorder.utils.settings import CANCEL_WINDOW_MS
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_LABELS = {"cash": "Kapida Nakit", "card": "Kapida Kart"}


class OrderService:
    """
    Orders are created from the customer's cart at checkout and then only
    move through the status machine.

    Status writes are compare-and-swap on the version column, so two
    concurrent transitions of one order cannot both land.
    """

    def __init__(
        self,
        db: Session,
        cart_service: CartService,
        promotion_service: PromotionService,
        notification_service: NotificationService,
        clock: Clock = now_ms,
    ):
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)
        self.cart_service = cart_service
        self.promotion_service = promotion_service
        self.notification_service = notification_service
        self.clock = clock

    def _to_dict(self, order: OrderModel, now: int | None = None) -> Dict[str, Any]:
        now = self.clock() if now is None else now
        remaining = 0
        if order.status == OrderStatus.PENDING.value:
            remaining = cancel_window_remaining_ms(order.created_at, now, CANCEL_WINDOW_MS)
        return {
            "id": order.id,
            "restaurant_id": order.restaurant_id,
            "restaurant_name": order.restaurant_name,
            "customer_id": order.customer_id,
            "customer_name": order.customer_name,
            "customer_phone": order.customer_phone,
            "items": [
                {"id": i["id"], "name": i["name"], "price": D(i["price"]), "quantity": i["quantity"]}
                for i in order.items or []
            ],
            "total": order.total,
            "discount": order.discount,
            "final_total": order.final_total,
            "promo_code": order.promo_code,
            "address": order.address,
            "note": order.note,
            "status": order.status,
            "version": order.version,
            "date": order.date,
            "created_at": order.created_at,
            "payment_method": order.payment_method,
            "cancel_remaining_ms": remaining,
        }

    def _require(self, order_id: str) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Siparis bulunamadi.", order_id=order_id)
        return order

    # ------------------------------------------------------------------
    # checkout
    # ------------------------------------------------------------------
    def checkout(self, payload) -> Dict[str, Any]:
        """
        Use case: turn the customer's cart into a Pending order.

        1. loads the cart (must not be empty)
        2. applies the promotion; a rejected code does not stop the order
        3. stores the order, then clears the cart
        """
        customer = self.users.get_user(payload.customer_id)
        if not customer:
            raise NotFound("Kullanici bulunamadi.", user_id=payload.customer_id)

        cart = self.cart_service.load(customer.id)
        if cart.is_empty:
            raise ValidationError("Sepet bos.")

        subtotal = carts.subtotal(cart)
        promotion, promotion_error = None, None
        code = (payload.promo_code or "").strip()
        if code:
            try:
                promotion = self.promotion_service.resolve_for_checkout(code, customer.id, subtotal)
            except PromotionRejected as e:
                logger.info(f"Promotion {code.upper()} rejected for {customer.id}: {e.code}")
                promotion_error = e.message
        pricing = apply_discount(subtotal, promotion)

        now = self.clock()
        order = OrderModel(
            id=uuid.uuid4().hex,
            restaurant_id=cart.restaurant_id,
            restaurant_name=cart.restaurant_name or "",
            customer_id=customer.id,
            customer_name=customer.name,
            customer_phone=customer.phone,
            items=[
                {
                    "id": line.item.id,
                    "name": line.item.name,
                    "price": str(line.item.price),
                    "quantity": line.quantity,
                }
                for line in cart.lines
            ],
            total=subtotal,
            discount=pricing.discount_amount,
            final_total=pricing.final_total,
            promo_code=promotion.code if promotion else None,
            address=(payload.address or "").strip() or default_address(customer),
            note=(payload.note or "").strip() or None,
            payment_method=PAYMENT_LABELS[payload.payment_method],
            status=OrderStatus.PENDING.value,
            version=1,
            date=display_date(now),
            created_at=now,
        )
        try:
            created = self.repo.create_order(order)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order for {customer.id} could not be saved: {e}")
            raise PersistenceError() from e

        self.cart_service.clear(customer.id)
        logger.info(
            f"Order {created.id} created for {customer.id} at {created.restaurant_id} "
            f"total={created.final_total} discount={created.discount}"
        )
        return {"order": self._to_dict(created, now), "promotion_error": promotion_error}

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def get_order(self, order_id: str) -> Dict[str, Any]:
        return self._to_dict(self._require(order_id))

    def list_orders(self, customer_id: str | None = None, restaurant_id: str | None = None) -> List[Dict[str, Any]]:
        now = self.clock()
        return [self._to_dict(o, now) for o in self.repo.list_orders(customer_id, restaurant_id)]

    # ------------------------------------------------------------------
    # status machine
    # ------------------------------------------------------------------
    def change_status(
        self,
        order_id: str,
        actor_id: str,
        new_status: str,
        expected_version: int | None = None,
    ) -> Dict[str, Any]:
        order = self._require(order_id)
        actor = self.users.get_user(actor_id)
        if not actor:
            raise NotFound("Kullanici bulunamadi.", user_id=actor_id)

        if actor.role == "seller":
            owns = bool(actor.restaurant_id) and actor.restaurant_id == order.restaurant_id
        else:
            owns = order.customer_id == actor.id

        now = self.clock()
        target = check_transition(
            order.status,
            new_status,
            actor_role=actor.role,
            actor_owns_order=owns,
            created_at=order.created_at,
            now=now,
            window_ms=CANCEL_WINDOW_MS,
        )

        version = order.version if expected_version is None else expected_version
        previous_status = order.status
        try:
            updated_rows = self.repo.update_order_status(order.id, version, target.value)
            if updated_rows == 0:
                self.repo.rollback()
                logger.warning(f"Order {order.id} changed concurrently (expected version {version})")
                raise ConcurrencyConflict(order_id=order.id, version=version)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order {order.id} status could not be saved: {e}")
            raise PersistenceError() from e

        order = self.repo.refresh(order)
        logger.info(f"Order {order.id}: {previous_status} -> {order.status} by {actor.id}")

        try:
            self.notification_service.notify_order_status(order, previous_status)
        except Exception as e:
            # the transition is committed; a missing notification is reported only
            logger.error(f"Status notification for order {order.id} failed: {e}")

        return self._to_dict(order, now)

    def cancel(self, order_id: str, customer_id: str, expected_version: int | None = None) -> Dict[str, Any]:
        return self.change_status(order_id, customer_id, OrderStatus.CANCELLED.value, expected_version)
