# foodorder/repos/order_repo.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from foodorder.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders(
        self,
        customer_id: str | None = None,
        restaurant_id: str | None = None,
    ) -> List[OrderModel]:
        q = select(OrderModel)
        if customer_id:
            q = q.where(OrderModel.customer_id == customer_id)
        if restaurant_id:
            q = q.where(OrderModel.restaurant_id == restaurant_id)
        q = q.order_by(OrderModel.created_at.desc())
        return list(self.db.execute(q).scalars())

    def update_order_status(self, order_id: str, old_version: int, status: str) -> int:
        # update ... set status, version+1 where id and version = old_version
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(status=status, version=old_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
