# foodorder/domain/snapshots.py
import copy
import threading
from collections import Counter
from types import MappingProxyType
from typing import AbstractSet, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from foodorder.domain import notifications as notes
from foodorder.domain import promotions as promos
from foodorder.domain.notifications import AppNotification
from foodorder.domain.order_status import TERMINAL, OrderStatus, parse_status
from foodorder.domain.promotions import Promotion

COLLECTIONS = ("users", "restaurants", "orders", "promos", "notifications")

Table = Mapping[str, Mapping]
Listener = Callable[[str, Table, Table], None]

EMPTY_TABLE: Table = MappingProxyType({})


class SnapshotHub:
    """
    Latest full snapshot of every collection.

    `publish` swaps a whole table at once and then calls every subscriber
    with (collection, previous, current). Tables are read-only views, so a
    projection can never change what another one sees.
    """

    def __init__(self, collections: Iterable[str] = COLLECTIONS):
        self._tables = {name: EMPTY_TABLE for name in collections}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def table(self, collection: str) -> Table:
        return self._tables[collection]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, collection: str, records: Iterable[Tuple[str, Mapping]]) -> Table:
        if collection not in self._tables:
            raise KeyError(f"Unknown collection: {collection}")

        current = MappingProxyType(
            {doc_id: MappingProxyType(copy.deepcopy(dict(data))) for doc_id, data in records}
        )
        with self._lock:
            previous = self._tables[collection]
            self._tables[collection] = current
            listeners = list(self._listeners)

        for listener in listeners:
            listener(collection, previous, current)
        return current


# --- projections -------------------------------------------------------------

def _orders_newest_first(orders: Iterable[Mapping]) -> List[Mapping]:
    return sorted(orders, key=lambda o: o.get("createdAt") or 0, reverse=True)


class CustomerView(NamedTuple):
    promotions: List[Promotion]
    unread: List[AppNotification]
    unread_count: int
    orders: List[Mapping]


def customer_view(user_id: str, promo_table: Table, notification_table: Table, order_table: Table, now: int) -> CustomerView:
    visible = promos.visible_promotions(promos.ingest_promotions(promo_table.items()), user_id, now)
    unread = notes.unread_for(
        user_id, (notes.ingest_notification(doc_id, data) for doc_id, data in notification_table.items())
    )
    own = _orders_newest_first(o for o in order_table.values() if o.get("customerId") == user_id)
    return CustomerView(promotions=visible, unread=unread, unread_count=len(unread), orders=own)


class SellerView(NamedTuple):
    orders: List[Mapping]
    open_count: int
    new_pending: List[Mapping]


def new_pending_orders(restaurant_id: str, order_table: Table, known_ids: Optional[AbstractSet[str]]) -> List[Mapping]:
    """
    Pending orders of the restaurant whose ids the viewer has not seen yet.
    known_ids=None is the first look: it sets the baseline and alerts
    nothing.
    """
    if known_ids is None:
        return []
    return _orders_newest_first(
        o for doc_id, o in order_table.items()
        if o.get("restaurantId") == restaurant_id
        and doc_id not in known_ids
        and parse_status(o.get("status")) is OrderStatus.PENDING
    )


def seller_view(restaurant_id: str, order_table: Table, known_ids: Optional[AbstractSet[str]] = None) -> SellerView:
    mine = _orders_newest_first(o for o in order_table.values() if o.get("restaurantId") == restaurant_id)
    open_count = sum(1 for o in mine if parse_status(o.get("status")) not in TERMINAL)
    return SellerView(
        orders=mine,
        open_count=open_count,
        new_pending=new_pending_orders(restaurant_id, order_table, known_ids),
    )


class KnownOrders:
    """
    Order ids each seller dashboard has already been shown, so a reload
    alerts only on what that viewer has not seen, whoever else reloaded
    the orders table in between.
    """

    def __init__(self):
        # keyed by (viewer, restaurant): a seller relinked to another restaurant starts over
        self._seen: Dict[Tuple[str, str], frozenset[str]] = {}
        self._lock = threading.Lock()

    def seller_view(self, viewer_id: str, restaurant_id: str, order_table: Table) -> SellerView:
        with self._lock:
            key = (viewer_id, restaurant_id)
            view = seller_view(restaurant_id, order_table, self._seen.get(key))
            self._seen[key] = frozenset(
                doc_id for doc_id, o in order_table.items() if o.get("restaurantId") == restaurant_id
            )
        return view


class TopCustomer(NamedTuple):
    id: str
    name: str
    order_count: int


def top_customers(order_table: Table, limit: int | None = None) -> List[TopCustomer]:
    counts = Counter()
    names = {}
    for order in order_table.values():
        customer_id = order.get("customerId")
        if not customer_id:
            continue
        counts[customer_id] += 1
        names[customer_id] = order.get("customerName") or names.get(customer_id) or customer_id

    # Counter.most_common keeps first-seen order among equal counts
    ranked = [TopCustomer(id=cid, name=names[cid], order_count=n) for cid, n in counts.most_common()]
    return ranked[:limit] if limit else ranked


def new_order_message(count: int) -> str:
    return "Yeni siparis geldi." if count == 1 else f"{count} yeni siparis geldi."
