import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from foodorder.api import create_app, deps
from foodorder.data.database import Base, create_tables, get_db
from foodorder.data.models import NotificationModel, OrderModel, RestaurantModel, UserModel
from foodorder.domain.order_status import OrderStatus
from foodorder.services.cart_cache import CartCache
from foodorder.services.cart_service import CartService
from foodorder.services.notification_service import NotificationService
from foodorder.services.order_service import OrderService
from foodorder.services.promotion_service import PromotionService

T0 = 1_700_000_000_000


class FakeRedis:
    """Just the three calls CartCache makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, name, value, ex=None):
        self.store[name] = value
        self.ttls[name] = ex
        return True

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


class DownRedis:
    def get(self, key):
        raise RedisConnectionError("down")

    def set(self, name, value, ex=None):
        raise RedisConnectionError("down")

    def delete(self, key):
        raise RedisConnectionError("down")


class FixedClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body if body is not None else {"data": []}
        self.text = str(self._body)

    def json(self):
        return self._body


class FakePushSession:
    """Records every POST; `statuses` gives the status code per call, in order."""

    def __init__(self, statuses=None):
        self.calls = []
        self.statuses = list(statuses or [])

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(json)
        status = self.statuses.pop(0) if self.statuses else 200
        return FakeResponse(status, {"data": [{"status": "ok"}] * len(json)})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def cache(redis_client):
    return CartCache(client=redis_client, ttl=3600)


@pytest.fixture
def dispatched():
    return []


@pytest.fixture
def cart_service(db, cache):
    return CartService(db, cache)


@pytest.fixture
def promotion_service(db, clock):
    return PromotionService(db, clock=clock)


@pytest.fixture
def notification_service(db, clock, dispatched):
    return NotificationService(db, dispatch=dispatched.append, clock=clock)


@pytest.fixture
def order_service(db, cart_service, promotion_service, notification_service, clock):
    return OrderService(db, cart_service, promotion_service, notification_service, clock=clock)


@pytest.fixture
def client(engine, cache, clock, dispatched):
    app = create_app()
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_cart_cache] = lambda: cache
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_push_dispatch] = lambda: dispatched.append

    with TestClient(app) as c:
        yield c


# --- seed helpers ------------------------------------------------------------

def add_user(db, user_id, role="customer", name=None, restaurant_id=None, tokens=None, addresses=None):
    user = UserModel(
        id=user_id,
        role=role,
        name=name or user_id.title(),
        phone="5550000000",
        restaurant_id=restaurant_id,
        addresses=addresses or [],
        push_tokens=tokens or [],
    )
    db.add(user)
    db.commit()
    return user


def add_restaurant(db, restaurant_id="r1", name="Burger House", menu=None):
    restaurant = RestaurantModel(
        id=restaurant_id,
        name=name,
        category="Burger",
        delivery_time="30-40 dk",
        menu=menu if menu is not None else [
            {"id": "m1", "name": "Cheeseburger", "description": "", "price": "50.00", "imageUrl": None},
            {"id": "m2", "name": "Patates", "description": "", "price": "25.00", "imageUrl": None},
        ],
        created_at=T0,
    )
    db.add(restaurant)
    db.commit()
    return restaurant


def add_order(db, order_id="o1", customer_id="c1", restaurant_id="r1", status=OrderStatus.PENDING.value, created_at=T0):
    order = OrderModel(
        id=order_id,
        restaurant_id=restaurant_id,
        restaurant_name="Burger House",
        customer_id=customer_id,
        customer_name="Ayse",
        items=[{"id": "m1", "name": "Cheeseburger", "price": "50.00", "quantity": 2}],
        total=100,
        discount=0,
        final_total=100,
        address="Kadikoy",
        payment_method="Kapida Nakit",
        status=status,
        version=1,
        date="14.11.2023 22:13:20",
        created_at=created_at,
    )
    db.add(order)
    db.commit()
    return order


def add_notification(db, notification_id, created_at, target_type="all", target_user_ids=None, read_by=None):
    notification = NotificationModel(
        id=notification_id,
        title="Duyuru",
        message="Merhaba",
        type="manual",
        target_type=target_type,
        target_user_ids=target_user_ids or [],
        created_at=created_at,
        created_by="admin",
        read_by=read_by or [],
    )
    db.add(notification)
    db.commit()
    return notification
