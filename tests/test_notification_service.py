import pytest

from foodorder.domain.errors import NotFound, ValidationError
from foodorder.domain.schemas import NotificationCreate
from foodorder.services.notification_service import NotificationService
from foodorder.services.push_client import PushClient

from conftest import FakePushSession, add_notification, add_user


def token(n):
    return f"ExponentPushToken[{n}]"


def service_with_push(db, clock, session):
    client = PushClient(endpoint="http://push.test", timeout=1, batch_size=100, session=session)
    return NotificationService(db, push_client=client, dispatch=lambda _id: None, clock=clock)


def test_broadcast_to_all_reaches_customers_only(db, clock):
    for i in range(50):
        add_user(db, f"c{i}", tokens=[token(f"c{i}")])
    for i in range(3):
        add_user(db, f"s{i}", role="seller", restaurant_id=f"r{i}", tokens=[token(f"s{i}")])
    session = FakePushSession()
    svc = service_with_push(db, clock, session)

    created = svc.create_broadcast(NotificationCreate(title="Duyuru", message="Merhaba"), "admin")
    report = svc.fan_out(created["id"])

    assert len(svc.resolve_targets(svc.feed()[0])) == 50
    assert report.messages == 50
    assert report.sent_batches == 1
    sent_to = {m["to"] for m in session.calls[0]}
    assert token("s0") not in sent_to
    assert len(sent_to) == 50


def test_fan_out_continues_after_failed_batch(db, clock):
    for i in range(250):
        add_user(db, f"c{i}", tokens=[token(i)])
    session = FakePushSession(statuses=[200, 503, 200])
    svc = service_with_push(db, clock, session)

    created = svc.create_broadcast(NotificationCreate(title="Duyuru", message="Merhaba"), "admin")
    report = svc.fan_out(created["id"])

    assert len(session.calls) == 3
    assert report.sent_batches == 2
    assert report.failed_batches == 1


def test_targeted_fan_out_skips_unknown_and_tokenless_users(db, clock):
    add_user(db, "a", tokens=[token("a"), token("a")])
    add_user(db, "b")
    session = FakePushSession()
    svc = service_with_push(db, clock, session)

    created = svc.create_broadcast(
        NotificationCreate(title="Ozel", message="Sana ozel", target_type="users", target_user_ids=["a", "b", "ghost"]),
        "admin",
    )
    report = svc.fan_out(created["id"])

    assert report.messages == 1
    assert len(session.calls) == 1
    assert [m["to"] for m in session.calls[0]] == [token("a")]


def test_fan_out_without_tokens_sends_nothing(db, clock):
    add_user(db, "a")
    session = FakePushSession()
    svc = service_with_push(db, clock, session)
    created = svc.create_broadcast(NotificationCreate(title="T", message="M"), "admin")
    assert svc.fan_out(created["id"]).batches == 0
    assert session.calls == []


def test_fan_out_unknown_notification(db, clock):
    svc = service_with_push(db, clock, FakePushSession())
    with pytest.raises(NotFound):
        svc.fan_out("missing")


def test_users_target_requires_ids(notification_service):
    with pytest.raises(ValidationError):
        notification_service.create_broadcast(NotificationCreate(title="T", message="M", target_type="users"), "admin")


def test_creating_schedules_fan_out(notification_service, dispatched):
    created = notification_service.create_broadcast(NotificationCreate(title="T", message="M"), "admin")
    assert dispatched == [created["id"]]


def test_dispatch_failure_keeps_notification(db, clock):
    def broken(_id):
        raise ConnectionError("broker down")

    svc = NotificationService(db, dispatch=broken, clock=clock)
    created = svc.create_broadcast(NotificationCreate(title="T", message="M"), "admin")
    assert [n.id for n in svc.feed()] == [created["id"]]


def test_unread_and_mark_all_read(db, notification_service):
    add_notification(db, "n1", created_at=1)
    add_notification(db, "n2", created_at=2, target_type="users", target_user_ids=["u1"])
    add_notification(db, "n3", created_at=3, target_type="users", target_user_ids=["u2"])
    add_notification(db, "n4", created_at=4, read_by=["u1"])

    assert [n["id"] for n in notification_service.unread_for("u1")] == ["n2", "n1"]

    result = notification_service.mark_all_read("u1")
    assert sorted(result["marked"]) == ["n1", "n2"]
    assert result["failed"] == []
    assert notification_service.unread_for("u1") == []
    assert [n["id"] for n in notification_service.unread_for("u2")] == ["n4", "n3", "n1"]
