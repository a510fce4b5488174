from foodorder.domain import notifications as notes
from foodorder.domain.notifications import AppNotification, PushTarget
from foodorder.services.push_client import PushClient

from conftest import FakePushSession


def token(n):
    return f"ExponentPushToken[{n}]"


def note(**kw):
    kw.setdefault("id", "n1")
    return AppNotification(**kw)


def test_all_targets_only_customers():
    users = [PushTarget(id=f"c{i}", role="customer") for i in range(50)]
    users += [PushTarget(id=f"s{i}", role="seller") for i in range(3)]
    selected = notes.select_targets(note(target_type="all"), users)
    assert len(selected) == 50
    assert all(u.role == "customer" for u in selected)


def test_users_target_drops_unknown_ids():
    users = [PushTarget(id="a", role="customer"), PushTarget(id="s", role="seller")]
    selected = notes.select_targets(note(target_type="users", target_user_ids=frozenset({"a", "s", "ghost"})), users)
    assert {u.id for u in selected} == {"a", "s"}


def test_collect_tokens_dedups_and_filters():
    users = [
        PushTarget(id="a", role="customer", push_tokens=(token(1), token(2))),
        PushTarget(id="b", role="customer", push_tokens=(token(2), "not-a-token", token(3))),
    ]
    assert notes.collect_tokens(users) == [token(1), token(2), token(3)]


def test_push_message_shape():
    n = note(title="Kampanya", message="Indirim", type="promotion", related_promo_code="NEO10")
    [message] = notes.build_push_messages(n, [token(1)])
    assert message["to"] == token(1)
    assert message["title"] == "Kampanya"
    assert message["body"] == "Indirim"
    assert message["sound"] == "default"
    assert message["channelId"] == "default"
    assert message["data"]["relatedPromoCode"] == "NEO10"


def test_chunked_by_hundred():
    sizes = [len(c) for c in notes.chunked(list(range(250)), 100)]
    assert sizes == [100, 100, 50]


def test_unread_visible_newest_first():
    feed = [
        note(id="old", created_at=1),
        note(id="new", created_at=3),
        note(id="read", created_at=2, read_by=frozenset({"u1"})),
        note(id="other", created_at=4, target_type="users", target_user_ids=frozenset({"u2"})),
        note(id="mine", created_at=5, target_type="users", target_user_ids=frozenset({"u1"})),
    ]
    assert [n.id for n in notes.unread_for("u1", feed)] == ["mine", "new", "old"]


def test_ingest_notification_iso_created_at():
    n = notes.ingest_notification("x", {"title": "T", "createdAt": "1970-01-01T00:00:01Z", "type": "odd"})
    assert n.created_at == 1000
    assert n.type == "manual"
    assert n.target_type == "all"


def test_push_client_isolates_failed_batch():
    session = FakePushSession(statuses=[200, 500, 200])
    client = PushClient(endpoint="http://push.test", timeout=1, batch_size=100, session=session)
    messages = [{"to": token(i)} for i in range(250)]

    report = client.send(messages)

    assert [len(batch) for batch in session.calls] == [100, 100, 50]
    assert report.batches == 3
    assert report.sent_batches == 2
    assert report.failed_batches == 1
    assert not report.ok
    assert report.errors[0].startswith("batch 1")


def test_push_client_nothing_to_send():
    session = FakePushSession()
    report = PushClient(session=session).send([])
    assert report.ok and report.batches == 0
    assert session.calls == []
