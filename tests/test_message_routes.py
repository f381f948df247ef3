"""Integration tests covering circle message, reaction and notification routes."""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_circle_chat.db")

from circle_chat.database import Base, SessionLocal, engine  # noqa: E402
from circle_chat.main import app  # noqa: E402
from circle_chat.models import (  # noqa: E402
    Circle,
    CircleMessage,
    MessageReaction,
    Notification,
    User,
    UserSession,
    circle_members,
)
from circle_chat.services import get_current_user_id  # noqa: E402


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(MessageReaction))
        session.execute(delete(CircleMessage))
        session.execute(delete(Notification))
        session.execute(delete(UserSession))
        session.execute(delete(circle_members))
        session.execute(delete(Circle))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def user_factory() -> Callable[[str], str]:
    def _factory(username: str) -> str:
        with SessionLocal() as session:
            user = User(username=username)
            session.add(user)
            session.commit()
            return str(user.id)
    return _factory


@pytest.fixture
def circle_factory() -> Callable[..., str]:
    def _factory(name: str, creator_id: str, *member_ids: str) -> str:
        with SessionLocal() as session:
            circle = Circle(name=name, created_by=creator_id)
            session.add(circle)
            session.flush()
            for member_id in (creator_id, *member_ids):
                session.execute(circle_members.insert().values(circle_id=circle.id, user_id=member_id))
            session.commit()
            return str(circle.id)
    return _factory


@pytest.fixture
def authed_client() -> Iterator[Callable[[str], TestClient]]:
    with TestClient(app) as client:
        def _with_user(user_id: str) -> TestClient:
            def _override() -> str:
                return user_id
            app.dependency_overrides[get_current_user_id] = _override
            return client
        yield _with_user
    app.dependency_overrides.clear()


def _post_message(client: TestClient, circle_id: str, content: str) -> dict:
    response = client.post(f"/api/circles/{circle_id}/messages", json={"content": content})
    assert response.status_code == 201, response.text
    return response.json()


def test_members_post_and_read_history_non_members_are_forbidden(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    mallory = user_factory("mallory")
    circle_id = circle_factory("Early Risers", alice)

    client = authed_client(alice)
    first = _post_message(client, circle_id, "up at 5")
    second = _post_message(client, circle_id, "coffee first")
    assert first["circleId"] == circle_id
    assert first["authorId"] == alice
    assert first["edited"] is False

    history = client.get(f"/api/circles/{circle_id}/messages")
    assert history.status_code == 200
    assert [item["id"] for item in history.json()] == [first["id"], second["id"]]

    outsider = authed_client(mallory)
    forbidden = outsider.get(f"/api/circles/{circle_id}/messages")
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Not a member of this circle"}

    post_forbidden = outsider.post(f"/api/circles/{circle_id}/messages", json={"content": "hi"})
    assert post_forbidden.status_code == 403


def test_blank_post_is_rejected(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    circle_id = circle_factory("Early Risers", alice)

    response = authed_client(alice).post(f"/api/circles/{circle_id}/messages", json={"content": "  "})

    assert response.status_code == 400
    assert response.json() == {"error": "Message content is required"}


def test_blank_edit_returns_400_and_leaves_message_unchanged(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    circle_id = circle_factory("Early Risers", alice)
    client = authed_client(alice)
    message = _post_message(client, circle_id, "original text")

    response = client.patch(f"/api/messages/{message['id']}", json={"content": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Message content is required"}
    history = client.get(f"/api/circles/{circle_id}/messages").json()
    assert history[0]["content"] == "original text"
    assert history[0]["edited"] is False


def test_author_edit_returns_updated_message(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    circle_id = circle_factory("Early Risers", alice)
    client = authed_client(alice)
    message = _post_message(client, circle_id, "typo")

    response = client.patch(f"/api/messages/{message['id']}", json={"content": "fixed"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"]["content"] == "fixed"
    assert body["message"]["edited"] is True


def test_non_author_delete_returns_403_and_message_survives(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    circle_id = circle_factory("Early Risers", alice, bob)
    message = _post_message(authed_client(alice), circle_id, "mine")

    bob_client = authed_client(bob)
    response = bob_client.delete(f"/api/messages/{message['id']}")
    assert response.status_code == 403
    assert response.json() == {"error": "You can only modify your own messages"}

    edit = bob_client.patch(f"/api/messages/{message['id']}", json={"content": "yours now"})
    assert edit.status_code == 403

    history = bob_client.get(f"/api/circles/{circle_id}/messages").json()
    assert history[0]["content"] == "mine"
    assert history[0]["deleted"] is False


def test_author_delete_soft_deletes(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    circle_id = circle_factory("Early Risers", alice)
    client = authed_client(alice)
    message = _post_message(client, circle_id, "oops")

    response = client.delete(f"/api/messages/{message['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"]["deleted"] is True
    history = client.get(f"/api/circles/{circle_id}/messages").json()
    assert history[0]["id"] == message["id"]
    assert history[0]["deleted"] is True
    assert history[0]["content"] == ""


def test_unknown_message_returns_404(authed_client, user_factory):
    alice = user_factory("alice")

    response = authed_client(alice).patch("/api/messages/does-not-exist", json={"content": "x"})

    assert response.status_code == 404
    assert response.json() == {"error": "Message not found"}


def test_reaction_endpoints(authed_client, user_factory, circle_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    circle_id = circle_factory("Early Risers", alice, bob)
    message = _post_message(authed_client(alice), circle_id, "ran 10k")
    client = authed_client(bob)
    base = f"/api/messages/{message['id']}/reactions"

    missing = client.post(base, json={})
    assert missing.status_code == 400
    assert missing.json() == {"error": "Emoji is required"}

    first = client.post(base, json={"emoji": "🔥"})
    second = client.post(base, json={"emoji": "🔥"})
    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["userId"] == bob
    assert first.json()["messageId"] == message["id"]
    client.post(base, json={"emoji": "👏"})

    listing = client.get(base)
    assert listing.status_code == 200
    assert sorted((item["userId"], item["emoji"]) for item in listing.json()) == sorted(
        [(bob, "🔥"), (bob, "👏")]
    )

    removed = client.delete(f"{base}/{quote('🔥')}")
    assert removed.status_code == 200
    assert removed.json() == {"success": True}
    removed_again = client.delete(f"{base}/{quote('🔥')}")
    assert removed_again.status_code == 200

    assert [item["emoji"] for item in client.get(base).json()] == ["👏"]


def test_requests_authenticate_from_session_cookie(user_factory, circle_factory):
    alice = user_factory("alice")
    circle_id = circle_factory("Early Risers", alice)
    with SessionLocal() as session:
        session.add(
            UserSession(
                sid="rest-session",
                user_id=alice,
                expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            )
        )
        session.commit()

    with TestClient(app) as client:
        anonymous = client.get(f"/api/circles/{circle_id}/messages")
        assert anonymous.status_code == 401
        assert anonymous.json() == {"error": "Authentication required"}

        authed = client.get(
            f"/api/circles/{circle_id}/messages",
            headers={"cookie": "connect.sid=s%3Arest-session.signature"},
        )
        assert authed.status_code == 200
        assert authed.json() == []


def test_join_notifies_creator_and_notifications_can_be_read(authed_client, user_factory, circle_factory):
    owner = user_factory("owner")
    joiner = user_factory("joiner")
    circle_id = circle_factory("Book Club", owner)

    joiner_client = authed_client(joiner)
    joined = joiner_client.post(f"/api/circles/{circle_id}/join")
    assert joined.status_code == 200
    assert joined.json() == {"success": True}
    assert joiner_client.post(f"/api/circles/{circle_id}/join").status_code == 200

    circles = joiner_client.get("/api/circles").json()["items"]
    assert [item["id"] for item in circles] == [circle_id]

    owner_client = authed_client(owner)
    notifications = owner_client.get("/api/notifications").json()
    assert len(notifications) == 1
    notification = notifications[0]
    assert notification["type"] == "circle_join"
    assert notification["link"] == f"/circles/{circle_id}"
    assert notification["read"] is False

    stranger_client = authed_client(joiner)
    assert stranger_client.patch(f"/api/notifications/{notification['id']}/read").status_code == 403
    assert stranger_client.patch("/api/notifications/missing/read").status_code == 404

    owner_client = authed_client(owner)
    marked = owner_client.patch(f"/api/notifications/{notification['id']}/read")
    assert marked.status_code == 200
    assert owner_client.get("/api/notifications").json()[0]["read"] is True


def test_leave_revokes_access(authed_client, user_factory, circle_factory):
    owner = user_factory("owner")
    member = user_factory("member")
    circle_id = circle_factory("Book Club", owner, member)
    client = authed_client(member)

    assert client.get(f"/api/circles/{circle_id}/messages").status_code == 200
    assert client.post(f"/api/circles/{circle_id}/leave").status_code == 200
    assert client.get(f"/api/circles/{circle_id}/messages").status_code == 403
    assert client.post("/api/circles/unknown/join").status_code == 404
