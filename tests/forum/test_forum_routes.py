"""Forum endpoints: gated submissions, likes, deletion and listing."""
import threading
from datetime import datetime, timedelta, timezone

from fastapi import status

from dear_diary.modules.forum import ForumStore, Post, Reply
from tests.helpers import auth_headers, create_user, fetch_user


def _post(client, headers, content, **extra):
    return client.post("/forum/posts", json={"content": content, **extra}, headers=headers)


def _make_post(client, headers, content="Tips for tracking groceries"):
    res = _post(client, headers, content)
    assert res.status_code == status.HTTP_201_CREATED
    return res.json()


def test_clean_post_is_created(client, test_user, user_headers):
    res = _post(client, user_headers, "My first budget!", timestamp="2026-03-01T10:00")
    assert res.status_code == status.HTTP_201_CREATED
    body = res.json()
    assert body["author"] == "alice"
    assert body["content"] == "My first budget!"
    assert body["timestamp"] == "2026-03-01T10:00"
    assert body["likes"] == 0
    assert body["likedBy"] == []
    assert body["isModerated"] is False
    assert body["replies"] == []


def test_scenario_a_flagged_post_warns_and_stores_nothing(client, session, test_user, user_headers):
    res = _post(client, user_headers, "you are stupid")
    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["moderated"] is True
    assert body["warnings"] == 1
    assert body["isBanned"] is False
    assert body["banExpiry"] is None
    assert body["action"] == "warned"
    assert body["matchedTerms"] == ["stupid"]
    assert "Found: stupid" in body["message"]
    assert session.query(Post).count() == 0
    assert client.get("/forum/posts").json() == []


def test_scenario_b_second_violation_bans_then_blocks(client, session):
    user_headers = auth_headers(create_user(session, "alice", forum_warnings=1))
    res = _post(client, user_headers, "what an idiot")
    body = res.json()
    assert res.status_code == status.HTTP_200_OK
    assert body["warnings"] == 2
    assert body["isBanned"] is True
    assert body["action"] == "temporary_ban"

    blocked = _post(client, user_headers, "A perfectly polite post")
    assert blocked.status_code == status.HTTP_403_FORBIDDEN
    error = blocked.json()["error"]
    assert error["code"] == "user_banned"
    assert error["details"]["permanent"] is False
    assert error["details"]["banExpiry"]
    assert session.query(Post).count() == 0


def test_scenario_c_after_expiry_third_violation_is_permanent(client, session):
    alice = create_user(
        session,
        "alice",
        forum_warnings=2,
        is_banned=True,
        ban_expiry=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    user_headers = auth_headers(alice)
    res = _post(client, user_headers, "I hate this")
    body = res.json()
    assert res.status_code == status.HTTP_200_OK
    assert body["warnings"] == 3
    assert body["isBanned"] is True
    assert body["banExpiry"] is None
    assert body["action"] == "permanent_ban"
    assert "discord" in body["message"]

    blocked = _post(client, user_headers, "Sorry everyone")
    details = blocked.json()["error"]["details"]
    assert blocked.status_code == status.HTTP_403_FORBIDDEN
    assert details["permanent"] is True
    assert details["appealUrl"]


def test_blocked_user_is_refused_before_scanning(client, session):
    user_headers = auth_headers(
        create_user(session, "alice", forum_warnings=1, is_banned=True)
    )
    res = _post(client, user_headers, "damn")
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert fetch_user(session, "alice").forum_warnings == 1


def test_expired_ban_lets_user_post_again(client, session):
    alice = create_user(
        session,
        "alice",
        forum_warnings=2,
        is_banned=True,
        ban_expiry=datetime.now(timezone.utc) - timedelta(seconds=5),
    )
    user_headers = auth_headers(alice)
    res = _post(client, user_headers, "Back with a savings plan")
    assert res.status_code == status.HTTP_201_CREATED
    user = fetch_user(session, "alice")
    assert user.is_banned is False
    assert user.forum_warnings == 2


def test_empty_content_is_rejected(client, test_user, user_headers):
    res = _post(client, user_headers, "   ")
    assert res.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert res.json()["error"]["code"] == "validation_error"
    assert res.json()["error"]["details"]["field"] == "content"


def test_banned_user_with_empty_content_gets_ban_error(client, session):
    headers = auth_headers(create_user(session, "alice", forum_warnings=2, is_banned=True))
    res = _post(client, headers, "   ")
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["error"]["code"] == "user_banned"


def test_posting_requires_token(client):
    res = client.post("/forum/posts", json={"content": "hello?"})
    assert res.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_token_is_rejected(client):
    res = client.post(
        "/forum/posts",
        json={"content": "hello?"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json()["error"]["code"] == "invalid_token"
    assert res.headers["www-authenticate"] == "Bearer"


def test_reply_returns_post_with_replies(client, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    res = client.post(
        f"/forum/posts/{post['id']}/replies",
        json={"content": "Great idea"},
        headers=auth_headers(test_user2),
    )
    assert res.status_code == status.HTTP_201_CREATED
    body = res.json()
    assert body["id"] == post["id"]
    assert len(body["replies"]) == 1
    reply = body["replies"][0]
    assert reply["author"] == "bob"
    assert reply["postId"] == post["id"]
    assert reply["likes"] == 0


def test_flagged_reply_is_moderated(client, session, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    res = client.post(
        f"/forum/posts/{post['id']}/replies",
        json={"content": "shut up moron"},
        headers=auth_headers(test_user2),
    )
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["moderated"] is True
    assert res.json()["username"] == "bob"
    assert session.query(Reply).count() == 0


def test_empty_reply_is_rejected(client, test_user, user_headers):
    post = _make_post(client, user_headers)
    res = client.post(
        f"/forum/posts/{post['id']}/replies", json={"content": ""}, headers=user_headers
    )
    assert res.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_reply_to_missing_post(client, test_user, user_headers):
    res = client.post("/forum/posts/999/replies", json={"content": "hi"}, headers=user_headers)
    assert res.status_code == status.HTTP_404_NOT_FOUND


def test_banned_user_replying_to_missing_post_gets_ban_error(client, session):
    headers = auth_headers(create_user(session, "alice", forum_warnings=2, is_banned=True))
    res = client.post("/forum/posts/999/replies", json={"content": "hi"}, headers=headers)
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["error"]["code"] == "user_banned"


def test_like_is_idempotent(client, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    bob = auth_headers(test_user2)

    first = client.post(f"/forum/posts/{post['id']}/like", headers=bob).json()
    second = client.post(f"/forum/posts/{post['id']}/like", headers=bob).json()
    own = client.post(f"/forum/posts/{post['id']}/like", headers=user_headers).json()

    assert first["likes"] == 1
    assert second["likes"] == 1
    assert second["likedBy"] == ["bob"]
    assert own["likes"] == 2
    assert own["likedBy"] == ["bob", "alice"]


def test_like_reply(client, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    replied = client.post(
        f"/forum/posts/{post['id']}/replies",
        json={"content": "Nice"},
        headers=user_headers,
    ).json()
    reply_id = replied["replies"][0]["id"]
    bob = auth_headers(test_user2)

    url = f"/forum/posts/{post['id']}/replies/{reply_id}/like"
    client.post(url, headers=bob)
    res = client.post(url, headers=bob)
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["likes"] == 1
    assert res.json()["likedBy"] == ["bob"]

    wrong_post = client.post(f"/forum/posts/999/replies/{reply_id}/like", headers=bob)
    assert wrong_post.status_code == status.HTTP_404_NOT_FOUND


def test_like_missing_post(client, test_user, user_headers):
    assert client.post("/forum/posts/42/like", headers=user_headers).status_code == 404


def test_delete_by_author(client, session, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    client.post(f"/forum/posts/{post['id']}/like", headers=auth_headers(test_user2))
    client.post(
        f"/forum/posts/{post['id']}/replies", json={"content": "ok"}, headers=user_headers
    )

    res = client.delete(f"/forum/posts/{post['id']}", headers=user_headers)
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["ok"] is True
    assert session.query(Post).count() == 0
    assert session.query(Reply).count() == 0
    assert client.get(f"/forum/posts/{post['id']}").status_code == 404


def test_delete_by_other_user_is_forbidden(client, test_user, test_user2, user_headers):
    post = _make_post(client, user_headers)
    res = client.delete(f"/forum/posts/{post['id']}", headers=auth_headers(test_user2))
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["error"]["code"] == "permission_denied"


def test_delete_by_admin(client, test_user, admin_headers, user_headers):
    post = _make_post(client, user_headers)
    res = client.delete(f"/forum/posts/{post['id']}", headers=admin_headers)
    assert res.status_code == status.HTTP_200_OK


def test_list_posts_is_public_and_newest_first(client, test_user, user_headers):
    first = _make_post(client, user_headers, "first post")
    second = _make_post(client, user_headers, "second post")

    listed = client.get("/forum/posts")
    assert listed.status_code == status.HTTP_200_OK
    assert [post["id"] for post in listed.json()] == [second["id"], first["id"]]

    single = client.get(f"/forum/posts/{first['id']}")
    assert single.json()["content"] == "first post"


def test_concurrent_duplicate_likes_count_once(session, session_factory):
    create_user(session, "alice")
    create_user(session, "dan")
    post = Post(author="alice", content="Envelope budgeting works")
    session.add(post)
    session.commit()
    post_id = post.id

    barrier = threading.Barrier(2)
    errors = []

    def worker():
        db = session_factory()
        try:
            barrier.wait()
            ForumStore(db).like(post_id, "dan")
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    session.expire_all()
    stored = session.get(Post, post_id)
    assert stored.likes == 1
    assert stored.liked_by == ["dan"]
