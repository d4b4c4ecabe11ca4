"""Moderation endpoints: violation reporting, admin bans, resets and audit."""
from datetime import datetime, timedelta, timezone

from fastapi import status

from dear_diary.modules.moderation.models import AuditLog
from dear_diary.modules.users import UserRole
from tests.helpers import auth_headers, create_user, fetch_user


def test_user_can_report_own_violation(client, test_user, user_headers):
    res = client.post(
        "/forum/moderation/warn",
        json={"username": "alice", "matchedTerms": ["stupid"]},
        headers=user_headers,
    )
    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["warnings"] == 1
    assert body["isBanned"] is False
    assert body["action"] == "warned"
    assert body["matchedTerms"] == ["stupid"]


def test_self_report_cannot_shorten_permanent_ban(client, session):
    carol = create_user(session, "carol", forum_warnings=1, is_banned=True)
    headers = auth_headers(carol)

    res = client.post("/forum/moderation/warn", json={"username": "carol"}, headers=headers)
    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["warnings"] == 2
    assert body["isBanned"] is True
    assert body["banExpiry"] is None
    assert body["action"] == "permanent_ban"

    user = fetch_user(session, "carol")
    assert user.is_banned is True
    assert user.ban_expiry is None
    blocked = client.post("/forum/posts", json={"content": "hello again"}, headers=headers)
    assert blocked.status_code == status.HTTP_403_FORBIDDEN


def test_reporting_someone_else_requires_admin(client, test_user, test_user2, user_headers):
    res = client.post(
        "/forum/moderation/warn", json={"username": "bob"}, headers=user_headers
    )
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["error"]["code"] == "permission_denied"


def test_admin_can_warn_any_user(client, session, test_user, admin_headers):
    res = client.post(
        "/forum/moderation/warn", json={"username": "alice"}, headers=admin_headers
    )
    assert res.status_code == status.HTTP_200_OK
    assert fetch_user(session, "alice").forum_warnings == 1


def test_warn_unknown_user_is_404(client, admin_headers):
    res = client.post(
        "/forum/moderation/warn", json={"username": "ghost"}, headers=admin_headers
    )
    assert res.status_code == status.HTTP_404_NOT_FOUND
    assert res.json()["error"]["code"] == "resource_not_found"


def test_warn_requires_authentication(client, session, test_user):
    res = client.post("/forum/moderation/warn", json={"username": "alice"})
    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json()["error"]["code"] == "not_authenticated"
    assert fetch_user(session, "alice").forum_warnings == 0


def test_scenarios_a_to_d(client, session, test_user, user_headers, admin_headers):
    """Three self-reported violations escalate; unban keeps the count."""
    first = client.post(
        "/forum/moderation/warn", json={"username": "alice"}, headers=user_headers
    ).json()
    assert (first["warnings"], first["isBanned"], first["banExpiry"]) == (1, False, None)

    second = client.post(
        "/forum/moderation/warn", json={"username": "alice"}, headers=user_headers
    ).json()
    assert second["warnings"] == 2
    assert second["isBanned"] is True
    expiry = datetime.fromisoformat(second["banExpiry"].replace("Z", "+00:00"))
    expected = datetime.now(timezone.utc) + timedelta(hours=24)
    assert abs((expiry - expected).total_seconds()) < 60

    third = client.post(
        "/forum/moderation/warn", json={"username": "alice"}, headers=user_headers
    ).json()
    assert third["warnings"] == 3
    assert third["isBanned"] is True
    assert third["banExpiry"] is None
    assert third["action"] == "permanent_ban"

    unbanned = client.post(
        "/forum/moderation/unban", json={"username": "alice"}, headers=admin_headers
    )
    assert unbanned.status_code == status.HTTP_200_OK
    body = unbanned.json()
    assert body["isBanned"] is False
    assert body["banExpiry"] is None
    assert body["forumWarnings"] == 3


def test_ban_endpoints_require_admin(client, test_user, test_user2, user_headers):
    for path in ("ban", "unban", "reset-warnings"):
        res = client.post(
            f"/forum/moderation/{path}", json={"username": "bob"}, headers=user_headers
        )
        assert res.status_code == status.HTTP_403_FORBIDDEN
        assert res.json()["error"]["message"] == "Admin privileges required"
    assert client.get("/forum/moderation/audit", headers=user_headers).status_code == 403


def test_admin_ban_with_until_and_audit(client, session, test_user, admin_headers):
    until = (datetime.now(timezone.utc) + timedelta(days=2)).replace(microsecond=0)
    res = client.post(
        "/forum/moderation/ban",
        json={"username": "alice", "until": until.isoformat()},
        headers=admin_headers,
    )
    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["isBanned"] is True
    assert datetime.fromisoformat(body["banExpiry"].replace("Z", "+00:00")) == until

    audit = client.get("/forum/moderation/audit", headers=admin_headers).json()
    assert len(audit) == 1
    assert audit[0]["action"] == "ban"
    assert audit[0]["adminUsername"] == "moddy"
    assert audit[0]["targetUsername"] == "alice"
    assert audit[0]["details"]["until"] == until.isoformat()


def test_admin_permanent_ban(client, session, test_user, admin_headers):
    res = client.post(
        "/forum/moderation/ban", json={"username": "alice"}, headers=admin_headers
    )
    assert res.json()["isBanned"] is True
    assert res.json()["banExpiry"] is None


def test_ban_in_the_past_is_rejected_without_audit(client, session, test_user, admin_headers):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    res = client.post(
        "/forum/moderation/ban",
        json={"username": "alice", "until": past.isoformat()},
        headers=admin_headers,
    )
    assert res.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert res.json()["error"]["details"]["field"] == "until"
    assert session.query(AuditLog).count() == 0


def test_ban_unknown_user_writes_no_audit(client, session, admin_headers):
    res = client.post(
        "/forum/moderation/ban", json={"username": "ghost"}, headers=admin_headers
    )
    assert res.status_code == status.HTTP_404_NOT_FOUND
    assert session.query(AuditLog).count() == 0


def test_reset_warnings(client, session, admin_headers):
    create_user(session, "carol", forum_warnings=3, is_banned=True)
    res = client.post(
        "/forum/moderation/reset-warnings",
        json={"username": "carol"},
        headers=admin_headers,
    )
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["forumWarnings"] == 0
    assert res.json()["isBanned"] is True

    audit = client.get("/forum/moderation/audit", headers=admin_headers).json()
    assert audit[0]["action"] == "reset_warnings"
    assert audit[0]["details"] == {"previous_warnings": 3}


def test_audit_is_newest_first_and_limited(client, session, test_user, admin_headers):
    for path in ("ban", "unban", "reset-warnings"):
        client.post(
            f"/forum/moderation/{path}", json={"username": "alice"}, headers=admin_headers
        )
    audit = client.get("/forum/moderation/audit?limit=2", headers=admin_headers).json()
    assert [row["action"] for row in audit] == ["reset_warnings", "unban"]


def test_any_admin_can_moderate(client, session, test_user):
    other_admin = create_user(session, "root", role=UserRole.ADMIN)
    res = client.post(
        "/forum/moderation/ban",
        json={"username": "alice"},
        headers=auth_headers(other_admin),
    )
    assert res.status_code == status.HTTP_200_OK
