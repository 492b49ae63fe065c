import uuid

from sqlalchemy import select

from intranet.models.admin import AuditLog
from intranet.models.message import MessageRestriction


def _create_alias(client, headers, name="Direction du site", **extra):
    return client.post("/aliases", json={"name": name, **extra}, headers=headers)


class TestAliasEndpoints:
    def test_admin_creates_alias(self, client, auth_headers_for, admin_user):
        resp = _create_alias(client, auth_headers_for(admin_user))
        assert resp.status_code == 201
        assert resp.json()["owner_id"] == str(admin_user.id)
        assert resp.json()["enabled"] is True

    def test_non_admin_cannot_create(self, client, auth_headers):
        assert _create_alias(client, auth_headers).status_code == 403

    def test_duplicate_name(self, client, auth_headers_for, admin_user):
        headers = auth_headers_for(admin_user)
        _create_alias(client, headers)
        assert _create_alias(client, headers).status_code == 409

    def test_grant_then_send_then_revoke(
        self, client, auth_headers, auth_headers_for, admin_user, scientist, make_user
    ):
        admin_headers = auth_headers_for(admin_user)
        alias_id = _create_alias(client, admin_headers).json()["id"]
        resp = client.post(
            f"/aliases/{alias_id}/grant",
            json={"user_id": str(scientist.id)},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        listed = client.get("/aliases", headers=auth_headers).json()
        assert [a["id"] for a in listed] == [alias_id]

        colleague = make_user()
        sent = client.post(
            "/messages/send",
            json={
                "recipient_id": str(colleague.id),
                "subject": "Note de service",
                "body": "...",
                "sender_alias": alias_id,
            },
            headers=auth_headers,
        )
        assert sent.status_code == 201

        client.post(
            f"/aliases/{alias_id}/revoke",
            json={"user_id": str(scientist.id)},
            headers=admin_headers,
        )
        assert client.get("/aliases", headers=auth_headers).json() == []

    def test_grant_unknown_alias(self, client, auth_headers_for, admin_user, scientist):
        resp = client.post(
            f"/aliases/{uuid.uuid4()}/grant",
            json={"user_id": str(scientist.id)},
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 404

    def test_disable_alias(self, client, db_session, auth_headers_for, admin_user):
        headers = auth_headers_for(admin_user)
        alias_id = _create_alias(client, headers).json()["id"]
        resp = client.patch(f"/aliases/{alias_id}/disable", headers=headers)
        assert resp.json()["enabled"] is False
        actions = {row.action for row in db_session.scalars(select(AuditLog)).all()}
        assert {"ALIAS_CREATE", "ALIAS_DISABLE"} <= actions


class TestRestrictionEndpoints:
    def test_restriction_blocks_sending(
        self,
        client,
        db_session,
        auth_headers,
        auth_headers_for,
        admin_user,
        scientist,
        make_user,
    ):
        admin_headers = auth_headers_for(admin_user)
        resp = client.post(
            "/restrictions",
            json={"user_id": str(scientist.id), "reason": "abus", "hours": 2},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        restriction = resp.json()
        assert restriction["restriction_type"] == "send_blocked"
        assert restriction["blocked_until"] is not None

        colleague = make_user()
        payload = {"recipient_id": str(colleague.id), "subject": "x", "body": "y"}
        blocked = client.post("/messages/send", json=payload, headers=auth_headers)
        assert blocked.status_code == 403

        listed = client.get(f"/restrictions/user/{scientist.id}", headers=admin_headers)
        assert [r["id"] for r in listed.json()] == [restriction["id"]]

        resp = client.delete(
            f"/restrictions/{restriction['id']}", headers=admin_headers
        )
        assert resp.status_code == 200
        assert db_session.scalars(select(MessageRestriction)).all() == []
        resent = client.post("/messages/send", json=payload, headers=auth_headers)
        assert resent.status_code == 201

    def test_restrictions_admin_only(self, client, auth_headers, scientist):
        resp = client.post(
            "/restrictions", json={"user_id": str(scientist.id)}, headers=auth_headers
        )
        assert resp.status_code == 403

    def test_hours_must_be_positive(
        self, client, auth_headers_for, admin_user, scientist
    ):
        resp = client.post(
            "/restrictions",
            json={"user_id": str(scientist.id), "hours": 0},
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 400
