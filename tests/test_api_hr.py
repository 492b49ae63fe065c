import uuid

from sqlalchemy import select

from intranet.models.admin import AuditLog, HRNote
from intranet.models.user import User
from intranet.services.auth import verify_password


def _new_user(**overrides):
    payload = {
        "username": f"agent-{uuid.uuid4().hex[:6]}",
        "role": "securite",
        "clearance": 2,
        "department": "Sécurité",
    }
    payload.update(overrides)
    return payload


class TestHRUserEndpoints:
    def test_list_requires_hr_role(self, client, auth_headers):
        resp = client.get("/rh/users", headers=auth_headers)
        assert resp.status_code == 403

    def test_list_users(
        self, client, auth_headers_for, admin_user, scientist, db_session
    ):
        resp = client.get("/rh/users", headers=auth_headers_for(admin_user))
        assert resp.status_code == 200
        usernames = {u["username"] for u in resp.json()}
        assert {admin_user.username, scientist.username} <= usernames
        actions = [row.action for row in db_session.scalars(select(AuditLog)).all()]
        assert "RH_VIEW_USERS" in actions

    def test_create_user_publishes_event(
        self, client, auth_headers_for, admin_user, db_session, event_delay
    ):
        payload = _new_user()
        resp = client.post(
            "/rh/users", json=payload, headers=auth_headers_for(admin_user)
        )
        assert resp.status_code == 201
        data = resp.json()
        temporary = data["temporary_password"]
        assert len(temporary) == 8

        created = db_session.scalars(
            select(User).where(User.username == payload["username"])
        ).one()
        assert verify_password(temporary, created.password_hash)

        event_delay.assert_called_once()
        kwargs = event_delay.call_args.kwargs
        assert kwargs["event_type"] == "user.created"
        assert kwargs["entity_id"] == str(created.id)
        assert kwargs["payload"]["temporary_password"] == temporary

    def test_create_duplicate_username(
        self, client, auth_headers_for, admin_user, scientist
    ):
        resp = client.post(
            "/rh/users",
            json=_new_user(username=scientist.username),
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 409

    def test_staff_cannot_create_users(self, client, auth_headers_for, staff_user):
        resp = client.post(
            "/rh/users", json=_new_user(), headers=auth_headers_for(staff_user)
        )
        assert resp.status_code == 403

    def test_get_fiche_with_notes(self, client, auth_headers_for, make_user, scientist):
        director = make_user("direction", clearance=5, department="Direction")
        headers = auth_headers_for(director)
        resp = client.post(
            f"/rh/notes/{scientist.id}", json={"content": "Ponctuel."}, headers=headers
        )
        assert resp.status_code == 201
        assert resp.json()["author_name"] == director.username

        fiche = client.get(f"/rh/users/{scientist.id}", headers=headers).json()
        assert fiche["username"] == scientist.username
        assert [n["note"] for n in fiche["notes"]] == ["Ponctuel."]
        notes = client.get(f"/rh/notes/{scientist.id}", headers=headers).json()
        assert len(notes) == 1

    def test_get_fiche_not_found(self, client, auth_headers_for, admin_user):
        resp = client.get(
            f"/rh/users/{uuid.uuid4()}", headers=auth_headers_for(admin_user)
        )
        assert resp.status_code == 404

    def test_set_clearance(self, client, auth_headers_for, admin_user, scientist):
        resp = client.patch(
            f"/rh/clearance/{scientist.id}",
            json={"clearance": 4},
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 200
        assert resp.json()["clearance"] == 4

    def test_set_clearance_out_of_range(
        self, client, auth_headers_for, admin_user, scientist
    ):
        resp = client.patch(
            f"/rh/clearance/{scientist.id}",
            json={"clearance": 9},
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 400

    def test_suspend_and_unsuspend(
        self, client, auth_headers_for, admin_user, scientist, auth_headers
    ):
        headers = auth_headers_for(admin_user)
        resp = client.patch(
            f"/rh/suspend/{scientist.id}", json={"suspended": True}, headers=headers
        )
        assert resp.json()["suspended"] is True
        assert client.get("/documents", headers=auth_headers).status_code == 403
        client.patch(
            f"/rh/suspend/{scientist.id}", json={"suspended": False}, headers=headers
        )
        assert client.get("/documents", headers=auth_headers).status_code == 200


class TestHRDeleteUser:
    def test_delete_unreferenced_user(
        self, client, auth_headers_for, admin_user, make_user, db_session, event_delay
    ):
        target = make_user("ia", clearance=0, department="Calcul")
        db_session.add(HRNote(user_id=target.id, author_id=admin_user.id, note="x"))
        db_session.commit()
        target_id = target.id

        resp = client.delete(
            f"/rh/users/{target_id}", headers=auth_headers_for(admin_user)
        )
        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(User, target_id) is None
        assert db_session.scalars(select(HRNote)).all() == []

        kwargs = event_delay.call_args.kwargs
        assert kwargs["event_type"] == "user.deleted"
        assert kwargs["payload"]["actor_username"] == admin_user.username
        assert kwargs["payload"]["role"] == "ia"

    def test_delete_refused_while_referenced(
        self,
        client,
        auth_headers_for,
        admin_user,
        scientist,
        make_document,
        event_delay,
    ):
        make_document(scientist)
        resp = client.delete(
            f"/rh/users/{scientist.id}", headers=auth_headers_for(admin_user)
        )
        assert resp.status_code == 409
        assert not event_delay.called

    def test_delete_is_admin_only(
        self, client, auth_headers_for, staff_user, make_user
    ):
        target = make_user("ia", clearance=0)
        resp = client.delete(
            f"/rh/users/{target.id}", headers=auth_headers_for(staff_user)
        )
        assert resp.status_code == 403


class TestHRRolesAndPasswords:
    def test_staff_changes_role(self, client, auth_headers_for, staff_user, scientist):
        resp = client.patch(
            f"/rh/role/{scientist.id}",
            json={"role": "direction"},
            headers=auth_headers_for(staff_user),
        )
        assert resp.status_code == 200
        assert resp.json()["role"] == "direction"

    def test_staff_cannot_grant_admin(
        self, client, auth_headers_for, staff_user, scientist
    ):
        resp = client.patch(
            f"/rh/role/{scientist.id}",
            json={"role": "admin"},
            headers=auth_headers_for(staff_user),
        )
        assert resp.status_code == 403

    def test_staff_cannot_touch_admin(
        self, client, auth_headers_for, staff_user, admin_user
    ):
        resp = client.patch(
            f"/rh/role/{admin_user.id}",
            json={"role": "ia"},
            headers=auth_headers_for(staff_user),
        )
        assert resp.status_code == 403

    def test_invalid_role(self, client, auth_headers_for, admin_user, scientist):
        resp = client.patch(
            f"/rh/role/{scientist.id}",
            json={"role": "emperor"},
            headers=auth_headers_for(admin_user),
        )
        assert resp.status_code == 400

    def test_reset_password(
        self, client, auth_headers_for, admin_user, scientist, db_session, event_delay
    ):
        resp = client.post(
            f"/rh/reset-password/{scientist.id}", headers=auth_headers_for(admin_user)
        )
        assert resp.status_code == 200
        temporary = resp.json()["temporary_password"]
        db_session.refresh(scientist)
        assert verify_password(temporary, scientist.password_hash)
        assert event_delay.call_args.kwargs["event_type"] == "user.password_reset"

    def test_reset_password_admin_only(
        self, client, auth_headers_for, staff_user, scientist
    ):
        resp = client.post(
            f"/rh/reset-password/{scientist.id}", headers=auth_headers_for(staff_user)
        )
        assert resp.status_code == 403

    def test_hr_module_disabled(
        self, client, auth_headers_for, admin_user, disabled_module
    ):
        disabled_module("rh")
        resp = client.get("/rh/users", headers=auth_headers_for(admin_user))
        assert resp.status_code == 403
