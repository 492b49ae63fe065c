import uuid


def _send(client, headers, recipient, **overrides):
    payload = {
        "recipient_id": str(recipient.id),
        "subject": "Rapport de ronde",
        "body": "Secteur B calme.",
    }
    payload.update(overrides)
    return client.post("/messages/send", json=payload, headers=headers)


class TestMessageEndpoints:
    def test_send_and_receive(
        self, client, auth_headers, auth_headers_for, make_user, scientist
    ):
        guard = make_user("securite", clearance=3)
        resp = _send(client, auth_headers, guard)
        assert resp.status_code == 201
        assert resp.json()["message"] == "Message sent successfully"
        message_id = resp.json()["id"]

        guard_headers = auth_headers_for(guard)
        inbox = client.get("/messages/inbox", headers=guard_headers).json()
        assert inbox["total"] == 1
        item = inbox["messages"][0]
        assert item["sender"]["username"] == scientist.username
        assert item["is_read"] is False
        assert item["priority"] == "information"

        unread = client.get("/messages/unread-count", headers=guard_headers)
        assert unread.json() == {"unread": 1}

        resp = client.patch(f"/messages/{message_id}/read", headers=guard_headers)
        assert resp.json()["success"] is True
        assert client.get("/messages/unread-count", headers=guard_headers).json() == {
            "unread": 0
        }

        sent = client.get(
            "/messages/inbox", params={"folder": "sent"}, headers=auth_headers
        ).json()
        assert sent["messages"][0]["is_read"] is True

    def test_send_validation_error(self, client, auth_headers):
        resp = client.post(
            "/messages/send", json={"subject": "x"}, headers=auth_headers
        )
        assert resp.status_code == 400

    def test_send_to_unknown_recipient(self, client, auth_headers):
        resp = client.post(
            "/messages/send",
            json={"recipient_id": str(uuid.uuid4()), "subject": "x", "body": "y"},
            headers=auth_headers,
        )
        assert resp.status_code == 404

    def test_draft_created_then_updated(self, client, auth_headers, make_user):
        colleague = make_user()
        payload = {"recipient_id": str(colleague.id), "subject": "v1", "body": "..."}
        resp = client.post("/messages/draft", json=payload, headers=auth_headers)
        assert resp.status_code == 201
        draft_id = resp.json()["id"]
        payload.update(id=draft_id, subject="v2")
        resp = client.post("/messages/draft", json=payload, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"id": draft_id, "message": "Draft updated"}

    def test_folders_and_move(self, client, auth_headers, auth_headers_for, make_user):
        colleague = make_user()
        message_id = _send(client, auth_headers, colleague).json()["id"]
        headers = auth_headers_for(colleague)
        resp = client.patch(
            f"/messages/{message_id}/folder",
            json={"folder": "archived"},
            headers=headers,
        )
        assert resp.status_code == 200
        counts = client.get("/messages/folders", headers=headers).json()
        assert counts["archived"] == 1
        assert counts["inbox"] == 0

    def test_get_and_delete(self, client, auth_headers, auth_headers_for, make_user):
        colleague = make_user()
        message_id = _send(client, auth_headers, colleague).json()["id"]
        headers = auth_headers_for(colleague)
        detail = client.get(f"/messages/{message_id}", headers=headers).json()
        assert detail["attachments"] == []
        url = f"/messages/{message_id}"
        assert client.delete(url, headers=headers).status_code == 200
        assert client.get(url, headers=headers).status_code == 404
        assert client.get(url, headers=auth_headers).status_code == 200

    def test_search(self, client, auth_headers, make_user):
        colleague = make_user()
        _send(client, auth_headers, colleague, subject="Inventaire labo")
        resp = client.get(
            "/messages/search/query",
            params={"q": "labo", "folder": "sent"},
            headers=auth_headers,
        )
        assert [m["subject"] for m in resp.json()] == ["Inventaire labo"]
        short = client.get(
            "/messages/search/query", params={"q": "l"}, headers=auth_headers
        )
        assert short.status_code == 400

    def test_messaging_module_disabled(self, client, auth_headers, disabled_module):
        disabled_module("messagerie")
        assert client.get("/messages/inbox", headers=auth_headers).status_code == 403
        assert client.get("/aliases", headers=auth_headers).status_code == 403
