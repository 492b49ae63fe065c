import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from intranet.config import settings
from intranet.models.admin import AuditLog
from intranet.models.message import (
    Mailbox,
    MailboxFolder,
    Message,
    MessageAlias,
    MessageRestriction,
    RestrictionType,
    UserAliasPermission,
)
from intranet.schemas.message import DraftSave, MessageSend
from intranet.services.messages import Messages, sent_today


def _send(db_session, sender, recipient, **overrides):
    payload = dict(recipient_id=recipient.id, subject="Relève", body="Poste 4 libre.")
    payload.update(overrides)
    return Messages.send(db_session, sender, MessageSend(**payload))


def _rows(db_session, message):
    return db_session.scalars(
        select(Mailbox).where(Mailbox.message_id == message.id)
    ).all()


@pytest.fixture()
def recipient(make_user):
    return make_user("securite", clearance=3, department="Sécurité")


class TestMessagesSend:
    def test_send_creates_two_mailbox_rows(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        rows = {row.user_id: row for row in _rows(db_session, message)}
        assert len(rows) == 2
        assert rows[scientist.id].folder == MailboxFolder.sent
        assert rows[scientist.id].is_read is True
        assert rows[recipient.id].folder == MailboxFolder.inbox
        assert rows[recipient.id].is_read is False
        assert message.thread_id == message.id
        assert message.is_draft is False
        entry = db_session.scalars(select(AuditLog)).one()
        assert entry.action == "MSG_SEND"

    def test_send_keeps_explicit_thread(self, db_session, scientist, recipient):
        first = _send(db_session, scientist, recipient)
        reply = _send(db_session, recipient, scientist, thread_id=first.id)
        assert reply.thread_id == first.id

    def test_unknown_recipient(self, db_session, scientist):
        with pytest.raises(HTTPException) as exc:
            Messages.send(
                db_session,
                scientist,
                MessageSend(recipient_id=uuid.uuid4(), subject="x", body="y"),
            )
        assert exc.value.status_code == 404
        assert db_session.scalars(select(Message)).all() == []

    def test_invalid_priority(self, db_session, scientist, recipient):
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient, priority="urgent")
        assert exc.value.status_code == 400

    def test_active_restriction_blocks(
        self, db_session, scientist, recipient, admin_user
    ):
        db_session.add(
            MessageRestriction(
                user_id=scientist.id,
                restriction_type=RestrictionType.send_blocked,
                reason="spam",
                created_by=admin_user.id,
            )
        )
        db_session.commit()
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient)
        assert exc.value.status_code == 403
        assert "spam" in exc.value.detail
        assert db_session.scalars(select(Mailbox)).all() == []

    def test_expired_restriction_is_ignored(self, db_session, scientist, recipient):
        db_session.add(
            MessageRestriction(
                user_id=scientist.id,
                restriction_type=RestrictionType.send_blocked,
                blocked_until=datetime.now(timezone.utc) - timedelta(hours=1),
            )
        )
        db_session.commit()
        assert _send(db_session, scientist, recipient).id is not None

    def test_daily_cap(self, db_session, scientist, recipient):
        capped = dataclasses.replace(settings, max_messages_per_day=2)
        with patch("intranet.services.messages.settings", capped):
            _send(db_session, scientist, recipient)
            _send(db_session, scientist, recipient)
            with pytest.raises(HTTPException) as exc:
                _send(db_session, scientist, recipient)
        assert exc.value.status_code == 429
        assert sent_today(db_session, scientist) == 2

    def test_drafts_do_not_count_towards_cap(self, db_session, scientist, recipient):
        Messages.save_draft(
            db_session,
            scientist,
            DraftSave(recipient_id=recipient.id, subject="brouillon", body="..."),
        )
        assert sent_today(db_session, scientist) == 0

    def test_attachment_must_be_readable(
        self, db_session, scientist, recipient, make_document
    ):
        secret = make_document(recipient, clearance=3)
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient, attachments=[secret.id])
        assert exc.value.status_code == 403

    def test_attachments_listed_on_detail(
        self, db_session, scientist, recipient, make_document
    ):
        document = make_document(scientist, title="Plan d'évacuation")
        message = _send(db_session, scientist, recipient, attachments=[document.id])
        detail = Messages.get(db_session, recipient, str(message.id))
        assert detail["attachments"] == [
            {"id": document.id, "title": "Plan d'évacuation"}
        ]


class TestMessagesAliases:
    def _alias(self, db_session, owner, **overrides):
        name = overrides.pop("name", "Direction")
        alias = MessageAlias(name=name, owner_id=owner.id, **overrides)
        db_session.add(alias)
        db_session.commit()
        return alias

    def test_owner_can_send_as_alias(self, db_session, scientist, recipient):
        alias = self._alias(db_session, scientist)
        message = _send(db_session, scientist, recipient, sender_alias=alias.id)
        detail = Messages.get(db_session, recipient, str(message.id))
        assert detail["sender_alias"] == "Direction"

    def test_grantee_can_send_as_alias(
        self, db_session, scientist, recipient, admin_user
    ):
        alias = self._alias(db_session, admin_user)
        db_session.add(UserAliasPermission(user_id=scientist.id, alias_id=alias.id))
        db_session.commit()
        message = _send(db_session, scientist, recipient, sender_alias=alias.id)
        assert message.sender_alias_id == alias.id

    def test_ungranted_alias_rejected(
        self, db_session, scientist, recipient, admin_user
    ):
        alias = self._alias(db_session, admin_user)
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient, sender_alias=alias.id)
        assert exc.value.status_code == 403

    def test_disabled_alias_rejected(self, db_session, scientist, recipient):
        alias = self._alias(db_session, scientist, enabled=False)
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient, sender_alias=alias.id)
        assert exc.value.status_code == 403

    def test_admin_only_alias_rejected_for_non_admin(
        self, db_session, scientist, recipient
    ):
        alias = self._alias(db_session, scientist, admin_only=True)
        with pytest.raises(HTTPException) as exc:
            _send(db_session, scientist, recipient, sender_alias=alias.id)
        assert exc.value.status_code == 403


class TestMessagesMailbox:
    def test_read_state_is_per_participant(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        assert Messages.unread_count(db_session, recipient) == 1
        Messages.set_read(db_session, recipient, str(message.id), True)
        assert Messages.unread_count(db_session, recipient) == 0
        Messages.set_read(db_session, scientist, str(message.id), False)
        assert Messages.unread_count(db_session, recipient) == 0
        assert Messages.unread_count(db_session, scientist) == 1

    def test_non_participant_cannot_touch(
        self, db_session, scientist, recipient, make_user
    ):
        outsider = make_user("ia", clearance=0)
        message = _send(db_session, scientist, recipient)
        with pytest.raises(HTTPException) as exc:
            Messages.get(db_session, outsider, str(message.id))
        assert exc.value.status_code == 404

    def test_delete_hides_only_for_caller(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        Messages.delete(db_session, recipient, str(message.id))
        inbox = Messages.list_folder(db_session, recipient, "inbox", 0)
        sent = Messages.list_folder(db_session, scientist, "sent", 0)
        assert inbox["total"] == 0
        assert sent["total"] == 1
        with pytest.raises(HTTPException):
            Messages.get(db_session, recipient, str(message.id))

    def test_move_to_archive(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        Messages.move_to_folder(db_session, recipient, str(message.id), "archived")
        counts = Messages.folder_counts(db_session, recipient)
        assert counts["archived"] == 1
        assert counts["inbox"] == 0
        item = Messages.list_folder(db_session, recipient, "archived", 0)["messages"][0]
        assert item["archived"] is True

    def test_move_to_same_folder_is_noop(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        Messages.move_to_folder(db_session, recipient, str(message.id), "inbox")
        assert Messages.folder_counts(db_session, recipient)["inbox"] == 1

    def test_trash_excluded_from_unread(self, db_session, scientist, recipient):
        message = _send(db_session, scientist, recipient)
        Messages.move_to_folder(db_session, recipient, str(message.id), "trash")
        assert Messages.unread_count(db_session, recipient) == 0

    def test_invalid_folder(self, db_session, scientist):
        with pytest.raises(HTTPException) as exc:
            Messages.list_folder(db_session, scientist, "spam", 0)
        assert exc.value.status_code == 400

    def test_pagination(self, db_session, scientist, recipient):
        small = dataclasses.replace(settings, messages_per_page=2)
        for i in range(3):
            _send(db_session, scientist, recipient, subject=f"S{i}")
        with patch("intranet.services.messages.settings", small):
            first = Messages.list_folder(db_session, recipient, "inbox", 0)
            second = Messages.list_folder(db_session, recipient, "inbox", 1)
        assert first["total"] == 3
        assert first["pages"] == 2
        assert len(first["messages"]) == 2
        assert len(second["messages"]) == 1

    def test_search(self, db_session, scientist, recipient):
        _send(db_session, scientist, recipient, subject="Alerte confinement")
        _send(db_session, scientist, recipient, subject="Repas", body="Menu du jour")
        found = Messages.search(db_session, recipient, "confinement", "inbox")
        assert [m["subject"] for m in found] == ["Alerte confinement"]
        assert Messages.search(db_session, scientist, "confinement", "inbox") == []

    def test_search_too_short(self, db_session, scientist):
        with pytest.raises(HTTPException) as exc:
            Messages.search(db_session, scientist, "a", "inbox")
        assert exc.value.status_code == 400


class TestMessagesDrafts:
    def test_create_then_update_draft(self, db_session, scientist, recipient):
        draft, created = Messages.save_draft(
            db_session,
            scientist,
            DraftSave(recipient_id=recipient.id, subject="v1", body="corps"),
        )
        assert created is True
        assert draft.is_draft is True
        same, created = Messages.save_draft(
            db_session,
            scientist,
            DraftSave(
                id=draft.id, recipient_id=recipient.id, subject="v2", body="corps"
            ),
        )
        assert created is False
        assert same.id == draft.id
        assert same.subject == "v2"
        assert Messages.folder_counts(db_session, scientist)["drafts"] == 1
        assert Messages.folder_counts(db_session, recipient)["inbox"] == 0

    def test_cannot_update_someone_elses_draft(self, db_session, scientist, recipient):
        draft, _ = Messages.save_draft(
            db_session,
            scientist,
            DraftSave(recipient_id=recipient.id, subject="v1", body="corps"),
        )
        with pytest.raises(HTTPException) as exc:
            Messages.save_draft(
                db_session,
                recipient,
                DraftSave(
                    id=draft.id, recipient_id=scientist.id, subject="x", body="y"
                ),
            )
        assert exc.value.status_code == 404
