import enum
import logging
import uuid

logger = logging.getLogger(__name__)


class EventType(enum.Enum):
    user_created = "user.created"
    user_deleted = "user.deleted"
    user_password_reset = "user.password_reset"


def publish_event(
    event_type: EventType,
    entity_type: str,
    entity_id: str | uuid.UUID,
    actor_id: str | uuid.UUID | None = None,
    payload: dict | None = None,
) -> None:
    """Fire-and-forget event publishing.

    Queues a Celery task that turns the event into an outbound notification.
    Never raises; failures are logged and the caller carries on.
    """
    try:
        from intranet.tasks.events import process_event

        process_event.delay(
            event_type=event_type.value,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor_id=str(actor_id) if actor_id else None,
            payload=payload or {},
        )
        logger.debug(
            "Published event %s for %s/%s", event_type.value, entity_type, entity_id
        )
    except Exception as e:
        logger.exception("Failed to publish event %s: %s", event_type.value, e)
