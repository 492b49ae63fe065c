import logging

from intranet.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="intranet.tasks.events.process_event", ignore_result=True)
def process_event(
    event_type: str,
    entity_type: str,
    entity_id: str,
    actor_id: str | None = None,
    payload: dict | None = None,
) -> None:
    """Turn a lifecycle event into a Discord embed and queue its delivery."""
    from intranet.services.discord import build_embed

    logger.info("Processing event %s for %s/%s", event_type, entity_type, entity_id)
    embed = build_embed(event_type, payload or {})
    if embed is None:
        logger.debug("No notification for event %s", event_type)
        return
    _fanout_webhook(embed)


def _fanout_webhook(embed: dict) -> None:
    try:
        from intranet.tasks.webhooks import deliver_webhook

        deliver_webhook.delay(embed=embed)
    except Exception as e:
        logger.exception("Failed to fan-out webhook: %s", e)
