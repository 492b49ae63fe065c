import logging

from intranet.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="intranet.tasks.webhooks.deliver_webhook",
    ignore_result=True,
    bind=True,
    max_retries=5,
    default_retry_delay=10,
)
def deliver_webhook(
    self: "celery_app.Task",  # type: ignore[name-defined]
    embed: dict,
) -> None:
    """POST one embed to the configured Discord webhook."""
    import httpx

    from intranet.config import settings

    url = settings.discord_webhook_url
    if not url:
        logger.info("Discord webhook not configured; dropping notification")
        return

    failed = False
    try:
        with httpx.Client(timeout=settings.webhook_timeout_seconds) as client:
            resp = client.post(url, json={"embeds": [embed]})
        if not 200 <= resp.status_code < 300:
            logger.warning("Discord webhook answered %s", resp.status_code)
            failed = True
    except (httpx.HTTPError, OSError) as e:
        logger.warning("Discord webhook delivery failed: %s", e)
        failed = True

    if failed:
        try:
            self.retry(countdown=10 * (2 ** (self.request.retries or 0)))
        except self.MaxRetriesExceededError:
            logger.error("Discord webhook delivery exhausted retries")
