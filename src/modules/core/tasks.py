"""Asynchronous tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db.models import Q

from modules.core.models import EventStatus, OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

RELAY_BATCH_SIZE = 100
MAX_RELAY_ATTEMPTS = 5


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = RELAY_BATCH_SIZE) -> dict:
    """Publish pending outbox rows on the in-process event bus.

    Rows whose event type has no subscriber, or whose handler raises,
    are marked ``FAILED`` and retried on the next run until
    ``MAX_RELAY_ATTEMPTS`` is reached.
    """
    pending = OutboxEvent.objects.filter(
        Q(status=EventStatus.PENDING)
        | Q(status=EventStatus.FAILED, retry_count__lt=MAX_RELAY_ATTEMPTS)
    ).order_by("created_at")[:batch_size]

    published = failed = 0
    for row in pending:
        log = logger.bind(outbox_id=str(row.id), event_type=row.event_type)
        event_class = event_bus.resolve(row.event_type)
        if event_class is None:
            row.mark_as_failed(f"No handler registered for {row.event_type}.")
            log.warning("outbox.unroutable")
            failed += 1
            continue
        try:
            event_bus.publish(event_class.from_payload(row.payload))
        except Exception as exc:  # noqa: BLE001 - recorded on the row, retried later
            row.mark_as_failed(str(exc))
            log.error("outbox.relay_failed", error=str(exc))
            failed += 1
            continue
        row.mark_as_published()
        published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
