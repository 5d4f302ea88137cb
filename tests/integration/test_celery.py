"""Integration tests for the Celery configuration."""

import pytest

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "storefront"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "storefront"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_relay_is_scheduled(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["relay-outbox-events"]
        assert entry["task"] == "core.relay_outbox_events"


class TestRelayTask:
    def test_relay_runs_eagerly(self, pending_order):
        from modules.core.tasks import relay_outbox_events

        result = relay_outbox_events.delay()

        assert result.successful()
        assert result.result == {"published": 1, "failed": 0}
        row = OutboxEvent.objects.get(aggregate_id=str(pending_order.id))
        assert row.status == EventStatus.PUBLISHED
