"""Service context stamped on every log event."""

from gamelib.config import Settings
from gamelib.middleware.logging import add_service_context


class TestServiceContext:
    def test_fields_added(self):
        processor = add_service_context(Settings(environment="staging", app_version="1.2.3"))
        event = processor(None, "info", {"event": "request_completed"})
        assert event["service"] == "gamelib"
        assert event["environment"] == "staging"
        assert event["version"] == "1.2.3"

    def test_existing_fields_kept(self):
        processor = add_service_context(Settings())
        event = processor(None, "info", {"event": "x", "service": "sync-job"})
        assert event["service"] == "sync-job"
