"""Simple logging-backed implementation of the event publisher."""

from __future__ import annotations

import logging

from audo_level.domain.events import DomainEvent

LOGGER = logging.getLogger("audo_level.events")


class LoggingEventPublisher:
    """Emit event payload summaries to structured logs."""

    def publish(self, event: DomainEvent) -> None:
        LOGGER.info(
            "domain_event_emitted",
            extra={
                "event_name": type(event).__name__,
                "content_id": event.content_id,
                "lane": event.payload_summary.get("lane"),
                "payload_summary": event.payload_summary,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
