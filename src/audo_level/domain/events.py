"""Domain event contracts for normalization workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base domain event emitted by application services."""

    content_id: str
    payload_summary: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True, slots=True)
class MeasurementStarted(DomainEvent):
    """A fresh loudness measurement was scheduled for a content id."""


@dataclass(frozen=True, slots=True)
class MeasurementCompleted(DomainEvent):
    """Integrated loudness and peak were measured for a content id."""


@dataclass(frozen=True, slots=True)
class MeasurementFailed(DomainEvent):
    """Fetching, decoding, or measuring the content failed."""


@dataclass(frozen=True, slots=True)
class GainApplied(DomainEvent):
    """A lane was ramped toward the gain computed for its content."""


@dataclass(frozen=True, slots=True)
class CacheCleared(DomainEvent):
    """All cached and in-flight measurements were detached."""
