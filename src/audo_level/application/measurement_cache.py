"""Per-content loudness cache that deduplicates concurrent measurements.

Every content id maps to exactly one tagged entry:

* :class:`Cached` holds a finished measurement and is never overwritten;
* :class:`InFlight` holds the single task computing it;
* a missing key means the content was never measured, the last attempt
  failed, or the cache was cleared.

Entries are only touched on the event loop thread and never across an
``await``, so check-then-insert is atomic for concurrent callers.

Clear policy: ``clear()`` bumps a generation counter. A computation started
under an older generation still resolves for the callers already awaiting it,
but its result is discarded instead of repopulating the cache.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from audo_level.analysis import measure_buffer
from audo_level.application.event_publisher import EventPublisher, NullEventPublisher
from audo_level.application.ports import AudioDecoder, AudioFetcher
from audo_level.domain.errors import MeasurementError
from audo_level.domain.events import CacheCleared, MeasurementCompleted, MeasurementFailed, MeasurementStarted
from audo_level.domain.models import LoudnessMeasurement
from audo_level.domain.policies import DEFAULT_GATING_POLICY, GatingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Cached:
    measurement: LoudnessMeasurement


@dataclass(frozen=True, slots=True)
class InFlight:
    task: "asyncio.Task[LoudnessMeasurement]"
    generation: int


CacheEntry = Union[Cached, InFlight]


def _consume_task_exception(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class MeasurementCache:
    """Maps content ids to measurements or the task producing them."""

    def __init__(
        self,
        fetcher: AudioFetcher,
        decoder: AudioDecoder,
        *,
        gating_policy: GatingPolicy = DEFAULT_GATING_POLICY,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._decoder = decoder
        self._gating_policy = gating_policy
        self._event_publisher = event_publisher or NullEventPublisher()
        self._entries: dict[str, CacheEntry] = {}
        self._generation = 0

    def __contains__(self, content_id: object) -> bool:
        return content_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def generation(self) -> int:
        return self._generation

    def get(self, content_id: str) -> LoudnessMeasurement | None:
        """Return the cached measurement, ignoring in-flight work."""

        entry = self._entries.get(content_id)
        if isinstance(entry, Cached):
            return entry.measurement
        return None

    def is_in_flight(self, content_id: str) -> bool:
        return isinstance(self._entries.get(content_id), InFlight)

    async def measure(self, content_id: str, source_url: str) -> LoudnessMeasurement:
        """Return the measurement for ``content_id``, computing it at most once.

        Raises :class:`MeasurementError` when fetching, decoding, or analysis
        fails. Failures are not cached.
        """

        entry = self._entries.get(content_id)
        if isinstance(entry, Cached):
            return entry.measurement

        if entry is None:
            task = asyncio.get_running_loop().create_task(
                self._compute(content_id, source_url, self._generation),
                name=f"measure-loudness:{content_id}",
            )
            task.add_done_callback(_consume_task_exception)
            entry = InFlight(task=task, generation=self._generation)
            self._entries[content_id] = entry
            self._event_publisher.publish(
                MeasurementStarted(content_id=content_id, payload_summary={"source_url": source_url})
            )

        # A cancelled caller must not cancel the computation other callers share.
        return await asyncio.shield(entry.task)

    def clear(self) -> None:
        """Forget every cached and in-flight entry without cancelling work."""

        detached = len(self._entries)
        self._entries.clear()
        self._generation += 1
        self._event_publisher.publish(
            CacheCleared(content_id="*", payload_summary={"detached_entries": detached, "generation": self._generation})
        )

    async def _compute(self, content_id: str, source_url: str, generation: int) -> LoudnessMeasurement:
        try:
            raw_bytes = await asyncio.to_thread(self._fetcher.fetch, source_url)
            buffer = await asyncio.to_thread(self._decoder.decode, raw_bytes)
            measurement = await asyncio.to_thread(measure_buffer, buffer, self._gating_policy)
        except MeasurementError as error:
            self._settle_failure(content_id, generation, error)
            raise
        except asyncio.CancelledError:
            self._drop_in_flight(content_id, generation)
            raise
        except Exception as error:  # noqa: BLE001
            wrapped = MeasurementError("analysis_failed", f"Loudness analysis failed for '{content_id}': {error}")
            self._settle_failure(content_id, generation, wrapped)
            raise wrapped from error

        self._settle_success(content_id, generation, measurement)
        return measurement

    def _drop_in_flight(self, content_id: str, generation: int) -> None:
        entry = self._entries.get(content_id)
        if isinstance(entry, InFlight) and entry.generation == generation:
            del self._entries[content_id]

    def _settle_failure(self, content_id: str, generation: int, error: MeasurementError) -> None:
        self._drop_in_flight(content_id, generation)
        logger.warning("Loudness analysis failed for %s: %s", content_id, error.message)
        self._event_publisher.publish(MeasurementFailed(content_id=content_id, payload_summary=error.as_dict()))

    def _settle_success(self, content_id: str, generation: int, measurement: LoudnessMeasurement) -> None:
        logger.info("%s: %.1f LUFS, peak %.1f dBFS", content_id, measurement.lufs, measurement.peak_db)
        if generation != self._generation:
            logger.debug("Discarding measurement for %s computed before a cache clear.", content_id)
            return

        self._entries[content_id] = Cached(measurement)
        self._event_publisher.publish(
            MeasurementCompleted(
                content_id=content_id,
                payload_summary={"lufs": measurement.lufs, "peak": measurement.peak},
            )
        )
