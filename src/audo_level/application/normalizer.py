"""Application facade driving loudness normalization for two playback lanes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from audo_level.application.event_publisher import EventPublisher, NullEventPublisher
from audo_level.application.lane_router import LaneRouter
from audo_level.application.measurement_cache import MeasurementCache
from audo_level.application.ports import AudioDecoder, AudioFetcher, PlaybackLane
from audo_level.domain.errors import MeasurementError
from audo_level.domain.events import GainApplied
from audo_level.domain.models import LaneId, LaneState, LoudnessMeasurement
from audo_level.domain.policies import DEFAULT_GAIN_POLICY, DEFAULT_GATING_POLICY, GainPolicy, GatingPolicy
from audo_level.domain.services import UNITY_GAIN, compute_gain, gain_to_db
from audo_level.utils.config import NormalizerConfig, NormalizerSettings

logger = logging.getLogger(__name__)


class LoudnessNormalizer:
    """Single entry point the host playback controller calls into.

    Normalization is best effort: measurement failures are logged and the
    affected lane keeps playing at unity gain.
    """

    def __init__(
        self,
        lanes: Mapping[LaneId, PlaybackLane],
        fetcher: AudioFetcher,
        decoder: AudioDecoder,
        *,
        config: NormalizerConfig | None = None,
        gain_policy: GainPolicy = DEFAULT_GAIN_POLICY,
        gating_policy: GatingPolicy = DEFAULT_GATING_POLICY,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._config = config or NormalizerConfig()
        self._gain_policy = gain_policy
        self._event_publisher = event_publisher or NullEventPublisher()
        self._router = LaneRouter(lanes, gain_policy)
        self._cache = MeasurementCache(
            fetcher,
            decoder,
            gating_policy=gating_policy,
            event_publisher=self._event_publisher,
        )
        self._background: set[asyncio.Task[None]] = set()
        self._lane_states: dict[LaneId, tuple[str | None, LaneState]] = {
            lane: (None, LaneState.IDLE) for lane in LaneId
        }

    @classmethod
    def from_settings(
        cls,
        settings: NormalizerSettings,
        lanes: Mapping[LaneId, PlaybackLane],
        fetcher: AudioFetcher,
        decoder: AudioDecoder,
        *,
        event_publisher: EventPublisher | None = None,
    ) -> "LoudnessNormalizer":
        return cls(
            lanes,
            fetcher,
            decoder,
            config=settings.normalizer,
            gain_policy=settings.gain.to_gain_policy(),
            event_publisher=event_publisher,
        )

    # Configuration

    @property
    def config(self) -> NormalizerConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def target_lufs(self) -> float:
        return self._config.target_lufs

    def configure(self, enabled: bool, target_lufs: float) -> None:
        """Replace the configuration; disabling ramps both lanes to unity."""

        self._config = NormalizerConfig(enabled=bool(enabled), target_lufs=target_lufs)
        if not self._config.enabled:
            for lane in LaneId:
                self.reset_gain(lane)

    def set_enabled(self, enabled: bool) -> None:
        self.configure(enabled, self._config.target_lufs)

    def set_target(self, target_lufs: float) -> None:
        self.configure(self._config.enabled, target_lufs)

    # Measurements

    def get_cached_measurement(self, content_id: str) -> LoudnessMeasurement | None:
        return self._cache.get(content_id)

    def clear_cache(self) -> None:
        self._cache.clear()

    def lane_state(self, lane: LaneId) -> LaneState:
        return self._lane_states[LaneId(lane)][1]

    async def analyze_and_apply(self, lane: LaneId, source_url: str, content_id: str) -> None:
        """Measure ``content_id`` if needed and ramp ``lane`` to its gain."""

        if not self._config.enabled:
            return

        lane = LaneId(lane)
        self._router.connect()

        if self._cache.get(content_id) is not None:
            self.apply_gain(lane, content_id)
            return

        # Audible at full level while analysis runs.
        self._router.ramp(lane, UNITY_GAIN, self._gain_policy.analysis_unity_time_constant)
        self._set_state(lane, content_id, LaneState.ANALYZING)

        try:
            await self._cache.measure(content_id, source_url)
        except MeasurementError as error:
            logger.warning("Playing %s on lane %s at unity gain: %s", content_id, lane.value, error.message)
            self._transition(lane, content_id, LaneState.FAILED)
            return

        if not self._router.is_assigned(lane, content_id):
            logger.debug("Lane %s no longer plays %s; measurement not applied.", lane.value, content_id)
            self._transition(lane, content_id, LaneState.IDLE)
            return

        if self._cache.get(content_id) is None:
            # Cache cleared mid-analysis; the result was discarded.
            logger.debug("Measurement for %s was discarded; lane %s stays at unity.", content_id, lane.value)
            self._transition(lane, content_id, LaneState.IDLE)
            return

        if self.apply_gain(lane, content_id) is None:
            # Disabled or released while the measurement ran.
            self._transition(lane, content_id, LaneState.IDLE)

    def pre_analyze(self, source_url: str, content_id: str) -> None:
        """Warm the cache for upcoming content in a background task.

        Must be called from a running event loop.
        """

        if not self._config.enabled:
            return
        if content_id in self._cache:
            return

        task = asyncio.get_running_loop().create_task(
            self._pre_analyze(source_url, content_id),
            name=f"pre-analyze:{content_id}",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_for_background(self) -> None:
        """Wait until every pending pre-analysis task has finished."""

        while self._background:
            await asyncio.gather(*list(self._background))

    async def _pre_analyze(self, source_url: str, content_id: str) -> None:
        try:
            await self._cache.measure(content_id, source_url)
        except MeasurementError as error:
            logger.debug("Pre-analysis of %s failed: %s", content_id, error.message)

    # Gain

    def apply_gain(self, lane: LaneId, content_id: str) -> float | None:
        """Ramp ``lane`` toward the gain for ``content_id``.

        Returns the target linear gain, or ``None`` when disabled or the lanes
        are not connected yet.
        """

        if not self._config.enabled or not self._router.is_connected:
            return None

        lane = LaneId(lane)
        measurement = self._cache.get(content_id)
        gain = compute_gain(measurement, self._config.target_lufs, self._gain_policy)
        if not self._router.ramp(lane, gain):
            return None

        self._set_state(lane, content_id, LaneState.APPLIED)
        self._event_publisher.publish(
            GainApplied(
                content_id=content_id,
                payload_summary={
                    "lane": lane.value,
                    "gain": gain,
                    "gain_db": gain_to_db(gain),
                    "target_lufs": self._config.target_lufs,
                    "measured": measurement is not None,
                },
            )
        )
        return gain

    def reset_gain(self, lane: LaneId) -> None:
        self._router.ramp(LaneId(lane), UNITY_GAIN)

    # Lifecycle

    def teardown(self) -> None:
        """Drop cached measurements and release the lanes' gain stages.

        Pending measurements are not cancelled.
        """

        self._cache.clear()
        self._router.release()
        for lane in LaneId:
            self._lane_states[lane] = (None, LaneState.IDLE)

    def _set_state(self, lane: LaneId, content_id: str, state: LaneState) -> None:
        self._lane_states[lane] = (content_id, state)

    def _transition(self, lane: LaneId, content_id: str, state: LaneState) -> None:
        # Only the analysis started for the lane's latest content may move it.
        if self._lane_states[lane][0] == content_id:
            self._lane_states[lane] = (content_id, state)
