"""Routing of gain ramps to the two playback lanes."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from audo_level.application.ports import GainControl, PlaybackLane
from audo_level.domain.models import LaneId
from audo_level.domain.policies import DEFAULT_GAIN_POLICY, GainPolicy

logger = logging.getLogger(__name__)


class LaneRouter:
    """Owns the lane -> gain control mapping.

    Gain controls are created lazily by :meth:`connect` and dropped by
    :meth:`release`. Each control is only ever ramped by calls for its own
    lane.
    """

    def __init__(self, lanes: Mapping[LaneId, PlaybackLane], policy: GainPolicy = DEFAULT_GAIN_POLICY) -> None:
        missing = set(LaneId) - set(lanes)
        if missing:
            names = ", ".join(sorted(lane.value for lane in missing))
            raise ValueError(f"Lane router requires both lanes; missing: {names}.")
        self._lanes: dict[LaneId, PlaybackLane] = {LaneId(lane_id): lane for lane_id, lane in lanes.items()}
        self._controls: dict[LaneId, GainControl] = {}
        self._policy = policy

    @property
    def is_connected(self) -> bool:
        return bool(self._controls)

    def connect(self) -> None:
        if self._controls:
            return
        for lane_id, lane in self._lanes.items():
            self._controls[lane_id] = lane.connect_gain()
        logger.debug("Connected gain controls for lanes %s.", ", ".join(lane.value for lane in self._controls))

    def gain_control(self, lane: LaneId) -> GainControl | None:
        self._lane(lane)
        return self._controls.get(LaneId(lane))

    def assigned_content_id(self, lane: LaneId) -> str | None:
        return self._lane(lane).assigned_content_id

    def is_assigned(self, lane: LaneId, content_id: str) -> bool:
        """Whether ``lane`` is still playing ``content_id``."""

        return self.assigned_content_id(lane) == content_id

    def ramp(self, lane: LaneId, value: float, time_constant: float | None = None) -> bool:
        """Schedule an exponential ramp toward ``value``; False when not connected."""

        control = self.gain_control(lane)
        if control is None:
            return False
        control.ramp_to(value, self._policy.ramp_time_constant if time_constant is None else time_constant)
        return True

    def release(self) -> None:
        if not self._controls:
            return
        for lane_id in list(self._controls):
            self._lanes[lane_id].disconnect()
        self._controls.clear()

    def _lane(self, lane: LaneId) -> PlaybackLane:
        try:
            return self._lanes[LaneId(lane)]
        except ValueError as exc:
            raise KeyError(f"Unknown lane: {lane!r}") from exc
