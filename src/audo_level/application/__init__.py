"""Application services for loudness measurement and lane gain control."""

from .lane_router import LaneRouter
from .measurement_cache import MeasurementCache
from .normalizer import LoudnessNormalizer

__all__ = ["LaneRouter", "LoudnessNormalizer", "MeasurementCache"]
