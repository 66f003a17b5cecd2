"""Adapters for the normalizer's host-facing ports."""

from .http_fetcher import RequestsAudioFetcher
from .logging_event_publisher import LoggingEventPublisher
from .pedalboard_codec import PedalboardAudioDecoder
from .software_lane import SoftwareGain, SoftwareLane

__all__ = [
    "LoggingEventPublisher",
    "PedalboardAudioDecoder",
    "RequestsAudioFetcher",
    "SoftwareGain",
    "SoftwareLane",
]
