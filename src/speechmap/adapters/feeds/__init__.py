"""Public interface for the JSON feed source adapter."""

from __future__ import annotations

from .client import JsonFeedSource, default_feed_resilience
from .schema import SpeechItemPayload, feed_items
from .translator import parse_speech_record

__all__ = [
    "JsonFeedSource",
    "SpeechItemPayload",
    "default_feed_resilience",
    "feed_items",
    "parse_speech_record",
]
