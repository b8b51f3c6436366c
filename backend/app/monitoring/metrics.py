"""Metric definitions exported on ``/metrics``."""

from __future__ import annotations

from .registry import registry


realtime_connections = registry.gauge(
    "realtime_connections",
    "Websocket sessions and occupied rooms held by this process.",
    label_names=("scope",),
)

realtime_events_total = registry.counter(
    "realtime_events_total",
    "Realtime frames processed by the relay.",
    label_names=("event", "direction"),
)

voice_room_transitions_total = registry.counter(
    "voice_room_transitions_total",
    "Voice room participant transitions by outcome.",
    label_names=("transition", "outcome"),
)

translation_requests_total = registry.counter(
    "translation_requests_total",
    "Calls made to the external translation service.",
    label_names=("outcome",),
)
