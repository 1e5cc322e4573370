"""Outbound notification delivery."""

from pushbridge.notify.pushover import PUSHOVER_API_URL, PushoverNotifier

__all__ = [
    "PUSHOVER_API_URL",
    "PushoverNotifier",
]
