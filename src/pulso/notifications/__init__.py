"""Notification sinks for completion sounds, achievements and errors."""

from pulso.notifications.base import NotificationSink
from pulso.notifications.console import ConsoleNotifier

__all__ = ["ConsoleNotifier", "NotificationSink"]
