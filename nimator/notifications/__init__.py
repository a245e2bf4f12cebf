"""Notifiers — deliver a finished run to the console, Slack or OpsGenie.

Each notifier has a threshold: runs below it are not delivered. Delivery
problems are logged and reported as ``False``; they never raise.
"""

from .base import Notifier, notify_all
from .console import ConsoleNotifier
from .opsgenie import OpsGenieNotifier
from .slack import SlackNotifier

__all__ = [
    "ConsoleNotifier",
    "Notifier",
    "OpsGenieNotifier",
    "SlackNotifier",
    "notify_all",
]
