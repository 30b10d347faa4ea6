"""Side-effect services invoked after a transaction commits."""

from .email import EmailSender, HttpEmailSender, LoggingEmailSender
from .notifications import LocalNotificationBus, NotificationBus, NullNotificationBus

__all__ = [
    "EmailSender",
    "HttpEmailSender",
    "LocalNotificationBus",
    "LoggingEmailSender",
    "NotificationBus",
    "NullNotificationBus",
]
