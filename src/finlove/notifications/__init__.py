"""Outbound notifications."""

from finlove.notifications.mailer import BillNotice, LoggingMailer, Mailer
from finlove.notifications.fanout import notify_all

__all__ = ["BillNotice", "LoggingMailer", "Mailer", "notify_all"]
