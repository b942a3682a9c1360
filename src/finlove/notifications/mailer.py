"""Outbound email interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BillNotice:
    """One upcoming bill listed in a reminder email."""

    description: str
    amount: Decimal
    date: date


class Mailer(ABC):
    """Email delivery collaborator.

    Implementations raise on delivery failure; callers decide whether a
    failure matters.
    """

    @abstractmethod
    def send_recurring_bills(self, email: str, user_name: str, bills: list[BillNotice]) -> None:
        """Send the list of upcoming recurring bills to one user."""
        pass

    @abstractmethod
    def send_password_reset(self, email: str, reset_link: str) -> None:
        """Send a password reset link."""
        pass


class LoggingMailer(Mailer):
    """Development mailer that logs messages instead of sending them."""

    def send_recurring_bills(self, email: str, user_name: str, bills: list[BillNotice]) -> None:
        logger.info(
            "recurring_bills_email",
            to=email,
            user_name=user_name,
            bills=[
                {"description": b.description, "amount": str(b.amount), "date": b.date.isoformat()}
                for b in bills
            ],
        )

    def send_password_reset(self, email: str, reset_link: str) -> None:
        logger.info("password_reset_email", to=email, link=reset_link)
