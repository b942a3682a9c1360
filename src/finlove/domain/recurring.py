"""Recurring-bill rollover.

Due recurring templates are materialised as concrete, unpaid ledger entries
and their next-run pointer is moved past the lookahead window. The database
write is one unit of work; reminder emails go out afterwards and may fail
independently.
"""

from dataclasses import dataclass
from datetime import date, timedelta

import structlog

from finlove.database.base import Database
from finlove.domain.entities import PaymentMethod, RecurringTransaction, TransactionDraft
from finlove.notifications import BillNotice, Mailer, notify_all
from finlove.utils.date_parser import add_months

logger = structlog.get_logger(__name__)

AUTO_SUFFIX = " (Auto)"
DEFAULT_LOOKAHEAD_DAYS = 7
DEFAULT_MAX_ITERATIONS = 12


@dataclass(frozen=True)
class RolloverResult:
    """Outcome of one rollover pass."""

    created: int = 0
    templates_updated: int = 0
    notifications: int = 0
    notifications_failed: int = 0


def project_occurrences(
    template: RecurringTransaction, limit: date, max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> tuple[list[date], date]:
    """Compute the occurrence dates of a template up to ``limit``.

    The cursor starts at the template's next run and moves one month at a
    time, snapped to the anchor day (clamped in short months). Without an
    anchor the cursor keeps its own day.

    Returns:
        Tuple of (occurrence dates, new next-run date)
    """
    occurrences: list[date] = []
    cursor = template.next_run
    while cursor <= limit and len(occurrences) < max_iterations:
        occurrences.append(cursor)
        cursor = add_months(cursor, 1, anchor_day=template.day_of_month)
    return occurrences, cursor


class RolloverService:
    """Service that rolls recurring templates forward."""

    def __init__(self, db: Database, mailer: Mailer, notification_workers: int = 4):
        """Initialize rollover service.

        Args:
            db: Database instance
            mailer: Mailer used for bill reminders
            notification_workers: Thread pool size for reminder delivery
        """
        self.db = db
        self.mailer = mailer
        self.notification_workers = notification_workers

    def run(
        self,
        now: date,
        lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> RolloverResult:
        """Materialise every due occurrence up to ``now + lookahead_days``.

        Args:
            now: Reference date (the caller's "today")
            lookahead_days: Size of the rollover window in days
            max_iterations: Cap on occurrences per template in one pass

        Returns:
            RolloverResult with counts of created entries and notifications

        Raises:
            Exception: Any storage error; nothing is written in that case
        """
        limit = now + timedelta(days=lookahead_days)
        templates = self.db.list_due_recurring(limit)
        if not templates:
            logger.info("rollover_nothing_due", limit=limit.isoformat())
            return RolloverResult()

        drafts: list[TransactionDraft] = []
        next_runs: list[tuple[int, date]] = []
        bills: dict[int, list[BillNotice]] = {}

        for template in templates:
            occurrences, next_run = project_occurrences(template, limit, max_iterations)
            if len(occurrences) == max_iterations and next_run <= limit:
                logger.warning(
                    "rollover_iteration_cap_reached",
                    recurring_id=template.id,
                    next_run=next_run.isoformat(),
                )
            for occurrence in occurrences:
                drafts.append(
                    TransactionDraft(
                        user_id=template.user_id,
                        type=template.type,
                        amount=template.amount,
                        description=f"{template.description}{AUTO_SUFFIX}",
                        category=template.category,
                        date=occurrence,
                        payment_method=PaymentMethod.DEBIT,
                        is_paid=False,
                    )
                )
                bills.setdefault(template.user_id, []).append(
                    BillNotice(description=template.description, amount=template.amount, date=occurrence)
                )
            next_runs.append((template.id, next_run))

        with self.db.unit_of_work():
            self.db.create_transactions(drafts)
            for recurring_id, next_run in next_runs:
                self.db.update_recurring_next_run(recurring_id, next_run)

        logger.info(
            "rollover_committed",
            created=len(drafts),
            templates_updated=len(next_runs),
        )

        attempted, failed = self._send_reminders(bills)
        return RolloverResult(
            created=len(drafts),
            templates_updated=len(next_runs),
            notifications=attempted,
            notifications_failed=failed,
        )

    def _send_reminders(self, bills: dict[int, list[BillNotice]]) -> tuple[int, int]:
        """Email each template owner the bills created for them."""
        jobs = {}
        for user_id, user_bills in bills.items():
            user = self.db.get_user(user_id)
            if user is None or not user.email:
                continue
            jobs[user.email] = self._reminder_job(user.email, user.first_name, user_bills)
        return notify_all(jobs, max_workers=self.notification_workers)

    def _reminder_job(self, email: str, name: str, bills: list[BillNotice]):
        def job() -> None:
            self.mailer.send_recurring_bills(email, name, bills)

        return job
