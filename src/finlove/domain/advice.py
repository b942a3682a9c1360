"""Financial advice built from the couple's recent activity.

Prompts are assembled here; the text completion itself goes through an
``AdviceClient`` so tests and offline use can plug in their own.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, UTC
from typing import Optional

import structlog

from finlove.database.base import Database
from finlove.domain.budget import BudgetItem, BudgetService
from finlove.domain.entities import AiChatMessage, TransactionType
from finlove.domain.errors import NotFoundError, user_not_found
from finlove.utils.date_parser import as_utc

logger = structlog.get_logger(__name__)

GENERAL_CONTEXT = "GENERAL"
HISTORY_LIMIT = 50
RECENT_DAYS = 30
RECENT_TRANSACTIONS = 15

NO_DATA_MESSAGE = (
    "You don't have enough transactions in the last 30 days for a detailed "
    "analysis yet. Start by recording your spending!"
)

TYPE_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
    TransactionType.INVESTMENT: "Investment",
}

TONE_INSTRUCTIONS = {
    "STRICT": "Be a strict financial auditor. Point out mistakes and demand efficiency.",
    "COACH": "Be a motivational coach. Use emojis, celebrate wins and inspire.",
    "POETIC": "Be poetic and philosophical about money and time.",
    "FRIENDLY": "Be a friendly advisor with a light, empathetic tone.",
}


def planning_context(month: int, year: int) -> str:
    """Chat context name for a month's planning conversation."""
    return f"PLANNING_{month}_{year}"


class AdviceClient(ABC):
    """Text completion collaborator."""

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Return the completion for a prompt.

        Raises:
            ExternalServiceError: If no completion could be produced
        """
        pass


class AdviceService:
    """Builds advice prompts, caches the answers and keeps chat history."""

    def __init__(self, db: Database, client: AdviceClient, cache_ttl: timedelta = timedelta(hours=24)):
        """Initialize advice service.

        Args:
            db: Database instance
            client: Text completion client
            cache_ttl: How long generated advice is reused
        """
        self.db = db
        self.client = client
        self.cache_ttl = cache_ttl
        self.budgets = BudgetService(db)

    def generate_financial_advice(
        self, user_id: int, tone: str = "FRIENDLY", now: Optional[datetime] = None
    ) -> str:
        """Advice on the couple's last 30 days of transactions.

        The previous answer is returned while it is younger than the cache
        window. Without recent transactions a fixed message is returned and
        the client is not called.
        """
        now = now or datetime.now(UTC)
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        if user.last_advice and user.last_advice_at is not None:
            if now - as_utc(user.last_advice_at) < self.cache_ttl:
                logger.info("advice_cache_hit", user_id=user_id)
                return user.last_advice

        user_ids = [user.id] + ([user.partner_id] if user.partner_id else [])
        recent = self.db.list_transactions(
            user_ids,
            start_date=(now - timedelta(days=RECENT_DAYS)).date(),
            limit=RECENT_TRANSACTIONS,
        )
        if not recent:
            return NO_DATA_MESSAGE

        lines = [
            f"- {txn.description} ({txn.category}): {txn.amount:.2f} [{TYPE_LABELS[txn.type]}]"
            for txn in recent
        ]

        personality = TONE_INSTRUCTIONS.get((tone or "").upper(), TONE_INSTRUCTIONS["FRIENDLY"])
        prompt = (
            f"{personality}\n"
            f"CONTEXT: User {user.name}. Spending limit: {user.spending_limit:.2f}.\n"
            f"RECENT DATA:\n" + "\n".join(lines) + "\n\n"
            "REQUIREMENTS:\n"
            "- Markdown is required.\n"
            "- Structure: ### Where the money went | ### Watch out | ### Golden tip\n"
            "- At most 250 words.\n"
        )

        advice = self.client.complete(prompt)

        with self.db.unit_of_work():
            self.db.add_chat_message(user_id, "model", advice, GENERAL_CONTEXT)
            self.db.update_user(user_id, last_advice=advice, last_advice_at=now)

        logger.info("advice_generated", user_id=user_id, tone=tone)
        return advice

    def generate_planning_advice(self, user_id: int, month: int, year: int) -> str:
        """Advice on a month's budget plan.

        Raises:
            NotFoundError: If the user has no plan for that month
        """
        budget = self.budgets.get_budget(user_id, month, year)
        if budget is None or budget.is_empty():
            raise NotFoundError(f"No budget found for {month:02d}/{year}")

        prompt = (
            f"CONTEXT: Financial plan review for {month:02d}/{year}.\n"
            "DATA:\n"
            f"- Incomes: {_describe(budget.incomes)}\n"
            f"- Fixed expenses: {_describe(budget.fixed_expenses)}\n"
            f"- Variable expenses: {_describe(budget.variable_expenses)}\n\n"
            "TASK:\n"
            "1. Check the cash flow (do incomes cover expenses?).\n"
            "2. Point out critical due dates.\n"
            "3. Give one practical suggestion.\n"
            "Answer in Markdown.\n"
        )

        advice = self.client.complete(prompt)
        self.db.add_chat_message(user_id, "model", advice, planning_context(month, year))
        return advice

    def get_history(self, user_id: int, context: str = GENERAL_CONTEXT) -> list[AiChatMessage]:
        """Chat history for a context, oldest first."""
        return self.db.list_chat_messages(user_id, context, limit=HISTORY_LIMIT)

    def clear_history(self, user_id: int, context: str = GENERAL_CONTEXT) -> int:
        """Delete chat history for a context. Returns count deleted."""
        return self.db.clear_chat_messages(user_id, context)


def _describe(items: list[BudgetItem]) -> str:
    if not items:
        return "none"
    parts = []
    for item in items:
        prefix = f"[Day {item.day}] " if item.day else ""
        parts.append(f"{prefix}{item.name}: {item.amount:.2f}")
    return "; ".join(parts)
