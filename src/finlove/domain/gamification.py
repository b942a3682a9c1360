"""Badge rules."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

import structlog

from finlove.database.base import Database
from finlove.domain.entities import Badge, TransactionType, User
from finlove.domain.errors import NotFoundError, user_not_found

logger = structlog.get_logger(__name__)

BIG_SAVER_THRESHOLD = Decimal("1000")


@dataclass(frozen=True)
class BadgeFacts:
    """What the rules look at."""

    transaction_count: int
    has_partner: bool
    total_invested: Decimal
    category_count: int


@dataclass(frozen=True)
class BadgeRule:
    code: str
    name: str
    description: str
    icon: str
    earned: Callable[[BadgeFacts], bool]


BADGE_RULES = (
    BadgeRule("FIRST_TRX", "First Step", "Recorded your first transaction", "Footprints",
              lambda f: f.transaction_count > 0),
    BadgeRule("COUPLE_GOALS", "Couple Goals", "Linked your account with your partner", "Heart",
              lambda f: f.has_partner),
    BadgeRule("SAVER_1", "Saver", "Made your first investment", "PiggyBank",
              lambda f: f.total_invested > 0),
    BadgeRule("BIG_SAVER", "Big Saver", "Invested 1,000 or more", "Trophy",
              lambda f: f.total_invested >= BIG_SAVER_THRESHOLD),
    BadgeRule("CAT_MASTER", "Organized", "Created a custom category", "Tags",
              lambda f: f.category_count > 0),
)


class GamificationService:
    """Evaluates badge rules and awards badges."""

    def __init__(self, db: Database):
        self.db = db

    def _facts(self, user: User) -> BadgeFacts:
        return BadgeFacts(
            transaction_count=self.db.count_transactions(user.id),
            has_partner=user.partner_id is not None,
            total_invested=self.db.sum_transactions(
                [user.id], transaction_type=TransactionType.INVESTMENT
            ),
            category_count=len(self.db.list_categories(user.id)),
        )

    def check_badges(self, user_id: int) -> list[Badge]:
        """Award every badge the user has earned but not yet received.

        Returns:
            The newly awarded badges
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        owned = {badge.code for badge in self.db.list_badges(user_id)}
        facts = self._facts(user)
        awarded = []
        with self.db.unit_of_work():
            for rule in BADGE_RULES:
                if rule.code in owned or not rule.earned(facts):
                    continue
                self.db.create_badge(user_id, rule.code, rule.name, rule.description, rule.icon)
                awarded.append(rule.code)

        if awarded:
            logger.info("badges_awarded", user_id=user_id, codes=awarded)
        return [badge for badge in self.db.list_badges(user_id) if badge.code in awarded]

    def award_after_write(self, user_id: int) -> list[Badge]:
        """Run ``check_badges`` after an already committed write.

        Errors are logged and an empty list is returned.
        """
        try:
            return self.check_badges(user_id)
        except Exception:
            logger.exception("badge_check_failed", user_id=user_id)
            return []

    def list_badges(self, user_id: int) -> list[Badge]:
        """The user's badges, newest first."""
        return self.db.list_badges(user_id)
