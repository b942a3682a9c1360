"""User and partner domain service."""

from decimal import Decimal
from typing import Optional

import structlog

from finlove.database.base import Database
from finlove.domain.entities import MessageCategory, PartnerMessage, TransactionType, User
from finlove.domain.errors import ConflictError, NotFoundError, ValidationError, user_not_found
from finlove.utils.amount_parser import to_money

logger = structlog.get_logger(__name__)

MAX_MESSAGE_LENGTH = 500


class UserService:
    """Service for user profiles, partner linking and couple-wide reads."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_user(self, user_id: int) -> User:
        """Get a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def get_partner(self, user_id: int) -> Optional[User]:
        """Return the linked partner, or None."""
        user = self.get_user(user_id)
        if user.partner_id is None:
            return None
        return self.db.get_user(user.partner_id)

    def couple_ids(self, user_id: int) -> list[int]:
        """Return the user's ID plus the partner's, when linked."""
        user = self.get_user(user_id)
        if user.partner_id is None:
            return [user.id]
        return [user.id, user.partner_id]

    def update_name(self, user_id: int, name: str) -> None:
        if not name or len(name.strip()) < 2:
            raise ValidationError("Name must be at least 2 characters")
        self.get_user(user_id)
        self.db.update_user(user_id, name=name.strip())

    def update_spending_limit(self, user_id: int, limit: Decimal) -> None:
        """Set the monthly spending limit (must not be negative)."""
        try:
            limit = to_money(limit)
        except ValueError as e:
            raise ValidationError(str(e))
        if limit < 0:
            raise ValidationError("Spending limit cannot be negative")
        self.get_user(user_id)
        self.db.update_user(user_id, spending_limit=limit)

    def update_savings_goal(self, user_id: int, goal: Optional[str]) -> None:
        """Set the savings goal name for the user and the linked partner."""
        user = self.get_user(user_id)
        goal = goal.strip() if goal and goal.strip() else None
        with self.db.unit_of_work():
            self.db.update_user(user_id, savings_goal=goal)
            if user.partner_id is not None:
                self.db.update_user(user.partner_id, savings_goal=goal)

    def delete_user(self, user_id: int) -> None:
        """Delete the account and everything it owns. The partner is unlinked."""
        self.get_user(user_id)
        self.db.delete_user(user_id)
        logger.info("user_deleted", user_id=user_id)

    def link_partner(self, user_id: int, partner_email: str) -> User:
        """Link two accounts as a couple.

        Both sides are updated in one unit of work.

        Returns:
            The partner

        Raises:
            NotFoundError: If no account uses that email
            ValidationError: If the email is the user's own
            ConflictError: If either account already has a partner
        """
        user = self.get_user(user_id)
        partner = self.db.get_user_by_email((partner_email or "").strip())
        if partner is None:
            raise NotFoundError(f"No user with email {partner_email}")
        if partner.id == user.id:
            raise ValidationError("You cannot link to yourself")
        if user.partner_id is not None:
            raise ConflictError("You already have a partner linked")
        if partner.partner_id is not None:
            raise ConflictError(f"{partner.first_name} already has a partner linked")

        with self.db.unit_of_work():
            self.db.update_user(user.id, partner_id=partner.id)
            self.db.update_user(partner.id, partner_id=user.id)

        logger.info("partner_linked", user_id=user.id, partner_id=partner.id)
        return self.db.get_user(partner.id)

    def unlink_partner(self, user_id: int) -> None:
        """Remove the couple link on both sides.

        Raises:
            ValidationError: If the user has no partner
        """
        user = self.get_user(user_id)
        if user.partner_id is None:
            raise ValidationError("No partner linked")

        with self.db.unit_of_work():
            self.db.update_user(user.id, partner_id=None)
            if self.db.get_user(user.partner_id) is not None:
                self.db.update_user(user.partner_id, partner_id=None)

        logger.info("partner_unlinked", user_id=user.id, partner_id=user.partner_id)

    def get_balance(self, user_id: int) -> Decimal:
        """Balance of the couple's paid transactions: income - expense - investment."""
        user_ids = self.couple_ids(user_id)
        totals = {
            txn_type: self.db.sum_transactions(user_ids, transaction_type=txn_type, is_paid=True)
            for txn_type in TransactionType
        }
        return (
            totals[TransactionType.INCOME]
            - totals[TransactionType.EXPENSE]
            - totals[TransactionType.INVESTMENT]
        )

    def send_partner_message(
        self, user_id: int, message: str, category: MessageCategory | str = MessageCategory.LOVE
    ) -> int:
        """Send a short message to the linked partner.

        Raises:
            ValidationError: If there is no partner or the message is invalid
        """
        user = self.get_user(user_id)
        if user.partner_id is None:
            raise ValidationError("No partner linked")
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")
        try:
            category = MessageCategory(category)
        except ValueError:
            raise ValidationError(f"Invalid message category '{category}'")

        return self.db.create_partner_message(user.id, user.partner_id, category, message)

    def list_partner_messages(self, user_id: int, limit: int = 10) -> list[PartnerMessage]:
        """Last messages sent or received by the user, oldest first."""
        self.get_user(user_id)
        return list(reversed(self.db.list_partner_messages(user_id, limit=limit)))
