"""Monthly budget planning.

A plan is stored per user and month as a JSON document with three lists of
items. The document shape is validated with pydantic before it is written
and again when it is read back.
"""

import uuid
from decimal import Decimal
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError as SchemaError

from finlove.database.base import Database
from finlove.domain.errors import NotFoundError, ValidationError, user_not_found
from finlove.utils.date_parser import previous_month

logger = structlog.get_logger(__name__)


def _new_item_id() -> str:
    return uuid.uuid4().hex


class BudgetItem(BaseModel):
    """One planned income or expense line."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=_new_item_id)
    name: str = Field(min_length=1)
    amount: Decimal = Field(ge=0, decimal_places=2)
    is_paid: bool = False
    day: Optional[int] = Field(default=None, ge=1, le=31)


class BudgetData(BaseModel):
    """A month's plan."""

    model_config = ConfigDict(extra="ignore")

    incomes: list[BudgetItem] = Field(default_factory=list)
    fixed_expenses: list[BudgetItem] = Field(default_factory=list)
    variable_expenses: list[BudgetItem] = Field(default_factory=list)

    def total_income(self) -> Decimal:
        return sum((item.amount for item in self.incomes), Decimal("0.00"))

    def total_expenses(self) -> Decimal:
        items = self.fixed_expenses + self.variable_expenses
        return sum((item.amount for item in items), Decimal("0.00"))

    def remaining(self) -> Decimal:
        return self.total_income() - self.total_expenses()

    def is_empty(self) -> bool:
        return not (self.incomes or self.fixed_expenses or self.variable_expenses)


def _validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12 (got {month})")
    if not 1900 <= year <= 9999:
        raise ValidationError(f"Invalid year {year}")


class BudgetService:
    """Service for reading and writing monthly plans."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_budget(
        self, user_id: int, month: int, year: int, target_user_id: Optional[int] = None
    ) -> Optional[BudgetData]:
        """Read a month's plan.

        The user may read their own plan or the linked partner's. Any other
        target returns None. A missing or unreadable stored plan comes back
        as an empty one.
        """
        _validate_period(month, year)
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        owner_id = user_id
        if target_user_id is not None and target_user_id != user_id:
            if user.partner_id != target_user_id:
                return None
            owner_id = target_user_id

        stored = self.db.get_monthly_budget(owner_id, month, year)
        if stored is None:
            return BudgetData()
        try:
            return BudgetData.model_validate(stored.data)
        except SchemaError:
            logger.warning("budget_data_invalid", user_id=owner_id, month=month, year=year)
            return BudgetData()

    def save_budget(self, user_id: int, month: int, year: int, data: BudgetData | dict) -> BudgetData:
        """Validate and store a month's plan, replacing any previous one.

        Raises:
            ValidationError: If the plan or the period is invalid
        """
        _validate_period(month, year)
        try:
            budget = data if isinstance(data, BudgetData) else BudgetData.model_validate(data)
        except SchemaError as e:
            raise ValidationError(f"Invalid budget: {e.errors()[0]['msg']}")

        self.db.upsert_monthly_budget(user_id, month, year, budget.model_dump(mode="json"))
        logger.info("budget_saved", user_id=user_id, month=month, year=year)
        return budget

    def import_last_month(self, user_id: int, month: int, year: int) -> BudgetData:
        """Copy the previous month's items into this month, all unpaid.

        Raises:
            NotFoundError: If there is no plan for the previous month
        """
        _validate_period(month, year)
        prev_month, prev_year = previous_month(month, year)
        stored = self.db.get_monthly_budget(user_id, prev_month, prev_year)
        if stored is None:
            raise NotFoundError(f"No budget found for {prev_month:02d}/{prev_year}")
        try:
            previous = BudgetData.model_validate(stored.data)
        except SchemaError:
            raise NotFoundError(f"No budget found for {prev_month:02d}/{prev_year}")

        def fresh(items: list[BudgetItem]) -> list[BudgetItem]:
            return [item.model_copy(update={"id": _new_item_id(), "is_paid": False}) for item in items]

        copied = BudgetData(
            incomes=fresh(previous.incomes),
            fixed_expenses=fresh(previous.fixed_expenses),
            variable_expenses=fresh(previous.variable_expenses),
        )
        return self.save_budget(user_id, month, year, copied)
