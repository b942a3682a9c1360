"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enum-valued columns are stored as
plain strings and come back as domain enums here.
"""

from finlove.domain import entities as domain
from finlove.database.models import (
    User as ORMUser,
    Transaction as ORMTransaction,
    RecurringTransaction as ORMRecurringTransaction,
    CreditCard as ORMCreditCard,
    Investment as ORMInvestment,
    Category as ORMCategory,
    Badge as ORMBadge,
    MonthlyBudget as ORMMonthlyBudget,
    AiChat as ORMAiChat,
    PartnerMessage as ORMPartnerMessage,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        email=orm_user.email,
        password_hash=orm_user.password_hash,
        spending_limit=orm_user.spending_limit,
        savings_goal=orm_user.savings_goal,
        partner_id=orm_user.partner_id,
        last_advice=orm_user.last_advice,
        last_advice_at=orm_user.last_advice_at,
        reset_token=orm_user.reset_token,
        reset_token_expiry=orm_user.reset_token_expiry,
        created_at=orm_user.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        type=domain.TransactionType(orm_transaction.type),
        amount=orm_transaction.amount,
        description=orm_transaction.description,
        category=orm_transaction.category,
        date=orm_transaction.date,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        is_paid=orm_transaction.is_paid,
        installment_id=orm_transaction.installment_id,
        installments=orm_transaction.installments,
        current_installment=orm_transaction.current_installment,
        credit_card_id=orm_transaction.credit_card_id,
        created_at=orm_transaction.created_at,
    )


def draft_to_orm(draft: domain.TransactionDraft) -> ORMTransaction:
    """Build an unsaved SQLAlchemy Transaction from a domain draft."""
    return ORMTransaction(
        user_id=draft.user_id,
        type=draft.type.value,
        amount=draft.amount,
        description=draft.description,
        category=draft.category,
        date=draft.date,
        payment_method=draft.payment_method.value,
        is_paid=draft.is_paid,
        installment_id=draft.installment_id,
        installments=draft.installments,
        current_installment=draft.current_installment,
        credit_card_id=draft.credit_card_id,
    )


def recurring_to_domain(orm_recurring: ORMRecurringTransaction) -> domain.RecurringTransaction:
    """Convert SQLAlchemy RecurringTransaction model to domain entity."""
    return domain.RecurringTransaction(
        id=orm_recurring.id,
        user_id=orm_recurring.user_id,
        type=domain.TransactionType(orm_recurring.type),
        amount=orm_recurring.amount,
        description=orm_recurring.description,
        category=orm_recurring.category,
        frequency=orm_recurring.frequency,
        day_of_month=orm_recurring.day_of_month,
        next_run=orm_recurring.next_run,
        active=orm_recurring.active,
        created_at=orm_recurring.created_at,
    )


def credit_card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        user_id=orm_card.user_id,
        name=orm_card.name,
        closing_day=orm_card.closing_day,
        due_day=orm_card.due_day,
        limit=orm_card.limit,
        created_at=orm_card.created_at,
    )


def investment_to_domain(orm_investment: ORMInvestment) -> domain.Investment:
    """Convert SQLAlchemy Investment model to domain entity."""
    return domain.Investment(
        id=orm_investment.id,
        user_id=orm_investment.user_id,
        name=orm_investment.name,
        category=orm_investment.category,
        invested_amount=orm_investment.invested_amount,
        current_amount=orm_investment.current_amount,
        origin_transaction_id=orm_investment.origin_transaction_id,
        deposit_transaction_id=orm_investment.deposit_transaction_id,
        created_at=orm_investment.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        color=orm_category.color,
        icon=orm_category.icon,
        category_type=domain.CategoryType(orm_category.category_type),
        created_at=orm_category.created_at,
    )


def badge_to_domain(orm_badge: ORMBadge) -> domain.Badge:
    """Convert SQLAlchemy Badge model to domain Badge entity."""
    return domain.Badge(
        id=orm_badge.id,
        user_id=orm_badge.user_id,
        code=orm_badge.code,
        name=orm_badge.name,
        description=orm_badge.description,
        icon=orm_badge.icon,
        earned_at=orm_badge.earned_at,
    )


def budget_to_domain(orm_budget: ORMMonthlyBudget) -> domain.MonthlyBudget:
    """Convert SQLAlchemy MonthlyBudget model to domain entity."""
    return domain.MonthlyBudget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        month=orm_budget.month,
        year=orm_budget.year,
        data=orm_budget.data or {},
    )


def chat_to_domain(orm_chat: ORMAiChat) -> domain.AiChatMessage:
    """Convert SQLAlchemy AiChat model to domain entity."""
    return domain.AiChatMessage(
        id=orm_chat.id,
        user_id=orm_chat.user_id,
        role=orm_chat.role,
        message=orm_chat.message,
        context=orm_chat.context,
        created_at=orm_chat.created_at,
    )


def partner_message_to_domain(orm_message: ORMPartnerMessage) -> domain.PartnerMessage:
    """Convert SQLAlchemy PartnerMessage model to domain entity."""
    return domain.PartnerMessage(
        id=orm_message.id,
        sender_id=orm_message.sender_id,
        receiver_id=orm_message.receiver_id,
        category=domain.MessageCategory(orm_message.category),
        message=orm_message.message,
        created_at=orm_message.created_at,
    )
