"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for callers that only care that the input was rejected.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested entity does not exist or belongs to another user."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthenticationError(DomainError):
    """Credentials or token were rejected."""


class ExternalServiceError(DomainError):
    """A collaborator (AI completion, email delivery) could not serve the request."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for a missing or foreign transaction."""
    return f"Transaction {transaction_id} not found"


def user_not_found(user_id: int) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def credit_card_not_found(card_id: int) -> str:
    """Return message for a missing or foreign credit card."""
    return f"Credit card {card_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for a missing or foreign category."""
    return f"Category {category_id} not found"


def recurring_not_found(recurring_id: int) -> str:
    """Return message for a missing or foreign recurring template."""
    return f"Recurring transaction {recurring_id} not found"


def day_out_of_range(field: str, value: int) -> str:
    """Return message for a day-of-month value outside 1..31."""
    return f"{field} must be between 1 and 31 (got {value})"


def investment_not_found(investment_id: int) -> str:
    """Return message for a missing or foreign portfolio entry."""
    return f"Investment {investment_id} not found"
