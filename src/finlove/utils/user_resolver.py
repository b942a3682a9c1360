"""Utility for resolving user emails to IDs."""

from finlove.domain.errors import NotFoundError
from finlove.domain.user import UserService


def resolve_user(user_service: UserService, user: str | int) -> int:
    """Resolve a user email or ID to a user ID.

    Args:
        user_service: UserService instance
        user: User email (str) or ID (int or string representation of int)

    Returns:
        User ID

    Raises:
        NotFoundError: If user is not found
    """
    if isinstance(user, int):
        return user_service.get_user(user).id

    try:
        user_id = int(user)
    except (ValueError, TypeError):
        pass
    else:
        return user_service.get_user(user_id).id

    found = user_service.db.get_user_by_email(user)
    if found is None:
        raise NotFoundError(f"User '{user}' not found")
    return found.id
