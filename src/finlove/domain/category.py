"""Category domain service."""

from typing import Optional

from finlove.database.base import Database
from finlove.domain.entities import Category, CategoryType
from finlove.domain.errors import NotFoundError, ValidationError, category_not_found

DEFAULT_ICON = "Tag"


class CategoryService:
    """Service for managing a user's categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        user_id: int,
        name: str,
        color: Optional[str] = None,
        icon: str = DEFAULT_ICON,
        category_type: CategoryType | str = CategoryType.EXPENSE,
    ) -> int:
        """Create a category.

        Args:
            user_id: Owner
            name: Category name
            color: Optional display color
            icon: Icon name
            category_type: INCOME or EXPENSE

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the type is unknown
        """
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        try:
            category_type = CategoryType(category_type)
        except ValueError:
            raise ValidationError(f"Invalid category type '{category_type}'")

        return self.db.create_category(
            user_id=user_id,
            name=name.strip(),
            color=color,
            icon=icon or DEFAULT_ICON,
            category_type=category_type,
        )

    def list_categories(self, user_id: int) -> list[Category]:
        """List the user's categories by name."""
        return self.db.list_categories(user_id)

    def delete_category(self, user_id: int, category_id: int) -> None:
        """Delete a category owned by the user.

        Raises:
            NotFoundError: If the category is missing or owned by someone else
        """
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))
        self.db.delete_category(category_id)
