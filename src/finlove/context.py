"""Application context: settings, storage and collaborators wired together.

The CLI and the web app build one ``AppContext`` at startup and ask it for
services. Nothing below this layer reads configuration on its own.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from finlove.config import Settings
from finlove.database.base import Database
from finlove.database.factories import create_database
from finlove.domain.advice import AdviceClient, AdviceService
from finlove.domain.analytics import AnalyticsService
from finlove.domain.auth import AuthService
from finlove.domain.budget import BudgetService
from finlove.domain.category import CategoryService
from finlove.domain.credit_card import CreditCardService
from finlove.domain.csv_import import CSVImportService
from finlove.domain.errors import ExternalServiceError
from finlove.domain.gamification import GamificationService
from finlove.domain.investment import InvestmentService
from finlove.domain.recurring import RolloverService
from finlove.domain.transaction import TransactionService
from finlove.domain.user import UserService
from finlove.notifications import LoggingMailer, Mailer


@dataclass
class AppContext:
    """Everything a request or command needs."""

    settings: Settings
    db: Database
    mailer: Mailer = field(default_factory=LoggingMailer)
    advice_client: Optional[AdviceClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, db: Optional[Database] = None) -> "AppContext":
        """Build a context, opening the configured database when none is given."""
        if db is None:
            db = create_database(settings.database_url)
            db.connect()
            db.initialize_schema()
        return cls(settings=settings, db=db)

    def close(self) -> None:
        self.db.disconnect()

    def auth_service(self) -> AuthService:
        return AuthService(
            self.db,
            jwt_secret=self.settings.jwt_secret,
            mailer=self.mailer,
            app_url=self.settings.app_url,
            token_ttl=timedelta(days=self.settings.token_ttl_days),
            bcrypt_rounds=self.settings.bcrypt_rounds,
            failure_delay=self.settings.login_failure_delay,
        )

    def user_service(self) -> UserService:
        return UserService(self.db)

    def transaction_service(self) -> TransactionService:
        return TransactionService(self.db)

    def credit_card_service(self) -> CreditCardService:
        return CreditCardService(self.db)

    def category_service(self) -> CategoryService:
        return CategoryService(self.db)

    def budget_service(self) -> BudgetService:
        return BudgetService(self.db)

    def gamification_service(self) -> GamificationService:
        return GamificationService(self.db)

    def investment_service(self) -> InvestmentService:
        return InvestmentService(self.db)

    def analytics_service(self) -> AnalyticsService:
        return AnalyticsService(self.db)

    def csv_import_service(self) -> CSVImportService:
        return CSVImportService(self.db)

    def rollover_service(self) -> RolloverService:
        return RolloverService(
            self.db, self.mailer, notification_workers=self.settings.notification_workers
        )

    def advice_service(self) -> AdviceService:
        """Advice service backed by the configured client (Gemini by default).

        Raises:
            ExternalServiceError: If no client is set and no API key is configured
        """
        client = self.advice_client
        if client is None:
            if not self.settings.gemini_api_key:
                raise ExternalServiceError("Advice is not configured (set FINLOVE_GEMINI_API_KEY)")
            from finlove.integrations.gemini import GeminiAdviceClient

            client = GeminiAdviceClient(
                api_key=self.settings.gemini_api_key, models=self.settings.gemini_models
            )
            self.advice_client = client
        return AdviceService(
            self.db, client, cache_ttl=timedelta(hours=self.settings.advice_cache_hours)
        )
