"""Shared pytest fixtures for finlove tests."""

import tempfile
import os
from datetime import timedelta
import pytest

from finlove.config import Settings
from finlove.context import AppContext
from finlove.database.factories import create_sqlite_database
from finlove.domain.advice import AdviceClient
from finlove.domain.auth import AuthService
from finlove.domain.category import CategoryService
from finlove.domain.credit_card import CreditCardService
from finlove.domain.transaction import TransactionService
from finlove.domain.user import UserService
from finlove.notifications import Mailer

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "secret123"


class RecordingMailer(Mailer):
    """Mailer that keeps every message in memory."""

    def __init__(self):
        self.bills = []
        self.resets = []

    def send_recurring_bills(self, email, user_name, bills):
        self.bills.append((email, user_name, list(bills)))

    def send_password_reset(self, email, reset_link):
        self.resets.append((email, reset_link))


class FailingMailer(RecordingMailer):
    """Mailer whose deliveries to some addresses always fail."""

    def __init__(self, failing_emails):
        super().__init__()
        self.failing_emails = set(failing_emails)

    def send_recurring_bills(self, email, user_name, bills):
        if email in self.failing_emails:
            raise ConnectionError(f"SMTP refused {email}")
        super().send_recurring_bills(email, user_name, bills)


class FakeAdviceClient(AdviceClient):
    """Advice client returning a canned answer and recording prompts."""

    def __init__(self, answer="### Where the money went\nMostly food."):
        self.answer = answer
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def mailer():
    """Create a mailer that records messages."""
    return RecordingMailer()


@pytest.fixture
def auth_service(temp_db, mailer):
    """Create an AuthService with cheap hashing and no login delay."""
    return AuthService(
        temp_db,
        jwt_secret=TEST_SECRET,
        mailer=mailer,
        app_url="http://finlove.test",
        token_ttl=timedelta(days=7),
        bcrypt_rounds=4,
        failure_delay=0,
    )


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def card_service(temp_db):
    """Create a CreditCardService with a temporary database."""
    return CreditCardService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def sample_user(auth_service):
    """Create a sample user for testing."""
    _, user = auth_service.register("Ana Souza", "ana@example.com", TEST_PASSWORD)
    return user


@pytest.fixture
def sample_partner(auth_service):
    """Create a second user who is not linked yet."""
    _, user = auth_service.register("Bruno Lima", "bruno@example.com", TEST_PASSWORD)
    return user


@pytest.fixture
def couple(sample_user, sample_partner, user_service):
    """Link the sample users and return (user, partner) as stored after linking."""
    user_service.link_partner(sample_user.id, sample_partner.email)
    return user_service.get_user(sample_user.id), user_service.get_user(sample_partner.id)


@pytest.fixture
def sample_card(card_service, sample_user):
    """Create a credit card that closes on the 10th."""
    card_id = card_service.create_card(sample_user.id, "Nubank", closing_day=10, due_day=17)
    return card_service.get_card(sample_user.id, card_id)


@pytest.fixture
def settings(temp_db):
    """Settings pointing at the temporary database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{temp_db.database_path}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        login_failure_delay=0,
        cron_secret="cron-secret",
    )


@pytest.fixture
def app_context(settings, temp_db, mailer):
    """Application context sharing the temporary database."""
    return AppContext(
        settings=settings,
        db=temp_db,
        mailer=mailer,
        advice_client=FakeAdviceClient(),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
