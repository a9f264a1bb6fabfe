# Test configuration
import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from datetime import date
from unittest.mock import patch

import pytest
from app import create_app, db
from app.models import EmailSettings
from config import TestingConfig

# Fixed run date so due/overdue arithmetic never depends on the wall clock
RUN_DATE = date(2026, 3, 16)
TRIGGER_TOKEN = 'test-trigger-token'


class TestConfig(TestingConfig):
    """Test configuration class."""
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite:///:memory:'
    REMINDERS_TRIGGER_TOKEN = TRIGGER_TOKEN
    LOG_LEVEL = 'ERROR'


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        # Ensure clean state by dropping all tables first
        db.drop_all()
        db.create_all()

        yield app

        # Clean up after test
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def runner(app):
    """Create test CLI runner."""
    return app.test_cli_runner()

@pytest.fixture
def run_date():
    return RUN_DATE

@pytest.fixture
def email_settings(app):
    """Saved, fully configured email settings (3 days before, 7 overdue reminders)."""
    settings = EmailSettings(
        smtp_host='smtp.example.com',
        smtp_port=465,
        smtp_username='reminders@example.com',
        smtp_password='smtp-secret',
        from_email='billing@example.com',
        from_name='Acme Lending',
        reminder_days_before=3,
        max_overdue_reminders=7,
    )
    db.session.add(settings)
    db.session.commit()
    return settings

@pytest.fixture(autouse=True)
def smtp_servers():
    """Never open real SMTP connections; expose the mocked server classes."""
    with patch('app.utils.email.smtplib.SMTP_SSL') as mock_ssl, \
         patch('app.utils.email.smtplib.SMTP') as mock_plain:
        yield {'ssl': mock_ssl, 'plain': mock_plain}
