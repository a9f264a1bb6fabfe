import os
from dotenv import load_dotenv
import logging

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv()


SMTP_SECURITY_MODES = ('ssl', 'starttls', 'none')


def parse_email_allowlist(raw_string):
    """Parse EMAIL_ALLOWLIST from comma-separated string.

    Args:
        raw_string: Raw string from environment variable (may contain leading/trailing whitespace)

    Returns:
        List of lowercase email addresses if raw_string is non-empty after stripping, otherwise None.
        Empty entries (from extra commas or whitespace-only tokens) are filtered out.
        Emails are normalized to lowercase for case-insensitive comparison.
    """
    stripped = raw_string.strip() if raw_string else ''
    if not stripped:
        return None
    return [email.strip().lower() for email in stripped.split(',') if email.strip()]


def parse_smtp_security(raw_string):
    """Parse SMTP_SECURITY into one of 'ssl', 'starttls' or 'none'.

    Defaults to 'ssl' (implicit TLS) when unset.

    Examples:
        >>> parse_smtp_security('')
        'ssl'
        >>> parse_smtp_security(' STARTTLS ')
        'starttls'
    """
    value = raw_string.strip().lower() if raw_string else ''
    if not value:
        return 'ssl'
    if value not in SMTP_SECURITY_MODES:
        raise ValueError(
            f"Invalid SMTP_SECURITY: '{raw_string}'. "
            f"Must be one of: {', '.join(SMTP_SECURITY_MODES)}."
        )
    return value


def parse_positive_int(raw_string, default):
    """Parse a positive integer setting, falling back to default when unset."""
    if raw_string is None or not str(raw_string).strip():
        return default
    value = int(raw_string)
    if value < 1:
        raise ValueError(f"Expected a positive integer, got {raw_string!r}")
    return value


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        if os.environ.get('FLASK_ENV') == 'development':
            SECRET_KEY = 'dev-key-change-this'
        else:
            raise ValueError(
                "SECRET_KEY environment variable must be set for production. "
                "Please set it in your deployment platform's environment variables. "
                "You can generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or f"sqlite:///{os.path.join(basedir, 'reminders.db')}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # SMTP transport
    # Credentials and sender identity live in the email_settings table so the
    # dashboard can edit them; only connection behaviour is configured here.
    # SMTP_SECURITY: "ssl" (implicit TLS, port 465), "starttls" (port 587) or "none"
    SMTP_SECURITY = parse_smtp_security(os.environ.get('SMTP_SECURITY', ''))

    # Seconds before a single email send attempt is abandoned and recorded as failed
    REMINDER_SEND_TIMEOUT = parse_positive_int(os.environ.get('REMINDER_SEND_TIMEOUT'), 30)

    # Upper bound on concurrent SMTP sends within one reminder run
    REMINDER_MAX_WORKERS = parse_positive_int(os.environ.get('REMINDER_MAX_WORKERS'), 4)

    # Shared secret for POST /reminders/run. The endpoint is disabled when unset.
    REMINDERS_TRIGGER_TOKEN = os.environ.get('REMINDERS_TRIGGER_TOKEN') or None

    # Email allowlist (for staging/testing - restricts who can receive emails)
    # Comma-separated list of email addresses. If set, only these addresses receive emails.
    # Leave empty or unset in production to send to all borrowers.
    _email_allowlist_raw = os.environ.get('EMAIL_ALLOWLIST', '').strip()
    EMAIL_ALLOWLIST = parse_email_allowlist(_email_allowlist_raw)

    # Environment-based configuration
    DEBUG = os.environ.get('FLASK_ENV') == 'development'
    LOG_LEVEL = logging.DEBUG if DEBUG else logging.INFO
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

class TestingConfig(Config):
    """Configuration for testing environment"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'test-secret-key'
    EMAIL_ALLOWLIST = None
    SMTP_SECURITY = 'ssl'
    REMINDER_SEND_TIMEOUT = 5
    REMINDER_MAX_WORKERS = 2
    REMINDERS_TRIGGER_TOKEN = 'test-trigger-token'
    LOG_LEVEL = logging.ERROR

class StagingConfig(Config):
    """Configuration for staging environment"""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    LOG_LEVEL = logging.INFO


class ProductionConfig(Config):
    """Configuration for production environment"""
    DEBUG = False
    LOG_LEVEL = logging.WARNING

    # Production should always use specific environment variables
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    def validate(self):
        """Validate required environment variables when the app is created."""
        if not os.environ.get('DATABASE_URL'):
            raise ValueError("DATABASE_URL must be set for production")


# Configuration mapping
config = {
    'development': Config,
    'testing': TestingConfig,
    'staging': StagingConfig,
    'production': ProductionConfig,
    'default': Config
}
