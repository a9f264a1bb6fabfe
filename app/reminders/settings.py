"""Reminder settings, read fresh from the email_settings table for every run."""
from dataclasses import dataclass

from app import db
from app.models import EmailSettings


class SettingsError(Exception):
    """The stored reminder settings cannot be used."""


@dataclass(frozen=True)
class ReminderSettings:
    smtp_host: str | None
    smtp_port: int
    smtp_username: str | None
    smtp_password: str | None
    from_email: str | None
    from_name: str
    reminder_days_before: int
    max_overdue_reminders: int

    @property
    def is_configured(self) -> bool:
        """SMTP host and credentials are all present."""
        return bool(self.smtp_host and self.smtp_username and self.smtp_password)

    @property
    def sender_address(self) -> str:
        return self.from_email or self.smtp_username or ''

    @classmethod
    def from_model(cls, row: EmailSettings) -> 'ReminderSettings':
        settings = cls(
            smtp_host=(row.smtp_host or '').strip() or None,
            smtp_port=row.smtp_port,
            smtp_username=row.smtp_username or None,
            smtp_password=row.smtp_password or None,
            from_email=(row.from_email or '').strip() or None,
            from_name=row.from_name or '',
            reminder_days_before=row.reminder_days_before,
            max_overdue_reminders=row.max_overdue_reminders,
        )
        settings.validate()
        return settings

    def validate(self):
        problems = []
        if not isinstance(self.reminder_days_before, int) or self.reminder_days_before < 1:
            problems.append(f'reminder_days_before must be >= 1 (got {self.reminder_days_before!r})')
        if not isinstance(self.max_overdue_reminders, int) or self.max_overdue_reminders < 1:
            problems.append(f'max_overdue_reminders must be >= 1 (got {self.max_overdue_reminders!r})')
        if not isinstance(self.smtp_port, int) or not 0 < self.smtp_port < 65536:
            problems.append(f'smtp_port must be between 1 and 65535 (got {self.smtp_port!r})')
        if problems:
            raise SettingsError('; '.join(problems))


def load_reminder_settings():
    """Return the current ReminderSettings, or None when no settings row exists.

    Raises SettingsError for out-of-range values. Database errors propagate.
    """
    row = db.session.execute(
        db.select(EmailSettings).order_by(EmailSettings.id).limit(1)
    ).scalar_one_or_none()
    if row is None:
        return None
    return ReminderSettings.from_model(row)


def save_reminder_settings(**fields):
    """Create or update the single settings row with the given non-None fields."""
    unknown = [name for name in fields if name not in EmailSettings.__table__.columns]
    if unknown:
        raise SettingsError(f'Unknown setting: {", ".join(unknown)}')

    row = db.session.execute(
        db.select(EmailSettings).order_by(EmailSettings.id).limit(1)
    ).scalar_one_or_none()
    if row is None:
        row = EmailSettings()
        db.session.add(row)

    for name, value in fields.items():
        if value is not None:
            setattr(row, name, value)

    # Flush so column defaults are populated before validating
    db.session.flush()
    try:
        ReminderSettings.from_model(row)
    except SettingsError:
        db.session.rollback()
        raise
    db.session.commit()
    return row
