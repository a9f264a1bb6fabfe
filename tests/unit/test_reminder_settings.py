"""Unit tests for loading and saving reminder settings."""
import pytest
from app import db
from app.models import EmailSettings
from app.reminders.settings import (
    ReminderSettings,
    SettingsError,
    load_reminder_settings,
    save_reminder_settings,
)
from tests.factories import EmailSettingsFactory


class TestLoadReminderSettings:
    """Test load_reminder_settings against the email_settings table."""

    def test_no_row_means_not_configured(self, app):
        assert load_reminder_settings() is None

    def test_loads_saved_row(self, app):
        EmailSettingsFactory(from_name='Acme Lending', reminder_days_before=5, max_overdue_reminders=4)

        settings = load_reminder_settings()

        assert isinstance(settings, ReminderSettings)
        assert settings.is_configured is True
        assert settings.from_name == 'Acme Lending'
        assert settings.reminder_days_before == 5
        assert settings.max_overdue_reminders == 4

    def test_missing_password_is_not_configured(self, app):
        EmailSettingsFactory(smtp_password='')
        assert load_reminder_settings().is_configured is False

    def test_missing_host_is_not_configured(self, app):
        EmailSettingsFactory(smtp_host='  ')
        assert load_reminder_settings().is_configured is False

    def test_reads_fresh_values_each_time(self, app):
        row = EmailSettingsFactory(max_overdue_reminders=7)
        assert load_reminder_settings().max_overdue_reminders == 7

        row.max_overdue_reminders = 3
        db.session.commit()

        assert load_reminder_settings().max_overdue_reminders == 3

    @pytest.mark.parametrize('field, value', [
        ('reminder_days_before', 0),
        ('max_overdue_reminders', 0),
        ('max_overdue_reminders', -2),
        ('smtp_port', 70000),
    ])
    def test_out_of_range_values_raise(self, app, field, value):
        EmailSettingsFactory(**{field: value})
        with pytest.raises(SettingsError, match=field):
            load_reminder_settings()


class TestSaveReminderSettings:
    """Test the settings upsert used by `flask reminders configure`."""

    def test_creates_row_with_defaults(self, app):
        save_reminder_settings(smtp_host='smtp.example.com', smtp_username='u', smtp_password='p')

        row = db.session.execute(db.select(EmailSettings)).scalar_one()
        assert row.smtp_host == 'smtp.example.com'
        assert row.smtp_port == 465
        assert row.reminder_days_before == 3
        assert row.max_overdue_reminders == 7

    def test_updates_existing_row_and_skips_none(self, app):
        EmailSettingsFactory(from_name='Old Name', max_overdue_reminders=7)

        save_reminder_settings(from_name='New Name', max_overdue_reminders=None)

        rows = db.session.execute(db.select(EmailSettings)).scalars().all()
        assert len(rows) == 1
        assert rows[0].from_name == 'New Name'
        assert rows[0].max_overdue_reminders == 7

    def test_rejects_invalid_values_without_saving(self, app):
        EmailSettingsFactory(reminder_days_before=3)

        with pytest.raises(SettingsError):
            save_reminder_settings(reminder_days_before=0)

        assert load_reminder_settings().reminder_days_before == 3

    def test_rejects_unknown_setting(self, app):
        with pytest.raises(SettingsError, match='Unknown setting'):
            save_reminder_settings(smtp_timeout=10)
