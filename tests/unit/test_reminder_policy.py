"""Unit tests for the reminder policy (classify and day helpers)."""
import pytest
from datetime import date, timedelta
from app.models import Loan
from app.reminders.policy import (
    ReminderDecision,
    classify,
    days_overdue,
    days_until_due,
    due_soon_date,
)
from app.reminders.settings import ReminderSettings

TODAY = date(2026, 3, 16)


def make_settings(reminder_days_before=3, max_overdue_reminders=7):
    return ReminderSettings(
        smtp_host='smtp.example.com',
        smtp_port=465,
        smtp_username='user',
        smtp_password='secret',
        from_email='billing@example.com',
        from_name='Acme Lending',
        reminder_days_before=reminder_days_before,
        max_overdue_reminders=max_overdue_reminders,
    )


def make_loan(days_from_today, **overrides):
    fields = dict(
        borrower_name='Jane Borrower',
        borrower_email='jane@example.com',
        currency='USD',
        amount=1000,
        due_date=TODAY + timedelta(days=days_from_today),
        payment_status='pending',
        status='active',
        reminders_enabled=True,
        reminder_count=0,
        last_reminder_sent_at=None,
    )
    fields.update(overrides)
    return Loan(**fields)


@pytest.mark.parametrize('days_from_today, reminder_count, expected', [
    # due-soon fires on exactly one day
    (3, 0, ReminderDecision.DUE_SOON),
    (4, 0, ReminderDecision.NONE),
    (2, 0, ReminderDecision.NONE),
    (1, 0, ReminderDecision.NONE),
    # due today is neither due-soon nor overdue
    (0, 0, ReminderDecision.NONE),
    # overdue escalation up to the ceiling of 7
    (-1, 0, ReminderDecision.OVERDUE),
    (-1, 1, ReminderDecision.OVERDUE),
    (-5, 5, ReminderDecision.OVERDUE),
    (-5, 6, ReminderDecision.FINAL_NOTICE),
    (-5, 7, ReminderDecision.SUPPRESSED),
    (-30, 12, ReminderDecision.SUPPRESSED),
])
def test_classify_table(days_from_today, reminder_count, expected):
    loan = make_loan(days_from_today, reminder_count=reminder_count)
    assert classify(loan, make_settings(), TODAY) == expected


class TestIneligibleLoans:
    """Loans that never get an email, whatever their due date."""

    @pytest.mark.parametrize('payment_status', ['partial', 'completed'])
    @pytest.mark.parametrize('days_from_today', [3, 0, -1, -10])
    def test_non_pending_loans_get_nothing(self, payment_status, days_from_today):
        loan = make_loan(days_from_today, payment_status=payment_status)
        assert classify(loan, make_settings(), TODAY) == ReminderDecision.NONE

    @pytest.mark.parametrize('days_from_today', [3, -1])
    def test_reminders_disabled(self, days_from_today):
        loan = make_loan(days_from_today, reminders_enabled=False)
        assert classify(loan, make_settings(), TODAY) == ReminderDecision.NONE

    @pytest.mark.parametrize('email', [None, '', '   '])
    def test_missing_email(self, email):
        loan = make_loan(-1, borrower_email=email)
        assert classify(loan, make_settings(), TODAY) == ReminderDecision.NONE

    def test_ineligibility_beats_suppression(self):
        """A paid loan over the ceiling is NONE, not SUPPRESSED."""
        loan = make_loan(-5, reminder_count=9, payment_status='completed')
        assert classify(loan, make_settings(), TODAY) == ReminderDecision.NONE


class TestSettingsDrivenRules:
    """Cadence settings change which day and which count trigger each decision."""

    def test_due_soon_follows_reminder_days_before(self):
        settings = make_settings(reminder_days_before=7)
        assert classify(make_loan(7), settings, TODAY) == ReminderDecision.DUE_SOON
        assert classify(make_loan(3), settings, TODAY) == ReminderDecision.NONE

    def test_single_reminder_ceiling_makes_first_overdue_final(self):
        settings = make_settings(max_overdue_reminders=1)
        assert classify(make_loan(-2, reminder_count=0), settings, TODAY) == ReminderDecision.FINAL_NOTICE
        assert classify(make_loan(-2, reminder_count=1), settings, TODAY) == ReminderDecision.SUPPRESSED

    def test_due_soon_ignores_reminder_count(self):
        loan = make_loan(3, reminder_count=10)
        assert classify(loan, make_settings(), TODAY) == ReminderDecision.DUE_SOON

    def test_due_soon_date(self):
        assert due_soon_date(make_settings(reminder_days_before=3), TODAY) == date(2026, 3, 19)


class TestReminderDecision:
    """Properties the dispatcher relies on."""

    def test_sendable_decisions(self):
        assert ReminderDecision.DUE_SOON.sends_email is True
        assert ReminderDecision.OVERDUE.sends_email is True
        assert ReminderDecision.FINAL_NOTICE.sends_email is True
        assert ReminderDecision.NONE.sends_email is False
        assert ReminderDecision.SUPPRESSED.sends_email is False

    def test_email_types(self):
        assert ReminderDecision.DUE_SOON.email_type == 'due_soon'
        assert ReminderDecision.OVERDUE.email_type == 'overdue'
        assert ReminderDecision.FINAL_NOTICE.email_type == 'final_notice'
        assert ReminderDecision.SUPPRESSED.email_type is None

    def test_only_overdue_emails_mark_loan_overdue(self):
        assert ReminderDecision.OVERDUE.marks_overdue is True
        assert ReminderDecision.FINAL_NOTICE.marks_overdue is True
        assert ReminderDecision.DUE_SOON.marks_overdue is False


class TestDayHelpers:
    """Test day arithmetic used in email content."""

    def test_days_until_due(self):
        assert days_until_due(make_loan(5), TODAY) == 5
        assert days_until_due(make_loan(0), TODAY) == 0
        assert days_until_due(make_loan(-3), TODAY) == -3

    def test_days_overdue(self):
        assert days_overdue(make_loan(-5), TODAY) == 5
        assert days_overdue(make_loan(-1), TODAY) == 1

    def test_days_overdue_returns_zero_when_not_overdue(self):
        assert days_overdue(make_loan(0), TODAY) == 0
        assert days_overdue(make_loan(4), TODAY) == 0
