"""Unit tests for reminder email content."""
import pytest
from datetime import date, timedelta
from decimal import Decimal
from app.models import Loan
from app.reminders.policy import ReminderDecision
from app.reminders.settings import ReminderSettings
from app.reminders.templates import render_reminder

TODAY = date(2026, 3, 16)

SETTINGS = ReminderSettings(
    smtp_host='smtp.example.com',
    smtp_port=465,
    smtp_username='user',
    smtp_password='secret',
    from_email='billing@example.com',
    from_name='Acme Lending',
    reminder_days_before=3,
    max_overdue_reminders=7,
)


def make_loan(days_from_today, **overrides):
    fields = dict(
        borrower_name='Jane Borrower',
        borrower_email='jane@example.com',
        currency='RWF',
        amount=Decimal('250000'),
        due_date=TODAY + timedelta(days=days_from_today),
    )
    fields.update(overrides)
    return Loan(**fields)


class TestDueSoonEmail:
    """Test the due-soon reminder content."""

    def test_subject_and_details(self):
        email = render_reminder(ReminderDecision.DUE_SOON, make_loan(3), SETTINGS, TODAY)

        assert email.subject == 'Payment Reminder – Due Soon'
        assert 'Dear Jane Borrower' in email.text
        assert 'due in 3 days' in email.text
        assert 'RWF 250,000.00' in email.text
        assert 'Thursday, March 19, 2026' in email.text
        assert 'Acme Lending' in email.html

    def test_uses_configured_lead_time(self):
        email = render_reminder(ReminderDecision.DUE_SOON, make_loan(1), SETTINGS, TODAY)
        assert 'due in 1 day.' in email.text


class TestOverdueEmails:
    """Test overdue and final notice escalation."""

    def test_overdue_content(self):
        email = render_reminder(ReminderDecision.OVERDUE, make_loan(-5), SETTINGS, TODAY)

        assert email.subject == 'Overdue Payment Reminder'
        assert '5 days overdue' in email.text
        assert 'FINAL NOTICE' not in email.text

    def test_final_notice_is_escalated(self):
        email = render_reminder(ReminderDecision.FINAL_NOTICE, make_loan(-5), SETTINGS, TODAY)

        assert email.subject == 'Final Payment Notice'
        assert 'FINAL NOTICE' in email.text
        assert 'Immediate Action Required' in email.html

    def test_single_day_is_not_pluralized(self):
        email = render_reminder(ReminderDecision.OVERDUE, make_loan(-1), SETTINGS, TODAY)
        assert 'your payment is 1 day overdue' in email.text

    def test_borrower_name_is_escaped_in_html(self):
        loan = make_loan(-2, borrower_name='<script>x</script>')
        email = render_reminder(ReminderDecision.OVERDUE, loan, SETTINGS, TODAY)
        assert '<script>' not in email.html
        assert '&lt;script&gt;' in email.html


@pytest.mark.parametrize('decision', [ReminderDecision.NONE, ReminderDecision.SUPPRESSED])
def test_non_sendable_decisions_have_no_email(decision):
    with pytest.raises(ValueError):
        render_reminder(decision, make_loan(-2), SETTINGS, TODAY)
