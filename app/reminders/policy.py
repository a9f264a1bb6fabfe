"""Reminder policy: which email, if any, a loan should get on a given day.

Every function here is pure. Callers pass the loan, the settings loaded for
the current run and the run date; nothing reads the clock or the database.
"""
from datetime import date, timedelta
from enum import Enum

from app.models import (
    EMAIL_DUE_SOON,
    EMAIL_FINAL_NOTICE,
    EMAIL_OVERDUE,
    PAYMENT_PENDING,
)


class ReminderDecision(Enum):
    NONE = 'none'
    DUE_SOON = 'due_soon'
    OVERDUE = 'overdue'
    FINAL_NOTICE = 'final_notice'
    SUPPRESSED = 'suppressed'

    @property
    def sends_email(self) -> bool:
        return self in _EMAIL_TYPES

    @property
    def email_type(self) -> str | None:
        """Audit log email_type for sendable decisions, None otherwise."""
        return _EMAIL_TYPES.get(self)

    @property
    def marks_overdue(self) -> bool:
        """Whether a successful send of this decision flips the loan status to overdue."""
        return self in (ReminderDecision.OVERDUE, ReminderDecision.FINAL_NOTICE)


_EMAIL_TYPES = {
    ReminderDecision.DUE_SOON: EMAIL_DUE_SOON,
    ReminderDecision.OVERDUE: EMAIL_OVERDUE,
    ReminderDecision.FINAL_NOTICE: EMAIL_FINAL_NOTICE,
}


def is_eligible(loan) -> bool:
    """Loan is still owed, has reminders switched on and has somewhere to send them."""
    if loan.payment_status != PAYMENT_PENDING:
        return False
    if not loan.reminders_enabled:
        return False
    return bool(loan.borrower_email and loan.borrower_email.strip())


def due_soon_date(settings, today: date) -> date:
    """The single due date that gets a due-soon reminder on `today`."""
    return today + timedelta(days=settings.reminder_days_before)


def classify(loan, settings, today: date) -> ReminderDecision:
    """Decide which reminder `loan` should receive on `today`.

    Rules, first match wins:
      1. not pending, reminders disabled or no email  -> NONE
      2. due exactly reminder_days_before days ahead  -> DUE_SOON
      3. past due:
           reminder_count >= max_overdue_reminders    -> SUPPRESSED
           reminder_count == max_overdue_reminders-1  -> FINAL_NOTICE
           otherwise                                  -> OVERDUE
      4. anything else                                -> NONE

    Note that reminder_count also counts the due-soon email, matching how
    the counter has always been kept on the loan row.
    """
    if not is_eligible(loan):
        return ReminderDecision.NONE

    if loan.due_date == due_soon_date(settings, today):
        return ReminderDecision.DUE_SOON

    if loan.due_date < today:
        count = loan.reminder_count or 0
        ceiling = settings.max_overdue_reminders
        if count >= ceiling:
            return ReminderDecision.SUPPRESSED
        if count == ceiling - 1:
            return ReminderDecision.FINAL_NOTICE
        return ReminderDecision.OVERDUE

    return ReminderDecision.NONE


def days_until_due(loan, today: date) -> int:
    """Days until the due date (negative if overdue)"""
    return (loan.due_date - today).days


def days_overdue(loan, today: date) -> int:
    """Days past the due date (0 if not overdue)"""
    days = days_until_due(loan, today)
    return -days if days < 0 else 0
