"""Same-day dedupe for reminder emails.

A loan gets at most one reminder per calendar day, whatever the email type
and however many times the job runs. `already_sent_today` is the cheap read
used to skip loans; `claim` is the conditional update that actually decides
which run may send, so overlapping runs cannot both pass.
"""
from datetime import date, datetime

from sqlalchemy import or_, update

from app import db
from app.models import LOAN_OVERDUE, Loan
from app.utils.dates import as_utc_date, day_bounds


def already_sent_today(loan, today: date) -> bool:
    """True if the loan's last successful reminder falls on `today`."""
    if loan.last_reminder_sent_at is None:
        return False
    return as_utc_date(loan.last_reminder_sent_at) == today


def _not_sent_on(day: date):
    start, end = day_bounds(day)
    return or_(
        Loan.last_reminder_sent_at.is_(None),
        Loan.last_reminder_sent_at < start,
        Loan.last_reminder_sent_at >= end,
    )


def claim(loan_id, today: date, stamp: datetime) -> bool:
    """Mark a loan as reminded today, unless some other run already did.

    Returns True when this caller owns today's reminder for the loan.
    Commits immediately so concurrent runs see the claim.
    """
    result = db.session.execute(
        update(Loan)
        .where(Loan.id == loan_id, _not_sent_on(today))
        .values(last_reminder_sent_at=stamp)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def release(loan_id, previous: datetime | None, stamp: datetime) -> bool:
    """Undo a claim after a failed send, restoring the previous timestamp.

    Only touches the row while it still carries our claim stamp.
    """
    result = db.session.execute(
        update(Loan)
        .where(Loan.id == loan_id, Loan.last_reminder_sent_at == stamp)
        .values(last_reminder_sent_at=previous)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def update_loan_reminder_state(loan_id, stamp: datetime, mark_overdue: bool) -> bool:
    """Record a successful send: bump reminder_count and, for overdue emails, the status.

    Scoped to the row still carrying our claim stamp, so the increment
    happens once per claimed send.
    """
    values = {
        'reminder_count': Loan.reminder_count + 1,
        'last_reminder_sent_at': stamp,
    }
    if mark_overdue:
        values['status'] = LOAN_OVERDUE
    result = db.session.execute(
        update(Loan)
        .where(Loan.id == loan_id, Loan.last_reminder_sent_at == stamp)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1
