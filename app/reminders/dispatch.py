"""Payment reminder run: fetch candidates, send, audit, update loans.

`run_once` is the only entry point. It is called from the
`flask reminders run` command (daily cron) and from POST /reminders/run.

Each run:
  1. loads settings (returns early when SMTP is not configured);
  2. fetches the due-soon and overdue candidate sets, both before sending;
  3. pushes every candidate through guard -> classify -> claim -> send ->
     audit -> state update, sends running on a small thread pool;
  4. returns a RunSummary.

Database work stays on the calling thread; worker threads only talk SMTP.
A failure for one loan is logged and recorded, and the run moves on.
"""
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import date, datetime

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import PAYMENT_PENDING, SEND_FAILED, SEND_SENT, Loan
from app.reminders import audit, guard
from app.reminders.policy import classify, due_soon_date
from app.reminders.settings import load_reminder_settings
from app.reminders.templates import render_reminder
from app.utils import dates
from app.utils import email as email_utils

SKIPPED = 'skipped'

# Skip reasons
ALREADY_SENT_TODAY = 'already_sent_today'
CLAIMED_ELSEWHERE = 'claimed_elsewhere'
PIPELINE_ERROR = 'error'


@dataclass
class LoanResult:
    loan_id: str
    status: str  # sent, failed, skipped
    decision: str | None = None
    email_type: str | None = None
    recipient: str | None = None
    reason: str | None = None
    error: str | None = None
    state_updated: bool | None = None


@dataclass
class RunSummary:
    run_date: date
    started_at: datetime
    configured: bool = True
    attempted: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    elapsed_seconds: float = 0.0
    results: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def add(self, result):
        self.results.append(result)
        if result.status == SEND_SENT:
            self.attempted += 1
            self.sent += 1
        elif result.status == SEND_FAILED:
            self.attempted += 1
            self.failed += 1
        else:
            self.skipped += 1

    def error(self, message):
        current_app.logger.error(message)
        self.errors.append(message)

    def to_dict(self):
        data = asdict(self)
        data['run_date'] = self.run_date.isoformat()
        data['started_at'] = self.started_at.isoformat()
        return data


@dataclass
class _PendingSend:
    """A claimed loan whose email is in flight."""
    loan_id: object
    decision: object
    recipient: str
    subject: str
    previous_sent_at: datetime | None
    future: object = None


def _candidate_filters():
    return (
        Loan.payment_status == PAYMENT_PENDING,
        Loan.reminders_enabled.is_(True),
        Loan.borrower_email.isnot(None),
    )


def query_due_soon_loans(settings, today):
    """Pending loans due exactly reminder_days_before days from today."""
    return db.session.execute(
        db.select(Loan)
        .where(*_candidate_filters(), Loan.due_date == due_soon_date(settings, today))
        .order_by(Loan.created_at, Loan.id)
    ).scalars().all()


def query_overdue_loans(settings, today):
    """Pending loans past due that have not exhausted their reminders."""
    return db.session.execute(
        db.select(Loan)
        .where(
            *_candidate_filters(),
            Loan.due_date < today,
            Loan.reminder_count < settings.max_overdue_reminders,
        )
        .order_by(Loan.due_date, Loan.id)
    ).scalars().all()


def _fetch_candidates(settings, today, summary):
    candidates = []
    for label, query in (('due soon', query_due_soon_loans), ('overdue', query_overdue_loans)):
        try:
            candidates.extend(query(settings, today))
        except SQLAlchemyError as e:
            db.session.rollback()
            summary.error(f"Error fetching {label} loans: {str(e)}")
    return candidates


def _send_in_context(app, settings, recipient, rendered):
    with app.app_context():
        return email_utils.send_email(
            settings, recipient, rendered.subject, rendered.text, rendered.html
        )


def _loan_key(loan):
    # Read from the identity map; the row itself may be gone by now.
    identity = inspect(loan).identity
    return identity[0] if identity else None


def _prepare(loan, settings, today, stamp, summary, submit):
    """Guard, classify and claim one loan; submit its email if it should go out.

    Returns a LoanResult for loans that are skipped, otherwise a _PendingSend.
    """
    loan_id = _loan_key(loan)
    try:
        if guard.already_sent_today(loan, today):
            current_app.logger.info(f"Already sent reminder today for loan {loan_id}")
            return LoanResult(str(loan_id), SKIPPED, reason=ALREADY_SENT_TODAY)

        decision = classify(loan, settings, today)
        if not decision.sends_email:
            return LoanResult(str(loan_id), SKIPPED, decision=decision.value, reason=decision.value)

        recipient = loan.borrower_email.strip()
        previous_sent_at = loan.last_reminder_sent_at
        rendered = render_reminder(decision, loan, settings, today)

        if not guard.claim(loan_id, today, stamp):
            current_app.logger.warning(f"Reminder for loan {loan_id} already claimed by another run")
            return LoanResult(str(loan_id), SKIPPED, decision=decision.value, reason=CLAIMED_ELSEWHERE)
    except Exception as e:
        db.session.rollback()
        summary.error(f"Error preparing reminder for loan {loan_id}: {str(e)}")
        return LoanResult(str(loan_id), SKIPPED, reason=PIPELINE_ERROR, error=str(e))

    pending = _PendingSend(loan_id, decision, recipient, rendered.subject, previous_sent_at)
    pending.future = submit(settings, recipient, rendered)
    return pending


def _complete(pending, stamp, summary, send_timeout):
    """Audit the send outcome and update or release the loan.

    Waits at most `send_timeout` seconds for the send; an attempt still
    running after that is recorded as timed out.
    """
    loan_id = pending.loan_id
    decision = pending.decision

    try:
        send_result = pending.future.result(timeout=send_timeout)
    except TimeoutError:
        pending.future.cancel()
        send_result = email_utils.timed_out(send_timeout)
    except Exception as e:
        send_result = email_utils.SendResult(ok=False, error=str(e) or e.__class__.__name__)

    entry = audit.AuditLogEntry.for_attempt(
        loan_id, decision.email_type, pending.recipient, pending.subject, send_result
    )
    if not audit.record(entry):
        summary.error(f"Audit entry for loan {loan_id} ({entry.status}) was not saved")

    result = LoanResult(
        str(loan_id),
        entry.status,
        decision=decision.value,
        email_type=decision.email_type,
        recipient=pending.recipient,
        error=entry.error_message,
    )

    if not send_result.ok:
        current_app.logger.warning(f"Reminder for loan {loan_id} failed: {send_result.error}")
        try:
            guard.release(loan_id, pending.previous_sent_at, stamp)
        except SQLAlchemyError as e:
            db.session.rollback()
            summary.error(f"Could not release reminder claim for loan {loan_id}: {str(e)}")
        return result

    try:
        result.state_updated = guard.update_loan_reminder_state(loan_id, stamp, decision.marks_overdue)
    except SQLAlchemyError as e:
        db.session.rollback()
        result.state_updated = False
        summary.error(
            f"Reminder sent for loan {loan_id} but updating the loan failed, reconcile manually: {str(e)}"
        )
        return result

    if not result.state_updated:
        summary.error(
            f"Reminder sent for loan {loan_id} but the loan changed underneath the run, reconcile manually"
        )
    return result


def _settle(slot, stamp, summary, send_timeout):
    if not isinstance(slot, _PendingSend):
        return slot
    try:
        return _complete(slot, stamp, summary, send_timeout)
    except Exception as e:
        db.session.rollback()
        summary.error(f"Error completing reminder for loan {slot.loan_id}: {str(e)}")
        return LoanResult(
            str(slot.loan_id), SEND_FAILED,
            decision=slot.decision.value, email_type=slot.decision.email_type,
            recipient=slot.recipient, error=str(e),
        )


def run_once(today=None, now=None):
    """Send today's payment reminders and return a RunSummary.

    Args:
        today: run date; defaults to the current UTC date.
        now: timestamp recorded as last_reminder_sent_at; defaults to the
            current time, moved onto `today` if necessary.

    Raises:
        SettingsError or SQLAlchemyError when settings cannot be loaded.
    """
    started = time.monotonic()
    if today is None:
        today = dates.today()
    stamp = dates.stamp_for(today, now)
    summary = RunSummary(run_date=today, started_at=dates.utcnow())

    settings = load_reminder_settings()
    if settings is None or not settings.is_configured:
        current_app.logger.info("SMTP not configured, skipping email reminders")
        summary.configured = False
        summary.elapsed_seconds = time.monotonic() - started
        return summary

    candidates = _fetch_candidates(settings, today, summary)

    app = current_app._get_current_object()
    max_workers = current_app.config.get('REMINDER_MAX_WORKERS', 4)
    send_timeout = current_app.config.get('REMINDER_SEND_TIMEOUT', 30)
    slots = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='reminder-send') as pool:
        def submit(settings, recipient, rendered):
            return pool.submit(_send_in_context, app, settings, recipient, rendered)

        # Submitted sends are always audited and settled
        try:
            for loan in candidates:
                try:
                    slot = _prepare(loan, settings, today, stamp, summary, submit)
                except Exception as e:
                    db.session.rollback()
                    loan_id = _loan_key(loan)
                    summary.error(f"Error preparing reminder for loan {loan_id}: {str(e)}")
                    slot = LoanResult(str(loan_id), SKIPPED, reason=PIPELINE_ERROR, error=str(e))
                slots.append(slot)
        finally:
            for slot in slots:
                summary.add(_settle(slot, stamp, summary, send_timeout))

    summary.elapsed_seconds = time.monotonic() - started
    current_app.logger.info(
        f"Payment reminders processed for {today.isoformat()}: "
        f"{summary.attempted} attempted, {summary.sent} sent, "
        f"{summary.failed} failed, {summary.skipped} skipped"
    )
    return summary
