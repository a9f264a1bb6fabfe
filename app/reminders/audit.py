"""Append-only audit trail of reminder send attempts."""
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import SEND_FAILED, SEND_SENT, EmailReminderLog


@dataclass(frozen=True)
class AuditLogEntry:
    loan_id: object
    email_type: str
    recipient_email: str
    subject: str
    status: str
    error_message: str | None = None

    @classmethod
    def for_attempt(cls, loan_id, email_type, recipient_email, subject, send_result):
        if send_result.ok:
            return cls(loan_id, email_type, recipient_email, subject, SEND_SENT)
        return cls(
            loan_id, email_type, recipient_email, subject, SEND_FAILED,
            error_message=send_result.error or 'Unknown error',
        )


def record(entry):
    """Persist one audit entry. Returns False, after logging, if the write fails."""
    try:
        db.session.add(EmailReminderLog(
            loan_id=entry.loan_id,
            email_type=entry.email_type,
            recipient_email=entry.recipient_email,
            subject=entry.subject,
            status=entry.status,
            error_message=entry.error_message,
        ))
        db.session.commit()
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(
            f"Failed to write {entry.status} audit entry ({entry.email_type}) "
            f"for loan {entry.loan_id}: {str(e)}"
        )
        return False
