import uuid
from decimal import Decimal
from sqlalchemy import Uuid, func
from app import db
from app.utils.dates import utcnow

# Loan.payment_status values
PAYMENT_PENDING = 'pending'
PAYMENT_PARTIAL = 'partial'
PAYMENT_COMPLETED = 'completed'
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_PARTIAL, PAYMENT_COMPLETED)

# Loan.status values
LOAN_ACTIVE = 'active'
LOAN_OVERDUE = 'overdue'
LOAN_PAID = 'paid'
LOAN_STATUSES = (LOAN_ACTIVE, LOAN_OVERDUE, LOAN_PAID)

# EmailReminderLog.email_type values
EMAIL_DUE_SOON = 'due_soon'
EMAIL_OVERDUE = 'overdue'
EMAIL_FINAL_NOTICE = 'final_notice'
EMAIL_TYPES = (EMAIL_DUE_SOON, EMAIL_OVERDUE, EMAIL_FINAL_NOTICE)

# EmailReminderLog.status values
SEND_SENT = 'sent'
SEND_FAILED = 'failed'

DEFAULT_REMINDER_DAYS_BEFORE = 3
DEFAULT_MAX_OVERDUE_REMINDERS = 7


class Loan(db.Model):
    __tablename__ = 'loans'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    borrower_name = db.Column(db.String(120), nullable=False)
    borrower_email = db.Column(db.String(120), nullable=True)
    borrower_phone = db.Column(db.String(40), nullable=True)
    currency = db.Column(db.String(3), default='USD', nullable=False)  # USD, RWF
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    interest_rate = db.Column(db.Numeric(7, 3), default=0, nullable=False)
    interest_type = db.Column(db.String(10), default='fixed', nullable=False)  # daily, monthly, fixed
    start_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False, index=True)
    payment_status = db.Column(db.String(20), default=PAYMENT_PENDING, nullable=False)  # pending, partial, completed
    status = db.Column(db.String(20), default=LOAN_ACTIVE, nullable=False)  # active, overdue, paid
    paid_amount = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    late_fee = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=func.now())

    # Email reminder tracking fields
    reminders_enabled = db.Column(db.Boolean, default=True, nullable=False)
    reminder_count = db.Column(db.Integer, default=0, nullable=False)
    last_reminder_sent_at = db.Column(db.DateTime, nullable=True)

    reminder_logs = db.relationship('EmailReminderLog', backref='loan', lazy='dynamic')

    @property
    def formatted_amount(self):
        """Returns amount with currency code, e.g. 'USD 1,250.00'"""
        return f"{self.currency} {Decimal(self.amount or 0):,.2f}"

    def __repr__(self):
        return f'<Loan {self.id} for {self.borrower_name} due {self.due_date}>'


class EmailSettings(db.Model):
    """Single-row table holding SMTP credentials and reminder cadence."""
    __tablename__ = 'email_settings'
    id = db.Column(db.Integer, primary_key=True)
    smtp_host = db.Column(db.String(255), nullable=True)
    smtp_port = db.Column(db.Integer, default=465, nullable=False)
    smtp_username = db.Column(db.String(255), nullable=True)
    smtp_password = db.Column(db.String(255), nullable=True)
    from_email = db.Column(db.String(120), nullable=True)
    from_name = db.Column(db.String(120), default='Payment Reminders', nullable=False)
    reminder_days_before = db.Column(db.Integer, default=DEFAULT_REMINDER_DAYS_BEFORE, nullable=False)
    max_overdue_reminders = db.Column(db.Integer, default=DEFAULT_MAX_OVERDUE_REMINDERS, nullable=False)
    updated_at = db.Column(db.DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f'<EmailSettings {self.smtp_host}:{self.smtp_port} from {self.from_email}>'


class EmailReminderLog(db.Model):
    """Append-only record of one reminder send attempt."""
    __tablename__ = 'email_reminder_logs'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    loan_id = db.Column(Uuid, db.ForeignKey('loans.id'), nullable=False, index=True)
    email_type = db.Column(db.String(20), nullable=False)  # due_soon, overdue, final_notice
    recipient_email = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(10), nullable=False)  # sent, failed
    error_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f'<EmailReminderLog {self.email_type} {self.status} for Loan {self.loan_id}>'
