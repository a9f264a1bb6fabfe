"""Reminder email content.

Kept deliberately plain: one subject plus text and HTML bodies per reminder
type, built with f-strings in the same way as the rest of the app's emails.
"""
from dataclasses import dataclass
from html import escape

from app.reminders.policy import ReminderDecision, days_overdue, days_until_due

SUBJECTS = {
    ReminderDecision.DUE_SOON: "Payment Reminder – Due Soon",
    ReminderDecision.OVERDUE: "Overdue Payment Reminder",
    ReminderDecision.FINAL_NOTICE: "Final Payment Notice",
}


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


def _plural(count, word):
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _format_date(value):
    return value.strftime('%A, %B %d, %Y')


def render_reminder(decision, loan, settings, today):
    """Render the email for a sendable decision."""
    if decision == ReminderDecision.DUE_SOON:
        return _render_due_soon(loan, settings, today)
    if decision in (ReminderDecision.OVERDUE, ReminderDecision.FINAL_NOTICE):
        return _render_overdue(loan, settings, today, decision == ReminderDecision.FINAL_NOTICE)
    raise ValueError(f"No email for reminder decision {decision.value!r}")


def _render_due_soon(loan, settings, today):
    subject = SUBJECTS[ReminderDecision.DUE_SOON]
    days_left = _plural(days_until_due(loan, today), 'day')
    due_date = _format_date(loan.due_date)

    text_content = f"""
Dear {loan.borrower_name},

This is a friendly reminder that your payment is due in {days_left}.

Amount Due: {loan.formatted_amount}
Due Date: {due_date}

Please ensure timely payment to avoid any late fees. If you have already made this payment, please disregard this notice.

Best regards,
{settings.from_name}
    """.strip()

    html_content = f"""
    <html>
    <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2 style="color: #333;">{escape(settings.from_name)}</h2>

        <div style="background-color: #fef3c7; padding: 20px; border-radius: 8px; border-left: 4px solid #f59e0b; margin: 20px 0;">
            <p style="margin: 0;"><strong>Payment Due Soon</strong></p>
            <p style="margin: 8px 0 0;">Your payment is due in {days_left}</p>
        </div>

        <p>Dear <strong>{escape(loan.borrower_name)}</strong>,</p>

        <div style="background-color: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>Amount Due:</strong> {escape(loan.formatted_amount)}</p>
            <p><strong>Due Date:</strong> {due_date}</p>
        </div>

        <p style="color: #666; font-size: 14px;">
            Please ensure timely payment to avoid any late fees. If you have already made this payment, please disregard this notice.
        </p>

        <hr style="margin-top: 30px; border: none; border-top: 1px solid #ddd;">
        <p style="color: #999; font-size: 12px;">
            This is an automated message from {escape(settings.from_name)}<br>
            &copy; {today.year} {escape(settings.from_name)}
        </p>
    </body>
    </html>
    """

    return RenderedEmail(subject=subject, text=text_content, html=html_content)


def _render_overdue(loan, settings, today, is_final_notice):
    decision = ReminderDecision.FINAL_NOTICE if is_final_notice else ReminderDecision.OVERDUE
    subject = SUBJECTS[decision]
    overdue_for = _plural(days_overdue(loan, today), 'day')
    due_date = _format_date(loan.due_date)

    if is_final_notice:
        headline = "Final Notice – Immediate Action Required"
        body = (
            "This is your FINAL NOTICE regarding your overdue payment. Immediate action is "
            "required to avoid additional penalties and potential collection proceedings."
        )
        closing = (
            "Please contact us immediately to arrange payment. Failure to respond may result "
            "in additional collection actions."
        )
        accent = '#7f1d1d'
    else:
        headline = "Payment Overdue"
        body = (
            "We would like to remind you that your payment has passed its due date. Please make "
            "your payment as soon as possible to avoid additional late fees."
        )
        closing = (
            "If you have already made this payment, please disregard this notice. For any "
            "questions or to discuss payment arrangements, please contact us."
        )
        accent = '#dc2626'

    text_content = f"""
Dear {loan.borrower_name},

{headline}: your payment is {overdue_for} overdue.

{body}

Amount Overdue: {loan.formatted_amount}
Original Due Date: {due_date}
Days Overdue: {overdue_for}

{closing}

Best regards,
{settings.from_name}
    """.strip()

    html_content = f"""
    <html>
    <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2 style="color: #333;">{escape(settings.from_name)}</h2>

        <div style="background-color: #fef2f2; padding: 20px; border-radius: 8px; border-left: 4px solid {accent}; margin: 20px 0;">
            <p style="margin: 0; color: #991b1b;"><strong>{headline}</strong></p>
            <p style="margin: 8px 0 0; color: #b91c1c;">Your payment is {overdue_for} overdue</p>
        </div>

        <p>Dear <strong>{escape(loan.borrower_name)}</strong>,</p>

        <p style="color: #64748b;">{body}</p>

        <div style="background-color: #fef2f2; padding: 20px; border-radius: 8px; border: 1px solid #fecaca; margin: 20px 0;">
            <p><strong>Amount Overdue:</strong> {escape(loan.formatted_amount)}</p>
            <p><strong>Original Due Date:</strong> {due_date}</p>
            <p><strong>Days Overdue:</strong> {overdue_for}</p>
        </div>

        <p style="color: #666; font-size: 14px;">{closing}</p>

        <hr style="margin-top: 30px; border: none; border-top: 1px solid #ddd;">
        <p style="color: #999; font-size: 12px;">
            This is an automated message from {escape(settings.from_name)}<br>
            &copy; {today.year} {escape(settings.from_name)}
        </p>
    </body>
    </html>
    """

    return RenderedEmail(subject=subject, text=text_content, html=html_content)
