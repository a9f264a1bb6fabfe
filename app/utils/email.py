import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from flask import current_app


@dataclass(frozen=True)
class SendResult:
    ok: bool
    error: str | None = None


def timed_out(timeout):
    return SendResult(ok=False, error=f"SMTP send timed out after {timeout}s")


def _is_timeout(exc):
    # smtplib reports a stalled reply as SMTPServerDisconnected raised while handling the socket timeout
    if isinstance(exc, TimeoutError):
        return True
    return isinstance(exc.__cause__ or exc.__context__, TimeoutError)


def build_message(transport, to_email, subject, text_content, html_content=None):
    """Build a text (and optionally HTML) message from the configured sender."""
    message = EmailMessage()
    message['From'] = formataddr((transport.from_name, transport.sender_address))
    message['To'] = to_email
    message['Subject'] = subject
    message['Message-ID'] = make_msgid()
    message.set_content(text_content)
    if html_content:
        message.add_alternative(html_content, subtype='html')
    return message


def _connect(transport, security, timeout):
    if security == 'ssl':
        return smtplib.SMTP_SSL(transport.smtp_host, transport.smtp_port, timeout=timeout)
    server = smtplib.SMTP(transport.smtp_host, transport.smtp_port, timeout=timeout)
    if security == 'starttls':
        server.starttls()
    return server


def send_email(transport, to_email, subject, text_content, html_content=None):
    """Send email over SMTP using the credentials in `transport`.

    `transport` is a ReminderSettings (anything with smtp_host, smtp_port,
    smtp_username, smtp_password, from_name and sender_address). Returns a
    SendResult; failures are reported, never raised.
    """
    timeout = current_app.config.get('REMINDER_SEND_TIMEOUT', 30)
    security = current_app.config.get('SMTP_SECURITY', 'ssl')

    try:
        if not transport.smtp_host or not transport.smtp_username or not transport.smtp_password:
            current_app.logger.error("SMTP configuration missing")
            return SendResult(ok=False, error="SMTP configuration missing")

        # Check email allowlist (for staging/testing environments)
        allowlist = current_app.config.get('EMAIL_ALLOWLIST')
        if allowlist is not None:  # Allowlist is configured
            if to_email.lower() not in allowlist:
                current_app.logger.info(f"Email to {to_email} blocked by allowlist. Subject: {subject}")
                return SendResult(ok=True)  # Not an error - just filtered

        message = build_message(transport, to_email, subject, text_content, html_content)

        server = _connect(transport, security, timeout)
        try:
            server.login(transport.smtp_username, transport.smtp_password)
            server.send_message(message)
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                server.close()

        current_app.logger.info(f"Email sent successfully to {to_email}")
        return SendResult(ok=True)

    except (TimeoutError, smtplib.SMTPServerDisconnected) as e:
        if not _is_timeout(e):
            current_app.logger.error(f"Error sending email to {to_email}: {str(e)}")
            return SendResult(ok=False, error=str(e) or e.__class__.__name__)
        result = timed_out(timeout)
        current_app.logger.error(f"Failed to send email to {to_email}: {result.error}")
        return result
    except Exception as e:
        current_app.logger.error(f"Error sending email to {to_email}: {str(e)}")
        return SendResult(ok=False, error=str(e) or e.__class__.__name__)
