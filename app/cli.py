#!/usr/bin/env python3
"""Payment reminder CLI.

Provides Flask CLI commands for the daily reminder job:
- flask reminders run [--date YYYY-MM-DD]
- flask reminders status [--date YYYY-MM-DD]
- flask reminders configure --smtp-host ... --max-overdue-reminders N

Schedule `flask reminders run` once a day (cron, systemd timer, platform
scheduler). Running it more than once on the same day is safe: each loan
gets at most one reminder per calendar day.
"""

import sys

import click
from flask.cli import with_appcontext


class _DateParam(click.ParamType):
    name = 'date'

    def convert(self, value, param, ctx):
        from app.utils.dates import parse_iso_date
        try:
            return parse_iso_date(value)
        except ValueError:
            self.fail(f"{value!r} is not a date formatted YYYY-MM-DD", param, ctx)


DATE = _DateParam()


@click.group()
def reminders():
    """Payment reminder commands."""
    pass


@reminders.command()
@click.option('--date', 'run_date', type=DATE, default=None,
              help='Run as if today were this date (YYYY-MM-DD). Defaults to today (UTC).')
@with_appcontext
def run(run_date):
    """Check loans and send payment reminder emails (due soon, overdue, final notice)."""
    from sqlalchemy.exc import SQLAlchemyError
    from app.reminders.dispatch import run_once
    from app.reminders.settings import SettingsError

    click.echo('🔔 Checking payment reminders...')

    try:
        summary = run_once(today=run_date)
    except (SettingsError, SQLAlchemyError) as e:
        click.echo(f'❌ Could not start reminder run: {e}')
        sys.exit(1)

    if not summary.configured:
        click.echo('  SMTP not configured, no reminders sent.')
        click.echo("💡 Use 'flask reminders configure' to set SMTP credentials.")
        return

    click.echo(f'  Run date: {summary.run_date.isoformat()}')
    for result in summary.results:
        if result.status == 'sent':
            click.echo(f'    ✓ {result.email_type} -> {result.recipient} (loan {result.loan_id})')
        elif result.status == 'failed':
            click.echo(f'    ✗ {result.email_type} -> {result.recipient} (loan {result.loan_id}): {result.error}')

    # Print any errors
    for error in summary.errors:
        click.echo(f'    ⚠ {error}')

    click.echo('\n📊 Summary:')
    click.echo(f'  • Reminders attempted: {summary.attempted}')
    click.echo(f'  • Reminders sent: {summary.sent}')
    click.echo(f'  • Reminders failed: {summary.failed}')
    click.echo(f'  • Skipped: {summary.skipped}')
    if summary.errors:
        click.echo(f'  • Errors: {len(summary.errors)}')
    click.echo(f'  • Elapsed: {summary.elapsed_seconds:.2f}s')
    click.echo('✅ Done!')


@reminders.command()
@click.option('--date', 'run_date', type=DATE, default=None,
              help='Day to report on (YYYY-MM-DD). Defaults to today (UTC).')
@with_appcontext
def status(run_date):
    """Show reminder configuration and the day's send attempts."""
    from app import db
    from app.models import EmailReminderLog, SEND_FAILED, SEND_SENT
    from app.reminders.settings import load_reminder_settings, SettingsError
    from app.utils.dates import day_bounds, today

    day = run_date or today()

    click.echo('📊 Payment reminder status')
    try:
        settings = load_reminder_settings()
    except SettingsError as e:
        click.echo(f'  ❌ Settings invalid: {e}')
        settings = None
    else:
        if settings is None:
            click.echo('  ⚠ No email settings saved')
        else:
            state = '✅ configured' if settings.is_configured else '⚠ missing credentials'
            click.echo(f'  SMTP: {settings.smtp_host or "-"}:{settings.smtp_port} ({state})')
            click.echo(f'  From: {settings.from_name} <{settings.sender_address}>')
            click.echo(f'  Due-soon reminder: {settings.reminder_days_before} day(s) before due date')
            click.echo(f'  Overdue reminder ceiling: {settings.max_overdue_reminders}')

    start, end = day_bounds(day)
    counts = dict(
        db.session.execute(
            db.select(EmailReminderLog.status, db.func.count())
            .where(EmailReminderLog.created_at >= start, EmailReminderLog.created_at < end)
            .group_by(EmailReminderLog.status)
        ).all()
    )
    click.echo(f'\n  Attempts on {day.isoformat()}:')
    click.echo(f'  • Sent: {counts.get(SEND_SENT, 0)}')
    click.echo(f'  • Failed: {counts.get(SEND_FAILED, 0)}')


@reminders.command()
@click.option('--smtp-host', default=None)
@click.option('--smtp-port', type=int, default=None)
@click.option('--smtp-username', default=None)
@click.option('--smtp-password', default=None)
@click.option('--from-email', default=None)
@click.option('--from-name', default=None)
@click.option('--reminder-days-before', type=int, default=None,
              help='Days before the due date to send the due-soon reminder.')
@click.option('--max-overdue-reminders', type=int, default=None,
              help='Reminders allowed per loan before it is suppressed.')
@with_appcontext
def configure(**fields):
    """Create or update the email settings used by the reminder job."""
    from app.reminders.settings import save_reminder_settings, SettingsError

    if all(value is None for value in fields.values()):
        click.echo('Nothing to update. Pass at least one option (see --help).')
        return

    try:
        save_reminder_settings(**fields)
    except SettingsError as e:
        click.echo(f'❌ {e}')
        sys.exit(1)

    changed = ', '.join(name for name, value in fields.items() if value is not None)
    click.echo(f'✅ Email settings updated: {changed}')


if __name__ == '__main__':
    reminders()
