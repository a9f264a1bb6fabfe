from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from app.auth.decorators import trigger_token_required
from app.reminders import bp as reminders
from app.reminders.dispatch import run_once
from app.reminders.settings import SettingsError
from app.utils.dates import parse_iso_date


@reminders.route('/run', methods=['POST'])
@trigger_token_required
def run_now():
    """Run the payment reminder job on demand and return its summary."""
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({'error': 'request body must be a JSON object'}), 400
    run_date = None
    if payload.get('date'):
        try:
            run_date = parse_iso_date(str(payload['date']))
        except ValueError:
            return jsonify({'error': 'date must be formatted YYYY-MM-DD'}), 400

    try:
        summary = run_once(today=run_date)
    except (SettingsError, SQLAlchemyError) as e:
        current_app.logger.error(f"Error in payment reminder run: {str(e)}")
        return jsonify({'error': str(e)}), 500

    if not summary.configured:
        return jsonify({'message': 'SMTP not configured', **summary.to_dict()})

    return jsonify({
        'message': f'Processed {len(summary.results)} loans, sent {summary.sent} emails',
        **summary.to_dict(),
    })
