"""Authorization decorators for the application"""
import hmac
from functools import wraps
from flask import abort, current_app, request


def trigger_token_required(f):
    """
    Decorator that requires `Authorization: Bearer <REMINDERS_TRIGGER_TOKEN>`.
    Returns 403 Forbidden when no token is configured or the token does not match.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('REMINDERS_TRIGGER_TOKEN')
        if not expected:
            abort(403)
        header = request.headers.get('Authorization', '')
        scheme, _, supplied = header.partition(' ')
        if scheme.lower() != 'bearer' or not hmac.compare_digest(
            supplied.strip().encode('utf-8'), expected.encode('utf-8')
        ):
            abort(403)
        return f(*args, **kwargs)
    return decorated_function
