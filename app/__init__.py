import logging
import os
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from config import config


db = SQLAlchemy()
migrate = Migrate()

def create_app(config_class=None):
    app = Flask(__name__)

    # Auto-detect environment if no config provided
    if config_class is None:
        flask_env = os.environ.get('FLASK_ENV', 'development')
        config_class = config.get(flask_env, config['default'])

    app.config.from_object(config_class)

    # Validate required settings at startup
    if hasattr(config_class, 'validate'):
        config_class().validate()

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    configure_logging(app)

    # Register blueprints
    from app.reminders import bp as reminders_bp
    app.register_blueprint(reminders_bp, url_prefix='/reminders')

    # Register CLI commands
    from app.cli import reminders
    app.cli.add_command(reminders)

    return app


def configure_logging(app):
    # Remove the default Flask logger handlers
    del app.logger.handlers[:]

    # Create a new logger handler
    handler = logging.StreamHandler()
    handler.setLevel(app.config['LOG_LEVEL'])

    # Define log format
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )
    handler.setFormatter(formatter)

    # Add the handler to the app's logger
    app.logger.addHandler(handler)
    app.logger.setLevel(app.config['LOG_LEVEL'])
