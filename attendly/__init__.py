"""Attendly - Application Factory."""
import logging
import os
from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

__version__ = '1.0.0'

# Initialize extensions
db = SQLAlchemy()

def _default_limit():
    return current_app.config['RATELIMIT_DEFAULT']

# Evaluated per request, so each app's RATELIMIT_DEFAULT applies
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_default_limit]
)

def create_app(config_name: str = None, state=None) -> Flask:
    """
    Application factory pattern.

    ``state`` lets callers supply a prepared DeviceState, e.g. with a fixed
    clock; otherwise one is built and, when enabled, loaded from the database.
    """
    app = Flask(__name__)

    # Load configuration
    from attendly.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database and device state
    setup_database(app)
    setup_state(app, state)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Attendly',
            'version': __version__
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendly.api.classes import classes_bp
    from attendly.api.sessions import sessions_bp
    from attendly.api.attendance import attendance_bp

    app.register_blueprint(classes_bp, url_prefix='/api/classes')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendly.utils.helpers import handle_error, error_response
    from attendly.utils.validators import ValidationError
    from attendly.services.session_store import SessionAlreadyLiveError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return error_response(str(error), 400)

    @app.errorhandler(SessionAlreadyLiveError)
    def session_already_live(error):
        return error_response(str(error), 409)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error("Internal server error", 500)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.getLogger('attendly').setLevel(level)

    if not app.debug and not app.testing:
        log_dir = os.path.dirname(app.config['LOG_FILE'])
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(app.config['LOG_FILE'])
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('attendly').addHandler(file_handler)

        app.logger.setLevel(level)
        app.logger.info('Attendly startup')

def setup_database(app: Flask) -> None:
    """Create tables for persisted state."""
    with app.app_context():
        from attendly.models import StoredBlob  # noqa: F401 - registers the table
        db.create_all()

def setup_state(app: Flask, state=None) -> None:
    """Build or restore this device's attendance state."""
    from attendly.services.device_state import DeviceState
    from attendly.services.persistence_service import PersistenceService
    from attendly.services.seed_service import SeedService

    if state is None:
        state = DeviceState(bucket_tolerance=app.config['TOKEN_BUCKET_TOLERANCE'])

    with app.app_context():
        loaded = False
        if app.config.get('AUTOSAVE_STATE'):
            loaded = PersistenceService.load_state(state)

        if not loaded and app.config.get('SEED_SAMPLE_DATA'):
            if SeedService.seed_all(state) and app.config.get('AUTOSAVE_STATE'):
                PersistenceService.save_state(state)

    if app.config.get('AUTOSAVE_STATE'):
        def save(current):
            with app.app_context():
                PersistenceService.save_state(current)
        state.enable_autosave(save)

    app.extensions['attendly'] = state

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed device state with the sample class."""
        from attendly.services.persistence_service import PersistenceService
        from attendly.services.seed_service import SeedService

        state = app.extensions['attendly']
        if not SeedService.seed_all(state):
            click.echo('Device already has classes or attendance; nothing seeded.')
            return
        PersistenceService.save_state(state)
        click.echo('Device state seeded successfully!')

    @app.cli.command('reset-state')
    @click.confirmation_option(prompt='This deletes every saved class, session and record. Continue?')
    def reset_state():
        """Forget all persisted device state."""
        from attendly.services.persistence_service import PersistenceService

        PersistenceService.clear()
        click.echo('Device state cleared.')

    @app.cli.command('export-csv')
    @click.option('--output', default=None, help='Directory for the CSV file')
    def export_csv(output):
        """Export all attendance records to CSV."""
        from attendly.services.export_service import ExportService

        state = app.extensions['attendly']
        path = ExportService.write_csv(
            state.ledger.all_records(),
            output or app.config['EXPORT_FOLDER']
        )
        click.echo(f'Exported attendance to {path}')
