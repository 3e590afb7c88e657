import os
import logging
from concurrent.futures import ThreadPoolExecutor
from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO()

logger = logging.getLogger(__name__)

# Dev-only CORS origins when ALLOWED_ORIGINS is unset
_LOCAL_ORIGINS = ['http://localhost:*', 'http://127.0.0.1:*']


def _required(config, key, env_name):
    value = config.get(key) or os.getenv(env_name)
    if not value:
        raise RuntimeError(f'{env_name} environment variable is required')
    return value


def _load_config(app, config, is_production):
    """Environment first, then explicit ``config`` overrides."""
    app.config['SECRET_KEY'] = _required(config, 'SECRET_KEY', 'SECRET_KEY')

    database_url = _required(config, 'SQLALCHEMY_DATABASE_URI', 'DATABASE_URL')
    if is_production and not database_url.startswith('postgresql'):
        raise RuntimeError('DATABASE_URL must start with postgresql:// in production')

    app.config.update(
        SQLALCHEMY_DATABASE_URI=database_url,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ENGINE_OPTIONS={'pool_pre_ping': True, 'pool_recycle': 300},
        JWT_SECRET_KEY=os.getenv('JWT_SECRET_KEY'),
        JWT_ACCESS_TOKEN_EXPIRES=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600)),
        PHI_ENCRYPTION_KEY=os.getenv('PHI_ENCRYPTION_KEY'),
        AUDIT_LOG_FILE=os.getenv('AUDIT_LOG_FILE', 'logs/audit.log'),
        FETCH_TIMEOUT_SECONDS=float(os.getenv('FETCH_TIMEOUT_SECONDS', 15)),
        DASHBOARD_POLL_SECONDS=float(os.getenv('DASHBOARD_POLL_SECONDS', 10)),
        FETCH_WORKERS=int(os.getenv('FETCH_WORKERS', 4)),
        # 1 MB request bodies
        MAX_CONTENT_LENGTH=1024 * 1024,
    )
    app.config.update(config)


def _configure_cors(app, is_production):
    allowed = os.getenv('ALLOWED_ORIGINS', '')
    origins = [o.strip() for o in allowed.split(',') if o.strip()]
    if not origins:
        if is_production:
            raise RuntimeError('ALLOWED_ORIGINS environment variable is required in production')
        origins = _LOCAL_ORIGINS

    CORS(app, resources={
        r"/auth/*": {"origins": origins},
        r"/dashboard/*": {"origins": origins},
        r"/volunteer/*": {"origins": origins},
        # Wristbands call this directly
        r"/api/*": {"origins": "*"},
    })
    return origins


def create_app(config=None):
    """Build the app. ``config`` overrides values read from the environment."""
    app = Flask(__name__)
    is_production = os.getenv('FLASK_ENV') == 'production'

    _load_config(app, dict(config or {}), is_production)

    db.init_app(app)
    migrate.init_app(app, db)
    origins = _configure_cors(app, is_production)
    # Handlers must be on socketio.handlers before init_app builds the server
    from wristband.routes import live  # noqa: F401
    # Wildcard port patterns only make sense to Flask-Cors
    socketio.init_app(
        app,
        async_mode='threading',
        cors_allowed_origins='*' if origins is _LOCAL_ORIGINS else origins,
    )

    if is_production:
        @app.before_request
        def enforce_https():
            if not request.is_secure and request.headers.get('X-Forwarded-Proto', 'http') != 'https':
                return redirect(request.url.replace('http://', 'https://', 1), code=301)

    @app.after_request
    def add_security_headers(response):
        response.headers.update({
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
            'Cache-Control': 'no-store, no-cache, must-revalidate',
            'Pragma': 'no-cache',
            'Referrer-Policy': 'no-referrer',
        })
        if is_production or request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # JSON bodies only on writes; the device endpoint is a GET
    @app.before_request
    def require_json_body():
        if request.method in ('POST', 'PUT') and not request.is_json:
            return jsonify({'error': 'Content-Type must be application/json'}), 415

    from wristband.errors import WristbandError

    @app.errorhandler(WristbandError)
    def handle_wristband_error(error):
        return jsonify(error.to_dict()), error.status_code

    from wristband.utils.audit_logger import setup_audit_logging
    setup_audit_logging(app)

    # Collaborators handed to routes explicitly, owned by this app
    from wristband.store import ReadingStore
    app.extensions['reading_store'] = ReadingStore(db.session)
    app.extensions['fetch_executor'] = ThreadPoolExecutor(
        max_workers=app.config['FETCH_WORKERS'],
        thread_name_prefix='wristband-fetch',
    )

    from wristband import models  # noqa: F401
    from wristband.routes.ingest import ingest_bp
    from wristband.routes.auth import auth_bp
    from wristband.routes.dashboard import dashboard_bp, build_dashboard_snapshot
    from wristband.routes.volunteer import volunteer_bp
    from wristband.utils.realtime import LiveDashboard

    app.extensions['live_dashboard'] = LiveDashboard(
        socketio, app, build_dashboard_snapshot, app.config['DASHBOARD_POLL_SECONDS'],
    )

    app.register_blueprint(ingest_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(volunteer_bp, url_prefix='/volunteer')

    @app.route('/health')
    def health():
        return {'status': 'healthy'}, 200

    @app.cli.command('cleanup-revoked-tokens')
    def cleanup_revoked_tokens():
        """Purge denylisted tokens that have expired."""
        from wristband.models.revoked_token import RevokedToken
        print(f'Removed {RevokedToken.cleanup_expired()} expired revoked token(s).')

    @app.cli.command('cleanup-rate-limits')
    def cleanup_rate_limits():
        """Purge login/signup attempts older than 5 minutes."""
        from wristband.models.rate_limit_entry import RateLimitEntry
        print(f'Removed {RateLimitEntry.cleanup_older_than(300)} rate limit entry/entries.')

    logger.info('Wristband monitor app created')
    return app
