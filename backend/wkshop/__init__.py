from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

from .config.database import build_engine, database_url_from_env, DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT
from .config.cost_input import CostInputPolicy
from .errors import WorkshopError, TransientStorageError

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me-in-production-env')
    app.config['DATABASE_URL'] = database_url_from_env()
    app.config['DB_POOL_SIZE'] = int(os.getenv('DB_POOL_SIZE', DEFAULT_POOL_SIZE))
    app.config['DB_POOL_TIMEOUT'] = int(os.getenv('DB_POOL_TIMEOUT', DEFAULT_POOL_TIMEOUT))
    app.config['PERMISSION_CACHE_TTL'] = float(os.getenv('PERMISSION_CACHE_TTL', '30'))
    # None -> built-in allow-list; code-level setting, not read from the environment
    app.config['COST_INPUT_ALLOWED_USER_IDS'] = None

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    # Database
    db_engine = build_engine(app.config['DATABASE_URL'], app.config['DB_POOL_SIZE'], app.config['DB_POOL_TIMEOUT'])
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    # Authorization chain: store -> service -> gate, built once per app
    from .repositories.permissions import PermissionStore
    from .services.permissions import PermissionService
    from .services.access import AccessGate
    store = PermissionStore(SessionLocal)
    permission_service = PermissionService(store, cache_ttl=app.config['PERMISSION_CACHE_TTL'])
    gate = AccessGate(permission_service, CostInputPolicy.from_ids(app.config['COST_INPUT_ALLOWED_USER_IDS']))
    app.extensions['wkshop'] = {
        'permission_store': store,
        'permission_service': permission_service,
        'access_gate': gate,
    }

    from .routes.auth import auth_bp
    from .routes.permissions import perm_bp
    from .routes.purchase_orders import po_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(perm_bp, url_prefix='/api/permissions')
    app.register_blueprint(po_bp, url_prefix='/api/purchase-orders')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.teardown_appcontext
    def remove_session(exc=None):
        SessionLocal.remove()

    @app.errorhandler(WorkshopError)
    def handle_domain_error(e):  # type: ignore
        # drop half-applied changes from the failed handler
        SessionLocal.rollback()
        if e.status_code >= 500:
            app.logger.error('%s: %s', type(e).__name__, e.detail, exc_info=e)
        headers = {}
        if isinstance(e, TransientStorageError):
            headers['Retry-After'] = str(e.retry_after)
        return e.to_dict(), e.status_code, headers

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()
