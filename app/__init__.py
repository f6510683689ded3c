"""Flask application factory."""
from flask import Flask, request, jsonify
from app.database import init_db
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from app.blueprints.metrics import setup_metrics_instrumentation, record_quota_rejection
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # Multi-Tenant: Load user and tenant context before each request
    from app.middleware import load_user_and_tenant

    @app.before_request
    def before_request_handler():
        """Load user and tenant context for each request."""
        load_user_and_tenant()

    # Error Handlers
    from app.exceptions import ClinicError, QuotaExceededError, AccountRestrictedError

    @app.errorhandler(ClinicError)
    def handle_clinic_error(error):
        """Handle custom application exceptions."""
        app.logger.error(f"ClinicError [{error.status_code}] {request.path}: {error.message}")
        if isinstance(error, QuotaExceededError):
            record_quota_rejection(error.resource_kind)
        elif isinstance(error, AccountRestrictedError):
            record_quota_rejection('restricted')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'error', 'message': 'Method Not Allowed'}), 405

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        import traceback
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from app.blueprints.main import main_bp
    from app.blueprints.auth import auth_bp
    from app.blueprints.admin import admin_bp
    from app.blueprints.users import users_bp
    from app.blueprints.owners import owners_bp
    from app.blueprints.inventory import inventory_bp
    from app.blueprints.sales import sales_bp
    from app.blueprints.settings import settings_bp
    from app.blueprints.metrics import metrics_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(owners_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from app.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"App created (env={app.config.get('ENV')})")
    return app
