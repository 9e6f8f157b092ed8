import os
import sys
import logging
from flask import Flask, jsonify

# Add src directory to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from src.config import config
from src.extensions import cors
from src.storage import StorageError, init_storage, get_storage


def configure_logging(app):
    """Console logging at LOG_LEVEL, plus a log file outside debug mode."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = logging.FileHandler('logs/cbdummy.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        app.logger.info('CB Dummy startup')


def create_app(config_name=None, test_config=None):
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)

    # Validate production configuration if needed
    if config_name == 'production':
        config[config_name].validate_config()

    configure_logging(app)

    # CORS for the JSON API only
    cors.init_app(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # Storage failures at startup are fatal
    try:
        storage = init_storage(app)
    except StorageError as e:
        app.logger.error(f"Failed to initialize storage ({app.config.get('DB_CONNECTION')}): {str(e)}")
        raise

    from src.routes.callback import callback_bp
    from src.routes.route_management import routes_bp
    from src.routes.capture import capture_bp, register_callback_routes
    from src.routes.web import web_bp

    app.register_blueprint(callback_bp, url_prefix='/api')
    app.register_blueprint(routes_bp, url_prefix='/api')
    app.register_blueprint(capture_bp)
    app.register_blueprint(web_bp)

    # Mount registered routes before the catch-all takes them
    with app.app_context():
        mounted = register_callback_routes(app, storage.get_routes())

    from src.utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    @app.route('/health')
    def health():
        return jsonify({
            'status': 'ok',
            'storage': get_storage().kind,
            'timezone': app.config.get('TIMEZONE')
        })

    app.logger.info(f"Storage: {storage.kind}")
    app.logger.info(f"Timezone: {app.config.get('TIMEZONE')}")
    app.logger.info(f"Whitelisted IPs: {', '.join(app.config.get('WHITELIST_IPS', []))}")
    app.logger.info(f"Callback endpoint: /callback/* ({len(mounted)} registered routes)")

    return app


if __name__ == '__main__':
    app = create_app()
    try:
        app.run(host='0.0.0.0', port=app.config['PORT'], debug=app.config.get('DEBUG', False))
    finally:
        with app.app_context():
            get_storage().close()
