import os
from dotenv import load_dotenv

load_dotenv()


def _split_list(value, default):
    if not value:
        return default
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Base configuration class."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Server configuration
    PORT = int(os.environ.get('PORT', '3000'))
    TIMEZONE = os.environ.get('TZ', 'UTC')

    # Storage configuration
    DB_CONNECTION = os.environ.get('DB_CONNECTION', 'local')
    DB_PATHNAME = os.environ.get('DB_PATHNAME', '.db')
    DB_HOSTNAME = os.environ.get('DB_HOSTNAME', 'localhost')
    DB_PORT = int(os.environ['DB_PORT']) if os.environ.get('DB_PORT') else None
    DB_USERNAME = os.environ.get('DB_USERNAME', '')
    DB_PASSWORD = os.environ.get('DB_PASSWORD', '')
    DB_DATABASE = os.environ.get('DB_DATABASE', 'cbdummy')

    # SQL backends set the URI themselves when the storage is bound
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Security configuration
    WHITELIST_IPS = _split_list(os.environ.get('WHITELIST_IP'), ['127.0.0.1', '::1', 'localhost'])

    # CORS configuration
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # Logging configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False

    # Production CORS (more restrictive)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '').split(',')

    @classmethod
    def validate_config(cls):
        """Validate production configuration."""
        import pytz
        from src.storage.selector import STORAGE_BACKENDS

        connection = (cls.DB_CONNECTION or '').lower()
        if connection not in STORAGE_BACKENDS:
            raise ValueError(f"Unsupported DB_CONNECTION: {cls.DB_CONNECTION}")

        if cls.TIMEZONE not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone in TZ: {cls.TIMEZONE}")

        if connection in ('mysql', 'postgresql', 'postgres') and not cls.DB_DATABASE:
            raise ValueError("DB_DATABASE environment variable is required for server databases")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    DB_CONNECTION = 'local'
    TIMEZONE = 'UTC'
    WHITELIST_IPS = ['127.0.0.1', '::1', 'localhost']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
