"""
Configuration management for the Harmony progress engine.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Progress engine tuning
    STREAK_LOOKBACK_DAYS = int(os.getenv('STREAK_LOOKBACK_DAYS', '365'))
    HARMONY_WINDOW_DAYS = int(os.getenv('HARMONY_WINDOW_DAYS', '7'))
    HEALTHY_STREAK_DAYS = int(os.getenv('HEALTHY_STREAK_DAYS', '3'))

    # Origins allowed to call the progress API (comma separated)
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:8081,http://localhost:19006'
        ).split(',')
        if origin.strip()
    ]


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///harmony_dev.db'  # SQLite fallback for local dev
    )


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    _db_url = os.getenv('DATABASE_URL', '')
    if _db_url.startswith('postgres://'):
        # SQLAlchemy requires postgresql:// not postgres://
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,  # Verify connections before using
    }

    @classmethod
    def validate_database_url(cls) -> str:
        """
        Validate DATABASE_URL in production environment.

        Raises:
            RuntimeError: If DATABASE_URL is missing
        """
        if not cls._db_url:
            raise RuntimeError(
                "CRITICAL: DATABASE_URL environment variable is not set!\n"
                "Production deployments MUST point at the shared progress database."
            )
        return cls._db_url


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    STREAK_LOOKBACK_DAYS = 365
    HARMONY_WINDOW_DAYS = 7
    HEALTHY_STREAK_DAYS = 3


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Args:
        config_name: The configuration environment name

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate_database_url()
