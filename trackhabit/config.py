import os


class Config:
    """Base configuration for the application."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change-in-production'
    DEBUG = False
    TESTING = False

    # Store settings; relative paths are resolved against the instance folder
    DATABASE_PATH = os.environ.get('DATABASE_PATH', 'trackhabit.db')

    # Backup settings
    BACKUP_DIRECTORY = os.environ.get('BACKUP_DIRECTORY', 'backups')
    BACKUP_COUNT = int(os.environ.get('BACKUP_COUNT', 5))
    BACKUP_SCHEDULE = os.environ.get('BACKUP_SCHEDULE', '0 3 * * *')
    ENABLE_SCHEDULED_BACKUPS = os.environ.get('ENABLE_SCHEDULED_BACKUPS', 'true').lower() == 'true'
    BACKUP_TIMEOUT = int(os.environ.get('BACKUP_TIMEOUT', 120))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')
    LOG_DIR = os.environ.get('LOG_DIR')

    # Scheduler
    SCHEDULER_API_ENABLED = False

    # Application settings
    VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'standard')


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True

    # The store must be a real file; tests pass a temporary path
    DATABASE_PATH = 'test.db'

    ENABLE_SCHEDULED_BACKUPS = False
    BACKUP_TIMEOUT = 30
    LOG_FORMAT = 'standard'
    LOG_DIR = None


class ProductionConfig(Config):
    """Production configuration."""

    # Ensure proper secret key is set
    SECRET_KEY = os.environ.get('SECRET_KEY')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')


# Configuration dictionary
config_dict = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}

def get_config(config_name=None):
    """Get configuration class based on environment."""
    if not config_name:
        config_name = os.environ.get('FLASK_ENV', 'default')
    return config_dict.get(config_name, config_dict['default'])
