"""Development configuration."""
import os

from .base import Config, _env_flag

class DevelopmentConfig(Config):
    """Development configuration class."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///attendly_dev.db'
    SQLALCHEMY_ECHO = _env_flag('SQLALCHEMY_ECHO', False)
    
    # Start with the sample class so a fresh device has something to show
    SEED_SAMPLE_DATA = _env_flag('SEED_SAMPLE_DATA', True)
    
    LOG_LEVEL = 'DEBUG'
