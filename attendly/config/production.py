"""Production configuration."""
import os

from .base import Config

class ProductionConfig(Config):
    """Production configuration class."""
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY')  # Must be set in production
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    
    # Stricter limits
    RATELIMIT_DEFAULT = "100 per day, 20 per hour"
    SCAN_RATE_LIMIT = "10 per minute"
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = os.getenv('LOG_FILE') or '/app/logs/app.log'
