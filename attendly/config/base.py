"""Base configuration shared by every environment."""
import os

def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]
    
    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"
    SCAN_RATE_LIMIT = "30 per minute"
    
    # Sessions
    QR_ROTATION_WINDOW_SECONDS = int(os.environ.get('QR_ROTATION_WINDOW_SECONDS', 90))
    LATE_THRESHOLD_MINUTES = int(os.environ.get('LATE_THRESHOLD_MINUTES', 5))
    DEFAULT_GEOFENCE_RADIUS = float(os.environ.get('DEFAULT_GEOFENCE_RADIUS', 30))
    TOKEN_BUCKET_TOLERANCE = int(os.environ.get('TOKEN_BUCKET_TOLERANCE', 1))
    
    # Device state
    AUTOSAVE_STATE = _env_flag('AUTOSAVE_STATE', True)
    SEED_SAMPLE_DATA = _env_flag('SEED_SAMPLE_DATA', False)
    
    # Export
    EXPORT_FOLDER = os.environ.get('EXPORT_FOLDER') or 'exports'
    
    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE') or 'logs/app.log'
