"""
Configuration file for the Safe Route API backend.
"""
import os
from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'

    # Road router (OSRM)
    OSRM_SERVER = os.getenv('OSRM_SERVER', 'https://router.project-osrm.org')
    ROUTER_TIMEOUT_SECONDS = float(os.getenv('ROUTER_TIMEOUT_SECONDS', '15'))
    DEFAULT_PROFILE = os.getenv('DEFAULT_PROFILE', 'driving')
    # Whole-request budget for /api/route; the search is cancelled when it runs out
    ROUTE_DEADLINE_SECONDS = float(os.getenv('ROUTE_DEADLINE_SECONDS', '60'))

    # High-risk zones, loaded once at startup
    HIGHRISK_ZONES_PATH = os.getenv(
        'HIGHRISK_ZONES_PATH',
        os.path.join(BACKEND_DIR, 'data', 'highrisk.json')
    )

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')

    # Rate Limiting
    RATE_LIMIT_ENABLED = os.getenv('RATE_LIMIT_ENABLED', 'False').lower() == 'true'
    RATE_LIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    RATE_LIMIT_ENABLED = os.getenv('RATE_LIMIT_ENABLED', 'True').lower() == 'true'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Configuration class for the current FLASK_ENV."""
    return config.get(os.getenv('FLASK_ENV', 'default'), DevelopmentConfig)
