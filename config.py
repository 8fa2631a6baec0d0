import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = 'true') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///swipes.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens are issued by the auth service and only verified here
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_AUDIENCE = os.getenv('JWT_AUDIENCE')

    # Redis configuration
    CACHE_ENABLED = _env_flag('CACHE_ENABLED')
    REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
    REDIS_PORT = int(os.getenv('REDIS_PORT', 6379))
    REDIS_DB = int(os.getenv('REDIS_DB', 0))
    REDIS_PASSWORD = os.getenv('REDIS_PASSWORD', None)
    CACHE_TTL = int(os.getenv('CACHE_TTL', 300))

    MAX_SWIPE_BATCH = int(os.getenv('MAX_SWIPE_BATCH', 100))
    HISTORY_MAX_LIMIT = int(os.getenv('HISTORY_MAX_LIMIT', 100))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET = 'test-secret-for-signing-bearer-tokens'
    JWT_AUDIENCE = None
    CACHE_ENABLED = False
    MAX_SWIPE_BATCH = 10
    LOG_LEVEL = 'DEBUG'
