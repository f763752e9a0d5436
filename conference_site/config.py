"""Configuration settings and environment variables.

This module loads values from environment variables (including a .env file)
and provides small helpers to safely parse integers and booleans while
stripping inline comments, so a value such as

    HTTP_TIMEOUT_SECONDS=5 # seconds

does not crash startup. All values are read once when the module is imported.
"""

import os
import logging
from datetime import timedelta
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_logger = logging.getLogger(__name__)


def _strip_inline_comment(val: str) -> str:
    """Strip an inline comment from a string and trim whitespace/quotes.

    Example: "5 # seconds" -> "5"
    """
    if val is None:
        return ''
    val = val.split('#', 1)[0]
    val = val.strip()
    if (val.startswith('"') and val.endswith('"')) or (
        val.startswith("'") and val.endswith("'")
    ):
        val = val[1:-1]
    return val


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    stripped = _strip_inline_comment(raw)
    return stripped if stripped != '' else default


def _get_int_env(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        _logger.warning("Invalid integer for %s: %r, falling back to %s", name, raw, default)
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = _get_env(name)
    if raw is None:
        return default
    return raw.lower() in ['true', '1', 'on', 'yes']


class Config:
    """Base configuration class with default settings."""

    # Deployment environment. Captcha is only enforced in "production".
    APP_ENV = _get_env('APP_ENV', 'development')

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # Administrator secret (bcrypt hash) exchanged for an admin JWT
    ADMIN_SECRET_HASH = _get_env('ADMIN_SECRET_HASH')

    # MongoDB settings
    MONGO_URI = os.environ.get('MONGO_URI') or 'mongodb://localhost:27017/'
    MONGO_DB = os.environ.get('MONGO_DB') or 'conference'

    # Outbound HTTP calls (captcha, email provider)
    HTTP_TIMEOUT_SECONDS = _get_int_env('HTTP_TIMEOUT_SECONDS', 5)

    # hCaptcha
    HCAPTCHA_SECRET_KEY = _get_env('HCAPTCHA_SECRET_KEY', '')
    HCAPTCHA_SITE_KEY = _get_env('HCAPTCHA_SITE_KEY', '')
    HCAPTCHA_VERIFY_URL = _get_env('HCAPTCHA_VERIFY_URL', 'https://hcaptcha.com/siteverify')

    # Mail settings
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = _get_int_env('MAIL_PORT', 587)
    MAIL_USE_TLS = _get_bool_env('MAIL_USE_TLS', True)
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER')
    # Retry budget stored on every participant for confirmation delivery
    MAIL_DELIVERY_ATTEMPTS = _get_int_env('MAIL_DELIVERY_ATTEMPTS', 3)

    # Email existence checks. EMAIL_VALIDATION may hold a provider dict, e.g.
    # {'provider': 'abstract', 'api_key': '...'}; it is left empty by default
    # so that only the MX lookup runs.
    EMAIL_VALIDATION: dict = {}
    EMAIL_VALIDATION_STRICTNESS = _get_env('EMAIL_VALIDATION_STRICTNESS', 'medium')
    EMAIL_VALIDATION_FAIL_OPEN = _get_bool_env('EMAIL_VALIDATION_FAIL_OPEN', True)
    DISPOSABLE_DOMAINS_FILE = _get_env('DISPOSABLE_DOMAINS_FILE')

    # Uploaded articles
    STORAGE_BACKEND = _get_env('STORAGE_BACKEND', 'local')
    UPLOAD_FOLDER = _get_env('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    UPLOAD_MAX_BYTES = _get_int_env('UPLOAD_MAX_BYTES', 20 * 1024 * 1024)
    MAX_CONTENT_LENGTH = UPLOAD_MAX_BYTES
    S3_BUCKET = _get_env('S3_BUCKET', 'conference-articles')
    S3_ENDPOINT_URL = _get_env('S3_ENDPOINT_URL')
    AWS_ACCESS_KEY_ID = _get_env('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = _get_env('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = _get_env('AWS_REGION', 'us-east-1')

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_ENABLED = _get_bool_env('RATELIMIT_ENABLED', True)

    CONFERENCE_NAME = _get_env('CONFERENCE_NAME', 'AMTC 2022')


class DevelopmentConfig(Config):
    """Development configuration with debug mode enabled."""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration: captcha enforced."""
    APP_ENV = 'production'
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration with test database."""
    APP_ENV = 'testing'
    TESTING = True
    MONGO_DB = 'conference_test'
    RATELIMIT_ENABLED = False


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
