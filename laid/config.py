"""
Configuration Module for the Laid dating API

This module manages all security and application configuration parameters.
CRITICAL: Load all secrets from environment variables in production.
"""

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class SecurityConfig:
    """
    Central configuration class for authentication, storage and messaging.
    All security-critical parameters are defined here with secure defaults.
    """

    ENV_NAME = 'production'

    # ==================== CRYPTOGRAPHIC SETTINGS ====================

    # CRITICAL: Load from environment variables - NEVER hardcode in production
    SECRET_KEY = os.getenv('APP_SECRET_KEY', 'CHANGE_IN_PRODUCTION_USE_ENV_VAR')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'CHANGE_IN_PRODUCTION_USE_ENV_VAR')

    # Argon2id parameters - memory-hard KDF resistant to GPU attacks
    ARGON2_TIME_COST = int(os.getenv('ARGON2_TIME_COST', '3'))
    ARGON2_MEMORY_COST = int(os.getenv('ARGON2_MEMORY_COST', '65536'))  # 64 MB
    ARGON2_PARALLELISM = int(os.getenv('ARGON2_PARALLELISM', '4'))
    ARGON2_HASH_LENGTH = 32
    ARGON2_SALT_LENGTH = 16

    # ==================== PASSWORD POLICY ====================

    PASSWORD_MIN_LENGTH = 8
    PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'

    # ==================== JWT TOKEN SETTINGS ====================

    # Access token lifetime - short-lived
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)

    # Refresh token lifetime - longer but revocable
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)

    JWT_ALGORITHM = 'HS256'

    # Opaque refresh token entropy - 512 bits
    REFRESH_TOKEN_BYTES = 64

    # ==================== ACCOUNT VERIFICATION ====================

    EMAIL_VERIFICATION_TOKEN_EXPIRES = timedelta(hours=24)
    EMAIL_VERIFICATION_TOKEN_BYTES = 32  # 256 bits entropy

    # ==================== DATING PLATFORM SPECIFIC ====================

    MINIMUM_AGE = 18
    MAXIMUM_AGE = 120
    DISCOVERY_PAGE_SIZE = 20
    MAX_PHOTO_ORDER = 2**31 - 1  # fits a 32-bit INTEGER column
    PROFILE_COMPLETE_MIN_PHOTOS = 2
    MESSAGE_MAX_LENGTH = 2000

    # ==================== DATABASE SETTINGS ====================

    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///laid.db')

    # Connection pool settings for production
    DATABASE_POOL_SIZE = 20
    DATABASE_MAX_OVERFLOW = 10

    # ==================== EMAIL SETTINGS ====================

    SMTP_HOST = os.getenv('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
    SMTP_USERNAME = os.getenv('SMTP_USER', '')
    SMTP_PASSWORD = os.getenv('SMTP_PASS', '')
    SMTP_USE_TLS = True
    SMTP_TIMEOUT = 10

    EMAIL_FROM = os.getenv('SMTP_FROM', 'noreply@laid.app')
    EMAIL_ENABLED = os.getenv('EMAIL_ENABLED', 'true').lower() == 'true'
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')

    # ==================== SERVER ====================

    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '3000'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


class DevelopmentConfig(SecurityConfig):
    """Development configuration - less strict for testing"""
    ENV_NAME = 'development'
    EMAIL_ENABLED = os.getenv('EMAIL_ENABLED', 'false').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class TestingConfig(SecurityConfig):
    """Test configuration - in-memory database and cheap hashing"""
    ENV_NAME = 'testing'
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-0123456789abcdef'
    DATABASE_URL = 'sqlite://'
    EMAIL_ENABLED = False

    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024
    ARGON2_PARALLELISM = 1


class ProductionConfig(SecurityConfig):
    """Production configuration - maximum security"""
    ENV_NAME = 'production'


# Configuration selector based on environment
def get_config() -> SecurityConfig:
    """
    Returns appropriate configuration based on environment.
    Default to production for safety.
    """
    env = os.getenv('FLASK_ENV', 'production')
    if env == 'development':
        return DevelopmentConfig()
    if env == 'testing':
        return TestingConfig()
    return ProductionConfig()


# Export the active configuration
config = get_config()
