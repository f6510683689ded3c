"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'vetclinic')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'vetclinic')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'vetclinic')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Tenancy
    DEFAULT_PLAN_ID = os.getenv('DEFAULT_PLAN_ID', 'Trial')

    # Default ID patterns when a tenant has not configured its own
    DEFAULT_INVOICE_PATTERN = os.getenv('DEFAULT_INVOICE_PATTERN', 'INV-0000')
    DEFAULT_RECEIPT_PATTERN = os.getenv('DEFAULT_RECEIPT_PATTERN', 'RCPT-0000')
    DEFAULT_CLIENT_PATTERN = os.getenv('DEFAULT_CLIENT_PATTERN', 'CL-00000')

    # Error tracking
    SENTRY_DSN = os.getenv('SENTRY_DSN')


class TestingConfig(Config):
    """Configuration used by the test suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
