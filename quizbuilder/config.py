import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

DEV_SECRET_KEY = "quiz-builder-dev-fallback-secret"


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv("SECRET_KEY") or DEV_SECRET_KEY
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1MB max request body

    # Session cookie
    PERMANENT_SESSION_LIFETIME = timedelta(seconds=int(os.getenv("SESSION_MAX_AGE", 24 * 60 * 60)))
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False

    # Only people who know this secret can register admin accounts
    ADMIN_SECRET = os.getenv("ADMIN_SECRET", "change-me-in-production")

    # Database
    basedir = os.path.abspath(os.path.dirname(__file__))
    instance_path = os.path.join(os.path.dirname(basedir), 'instance')
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL", f"sqlite:///{os.path.join(instance_path, 'quiz_builder.db')}"
    )

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8080))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = "testing-secret"
    ADMIN_SECRET = "testing-admin-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"


# Config dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
