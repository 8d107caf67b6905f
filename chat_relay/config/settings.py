"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Config:
    TESTING = _flag("TESTING")
    DEBUG = _flag("DEBUG")

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3000"))

    # CORS - comma separated origins, "*" allows any origin
    FRONTEND_URL = os.getenv("FRONTEND_URL", "*")
    CORS_ORIGINS = [
        origin.strip().rstrip("/")
        for origin in FRONTEND_URL.split(",")
        if origin.strip()
    ]

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH", "")
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
    )

    # Session credential (issued by the auth collaborator, verified here)
    SESSION_SECRET = os.getenv("SESSION_SECRET", "")
    SESSION_ISSUER = os.getenv("SESSION_ISSUER", "chat-relay-auth")
    SESSION_AUDIENCE = os.getenv("SESSION_AUDIENCE", "chat-relay")
    SESSION_COOKIE = os.getenv("SESSION_COOKIE", "session")

    # Relay
    # Per-subscriber buffer; a subscriber lagging further behind loses the oldest events
    CHANNEL_CAPACITY: int = int(os.getenv("CHANNEL_CAPACITY", "256"))

    # Postgresql Database settings (Prisma reads DATABASE_URL itself)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    CONVERSATION_MESSAGE_LIMIT: int = int(
        os.getenv("CONVERSATION_MESSAGE_LIMIT", "200")
    )

    # Redis settings (empty REDIS_URL disables the history cache)
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    REDIS_CACHE_TTL: int = int(os.getenv("REDIS_CACHE_TTL", "3600"))
    REDIS_CACHE_LIMIT: int = int(os.getenv("REDIS_CACHE_LIMIT", "50"))


class DevelopmentConfig(Config):
    """Development configuration"""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True


class ProductionConfig(Config):
    """Production configuration"""

    pass


# Configuration dictionary
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.getenv("APP_ENV", "development")
    return config.get(env, config["default"])
