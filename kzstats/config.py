import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

class Config:
    """Stats API configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///kzstats.db')
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', 50))
    DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', 50))  # 100 connections at most
    DB_POOL_TIMEOUT = float(os.getenv('DB_POOL_TIMEOUT', 30))

    # Logging settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # HTTP settings
    API_HOST = os.getenv('API_HOST', '127.0.0.1')
    API_PORT = int(os.getenv('API_PORT', 8000))
    API_TOKEN = os.getenv('API_TOKEN', '')
    API_TOKEN_HEADER = os.getenv('API_TOKEN_HEADER', 'X-Api-Key')

    # Query settings
    DEFAULT_LIMIT = int(os.getenv('DEFAULT_LIMIT', 100))
    MAX_LIMIT = int(os.getenv('MAX_LIMIT', 500))

    @classmethod
    def get_async_database_url(cls, database_url: Optional[str] = None) -> str:
        """Get the database URL (DATABASE_URL by default) with an async driver"""
        database_url = database_url or cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url

    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if cls.DEFAULT_LIMIT < 1 or cls.MAX_LIMIT < 1:
            raise ValueError("DEFAULT_LIMIT and MAX_LIMIT must be positive")
        if cls.DEFAULT_LIMIT > cls.MAX_LIMIT:
            raise ValueError("DEFAULT_LIMIT must not exceed MAX_LIMIT")
        if cls.DB_POOL_SIZE < 1:
            raise ValueError("DB_POOL_SIZE must be positive")
        if not cls.API_TOKEN_HEADER:
            raise ValueError("API_TOKEN_HEADER must not be empty")
