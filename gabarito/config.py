"""
Configuration management for the Gabarito backend.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent.parent
PACKAGE_DIR = Path(__file__).parent

# Security
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "10"))

# Storage ("supabase" or "memory")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "supabase")
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

# Public distribution links
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
LINK_TOKEN_BYTES = int(os.getenv("LINK_TOKEN_BYTES", "9"))
MIN_LINK_TOKEN_BYTES = 6

# Auth endpoint throttling
AUTH_RATE_LIMIT = int(os.getenv("AUTH_RATE_LIMIT", "20"))
AUTH_RATE_WINDOW_SECONDS = int(os.getenv("AUTH_RATE_WINDOW_SECONDS", "900"))
# Reverse proxies in front of the app whose X-Forwarded-For is trusted
TRUSTED_PROXY_HOPS = int(os.getenv("TRUSTED_PROXY_HOPS", "0"))

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class Config:
    """Application configuration class."""

    def __init__(self):
        self.secret_key = SECRET_KEY
        self.jwt_secret = JWT_SECRET
        self.session_ttl_days = SESSION_TTL_DAYS
        self.bcrypt_log_rounds = BCRYPT_LOG_ROUNDS
        self.storage_backend = STORAGE_BACKEND
        self.supabase_url = SUPABASE_URL
        self.supabase_service_key = SUPABASE_SERVICE_KEY
        self.public_base_url = PUBLIC_BASE_URL
        self.link_token_bytes = LINK_TOKEN_BYTES
        self.auth_rate_limit = AUTH_RATE_LIMIT
        self.auth_rate_window_seconds = AUTH_RATE_WINDOW_SECONDS
        self.trusted_proxy_hops = TRUSTED_PROXY_HOPS
        self.cors_origins = CORS_ORIGINS
        self.log_level = LOG_LEVEL

    def to_dict(self):
        return {
            "secret_key": self.secret_key,
            "jwt_secret": self.jwt_secret,
            "session_ttl_days": self.session_ttl_days,
            "bcrypt_log_rounds": self.bcrypt_log_rounds,
            "storage_backend": self.storage_backend,
            "supabase_url": self.supabase_url,
            "supabase_service_key": self.supabase_service_key,
            "public_base_url": self.public_base_url,
            "link_token_bytes": self.link_token_bytes,
            "auth_rate_limit": self.auth_rate_limit,
            "auth_rate_window_seconds": self.auth_rate_window_seconds,
            "trusted_proxy_hops": self.trusted_proxy_hops,
            "cors_origins": self.cors_origins,
            "log_level": self.log_level,
        }

    def update(self, data: dict):
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)
        return self


# Global config instance
config = Config()
