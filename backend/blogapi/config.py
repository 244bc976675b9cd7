"""Application configuration"""
import re
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")

# nodemailer-style well-known services: MAIL_SERVICE=gmail fills host/port
MAIL_SERVICE_PRESETS = {
    "gmail": ("smtp.gmail.com", 587),
    "outlook": ("smtp-mail.outlook.com", 587),
    "hotmail": ("smtp-mail.outlook.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 587),
}


def parse_duration(value: Union[int, str]) -> int:
    """Parse '3600', '60m', '1h' or '7d' into seconds."""
    if isinstance(value, int):
        return value
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./blogapi.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour
    DATABASE_AUTO_CREATE: bool = True  # create tables from the model registry on startup

    # JWT Authentication
    JWT_SECRET: Optional[str] = None     # required; startup fails without it
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: int = 3600           # login tokens; accepts "1h", "30m", ...

    # Passwords
    BCRYPT_ROUNDS: int = 10

    # Sessions (cookie-backed, logout only)
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_MAX_AGE: int = 86400  # 1 day

    # Mail
    MAIL_SERVICE: Optional[str] = None
    MAIL_HOST: Optional[str] = None
    MAIL_PORT: int = 587
    MAIL_USER: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_USE_TLS: bool = True
    MAIL_TIMEOUT: int = 10  # seconds
    MAIL_VERIFY_ON_STARTUP: bool = False
    APP_BASE_URL: str = "http://localhost:3000"

    # Push notifications (Pusher Channels)
    PUSHER_APP_ID: Optional[str] = None
    PUSHER_KEY: Optional[str] = None
    PUSHER_SECRET: Optional[str] = None
    PUSHER_CLUSTER: str = "mt1"
    PUSHER_HOST: Optional[str] = None  # overrides api-<cluster>.pusher.com
    PUSHER_PORT: Optional[int] = None
    PUSHER_USE_TLS: bool = True
    PUSHER_TIMEOUT: int = 5  # seconds

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENVIRONMENT: str = "development"  # development, production or test
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["100/minute", "1000/hour"]
    RATE_LIMIT_AUTH: str = "10/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    # Blogs
    BLOG_CREATE_REQUIRES_AUTH: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @field_validator("JWT_EXPIRES_IN", mode="before")
    @classmethod
    def _parse_expires_in(cls, value):
        return parse_duration(value)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def mail_host(self) -> Optional[str]:
        """SMTP host, falling back to the MAIL_SERVICE preset"""
        if self.MAIL_HOST:
            return self.MAIL_HOST
        preset = MAIL_SERVICE_PRESETS.get((self.MAIL_SERVICE or "").lower())
        return preset[0] if preset else None

    @property
    def mail_port(self) -> int:
        if not self.MAIL_HOST:
            preset = MAIL_SERVICE_PRESETS.get((self.MAIL_SERVICE or "").lower())
            if preset:
                return preset[1]
        return self.MAIL_PORT


settings = Settings()
