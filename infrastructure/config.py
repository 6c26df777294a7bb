"""Application settings loaded from the environment (and an optional .env file)"""
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """
    Attributes:
        db_url: MongoDB connection string (required)
        db_name: MongoDB database name (required)
        jwt_secret: the one secret used to sign and validate session tokens (required)
        jwt_expire_hours: session token lifetime
        bcrypt_rounds: bcrypt cost factor, None keeps the library default
        smtp_*: credentials and endpoint for the email endpoint
        log_file: file receiving a copy of the logs, empty to disable
        seed_*: bootstrap data created at startup
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    db_url: Optional[str] = None
    db_name: Optional[str] = None
    db_timeout_ms: int = 10000

    # Session tokens
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # Password hashing
    bcrypt_rounds: Optional[int] = None

    # SMTP
    smtp_host: str = ""
    smtp_port: int = 465
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_timeout: float = 30.0

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/server.log"

    # Seeding
    seed_profiles: bool = True
    seed_admin_name: str = "Admin"
    seed_admin_email: Optional[str] = None
    seed_admin_password: Optional[str] = None

    @field_validator("jwt_algorithm")
    @classmethod
    def algorithm_must_be_hmac(cls, v: str) -> str:
        v = v.upper()
        if v not in HMAC_ALGORITHMS:
            raise ValueError(f"jwt_algorithm must be one of {', '.join(HMAC_ALGORITHMS)}")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def rounds_in_bcrypt_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def missing_required(self) -> List[str]:
        """Names of the required environment variables that are unset"""
        missing = []
        for field in ("db_url", "db_name", "jwt_secret"):
            if not getattr(self, field):
                missing.append(field.upper())
        return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()
