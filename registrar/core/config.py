# registrar/core/config.py - Centralized settings management using Pydantic
from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import List, Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    # Application Environment
    ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, ge=1, le=65535, description="API port")
    API_TITLE: str = Field(default="School Registration API", description="API title")
    API_VERSION: str = Field(default="1.0.0", description="API version")

    # Database Configuration
    DATABASE_URL: Optional[str] = Field(default=None, description="Full database URL, overrides DB_* parts")
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, ge=1, le=65535, description="Database port")
    DB_USER: str = Field(default="registrar", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")
    DB_NAME: str = Field(default="school_registration", description="Database name")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")
    DATABASE_POOL_SIZE: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    DATABASE_MAX_OVERFLOW: int = Field(default=0, ge=0, le=100, description="Max overflow connections")
    DATABASE_POOL_TIMEOUT: int = Field(default=30, ge=1, le=300, description="Pool timeout in seconds")
    DATABASE_POOL_RECYCLE: int = Field(default=3600, ge=300, description="Pool recycle time in seconds")
    AUTO_CREATE_TABLES: bool = Field(default=True, description="Create tables and seed reference data at startup")

    # JWT Configuration
    JWT_SECRET: str = Field(..., min_length=32, description="JWT signing secret")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=1440, ge=1, le=10080, description="Access token expiry")
    JWT_ISSUER: str = Field(default="school-registration", description="JWT issuer")
    JWT_AUDIENCE: str = Field(default="school-registration-staff", description="JWT audience")

    # Security Configuration
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=15, description="BCrypt rounds")

    # CORS Configuration
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="CORS allowed origins"
    )

    # File Upload Configuration
    UPLOAD_DIR: str = Field(default="uploads/documents", description="Directory for uploaded documents")
    MAX_FILE_SIZE_MB: int = Field(default=5, ge=1, le=100, description="Max file size in MB")
    MAX_FILES_PER_REQUEST: int = Field(default=5, ge=1, le=20, description="Max files per enrollment")
    ALLOWED_FILE_TYPES: List[str] = Field(
        default=[".jpg", ".jpeg", ".png", ".pdf", ".doc", ".docx"],
        description="Allowed file extensions"
    )

    # Registration rules
    MATRICULE_BASE: int = Field(default=240000, ge=0, description="Matricule preceding the first one issued")
    PAYMENT_REQUIRE_SETTLEMENT: bool = Field(
        default=False,
        description="Record payments as pending until explicitly settled"
    )

    # First-run bootstrap account
    BOOTSTRAP_ADMIN_USERNAME: str = Field(default="admin", description="Bootstrap admin username")
    BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = Field(default=None, description="Bootstrap admin password (first run only)")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra environment variables

    @validator("ENV")
    def validate_environment(cls, v):
        allowed_envs = ["dev", "development", "staging", "prod", "production"]
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENV must be one of: {allowed_envs}")
        return v.lower()

    @validator("JWT_SECRET")
    def validate_jwt_secret(cls, v, values):
        if values.get("ENV") in ["prod", "production"] and v.startswith("change_me"):
            raise ValueError("JWT_SECRET must be changed in production")
        return v

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        if v is None:
            return v
        allowed_prefixes = (
            "postgresql://",
            "postgresql+psycopg://",
            "postgresql+psycopg2://",
            "sqlite://",
        )
        if not v.startswith(allowed_prefixes):
            raise ValueError("DATABASE_URL must be a postgresql or sqlite connection string")
        return v

    @validator("DB_PASSWORD")
    def validate_db_password(cls, v, values):
        if values.get("ENV") in ["prod", "production"] and not values.get("DATABASE_URL") and not v:
            raise ValueError("DB_PASSWORD must be set in production")
        return v

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed_levels}")
        return v.upper()

    @validator("ALLOWED_FILE_TYPES")
    def normalize_file_types(cls, v):
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENV in ["dev", "development"]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENV in ["prod", "production"]

    @property
    def database_url(self) -> str:
        """Explicit DATABASE_URL, or one assembled from the DB_* parts"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = quote_plus(self.DB_PASSWORD)
        return f"postgresql+psycopg://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes"""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    def safe_database_url(self) -> str:
        """Database location without credentials, for logs"""
        url = self.database_url
        return url.split("@")[-1] if "@" in url else url


def get_settings() -> Settings:
    """Load settings from the environment; raises with a readable message when incomplete"""
    try:
        return Settings()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("Please check your .env file and environment variables")
        raise


__all__ = ["Settings", "get_settings"]
