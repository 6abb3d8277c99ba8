"""
Centralized configuration management for backend services.

This module defines Pydantic Settings classes for managing configuration of the
company auth service. It provides a hierarchical settings system with base
settings shared by every service and service-specific overrides.

Configuration Loading:
    Settings are loaded in the following priority order (highest to lowest):
    1. Environment variables
    2. .env file in the project root
    3. Default values defined in the classes

Validation:
    All settings are validated using Pydantic validators to ensure:
    - Type correctness
    - Value constraints (e.g., positive pool sizes and lifetimes)
    - Format requirements (e.g., CORS origins and previous signing keys parsing)

Service Settings Hierarchy:
    BaseServiceSettings (base class)
    └── CompanyAuthServiceSettings

Example:
    ```python
    from common.config.settings import CompanyAuthServiceSettings

    settings = CompanyAuthServiceSettings()
    print(settings.SERVICE_NAME)  # "company-auth-service"
    print(settings.PORT)  # 4000
    print(settings.DATABASE_POOL_SIZE)  # 5 (from base)
    ```

Environment Variables:
    All settings can be overridden via environment variables. For example:
    - ENVIRONMENT=PROD
    - LOG_LEVEL=DEBUG
    - CLIENT_SECRET=...
    - SESSION_PREVIOUS_KEYS=2024-01:old-secret,2024-06:older-secret
"""

import json
from typing import Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings

# Environment that disables the Secure cookie attribute and the reverse proxy root path
LOCAL_ENVIRONMENT = "DEV"


class BaseServiceSettings(BaseSettings):
    """
    Base settings class providing common configuration for all services.

    Attributes:
        SERVICE_NAME (str): Name identifier for the service. Default: "base-service"
        SERVICE_VERSION (str): Version string for the service. Default: "0.0.1"
        PORT (int): Port number the service listens on. Default: 8000

        ENVIRONMENT (str): Deployment environment. Values: "DEV" or "PROD". Default: "DEV"
        DEBUG (bool): Enable debug mode. Default: False
        LOG_LEVEL (str): Logging level. Default: "INFO"

        API_V1_STR (str): API prefix for routes. Default: "/api/v1"
        CORS_ORIGINS (list[str]): Allowed CORS origins, comma-separated string or list.

        DATABASE_URL (str): SQLAlchemy URL of the service database. When empty the
            URL is assembled from the POSTGRES_* environment variables.
        DATABASE_POOL_SIZE (int): Connections kept in the pool. Default: 5
        DATABASE_MAX_OVERFLOW (int): Overflow connections beyond pool_size. Default: 5
        DATABASE_POOL_TIMEOUT (int): Seconds to wait for a pooled connection. Default: 10
        DATABASE_POOL_RECYCLE (int): Seconds before a connection is recycled. Default: 3600

    Note:
        - CORS_ORIGINS can be set as a comma-separated string or a list
        - Pool fields are validated to be non-negative integers
    """

    # Service Information (defaults)
    SERVICE_NAME: str = "base-service"
    SERVICE_VERSION: str = "0.0.1"
    PORT: int = 8000

    # Global Configuration
    ENVIRONMENT: str = LOCAL_ENVIRONMENT  # Can be "DEV" or "PROD"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_V1_STR: str = "/api/v1"

    # CORS Configuration
    CORS_ORIGINS: Any = ""

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> list[str]:
        """
        Assemble CORS origins from string or list format.

        Args:
            v: Input value that can be a string, list, or other type.

        Returns:
            List of CORS origin strings with whitespace stripped. Empty list if
            input is empty or invalid.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        return []

    # Database Configuration
    DATABASE_URL: str = ""
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 5
    DATABASE_POOL_TIMEOUT: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    @field_validator(
        "DATABASE_POOL_SIZE",
        "DATABASE_MAX_OVERFLOW",
        "DATABASE_POOL_TIMEOUT",
        "DATABASE_POOL_RECYCLE",
        mode="before",
    )
    @classmethod
    def validate_positive_int(cls, v: Any, info: ValidationInfo) -> int | None:
        """
        Validate that database pool configuration fields are positive integers.

        Args:
            v: Input value to validate. Can be int, str, or None.
            info: Pydantic ValidationInfo object containing field metadata.

        Returns:
            Validated integer value, or None if input is None.

        Raises:
            ValueError: If the value cannot be converted to an integer or is negative.
        """
        if v is None:
            return None
        try:
            int_val = int(v)
            if int_val < 0:
                msg = f"{info.field_name} must be a positive integer"
                raise ValueError(msg)
            return int_val
        except (ValueError, TypeError) as e:
            msg = f"{info.field_name} must be a valid positive integer, got: {v}"
            raise ValueError(
                msg
            ) from e

    @property
    def is_local(self) -> bool:
        """True when running in local development (no TLS, no reverse proxy)."""
        return self.ENVIRONMENT.upper() == LOCAL_ENVIRONMENT

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


class CompanyAuthServiceSettings(BaseServiceSettings):
    """
    Settings configuration for the company auth service.

    This class extends BaseServiceSettings with the OAuth client registration,
    the provider endpoints, and the session token parameters.

    Inherited Attributes:
        All attributes from BaseServiceSettings are available with these overrides:
        - SERVICE_NAME: "company-auth-service"
        - PORT: 4000
        - API_V1_STR: "" (routes are served at /auth/...)

    Additional Attributes:
        PROVIDER_BASE_URL (str): Base URL of the external authorization server.
        CLIENT_ID (str): OAuth client identifier registered with the provider.
        CLIENT_SECRET (str): Shared client secret. Keys the callback HMAC and,
            unless SESSION_SECRET is set, the session token signatures.
        REDIRECT_URI (str): Redirect URI registered with the provider.
        APP_URL (str): Public URL of the application, used as the callback
            redirect target when the provider omits redirect_to.
        PROVIDER_TIMEOUT_SECONDS (float): Timeout applied to every provider call.
        PROVIDER_RETRY_BACKOFF_SECONDS (float): Base delay before the single retry
            of an idempotent provider call.

        SESSION_SECRET (str): Current session signing secret (defaults to CLIENT_SECRET).
        SESSION_KEY_ID (str): Key identifier written to the token header.
        SESSION_PREVIOUS_KEYS (dict[str, str]): Retired signing keys still
            accepted for verification, keyed by key identifier. Accepts a JSON
            object or "kid:secret,kid:secret".
        SESSION_TTL_SECONDS (int): Session token lifetime. Default: 7 hours.
        REFRESH_TTL_SECONDS (int): Refresh token lifetime. Default: 30 days.
        CALLBACK_TOLERANCE_MS (int): Maximum callback age. Default: 5 minutes.

    Note:
        - CLIENT_SECRET must never be logged
        - Rotating SESSION_SECRET: move the old kid/secret to SESSION_PREVIOUS_KEYS,
          set a new SESSION_KEY_ID and SESSION_SECRET, and drop the old key once
          REFRESH_TTL_SECONDS has elapsed
    """

    SERVICE_NAME: str = "company-auth-service"
    SERVICE_VERSION: str = "0.0.1"
    PORT: int = 4000
    API_V1_STR: str = ""

    # OAuth client registration
    PROVIDER_BASE_URL: str = "https://api.genuka.com"
    CLIENT_ID: str = ""
    CLIENT_SECRET: str = ""
    REDIRECT_URI: str = ""
    APP_URL: str = "http://localhost:4000"
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    PROVIDER_RETRY_BACKOFF_SECONDS: float = 0.5

    # Session tokens
    SESSION_SECRET: str = ""
    SESSION_KEY_ID: str = "k1"
    SESSION_PREVIOUS_KEYS: Any = {}
    SESSION_TTL_SECONDS: int = 60 * 60 * 7
    REFRESH_TTL_SECONDS: int = 60 * 60 * 24 * 30
    CALLBACK_TOLERANCE_MS: int = 5 * 60 * 1000

    @field_validator("SESSION_PREVIOUS_KEYS", mode="before")
    @classmethod
    def parse_previous_keys(cls, v: Any) -> dict[str, str]:
        """
        Parse retired signing keys from a JSON object or "kid:secret" pairs.

        Example:
            ```python
            parse_previous_keys('{"k0": "old"}')  # {"k0": "old"}
            parse_previous_keys("k0:old, k-1:older")  # {"k0": "old", "k-1": "older"}
            ```
        """
        if isinstance(v, dict):
            return {str(k): str(s) for k, s in v.items()}
        if not v:
            return {}
        if isinstance(v, str):
            stripped = v.strip()
            if stripped.startswith("{"):
                return {str(k): str(s) for k, s in json.loads(stripped).items()}
            keys: dict[str, str] = {}
            for pair in stripped.split(","):
                if not pair.strip():
                    continue
                kid, sep, secret = pair.partition(":")
                if not sep or not kid.strip() or not secret.strip():
                    msg = f"SESSION_PREVIOUS_KEYS entry must be 'kid:secret', got: {pair!r}"
                    raise ValueError(msg)
                keys[kid.strip()] = secret.strip()
            return keys
        msg = "SESSION_PREVIOUS_KEYS must be a mapping or a string"
        raise ValueError(msg)

    @field_validator("SESSION_TTL_SECONDS", "REFRESH_TTL_SECONDS", "CALLBACK_TOLERANCE_MS")
    @classmethod
    def validate_lifetimes(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            msg = f"{info.field_name} must be at least 1"
            raise ValueError(msg)
        return v

    @property
    def session_secret(self) -> str:
        """Secret used to sign new session tokens."""
        return self.SESSION_SECRET or self.CLIENT_SECRET

    def missing_required(self) -> list[str]:
        """Names of required settings that are empty."""
        required = {
            "CLIENT_ID": self.CLIENT_ID,
            "CLIENT_SECRET": self.CLIENT_SECRET,
            "DATABASE_URL": self.DATABASE_URL,
        }
        return [name for name, value in required.items() if not value]
