"""
Centralized configuration management for backend services.

This module provides a unified interface for accessing service-specific configuration
settings. It selects the appropriate settings class based on the service name, so
each service gets its correct configuration.

The configuration system uses Pydantic Settings, which loads values from:
    1. Environment variables (highest priority)
    2. .env file in the project root
    3. Default values defined in the settings classes

Service-Specific Settings:
    - CompanyAuthServiceSettings: Configuration for company-auth-service
    - BaseServiceSettings: Base configuration shared by all services

Example:
    ```python
    from common.config import get_settings

    settings = get_settings("company-auth-service")
    print(settings.SERVICE_NAME)  # "company-auth-service"
    print(settings.PORT)  # 4000
    ```
"""

from common.config.settings import (
    LOCAL_ENVIRONMENT,
    BaseServiceSettings,
    CompanyAuthServiceSettings,
)


def get_settings(service_name: str | None = None) -> BaseServiceSettings:
    """
    Get settings instance for the specified service.

    Service names are matched loosely: any name containing "auth" resolves to
    CompanyAuthServiceSettings.

    Args:
        service_name: Name of the service to get settings for. Can be:
            - "company-auth-service" or any string containing "auth"
            - None or any other value returns BaseServiceSettings

    Returns:
        Instance of the appropriate settings class.

    Example:
        ```python
        settings = get_settings("company-auth-service")
        settings = get_settings("auth")  # Returns CompanyAuthServiceSettings
        settings = get_settings()  # Returns BaseServiceSettings
        ```

    Note:
        - Settings are loaded from environment variables and .env file
        - Each call returns a new instance (settings are not cached)
        - Service name matching is case-insensitive
    """
    if service_name and "auth" in service_name.lower():
        return CompanyAuthServiceSettings()
    # Default to base settings
    return BaseServiceSettings()


__all__ = [
    "LOCAL_ENVIRONMENT",
    "BaseServiceSettings",
    "CompanyAuthServiceSettings",
    "get_settings",
]
