"""
Common logging configuration for backend services.

This module provides centralized logging configuration using loguru, ensuring
consistent logging behavior across services. It configures console and, when
enabled, file-based logging with rotation and retention policies.

Features:
    - Console logging with colorized output for development
    - Optional file-based logging with automatic rotation and compression
    - Service-specific log files for better organization
    - Configurable log levels via environment variables
    - Secret masking: values of known credential fields never reach a sink

Log Files (when LOG_TO_FILES is enabled):
    - {service_name}.log: All logs at configured level (default: INFO)
    - {service_name}-error.log: Only ERROR level logs

Example:
    ```python
    from common.logging import setup_logging

    setup_logging("company-auth-service")

    from loguru import logger
    logger.info("Service started successfully")
    ```
"""

import os
from pathlib import Path
import re
import sys
from typing import Any

from loguru import logger

from common.config import get_settings

# key=value or "key": "value" pairs whose value must never be written to a sink
_SECRET_PATTERN = re.compile(
    r"""(?P<key>\b(?:access_token|refresh_token|client_secret|hmac|code)["']?\s*[=:]\s*["']?)"""
    r"""(?P<value>[^"'&,\s}]+)""",
    re.IGNORECASE,
)


def mask_secrets(message: str) -> str:
    """
    Replace the values of credential-like fields with a fixed mask.

    Example:
        ```python
        mask_secrets("refresh_token=abc123&client_id=x")
        # "refresh_token=***&client_id=x"
        ```
    """
    return _SECRET_PATTERN.sub(lambda m: f"{m.group('key')}***", message)


def _patch_record(record: dict[str, Any]) -> None:
    record["message"] = mask_secrets(record["message"])


def setup_logging(service_name: str | None = None) -> None:
    """
    Configure logging for the application using loguru.

    Args:
        service_name: Optional name of the service (e.g., "company-auth-service").
            If provided, log files will be named accordingly.

    Side Effects:
        - Removes previously configured loguru handlers
        - Adds a console handler and, unless LOG_TO_FILES=false, two file handlers
        - Creates the 'logs' directory when file logging is enabled
        - Installs a patcher that masks credential values in every message

    Note:
        - This function should be called early in the application startup process
        - The 'logs' directory is created relative to the current working directory
    """

    settings = get_settings(service_name)

    # Remove default handler
    logger.remove()
    logger.configure(patcher=_patch_record)

    # Add console handler with custom format
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>",
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    if os.getenv("LOG_TO_FILES", "true").lower() != "true":
        return

    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)

    base_name = service_name or "app"
    file_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"

    logger.add(
        logs_dir / f"{base_name}-error.log",
        format=file_format,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )

    logger.add(
        logs_dir / f"{base_name}.log",
        format=file_format,
        level=settings.LOG_LEVEL,
        rotation="50 MB",
        retention="7 days",
        compression="zip",
    )
