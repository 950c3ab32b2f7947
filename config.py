"""
Configuration Module
====================
Centralized environment variable loading, validation, and access.
Validates all required configuration at startup to fail fast.

NO BUSINESS LOGIC - Pure configuration management only.
"""

import os
import logging
from typing import Optional, Dict, Any
from pathlib import Path
from dotenv import load_dotenv

from payload import EntryMapping


# ============================================================================
# LOGGING
# ============================================================================

logger = logging.getLogger(__name__)


# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_ACTION_URL = (
    "https://docs.google.com/forms/d/e/"
    "1FAIpQLSckm85UMzeIGhUY10Fq6VcN8VVJPfk2e3dq9IcKU-MCVFaNVg/formResponse"
)

DEFAULT_ENTRY_IDS = {
    "name": "entry.1013124254",
    "email": "entry.153116173",
    "phone": "entry.1123782137",
    "address": "entry.1776952615",
    "order_details": "entry.684873411",
}

SUPPORTED_LANGUAGES = ("vn", "en")


# ============================================================================
# ENVIRONMENT LOADING
# ============================================================================

def load_environment():
    """
    Load environment variables from .env file if present.
    Safe to call multiple times.
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
        logger.info("Loaded environment from .env file")
    else:
        logger.info("No .env file found, using system environment variables")


# Load on module import
load_environment()


# ============================================================================
# CONFIGURATION EXCEPTION
# ============================================================================

class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def _get_optional_env(key: str, default: str = None) -> Optional[str]:
    """
    Get optional environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    value = os.getenv(key, default)
    return value.strip() if value else default


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on", "enabled")


def _get_int_env(key: str, default: int = None) -> Optional[int]:
    """
    Get integer environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Integer value or None

    Raises:
        ConfigurationError: If value is not a valid integer
    """
    value = os.getenv(key)

    if not value:
        return default

    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid integer value for {key}: {value}"
        )


# ============================================================================
# ORDER INTAKE CONFIGURATION
# ============================================================================

class IntakeConfig:
    """Order-intake endpoint configuration."""

    def __init__(self):
        self.action_url = _get_optional_env(
            "ORDER_FORM_ACTION_URL",
            DEFAULT_ACTION_URL
        )

        if not self.action_url.startswith(("https://", "http://")):
            raise ConfigurationError(
                f"Invalid ORDER_FORM_ACTION_URL: {self.action_url}. "
                f"Must be an http(s) URL"
            )

        # Opaque field identifiers expected by the endpoint
        self.entry_ids: Dict[str, str] = {
            field: _get_optional_env(f"ORDER_FORM_ENTRY_{field.upper()}", default)
            for field, default in DEFAULT_ENTRY_IDS.items()
        }

        if len(set(self.entry_ids.values())) != len(self.entry_ids):
            raise ConfigurationError(
                "ORDER_FORM_ENTRY_* identifiers must be unique"
            )

        self.request_timeout = _get_int_env("ORDER_REQUEST_TIMEOUT", 30)

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"ORDER_REQUEST_TIMEOUT must be positive, got {self.request_timeout}"
            )


# ============================================================================
# LOCALE CONFIGURATION
# ============================================================================

class LocaleConfig:
    """Language and currency formatting configuration."""

    def __init__(self):
        self.default_language = _get_optional_env(
            "ORDER_DEFAULT_LANGUAGE",
            "vn"
        ).lower()

        if self.default_language not in SUPPORTED_LANGUAGES:
            raise ConfigurationError(
                f"Invalid ORDER_DEFAULT_LANGUAGE: {self.default_language}. "
                f"Must be one of {', '.join(SUPPORTED_LANGUAGES)}"
            )

        self.currency_symbol = _get_optional_env("ORDER_CURRENCY_SYMBOL", "₫")
        # Not stripped: a single space is a valid separator
        self.thousands_separator = os.getenv("ORDER_THOUSANDS_SEPARATOR") or "."
        self.decimal_separator = os.getenv("ORDER_DECIMAL_SEPARATOR") or ","

        if self.thousands_separator == self.decimal_separator:
            raise ConfigurationError(
                "ORDER_THOUSANDS_SEPARATOR and ORDER_DECIMAL_SEPARATOR must differ"
            )


# ============================================================================
# OBSERVABILITY CONFIGURATION
# ============================================================================

class ObservabilityConfig:
    """Logging and metrics configuration."""

    def __init__(self):
        self.log_level = _get_optional_env("LOG_LEVEL", "INFO").upper()

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL: {self.log_level}"
            )

        self.enable_metrics = _get_bool_env("ENABLE_METRICS", True)


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class Config:
    """
    Main configuration container.
    Loads and validates all configuration on initialization.
    """

    def __init__(self):
        """
        Initialize and validate all configuration.

        Raises:
            ConfigurationError: If any configuration value is invalid
        """
        try:
            self.intake = IntakeConfig()
            self.locale = LocaleConfig()
            self.observability = ObservabilityConfig()

            logger.info("Configuration loaded and validated successfully")

        except ConfigurationError as e:
            logger.error(f"Configuration error: {str(e)}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error loading configuration: {str(e)}")
            raise ConfigurationError(f"Configuration initialization failed: {str(e)}")

    def get_safe_summary(self) -> Dict[str, Any]:
        """
        Get configuration summary for startup logs.

        Returns:
            Dictionary with non-sensitive configuration
        """
        return {
            "action_url": self.intake.action_url,
            "entry_ids": dict(self.intake.entry_ids),
            "request_timeout": self.intake.request_timeout,
            "default_language": self.locale.default_language,
            "currency_symbol": self.locale.currency_symbol,
            "log_level": self.observability.log_level,
            "metrics": self.observability.enable_metrics,
        }


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get global configuration instance.
    Initializes on first call.

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config

    if _config is None:
        _config = Config()

    return _config


def reload_config() -> Config:
    """
    Reload configuration from environment.
    Useful for testing or dynamic reconfiguration.
    """
    global _config
    load_environment()
    _config = Config()
    logger.info("Configuration reloaded")
    return _config


# ============================================================================
# CONVENIENCE GETTERS
# ============================================================================

def get_entry_mapping():
    """Build the endpoint field mapping from configuration."""
    return EntryMapping(**get_config().intake.entry_ids)


def is_metrics_enabled() -> bool:
    """Check whether Prometheus metrics should be recorded."""
    return get_config().observability.enable_metrics


# ============================================================================
# VALIDATION FUNCTION
# ============================================================================

def validate_configuration():
    """
    Validate configuration and log summary.
    Useful for startup checks.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config = get_config()
    summary = config.get_safe_summary()

    logger.info("Configuration Summary:")
    logger.info(f"  Endpoint: {summary['action_url']}")
    logger.info(f"  Request Timeout: {summary['request_timeout']}s")
    logger.info(f"  Default Language: {summary['default_language']}")
    logger.info(f"  Currency Symbol: {summary['currency_symbol']}")
    logger.info(f"  Log Level: {summary['log_level']}")
    logger.info(f"  Metrics: {'enabled' if summary['metrics'] else 'disabled'}")

    logger.info("Configuration validation complete")
