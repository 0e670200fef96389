"""
Configuration Module
====================
Centralized environment variable loading, validation, and access.
Validates all configuration on first access to fail fast.

NO BUSINESS LOGIC - Pure configuration management only.
"""

import os
import logging
from typing import Optional, Dict, Any
from pathlib import Path
from dotenv import load_dotenv


# ============================================================================
# LOGGING
# ============================================================================

logger = logging.getLogger(__name__)


# ============================================================================
# ENVIRONMENT LOADING
# ============================================================================

def load_environment():
    """
    Load environment variables from .env file if present.
    Safe to call multiple times; existing variables are not overridden.
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
        logger.info("Loaded environment from .env file")
    else:
        logger.debug("No .env file found, using system environment variables")


# Load on module import
load_environment()


# ============================================================================
# CONFIGURATION EXCEPTION
# ============================================================================

class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
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
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_bool_env(key: str, default: bool = False) -> bool:
    """
    Get boolean environment variable.

    Accepts: true/false, yes/no, 1/0 (case-insensitive)
    """
    value = os.getenv(key, "").lower()

    if value in ("true", "yes", "1"):
        return True
    elif value in ("false", "no", "0"):
        return False
    else:
        return default


def _get_int_env(key: str, default: int = None) -> Optional[int]:
    """
    Get integer environment variable.

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
# LEDGER CONFIGURATION
# ============================================================================

PLACE_FAILURE_POLICIES = ("restore", "drop")
AUDIT_SINKS = ("memory", "log")


class LedgerConfig:
    """Order ledger behaviour."""

    def __init__(self):
        # What happens to an order whose placement fails validation after
        # it was taken out of the pending index.
        self.place_failure_policy = _get_optional_env(
            "PLACE_FAILURE_POLICY",
            "restore"
        ).lower()

        if self.place_failure_policy not in PLACE_FAILURE_POLICIES:
            raise ConfigurationError(
                f"Invalid PLACE_FAILURE_POLICY: {self.place_failure_policy}. "
                f"Must be 'restore' or 'drop'"
            )

        self.audit_sink = _get_optional_env("AUDIT_SINK", "memory").lower()

        if self.audit_sink not in AUDIT_SINKS:
            raise ConfigurationError(
                f"Invalid AUDIT_SINK: {self.audit_sink}. "
                f"Must be 'memory' or 'log'"
            )

        self.max_pancakes_per_order = _get_int_env("MAX_PANCAKES_PER_ORDER", 50)

        if self.max_pancakes_per_order <= 0:
            raise ConfigurationError(
                f"MAX_PANCAKES_PER_ORDER must be positive: "
                f"{self.max_pancakes_per_order}"
            )

    @property
    def restore_on_failed_place(self) -> bool:
        return self.place_failure_policy == "restore"


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

class LoggingConfig:
    """Log output configuration."""

    def __init__(self):
        self.log_level = _get_optional_env("LOG_LEVEL", "INFO").upper()

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL: {self.log_level}"
            )

        self.debug_mode = _get_bool_env("DEBUG_MODE", False)


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
            self.ledger = LedgerConfig()
            self.logging = LoggingConfig()

            logger.debug("Configuration loaded and validated successfully")

        except ConfigurationError as e:
            logger.error(f"Configuration error: {str(e)}")
            raise

    def get_safe_summary(self) -> Dict[str, Any]:
        """Get configuration summary."""
        return {
            "ledger": {
                "place_failure_policy": self.ledger.place_failure_policy,
                "audit_sink": self.ledger.audit_sink,
                "max_pancakes_per_order": self.ledger.max_pancakes_per_order,
            },
            "logging": {
                "log_level": self.logging.log_level,
                "debug_mode": self.logging.debug_mode,
            },
        }


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get global configuration instance.
    Initializes on first call.

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
