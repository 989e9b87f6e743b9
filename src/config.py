"""
Centralized configuration with environment variable overrides.

All allocation thresholds, collaborator endpoints, and email settings
are configurable here. Nothing is hardcoded in allocator or client logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from src.logging_context import LOG_FORMAT, install_booking_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

VALID_ALLOCATION_STATUSES = frozenset(
    {"assigned", "confirmed", "completed", "cancelled", "rejected"}
)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _csv_tuple(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma-separated env var into a tuple of lowercase items."""
    raw = os.getenv(env_var, default)
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AllocationConfig:
    """Allocator behaviour and collaborator call limits."""

    collaborator_timeout_sec: float = _safe_float("COLLABORATOR_TIMEOUT_SEC", "5.0")
    # Allocation statuses that do not count toward a professional's workload.
    closed_allocation_statuses: tuple[str, ...] = _csv_tuple(
        "OPEN_ALLOCATION_EXCLUDED_STATUSES", "completed,rejected"
    )


@dataclass(frozen=True)
class DirectoryConfig:
    """Identity directory (professional records) endpoint."""

    api_base: str = os.getenv("DIRECTORY_API_BASE", "")
    timeout_sec: float = _safe_float("DIRECTORY_TIMEOUT_SEC", "5.0")


@dataclass(frozen=True)
class NotificationConfig:
    """Transactional email settings (Brevo)."""

    brevo_api_key: str = os.getenv("BREVO_API_KEY", "")
    brevo_api_url: str = os.getenv("BREVO_API_URL", "https://api.brevo.com/v3/smtp/email")
    sender_email: str = os.getenv("SENDER_EMAIL", "bookings@carwash.example.com")
    sender_name: str = os.getenv("SENDER_NAME", "CarWash Booking App")
    display_timezone: str = os.getenv("DISPLAY_TIMEZONE", "Asia/Kolkata")
    outbox_max_size: int = _safe_int("OUTBOX_MAX_SIZE", "1000")
    send_timeout_sec: float = _safe_float("EMAIL_SEND_TIMEOUT_SEC", "10.0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "carwash-allocator")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.allocation.collaborator_timeout_sec <= 0:
        raise ValueError(
            "COLLABORATOR_TIMEOUT_SEC must be > 0, "
            f"got {config.allocation.collaborator_timeout_sec}"
        )
    unknown = set(config.allocation.closed_allocation_statuses) - VALID_ALLOCATION_STATUSES
    if unknown:
        raise ValueError(
            "OPEN_ALLOCATION_EXCLUDED_STATUSES contains unknown statuses: "
            f"{sorted(unknown)}"
        )
    if config.directory.timeout_sec <= 0:
        raise ValueError(
            f"DIRECTORY_TIMEOUT_SEC must be > 0, got {config.directory.timeout_sec}"
        )
    if config.notifications.outbox_max_size < 1:
        raise ValueError(
            f"OUTBOX_MAX_SIZE must be >= 1, got {config.notifications.outbox_max_size}"
        )
    if config.notifications.send_timeout_sec <= 0:
        raise ValueError(
            "EMAIL_SEND_TIMEOUT_SEC must be > 0, "
            f"got {config.notifications.send_timeout_sec}"
        )
    try:
        ZoneInfo(config.notifications.display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"DISPLAY_TIMEZONE is not a known timezone: {config.notifications.display_timezone!r}"
        ) from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_booking_id_filter()
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
