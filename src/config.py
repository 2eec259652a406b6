"""
Centralized configuration with environment variable overrides.

Dialogue policy values, backend connection settings, and session limits
are configurable here. Handlers read them from ``settings`` instead of
hardcoding thresholds.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

BACKEND_MODES = ("http", "memory")


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


@dataclass(frozen=True)
class BusinessConfig:
    """Storefront settings used when rendering replies."""

    name: str = os.getenv("BUSINESS_NAME", "ShopEase Support")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")


@dataclass(frozen=True)
class DialogueConfig:
    """Slot-collection and business policy settings."""

    max_slot_retries: int = _safe_int("MAX_SLOT_RETRIES", "1")
    return_window_days: int = _safe_int("RETURN_WINDOW_DAYS", "14")
    refund_sla_days: int = _safe_int("REFUND_SLA_DAYS", "5")
    complaint_sla_hours: int = _safe_int("COMPLAINT_SLA_HOURS", "72")
    complaint_priority: str = os.getenv("COMPLAINT_PRIORITY", "Normal")
    return_pickup_window: str = os.getenv("RETURN_PICKUP_WINDOW", "2025-09-15 10:00-14:00")
    return_reason: str = os.getenv("RETURN_REASON", "Customer requested return")
    refundable_statuses: tuple[str, ...] = ("shipped", "delivered")


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for the order data store."""

    base_url: str = os.getenv("BACKEND_BASE_URL", "http://localhost:3001")
    timeout_sec: float = _safe_float("BACKEND_TIMEOUT_SEC", "5.0")
    mode: str = os.getenv("BACKEND_MODE", "http")


@dataclass(frozen=True)
class SessionConfig:
    """In-memory session store limits."""

    idle_ttl_sec: float = _safe_float("SESSION_IDLE_TTL_SEC", "3600")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listener settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "4000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    dialogue: DialogueConfig = field(default_factory=DialogueConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    sessions: SessionConfig = field(default_factory=SessionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_name: str = os.getenv("AGENT_NAME", "order-support-assistant")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.dialogue.max_slot_retries < 0:
        raise ValueError(
            f"MAX_SLOT_RETRIES must be >= 0, got {config.dialogue.max_slot_retries}"
        )
    if config.dialogue.return_window_days < 0:
        raise ValueError(
            f"RETURN_WINDOW_DAYS must be >= 0, got {config.dialogue.return_window_days}"
        )
    if config.dialogue.refund_sla_days < 1:
        raise ValueError(
            f"REFUND_SLA_DAYS must be >= 1, got {config.dialogue.refund_sla_days}"
        )
    if config.dialogue.complaint_sla_hours < 1:
        raise ValueError(
            f"COMPLAINT_SLA_HOURS must be >= 1, got {config.dialogue.complaint_sla_hours}"
        )
    if config.backend.timeout_sec <= 0:
        raise ValueError(
            f"BACKEND_TIMEOUT_SEC must be > 0, got {config.backend.timeout_sec}"
        )
    if config.backend.mode not in BACKEND_MODES:
        raise ValueError(
            f"BACKEND_MODE must be one of {BACKEND_MODES}, got {config.backend.mode!r}"
        )
    if config.sessions.idle_ttl_sec < 0:
        raise ValueError(
            f"SESSION_IDLE_TTL_SEC must be >= 0, got {config.sessions.idle_ttl_sec}"
        )
    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
