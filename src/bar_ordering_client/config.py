"""Runtime configuration read from environment variables."""

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError

from bar_ordering_client.services.order_feed import FallbackPolicy
from bar_ordering_client.services.polling import (
    CUSTOMER_POLL_INTERVAL_SECONDS,
    STAFF_POLL_INTERVAL_SECONDS,
)
from bar_ordering_client.services.status_transition_service import StatusFailureMode

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    """Service settings with their defaults."""

    api_base_url: str = Field(default="http://localhost:8090", min_length=1)
    api_timeout_seconds: float = Field(default=10.0, gt=0)
    public_base_url: str = Field(default="http://localhost:5173", min_length=1)
    staff_poll_interval_seconds: float = Field(default=STAFF_POLL_INTERVAL_SECONDS, gt=0)
    customer_poll_interval_seconds: float = Field(default=CUSTOMER_POLL_INTERVAL_SECONDS, gt=0)
    status_failure_mode: StatusFailureMode = StatusFailureMode.SURFACE_ERROR
    staff_feed_fallback: FallbackPolicy = FallbackPolicy.KEEP_LAST
    credentials_path: str | None = None
    enforce_staff_login: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = Field(default=8001, gt=0, lt=65536)


# Environment variable -> Settings field
_ENV_FIELDS = {
    "API_BASE_URL": "api_base_url",
    "API_TIMEOUT_SECONDS": "api_timeout_seconds",
    "PUBLIC_BASE_URL": "public_base_url",
    "STAFF_POLL_INTERVAL_SECONDS": "staff_poll_interval_seconds",
    "CUSTOMER_POLL_INTERVAL_SECONDS": "customer_poll_interval_seconds",
    "STATUS_FAILURE_MODE": "status_failure_mode",
    "STAFF_FEED_FALLBACK": "staff_feed_fallback",
    "CREDENTIALS_PATH": "credentials_path",
    "LOG_LEVEL": "log_level",
    "ENVIRONMENT": "environment",
    "HOST": "host",
    "PORT": "port",
}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Variables to read, defaults to ``os.environ``

    Returns:
        Validated settings

    Raises:
        ValueError: If any variable has an invalid value
    """
    env = os.environ if environ is None else environ

    values: dict[str, object] = {}
    for variable, field in _ENV_FIELDS.items():
        raw = env.get(variable)
        if raw is not None and raw.strip():
            values[field] = raw.strip()

    raw_flag = env.get("ENFORCE_STAFF_LOGIN")
    if raw_flag is not None:
        values["enforce_staff_login"] = _parse_flag("ENFORCE_STAFF_LOGIN", raw_flag)

    if "status_failure_mode" in values:
        values["status_failure_mode"] = str(values["status_failure_mode"]).lower()
    if "staff_feed_fallback" in values:
        values["staff_feed_fallback"] = str(values["staff_feed_fallback"]).lower()

    try:
        settings = Settings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    logger.debug(f"Settings loaded for environment {settings.environment}")
    return settings


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")
