"""Optional Sentry error reporting, switched on by ``SENTRY_DSN``."""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)

_initialized = False


def _sample_rate(env_var: str) -> float:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return 0.0
    try:
        value = float(raw_value)
    except ValueError:
        logger.warning("%s is not a valid float (got %r); sampling disabled", env_var, raw_value)
        return 0.0
    if not 0.0 <= value <= 1.0:
        logger.warning("%s must be between 0 and 1 (got %s); sampling disabled", env_var, value)
        return 0.0
    return value


def sentry_enabled() -> bool:
    return _initialized


def init_sentry() -> None:
    global _initialized

    if _initialized:
        return
    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn:
        logger.info("SENTRY_DSN not provided; skipping Sentry initialization.")
        return

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        traces_sample_rate=_sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=_sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
    )
    _initialized = True
    logger.info("Sentry enabled for environment %s", environment or "<default>")


def capture_message(message: str):
    return sentry_sdk.capture_message(message, level="info")
