"""Error reporting for failures the bot recovers from without telling the user."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_sentry_enabled = False


def init_telemetry(dsn: str | None) -> bool:
    """Start forwarding captured exceptions to Sentry. Returns False without a DSN."""
    global _sentry_enabled
    if not dsn:
        return False
    try:
        import sentry_sdk
    except ImportError:
        raise ImportError(
            "The 'sentry-sdk' package is required to report errors to Sentry. "
            "Install it with: pip install 'changeset-bot[sentry]'"
        )
    sentry_sdk.init(dsn=dsn)
    _sentry_enabled = True
    return True


def capture_exception(err: BaseException) -> None:
    logger.error("Unexpected error: %s", err, exc_info=err)
    if _sentry_enabled:
        # Imported here because sentry-sdk is optional; init_telemetry already checked it.
        import sentry_sdk

        sentry_sdk.capture_exception(err)
