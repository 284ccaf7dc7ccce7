"""Utility for logging upstream API requests when ODPT_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
SENSITIVE_PARAMS = {"acl:consumerkey"}


def should_log_requests() -> bool:
    """Check if request logging is enabled via ODPT_LOG_REQUESTS environment variable."""
    return os.getenv("ODPT_LOG_REQUESTS", "").lower() == "true"


def _redact(values: dict[str, Any], sensitive_keys: set[str]) -> dict[str, Any]:
    """Replace values of sensitive keys (matched case-insensitively)."""
    return {k: REDACTED if k.lower() in sensitive_keys else v for k, v in values.items()}


def _build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with (redacted) query parameters."""
    if not params:
        return url
    safe_params = _redact(params, SENSITIVE_PARAMS)
    param_str = "&".join(f"{k}={v}" for k, v in sorted(safe_params.items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    attempt: int = 0,
) -> None:
    """Log API request details if ODPT_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        params: Query parameters (optional, the consumer key is redacted).
        headers: Request headers (optional, sensitive headers are redacted).
        attempt: Zero-based retry attempt of this request.
    """
    if not should_log_requests():
        return

    full_url = _build_url_with_params(url, params)
    log_parts = [f"{method} {full_url}"]
    if attempt:
        log_parts.append(f"Retry attempt: {attempt}")

    if headers:
        log_parts.append(
            f"Headers: {json.dumps(_redact(headers, SENSITIVE_HEADERS), indent=2)}"
        )

    logger.info("API Request:\n" + "\n".join(log_parts))
