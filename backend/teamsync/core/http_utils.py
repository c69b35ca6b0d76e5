"""
HTTP Utilities

Shared helpers for calls to external HTTP services: bounded timeouts,
consistent httpx exception handling and request metrics.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from teamsync.core.metrics import (
    external_api_duration_seconds,
    external_api_errors_total,
    external_api_requests_total,
)

logger = logging.getLogger(__name__)


class HTTPRequestError(Exception):
    """Base exception for HTTP request failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


async def post_json(
    url: str,
    data: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
    service_name: str = "External API",
) -> Dict[str, Any]:
    """
    POST JSON to a URL and return the parsed JSON response.

    Args:
        url: The URL to post to
        data: JSON data to send
        headers: Optional request headers
        params: Optional query parameters
        timeout: Request timeout in seconds
        service_name: Name for logging and metrics

    Raises:
        HTTPRequestError: on timeout, connection failure, non-2xx status or
            a body that is not JSON. The caller decides whether to fall back.
    """
    start_time = time.time()
    external_api_requests_total.labels(service=service_name).inc()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=data, headers=headers, params=params)
            response.raise_for_status()
            payload = response.json()
        duration = time.time() - start_time
        external_api_duration_seconds.labels(service=service_name).observe(duration)
        return payload
    except httpx.TimeoutException:
        external_api_errors_total.labels(service=service_name).inc()
        msg = f"Timeout posting to {service_name}"
        logger.warning(msg)
        raise HTTPRequestError(msg)
    except httpx.ConnectError as e:
        external_api_errors_total.labels(service=service_name).inc()
        msg = f"Connection error posting to {service_name}: {e}"
        logger.warning(msg)
        raise HTTPRequestError(msg)
    except httpx.HTTPStatusError as e:
        external_api_errors_total.labels(service=service_name).inc()
        msg = f"HTTP {e.response.status_code} posting to {service_name}"
        logger.warning(msg)
        raise HTTPRequestError(msg, status_code=e.response.status_code)
    except ValueError as e:
        external_api_errors_total.labels(service=service_name).inc()
        msg = f"Invalid JSON from {service_name}: {e}"
        logger.warning(msg)
        raise HTTPRequestError(msg)
    except httpx.HTTPError as e:
        external_api_errors_total.labels(service=service_name).inc()
        msg = f"Error posting to {service_name}: {e}"
        logger.error(msg)
        raise HTTPRequestError(msg)
