"""Thin JSON GET helper for external sources"""
from typing import Any, Dict, Optional
import logging

import httpx

from app.config import settings
from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def http_get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> Any:
    """
    GET a URL and decode the JSON body

    Raises:
        UpstreamError: On transport errors, timeouts and non-2xx responses
    """
    timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
    try:
        if client is not None:
            response = client.get(url, params=params, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as owned:
                response = owned.get(url, params=params)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"HTTP GET {url} failed: {e.response.status_code}")
        raise UpstreamError(f"{url} returned {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP GET {url} failed: {str(e)}")
        raise UpstreamError(f"Failed to reach {url}: {str(e)}") from e
    except ValueError as e:
        logger.error(f"HTTP GET {url} returned invalid JSON")
        raise UpstreamError(f"Invalid JSON from {url}") from e
