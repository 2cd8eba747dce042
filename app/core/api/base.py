"""Base API functionality using pure functions"""
import logging
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException, Timeout

from core.error.exceptions import (NotFoundException, ServerErrorException,
                                   TimeoutException, UnauthorizedException,
                                   UnreachableException)

from .api_response import ApiResponse
from .config import APIConfig

logger = logging.getLogger(__name__)

# A timed-out read is retried once, never more
MAX_TIMEOUT_RETRIES = 1


def make_api_request(
    session: requests.Session,
    config: APIConfig,
    method: str,
    path: str,
    token: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
    payload: Optional[Dict[str, Any]] = None,
    retry_on_timeout: bool = False
) -> ApiResponse:
    """Make API request with logging, timeout retry and error mapping

    config.timeout is handed to requests as its connect and read timeout. It
    bounds each socket wait, not the whole exchange: a backend that keeps
    trickling bytes, each gap shorter than the timeout, never raises Timeout.

    Args:
        session: HTTP session to send through
        config: API configuration (base URL, timeout, headers)
        method: HTTP method
        path: Endpoint path relative to the base URL
        token: Bearer token, omitted from headers when empty
        params: Query string parameters, None values dropped
        payload: JSON body
        retry_on_timeout: Retry once with identical arguments on timeout

    Returns:
        ApiResponse: Unwrapped response envelope

    Raises:
        TimeoutException: Connect or read wait exceeded (after the retry)
        UnreachableException: Network level failure
        UnauthorizedException: 401 from the backend
        NotFoundException: 404 from the backend
        ServerErrorException: 5xx or unreadable success body
    """
    url = config.get_url(path)
    headers = config.get_headers(token)
    if params:
        params = {k: v for k, v in params.items() if v is not None}

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Making API request: {method} {url}")
        logger.debug(f"Params: {params}")
        logger.debug(f"Payload: {payload}")

    attempts = 0
    while True:
        attempts += 1
        try:
            response = session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=payload,
                timeout=config.timeout
            )
            break

        except Timeout as e:
            if retry_on_timeout and attempts <= MAX_TIMEOUT_RETRIES:
                logger.warning(f"API timeout on {method} {path}, retrying...")
                continue
            logger.info(f"API timeout on {method} {path} after {attempts} attempt(s)")
            raise TimeoutException(
                f"Request timed out after {config.timeout}s",
                method=method,
                path=path
            ) from e

        except RequestException as e:
            logger.info(f"Request failed: {str(e)}")
            raise UnreachableException(
                f"Connection error: {str(e)}",
                method=method,
                path=path
            ) from e

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"API Response Status: {response.status_code}")

    return process_api_response(response, method, path)


def process_api_response(
    response: requests.Response,
    method: str,
    path: str
) -> ApiResponse:
    """Map HTTP status to errors and parse the envelope"""
    status = response.status_code

    if status == 401:
        raise UnauthorizedException(
            "Unauthorized",
            method=method,
            path=path,
            status_code=status,
            response=_safe_json(response)
        )

    if status == 404:
        raise NotFoundException(
            f"Not found: {path}",
            method=method,
            path=path,
            status_code=status,
            response=_safe_json(response)
        )

    if status >= 500:
        raise ServerErrorException(
            f"API request failed: {status}",
            method=method,
            path=path,
            status_code=status,
            response=_safe_json(response)
        )

    try:
        body = response.json()
    except ValueError:
        if response.ok:
            logger.info(f"Failed to parse response JSON from {method} {path}")
            raise ServerErrorException(
                "Invalid JSON response",
                method=method,
                path=path,
                status_code=status
            )
        # 4xx without an envelope
        logger.info(f"Non-JSON {status} response from {method} {path}")
        return ApiResponse(
            success=False,
            error=response.text or f"Request failed: {status}",
            http_status=status
        )

    if not isinstance(body, dict):
        logger.debug("Response data is not a dictionary")
        body = {"data": body}

    if not response.ok:
        logger.info(f"Non-2xx response: {status}, data: {body}")

    return ApiResponse.from_body(body, http_status=status)


def _safe_json(response: requests.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {"data": body}
