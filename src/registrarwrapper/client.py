"""Provide a wrapper around httpx to handle authentication, retries and errors."""

import logging
import time

import httpx
from django.conf import settings

from .errors import APIError, AuthenticationError, RateLimitError, RegistrarError, TransportError, ErrorCode

logger = logging.getLogger(__name__)

# Number of retries after the first attempt, not total attempts
MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.1


class RegistrarClient:
    """
    A wrapper over httpx's client for the registrar REST API.

    ATTN: This should not be used directly. Use `RegistrarService` from
    contactmgr/services/registrar_service.py.
    """

    def __init__(self, email, api_key, client=None, base_url=None, max_retries=MAX_RETRIES, sleep=time.sleep):
        """Initialize settings which will be used for every request.

        `client` may be any httpx.Client; tests hand in one wired to respx.
        `sleep` is called with the backoff delay between retries.
        """
        self.base_url = base_url or settings.REGISTRAR_API_BASE_URL
        self.headers = {
            "X-Auth-Email": email or "",
            "X-Auth-Key": api_key or "",
            "Content-Type": "application/json",
        }
        if client is None:
            client = httpx.Client(timeout=settings.REGISTRAR_API_TIMEOUT)
        client.base_url = self.base_url
        client.headers = self.headers
        self._client = client
        self.max_retries = max_retries
        self._sleep = sleep

    def close(self):
        """Closes the underlying connection pool"""
        try:
            self._client.close()
        except Exception as err:
            logger.warning(f"Connection to registrar was not cleanly closed: {err}")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @staticmethod
    def retry_delay(attempt: int) -> float:
        """Exponential backoff: 0.2s, 0.4s, 0.8s, ..."""
        return RETRY_BASE_DELAY * (2**attempt)

    def _classify(self, response) -> RegistrarError:
        """Turns an unsuccessful response into the matching RegistrarError."""
        status = response.status_code
        if status in (ErrorCode.UNAUTHORIZED, ErrorCode.FORBIDDEN):
            return AuthenticationError(code=status, response=response)
        if status == ErrorCode.TOO_MANY_REQUESTS:
            return RateLimitError.from_response(response)
        return APIError.from_response(response)

    def _send(self, method, path, **kwargs):
        """Helper function used by `send`. Makes exactly one request."""
        send_start = time.time()
        logger.debug(f"=== STARTING {method} {path} ===")

        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as err:
            message = f"{method} {path} failed to execute due to a connection error."
            logger.error(f"{message} Error: {err}")
            raise TransportError(f"{message} {err}") from err
        except httpx.HTTPError as err:
            message = f"{method} {path} failed to execute due to an unknown error."
            logger.error(f"{message} Error: {err}")
            raise APIError(f"{message} {err}") from err

        send_elapsed = time.time() - send_start
        logger.debug(f"=== Registrar responded {response.status_code} to {method} {path} in {send_elapsed:.2f}s ===")

        if response.is_success:
            return response
        raise self._classify(response)

    def _decode(self, response) -> dict:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as err:
            raise APIError(
                "Registrar returned a response that is not valid JSON.",
                status_code=response.status_code,
                response=response,
            ) from err

    def send(self, method, path, **kwargs) -> dict:
        """Send the request and return the decoded JSON body.

        Connection failures and 5xx responses (except 501) are retried up to
        `max_retries` times with exponential backoff. Everything else is raised
        straight away as a RegistrarError subclass.
        """
        attempt = 0
        while True:
            try:
                response = self._send(method, path, **kwargs)
            except RegistrarError as err:
                if err.should_retry() and attempt < self.max_retries:
                    attempt += 1
                    delay = self.retry_delay(attempt)
                    logger.info(
                        f"{method} {path} failed and will be retried in {delay:.2f}s "
                        f"(retry {attempt} of {self.max_retries}). Error: {err}"
                    )
                    self._sleep(delay)
                    continue
                raise
            return self._decode(response)

    def get(self, path, **kwargs) -> dict:
        return self.send("GET", path, **kwargs)

    def put(self, path, **kwargs) -> dict:
        return self.send("PUT", path, **kwargs)
