from enum import IntEnum


class ErrorCode(IntEnum):
    """
    Overview of the status codes the registrar API client cares about.
        - 0 Transport error (no response was received)
        - 200 - 299 Success
        - 401, 403 Credentials were rejected
        - 429 Too many requests
        - 500 - 599 Registrar did something silly (501 is never retried)
    """

    TRANSPORT_ERROR = 0

    OK = 200

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


class RegistrarError(Exception):
    """
    Base class for errors raised while talking to the registrar API.

        - code None or 0: the request never got a response
        - 400 - 499: we sent something the registrar did not like
        - 500 - 599: the registrar could not handle the request
    """

    def __init__(self, *args, code=None, response=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.code = code
        self.response = response

    @property
    def message(self):
        return str(self)

    def should_retry(self):
        return self.is_transport_error() or (self.is_server_error() and self.code != ErrorCode.NOT_IMPLEMENTED)

    def is_transport_error(self):
        return self.code is None or self.code == ErrorCode.TRANSPORT_ERROR

    def is_server_error(self):
        return self.code is not None and (self.code >= 500 and self.code <= 599)

    def is_client_error(self):
        return self.code is not None and (self.code >= 400 and self.code <= 499)

    def is_auth_error(self):
        return self.code in (ErrorCode.UNAUTHORIZED, ErrorCode.FORBIDDEN)


class AuthenticationError(RegistrarError):
    """Credentials were rejected. Retrying will not help."""

    default_message = "Authentication failed. Check your registrar account email and Global API Key."

    def __init__(self, message=None, code=ErrorCode.UNAUTHORIZED, **kwargs):
        super().__init__(message or self.default_message, code=code, **kwargs)


class RateLimitError(RegistrarError):
    """The registrar is throttling us. Callers should wait `retry_after` seconds."""

    DEFAULT_RETRY_AFTER = 60

    def __init__(self, retry_after=None, **kwargs):
        self.retry_after = retry_after if retry_after is not None else self.DEFAULT_RETRY_AFTER
        super().__init__(
            f"Rate limited. Retry after {self.retry_after} seconds.",
            code=ErrorCode.TOO_MANY_REQUESTS,
            **kwargs,
        )

    @classmethod
    def from_response(cls, response):
        """Reads the Retry-After header, falling back to the default when it is absent or unparseable."""
        raw = response.headers.get("retry-after")
        try:
            retry_after = int(raw) if raw is not None else None
        except ValueError:
            retry_after = None
        return cls(retry_after=retry_after, response=response)


class APIError(RegistrarError):
    """Any other unsuccessful response from the registrar API."""

    def __init__(self, *args, status_code=None, body=None, **kwargs):
        kwargs.setdefault("code", status_code)
        super().__init__(*args, **kwargs)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, response):
        """Builds an APIError out of an httpx response, preferring the first upstream error message."""
        try:
            data = response.json() or {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        errors = data.get("errors") or []
        message = None
        if errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
        message = message or data.get("message") or "Unknown API error"

        return cls(message, status_code=response.status_code, body=data, response=response)


class TransportError(APIError):
    """The request could not be completed at the network level, even after retrying."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("code", ErrorCode.TRANSPORT_ERROR)
        super().__init__(*args, **kwargs)
