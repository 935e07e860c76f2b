from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, Type

import requests

from ._json_schemas.base import ErrorObject

__all__ = [
    'ErrorKind',
    'ApiError',
    'RequestError',
    'NotFound',
    'ValidationFailed',
    'CurrentPasswordIncorrect',
    'Unauthorized',
    'Forbidden',
    'Conflict',
    'RateLimited',
    'ServerError',
    'NetworkError',
    'RequestCancelled',
    'classify',
]


class ErrorKind(Enum):
    NotFound = 'not_found'
    ValidationFailed = 'validation_failed'
    Unauthorized = 'unauthorized'
    Forbidden = 'forbidden'
    Conflict = 'conflict'
    RateLimited = 'rate_limited'
    ServerError = 'server_error'
    NetworkError = 'network_error'


class ApiError(Exception):
    """
    Base class for every classified failure of an API call.
    """
    kind: ErrorKind


class RequestError(ApiError):
    """
    Exception thrown if a HTTP request operation returned a non-ok code
    with a well-formed JSON:API error document.

    Attributes:
        response -- request response
        errors -- error objects in server order
    """
    def __init__(
            self,
            message: str,
            response: requests.Response,
            errors: Sequence[ErrorObject] = (),
    ):
        self.response = response
        self.errors: list[ErrorObject] = list(errors)
        super().__init__(message)

    @property
    def status(self) -> int:
        return self.response.status_code

    @property
    def first(self) -> Optional[ErrorObject]:
        return self.errors[0] if self.errors else None

    @property
    def title(self) -> str:
        return self.first.title if self.first is not None and self.first.title else 'API Error'

    @property
    def detail(self) -> str:
        if self.first is not None and self.first.detail:
            return self.first.detail
        return f'Request failed with status {self.status}'

    @property
    def code(self) -> str:
        if self.first is not None and self.first.code:
            return self.first.code
        return f'HTTP_{self.status}'

    @property
    def pointer(self) -> Optional[str]:
        return self.first.pointer if self.first is not None else None

    @property
    def parameter(self) -> Optional[str]:
        return self.first.parameter if self.first is not None else None


class NotFound(RequestError):
    """404, the resource does not exist (or no longer exists)."""
    kind = ErrorKind.NotFound


class ValidationFailed(RequestError):
    """
    422 (or another rejected request such as a 400 for an invalid filter).
    `pointer`/`parameter`/`detail` describe the first error, `errors` holds all of them.
    """
    kind = ErrorKind.ValidationFailed

    @property
    def field(self) -> Optional[str]:
        """
        Attribute name addressed by the first error pointer, e.g. "url" for "/data/attributes/url".
        """
        if self.pointer:
            return self.pointer.rstrip('/').split('/')[-1]
        return self.parameter

    @property
    def fields(self) -> list[str]:
        """
        Attribute names addressed by all errors, in server order.
        """
        names = []
        for e in self.errors:
            if e.pointer:
                names.append(e.pointer.rstrip('/').split('/')[-1])
            elif e.parameter:
                names.append(e.parameter)
        return names


class CurrentPasswordIncorrect(ValidationFailed):
    """
    Password change rejected because the current password did not match.
    """
    CODE = 'CURRENT_PASSWORD_INCORRECT'

    @property
    def code(self) -> str:
        return self.CODE


class Unauthorized(RequestError):
    """401, the bearer token is missing, expired or revoked."""
    kind = ErrorKind.Unauthorized


class Forbidden(RequestError):
    """403, the token is valid but lacks permission."""
    kind = ErrorKind.Forbidden


class Conflict(RequestError):
    """409"""
    kind = ErrorKind.Conflict


class RateLimited(RequestError):
    """429"""
    kind = ErrorKind.RateLimited

    @property
    def retry_after(self) -> Optional[float]:
        """
        Seconds to wait before retrying, if the server said so.
        """
        value = self.response.headers.get('Retry-After')
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None


class ServerError(RequestError):
    """5xx"""
    kind = ErrorKind.ServerError


class NetworkError(ApiError):
    """
    The request never reached the server, or its response could not be parsed.

    Attributes:
        response -- request response, if one was received
    """
    kind = ErrorKind.NetworkError

    def __init__(self, message: str, response: Optional[requests.Response] = None):
        self.response = response
        super().__init__(message)

    @property
    def status(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


class RequestCancelled(Exception):
    """
    The caller's cancellation signal was set, the call's result was discarded.
    """


_STATUS_MAP: dict[int, Type[RequestError]] = {
    400: ValidationFailed,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    422: ValidationFailed,
    429: RateLimited,
}


def classify(response: requests.Response, errors: Sequence[ErrorObject]) -> ApiError:
    """
    Map a failed response and its decoded error objects to exactly one error kind.

    :param response: Non-ok HTTP response
    :param errors: Error objects decoded from the response body
    :return: Classified exception (not raised)
    """
    status = response.status_code
    cls = _STATUS_MAP.get(status)
    if cls is None:
        if status >= 500:
            cls = ServerError
        elif 400 <= status < 500:
            cls = ValidationFailed
        else:
            return NetworkError(f'Unexpected response status {status} from {response.url}', response=response)

    first = errors[0] if errors else None
    message = (first.detail or first.title) if first is not None else ''
    if not message:
        message = f'HTTP {status} Error'
    return cls(message, response=response, errors=errors)
