from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional, Protocol, Type, Union
from urllib.parse import urlparse

import msgspec
import requests
from requests.structures import CaseInsensitiveDict

from . import _urls as urls
from ._exceptions import NetworkError, RequestCancelled, ServerError, Unauthorized, classify
from ._json_schemas import convert_resource
from ._json_schemas.base import ApiBase, ErrorObject, ErrorsSchema, _DataBase
from .config import ClientConfig
from .session import AuthSession

__all__ = ['Transport', 'CancelSignal', 'convert_data']

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    """
    Anything with an `is_set()` method, typically a threading.Event.
    """
    def is_set(self) -> bool: ...


def _check_cancel(cancel: Optional[CancelSignal]) -> None:
    if cancel is not None and cancel.is_set():
        raise RequestCancelled('Request was cancelled by the caller')


def convert_data(data: Any) -> Union[list[_DataBase], _DataBase]:
    """
    Materialize the `data` member of a generically decoded document into typed resources.

    :raises NetworkError: if a resource does not match its schema
    """
    if isinstance(data, list):
        return [convert_data(item) for item in data]
    if not isinstance(data, dict):
        raise NetworkError(f'Expected a resource object, got {type(data).__name__}')
    try:
        return convert_resource(data)
    except msgspec.ValidationError as e:
        raise NetworkError(f'Malformed {data.get("type")} resource in response: {e}') from e


class Transport:
    """
    Performs single JSON:API HTTP calls: URL building, auth header injection,
    body serialization, response decoding and error classification.
    It does not cache anything.
    """
    def __init__(
            self,
            config: ClientConfig,
            session: Optional[AuthSession] = None,
            http: Optional[requests.Session] = None,
    ):
        self.config = config
        self.session = session if session is not None else AuthSession(config.token)
        self._http = http if http is not None else requests.Session()

    def __repr__(self):
        return f'Transport(account_url={self.config.account_url}, session={self.session})'

    def close(self) -> None:
        self._http.close()

    def build_url(self, endpoint: str) -> str:
        """
        Resolve an endpoint to a full URL.

        Absolute URLs are used as is, paths under the API path prefix (e.g. links
        like /v1/accounts/...) are joined to the API origin, anything else is
        scoped to the configured account.
        """
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        api = urlparse(self.config.api_url)
        prefix = api.path.rstrip('/')
        if endpoint.startswith('/') and prefix and (endpoint == prefix or endpoint.startswith(prefix + '/')):
            return f'{api.scheme}://{api.netloc}{endpoint}'
        return f'{self.config.account_url}/{endpoint.lstrip("/")}'

    def request(
            self,
            method: str,
            endpoint: str,
            *,
            body: Any = None,
            query: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
            schema: Optional[Type[Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: Optional[bool] = None,
    ) -> Any:
        """
        Perform one API call.

        :param method: HTTP method
        :param endpoint: Account-relative path or absolute URL
        :param body: JSON-serializable body
        :param query: Encoded query string (see keygen_backend.query)
        :param headers: Extra headers, an explicit Authorization header replaces the bearer token
        :param schema: msgspec type to decode the success body into (default ApiBase)
        :param cancel: Cancellation signal, checked before sending and after the response arrives
        :param retryable: Allow retries of transient failures, default only for GET
        :return: Decoded document, or None for an empty success body
        """
        method = method.upper()
        url = self.build_url(endpoint)
        if query:
            url = f'{url}{"&" if "?" in url else "?"}{query}'
        data = msgspec.json.encode(body) if body is not None else None

        if retryable is None:
            retryable = method == 'GET'
        attempts = 1 + (self.config.max_retries if retryable else 0)
        for attempt in range(attempts):
            _check_cancel(cancel)
            try:
                return self._send(method, url, data, headers, schema, cancel)
            except (NetworkError, ServerError) as e:
                if attempt >= attempts - 1:
                    raise
                delay = self.config.retry_backoff * (attempt + 1)
                logger.info('Retrying %s %s in %.2fs after: %s (attempt %d of %d)',
                            method, url, delay, e, attempt + 2, attempts)
                time.sleep(delay)

        raise RuntimeError('unreachable retry loop state')

    def _send(
            self,
            method: str,
            url: str,
            data: Optional[bytes],
            headers: Optional[Mapping[str, str]],
            schema: Optional[Type[Any]],
            cancel: Optional[CancelSignal],
    ) -> Any:
        request_headers = CaseInsensitiveDict({
            'Accept': urls.JSONAPI_MEDIA_TYPE,
            'Content-Type': urls.JSONAPI_MEDIA_TYPE,
            'User-Agent': self.config.user_agent,
        })
        if headers:
            request_headers.update(headers)

        # remember which token went out, so a 401 only clears that one
        sent_token = None
        if 'Authorization' not in request_headers:
            sent_token = self.session.token
            if sent_token:
                request_headers['Authorization'] = f'Bearer {sent_token}'

        try:
            r = self._http.request(method, url, data=data, headers=request_headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise NetworkError(f'Request {method} {url} failed: {e}') from e

        logger.debug('%s %s -> %s', method, url, r.status_code)
        # a response for a caller that went away must not be applied
        _check_cancel(cancel)

        if not 200 <= r.status_code < 300:
            error = classify(r, self._decode_errors(r))
            if isinstance(error, Unauthorized) and sent_token:
                self.session.invalidate(sent_token)
            raise error

        if not r.content or not r.content.strip():
            return None
        try:
            return msgspec.json.decode(r.content, type=schema if schema is not None else ApiBase)
        except msgspec.DecodeError as e:
            raise NetworkError(f'Could not parse response from {method} {url}: {e}', response=r) from e

    @staticmethod
    def _decode_errors(r: requests.Response) -> list[ErrorObject]:
        if not r.content or not r.content.strip():
            return []
        try:
            return msgspec.json.decode(r.content, type=ErrorsSchema).errors
        except msgspec.DecodeError as e:
            raise NetworkError(
                f'Failed to parse error response (status {r.status_code}) from {r.url}: {e}', response=r
            ) from e
