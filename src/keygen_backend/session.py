from __future__ import annotations

import base64
import logging
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

from . import _urls as urls
from ._exceptions import NetworkError
from ._json_schemas.users import TokenData, TokenSchema

if TYPE_CHECKING:
    # avoid circular import
    from .transport import Transport

__all__ = ['AuthSession']

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_NAME = 'Keygen UI Token'


class AuthSession:
    """
    Holds the bearer token attached to requests by a Transport.

    One session per client, no global state. Credentials are never retained:
    once the token is gone (logout or invalidation after a 401) the caller
    must authenticate again explicitly.
    """
    def __init__(self, token: Optional[str] = None):
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._kind: Optional[str] = None
        self._expiry: Optional[datetime] = None
        self._token_id: Optional[str] = None
        self._listeners: list[Callable[[AuthSession], None]] = []
        self.invalidations = 0
        if token:
            self.adopt(token)

    def __repr__(self):
        return f'AuthSession(authenticated={self.authenticated}, kind={self._kind}, expiry={self._expiry})'

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def kind(self) -> Optional[str]:
        return self._kind

    @property
    def expiry(self) -> Optional[datetime]:
        return self._expiry

    @property
    def token_id(self) -> Optional[str]:
        return self._token_id

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    @property
    def expired(self) -> bool:
        if self._expiry is None:
            return False
        expiry = self._expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry <= datetime.now(timezone.utc)

    def adopt(
            self,
            token: str,
            *,
            kind: Optional[str] = None,
            expiry: Optional[datetime] = None,
            token_id: Optional[str] = None,
    ) -> None:
        """
        Start using an existing bearer token.
        """
        if not token:
            raise ValueError('token must not be empty')
        with self._lock:
            self._token = token
            self._kind = kind
            self._expiry = expiry
            self._token_id = token_id

    def authenticate(
            self,
            transport: Transport,
            email: str,
            password: str,
            *,
            name: str = DEFAULT_TOKEN_NAME,
    ) -> TokenData:
        """
        Exchange email/password credentials for a bearer token and adopt it.

        :param transport: Transport used for the token request
        :param email: Account user email
        :param password: Account user password (not retained)
        :param name: Name given to the new token
        :return: The created token resource
        """
        credentials = base64.b64encode(f'{email}:{password}'.encode('utf-8')).decode('ascii')
        body = {'data': {'type': 'tokens', 'attributes': {'name': name}}}
        doc = transport.request(
            'POST',
            urls.TOKENS,
            body=body,
            headers={'Authorization': f'Basic {credentials}'},
            schema=TokenSchema,
        )
        if doc is None or not doc.data.attributes.token:
            raise NetworkError('Failed to retrieve token from authentication response')

        token = doc.data
        self.adopt(
            token.attributes.token,
            kind=token.attributes.kind,
            expiry=token.attributes.expiry,
            token_id=token.id,
        )
        logger.info('Authenticated as %s (token %s, expiry %s)', email, token.id, token.attributes.expiry)
        return token

    def on_invalidate(self, callback: Callable[[AuthSession], None]) -> None:
        """
        Register a callback run once each time the held token is invalidated.
        """
        with self._lock:
            self._listeners.append(callback)

    def invalidate(self, sent_token: Optional[str]) -> bool:
        """
        Drop the held token after the server rejected `sent_token`.

        Concurrent requests failing with the same token invalidate the session
        only once; a token adopted since then is left alone.

        :return: True if this call cleared the session
        """
        with self._lock:
            if self._token is None or self._token != sent_token:
                return False
            self._token = None
            self._kind = None
            self._expiry = None
            self._token_id = None
            self.invalidations += 1
            listeners = list(self._listeners)

        logger.warning('Session token was rejected by the server, session invalidated')
        for callback in listeners:
            callback(self)
        return True

    def logout(self, transport: Optional[Transport] = None) -> None:
        """
        Forget the held token. With a transport and a known token id, the
        token is revoked server-side first.
        """
        try:
            if transport is not None and self._token_id is not None and self._token is not None:
                transport.request('DELETE', urls.join(urls.TOKENS, self._token_id))
        finally:
            with self._lock:
                self._token = None
                self._kind = None
                self._expiry = None
                self._token_id = None
