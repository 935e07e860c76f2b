from __future__ import annotations

import threading
from typing import Any, Optional, Union

import requests
from cachetools import TTLCache, cached

from . import _urls as urls
from ._exceptions import NetworkError
from ._json_schemas.base import ApiBase, _DataBase
from ._json_schemas.users import TokenData
from .analytics import AnalyticsApiProvider, MetricsApiProvider
from .config import ClientConfig
from .entitlements import EntitlementsApiProvider
from .groups import GroupsApiProvider
from .licenses import LicensesApiProvider
from .logs import EventLogsApiProvider, RequestLogsApiProvider
from .machines import MachinesApiProvider
from .policies import PoliciesApiProvider
from .products import ProductsApiProvider
from .query import Pagination, encode_query
from .relationships import Resolution
from .session import AuthSession
from .transport import CancelSignal, Transport, convert_data
from .users import UsersApiProvider
from .webhooks import WebhooksApiProvider

__all__ = ['KeygenBackend']


# Cache the bearer profile for one minute
ME_CACHE_TIME = 60  # sec


@cached(cache=TTLCache(maxsize=1024, ttl=ME_CACHE_TIME), lock=threading.Lock())
def _get_cached_me(transport: Transport, token: Optional[str]) -> _DataBase:
    return _get_me(transport, token)


def _get_me(transport: Transport, token: Optional[str]) -> _DataBase:
    # token is only part of the cache key, the transport sends the session token
    doc = transport.request('GET', urls.ME, schema=ApiBase)
    if doc is None or not isinstance(doc.data, dict):
        raise NetworkError('Profile response carried no resource')
    return convert_data(doc.data)


class KeygenBackend:
    """
    Client for one Keygen account.

    Owns its configuration, transport and auth session, and exposes one
    provider per resource kind, e.g. `backend.licenses.list(status=LicenseStatus.Active)`.
    """
    def __init__(
            self,
            config: Optional[ClientConfig] = None,
            *,
            session: Optional[AuthSession] = None,
            http: Optional[requests.Session] = None,
    ):
        self.config = config if config is not None else ClientConfig.from_env()
        self.session = session if session is not None else AuthSession(self.config.token)
        self.transport = Transport(self.config, self.session, http=http)

        self.licenses = LicensesApiProvider(self)
        self.users = UsersApiProvider(self)
        self.machines = MachinesApiProvider(self)
        self.processes = self.machines.processes
        self.components = self.machines.components
        self.products = ProductsApiProvider(self)
        self.policies = PoliciesApiProvider(self)
        self.groups = GroupsApiProvider(self)
        self.entitlements = EntitlementsApiProvider(self)
        self.webhooks = WebhooksApiProvider(self)
        self.request_logs = RequestLogsApiProvider(self)
        self.event_logs = EventLogsApiProvider(self)
        self.analytics = AnalyticsApiProvider(self)
        self.metrics = MetricsApiProvider(self)

    def __repr__(self):
        return f'KeygenBackend(account_url={self.config.account_url}, authenticated={self.authenticated})'

    def __enter__(self) -> KeygenBackend:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.transport.close()

    @property
    def authenticated(self) -> bool:
        return self.session.authenticated

    def authenticate(self, email: str, password: str, **kwargs: Any) -> TokenData:
        """
        Exchange email and password for a bearer token used by all further calls.

        :param email: Account user email
        :param password: Account user password, not retained
        :return: Token resource
        :raises Unauthorized: if the credentials were rejected
        """
        return self.session.authenticate(self.transport, email, password, **kwargs)

    def logout(self, *, revoke: bool = True) -> None:
        """
        Forget the session token, revoking it server-side first when `revoke` is set.
        """
        self.session.logout(self.transport if revoke else None)

    def me(self, *, no_cache: bool = False, force_refresh: bool = False) -> _DataBase:
        """
        Get the resource (user, product, license...) the current token belongs to.

        :param no_cache: Disable use of caching, default False
        :param force_refresh: Force expiration of the cached profile for this token, default False
        :return: Bearer resource
        """
        token = self.session.token
        if force_refresh:
            # remove key from cache if present
            _get_cached_me.cache.pop((self.transport, token), None)

        if no_cache:
            return _get_me(self.transport, token)
        else:
            return _get_cached_me(self.transport, token)

    def fetch_related(
            self,
            target: Union[Resolution, str],
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Union[list[_DataBase], _DataBase, None]:
        """
        Fetch relationship targets that were not part of `included`.

        :param target: Resolution of the relationship, or its related link
        :param page: Pagination for to-many relationships
        :param cancel: Cancellation signal
        :return: List of resources for a to-many relationship, else the resource or None
        :raises ValueError: if the relationship has no related link
        """
        url = target.related_url if isinstance(target, Resolution) else target
        if not url:
            raise ValueError('No related link to fetch')
        doc = self.transport.request('GET', url, query=encode_query(None, page), schema=ApiBase, cancel=cancel)
        if doc is None or doc.data is None:
            return None
        return convert_data(doc.data)
