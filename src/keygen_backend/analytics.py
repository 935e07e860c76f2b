"""
Dashboard analytics: the aggregate counts, the top-N by volume reports and
the daily action metrics.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence
from urllib.parse import urlencode

import msgspec

from . import _urls as urls
from ._exceptions import ApiError
from ._json_schemas.analytics import (
    AnalyticsCountSchema,
    MetricsCountSchema,
    TopIpByVolume,
    TopIpsSchema,
    TopLicenseByVolume,
    TopLicensesSchema,
    TopUrlByVolume,
    TopUrlsSchema,
)
from ._json_schemas.base import ListEnvelope
from .api_provider import ApiProvider
from .enums import LicenseStatus, UserStatus
from .transport import CancelSignal
from .users import ALL_USER_ROLES

if TYPE_CHECKING:
    # avoid circular import
    from .keygen import KeygenBackend

__all__ = ['AnalyticsCount', 'AnalyticsApiProvider', 'MetricsApiProvider']

logger = logging.getLogger(__name__)


class AnalyticsCount(msgspec.Struct, frozen=True, kw_only=True):
    """
    Account wide counts shown on the dashboard.

    `degraded` is set when the summary endpoint failed and the counts were
    assembled from individual list queries instead (any of which may be 0
    because it failed as well).
    """
    active_licenses: int = 0
    total_licenses: int = 0
    total_users: int = 0
    total_machines: int = 0
    active_licensed_users: int = 0
    degraded: bool = False


class AnalyticsApiProvider(ApiProvider):
    """
    Provide API access to the analytics endpoints.
    """
    def __init__(self, _backend: KeygenBackend, max_workers: int = 5):
        super().__init__(_backend=_backend)
        self.max_workers = max_workers

    def count(self, *, cancel: Optional[CancelSignal] = None) -> AnalyticsCount:
        """
        Aggregate counts for the account.

        Uses the summary endpoint when available, otherwise falls back to five
        concurrent `limit=1` list queries and reads the totals from their `meta.count`.
        Never raises except RequestCancelled.
        """
        try:
            doc = self.query_api(urls.ANALYTICS_COUNT, schema=AnalyticsCountSchema, cancel=cancel)
        except ApiError as e:
            logger.warning('Analytics count unavailable (%s), falling back to list queries', e)
            return self._fallback_count(cancel)

        if doc is None:
            logger.warning('Analytics count returned no data, falling back to list queries')
            return self._fallback_count(cancel)

        meta = doc.meta
        return AnalyticsCount(
            active_licenses=meta.active_licenses,
            total_licenses=meta.total_licenses,
            total_users=meta.total_users,
            total_machines=meta.total_machines,
            active_licensed_users=meta.active_licensed_users,
        )

    def _fallback_count(self, cancel: Optional[CancelSignal]) -> AnalyticsCount:
        backend = self._backend
        queries: dict[str, Callable[[], ListEnvelope]] = {
            'active_licenses': lambda: backend.licenses.list(limit=1, status=LicenseStatus.Active, cancel=cancel),
            'total_licenses': lambda: backend.licenses.list(limit=1, cancel=cancel),
            'total_users': lambda: backend.users.list(limit=1, roles=list(ALL_USER_ROLES), cancel=cancel),
            'total_machines': lambda: backend.machines.list(limit=1, cancel=cancel),
            'active_licensed_users': lambda: backend.users.list(
                limit=1, status=UserStatus.Active, assigned=True, cancel=cancel
            ),
        }

        def run(name: str, query: Callable[[], ListEnvelope]) -> int:
            try:
                doc = query()
            except ApiError as e:
                logger.warning('Fallback count query %s failed: %s', name, e)
                return 0
            return doc.count if doc is not None else 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {name: executor.submit(run, name, query) for name, query in queries.items()}
            # RequestCancelled is not an ApiError and propagates from result()
            counts = {name: future.result() for name, future in futures.items()}

        return AnalyticsCount(degraded=True, **counts)

    def top_licenses_by_volume(self, *, cancel: Optional[CancelSignal] = None) -> list[TopLicenseByVolume]:
        """
        Top 10 licenses by validation/activation volume over the last two weeks.
        """
        doc = self.query_api(urls.ANALYTICS_TOP_LICENSES, schema=TopLicensesSchema, cancel=cancel)
        return doc.meta if doc is not None else []

    def top_urls_by_volume(self, *, cancel: Optional[CancelSignal] = None) -> list[TopUrlByVolume]:
        doc = self.query_api(urls.ANALYTICS_TOP_URLS, schema=TopUrlsSchema, cancel=cancel)
        return doc.meta if doc is not None else []

    def top_ips_by_volume(self, *, cancel: Optional[CancelSignal] = None) -> list[TopIpByVolume]:
        doc = self.query_api(urls.ANALYTICS_TOP_IPS, schema=TopIpsSchema, cancel=cancel)
        return doc.meta if doc is not None else []


class MetricsApiProvider(ApiProvider):
    """
    Provide API access to daily action counts.
    """
    def __init__(self, _backend: KeygenBackend, max_workers: int = 5):
        super().__init__(_backend=_backend)
        self.max_workers = max_workers

    def count(
            self,
            metrics: Optional[Sequence[str]] = None,
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> dict[str, int]:
        """
        Daily action counts over the last 14 days.

        :param metrics: Only count these metric names (e.g. "license.validation.succeeded")
        :return: Date (YYYY-MM-DD) to count mapping
        """
        query = urlencode([('metrics[]', m) for m in metrics], safe='[]') if metrics else None
        doc = self.query_api(urls.METRICS_COUNT, query=query, schema=MetricsCountSchema, cancel=cancel)
        return doc.meta if doc is not None else {}

    def count_by_name(
            self,
            names: Iterable[str],
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> dict[str, dict[str, int]]:
        """
        One count call per metric name, concurrently, so the series are not summed together.
        A name whose call fails maps to an empty series.
        """
        names = list(dict.fromkeys(names))

        def run(name: str) -> dict[str, int]:
            try:
                return self.count([name], cancel=cancel)
            except ApiError as e:
                logger.warning('Metric %s unavailable: %s', name, e)
                return {}

        if not names:
            return {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names))) as executor:
            futures = {name: executor.submit(run, name) for name in names}
            return {name: future.result() for name, future in futures.items()}
