"""
Smoke tests against a real account, skipped unless credentials are configured.
"""
import pytest

from keygen_backend import AnalyticsCount, KeygenBackend, NotFound


def test_me(live_backend: KeygenBackend):
    me = live_backend.me(no_cache=True)
    assert me.id


def test_list_licenses(live_backend: KeygenBackend):
    doc = live_backend.licenses.list(limit=1)
    assert doc.count >= len(doc.data)


def test_get_missing(live_backend: KeygenBackend):
    with pytest.raises(NotFound):
        live_backend.licenses.get('00000000-0000-0000-0000-000000000000')


def test_analytics(live_backend: KeygenBackend):
    count = live_backend.analytics.count()
    assert isinstance(count, AnalyticsCount)
    assert count.total_licenses >= count.active_licenses
