from __future__ import annotations

from typing import Optional

import msgspec


# region Analytics

class AnalyticsCountMeta(msgspec.Struct, rename='camel'):
    active_licenses: int = 0
    total_licenses: int = 0
    total_users: int = 0
    total_machines: int = 0
    active_licensed_users: int = 0


class AnalyticsCountSchema(msgspec.Struct):
    # schema for /accounts/<account>/analytics/actions/count
    meta: AnalyticsCountMeta


class TopLicenseByVolume(msgspec.Struct, frozen=True, rename='camel'):
    license_id: str
    count: int


class TopUrlByVolume(msgspec.Struct, frozen=True):
    method: str
    url: str
    count: int


class TopIpByVolume(msgspec.Struct, frozen=True):
    ip: Optional[str]
    count: int


class TopLicensesSchema(msgspec.Struct):
    meta: list[TopLicenseByVolume] = []


class TopUrlsSchema(msgspec.Struct):
    meta: list[TopUrlByVolume] = []


class TopIpsSchema(msgspec.Struct):
    meta: list[TopIpByVolume] = []


# endregion

# region Metrics

class MetricsCountSchema(msgspec.Struct):
    # schema for /accounts/<account>/metrics/actions/count, a date -> count map
    meta: dict[str, int] = {}


# endregion
