from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..enums import CheckInInterval, DistributionStrategy, LicenseStatus
from .base import Envelope, ListEnvelope, _Attributes, _DataBase


# region Licenses

class LicenseSchema(Envelope):
    # schema for /accounts/<account>/licenses/<id>
    data: LicenseData


class LicensesSchema(ListEnvelope):
    # schema for /accounts/<account>/licenses
    data: list[LicenseData] = []


class LicenseData(_DataBase):
    kind = 'licenses'
    attributes: LicenseAttributes


class LicenseAttributes(_Attributes):
    key: str
    status: LicenseStatus
    name: Optional[str] = None
    uses: int = 0
    max_uses: Optional[int] = None
    protected: bool = False
    floating: bool = False
    strict: bool = False
    suspended: bool = False
    scheme: Optional[str] = None
    encrypted: bool = False
    expiry: Optional[datetime] = None
    permissions: Optional[list[str]] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Policies

class PolicySchema(Envelope):
    data: PolicyData


class PoliciesSchema(ListEnvelope):
    data: list[PolicyData] = []


class PolicyData(_DataBase):
    kind = 'policies'
    attributes: PolicyAttributes


class PolicyAttributes(_Attributes):
    name: str
    duration: Optional[int] = None
    scheme: Optional[str] = None
    strict: bool = False
    floating: bool = False
    protected: bool = False
    use_pool: bool = False
    max_machines: Optional[int] = None
    max_processes: Optional[int] = None
    max_cores: Optional[int] = None
    max_uses: Optional[int] = None
    max_users: Optional[int] = None
    max_memory: Optional[int] = None
    max_disk: Optional[int] = None
    require_product_scope: bool = False
    require_policy_scope: bool = False
    require_machine_scope: bool = False
    require_fingerprint_scope: bool = False
    require_components_scope: bool = False
    require_user_scope: bool = False
    require_checksum_scope: bool = False
    require_version_scope: bool = False
    require_check_in: bool = False
    check_in_interval: Optional[CheckInInterval] = None
    check_in_interval_count: Optional[int] = None
    require_heartbeat: bool = False
    heartbeat_duration: Optional[int] = None
    # strategies are passed through verbatim
    heartbeat_cull_strategy: Optional[str] = None
    heartbeat_resurrection_strategy: Optional[str] = None
    heartbeat_basis: Optional[str] = None
    machine_uniqueness_strategy: Optional[str] = None
    machine_matching_strategy: Optional[str] = None
    component_uniqueness_strategy: Optional[str] = None
    component_matching_strategy: Optional[str] = None
    expiration_strategy: Optional[str] = None
    expiration_basis: Optional[str] = None
    renewal_basis: Optional[str] = None
    transfer_strategy: Optional[str] = None
    authentication_strategy: Optional[str] = None
    machine_leasing_strategy: Optional[str] = None
    process_leasing_strategy: Optional[str] = None
    overage_strategy: Optional[str] = None
    permissions: Optional[list[str]] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Products

class ProductSchema(Envelope):
    data: ProductData


class ProductsSchema(ListEnvelope):
    data: list[ProductData] = []


class ProductData(_DataBase):
    kind = 'products'
    attributes: ProductAttributes


class ProductAttributes(_Attributes):
    name: str
    code: Optional[str] = None
    url: Optional[str] = None
    distribution_strategy: Optional[DistributionStrategy] = None
    platforms: Optional[list[str]] = None
    permissions: Optional[list[str]] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Entitlements

class EntitlementSchema(Envelope):
    data: EntitlementData


class EntitlementsSchema(ListEnvelope):
    data: list[EntitlementData] = []


class EntitlementData(_DataBase):
    kind = 'entitlements'
    attributes: EntitlementAttributes


class EntitlementAttributes(_Attributes):
    name: str
    code: str
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Groups

class GroupSchema(Envelope):
    data: GroupData


class GroupsSchema(ListEnvelope):
    data: list[GroupData] = []


class GroupData(_DataBase):
    kind = 'groups'
    attributes: GroupAttributes


class GroupAttributes(_Attributes):
    name: str
    max_licenses: Optional[int] = None
    max_machines: Optional[int] = None
    max_users: Optional[int] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion
