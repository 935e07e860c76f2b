from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

import msgspec

from . import _urls as urls
from ._json_schemas.base import ApiBase
from ._json_schemas.licensing import (
    EntitlementsSchema,
    LicenseAttributes,
    LicenseData,
    LicenseSchema,
    LicensesSchema,
)
from ._json_schemas.machines import MachinesSchema
from .api_provider import ResourceApiProvider
from .enums import LicenseStatus
from .query import FilterBase, Pagination
from .transport import CancelSignal

__all__ = ['LicenseFilters', 'LicensesApiProvider']


class LicenseFilters(FilterBase):
    user: Optional[str] = None
    policy: Optional[str] = None
    group: Optional[str] = None
    product: Optional[str] = None
    machine: Optional[str] = None
    status: Optional[LicenseStatus] = None
    metadata: Optional[dict[str, str]] = None


class LicensesApiProvider(ResourceApiProvider):
    """
    Provide API access to licenses.
    """
    path = urls.LICENSES
    data_type = LicenseData
    schema = LicenseSchema
    list_schema = LicensesSchema
    filters = LicenseFilters
    attributes_type = LicenseAttributes
    writable = frozenset({
        'name', 'key', 'metadata', 'expiry', 'max_uses', 'protected', 'permissions', 'suspended',
    })

    def create(
            self,
            policy_id: str,
            *,
            user_id: Optional[str] = None,
            group_id: Optional[str] = None,
            name: Any = msgspec.UNSET,
            key: Any = msgspec.UNSET,
            metadata: Optional[Mapping[str, Any]] = None,
            expiry: Any = msgspec.UNSET,
            max_uses: Any = msgspec.UNSET,
            protected: Any = msgspec.UNSET,
            permissions: Optional[Sequence[str]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> LicenseData:
        """
        Create a new license under a policy.

        :param policy_id: Policy the license implements
        :param user_id: Optional owner
        :param group_id: Optional group
        :return: The new license, with its server-assigned id and key
        """
        attributes = dict(
            name=name,
            key=key,
            metadata=dict(metadata) if metadata else {},
            expiry=expiry,
            max_uses=max_uses,
            protected=protected,
        )
        if permissions:
            attributes['permissions'] = list(permissions)
        relationships = {
            'policy': self._to_one(urls.POLICIES, policy_id),
            'user': self._to_one(urls.USERS, user_id),
            'group': self._to_one(urls.GROUPS, group_id),
        }
        return self._create(attributes, relationships, cancel=cancel, retryable=retryable)

    # region Actions

    def suspend(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> LicenseData:
        return self._action(id_, 'suspend', cancel=cancel)

    def reinstate(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> LicenseData:
        return self._action(id_, 'reinstate', cancel=cancel)

    def renew(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> LicenseData:
        return self._action(id_, 'renew', cancel=cancel)

    def decrement_usage(self, id_: str, decrement: int = 1, *, cancel: Optional[CancelSignal] = None) -> LicenseData:
        return self._action(id_, 'decrement-usage', body={'meta': {'decrement': decrement}}, cancel=cancel)

    def reset_usage(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> LicenseData:
        return self._action(id_, 'reset-usage', cancel=cancel)

    def generate_activation_token(
            self,
            id_: str,
            ttl: int = 3600,
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> Any:
        """
        Generate an activation token for the license, valid for `ttl` seconds.
        """
        expiry = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        body = {'data': {'type': 'tokens', 'attributes': {'expiry': expiry}}}
        doc = self.query_api(self._url(id_, 'tokens'), method='POST', body=body, schema=ApiBase, cancel=cancel)
        return doc.data

    # endregion

    # region Relationships

    def get_entitlements(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> EntitlementsSchema:
        return self._related(id_, 'entitlements', EntitlementsSchema, page=page, cancel=cancel)

    def attach_entitlements(self, id_: str, entitlement_ids: Iterable[str], *,
                            cancel: Optional[CancelSignal] = None) -> Any:
        return self._link(id_, 'entitlements', urls.ENTITLEMENTS, entitlement_ids, cancel=cancel)

    def detach_entitlements(self, id_: str, entitlement_ids: Iterable[str], *,
                            cancel: Optional[CancelSignal] = None) -> None:
        self._link(id_, 'entitlements', urls.ENTITLEMENTS, entitlement_ids, method='DELETE', cancel=cancel)

    def attach_users(self, id_: str, user_ids: Iterable[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._link(id_, 'users', urls.USERS, user_ids, cancel=cancel)

    def detach_users(self, id_: str, user_ids: Iterable[str], *, cancel: Optional[CancelSignal] = None) -> None:
        self._link(id_, 'users', urls.USERS, user_ids, method='DELETE', cancel=cancel)

    def get_machines(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> MachinesSchema:
        return self._related(id_, 'machines', MachinesSchema, page=page, cancel=cancel)

    def change_policy(self, id_: str, policy_id: str, *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'policy', urls.POLICIES, policy_id, cancel=cancel)

    def change_owner(self, id_: str, user_id: Optional[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'user', urls.USERS, user_id, cancel=cancel)

    def change_group(self, id_: str, group_id: Optional[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'group', urls.GROUPS, group_id, cancel=cancel)

    # endregion
