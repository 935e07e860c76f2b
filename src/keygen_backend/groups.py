from typing import Any, Mapping, Optional

from . import _urls as urls
from ._json_schemas.licensing import GroupAttributes, GroupData, GroupSchema, GroupsSchema, LicensesSchema
from ._json_schemas.users import UsersSchema
from .api_provider import ResourceApiProvider
from .query import FilterBase, Pagination
from .transport import CancelSignal

__all__ = ['GroupFilters', 'GroupsApiProvider']


class GroupFilters(FilterBase):
    name: Optional[str] = None
    max_licenses: Optional[int] = None
    max_machines: Optional[int] = None
    max_users: Optional[int] = None


class GroupsApiProvider(ResourceApiProvider):
    """
    Provide API access to groups of users, licenses and machines.
    """
    path = urls.GROUPS
    data_type = GroupData
    schema = GroupSchema
    list_schema = GroupsSchema
    filters = GroupFilters
    attributes_type = GroupAttributes
    writable = frozenset({'name', 'max_licenses', 'max_machines', 'max_users', 'metadata'})

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        if isinstance(values.get('name'), str):
            values['name'] = values['name'].strip()
        return values

    def create(
            self,
            name: str,
            *,
            max_licenses: Optional[int] = None,
            max_machines: Optional[int] = None,
            max_users: Optional[int] = None,
            metadata: Optional[Mapping[str, Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> GroupData:
        """
        Create a new group. Limits left as None are unlimited.
        """
        attributes = dict(
            name=name,
            max_licenses=max_licenses,
            max_machines=max_machines,
            max_users=max_users,
            metadata=dict(metadata) if metadata else None,
        )
        attributes = {k: v for k, v in attributes.items() if v is not None}
        return self._create(attributes, cancel=cancel, retryable=retryable)

    def get_licenses(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> LicensesSchema:
        return self._related(id_, 'licenses', LicensesSchema, page=page, cancel=cancel)

    def get_users(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> UsersSchema:
        return self._related(id_, 'users', UsersSchema, page=page, cancel=cancel)

    def add_user(self, id_: str, user_id: str, *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._link(id_, 'users', urls.USERS, [user_id], cancel=cancel)

    def remove_user(self, id_: str, user_id: str, *, cancel: Optional[CancelSignal] = None) -> None:
        self._link(id_, 'users', urls.USERS, [user_id], method='DELETE', cancel=cancel)

    def add_license(self, id_: str, license_id: str, *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._link(id_, 'licenses', urls.LICENSES, [license_id], cancel=cancel)

    def remove_license(self, id_: str, license_id: str, *, cancel: Optional[CancelSignal] = None) -> None:
        self._link(id_, 'licenses', urls.LICENSES, [license_id], method='DELETE', cancel=cancel)
