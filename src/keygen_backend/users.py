from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

import msgspec

from . import _urls as urls
from ._exceptions import CurrentPasswordIncorrect, ValidationFailed
from ._json_schemas.base import ApiBase
from ._json_schemas.licensing import LicensesSchema
from ._json_schemas.machines import MachinesSchema
from ._json_schemas.users import UserAttributes, UserData, UserSchema, UsersSchema
from ._users.second_factors import SecondFactorsApiProvider
from .api_provider import ResourceApiProvider
from .enums import UserRole, UserStatus
from .query import FilterBase, Pagination
from .transport import CancelSignal

if TYPE_CHECKING:
    # avoid circular import
    from .keygen import KeygenBackend

__all__ = ['UserFilters', 'UsersApiProvider', 'ALL_USER_ROLES']

ALL_USER_ROLES = tuple(UserRole)

# pointers the server uses for errors about the new password itself
_NEW_PASSWORD_POINTERS = ('/meta/newPassword', '/meta/new_password', '/data/attributes/password')


class UserFilters(FilterBase):
    email: Optional[str] = None
    role: Optional[UserRole] = None
    roles: Optional[list[UserRole]] = None
    status: Optional[UserStatus] = None
    assigned: Optional[bool] = None


class UsersApiProvider(ResourceApiProvider):
    """
    Provide API access to users.
    """
    path = urls.USERS
    data_type = UserData
    schema = UserSchema
    list_schema = UsersSchema
    filters = UserFilters
    attributes_type = UserAttributes
    # password is deliberately absent, it only changes through update_password
    writable = frozenset({'first_name', 'last_name', 'email', 'role', 'metadata', 'permissions'})

    def __init__(self, _backend: KeygenBackend):
        super().__init__(_backend=_backend)
        self.second_factors = SecondFactorsApiProvider(self._backend)

    def create(
            self,
            email: str,
            *,
            first_name: Optional[str] = None,
            last_name: Optional[str] = None,
            role: Optional[UserRole] = None,
            password: Optional[str] = None,
            metadata: Optional[Mapping[str, Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> UserData:
        """
        Create a new user. Only values that are set are sent.
        """
        attributes: dict[str, Any] = {'email': email}
        if first_name:
            attributes['first_name'] = first_name
        if last_name:
            attributes['last_name'] = last_name
        if role:
            attributes['role'] = role
        if metadata:
            attributes['metadata'] = dict(metadata)
        data_attributes = self._attributes(attributes)
        if password:
            # the initial password is a create-only attribute
            data_attributes['password'] = password
        body = {'data': {'type': self.kind, 'attributes': data_attributes}}
        doc = self.query_api(self.path, method='POST', body=body, schema=self.schema, cancel=cancel,
                             retryable=retryable)
        return doc.data

    def update_password(
            self,
            id_: str,
            current_password: str,
            new_password: str,
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> UserData:
        """
        Change a user's password through the dedicated action endpoint.

        :raises CurrentPasswordIncorrect: if the server rejected the current password
        :raises ValidationFailed: if the new password itself was rejected
        """
        body = {'meta': {'currentPassword': current_password, 'newPassword': new_password}}
        try:
            return self._action(id_, 'update-password', body=body, cancel=cancel)
        except ValidationFailed as e:
            if isinstance(e, CurrentPasswordIncorrect) or e.status != 422:
                raise
            if any(err.pointer in _NEW_PASSWORD_POINTERS for err in e.errors):
                raise
            raise CurrentPasswordIncorrect(str(e), response=e.response, errors=e.errors) from e

    def reset_password(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> Any:
        """
        Request a password reset email for the user.
        """
        return self._action(id_, 'reset-password', schema=ApiBase, cancel=cancel)

    def ban(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> UserData:
        return self._action(id_, 'ban', cancel=cancel)

    def unban(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> UserData:
        return self._action(id_, 'unban', cancel=cancel)

    def generate_token(
            self,
            id_: str,
            *,
            name: str = 'User Token',
            expiry: Any = msgspec.UNSET,
            permissions: Optional[Sequence[str]] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Any:
        """
        Generate an API token for the user.
        """
        attributes = {'name': name, 'permissions': list(permissions) if permissions else ['*']}
        if expiry is not msgspec.UNSET:
            attributes['expiry'] = expiry
        body = {'data': {'type': 'tokens', 'attributes': attributes}}
        doc = self.query_api(self._url(id_, 'tokens'), method='POST', body=body, schema=ApiBase, cancel=cancel)
        return doc.data

    def get_licenses(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> LicensesSchema:
        return self._related(id_, 'licenses', LicensesSchema, page=page, cancel=cancel)

    def get_machines(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> MachinesSchema:
        return self._related(id_, 'machines', MachinesSchema, page=page, cancel=cancel)

    def change_group(self, id_: str, group_id: Optional[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'group', urls.GROUPS, group_id, cancel=cancel)
