from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from . import _urls as urls
from ._json_schemas.machines import (
    ComponentsSchema,
    MachineAttributes,
    MachineData,
    MachineSchema,
    MachinesSchema,
    ProcessesSchema,
)
from ._machines.components import ComponentsApiProvider
from ._machines.processes import ProcessesApiProvider
from .api_provider import ResourceApiProvider
from .enums import HeartbeatStatus
from .query import FilterBase, Pagination
from .transport import CancelSignal

if TYPE_CHECKING:
    # avoid circular import
    from .keygen import KeygenBackend

__all__ = ['MachineFilters', 'MachinesApiProvider']


class MachineFilters(FilterBase):
    license: Optional[str] = None
    user: Optional[str] = None
    group: Optional[str] = None
    product: Optional[str] = None
    policy: Optional[str] = None
    key: Optional[str] = None
    fingerprint: Optional[str] = None
    hostname: Optional[str] = None
    ip: Optional[str] = None
    status: Optional[HeartbeatStatus] = None
    metadata: Optional[dict[str, str]] = None


class MachinesApiProvider(ResourceApiProvider):
    """
    Provide API access to machines (license activations).
    """
    path = urls.MACHINES
    data_type = MachineData
    schema = MachineSchema
    list_schema = MachinesSchema
    filters = MachineFilters
    attributes_type = MachineAttributes
    writable = frozenset({
        'fingerprint', 'name', 'platform', 'hostname', 'ip', 'cores', 'memory', 'disk',
        'require_heartbeat', 'heartbeat_duration', 'metadata',
    })

    def __init__(self, _backend: KeygenBackend):
        super().__init__(_backend=_backend)
        self.processes = ProcessesApiProvider(self._backend)
        self.components = ComponentsApiProvider(self._backend)

    def activate(
            self,
            fingerprint: str,
            license_id: str,
            *,
            name: Optional[str] = None,
            platform: Optional[str] = None,
            hostname: Optional[str] = None,
            ip: Optional[str] = None,
            cores: Optional[int] = None,
            memory: Optional[int] = None,
            disk: Optional[int] = None,
            metadata: Optional[Mapping[str, Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> MachineData:
        """
        Activate a machine for a license.

        :param fingerprint: Unique machine fingerprint
        :param license_id: License the machine is activated against
        :return: The new machine
        :raises ValidationFailed: e.g. when the fingerprint is taken or the license is at its machine limit
        """
        attributes = dict(
            fingerprint=fingerprint,
            name=name,
            platform=platform,
            hostname=hostname,
            ip=ip,
            cores=cores,
            memory=memory,
            disk=disk,
            metadata=dict(metadata) if metadata else None,
        )
        attributes = {k: v for k, v in attributes.items() if v is not None}
        relationships = {'license': self._to_one(urls.LICENSES, license_id)}
        return self._create(attributes, relationships, cancel=cancel, retryable=retryable)

    create = activate

    def deactivate(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> None:
        self.delete(id_, cancel=cancel)

    # region Actions

    def check_out(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> MachineData:
        return self._action(id_, 'check-out', cancel=cancel)

    def ping(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> MachineData:
        """
        Send a heartbeat ping for the machine.
        """
        return self._action(id_, 'ping', cancel=cancel)

    def reset_heartbeat(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> MachineData:
        return self._action(id_, 'reset', cancel=cancel)

    # endregion

    # region Relationships

    def get_processes(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> ProcessesSchema:
        return self._related(id_, 'processes', ProcessesSchema, page=page, cancel=cancel)

    def get_components(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> ComponentsSchema:
        return self._related(id_, 'components', ComponentsSchema, page=page, cancel=cancel)

    def change_owner(self, id_: str, user_id: Optional[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'user', urls.USERS, user_id, cancel=cancel)

    def change_group(self, id_: str, group_id: Optional[str], *, cancel: Optional[CancelSignal] = None) -> Any:
        return self._change(id_, 'group', urls.GROUPS, group_id, cancel=cancel)

    # endregion
