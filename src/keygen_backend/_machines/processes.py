from typing import Optional

from .. import _urls as urls
from .._json_schemas.machines import ProcessAttributes, ProcessData, ProcessesSchema, ProcessSchema
from ..api_provider import ResourceApiProvider
from ..query import FilterBase
from ..transport import CancelSignal

__all__ = ['ProcessFilters', 'ProcessesApiProvider']


class ProcessFilters(FilterBase):
    machine: Optional[str] = None
    license: Optional[str] = None
    user: Optional[str] = None
    product: Optional[str] = None


class ProcessesApiProvider(ResourceApiProvider):
    """
    Provide API access to the processes spawned on machines.
    """
    path = urls.PROCESSES
    data_type = ProcessData
    schema = ProcessSchema
    list_schema = ProcessesSchema
    filters = ProcessFilters
    attributes_type = ProcessAttributes
    writable = frozenset({'pid', 'name', 'platform', 'metadata'})

    def create(
            self,
            machine_id: str,
            pid: str,
            *,
            name: Optional[str] = None,
            platform: Optional[str] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> ProcessData:
        """
        Spawn a process on a machine.
        """
        attributes = {'pid': str(pid), 'name': name, 'platform': platform}
        attributes = {k: v for k, v in attributes.items() if v is not None}
        return self._create(
            attributes, {'machine': self._to_one(urls.MACHINES, machine_id)}, cancel=cancel, retryable=retryable
        )

    def kill(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> None:
        self.delete(id_, cancel=cancel)

    def ping(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> ProcessData:
        return self._action(id_, 'ping', cancel=cancel)
