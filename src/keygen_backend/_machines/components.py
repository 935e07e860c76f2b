from typing import Optional

from .. import _urls as urls
from .._json_schemas.machines import ComponentAttributes, ComponentData, ComponentsSchema, ComponentSchema
from ..api_provider import ResourceApiProvider
from ..query import FilterBase
from ..transport import CancelSignal

__all__ = ['ComponentFilters', 'ComponentsApiProvider']


class ComponentFilters(FilterBase):
    machine: Optional[str] = None
    license: Optional[str] = None
    user: Optional[str] = None
    product: Optional[str] = None


class ComponentsApiProvider(ResourceApiProvider):
    """
    Provide API access to machine hardware components.
    """
    path = urls.COMPONENTS
    data_type = ComponentData
    schema = ComponentSchema
    list_schema = ComponentsSchema
    filters = ComponentFilters
    attributes_type = ComponentAttributes
    writable = frozenset({'name', 'fingerprint', 'metadata'})

    def create(
            self,
            machine_id: str,
            fingerprint: str,
            name: str,
            *,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> ComponentData:
        """
        Add a component to a machine.
        :param machine_id: Machine the component belongs to
        :param fingerprint: Unique component fingerprint, e.g. a serial number
        :param name: Human readable component name
        """
        return self._create(
            {'fingerprint': fingerprint, 'name': name},
            {'machine': self._to_one(urls.MACHINES, machine_id)},
            cancel=cancel,
            retryable=retryable,
        )
