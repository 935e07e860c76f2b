from typing import Any, Iterable, Mapping, Optional

from . import _urls as urls
from ._json_schemas.licensing import (
    EntitlementAttributes,
    EntitlementData,
    EntitlementSchema,
    EntitlementsSchema,
    LicensesSchema,
)
from .api_provider import ResourceApiProvider
from .query import FilterBase, Pagination
from .transport import CancelSignal

__all__ = ['EntitlementFilters', 'EntitlementsApiProvider']


class EntitlementFilters(FilterBase):
    name: Optional[str] = None
    code: Optional[str] = None


class EntitlementsApiProvider(ResourceApiProvider):
    """
    Provide API access to entitlements, the feature flags attached to policies and licenses.
    """
    path = urls.ENTITLEMENTS
    data_type = EntitlementData
    schema = EntitlementSchema
    list_schema = EntitlementsSchema
    filters = EntitlementFilters
    attributes_type = EntitlementAttributes
    writable = frozenset({'name', 'code', 'metadata'})

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        for k in ('name', 'code'):
            if isinstance(values.get(k), str):
                values[k] = values[k].strip()
        return values

    def create(
            self,
            name: str,
            code: str,
            *,
            metadata: Optional[Mapping[str, Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> EntitlementData:
        """
        Create a new entitlement.
        :param name: Display name
        :param code: Unique code used in license validation scopes
        """
        attributes: dict[str, Any] = {'name': name, 'code': code}
        if metadata:
            attributes['metadata'] = dict(metadata)
        return self._create(attributes, cancel=cancel, retryable=retryable)

    def get_licenses(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> LicensesSchema:
        """
        Licenses carrying this entitlement, through the relationship link.
        """
        return self._related(id_, 'licenses', LicensesSchema, page=page, cancel=cancel)

    def attach_to_licenses(self, id_: str, license_ids: Iterable[str], *,
                           cancel: Optional[CancelSignal] = None) -> Any:
        return self._link(id_, 'licenses', urls.LICENSES, license_ids, cancel=cancel)

    def detach_from_licenses(self, id_: str, license_ids: Iterable[str], *,
                             cancel: Optional[CancelSignal] = None) -> None:
        self._link(id_, 'licenses', urls.LICENSES, license_ids, method='DELETE', cancel=cancel)
