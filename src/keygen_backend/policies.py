from typing import Any, Iterable, Optional

import msgspec

from . import _urls as urls
from ._json_schemas.licensing import (
    EntitlementsSchema,
    PoliciesSchema,
    PolicyAttributes,
    PolicyData,
    PolicySchema,
)
from .api_provider import ResourceApiProvider
from .query import FilterBase, Pagination
from .transport import CancelSignal

__all__ = ['PolicyFilters', 'PoliciesApiProvider']

# everything except the read-only timestamps
_WRITABLE = frozenset(
    f.name for f in msgspec.structs.fields(PolicyAttributes)
    if f.name not in ('created', 'updated')
)


class PolicyFilters(FilterBase):
    product: Optional[str] = None


class PoliciesApiProvider(ResourceApiProvider):
    """
    Provide API access to policies, the license templates of a product.
    """
    path = urls.POLICIES
    data_type = PolicyData
    schema = PolicySchema
    list_schema = PoliciesSchema
    filters = PolicyFilters
    attributes_type = PolicyAttributes
    writable = _WRITABLE

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        if isinstance(values.get('name'), str):
            values['name'] = values['name'].strip()
        return values

    def create(
            self,
            product_id: str,
            name: str,
            *,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
            **attributes: Any,
    ) -> PolicyData:
        """
        Create a new policy for a product.

        :param product_id: Product the policy belongs to
        :param name: Policy name
        :param attributes: Any further policy attributes, snake_case (e.g. max_machines=5)
        """
        attributes['name'] = name
        relationships = {'product': self._to_one(urls.PRODUCTS, product_id)}
        return self._create(attributes, relationships, cancel=cancel, retryable=retryable)

    def get_entitlements(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> EntitlementsSchema:
        return self._related(id_, 'entitlements', EntitlementsSchema, page=page, cancel=cancel)

    def _entitlements(self, id_: str, method: str, entitlement_ids: Iterable[str],
                      cancel: Optional[CancelSignal]) -> Any:
        # policies manage entitlements on the related endpoint, not under relationships/
        body = {'data': [{'type': urls.ENTITLEMENTS, 'id': i} for i in entitlement_ids]}
        return self.query_api(self._url(id_, 'entitlements'), method=method, body=body, cancel=cancel)

    def attach_entitlements(self, id_: str, entitlement_ids: Iterable[str], *,
                            cancel: Optional[CancelSignal] = None) -> Any:
        return self._entitlements(id_, 'POST', entitlement_ids, cancel)

    def detach_entitlements(self, id_: str, entitlement_ids: Iterable[str], *,
                            cancel: Optional[CancelSignal] = None) -> None:
        self._entitlements(id_, 'DELETE', entitlement_ids, cancel)
