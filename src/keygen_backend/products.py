from typing import Any, Optional, Sequence

from . import _urls as urls
from ._json_schemas.licensing import ProductAttributes, ProductData, ProductSchema, ProductsSchema
from .api_provider import ResourceApiProvider
from .enums import DistributionStrategy
from .transport import CancelSignal

__all__ = ['ProductsApiProvider']


class ProductsApiProvider(ResourceApiProvider):
    """
    Provide API access to products. Products are only paginated, there are no filters.
    """
    path = urls.PRODUCTS
    data_type = ProductData
    schema = ProductSchema
    list_schema = ProductsSchema
    attributes_type = ProductAttributes
    writable = frozenset({'name', 'code', 'url', 'distribution_strategy', 'platforms', 'permissions', 'metadata'})

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        for k in ('name', 'code', 'url'):
            if isinstance(values.get(k), str):
                values[k] = values[k].strip()
        return values

    def create(
            self,
            name: str,
            *,
            code: Optional[str] = None,
            url: Optional[str] = None,
            distribution_strategy: Optional[DistributionStrategy] = None,
            platforms: Optional[Sequence[str]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
            **attributes: Any,
    ) -> ProductData:
        """
        Create a new product.
        :param name: Product name
        :param distribution_strategy: LICENSED, OPEN or CLOSED
        """
        attributes.update(
            name=name,
            code=code,
            url=url,
            distribution_strategy=distribution_strategy,
            platforms=list(platforms) if platforms is not None else None,
        )
        attributes = {k: v for k, v in attributes.items() if v is not None}
        return self._create(attributes, cancel=cancel, retryable=retryable)
