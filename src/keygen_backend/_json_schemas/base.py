from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

import msgspec
import pandas as pd

# region Base Objects


class ResourceIdentifier(msgspec.Struct, frozen=True):
    """
    A {type, id} reference to a resource, as found in relationship data.
    """
    type: str
    id: str


class Relationship(msgspec.Struct, frozen=True):
    """
    Relationship object. `data` is one identifier (to-one), a list (to-many),
    None for an empty to-one, or UNSET when the server only sent links.
    """
    data: Union[ResourceIdentifier, list[ResourceIdentifier], None, msgspec.UnsetType] = msgspec.UNSET
    links: Optional[dict[str, Optional[str]]] = None
    meta: Optional[dict] = None

    @property
    def related_url(self) -> Optional[str]:
        if self.links is None:
            return None
        return self.links.get('related')


class ErrorSource(msgspec.Struct, frozen=True):
    pointer: Optional[str] = None
    parameter: Optional[str] = None
    header: Optional[str] = None


class ErrorObject(msgspec.Struct, frozen=True):
    """
    A single JSON:API error. Servers may return several, order is preserved.
    """
    title: Optional[str] = None
    detail: Optional[str] = None
    id: Optional[str] = None
    status: Union[str, int, None] = None
    code: Optional[str] = None
    source: Optional[ErrorSource] = None
    links: Optional[dict] = None
    meta: Optional[dict] = None

    @property
    def pointer(self) -> Optional[str]:
        return self.source.pointer if self.source is not None else None

    @property
    def parameter(self) -> Optional[str]:
        return self.source.parameter if self.source is not None else None


class ErrorsSchema(msgspec.Struct):
    # schema for any non-2xx response body
    errors: list[ErrorObject] = []
    meta: Optional[dict] = None


class ApiBase(msgspec.Struct):
    """
    Base object for all API query returns.
    """
    data: Any = None
    included: list[dict] = []
    meta: Optional[dict] = None
    links: Optional[dict] = None

    def __post_init__(self):
        # the server can nest pagination meta under links.meta, lift it to the top level
        if self.meta is None and self.links is not None and isinstance(self.links.get('meta'), dict):
            self.meta = self.links['meta']


class _Attributes(msgspec.Struct, frozen=True, kw_only=True, rename='camel'):
    """
    Base class for resource attribute sets (camelCase on the wire).
    """


class _DataBase(msgspec.Struct, frozen=True, kw_only=True):
    """
    Base class for API 'data' field contents (generic attributes dict).
    Subclasses pin `kind` to the canonical resource type string.
    """
    kind: ClassVar[Optional[str]] = None

    type: str
    id: str
    attributes: Any = {}
    links: Optional[dict[str, Optional[str]]] = None
    relationships: Optional[dict[str, Relationship]] = None
    meta: Optional[dict] = None

    def __post_init__(self):
        if self.kind is not None and self.type != self.kind:
            raise ValueError(f'Expected resource of type "{self.kind}", got "{self.type}"')

    @property
    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(type=self.type, id=self.id)

    def relationship(self, name: str) -> Optional[Relationship]:
        if self.relationships is None:
            return None
        return self.relationships.get(name)


class ResourceData(_DataBase):
    """
    Resource of a kind this client has no dedicated schema for.
    """
    attributes: dict = {}


# endregion

# region Documents


class Envelope(ApiBase):
    """
    Single resource document. Subclasses narrow `data` to a resource schema.
    """

    def resolve(self, name: str, resource: Optional[_DataBase] = None):
        """
        Resolve a relationship of the primary resource (or of `resource`)
        against this document's `included` array. Never performs a request.
        """
        from ..relationships import resolve
        return resolve(resource if resource is not None else self.data, name, self.included)


class ListEnvelope(ApiBase):
    """
    Resource collection document. Subclasses narrow `data` to a list of resource schemas.
    """
    data: list = []

    def __iter__(self):
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    @property
    def count(self) -> int:
        """
        Total number of matching items, independent of page size.
        Falls back to the length of the returned page when the server omits it.
        """
        count = (self.meta or {}).get('count')
        if isinstance(count, (int, float)) and not isinstance(count, bool):
            return int(count)
        return len(self.data)

    @property
    def pages(self) -> dict[str, str]:
        """
        Pagination links (first/last/next/prev), absent keys are not applicable.
        """
        pages = (self.meta or {}).get('pages')
        if not isinstance(pages, dict):
            pages = self.links or {}
        return {k: v for k, v in pages.items() if k in ('first', 'last', 'next', 'prev') and v}

    def resolve(self, name: str, resource: Optional[_DataBase] = None):
        """
        Resolve a relationship of one listed resource against this document's `included` array.
        """
        if resource is None:
            raise ValueError('A collection document needs the resource to resolve against')
        from ..relationships import resolve
        return resolve(resource, name, self.included)

    def to_df(self) -> pd.DataFrame:
        """
        Get resource attributes as a pandas dataframe
        :return: Dataframe with one row per resource, indexed by id
        """
        rows = [
            msgspec.structs.asdict(r.attributes) if isinstance(r.attributes, msgspec.Struct) else dict(r.attributes)
            for r in self.data
        ]
        df = pd.DataFrame(rows)
        df.insert(0, 'id', pd.Series([r.id for r in self.data], dtype=object))
        return df.set_index('id')


# endregion
