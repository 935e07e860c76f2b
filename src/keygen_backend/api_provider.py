from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Mapping, Optional, Type

import msgspec

from . import _urls as urls
from ._json_schemas.base import ApiBase, Envelope, ListEnvelope, _DataBase
from .query import FilterBase, Pagination, encode_query
from .transport import CancelSignal, convert_data

if TYPE_CHECKING:
    # avoid circular import
    from .keygen import KeygenBackend

__all__ = ['ApiProvider', 'ReadOnlyApiProvider', 'ResourceApiProvider', 'NoFilters']


class NoFilters(FilterBase):
    """
    Filters for endpoints that only support pagination.
    """


class ApiProvider:
    """
    Base class for all API queries.
    Child classes should implement their own methods using the query_api method to drive the query.
    """
    def __init__(self, _backend: KeygenBackend):
        self._backend = _backend

    def query_api(
            self,
            url: str,
            *,
            method: str = 'GET',
            query: Optional[str] = None,
            body: Any = None,
            schema: Optional[Type[Any]] = None,
            cancel: Optional[CancelSignal] = None,
            retryable: Optional[bool] = None,
    ) -> Any:
        """
        Perform one query to the API through the backend transport.

        :param url: Account-relative path or absolute URL
        :param method: HTTP method
        :param query: Encoded query string
        :param body: Request document
        :param schema: msgspec schema (derived from ApiBase) to be used to translate result
        :param cancel: Cancellation signal
        :param retryable: Override the transport retry policy for this call
        :return: Decoded document, or None for an empty response
        """
        return self._backend.transport.request(
            method, url, query=query, body=body, schema=schema, cancel=cancel, retryable=retryable
        )

    def query_all(
            self,
            url: str,
            *,
            query: Optional[str] = None,
            schema: Optional[Type[ListEnvelope]] = None,
            limit: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> list:
        """
        Handle multi-page list queries, following 'next' links.

        :param url: API URL to query
        :param query: Encoded query string for the first page
        :param schema: msgspec schema (derived from ListEnvelope) to be used to translate each page
        :param limit: Data-set size limit
        :param cancel: Cancellation signal, checked for every page
        :return: Concatenation of `schema.data` over pages
        """
        # The API for a multi-dataset returns JSON in pages
        # For every request, if the pages contain 'next', that is the URL
        # of next page.
        results = []
        if schema is None:
            schema = ListEnvelope

        # Loop all the pages while we are pointed to a next URL
        while url:
            section = self.query_api(url, query=query, schema=schema, cancel=cancel)
            if section is None:
                break
            results.extend(section.data)
            # the next link already carries the query
            query = None
            url = section.pages.get('next')

            if limit is not None and len(results) >= limit:
                return results[:limit]

        return results


class ReadOnlyApiProvider(ApiProvider):
    """
    List/get access to one resource kind.
    Subclasses set `path`, the document schemas and the filter struct.
    """
    path: ClassVar[str]
    data_type: ClassVar[Type[_DataBase]]
    schema: ClassVar[Type[Envelope]]
    list_schema: ClassVar[Type[ListEnvelope]]
    filters: ClassVar[Type[FilterBase]] = NoFilters

    def __repr__(self):
        return f'{type(self).__name__}(path={self.path})'

    @property
    def kind(self) -> str:
        return self.data_type.kind

    def _url(self, *parts: Any) -> str:
        return urls.join(self.path, *parts)

    def _filters(self, values: Mapping[str, Any]) -> Optional[FilterBase]:
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            return None
        try:
            return self.filters(**values)
        except TypeError as e:
            raise TypeError(f'Invalid filter for {self.path}: {e}') from None

    def list(
            self,
            *,
            page: Optional[Pagination] = None,
            limit: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
            **filters: Any,
    ) -> ListEnvelope:
        """
        List resources matching the given filters.

        :param page: Page size / number
        :param limit: Flat result cap
        :param cancel: Cancellation signal
        :param filters: Resource specific filter values, see the provider's filter struct
        :return: List document, `count` is the total number of matches
        """
        query = encode_query(self._filters(filters), page, limit)
        return self.query_api(self.path, query=query, schema=self.list_schema, cancel=cancel)

    def list_all(
            self,
            *,
            page_size: int = 100,
            max_items: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
            **filters: Any,
    ) -> list:
        """
        Fetch every matching resource, page by page.
        """
        query = encode_query(self._filters(filters), Pagination(size=page_size, number=1))
        return self.query_all(self.path, query=query, schema=self.list_schema, limit=max_items, cancel=cancel)

    def get_document(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> Envelope:
        """
        Get the full single-resource document (with `included`) by id.
        """
        return self.query_api(self._url(id_), schema=self.schema, cancel=cancel)

    def get(self, id_: str, *, cancel: Optional[CancelSignal] = None) -> Any:
        """
        Get a specific resource by id.

        :param id_: Resource id
        :param cancel: Cancellation signal
        :return: Resource data
        :raises NotFound: if no resource has this id
        """
        return self.get_document(id_, cancel=cancel).data

    def _related(
            self,
            id_: str,
            name: str,
            schema: Type[ListEnvelope],
            *,
            page: Optional[Pagination] = None,
            limit: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> ListEnvelope:
        # GET <path>/<id>/<name>, a to-many relationship endpoint
        return self.query_api(
            self._url(id_, name), query=encode_query(None, page, limit), schema=schema, cancel=cancel
        )


class ResourceApiProvider(ReadOnlyApiProvider):
    """
    Full list/get/create/update/delete access to one resource kind.
    `writable` names the attributes accepted by create and update.
    """
    attributes_type: ClassVar[Type[msgspec.Struct]]
    writable: ClassVar[frozenset[str]] = frozenset()

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        # hook for per-resource normalization of attribute input
        return values

    def _attributes(self, values: Mapping[str, Any]) -> dict[str, Any]:
        wire_names = {f.name: f.encode_name for f in msgspec.structs.fields(self.attributes_type)}
        values = self._prepare({k: v for k, v in values.items() if v is not msgspec.UNSET})
        attributes = {}
        for k, v in values.items():
            if k not in self.writable:
                raise TypeError(f'{self.path} has no writable attribute "{k}"')
            attributes[wire_names.get(k, k)] = v
        return attributes

    @staticmethod
    def _to_one(kind: str, id_: Optional[str]) -> Optional[dict]:
        if id_ is None:
            return None
        return {'data': {'type': kind, 'id': id_}}

    def _create(
            self,
            attributes: Mapping[str, Any],
            relationships: Optional[Mapping[str, Optional[dict]]] = None,
            *,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
    ) -> Any:
        data = {'type': self.kind, 'attributes': self._attributes(attributes)}
        if relationships:
            rels = {k: v for k, v in relationships.items() if v is not None}
            if rels:
                data['relationships'] = rels
        doc = self.query_api(
            self.path, method='POST', body={'data': data}, schema=self.schema, cancel=cancel, retryable=retryable
        )
        return doc.data

    def create(self, *, cancel: Optional[CancelSignal] = None, retryable: bool = False, **attributes: Any) -> Any:
        """
        Create a resource. The server assigns the id.

        Creation is not retried on transient failures unless `retryable` is set,
        which could otherwise create duplicates.

        :raises ValidationFailed: on attribute errors
        """
        return self._create(attributes, cancel=cancel, retryable=retryable)

    def update(
            self,
            id_: str,
            *,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
            **changes: Any,
    ) -> Any:
        """
        Partially update a resource, omitted attributes are unchanged.
        Passing None explicitly sends null (e.g. to clear a limit).

        :raises NotFound: if the resource no longer exists
        """
        body = {'data': {'type': self.kind, 'id': id_, 'attributes': self._attributes(changes)}}
        doc = self.query_api(
            self._url(id_), method='PATCH', body=body, schema=self.schema, cancel=cancel, retryable=retryable
        )
        return doc.data

    def delete(self, id_: str, *, cancel: Optional[CancelSignal] = None, retryable: bool = False) -> None:
        """
        Delete a resource.

        :raises NotFound: if the resource is already gone, which callers can treat as success
        """
        self.query_api(self._url(id_), method='DELETE', cancel=cancel, retryable=retryable)

    def _action(
            self,
            id_: str,
            action: str,
            *,
            body: Any = None,
            schema: Optional[Type[Any]] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> Any:
        # POST <path>/<id>/actions/<action>
        doc = self.query_api(
            self._url(id_, 'actions', action),
            method='POST',
            body=body,
            schema=schema if schema is not None else self.schema,
            cancel=cancel,
        )
        return doc.data if isinstance(doc, ApiBase) else doc

    def _link(
            self,
            id_: str,
            relationship: str,
            kind: str,
            ids: Iterable[str],
            *,
            method: str = 'POST',
            cancel: Optional[CancelSignal] = None,
    ) -> Any:
        # attach (POST) or detach (DELETE) members of a to-many relationship
        body = {'data': [{'type': kind, 'id': i} for i in ids]}
        return self.query_api(
            self._url(id_, 'relationships', relationship), method=method, body=body, cancel=cancel
        )

    def _change(
            self,
            id_: str,
            relationship: str,
            kind: str,
            target_id: Optional[str],
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> Any:
        # replace a to-one relationship, None clears it
        body = {'data': {'type': kind, 'id': target_id} if target_id is not None else None}
        doc = self.query_api(
            self._url(id_, 'relationships', relationship), method='PATCH', body=body, cancel=cancel
        )
        if doc is None or not isinstance(doc.data, dict):
            return None
        return convert_data(doc.data)
