"""
Resolve relationships against a document's `included` array.

Resolution never performs a request: targets found in `included` are
returned directly, anything else is reported as missing together with the
relationship's related link so the caller can fetch it explicitly.
"""
from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

import msgspec

from ._json_schemas import convert_resource
from ._json_schemas.base import ResourceData, ResourceIdentifier, _DataBase

__all__ = ['Resolution', 'resolve']


class Resolution(NamedTuple):
    name: str
    identifiers: list[ResourceIdentifier]
    resources: list[_DataBase]
    missing: list[ResourceIdentifier]
    related_url: Optional[str]
    to_many: bool
    loaded: bool

    @property
    def complete(self) -> bool:
        """
        True when the relationship data was sent and every referenced
        resource was found in `included`.
        """
        return self.loaded and not self.missing

    @property
    def resource(self) -> Optional[_DataBase]:
        """
        The single resolved target of a to-one relationship, if present.
        """
        return self.resources[0] if self.resources else None


def _index(included: Iterable) -> dict[tuple[str, str], object]:
    index = {}
    for item in included:
        if isinstance(item, dict):
            key = (item.get('type'), item.get('id'))
        else:
            key = (item.type, item.id)
        index[key] = item
    return index


def _convert_included(item: dict) -> Optional[_DataBase]:
    try:
        return convert_resource(item)
    except msgspec.ValidationError:
        pass
    # sparse fieldsets leave out required attributes, keep the raw attributes
    try:
        return msgspec.convert(item, type=ResourceData)
    except msgspec.ValidationError:
        return None


def resolve(resource: _DataBase, name: str, included: Iterable = ()) -> Resolution:
    """
    Resolve relationship `name` of `resource`.

    :param resource: Primary resource holding the relationship
    :param name: Relationship name, e.g. "policy" or "entitlements"
    :param included: Included resources of the same document (raw dicts or typed data)
    :return: Resolution with found resources, missing identifiers and the related link
    """
    rel = resource.relationship(name)
    if rel is None:
        raise KeyError(f'Resource {resource.type}/{resource.id} has no relationship "{name}"')

    to_many = isinstance(rel.data, list)
    loaded = rel.data is not msgspec.UNSET
    if not loaded or rel.data is None:
        identifiers = []
    elif to_many:
        identifiers = list(rel.data)
    else:
        identifiers = [rel.data]

    index = _index(included)
    resources = []
    missing = []
    for ident in identifiers:
        item = index.get((ident.type, ident.id))
        if item is None:
            missing.append(ident)
        elif isinstance(item, dict):
            converted = _convert_included(item)
            if converted is None:
                missing.append(ident)
            else:
                resources.append(converted)
        else:
            resources.append(item)

    return Resolution(
        name=name,
        identifiers=identifiers,
        resources=resources,
        missing=missing,
        related_url=rel.related_url,
        to_many=to_many,
        loaded=loaded,
    )
