"""
Canonical query string encoding for list endpoints.

Filters are frozen msgspec structs, one per resource kind. Their field
declaration order fixes the parameter order, so the same filter always
yields the same string. Pagination encodes as page[size]/page[number],
a flat result cap as limit.
"""
from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional, Type, TypeVar
from urllib.parse import parse_qsl, urlencode

import msgspec
import msgspec.inspect

__all__ = [
    'FilterBase',
    'DateRange',
    'Requestor',
    'Pagination',
    'build_params',
    'encode_query',
    'decode_query',
]

F = TypeVar('F', bound='FilterBase')


def _is_empty(value: Any) -> bool:
    if isinstance(value, Mapping):
        return all(v is None for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(v is None for v in value)
    if isinstance(value, FilterBase):
        return all(getattr(value, f.name) is None for f in msgspec.structs.fields(value))
    return False


class FilterBase(msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True, rename='camel'):
    """
    Base class for per-resource list filters (snake_case in Python, camelCase on the wire).
    """

    def __post_init__(self):
        # empty values encode to nothing, hold them as None so decoding gives back an equal filter
        for field in msgspec.structs.fields(self):
            if _is_empty(getattr(self, field.name)):
                msgspec.structs.force_setattr(self, field.name, None)


class DateRange(FilterBase):
    start: Optional[date] = None
    end: Optional[date] = None


class Requestor(FilterBase):
    type: Optional[str] = None
    id: Optional[str] = None


class Pagination(NamedTuple):
    size: Optional[int] = None
    number: Optional[int] = None


def _format_value(name: str, v: Any) -> str:
    if isinstance(v, bool):
        return 'true' if v else 'false'
    if isinstance(v, Enum):
        return str(v.value)
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, date):
        # also covers datetime
        return v.isoformat()
    if isinstance(v, str):
        return v
    raise ValueError(f'Incorrect type {type(v)} for query field {name}')


def _filter_pairs(key: str, value: Any, name: str) -> list[tuple[str, str]]:
    if value is None or value is msgspec.UNSET:
        return []
    if isinstance(value, msgspec.Struct):
        pairs = []
        for field in msgspec.structs.fields(value):
            pairs.extend(_filter_pairs(f'{key}[{field.encode_name}]', getattr(value, field.name), name))
        return pairs
    if isinstance(value, Mapping):
        # free-form keys (metadata) have no declaration order, sort them
        pairs = []
        for k in sorted(value, key=str):
            pairs.extend(_filter_pairs(f'{key}[{k}]', value[k], name))
        return pairs
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        return [(key, _format_value(name, item)) for item in items if item is not None]
    return [(key, _format_value(name, value))]


def _check_positive(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f'{name} must be a positive integer, got {value!r}')


def build_params(
        filters: Optional[FilterBase] = None,
        page: Optional[Pagination] = None,
        limit: Optional[int] = None,
) -> list[tuple[str, str]]:
    """
    Build ordered query parameters.

    :param filters: Per-resource filter struct
    :param page: Page size / number
    :param limit: Flat result cap, for simple top-N fetches
    :return: List of (key, value) pairs, filters first, then page, then limit
    """
    params = []
    if filters is not None:
        for field in msgspec.structs.fields(filters):
            params.extend(_filter_pairs(f'filter[{field.encode_name}]', getattr(filters, field.name), field.name))
    if page is not None:
        _check_positive('page[size]', page.size)
        _check_positive('page[number]', page.number)
        if page.size is not None:
            params.append(('page[size]', str(page.size)))
        if page.number is not None:
            params.append(('page[number]', str(page.number)))
    if limit is not None:
        _check_positive('limit', limit)
        params.append(('limit', str(limit)))
    return params


def encode_query(
        filters: Optional[FilterBase] = None,
        page: Optional[Pagination] = None,
        limit: Optional[int] = None,
) -> str:
    """
    Encode filters and pagination as a canonical query string (without leading '?').
    Brackets are kept literal, values are percent-encoded.
    """
    return urlencode(build_params(filters, page, limit), safe='[]')


_key_re = re.compile(r'^([^\[\]]+)((?:\[[^\[\]]*\])*)$')


def _split_key(key: str) -> tuple[str, list[str]]:
    m = _key_re.match(key)
    if m is None:
        raise ValueError(f'Malformed query key {key}')
    return m.group(1), re.findall(r'\[([^\[\]]*)\]', m.group(2))


def _is_sequence(t: msgspec.inspect.Type) -> bool:
    if isinstance(t, msgspec.inspect.UnionType):
        return any(_is_sequence(x) for x in t.types)
    return isinstance(
        t, (msgspec.inspect.ListType, msgspec.inspect.VarTupleType, msgspec.inspect.SetType,
            msgspec.inspect.FrozenSetType)
    )


def _collapse(node: Any) -> Any:
    # nested leaves are scalars, keep the last occurrence
    if isinstance(node, dict):
        return {k: _collapse(v) for k, v in node.items()}
    return node[-1]


def decode_query(
        query: str,
        filters_type: Optional[Type[F]] = None,
) -> tuple[Optional[F], Optional[Pagination], Optional[int]]:
    """
    Reference decoder, the inverse of encode_query.

    :param query: Query string, with or without leading '?'
    :param filters_type: Filter struct to decode filter[...] parameters into
    :return: (filters, page, limit), each None when absent
    """
    raw: dict[str, Any] = {}
    page: dict[str, int] = {}
    limit = None
    for key, value in parse_qsl(query.lstrip('?'), keep_blank_values=True):
        head, path = _split_key(key)
        if head == 'page' and len(path) == 1 and path[0] in ('size', 'number'):
            page[path[0]] = int(value)
        elif head == 'limit' and not path:
            limit = int(value)
        elif head == 'filter' and path:
            node = raw
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node.setdefault(path[-1], []).append(value)
        else:
            raise ValueError(f'Unrecognized query key {key}')

    filters = None
    if filters_type is not None:
        info = msgspec.inspect.type_info(filters_type)
        converted = {}
        for field in info.fields:
            if field.encode_name not in raw:
                continue
            value = raw.pop(field.encode_name)
            if isinstance(value, list) and not _is_sequence(field.type):
                value = value[-1]
            elif isinstance(value, dict):
                value = _collapse(value)
            converted[field.encode_name] = value
        if raw:
            raise ValueError(f'Unknown filters for {filters_type.__name__}: {", ".join(raw)}')
        filters = msgspec.convert(converted, type=filters_type, strict=False)
    elif raw:
        raise ValueError('Query has filters but no filter type was given')

    pagination = Pagination(**page) if page else None
    return filters, pagination, limit
