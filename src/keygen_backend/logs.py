from typing import Optional

from . import _urls as urls
from ._json_schemas.logs import (
    EventLogData,
    EventLogSchema,
    EventLogsSchema,
    RequestLogData,
    RequestLogSchema,
    RequestLogsSchema,
)
from .api_provider import ReadOnlyApiProvider
from .query import DateRange, FilterBase, Requestor

__all__ = ['RequestLogFilters', 'EventLogFilters', 'RequestLogsApiProvider', 'EventLogsApiProvider']


class RequestLogFilters(FilterBase):
    date: Optional[DateRange] = None
    requestor: Optional[Requestor] = None
    url: Optional[str] = None
    ip: Optional[str] = None
    method: Optional[str] = None
    status: Optional[str] = None


class EventLogFilters(FilterBase):
    date: Optional[DateRange] = None
    event: Optional[str] = None


class RequestLogsApiProvider(ReadOnlyApiProvider):
    """
    Read access to the API request log.
    """
    path = urls.REQUEST_LOGS
    data_type = RequestLogData
    schema = RequestLogSchema
    list_schema = RequestLogsSchema
    filters = RequestLogFilters


class EventLogsApiProvider(ReadOnlyApiProvider):
    """
    Read access to the account event log.
    """
    path = urls.EVENT_LOGS
    data_type = EventLogData
    schema = EventLogSchema
    list_schema = EventLogsSchema
    filters = EventLogFilters
