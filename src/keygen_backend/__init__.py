from ._exceptions import (
    ApiError,
    Conflict,
    CurrentPasswordIncorrect,
    ErrorKind,
    Forbidden,
    NetworkError,
    NotFound,
    RateLimited,
    RequestCancelled,
    RequestError,
    ServerError,
    Unauthorized,
    ValidationFailed,
)
from .analytics import AnalyticsCount
from .config import ClientConfig
from .enums import (
    CheckInInterval,
    DistributionStrategy,
    HeartbeatStatus,
    LicenseStatus,
    RequestorType,
    UserRole,
    UserStatus,
)
from .keygen import KeygenBackend
from .query import DateRange, Pagination, Requestor, decode_query, encode_query
from .relationships import Resolution, resolve
from .session import AuthSession
from .transport import Transport
from .webhooks import WEBHOOK_EVENTS

__version__ = '0.1.0'
