from enum import Enum

__all__ = [
    'LicenseStatus',
    'UserRole',
    'UserStatus',
    'HeartbeatStatus',
    'DistributionStrategy',
    'CheckInInterval',
    'RequestorType',
]

# Wire values below are part of the API contract and must not be changed.


class LicenseStatus(str, Enum):
    Active = 'active'
    Inactive = 'inactive'
    Expiring = 'expiring'
    Expired = 'expired'
    Suspended = 'suspended'
    Banned = 'banned'


class UserRole(str, Enum):
    Admin = 'admin'
    Developer = 'developer'
    SalesAgent = 'sales-agent'
    SupportAgent = 'support-agent'
    ReadOnly = 'read-only'
    User = 'user'


class UserStatus(str, Enum):
    Active = 'active'
    Inactive = 'inactive'
    Banned = 'banned'


class HeartbeatStatus(str, Enum):
    NotStarted = 'not-started'
    Alive = 'alive'
    Dead = 'dead'
    Resurrected = 'resurrected'


class DistributionStrategy(str, Enum):
    Licensed = 'LICENSED'
    Open = 'OPEN'
    Closed = 'CLOSED'


class CheckInInterval(str, Enum):
    Day = 'day'
    Week = 'week'
    Month = 'month'
    Year = 'year'


class RequestorType(str, Enum):
    User = 'user'
    Environment = 'environment'
    Product = 'product'
    License = 'license'
