from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..enums import UserRole, UserStatus
from .base import Envelope, ListEnvelope, _Attributes, _DataBase


# region Users

class UserSchema(Envelope):
    # schema for /accounts/<account>/users/<id>
    data: UserData


class UsersSchema(ListEnvelope):
    # schema for /accounts/<account>/users
    data: list[UserData] = []


class UserData(_DataBase):
    kind = 'users'
    attributes: UserAttributes


class UserAttributes(_Attributes):
    email: str
    role: UserRole
    status: UserStatus = UserStatus.Active
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    permissions: Optional[list[str]] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Tokens

class TokenSchema(Envelope):
    # schema for POST /accounts/<account>/tokens
    data: TokenData


class TokenData(_DataBase):
    kind = 'tokens'
    attributes: TokenAttributes


class TokenAttributes(_Attributes):
    kind: str
    token: Optional[str] = None
    expiry: Optional[datetime] = None
    name: Optional[str] = None
    permissions: Optional[list[str]] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Second factors

class SecondFactorSchema(Envelope):
    data: SecondFactorData


class SecondFactorsSchema(ListEnvelope):
    data: list[SecondFactorData] = []


class SecondFactorData(_DataBase):
    kind = 'second-factors'
    attributes: SecondFactorAttributes


class SecondFactorAttributes(_Attributes):
    enabled: bool = False
    uri: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion
