from __future__ import annotations

from typing import Type

import msgspec

from .base import ResourceData, _DataBase
from .licensing import EntitlementData, GroupData, LicenseData, PolicyData, ProductData
from .logs import EventLogData, RequestLogData, WebhookData, WebhookEventData
from .machines import ComponentData, MachineData, ProcessData
from .users import SecondFactorData, TokenData, UserData

# Exhaustive table of resource type string -> data schema
RESOURCE_KINDS: dict[str, Type[_DataBase]] = {
    cls.kind: cls
    for cls in (
        LicenseData,
        UserData,
        MachineData,
        ProductData,
        PolicyData,
        GroupData,
        EntitlementData,
        ProcessData,
        ComponentData,
        RequestLogData,
        WebhookData,
        EventLogData,
        WebhookEventData,
        TokenData,
        SecondFactorData,
    )
}


def convert_resource(raw: dict) -> _DataBase:
    """
    Materialize a raw resource object (e.g. from `included`) into its typed schema.
    Unknown resource types become a generic ResourceData.
    """
    schema = RESOURCE_KINDS.get(raw.get('type'), ResourceData)
    return msgspec.convert(raw, type=schema)
