from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Union

from .base import Envelope, ListEnvelope, _Attributes, _DataBase


# region Request logs

class RequestLogSchema(Envelope):
    # schema for /accounts/<account>/request-logs/<id>
    data: RequestLogData


class RequestLogsSchema(ListEnvelope):
    # schema for /accounts/<account>/request-logs
    data: list[RequestLogData] = []


class RequestLogData(_DataBase):
    kind = 'request-logs'
    attributes: RequestLogAttributes


class RequestLogAttributes(_Attributes):
    method: str
    url: str
    status: Union[int, str, None] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    request_headers: Optional[dict] = None
    response_headers: Optional[dict] = None
    request_body: Any = None
    response_body: Any = None
    response_signature: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Event logs

class EventLogSchema(Envelope):
    data: EventLogData


class EventLogsSchema(ListEnvelope):
    data: list[EventLogData] = []


class EventLogData(_DataBase):
    kind = 'event-logs'
    attributes: EventLogAttributes


class EventLogAttributes(_Attributes):
    event: str
    metadata: Optional[dict] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Webhooks

class WebhookSchema(Envelope):
    data: WebhookData


class WebhooksSchema(ListEnvelope):
    data: list[WebhookData] = []


class WebhookData(_DataBase):
    kind = 'webhook-endpoints'
    attributes: WebhookAttributes


class WebhookAttributes(_Attributes):
    url: str
    # the server may return this as a JSON encoded string, e.g. "[]"
    subscriptions: Union[list[str], str, None] = None
    signing_key: Optional[str] = None
    signature_algorithm: Optional[str] = None
    api_version: Optional[str] = None
    enabled: bool = True
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    @property
    def events(self) -> list[str]:
        """
        Subscribed event identifiers, always as a list.
        """
        subs = self.subscriptions
        if isinstance(subs, str):
            try:
                subs = json.loads(subs)
            except ValueError:
                return []
        if not isinstance(subs, list):
            return []
        return [s for s in subs if isinstance(s, str)]


class WebhookEventsSchema(ListEnvelope):
    # delivery log for /accounts/<account>/webhook-endpoints/<id>/webhook-events
    data: list[WebhookEventData] = []


class WebhookEventSchema(Envelope):
    data: WebhookEventData


class WebhookEventData(_DataBase):
    kind = 'webhook-events'
    attributes: WebhookEventAttributes


class WebhookEventAttributes(_Attributes):
    event: str
    endpoint: Optional[str] = None
    payload: Optional[str] = None
    status: Optional[str] = None
    last_response_code: Optional[int] = None
    last_response_body: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion
