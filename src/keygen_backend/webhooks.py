from typing import Any, Iterable, Optional

from . import _urls as urls
from ._json_schemas.base import ApiBase
from ._json_schemas.logs import WebhookAttributes, WebhookData, WebhookEventsSchema, WebhookSchema, WebhooksSchema
from .api_provider import ResourceApiProvider
from .query import FilterBase, Pagination
from .transport import CancelSignal

__all__ = ['WEBHOOK_EVENTS', 'WebhookFilters', 'WebhooksApiProvider']

# Events a webhook endpoint can subscribe to
WEBHOOK_EVENTS = (
    'account.updated',
    'license.created',
    'license.updated',
    'license.deleted',
    'license.suspended',
    'license.reinstated',
    'license.renewed',
    'license.expired',
    'machine.created',
    'machine.updated',
    'machine.deleted',
    'machine.heartbeat.ping',
    'machine.heartbeat.dead',
    'machine.heartbeat.resurrected',
    'product.created',
    'product.updated',
    'product.deleted',
    'policy.created',
    'policy.updated',
    'policy.deleted',
    'user.created',
    'user.updated',
    'user.deleted',
    'group.created',
    'group.updated',
    'group.deleted',
    'entitlement.created',
    'entitlement.updated',
    'entitlement.deleted',
    'release.created',
    'release.updated',
    'release.deleted',
    'release.published',
    'release.yanked',
)


class WebhookFilters(FilterBase):
    url: Optional[str] = None
    subscriptions: Optional[list[str]] = None


class WebhooksApiProvider(ResourceApiProvider):
    """
    Provide API access to webhook endpoints.
    """
    path = urls.WEBHOOK_ENDPOINTS
    data_type = WebhookData
    schema = WebhookSchema
    list_schema = WebhooksSchema
    filters = WebhookFilters
    attributes_type = WebhookAttributes
    writable = frozenset({'url', 'subscriptions', 'signature_algorithm', 'api_version', 'enabled'})

    def _prepare(self, values: dict[str, Any]) -> dict[str, Any]:
        if isinstance(values.get('url'), str):
            values['url'] = values['url'].strip()
        if values.get('subscriptions') is not None:
            values['subscriptions'] = list(values['subscriptions'])
        return values

    def create(
            self,
            url: str,
            subscriptions: Iterable[str] = ('*',),
            *,
            cancel: Optional[CancelSignal] = None,
            retryable: bool = False,
            **attributes: Any,
    ) -> WebhookData:
        """
        Create a webhook endpoint.
        :param url: Endpoint URL receiving the events
        :param subscriptions: Subscribed events, '*' for all
        """
        attributes.update(url=url, subscriptions=subscriptions)
        return self._create(attributes, cancel=cancel, retryable=retryable)

    def test(self, id_: str, event: str = 'webhook.test', *, cancel: Optional[CancelSignal] = None) -> Any:
        """
        Ask the server to deliver a test event to the endpoint.
        """
        body = {'data': {'type': 'webhook-events', 'attributes': {'event': event}}}
        doc = self.query_api(self._url(id_, 'actions', 'test'), method='POST', body=body, schema=ApiBase,
                             cancel=cancel)
        return doc.data if doc is not None else None

    def get_deliveries(
            self,
            id_: str,
            *,
            page: Optional[Pagination] = None,
            limit: Optional[int] = None,
            cancel: Optional[CancelSignal] = None,
    ) -> WebhookEventsSchema:
        """
        Delivery log of the endpoint, newest first.
        """
        return self._related(id_, 'webhook-events', WebhookEventsSchema, page=page, limit=limit, cancel=cancel)

    @staticmethod
    def get_available_events() -> list[str]:
        return list(WEBHOOK_EVENTS)

    @staticmethod
    def get_events_by_category() -> dict[str, list[str]]:
        """
        Partition the known events by resource, the part before the first '.'.
        """
        categories: dict[str, list[str]] = {}
        for event in WEBHOOK_EVENTS:
            categories.setdefault(event.split('.', 1)[0], []).append(event)
        return categories
