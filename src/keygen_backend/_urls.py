# Account-scoped endpoint paths, relative to {api_url}/accounts/{account_id}/

TOKENS = 'tokens'
ME = 'me'

LICENSES = 'licenses'
USERS = 'users'
MACHINES = 'machines'
PROCESSES = 'processes'
COMPONENTS = 'components'
PRODUCTS = 'products'
POLICIES = 'policies'
GROUPS = 'groups'
ENTITLEMENTS = 'entitlements'
WEBHOOK_ENDPOINTS = 'webhook-endpoints'
REQUEST_LOGS = 'request-logs'
EVENT_LOGS = 'event-logs'

ANALYTICS_COUNT = 'analytics/actions/count'
ANALYTICS_TOP_LICENSES = 'analytics/actions/top-licenses-by-volume'
ANALYTICS_TOP_URLS = 'analytics/actions/top-urls-by-volume'
ANALYTICS_TOP_IPS = 'analytics/actions/top-ips-by-volume'
METRICS_COUNT = 'metrics/actions/count'

JSONAPI_MEDIA_TYPE = 'application/vnd.api+json'


def join(*parts: str) -> str:
    # join path segments, tolerating leading/trailing slashes on any part
    return '/'.join(str(p).strip('/') for p in parts if str(p).strip('/'))
