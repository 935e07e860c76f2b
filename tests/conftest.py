import json
import os
import threading
from typing import Any, Callable, NamedTuple, Optional, Union
from urllib.parse import urlsplit

import keyring
import keyring.credentials
import keyring.errors
import pytest
import requests
from requests.structures import CaseInsensitiveDict

from keygen_backend import ClientConfig, KeygenBackend

API_URL = 'https://api.keygen.test/v1'
ACCOUNT_ID = 'test-account'
TOKEN = 'admin-token'
ACCOUNT_PATH = f'/v1/accounts/{ACCOUNT_ID}/'


class Call(NamedTuple):
    method: str
    url: str
    endpoint: str
    query: str
    headers: dict
    body: Any


def make_response(status: int = 200, body: Any = None, headers: Optional[dict] = None, url: str = '') -> requests.Response:
    r = requests.Response()
    r.status_code = status
    if body is None:
        r._content = b''
    elif isinstance(body, (bytes, str)):
        r._content = body.encode('utf-8') if isinstance(body, str) else body
    else:
        r._content = json.dumps(body).encode('utf-8')
    r.headers = CaseInsensitiveDict(headers or {})
    r.url = url
    r.encoding = 'utf-8'
    return r


def resource(type_: str, id_: str, relationships: Optional[dict] = None, **attributes) -> dict:
    d = {'type': type_, 'id': id_, 'attributes': attributes, 'links': {'self': f'{ACCOUNT_PATH}{type_}/{id_}'}}
    if relationships is not None:
        d['relationships'] = relationships
    return d


def license_resource(id_: str = 'lic-1', status: str = 'active', **attributes) -> dict:
    attributes.setdefault('key', f'KEY-{id_}')
    return resource('licenses', id_, status=status, **attributes)


def user_resource(id_: str = 'user-1', email: str = 'jane@example.com', role: str = 'user', **attributes) -> dict:
    return resource('users', id_, email=email, role=role, status='active', **attributes)


def list_doc(items: list, count: Optional[int] = None) -> dict:
    return {'data': items, 'meta': {'count': len(items) if count is None else count}, 'links': {}}


def error_doc(title: str, detail: str, pointer: Optional[str] = None, code: Optional[str] = None) -> dict:
    error = {'title': title, 'detail': detail}
    if pointer is not None:
        error['source'] = {'pointer': pointer}
    if code is not None:
        error['code'] = code
    return {'errors': [error]}


Responder = Union[requests.Response, Exception, Callable[['Call'], requests.Response]]


class FakeHttp:
    """
    Stand-in for requests.Session: records every call and answers from registered routes.
    A route registered with several responses answers them in turn, repeating the last one.
    """
    def __init__(self):
        self.calls: list[Call] = []
        self._routes: dict[tuple[str, str], list[Responder]] = {}
        self._lock = threading.Lock()
        self.closed = False

    def add(self, method: str, endpoint: str, *responses: Responder) -> None:
        self._routes[(method.upper(), endpoint)] = list(responses)

    def json(self, method: str, endpoint: str, body: Any = None, status: int = 200,
             headers: Optional[dict] = None) -> None:
        self.add(method, endpoint, make_response(status, body, headers))

    def request(self, method, url, data=None, headers=None, timeout=None):
        parts = urlsplit(url)
        endpoint = parts.path[len(ACCOUNT_PATH):] if parts.path.startswith(ACCOUNT_PATH) else parts.path
        call = Call(
            method=method,
            url=url,
            endpoint=endpoint,
            query=parts.query,
            headers=dict(headers or {}),
            body=json.loads(data) if data else None,
        )
        with self._lock:
            self.calls.append(call)
            responses = self._routes.get((method, endpoint))
            if not responses:
                responder = make_response(404, error_doc('Not found', f'No route for {method} {endpoint}'))
            elif len(responses) > 1:
                responder = responses.pop(0)
            else:
                responder = responses[0]

        if isinstance(responder, Exception):
            raise responder
        if callable(responder):
            responder = responder(call)
        responder.url = url
        return responder

    def calls_to(self, method: str, endpoint: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.endpoint == endpoint]

    def close(self):
        self.closed = True


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_url=API_URL, account_id=ACCOUNT_ID, token=TOKEN, retry_backoff=0)


@pytest.fixture
def backend(config, http) -> KeygenBackend:
    b = KeygenBackend(config, http=http)
    yield b
    b.close()


# region Live server


def _get_keyring_credential(name):
    try:
        return keyring.get_credential(name, None)
    except keyring.errors.KeyringError:
        return None


@pytest.fixture(scope="session")
def credentials() -> keyring.credentials.Credential:
    cred = _get_keyring_credential('keygen.sh')
    if cred is None:
        pytest.skip('Configure a Keygen admin login in keyring under credential name "keygen.sh"')
    return cred


@pytest.fixture(scope="session")
def live_backend(credentials: keyring.credentials.Credential) -> KeygenBackend:
    account_id = os.getenv('KEYGEN_ACCOUNT_ID')
    if account_id is None:
        pytest.skip('KEYGEN_ACCOUNT_ID is not set')
    config = ClientConfig(api_url=os.getenv('KEYGEN_API_URL', 'https://api.keygen.sh/v1'), account_id=account_id)
    b = KeygenBackend(config)
    b.authenticate(credentials.username, credentials.password)
    yield b
    b.logout()
    b.close()


# endregion
