import msgspec
import pytest

from conftest import ACCOUNT_ID, API_URL, make_response, resource, user_resource
from keygen_backend import ClientConfig, KeygenBackend, NetworkError
from keygen_backend._json_schemas import RESOURCE_KINDS, convert_resource
from keygen_backend._json_schemas.base import ResourceData
from keygen_backend._json_schemas.licensing import LicenseData
from keygen_backend._json_schemas.users import UserData


class TestConfig:
    def test_account_url(self):
        config = ClientConfig(api_url='https://api.keygen.sh/v1/', account_id='acme')
        assert config.account_url == 'https://api.keygen.sh/v1/accounts/acme'

    @pytest.mark.parametrize('kwargs', [
        dict(api_url='', account_id='acme'),
        dict(api_url='https://api.keygen.sh/v1', account_id=''),
        dict(api_url='https://api.keygen.sh/v1', account_id='acme', max_retries=-1),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**kwargs)

    def test_from_env(self):
        config = ClientConfig.from_env({
            'KEYGEN_API_URL': API_URL,
            'KEYGEN_ACCOUNT_ID': ACCOUNT_ID,
            'KEYGEN_TOKEN': 'tok',
            'KEYGEN_MAX_RETRIES': '3',
        })
        assert config.token == 'tok'
        assert config.max_retries == 3
        assert config.timeout == 30.0

    def test_from_env_missing(self):
        with pytest.raises(ValueError, match='KEYGEN_ACCOUNT_ID'):
            ClientConfig.from_env({'KEYGEN_API_URL': API_URL})


class TestResourceKinds:
    def test_table(self):
        assert RESOURCE_KINDS['licenses'] is LicenseData
        assert RESOURCE_KINDS['webhook-endpoints'].kind == 'webhook-endpoints'
        assert all(kind == cls.kind for kind, cls in RESOURCE_KINDS.items())

    def test_convert(self):
        assert isinstance(convert_resource(user_resource()), UserData)
        assert isinstance(convert_resource(resource('artifacts', 'a-1', filename='app.zip')), ResourceData)

    def test_kind_mismatch(self):
        with pytest.raises(msgspec.ValidationError):
            msgspec.convert(user_resource(), type=LicenseData)


class TestBackend:
    def test_authenticated(self, backend):
        assert backend.authenticated
        assert 'accounts/test-account' in repr(backend)

    def test_close(self, config, http):
        with KeygenBackend(config, http=http) as b:
            assert not http.closed
            assert b.processes is b.machines.processes
        assert http.closed

    def test_me_cached(self, backend, http):
        http.json('GET', 'me', {'data': user_resource(role='admin')})
        first = backend.me()
        second = backend.me()
        assert first == second
        assert isinstance(first, UserData)
        assert len(http.calls_to('GET', 'me')) == 1

    def test_me_force_refresh(self, backend, http):
        http.add(
            'GET', 'me',
            make_response(200, {'data': user_resource(email='old@example.com')}),
            make_response(200, {'data': user_resource(email='new@example.com')}),
        )
        assert backend.me().attributes.email == 'old@example.com'
        assert backend.me(force_refresh=True).attributes.email == 'new@example.com'
        assert backend.me().attributes.email == 'new@example.com'

    def test_me_no_cache(self, backend, http):
        http.json('GET', 'me', {'data': user_resource()})
        backend.me(no_cache=True)
        backend.me(no_cache=True)
        assert len(http.calls_to('GET', 'me')) == 2

    def test_me_empty(self, backend, http):
        http.json('GET', 'me', {'data': None})
        with pytest.raises(NetworkError):
            backend.me(no_cache=True)

    def test_me_malformed(self, backend, http):
        # a user without its required email and role
        http.json('GET', 'me', {'data': resource('users', 'user-1')})
        with pytest.raises(NetworkError):
            backend.me(no_cache=True)
