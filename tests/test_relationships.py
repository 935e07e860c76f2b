import msgspec
import pytest

from conftest import license_resource, resource
from keygen_backend import NetworkError, resolve
from keygen_backend._json_schemas.base import ResourceData
from keygen_backend._json_schemas.licensing import (
    EntitlementData,
    LicenseData,
    LicenseSchema,
    LicensesSchema,
    PolicyData,
)

RELATED_POLICY = '/v1/accounts/test-account/licenses/lic-1/policy'
RELATED_ENTITLEMENTS = '/v1/accounts/test-account/licenses/lic-1/entitlements'


def license_document(included):
    lic = license_resource('lic-1', relationships={
        'policy': {'data': {'type': 'policies', 'id': 'pol-1'}, 'links': {'related': RELATED_POLICY}},
        'entitlements': {
            'data': [{'type': 'entitlements', 'id': 'ent-1'}, {'type': 'entitlements', 'id': 'ent-2'}],
            'links': {'related': RELATED_ENTITLEMENTS},
        },
        'group': {'data': None},
        'machines': {'links': {'related': '/v1/accounts/test-account/licenses/lic-1/machines'}},
    })
    return msgspec.json.decode(msgspec.json.encode({'data': lic, 'included': included}), type=LicenseSchema)


class TestResolve:
    def test_to_one_included(self):
        doc = license_document([resource('policies', 'pol-1', name='Pro')])
        r = doc.resolve('policy')
        assert r.complete
        assert not r.to_many
        assert isinstance(r.resource, PolicyData)
        assert r.resource.attributes.name == 'Pro'
        assert r.related_url == RELATED_POLICY

    def test_to_one_missing(self):
        doc = license_document([])
        r = doc.resolve('policy')
        assert not r.complete
        assert r.resource is None
        assert [m.id for m in r.missing] == ['pol-1']
        assert r.related_url == RELATED_POLICY

    def test_to_many_partial(self):
        doc = license_document([
            resource('entitlements', 'ent-2', name='SSO', code='SSO'),
            resource('policies', 'pol-1', name='Pro'),
        ])
        r = doc.resolve('entitlements')
        assert r.to_many
        assert [e.id for e in r.resources] == ['ent-2']
        assert all(isinstance(e, EntitlementData) for e in r.resources)
        assert [m.id for m in r.missing] == ['ent-1']

    def test_empty_to_one(self):
        r = license_document([]).resolve('group')
        assert r.loaded
        assert r.complete
        assert r.identifiers == []

    def test_links_only(self):
        r = license_document([]).resolve('machines')
        assert not r.loaded
        assert not r.complete
        assert r.related_url.endswith('/machines')

    def test_unknown_relationship(self):
        with pytest.raises(KeyError):
            license_document([]).resolve('owner')

    def test_unknown_included_kind(self):
        doc = license_document([])
        lic = msgspec.convert(
            license_resource('lic-2', relationships={'release': {'data': {'type': 'releases', 'id': 'rel-1'}}}),
            type=type(doc.data),
        )
        r = resolve(lic, 'release', [resource('releases', 'rel-1', version='1.0.0')])
        assert isinstance(r.resource, ResourceData)
        assert r.resource.attributes == {'version': '1.0.0'}

    def test_sparse_included(self):
        lic = msgspec.convert(
            license_resource('lic-2', relationships={'user': {'data': {'type': 'users', 'id': 'u1'}}}),
            type=LicenseData,
        )
        # sparse fieldset: no role
        r = resolve(lic, 'user', [{'type': 'users', 'id': 'u1', 'attributes': {'email': 'a@b.example.com'}}])
        assert r.complete
        assert isinstance(r.resource, ResourceData)
        assert r.resource.attributes == {'email': 'a@b.example.com'}

    def test_unusable_included_is_missing(self):
        lic = msgspec.convert(
            license_resource('lic-2', relationships={'user': {'data': {'type': 'users', 'id': 'u1'}}}),
            type=LicenseData,
        )
        r = resolve(lic, 'user', [{'type': 'users', 'id': 'u1', 'attributes': 'oops'}])
        assert r.resource is None
        assert [m.id for m in r.missing] == ['u1']

    def test_list_document(self):
        lic = license_resource('lic-1', relationships={'policy': {'data': {'type': 'policies', 'id': 'pol-1'}}})
        doc = msgspec.convert(
            {'data': [lic], 'included': [resource('policies', 'pol-1', name='Pro')]}, type=LicensesSchema
        )
        assert doc.resolve('policy', doc.data[0]).resource.attributes.name == 'Pro'
        with pytest.raises(ValueError):
            doc.resolve('policy')


class TestFetchRelated:
    def test_fetch_missing(self, backend, http):
        http.json('GET', 'licenses/lic-1/entitlements', {'data': [
            resource('entitlements', 'ent-1', name='A', code='A'),
            resource('entitlements', 'ent-2', name='B', code='B'),
        ]})
        r = license_document([]).resolve('entitlements')
        entitlements = backend.fetch_related(r)
        assert [e.id for e in entitlements] == ['ent-1', 'ent-2']
        assert http.calls[0].url == f'https://api.keygen.test{RELATED_ENTITLEMENTS}'

    def test_fetch_to_one(self, backend, http):
        http.json('GET', 'licenses/lic-1/policy', {'data': resource('policies', 'pol-1', name='Pro')})
        policy = backend.fetch_related(RELATED_POLICY)
        assert isinstance(policy, PolicyData)

    def test_fetch_malformed(self, backend, http):
        # a license without its key
        http.json('GET', 'licenses/lic-1/policy', {'data': {'type': 'licenses', 'id': 'x', 'attributes': {}}})
        with pytest.raises(NetworkError):
            backend.fetch_related(RELATED_POLICY)

    def test_no_link(self, backend):
        r = license_document([]).resolve('group')
        with pytest.raises(ValueError):
            backend.fetch_related(r)
