from datetime import date

import pytest

from keygen_backend.enums import LicenseStatus, UserRole
from keygen_backend.groups import GroupFilters
from keygen_backend.licenses import LicenseFilters
from keygen_backend.logs import RequestLogFilters
from keygen_backend.query import DateRange, Pagination, Requestor, build_params, decode_query, encode_query
from keygen_backend.users import UserFilters


class TestEncode:
    def test_filter_then_page(self):
        q = encode_query(LicenseFilters(status=LicenseStatus.Active), Pagination(size=25, number=1))
        assert q == 'filter[status]=active&page[size]=25&page[number]=1'

    def test_limit_last(self):
        q = encode_query(LicenseFilters(policy='pol-1'), Pagination(size=10, number=2), limit=1)
        assert q == 'filter[policy]=pol-1&page[size]=10&page[number]=2&limit=1'

    def test_empty(self):
        assert encode_query() == ''
        assert encode_query(LicenseFilters()) == ''

    def test_declaration_order(self):
        # keyword order of the call does not matter
        a = encode_query(LicenseFilters(status=LicenseStatus.Expired, user='u-1', policy='p-1'))
        b = encode_query(LicenseFilters(policy='p-1', user='u-1', status=LicenseStatus.Expired))
        assert a == b == 'filter[user]=u-1&filter[policy]=p-1&filter[status]=expired'

    def test_metadata_sorted(self):
        q = encode_query(LicenseFilters(metadata={'tier': 'gold', 'customer': 'acme'}))
        assert q == 'filter[metadata][customer]=acme&filter[metadata][tier]=gold'

    def test_array_repeats_key(self):
        params = build_params(UserFilters(roles=[UserRole.Admin, UserRole.SalesAgent]))
        assert params == [('filter[roles]', 'admin'), ('filter[roles]', 'sales-agent')]

    def test_bool(self):
        assert encode_query(UserFilters(assigned=True)) == 'filter[assigned]=true'
        assert encode_query(UserFilters(assigned=False)) == 'filter[assigned]=false'

    def test_camel_case(self):
        assert encode_query(GroupFilters(max_licenses=5)) == 'filter[maxLicenses]=5'

    def test_nested(self):
        f = RequestLogFilters(
            date=DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31)),
            requestor=Requestor(type='user', id='u-1'),
        )
        assert build_params(f) == [
            ('filter[date][start]', '2024-01-01'),
            ('filter[date][end]', '2024-01-31'),
            ('filter[requestor][type]', 'user'),
            ('filter[requestor][id]', 'u-1'),
        ]

    def test_values_percent_encoded(self):
        assert encode_query(UserFilters(email='a+b@example.com')) == 'filter[email]=a%2Bb%40example.com'

    def test_no_null(self):
        assert 'null' not in encode_query(LicenseFilters(user=None, status=LicenseStatus.Active))

    @pytest.mark.parametrize('page', [Pagination(size=0), Pagination(number=-1), Pagination(size=True)])
    def test_invalid_page(self, page):
        with pytest.raises(ValueError):
            encode_query(page=page)

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            encode_query(limit=0)

    def test_invalid_value_type(self):
        with pytest.raises(ValueError):
            encode_query(LicenseFilters(user=object()))


class TestDecode:
    def test_scenario(self):
        filters, page, limit = decode_query(
            'filter[status]=active&page[size]=25&page[number]=1', LicenseFilters
        )
        assert filters == LicenseFilters(status=LicenseStatus.Active)
        assert page == Pagination(size=25, number=1)
        assert limit is None

    def test_inverse(self):
        f = UserFilters(email='jane@example.com', roles=[UserRole.Admin, UserRole.User], assigned=True)
        filters, page, limit = decode_query(encode_query(f, limit=1), UserFilters)
        assert filters == f
        assert page is None
        assert limit == 1

    def test_metadata(self):
        f = LicenseFilters(metadata={'tier': 'gold', 'customer': 'acme'})
        filters, _, _ = decode_query(encode_query(f), LicenseFilters)
        assert filters.metadata == {'tier': 'gold', 'customer': 'acme'}

    @pytest.mark.parametrize('f', [
        UserFilters(roles=[]),
        LicenseFilters(metadata={}),
        RequestLogFilters(date=DateRange()),
    ])
    def test_empty_values_round_trip(self, f):
        filters, _, _ = decode_query(encode_query(f), type(f))
        assert filters == f

    def test_empty_values_held_as_none(self):
        assert UserFilters(roles=[]).roles is None
        assert LicenseFilters(metadata={}) == LicenseFilters()

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            decode_query('filter[colour]=red', LicenseFilters)

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            decode_query('sort=name', LicenseFilters)
