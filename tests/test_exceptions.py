import pytest

from conftest import make_response
from keygen_backend import (
    Conflict,
    ErrorKind,
    Forbidden,
    NetworkError,
    NotFound,
    RateLimited,
    ServerError,
    Unauthorized,
    ValidationFailed,
)
from keygen_backend._exceptions import classify
from keygen_backend._json_schemas.base import ErrorObject, ErrorSource


@pytest.mark.parametrize('status, cls', [
    (400, ValidationFailed),
    (401, Unauthorized),
    (403, Forbidden),
    (404, NotFound),
    (409, Conflict),
    (418, ValidationFailed),
    (422, ValidationFailed),
    (429, RateLimited),
    (500, ServerError),
    (503, ServerError),
])
def test_status_classification(status, cls):
    error = classify(make_response(status), [])
    assert type(error) is cls
    assert error.kind is cls.kind


def test_unexpected_status():
    error = classify(make_response(304), [])
    assert isinstance(error, NetworkError)
    assert error.kind is ErrorKind.NetworkError
    assert error.status == 304


def test_error_details_preserved():
    errors = [
        ErrorObject(title='Unprocessable', detail='is invalid', code='EMAIL_INVALID',
                    source=ErrorSource(pointer='/data/attributes/email')),
        ErrorObject(title='Unprocessable', detail='is too short', source=ErrorSource(pointer='/data/attributes/password')),
    ]
    error = classify(make_response(422), errors)
    assert str(error) == 'is invalid'
    assert error.title == 'Unprocessable'
    assert error.code == 'EMAIL_INVALID'
    assert error.field == 'email'
    assert error.fields == ['email', 'password']
    assert len(error.errors) == 2


def test_defaults_without_errors():
    error = classify(make_response(404), [])
    assert error.title == 'API Error'
    assert error.detail == 'Request failed with status 404'
    assert error.code == 'HTTP_404'
    assert error.pointer is None
    assert str(error) == 'HTTP 404 Error'


def test_parameter_field():
    errors = [ErrorObject(title='Bad request', detail='invalid filter', source=ErrorSource(parameter='filter[colour]'))]
    error = classify(make_response(400), errors)
    assert error.parameter == 'filter[colour]'
    assert error.field == 'filter[colour]'


def test_retry_after_missing():
    error = classify(make_response(429, headers={'Retry-After': 'soon'}), [])
    assert error.retry_after is None
