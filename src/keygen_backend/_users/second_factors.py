from typing import Optional

from .. import _urls as urls
from .._json_schemas.users import SecondFactorData, SecondFactorSchema, SecondFactorsSchema
from ..api_provider import ApiProvider
from ..transport import CancelSignal

__all__ = ['SecondFactorsApiProvider']


class SecondFactorsApiProvider(ApiProvider):
    """
    Provide API access to a user's second factors (TOTP).
    Second factors are nested under the user, they have no top level endpoint.
    """
    def _url(self, user_id: str, *parts: str) -> str:
        return urls.join(urls.USERS, user_id, 'second-factors', *parts)

    def list(self, user_id: str, *, cancel: Optional[CancelSignal] = None) -> SecondFactorsSchema:
        """
        List the second factors of a user.
        """
        return self.query_api(self._url(user_id), schema=SecondFactorsSchema, cancel=cancel)

    def create(
            self,
            user_id: str,
            password: str,
            *,
            cancel: Optional[CancelSignal] = None,
    ) -> SecondFactorData:
        """
        Create a second factor for a user; the server returns its provisioning uri.
        :param user_id: User id
        :param password: Current password of the user, required to add a factor
        """
        body = {'data': {'type': 'second-factors'}, 'meta': {'password': password}}
        doc = self.query_api(
            self._url(user_id), method='POST', body=body, schema=SecondFactorSchema, cancel=cancel, retryable=False
        )
        return doc.data

    def delete(self, user_id: str, factor_id: str, *, cancel: Optional[CancelSignal] = None) -> None:
        self.query_api(self._url(user_id, factor_id), method='DELETE', cancel=cancel)
