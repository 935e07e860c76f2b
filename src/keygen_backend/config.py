from __future__ import annotations

import os
from typing import Mapping, Optional

import msgspec

__all__ = ['ClientConfig']

DEFAULT_TIMEOUT = 30.0  # sec
DEFAULT_USER_AGENT = 'keygen-backend/0.1.0'


class ClientConfig(msgspec.Struct, frozen=True, kw_only=True):
    """
    Connection settings for one API client.

    :param api_url: API root including version, e.g. https://api.keygen.sh/v1
    :param account_id: Account id or slug, all resource paths are scoped to it
    :param token: Optional bearer token to start the session with
    :param timeout: Per-request timeout in seconds
    :param max_retries: Retries for transient failures (network errors and 5xx), 0 disables
    :param retry_backoff: Base delay in seconds between retries, grows linearly per attempt
    """
    api_url: str
    account_id: str
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 0
    retry_backoff: float = 0.5
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not self.api_url:
            raise ValueError('api_url must not be empty')
        if not self.account_id:
            raise ValueError('account_id must not be empty')
        if self.max_retries < 0:
            raise ValueError('max_retries must be >= 0')

    @property
    def account_url(self) -> str:
        return f'{self.api_url.rstrip("/")}/accounts/{self.account_id}'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
        """
        Build a config from KEYGEN_API_URL, KEYGEN_ACCOUNT_ID and optional
        KEYGEN_TOKEN, KEYGEN_TIMEOUT, KEYGEN_MAX_RETRIES.
        """
        env = os.environ if environ is None else environ
        missing = [k for k in ('KEYGEN_API_URL', 'KEYGEN_ACCOUNT_ID') if not env.get(k)]
        if missing:
            raise ValueError(f'Missing required environment variables: {", ".join(missing)}')

        kwargs = {}
        if env.get('KEYGEN_TOKEN'):
            kwargs['token'] = env['KEYGEN_TOKEN']
        if env.get('KEYGEN_TIMEOUT'):
            kwargs['timeout'] = float(env['KEYGEN_TIMEOUT'])
        if env.get('KEYGEN_MAX_RETRIES'):
            kwargs['max_retries'] = int(env['KEYGEN_MAX_RETRIES'])
        return cls(api_url=env['KEYGEN_API_URL'], account_id=env['KEYGEN_ACCOUNT_ID'], **kwargs)
