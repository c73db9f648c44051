"""
Identity Provider Client

Creates and deletes user identities through a GoTrue-compatible REST API.
Credentials, email confirmation and sessions stay with the provider.
"""

import sys
from typing import Optional, Dict, Any

import requests

from . import IDENTITY_TIMEOUT


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects a request or is unreachable."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class IdentityClient:
    """HTTP client for the identity provider."""

    def __init__(self, base_url: str, anon_key: str, service_key: str = '',
                 timeout: int = IDENTITY_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = (base_url or '').rstrip('/')
        self.anon_key = anon_key
        self.service_key = service_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, key: str) -> Dict[str, str]:
        return {
            'apikey': key,
            'Authorization': f'Bearer {key}',
            'Content-Type': 'application/json',
        }

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise IdentityProviderError('Identity provider is not configured (IDENTITY_URL)')
        return f'{self.base_url}{path}'

    def _parse(self, response) -> Dict[str, Any]:
        """Return the JSON body, raising IdentityProviderError on HTTP errors."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code >= 400:
            message = (
                body.get('msg')
                or body.get('error_description')
                or body.get('message')
                or body.get('error')
                or f'Identity provider returned HTTP {response.status_code}'
            )
            raise IdentityProviderError(message, status=response.status_code)

        return body

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        Create a user identity.

        Args:
            email: Login email
            password: Plain password, hashed by the provider
            metadata: User metadata stored alongside the identity

        Returns:
            The user record, or None when the provider accepted the request
            without returning one.
        """
        url = self._url('/auth/v1/signup')
        try:
            response = self.session.post(
                url,
                json={'email': email, 'password': password, 'data': metadata or {}},
                headers=self._headers(self.anon_key),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            print(f'[IDENTITY] Signup request failed: {e}', file=sys.stderr)
            raise IdentityProviderError(f'Identity provider unreachable: {e}') from e

        body = self._parse(response)

        # Auto-confirm projects wrap the user in a session payload;
        # confirm-email projects return the bare user.
        user = body['user'] if 'user' in body else body
        if not user or not user.get('id'):
            return None
        return user

    def delete_user(self, user_id: str) -> None:
        """Delete a user identity (admin API, requires the service key)."""
        if not self.service_key:
            raise IdentityProviderError('IDENTITY_SERVICE_KEY not set, cannot delete users')

        url = self._url(f'/auth/v1/admin/users/{user_id}')
        try:
            response = self.session.delete(
                url,
                headers=self._headers(self.service_key),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            print(f'[IDENTITY] Delete request failed for {user_id}: {e}', file=sys.stderr)
            raise IdentityProviderError(f'Identity provider unreachable: {e}') from e

        self._parse(response)
