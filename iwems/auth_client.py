"""
Thin async wrapper over the Supabase Auth (GoTrue) REST API.

`requests` is blocking, so every call is pushed to a worker thread with
`asyncio.to_thread` and the event loop keeps serving other requests.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from config import AUTH_TIMEOUT_SECONDS, SUPABASE_KEY, SUPABASE_URL
from iwems.exceptions import SessionExpired, StoreUnavailable, ValidationError

REJECTED_STATUSES = {400, 401, 403, 422}


class SupabaseAuthClient:
    def __init__(self, base_url: Optional[str], api_key: Optional[str], timeout: float = AUTH_TIMEOUT_SECONDS):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key or "", "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(self, method: str, path: str, *, access_token: Optional[str] = None,
                 json: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, str]] = None) -> requests.Response:
        if not self.base_url:
            logging.error("SupabaseAuthClient: SUPABASE_URL is not configured.")
            raise StoreUnavailable("Authentication service is not configured.")
        url = f"{self.base_url}/auth/v1{path}"
        try:
            response = requests.request(
                method, url, headers=self._headers(access_token), json=json, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            logging.error(f"SupabaseAuthClient: {method} {path} failed: {e}")
            raise StoreUnavailable("Authentication service is unreachable.") from e
        if response.status_code >= 500:
            logging.error(f"SupabaseAuthClient: {method} {path} returned {response.status_code}")
            raise StoreUnavailable("Authentication service is unavailable.")
        return response

    @staticmethod
    def _error_message(response: requests.Response, fallback: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return fallback
        return body.get("error_description") or body.get("msg") or body.get("message") or fallback

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Returns the Auth user for a token. Raises SessionExpired for invalid or expired tokens."""
        response = await asyncio.to_thread(self._request, "GET", "/user", access_token=access_token)
        if response.status_code in REJECTED_STATUSES:
            logging.info(f"SupabaseAuthClient.get_user: token rejected with {response.status_code}")
            raise SessionExpired()
        return response.json()

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        response = await asyncio.to_thread(
            self._request, "POST", "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in REJECTED_STATUSES:
            raise ValidationError(self._error_message(response, "Invalid email or password."))
        return response.json()

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        response = await asyncio.to_thread(
            self._request, "POST", "/signup",
            json={"email": email, "password": password, "data": {"full_name": full_name}},
        )
        if response.status_code in REJECTED_STATUSES:
            raise ValidationError(self._error_message(response, "Could not create the account."))
        return response.json()

    async def sign_out(self, access_token: str) -> None:
        response = await asyncio.to_thread(self._request, "POST", "/logout", access_token=access_token)
        # An already-invalid token is as signed out as it gets.
        if response.status_code in REJECTED_STATUSES:
            logging.info("SupabaseAuthClient.sign_out: token was already invalid.")


auth_client = SupabaseAuthClient(SUPABASE_URL, SUPABASE_KEY)
