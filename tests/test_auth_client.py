import pytest
from unittest.mock import MagicMock, patch

import requests

from iwems.auth_client import SupabaseAuthClient
from iwems.exceptions import SessionExpired, StoreUnavailable, ValidationError


def response(status_code, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body or {}
    return resp


@pytest.fixture
def client():
    return SupabaseAuthClient("https://project.supabase.co/", "anon-key", timeout=3)


@pytest.mark.asyncio
async def test_get_user_sends_bearer_token(client):
    with patch('iwems.auth_client.requests.request', return_value=response(200, {"id": "u1"})) as mock_request:
        user = await client.get_user("tok")

    assert user == {"id": "u1"}
    args, kwargs = mock_request.call_args
    assert args == ("GET", "https://project.supabase.co/auth/v1/user")
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["headers"]["apikey"] == "anon-key"
    assert kwargs["timeout"] == 3


@pytest.mark.asyncio
async def test_rejected_token_is_session_expired(client):
    with patch('iwems.auth_client.requests.request', return_value=response(401)):
        with pytest.raises(SessionExpired):
            await client.get_user("old")


@pytest.mark.asyncio
async def test_network_failure_is_store_unavailable(client):
    with patch('iwems.auth_client.requests.request', side_effect=requests.ConnectionError("boom")):
        with pytest.raises(StoreUnavailable):
            await client.get_user("tok")


@pytest.mark.asyncio
async def test_server_error_is_store_unavailable(client):
    with patch('iwems.auth_client.requests.request', return_value=response(502)):
        with pytest.raises(StoreUnavailable):
            await client.sign_in_with_password("a@example.com", "pw")


@pytest.mark.asyncio
async def test_bad_credentials_are_validation_errors(client):
    body = {"error": "invalid_grant", "error_description": "Invalid login credentials"}
    with patch('iwems.auth_client.requests.request', return_value=response(400, body)) as mock_request:
        with pytest.raises(ValidationError) as exc_info:
            await client.sign_in_with_password("a@example.com", "wrong")

    assert exc_info.value.message == "Invalid login credentials"
    assert mock_request.call_args.kwargs["params"] == {"grant_type": "password"}


@pytest.mark.asyncio
async def test_unconfigured_client():
    with pytest.raises(StoreUnavailable):
        await SupabaseAuthClient(None, None).get_user("tok")
