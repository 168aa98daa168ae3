"""Tests for the Zid API client and settings-driven token resolution."""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from zidrec.api.exceptions import ProviderError
from zidrec.config import Settings
from zidrec.recommender.provider import (
    ORDERS_PATH,
    PRODUCTS_PATH,
    ZidClient,
    response_data,
)


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records GET calls and replays a canned response or error."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse({"data": []})
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(
            {"url": url, "params": params, "headers": headers, "timeout": timeout}
        )
        if self.error:
            raise self.error
        return self.response


def test_fetch_products_request_shape():
    """Test URL, pagination params, auth headers and timeout."""
    session = FakeSession(FakeResponse({"data": [{"id": 1}]}))
    client = ZidClient(
        base_url="https://api.zid.sa/",
        access_token="secret",
        timeout=3,
        session=session,
    )

    payload = client.fetch_products(page=1, page_size=100)

    assert payload == {"data": [{"id": 1}]}
    call = session.calls[0]
    assert call["url"] == f"https://api.zid.sa{PRODUCTS_PATH}"
    assert call["params"] == {"page": 1, "page_size": 100}
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 3


def test_fetch_orders_path():
    """Test that orders are fetched from the manager orders endpoint."""
    session = FakeSession()
    client = ZidClient(access_token="secret", session=session)

    client.fetch_orders(page=2, page_size=10)

    assert session.calls[0]["url"].endswith(ORDERS_PATH)
    assert session.calls[0]["params"] == {"page": 2, "page_size": 10}


def test_no_token_skips_request():
    """Test that no request is sent without an access token."""
    session = FakeSession()
    client = ZidClient(access_token=None, session=session)

    assert client.fetch_products() is None
    assert session.calls == []


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(error=requests.Timeout("slow")),
        FakeSession(FakeResponse({"message": "unauthorized"}, status_code=401)),
        FakeSession(FakeResponse(None, text="<html>")),
    ],
)
def test_failures_raise_provider_error(session):
    """Test that transport, HTTP and decoding failures raise ProviderError."""
    client = ZidClient(access_token="secret", session=session)

    with pytest.raises(ProviderError) as exc_info:
        client.fetch_products()

    assert exc_info.value.status_code == 502
    assert exc_info.value.details["path"] == PRODUCTS_PATH


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"data": [{"id": 1}]}, [{"id": 1}]),
        ({"data": None}, []),
        ({"data": {"id": 1}}, []),
        ({}, []),
        (None, []),
        ([{"id": 1}], []),
    ],
)
def test_response_data(payload, expected):
    """Test that only a list ``data`` field is accepted."""
    assert response_data(payload) == expected


def test_settings_token_from_env_value(tmp_path):
    """Test that an explicit token wins over the token file."""
    token_file = tmp_path / "tokens.json"
    token_file.write_text(json.dumps({"access_token": "from-file"}))

    settings = Settings(ZID_ACCESS_TOKEN="explicit", TOKEN_FILE=str(token_file))

    assert settings.resolve_access_token() == "explicit"


def test_settings_token_from_file(tmp_path):
    """Test that the installer's token file is read."""
    token_file = tmp_path / "tokens.json"
    token_file.write_text(json.dumps({"access_token": "from-file"}))

    settings = Settings(ZID_ACCESS_TOKEN=None, TOKEN_FILE=str(token_file))

    assert settings.resolve_access_token() == "from-file"


@pytest.mark.parametrize("contents", [None, "{broken", "[]", "{}"])
def test_settings_token_unavailable(tmp_path, contents):
    """Test that a missing or unusable token file yields no token."""
    token_file = tmp_path / "tokens.json"
    if contents is not None:
        token_file.write_text(contents)

    settings = Settings(ZID_ACCESS_TOKEN=None, TOKEN_FILE=str(token_file))

    assert settings.resolve_access_token() is None


def test_settings_defaults():
    """Test the documented defaults."""
    settings = Settings(_env_file=None)

    assert settings.FETCH_PAGE_SIZE == 100
    assert settings.MAX_RECOMMENDATIONS == 5
    assert settings.CACHE_FILE == "storage/cache.json"
