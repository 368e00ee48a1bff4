"""
Tests for loading the saved OAuth token.
"""

import json
from unittest.mock import MagicMock, patch

from yt_tldr.auth_helper import get_access_token, load_credentials, make_authenticated_request


def _token_file(tmp_path, payload):
    path = tmp_path / ".yt-oauth.json"
    path.write_text(json.dumps(payload))
    return path


def test_load_credentials(tmp_path):
    path = _token_file(tmp_path, {"refresh_token": "refresh", "access_token": "stale"})

    creds = load_credentials(path, "client-id", "client-secret")

    assert creds.refresh_token == "refresh"
    assert creds.client_id == "client-id"
    assert creds.token is None


def test_load_credentials_missing_pieces(tmp_path):
    path = _token_file(tmp_path, {"access_token": "only"})

    assert load_credentials(path, "id", "secret") is None
    assert load_credentials(tmp_path / "absent.json", "id", "secret") is None
    assert load_credentials(path, None, "secret") is None


def test_get_access_token_refreshes_invalid_credentials():
    creds = MagicMock(valid=False, token="fresh")

    assert get_access_token(creds) == "fresh"
    creds.refresh.assert_called_once()


def test_make_authenticated_request_sends_bearer():
    creds = MagicMock(valid=True, token="abc")
    with patch("yt_tldr.auth_helper.requests.get") as mock_get:
        make_authenticated_request("https://example.com/api", {"id": "x"}, creds)

    assert mock_get.call_args.kwargs["headers"] == {"Authorization": "Bearer abc"}
    mock_get.return_value.raise_for_status.assert_called_once()
