"""
Authentication Helper
=====================
Loads the saved OAuth refresh token for the YouTube captions API.

The token file (.yt-oauth.json) is written by the one-off OAuth consent flow
and holds at least a refresh_token. Client id/secret come from settings.
"""

import json
from pathlib import Path
from typing import Optional

import requests
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

SCOPES = ["https://www.googleapis.com/auth/youtube.force-ssl"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def load_credentials(
    token_path: Path,
    client_id: Optional[str],
    client_secret: Optional[str],
) -> Optional[Credentials]:
    """
    Build OAuth user credentials from the saved token file.

    Args:
        token_path: Path to the saved token JSON
        client_id: OAuth client id
        client_secret: OAuth client secret

    Returns:
        Credentials, or None when the file or client credentials are missing
        or the file carries no refresh token
    """
    if not client_id or not client_secret:
        return None
    path = Path(token_path)
    if not path.is_file():
        return None

    tokens = json.loads(path.read_text(encoding="utf-8"))
    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        return None

    return Credentials(
        token=None,  # stored access tokens carry no expiry; always refresh
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=SCOPES,
    )


def get_access_token(credentials: Credentials) -> str:
    """Refresh the credentials if needed and return a bearer token."""
    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def make_authenticated_request(url: str, params: dict, credentials: Credentials) -> requests.Response:
    """
    Make an authenticated GET against the YouTube API.

    Returns:
        The response (status already checked)
    """
    token = get_access_token(credentials)
    headers = {"Authorization": f"Bearer {token}"}

    r = requests.get(url, params=params, headers=headers, timeout=30)
    r.raise_for_status()
    return r
