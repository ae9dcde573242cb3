"""OAuth2 access to the support mailbox.

The desk reads threads, clears ``UNREAD`` after a reply and sends replies,
so it needs ``gmail.modify`` plus ``gmail.send``.  The token is cached in a
JSON file next to the client-secrets file of the installed-app OAuth client.
"""

from __future__ import annotations

from pathlib import Path

import google.auth.transport.requests
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow  # type: ignore[import-untyped]
from googleapiclient.discovery import Resource, build

# gmail.modify covers reading threads and clearing the UNREAD label.
DEFAULT_GMAIL_SCOPES: list[str] = [
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.send",
]

DEFAULT_TOKEN_PATH: str = "token.json"
DEFAULT_CREDENTIALS_PATH: str = "credentials.json"


def get_gmail_credentials(
    token_path: str | Path = DEFAULT_TOKEN_PATH,
    credentials_path: str | Path = DEFAULT_CREDENTIALS_PATH,
    scopes: list[str] | None = None,
) -> Credentials:
    """Return mailbox credentials, refreshing the cached token when it expired.

    Without a usable token the operator is sent through the browser consent
    screen once.  Whatever comes back is written to *token_path* so the
    server can start unattended next time.
    """
    if scopes is None:
        scopes = DEFAULT_GMAIL_SCOPES

    token_path = Path(token_path)
    credentials_path = Path(credentials_path)
    creds: Credentials | None = None

    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), scopes)  # type: ignore[no-untyped-call]

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(google.auth.transport.requests.Request())
    else:
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes)
        creds = flow.run_local_server(port=0)

    token_path.write_text(creds.to_json())
    return creds


def get_gmail_service(
    credentials: Credentials | None = None,
    *,
    token_path: str | Path = DEFAULT_TOKEN_PATH,
    credentials_path: str | Path = DEFAULT_CREDENTIALS_PATH,
) -> Resource:
    """Build the Gmail v1 resource that ``GmailClient`` wraps.

    *credentials* wins when given; otherwise the token and client-secrets
    paths from settings are used.
    """
    if credentials is None:
        credentials = get_gmail_credentials(token_path, credentials_path)
    return build("gmail", "v1", credentials=credentials)
