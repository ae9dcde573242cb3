"""Authentication module for Google API credential management."""

from replydesk.auth.credentials import get_gmail_credentials, get_gmail_service

__all__ = [
    "get_gmail_credentials",
    "get_gmail_service",
]
