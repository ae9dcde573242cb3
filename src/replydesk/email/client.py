"""Gmail API client wrapper for listing, reading, and replying to threads.

Provides the ``GmailClient`` class that encapsulates all Gmail API
operations needed by the reply assistant: resolving the account address,
listing candidate threads, fetching full thread content, composing and
sending HTML replies with attachments, and clearing the unread label.
"""

from __future__ import annotations

import base64
import threading
from email.message import EmailMessage
from typing import Any

from replydesk.email.models import OutboundEmail, ReplyContext
from replydesk.email.threading import get_reply_context


class GmailClient:
    """Wrapper around the Gmail API service for email operations.

    All methods are synchronous and operate through the provided Gmail API
    service resource (obtained via ``get_gmail_service``).  Async callers
    run them with ``asyncio.to_thread``.  The service shares one httplib2
    transport, which is not thread-safe, so every request is executed under
    an instance lock.

    Args:
        service: An authenticated Gmail API v1 service resource.
        from_email: The address used as the ``From`` header and as the
            account's own address.  When empty, it is resolved from the
            Gmail profile on first use.
    """

    def __init__(self, service: Any, from_email: str = "") -> None:
        self._service = service
        self._from_email = from_email
        self._lock = threading.Lock()

    def _execute(self, request: Any) -> dict[str, Any]:
        with self._lock:
            result: dict[str, Any] = request.execute()
        return result

    def get_own_address(self) -> str:
        """Return the authenticated account's address.

        Returns the configured ``from_email`` if set, otherwise calls
        ``users.getProfile`` once and remembers the result.
        """
        if not self._from_email:
            profile = self._execute(self._service.users().getProfile(userId="me"))
            self._from_email = str(profile.get("emailAddress", ""))
        return self._from_email

    def list_thread_ids(
        self,
        query: str,
        max_results: int,
        label_ids: list[str] | None = None,
    ) -> list[str]:
        """List thread IDs matching a Gmail search query, most recent first.

        Args:
            query: A Gmail search query, e.g. ``is:unread``.
            max_results: Page size; only the first page is read.
            label_ids: Labels to restrict the listing to.  Defaults to
                ``["INBOX"]``.

        Returns:
            The thread IDs in the order Gmail returned them.
        """
        if label_ids is None:
            label_ids = ["INBOX"]
        response = self._execute(
            self._service.users()
            .threads()
            .list(userId="me", labelIds=label_ids, q=query, maxResults=max_results)
        )
        return [t["id"] for t in response.get("threads", [])]

    def get_thread(self, thread_id: str) -> dict[str, Any]:
        """Fetch a thread with full message payloads.

        Returns:
            The Gmail API thread resource (``id``, ``messages``, ...).
        """
        return self._execute(
            self._service.users().threads().get(userId="me", id=thread_id, format="full")
        )

    def get_reply_context(self, message_id: str) -> ReplyContext:
        """Fetch the threading headers of the message being replied to."""
        with self._lock:
            return get_reply_context(self._service, message_id)

    def send(self, outbound: OutboundEmail) -> dict[str, Any]:
        """Compose and send an HTML email via the Gmail API.

        Constructs an RFC 2822 MIME message from the ``OutboundEmail``
        model (HTML body plus any attachments), base64url-encodes it, and
        sends via ``users.messages.send``.  When ``outbound.thread_id`` is
        set, the message is linked to an existing thread.  When
        ``outbound.in_reply_to`` is set, the corresponding threading
        headers are added.

        Args:
            outbound: The email to send.

        Returns:
            The Gmail API response dict (contains ``id``, ``threadId``,
            ``labelIds``).
        """
        message = EmailMessage()
        message.set_content(outbound.html_body, subtype="html")
        message["To"] = outbound.to
        message["From"] = self.get_own_address()
        message["Subject"] = outbound.subject

        if outbound.in_reply_to:
            message["In-Reply-To"] = outbound.in_reply_to
        if outbound.references:
            message["References"] = outbound.references

        for attachment in outbound.attachments:
            maintype, _, subtype = attachment.mime_type.partition("/")
            message.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )

        encoded = base64.urlsafe_b64encode(message.as_bytes()).decode()
        payload: dict[str, Any] = {"raw": encoded}

        if outbound.thread_id:
            payload["threadId"] = outbound.thread_id

        return self._execute(self._service.users().messages().send(userId="me", body=payload))

    def modify_thread_labels(
        self,
        thread_id: str,
        remove: list[str] | None = None,
        add: list[str] | None = None,
    ) -> dict[str, Any]:
        """Add or remove labels on every message of a thread.

        Args:
            thread_id: The Gmail thread ID.
            remove: Label IDs to remove, e.g. ``["UNREAD"]``.
            add: Label IDs to add.

        Returns:
            The Gmail API thread resource after modification.
        """
        body = {"removeLabelIds": remove or [], "addLabelIds": add or []}
        return self._execute(
            self._service.users().threads().modify(userId="me", id=thread_id, body=body)
        )
