"""Process-wide cache of unreplied and replied threads.

``ThreadCache`` is the single owner of the cached collections.  Its only
mutators are ``refresh`` (driven by a background timer) and ``record_send``
(driven by ``send_reply``).  Both run on one asyncio event loop and apply
their changes as whole-collection replacements, so no lock is needed beyond
the refresh state flag.  Blocking Gmail and Anthropic calls run in worker
threads via ``asyncio.to_thread``; ``GmailClient`` serializes its own requests.
"""

from __future__ import annotations

import asyncio
import html
import uuid
from datetime import UTC, datetime

import structlog

from replydesk.domain.errors import SendError, ThreadNotFoundError
from replydesk.domain.types import RefreshState
from replydesk.email.client import GmailClient
from replydesk.email.models import Message, OutboundEmail
from replydesk.email.threading import build_reply_headers
from replydesk.llm.validation import validate_for_send
from replydesk.storage.attachments import AttachmentStorage
from replydesk.threads.classifier import ThreadClassifier
from replydesk.threads.models import SendRequest, Thread, ThreadsSnapshot

logger = structlog.get_logger()

DEFAULT_UNREPLIED_QUERY = "is:unread"
DEFAULT_REPLIED_QUERY = "is:read in:inbox -in:sent"
DEFAULT_MAX_RESULTS = 15


def render_html_body(body: str, signature_html: str = "") -> str:
    """Escape the plain-text *body*, turn ``\\n`` into ``<br/>``, append the signature."""
    return html.escape(body).replace("\n", "<br/>") + signature_html


class ThreadCache:
    """Coordinates refresh and send over the in-memory thread collections.

    Args:
        gmail: Gmail client for listing, fetching, sending, and labels.
        classifier: Builds ``Thread`` records for listed thread IDs.
        storage: Resolves attachment filenames at send time.
        signature_html: Signature block appended to every sent reply.
        unreplied_query: Gmail query listing threads that may need a reply.
        replied_query: Gmail query listing recently read threads.
        max_results: Page size of each listing query.
    """

    def __init__(
        self,
        gmail: GmailClient,
        classifier: ThreadClassifier,
        storage: AttachmentStorage,
        signature_html: str = "",
        *,
        unreplied_query: str = DEFAULT_UNREPLIED_QUERY,
        replied_query: str = DEFAULT_REPLIED_QUERY,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self._gmail = gmail
        self._classifier = classifier
        self._storage = storage
        self._signature_html = signature_html
        self._queries = (unreplied_query, replied_query)
        self._max_results = max_results

        self._unreplied: list[Thread] = []
        self._replied: list[Thread] = []
        self._state = RefreshState.IDLE
        # Threads moved to replied while a refresh was in flight.
        self._sent_during_refresh: set[str] = set()
        self._last_refreshed_at: datetime | None = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def last_refreshed_at(self) -> datetime | None:
        """When the last refresh completed successfully, or ``None`` if never."""
        return self._last_refreshed_at

    def snapshot(self) -> ThreadsSnapshot:
        """Return a copy of both collections for the presentation layer."""
        return ThreadsSnapshot(unreplied=list(self._unreplied), replied=list(self._replied))

    def get_unreplied(self, thread_id: str) -> Thread | None:
        return next((t for t in self._unreplied if t.thread_id == thread_id), None)

    async def _list_candidate_ids(self) -> list[str]:
        listings = await asyncio.gather(
            *(
                asyncio.to_thread(self._gmail.list_thread_ids, query, self._max_results)
                for query in self._queries
            )
        )
        # A thread can match both queries; keep the first occurrence.
        return list(dict.fromkeys(tid for listing in listings for tid in listing))

    async def refresh(self) -> bool:
        """Run one refresh cycle unless one is already running.

        Lists candidate threads, reuses cached unreplied records that
        already carry real AI candidates, classifies everything else
        concurrently, and replaces the unreplied collection.  The replied
        collection is left alone; only ``record_send`` adds to it.

        A listing failure is logged and leaves the cache unchanged; the next
        timer tick retries.

        Returns:
            ``True`` if the cycle ran to completion, ``False`` if it was
            skipped because another refresh was running or if it failed.
        """
        if self._state is RefreshState.REFRESHING:
            logger.debug("refresh_skipped", reason="already_refreshing")
            return False

        self._state = RefreshState.REFRESHING
        self._sent_during_refresh = set()
        try:
            own_address = await asyncio.to_thread(self._gmail.get_own_address)
            thread_ids = await self._list_candidate_ids()

            reusable = {t.thread_id: t for t in self._unreplied if t.has_usable_candidates}
            to_classify = [tid for tid in thread_ids if tid not in reusable]
            classified = await asyncio.gather(
                *(
                    asyncio.to_thread(self._classifier.classify, tid, own_address)
                    for tid in to_classify
                )
            )
            fresh = dict(zip(to_classify, classified, strict=True))

            records = [reusable.get(tid) or fresh.get(tid) for tid in thread_ids]
            self._unreplied = [
                t
                for t in records
                if t is not None and not t.replied and t.thread_id not in self._sent_during_refresh
            ]
            self._last_refreshed_at = datetime.now(tz=UTC)
            logger.info(
                "cache_refreshed",
                listed=len(thread_ids),
                reused=len(thread_ids) - len(to_classify),
                classified=len(to_classify),
                unreplied=len(self._unreplied),
                replied=len(self._replied),
            )
            return True
        except Exception:
            logger.exception("cache_refresh_failed")
            return False
        finally:
            self._state = RefreshState.IDLE

    def _migrate(self, current: Thread, sent_message: Message) -> Thread:
        thread_id = current.thread_id
        updated = current.model_copy(
            update={"messages": [*current.messages, sent_message], "replied": True}
        )
        self._unreplied = [t for t in self._unreplied if t.thread_id != thread_id]
        self._replied = [updated, *(t for t in self._replied if t.thread_id != thread_id)]
        if self._state is RefreshState.REFRESHING:
            self._sent_during_refresh.add(thread_id)
        return updated

    def record_send(self, thread_id: str, sent_message: Message) -> Thread | None:
        """Move a thread from unreplied to the head of replied.

        Appends *sent_message* to the thread's messages and marks it
        replied.  Both collections are replaced, not edited in place.

        Args:
            thread_id: The Gmail thread ID that was replied to.
            sent_message: The message that was sent.

        Returns:
            The updated thread, or ``None`` if the thread is not unreplied.
        """
        current = self.get_unreplied(thread_id)
        if current is None:
            logger.warning("record_send_unknown_thread", thread_id=thread_id)
            return None
        return self._migrate(current, sent_message)

    async def send_reply(self, request: SendRequest) -> Thread:
        """Send the operator's reply and migrate the thread to replied.

        Validation, thread lookup, and attachment loading all happen before
        any provider call.  The cache is only changed after Gmail accepted
        the message.  Clearing the UNREAD label is best effort.

        Args:
            request: Thread ID, the chosen (possibly edited) reply, and
                attachment filenames.

        Returns:
            The thread as now stored at the head of the replied collection.

        Raises:
            InvalidCandidateError: Subject or body is empty.
            ThreadNotFoundError: The thread is not among unreplied threads.
            AttachmentNotFoundError: An attachment is not in storage.
            SendError: Gmail rejected the reply or could not be reached.
        """
        draft = request.response
        validate_for_send(draft)

        thread = self.get_unreplied(request.thread_id)
        if thread is None or not thread.messages:
            raise ThreadNotFoundError(request.thread_id)
        latest = thread.messages[-1]

        attachments = [self._storage.load_attachment(name) for name in request.attachments]

        try:
            own_address = await asyncio.to_thread(self._gmail.get_own_address)
            ctx = await asyncio.to_thread(self._gmail.get_reply_context, latest.id)
            headers = build_reply_headers(ctx)
            outbound = OutboundEmail(
                to=headers["To"],
                subject=draft.subject.strip(),
                html_body=render_html_body(draft.body, self._signature_html),
                thread_id=thread.thread_id,
                in_reply_to=headers["In-Reply-To"] or None,
                references=headers["References"] or None,
                attachments=attachments,
            )
            result = await asyncio.to_thread(self._gmail.send, outbound)
        except Exception as exc:
            logger.exception("reply_send_failed", thread_id=thread.thread_id)
            msg = f"Failed to send reply for thread '{thread.thread_id}': {exc}"
            raise SendError(msg) from exc

        try:
            await asyncio.to_thread(
                self._gmail.modify_thread_labels, thread.thread_id, remove=["UNREAD"]
            )
        except Exception:
            logger.warning("mark_read_failed", thread_id=thread.thread_id, exc_info=True)

        sent = Message(
            id=str(result.get("id") or f"sent-{uuid.uuid4().hex}"),
            sender=own_address,
            subject=outbound.subject,
            body=draft.body,
            timestamp=datetime.now(tz=UTC),
            is_from_self=True,
        )
        # A refresh that finished mid-send may have dropped the record already.
        updated = self._migrate(self.get_unreplied(thread.thread_id) or thread, sent)
        logger.info(
            "reply_sent",
            thread_id=thread.thread_id,
            attachments=len(attachments),
            gmail_message_id=sent.id,
        )
        return updated


async def run_refresh_loop(cache: ThreadCache, interval_seconds: float) -> None:
    """Refresh *cache* now and then every *interval_seconds* until cancelled."""
    while True:
        await cache.refresh()
        await asyncio.sleep(interval_seconds)
