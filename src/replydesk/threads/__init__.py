"""Thread classification and the in-memory thread cache."""

from replydesk.threads.cache import ThreadCache, render_html_body, run_refresh_loop
from replydesk.threads.classifier import ThreadClassifier, build_transcript
from replydesk.threads.models import SendRequest, SendResult, Thread, ThreadsSnapshot

__all__ = [
    "SendRequest",
    "SendResult",
    "Thread",
    "ThreadCache",
    "ThreadClassifier",
    "ThreadsSnapshot",
    "build_transcript",
    "render_html_body",
    "run_refresh_loop",
]
