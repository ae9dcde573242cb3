"""FastAPI routes consumed by the operator UI.

Exposes the thread cache snapshot, the send action, the signature block
the UI previews under a draft, and the list of stored attachments.  All
state is read from ``request.app.state.services``, populated by
``initialize_services`` at startup.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request

from replydesk.domain.errors import (
    AttachmentNotFoundError,
    InvalidCandidateError,
    SendError,
    ThreadNotFoundError,
)
from replydesk.threads.cache import ThreadCache
from replydesk.threads.models import SendRequest, SendResult, ThreadsSnapshot

logger = structlog.get_logger()

router = APIRouter(prefix="/api")


def _get_cache(request: Request) -> ThreadCache:
    services: dict[str, Any] = request.app.state.services
    cache: ThreadCache | None = services.get("thread_cache")
    if cache is None:
        raise HTTPException(status_code=503, detail="Thread cache not initialized")
    return cache


@router.get("/threads")
async def list_threads(request: Request) -> ThreadsSnapshot:
    """Return the current unreplied and replied threads."""
    return _get_cache(request).snapshot()


@router.post("/send")
async def send_reply(payload: SendRequest, request: Request) -> SendResult:
    """Send the chosen reply and return the thread as moved to replied.

    Raises:
        HTTPException: 400 for an empty subject/body or unknown attachment,
            404 for a thread that is not awaiting a reply, 502 when Gmail
            rejects or cannot be reached.  The cache is unchanged in every
            error case, so the same request can be retried.
    """
    cache = _get_cache(request)
    try:
        updated = await cache.send_reply(payload)
    except (InvalidCandidateError, AttachmentNotFoundError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ThreadNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SendError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return SendResult(success=True, updated_thread=updated)


@router.get("/signature")
async def get_signature(request: Request) -> dict[str, str]:
    """Return the HTML signature appended to every reply."""
    return {"signature": request.app.state.services.get("signature_html", "")}


@router.get("/attachments")
async def list_attachments(request: Request) -> dict[str, list[str]]:
    """Return the filenames available for attaching to a reply."""
    storage = request.app.state.services.get("attachment_storage")
    if storage is None:
        return {"files": []}
    return {"files": storage.list_files()}
