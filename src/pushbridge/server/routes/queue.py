"""Message queue routes."""

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pushbridge.queue import MessageStore, MessageValidationError

router = APIRouter()
logger = logging.getLogger(__name__)

QUEUE_PATH = "/message_queue.json"


def _respond(status_code: int, result: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        {"type": "ok" if status_code == 200 else "error", "result": result},
        status_code=status_code,
    )


def _bad_request() -> JSONResponse:
    return _respond(400, {"message": "bad request"})


def _is_authorized(request: Request) -> bool:
    psk: str = request.app.state.psk
    token = request.headers.get("Authorization", "")
    return hmac.compare_digest(
        token.encode("utf-8"),
        f"Bearer {psk}".encode(),
    )


@router.post(QUEUE_PATH)
async def enqueue_messages(request: Request) -> JSONResponse:
    """Queue (or replace) a batch of messages keyed by message key."""
    if not _is_authorized(request):
        logger.warning("unauthorized_request", extra={"http.path": QUEUE_PATH})
        return _respond(401, {"message": "unauthorized"})

    try:
        body: Any = await request.json()
    except ValueError:
        return _bad_request()

    store: MessageStore = request.app.state.store
    try:
        store.upsert(body)
    except MessageValidationError as e:
        logger.info(
            "batch_rejected",
            extra={"queue.key": e.key, "error.message": e.reason},
        )
        return _bad_request()

    return _respond(200, {})


@router.get(QUEUE_PATH)
async def list_messages(request: Request) -> dict[str, Any]:
    """Return every pending message in wire form."""
    store: MessageStore = request.app.state.store
    return {key: message.to_dict() for key, message in store.snapshot().items()}
