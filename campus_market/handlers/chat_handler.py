"""Public chat room: history, posting and a live WebSocket feed."""
from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from campus_market.config import Settings, get_settings
from campus_market.models import ChatMessage, ChatMessageCreate, Viewer
from campus_market.services.chat import ChatService
from campus_market.services.datastore import DataStore, get_datastore

from .deps import get_viewer

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


def get_chat_service(
    store: DataStore = Depends(get_datastore),
    settings: Settings = Depends(get_settings),
) -> ChatService:
    return ChatService(store, history_limit=settings.chat_history_limit)


@router.get("/messages", response_model=list[ChatMessage])
def history(chat: ChatService = Depends(get_chat_service)):
    return chat.recent()


@router.post("/messages", response_model=ChatMessage, status_code=201)
def post_message(
    data: ChatMessageCreate,
    viewer: Viewer = Depends(get_viewer),
    chat: ChatService = Depends(get_chat_service),
):
    return chat.post(data, user_id=viewer.uid)


# ---------------------------------------------------------------------------
# Live feed
# ---------------------------------------------------------------------------


@router.websocket("/ws")
async def live_feed(websocket: WebSocket, chat: ChatService = Depends(get_chat_service)):
    """Forward every new message; messages sent by the client are posted."""

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[ChatMessage] = asyncio.Queue()

    # Store callbacks fire on the listener thread.
    subscription = chat.subscribe(lambda message: loop.call_soon_threadsafe(queue.put_nowait, message))
    await websocket.accept()

    async def _forward() -> None:
        while True:
            message = await queue.get()
            await websocket.send_json({"type": "message", "message": message.model_dump(mode="json")})

    sender = asyncio.create_task(_forward())
    try:
        while True:
            try:
                payload = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"type": "error", "detail": "Messages must be JSON objects"})
                continue
            try:
                data = ChatMessageCreate.model_validate(payload)
            except ValidationError as exc:
                await websocket.send_json(
                    {"type": "error", "detail": exc.errors(include_url=False, include_context=False)}
                )
                continue
            await asyncio.to_thread(chat.post, data)
    except WebSocketDisconnect:
        logger.debug("Chat client disconnected")
    finally:
        subscription.close()
        sender.cancel()
        # A send racing the disconnect may have failed first.
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender
