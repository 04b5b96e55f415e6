"""Public chat room backed by the ``chat_messages`` table."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from pydantic import ValidationError

from campus_market.models import ChatMessage, ChatMessageCreate
from campus_market.services.datastore import ChangeEvent, DataStore, Subscription
from campus_market.services.tables import CHAT_MESSAGES

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, store: DataStore, *, history_limit: int = 100) -> None:
        self._store = store
        self._history_limit = history_limit

    def recent(self) -> list[ChatMessage]:
        """Latest messages, oldest first."""

        rows = self._store.query(
            CHAT_MESSAGES,
            order_by="created_at",
            descending=True,
            limit=self._history_limit,
        )
        return [ChatMessage.model_validate(r) for r in reversed(rows)]

    def post(self, data: ChatMessageCreate, *, user_id: Optional[str] = None) -> ChatMessage:
        row = self._store.insert(CHAT_MESSAGES, {**data.model_dump(), "user_id": user_id})
        logger.debug("Chat message %s from %s", row["id"], data.username)
        return ChatMessage.model_validate(row)

    def subscribe(self, on_message: Callable[[ChatMessage], None]) -> Subscription:
        """Call *on_message* for every message inserted from now on."""

        def _on_change(event: ChangeEvent) -> None:
            if event.type != "INSERT" or event.row is None:
                return
            try:
                message = ChatMessage.model_validate({**event.row, "id": event.row_id})
            except ValidationError as exc:
                logger.warning("Skipping malformed chat row %s: %s", event.row_id, exc)
                return
            on_message(message)

        return self._store.subscribe(CHAT_MESSAGES, _on_change)
