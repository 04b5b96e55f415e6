from __future__ import annotations

import pytest
from pydantic import ValidationError

from campus_market.models import ChatMessageCreate, Role
from campus_market.services.chat import ChatService
from conftest import auth_header, make_user


def test_history_is_latest_messages_oldest_first(store):
    for n in range(5):
        store.insert(
            "chat_messages",
            {"username": "ann", "message": f"m{n}", "created_at": f"2024-01-01T00:00:0{n}+00:00"},
        )
    chat = ChatService(store, history_limit=3)
    assert [m.message for m in chat.recent()] == ["m2", "m3", "m4"]


def test_message_validation():
    data = ChatMessageCreate(username="  Ann  ", message="  hello  ")
    assert (data.username, data.message) == ("Ann", "hello")
    with pytest.raises(ValidationError):
        ChatMessageCreate(username="A", message="hello")
    with pytest.raises(ValidationError):
        ChatMessageCreate(username="Ann", message="   ")
    with pytest.raises(ValidationError):
        ChatMessageCreate(username="Ann", message="x" * 1001)


def test_subscribe_only_sees_new_inserts(store):
    chat = ChatService(store)
    received = []
    with chat.subscribe(received.append):
        posted = chat.post(ChatMessageCreate(username="Ann", message="hi"))
        store.update("chat_messages", posted.id, {"message": "edited"})
    chat.post(ChatMessageCreate(username="Ann", message="after close"))

    assert [m.message for m in received] == ["hi"]
    assert received[0].id == posted.id


def test_post_endpoint_tags_signed_in_user(client, store, auth):
    uid = make_user(store, auth, Role.SELLER)
    response = client.post("/chat/messages", json={"username": "Sam", "message": "anyone selling a desk?"}, headers=auth_header(uid))
    assert response.status_code == 201
    assert response.json()["user_id"] == uid

    anonymous = client.post("/chat/messages", json={"username": "Guest", "message": "hello"})
    assert anonymous.json()["user_id"] is None

    history = client.get("/chat/messages").json()
    assert [m["message"] for m in history] == ["anyone selling a desk?", "hello"]


def test_post_endpoint_rejects_short_username(client):
    response = client.post("/chat/messages", json={"username": "x", "message": "hello"})
    assert response.status_code == 422


def test_websocket_forwards_new_messages(client):
    with client.websocket_connect("/chat/ws") as ws:
        client.post("/chat/messages", json={"username": "Ann", "message": "from http"})
        event = ws.receive_json()
        assert event["type"] == "message"
        assert event["message"]["message"] == "from http"

        ws.send_json({"username": "Bob", "message": "from socket"})
        event = ws.receive_json()
        assert event["message"]["username"] == "Bob"

        ws.send_json({"username": "B", "message": ""})
        assert ws.receive_json()["type"] == "error"

        ws.send_text("hello, not json")
        assert ws.receive_json() == {"type": "error", "detail": "Messages must be JSON objects"}

        ws.send_json({"username": "Cat", "message": "still connected"})
        assert ws.receive_json()["message"]["message"] == "still connected"

    assert [m["message"] for m in client.get("/chat/messages").json()] == ["from http", "from socket", "still connected"]
