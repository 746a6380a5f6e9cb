import asyncio

from conftest import auth, make_project
from core.event_hub import EventHub, format_sse, get_event_hub
from main import app

SSE = {"Accept": "text/event-stream"}


def test_plain_get_is_404(client, owner_token):
    assert client.get("/api/events", headers=auth(owner_token)).status_code == 404


def test_stream_requires_session(client):
    assert client.get("/api/events", headers=SSE).status_code == 401


def test_stream_sends_connected_then_queued_then_heartbeat():
    hub = EventHub()

    async def scenario():
        stream = hub.stream("u1", heartbeat_seconds=0.05)
        first = await stream.__anext__()
        assert hub.connection_count() == 1
        assert hub.send_to_user("u1", "project_downloaded", {"projectId": "p1"}) == 1
        assert hub.send_to_user("u2", "ignored", {}) == 0
        second = await stream.__anext__()
        third = await stream.__anext__()
        await stream.aclose()
        return first, second, third

    first, second, third = asyncio.run(scenario())
    assert first.startswith("event: connected\ndata: ")
    assert '"userId": "u1"' in first
    assert second == format_sse("project_downloaded", {"projectId": "p1"})
    assert third.startswith("event: heartbeat\n")
    assert hub.connection_count() == 0


def test_stream_ends_when_client_goes_away():
    hub = EventHub()

    async def gone():
        return True

    async def scenario():
        return [chunk async for chunk in hub.stream("u1", 10, is_disconnected=gone)]

    chunks = asyncio.run(scenario())
    assert len(chunks) == 1
    assert hub.connection_count() == 0


def test_broadcast_reaches_every_connection():
    hub = EventHub()

    async def scenario():
        a = hub.stream("u1", 10)
        b = hub.stream("u2", 10)
        await a.__anext__()
        await b.__anext__()
        assert hub.broadcast("announcement", {"text": "hi"}) == 2
        got = (await a.__anext__(), await b.__anext__())
        await a.aclose()
        await b.aclose()
        return got

    assert asyncio.run(scenario()) == (format_sse("announcement", {"text": "hi"}),) * 2


def test_download_notifies_owner(client, db, owner):
    sent = []

    class RecordingHub:
        def send_to_user(self, user_id, event, data):
            sent.append((user_id, event, data))
            return 0

    app.dependency_overrides[get_event_hub] = RecordingHub
    p = make_project(db, owner, title="Notify me")
    assert client.post(f"/api/projects/{p.id}/download").status_code == 202
    assert sent == [(owner.id, "project_downloaded", {"projectId": p.id, "title": "Notify me"})]
