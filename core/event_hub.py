"""In-process fan-out for server-sent events.

Each open ``/api/events`` stream registers a connection with its own queue.
Producers running in worker threads push messages through the owning event
loop with ``call_soon_threadsafe``.
"""
import asyncio
import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

log = logging.getLogger(__name__)


def format_sse(event: str, data) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Connection:
    user_id: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    id: str = field(default_factory=lambda: f"conn_{uuid.uuid4().hex[:12]}")


class EventHub:
    def __init__(self):
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def connect(self, user_id: str) -> Connection:
        conn = Connection(user_id=user_id, loop=asyncio.get_running_loop())
        with self._lock:
            self._connections[conn.id] = conn
        log.info("SSE connection %s opened for user %s", conn.id, user_id)
        return conn

    def disconnect(self, connection_id: str) -> None:
        with self._lock:
            self._connections.pop(connection_id, None)

    def broadcast(self, event: str, data, user_id: Optional[str] = None) -> int:
        """Queue ``event`` for every connection (or only ``user_id``'s). Returns how many got it."""
        message = format_sse(event, data)
        with self._lock:
            targets = [c for c in self._connections.values() if user_id is None or c.user_id == user_id]
        delivered = 0
        for conn in targets:
            try:
                conn.loop.call_soon_threadsafe(conn.queue.put_nowait, message)
                delivered += 1
            except RuntimeError:
                # loop already closed
                self.disconnect(conn.id)
        return delivered

    def send_to_user(self, user_id: str, event: str, data) -> int:
        return self.broadcast(event, data, user_id=user_id)

    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    async def stream(self, user_id: str, heartbeat_seconds: float, is_disconnected=None):
        """Yield a ``connected`` event, then queued messages, with heartbeats while idle."""
        conn = self.connect(user_id)
        try:
            yield format_sse("connected", {"userId": user_id, "timestamp": _now_iso()})
            while True:
                if is_disconnected is not None and await is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(conn.queue.get(), timeout=heartbeat_seconds)
                except asyncio.TimeoutError:
                    message = format_sse("heartbeat", {"timestamp": _now_iso()})
                yield message
        finally:
            self.disconnect(conn.id)
            log.info("SSE connection %s closed", conn.id)


event_hub = EventHub()


def get_event_hub() -> EventHub:
    return event_hub
