"""Connection Registry — live real-time connections per user.

Process-local and never persisted. A user may hold several connections at
once (devices, tabs); each connection owns a mailbox drained by its
WebSocket task, so the messages published to one connection are sent in
the order they were published.

Publishing is thread-safe: the map is guarded by a lock and messages are
handed to a connection's event loop with ``call_soon_threadsafe``.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from notifications.notification.retry import deliver_with_retry
from shared.exceptions import DeliveryError

logger = structlog.get_logger(__name__)


@dataclass(eq=False)
class Connection:
    user_id: str
    loop: asyncio.AbstractEventLoop | None = None
    connection_id: str = field(default_factory=lambda: uuid4().hex)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    mailbox: asyncio.Queue = field(default_factory=asyncio.Queue)

    def deliver(self, message: dict) -> None:
        """Queue a message for this connection."""
        if self.loop is None:
            self.mailbox.put_nowait(message)
            return
        if self.loop.is_closed():
            raise DeliveryError({"connection": [f"Connection {self.connection_id} is closed"]})
        try:
            self.loop.call_soon_threadsafe(self.mailbox.put_nowait, message)
        except RuntimeError as exc:
            raise DeliveryError({"connection": [str(exc)]}) from exc


class ConnectionRegistry:
    def __init__(self):
        self._connections: dict[str, dict[str, Connection]] = {}
        self._lock = threading.Lock()

    def register(self, user_id, loop=None) -> Connection:
        connection = Connection(user_id=str(user_id), loop=loop)
        with self._lock:
            self._connections.setdefault(connection.user_id, {})[connection.connection_id] = connection

        logger.info(
            "connection_registered",
            user_id=connection.user_id,
            connection_id=connection.connection_id,
        )
        return connection

    def unregister(self, connection: Connection) -> None:
        with self._lock:
            user_connections = self._connections.get(connection.user_id, {})
            removed = user_connections.pop(connection.connection_id, None)
            if not user_connections:
                self._connections.pop(connection.user_id, None)

        if removed is not None:
            logger.info(
                "connection_unregistered",
                user_id=connection.user_id,
                connection_id=connection.connection_id,
            )

    def connections_for(self, user_id) -> list[Connection]:
        with self._lock:
            return list(self._connections.get(str(user_id), {}).values())

    def count(self, user_id=None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._connections.get(str(user_id), {}))
            return sum(len(c) for c in self._connections.values())

    def publish(self, user_id, message: dict) -> int:
        """Fan a message out to every live connection of a user.

        Returns the number of connections that accepted it. Offline users
        are not an error: the notification is already stored.
        """
        delivered = 0
        for connection in self.connections_for(user_id):
            ok = deliver_with_retry(
                lambda c=connection: c.deliver(message),
                user_id=str(user_id),
                connection_id=connection.connection_id,
            )
            if ok:
                delivered += 1
            else:
                self.unregister(connection)
        return delivered

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()


_registry: ConnectionRegistry | None = None


def get_registry() -> ConnectionRegistry:
    global _registry
    if _registry is None:
        _registry = ConnectionRegistry()
    return _registry


def reset_registry() -> None:
    global _registry
    _registry = None
