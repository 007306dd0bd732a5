from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ConnState(str, Enum):
    CONNECTED = "connected"  # transport up, no room yet; routed events are dropped
    ROOM_ASSIGNED = "room_assigned"  # input client with color + room
    DISPLAY = "display"  # display client subscribed to one display room
    DISCONNECTED = "disconnected"  # terminal


@dataclass(frozen=True)
class ClientSession:
    """Identity an input connection holds once it has joined a room. Immutable."""

    conn_id: str
    room: str
    color: str
    color_index: int


@dataclass
class Connection:
    conn_id: str
    state: ConnState = ConnState.CONNECTED
    session: ClientSession | None = None
    display_room: str | None = None


@dataclass
class ClientRegistry:
    """
    Per-connection state plus display-room membership.

    Owned by the room router; handlers only mutate it synchronously.
    """

    connections: dict[str, Connection] = field(default_factory=dict)
    # display room -> connection ids of display clients
    display_members: dict[str, set[str]] = field(default_factory=dict)

    def connect(self, conn_id: str) -> Connection:
        conn = self.connections.get(conn_id)
        if conn is None:
            conn = Connection(conn_id)
            self.connections[conn_id] = conn
        return conn

    def get(self, conn_id: str) -> Connection | None:
        return self.connections.get(conn_id)

    def session(self, conn_id: str) -> ClientSession | None:
        conn = self.connections.get(conn_id)
        if conn is None or conn.state is not ConnState.ROOM_ASSIGNED:
            return None
        return conn.session

    def assign(self, conn_id: str, session: ClientSession) -> ClientSession | None:
        """Attach `session`; returns the session it replaced, if any."""
        conn = self.connect(conn_id)
        previous = conn.session if conn.state is ConnState.ROOM_ASSIGNED else None
        self._leave_display(conn)
        conn.session = session
        conn.state = ConnState.ROOM_ASSIGNED
        return previous

    def subscribe_display(self, conn_id: str, display_room: str) -> ClientSession | None:
        """Make the connection a display client; returns the input session it dropped, if any."""
        conn = self.connect(conn_id)
        previous = conn.session if conn.state is ConnState.ROOM_ASSIGNED else None
        self._leave_display(conn)
        conn.session = None
        conn.state = ConnState.DISPLAY
        conn.display_room = display_room
        self.display_members.setdefault(display_room, set()).add(conn_id)
        return previous

    def members(self, display_room: str) -> set[str]:
        return set(self.display_members.get(display_room, ()))

    def remove(self, conn_id: str) -> Connection | None:
        """Delete all state for the connection. Idempotent."""
        conn = self.connections.pop(conn_id, None)
        if conn is None:
            return None
        self._leave_display(conn)
        conn.state = ConnState.DISCONNECTED
        return conn

    def _leave_display(self, conn: Connection) -> None:
        if conn.display_room is None:
            return
        members = self.display_members.get(conn.display_room)
        if members is not None:
            members.discard(conn.conn_id)
            if not members:
                del self.display_members[conn.display_room]
        conn.display_room = None
