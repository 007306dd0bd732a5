

from .constants import (
    ROUTED_TOPICS,
    T_ASSIGNED_IDENTITY,
    T_CLEAR,
    T_CLIENT_DISCONNECTED,
    T_CURSOR_POSITION,
    T_DRAWING,
    T_JOIN_DISPLAY_ROOM,
    T_JOIN_ROOM,
)
from .coords import denormalize, normalize

__all__ = [
    "ROUTED_TOPICS",
    "T_ASSIGNED_IDENTITY",
    "T_CLEAR",
    "T_CLIENT_DISCONNECTED",
    "T_CURSOR_POSITION",
    "T_DRAWING",
    "T_JOIN_DISPLAY_ROOM",
    "T_JOIN_ROOM",
    "denormalize",
    "normalize",
]
