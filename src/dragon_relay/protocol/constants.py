

# Topic constants (stringly-typed protocol; canonical list lives here)

# input client -> server
T_JOIN_ROOM = "join-room"

# display client -> server
T_JOIN_DISPLAY_ROOM = "join-display-room"

# server -> input client
T_ASSIGNED_IDENTITY = "assigned-identity"

# input client -> server -> display room(s)
T_CURSOR_POSITION = "cursor-position"
T_DRAWING = "drawing"
T_CLEAR = "clear"

# server -> display room(s)
T_CLIENT_DISCONNECTED = "client-disconnected"

# Topics the router re-emits to display rooms once the sender has joined.
ROUTED_TOPICS = (T_CURSOR_POSITION, T_DRAWING, T_CLEAR)
