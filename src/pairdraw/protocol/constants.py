# Event names (stringly-typed protocol; canonical list lives here)

# client -> server
T_CREATE_ROOM = "create-room"
T_JOIN_ROOM = "join-room"
T_DRAW = "draw"
T_CLEAR_CANVAS = "clear-canvas"

# server -> clients
T_ROOM_CREATED = "room-created"
T_JOIN_ERROR = "join-error"
T_LOAD_DRAWING = "load-drawing"
T_USER_JOINED = "user-joined"
T_USER_LEFT = "user-left"
# T_DRAW and T_CLEAR_CANVAS are relayed back out under the same names.

MAX_MEMBERS = 2

ROOM_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ROOM_ID_LENGTH = 6

# Client-facing error texts
ERR_USERNAME_REQUIRED = "Username is required"
ERR_JOIN_FIELDS_REQUIRED = "Room ID and username are required"
ERR_ROOM_NOT_FOUND = "Room not found"
ERR_ROOM_FULL = f"Room is full (max {MAX_MEMBERS} users)"
ERR_USERNAME_TAKEN = "Username already taken in this room"
ERR_ALREADY_IN_ROOM = "You are already in this room"
