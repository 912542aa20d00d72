# Inbound events (client -> server)
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
SIGNAL = "signal"
LEAVE_ROOM = "leave-room"

# Outbound events (server -> client)
CONNECTED = "connected"  # data: {connectionId}
ROOM_CREATED = "room-created"  # data: {roomCode}
ROOM_JOINED = "room-joined"  # data: {roomCode}
ERROR = "error"  # data: {message}
MONITOR_JOINED = "monitor-joined"  # data: {monitorId, roomCode, totalViewers}
MONITOR_LEFT = "monitor-left"  # data: {monitorId, totalViewers}
PHONE_DISCONNECTED = "phone-disconnected"  # data: null
# SIGNAL is also outbound, data: {from, signal}

# Symbolic signaling target meaning "the room's streamer"
STREAMER_TARGET = "phone"
