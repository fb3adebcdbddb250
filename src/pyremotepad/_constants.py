"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Merge policy defaults
# ------------------------------------------------------------------

#: Magnitude at or below which an input vector counts as "no input".
#: Used both for "is there mobile input" and "is there keyboard input".
DEAD_ZONE = 0.1
DEFAULT_ACCELERATION = 10.0
DEFAULT_DECELERATION = 15.0

# ------------------------------------------------------------------
# Transport defaults
# ------------------------------------------------------------------

DEFAULT_SOCKET_HOST = "0.0.0.0"
DEFAULT_SOCKET_PORT = 8888
DEFAULT_HTTP_HOST = "0.0.0.0"
DEFAULT_HTTP_PORT = 8080
LOOPBACK_HOST = "127.0.0.1"
LOOPBACK_HOSTS = frozenset({LOOPBACK_HOST, "localhost", "::1"})

#: Longest socket line accepted before the partial buffer is discarded.
SOCKET_MAX_LINE_BYTES = 4096
SOCKET_READ_SIZE = 1024
#: Accept/read timeout so listener loops can observe the stop flag.
SOCKET_POLL_INTERVAL = 0.5

DEFAULT_STORE_URL = "mqtt://localhost:1883"
DEFAULT_STORE_CLIENT_ID = "pyremotepad"
DEFAULT_STORE_TOPIC_PREFIX = "controller"
DEFAULT_STORE_KEEPALIVE = 60
STORE_RECONNECT_MIN_DELAY = 1
STORE_RECONNECT_MAX_DELAY = 30
STORE_JOYSTICK_KEY = "joystick"
STORE_INTERACT_KEY = "interact"

DEFAULT_SHUTDOWN_TIMEOUT = 2.0

# ------------------------------------------------------------------
# Socket text protocol verbs
# ------------------------------------------------------------------

VERB_MOVE = "move"
VERB_INTERACT = "interact"
