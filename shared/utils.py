from __future__ import annotations
from urllib.parse import urlsplit

# ========================================
#           INPUT VALIDATION HELPERS
# ========================================

_WS_SCHEMES = {"ws", "wss"}


def is_ws_url(s: str) -> bool:
    """
    Accepts 'ws://host[:port][/path]' or 'wss://...'.

    - Scheme must be ws or wss.
    - Hostname must be non-empty.
    - Port, when given, must be an integer between 1 and 65535.

    Examples: "ws://localhost:8080/", "wss://example.com/feed"
    """
    if not isinstance(s, str):
        return False
    try:
        parts = urlsplit(s)
        if parts.scheme not in _WS_SCHEMES or not parts.hostname:
            return False
        port = parts.port  # ValueError when out of range or not numeric
        return port is None or 0 < port <= 65535
    except ValueError:
        return False


def is_port(value: object) -> bool:
    """Port numbers are ints in 1..65535 (bool is rejected)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= 65535
