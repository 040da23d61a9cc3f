from __future__ import annotations

import socket

PROBE_HOST = "google.com"


def is_online(host: str = PROBE_HOST, *, resolver=socket.getaddrinfo) -> bool:
    """Cheap connectivity check: can we resolve a well-known name?"""

    try:
        resolver(host, None)
    except OSError:
        return False
    return True
