"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from starlette.requests import Request

CHAT_RATE_LIMIT = "30/minute"


def _get_real_client_ip(request: Request) -> str:
    """Extract the client IP, honouring a reverse proxy's forwarded header."""
    return (
        request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        or (request.client.host if request.client else "127.0.0.1")
    )


limiter = Limiter(key_func=_get_real_client_ip)
