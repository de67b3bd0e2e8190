"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from playstats.core.config import get_settings

settings = get_settings()


def get_real_client_ip(request: Request) -> str:
    """Get the real client IP address, handling proxies.

    Checks X-Forwarded-For and X-Real-IP headers before falling back
    to the direct client address.
    """
    # Check X-Forwarded-For header first (set by proxies)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs: client, proxy1, proxy2
        # The first one is the original client
        return forwarded_for.split(",")[0].strip()

    # Check X-Real-IP header (common in nginx setups)
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fall back to default behavior
    return get_remote_address(request)


# Create the limiter instance with custom key function
limiter = Limiter(
    key_func=get_real_client_ip,
    default_limits=[settings.rate_limit_default],  # Default limit for all endpoints
    storage_uri=settings.rate_limit_storage_uri,  # memory:// unless a shared backend is configured
    strategy="fixed-window",  # Simple fixed window strategy
)

# Every stats route recomputes from a full snapshot read, so keep this modest.
# The dashboard itself issues three calls per 5-minute refresh.
RATE_LIMIT_API = "60/minute"
