"""Client identification shared by the rate limiter and request logging."""

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"
MAX_USER_AGENT_LENGTH = 200


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """Extract the client address, optionally honouring proxy headers.

    Proxy headers are only trusted when the API runs behind a proxy that
    sets them; otherwise any client could pick its own rate-limit bucket.

    Args:
        request: The incoming request.
        trust_proxy_headers: Whether X-Forwarded-For / X-Real-IP are trusted.

    Returns:
        str: The client IP address.
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    if request.client:
        return request.client.host
    return UNKNOWN_CLIENT


def get_user_agent(request: Request) -> str:
    """User agent, truncated to keep log lines bounded."""
    ua = request.headers.get("user-agent", "")
    return ua[:MAX_USER_AGENT_LENGTH] if ua else UNKNOWN_CLIENT
