"""Request guards applied before admission.

Client identification and the cheap referrer / user-agent screens. None of
these are authentication; every header involved is client-controlled.
"""

from typing import Iterable, Optional

from fastapi import Request

from postguard.app.exceptions import ForbiddenRequestError


def get_client_key(request: Request) -> str:
    """Resolve the admission client key for a request.

    Order: ``client-ip``, first ``x-forwarded-for`` entry, ``x-real-ip``,
    socket peer, then ``"unknown"``.
    """
    client_ip = request.headers.get("client-ip")
    if client_ip:
        return client_ip.strip()

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


def is_allowed_referrer(referrer: Optional[str], allowed: Iterable[str]) -> bool:
    """A missing referrer is allowed; a present one must match an allowed prefix."""
    if not referrer:
        return True
    return any(referrer.startswith(origin) for origin in allowed)


def is_automated_user_agent(user_agent: Optional[str], blocked: Iterable[str]) -> bool:
    user_agent = (user_agent or "").lower()
    return any(pattern.lower() in user_agent for pattern in blocked)


def enforce_request_guards(
    request: Request,
    allowed_referrers: Iterable[str],
    blocked_user_agents: Iterable[str],
) -> None:
    """Reject requests from foreign pages or obvious scripts.

    Raises:
        ForbiddenRequestError: If either guard trips
    """
    referrer = request.headers.get("referer") or request.headers.get("origin")
    if not is_allowed_referrer(referrer, allowed_referrers):
        raise ForbiddenRequestError("Invalid referrer")

    if is_automated_user_agent(request.headers.get("user-agent"), blocked_user_agents):
        raise ForbiddenRequestError("Automated requests not allowed")
