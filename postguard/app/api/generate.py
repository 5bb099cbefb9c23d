"""Post generation endpoint.

Screens the request, runs it through the admission engine and, once
admitted, forwards the prompt upstream.
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from postguard.app.core.config import Settings
from postguard.app.core.logging import get_log_context, get_logger
from postguard.app.core.security import enforce_request_guards, get_client_key
from postguard.app.exceptions import InvalidRequestError
from postguard.app.middleware.request_id import get_request_id
from postguard.app.providers.base import BaseProvider
from postguard.app.services.admission import (
    AdmissionEngine,
    Admitted,
    Decision,
    LimitKind,
    RejectedCooldown,
    RejectedDuplicate,
    RejectedRateLimited,
    RejectedSpam,
    RejectedValidation,
)

logger = get_logger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_admission_engine(request: Request) -> AdmissionEngine:
    return request.app.state.admission_engine


def get_provider(request: Request) -> BaseProvider:
    return request.app.state.provider


def rejection_status(decision: Decision) -> int:
    """HTTP status for a rejected admission decision."""
    if isinstance(decision, (RejectedValidation, RejectedSpam)):
        return 400
    return 429


def rejection_body(decision: Decision) -> Dict[str, Any]:
    """JSON body for a rejected admission decision."""
    if isinstance(decision, RejectedValidation):
        return {"error": decision.reason}
    if isinstance(decision, RejectedSpam):
        return {"error": "Content appears to be spam"}
    if isinstance(decision, RejectedDuplicate):
        return {"error": "Similar content submitted recently. Please wait before trying again."}
    if isinstance(decision, RejectedCooldown):
        return {
            "error": f"Please wait {decision.retry_after} seconds before making another request",
            "retryAfter": decision.retry_after,
        }
    if isinstance(decision, RejectedRateLimited):
        if decision.kind == LimitKind.WINDOW:
            minutes = decision.retry_after // 60
            message = f"Rate limit exceeded. Maximum {decision.limit} requests per {minutes} minutes."
        else:
            message = f"Daily limit exceeded. Maximum {decision.limit} requests per day."
        return {"error": message, "retryAfter": decision.retry_after}
    raise ValueError(f"Not a rejection: {decision!r}")


def rejection_response(decision: Decision) -> JSONResponse:
    body = rejection_body(decision)
    headers: Optional[Dict[str, str]] = None
    if "retryAfter" in body:
        headers = {"Retry-After": str(body["retryAfter"])}
    return JSONResponse(status_code=rejection_status(decision), content=body, headers=headers)


async def _read_prompt(request: Request) -> Any:
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise InvalidRequestError("Invalid JSON body")
    return body.get("prompt")


async def call_upstream(
    engine: AdmissionEngine,
    provider: BaseProvider,
    client_key: str,
    decision: Admitted,
    prompt: str,
) -> str:
    """Call the provider for an admitted request.

    Failed or cancelled calls keep the cooldown but give the quota slot back.
    """
    try:
        return await provider.generate(prompt)
    except BaseException:
        engine.on_upstream_failure(client_key, decision.admitted_at)
        raise


@router.post("/api/generate-posts")
async def generate_posts(
    request: Request,
    settings: Settings = Depends(get_settings),
    engine: AdmissionEngine = Depends(get_admission_engine),
    provider: BaseProvider = Depends(get_provider),
) -> JSONResponse:
    """Generate social posts for an admitted prompt."""
    client_key = get_client_key(request)
    request_id = get_request_id(request)

    enforce_request_guards(request, settings.allowed_referrers, settings.blocked_user_agents)

    prompt = await _read_prompt(request)

    # Similarity checks are CPU-bound; keep them off the event loop.
    decision = await run_in_threadpool(engine.admit, client_key, prompt)
    if not isinstance(decision, Admitted):
        return rejection_response(decision)

    content = await call_upstream(engine, provider, client_key, decision, prompt)

    logger.info(
        "Post generated",
        extra=get_log_context(request_id=request_id, client_key=client_key, decision=decision.name),
    )
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "content": content,
            "rateLimitRemaining": decision.remaining_window,
            "dailyRemaining": decision.remaining_daily,
        },
    )
