"""FastAPI application receiving GitHub webhooks for jacquez."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import GitHubError
from ..guidelines.cache import GuidelineCache
from ..logging import get_logger
from ..orchestrator import Orchestrator, PullRequest

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"

logger = get_logger("service")


class WebhookResponse(BaseModel):
    status: str
    event: str
    summary: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check a ``sha256=<hex>`` signature against the raw request body."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


def _default_factory() -> tuple[Callable[[], Orchestrator], Optional[str]]:
    config = load_config()
    # One cache per process, shared by the per-request orchestrators.
    cache = GuidelineCache(config.cache.ttl_seconds)
    return (lambda: Orchestrator.from_config(config, cache=cache)), config.webhook_secret


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] | None = None,
    *,
    webhook_secret: str | None = None,
) -> FastAPI:
    """Create the FastAPI application handling GitHub webhook deliveries."""

    if orchestrator_factory is None:
        orchestrator_factory, configured_secret = _default_factory()
        webhook_secret = webhook_secret or configured_secret

    app = FastAPI(title="Jacquez Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/webhook", response_model=WebhookResponse)
    async def webhook(request: Request) -> Any:
        body = await request.body()
        event = request.headers.get(EVENT_HEADER)
        if not event:
            return JSONResponse(status_code=400, content={"detail": f"Missing {EVENT_HEADER} header"})
        if webhook_secret and not verify_signature(
            webhook_secret, body, request.headers.get(SIGNATURE_HEADER)
        ):
            logger.warning("Rejected %s delivery with an invalid signature", event)
            return JSONResponse(status_code=401, content={"detail": "Invalid signature"})
        try:
            payload = json.loads(body or b"{}")
        except json.JSONDecodeError:
            return JSONResponse(status_code=400, content={"detail": "Body is not valid JSON"})
        if not isinstance(payload, dict):
            return JSONResponse(status_code=400, content={"detail": "Body must be a JSON object"})

        orchestrator = orchestrator_factory()

        def _dispatch() -> WebhookResponse:
            return dispatch_event(orchestrator, event, payload)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _dispatch)

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(GitHubError)
    async def github_error_handler(_: Any, exc: GitHubError) -> JSONResponse:
        logger.error("GitHub API call failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def dispatch_event(
    orchestrator: Orchestrator, event: str, payload: Dict[str, Any]
) -> WebhookResponse:
    action = payload.get("action")
    logger.info("Received %s.%s", event, action)

    if event == "pull_request" and action == "opened":
        outcome = orchestrator.handle_pull_request_opened(PullRequest.from_event(payload))
        return WebhookResponse(status=outcome.status, event=event, summary=outcome.summary)

    if event == "issues" and action == "opened":
        owner, repo = _repository(payload)
        issue = _section(payload, "issue")
        judgment = orchestrator.handle_issue_opened(
            owner,
            repo,
            _number(issue),
            issue.get("body") or "",
            author_type=_author_type(issue),
        )
        return WebhookResponse(
            status="ok", event=event, summary=judgment.reasoning if judgment else None
        )

    if event == "issue_comment" and action == "created":
        owner, repo = _repository(payload)
        issue = _section(payload, "issue")
        comment = _section(payload, "comment")
        judgment = orchestrator.handle_comment_created(
            owner,
            repo,
            _number(issue),
            comment.get("body") or "",
            author_type=_author_type(comment),
        )
        return WebhookResponse(
            status="ok", event=event, summary=judgment.reasoning if judgment else None
        )

    return WebhookResponse(status="ignored", event=event)


def _section(payload: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = payload.get(name)
    if not isinstance(value, dict):
        raise ValueError(f"Event payload is missing '{name}'")
    return value


def _number(item: Dict[str, Any]) -> int:
    number = item.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        raise ValueError("Event payload is missing an issue number")
    return number


def _repository(payload: Dict[str, Any]) -> tuple[str, str]:
    repository = _section(payload, "repository")
    owner = repository.get("owner") or {}
    return str(owner.get("login")), str(repository.get("name"))


def _author_type(item: Dict[str, Any]) -> str:
    return str((item.get("user") or {}).get("type") or "User")


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["HealthResponse", "WebhookResponse", "create_app", "dispatch_event", "run_service", "verify_signature"]
