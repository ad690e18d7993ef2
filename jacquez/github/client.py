"""Minimal GitHub REST client used by the analysis pipeline."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..errors import GitHubError
from ..logging import get_logger
from ..models import ChangedFile, ReviewComment

DEFAULT_API_URL = "https://api.github.com"


@dataclass
class HTTPRequest:
    """Represents an outgoing HTTP request."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: float = 30.0


@dataclass
class HTTPResponse:
    """Status and raw body of an HTTP response."""

    status: int
    body: bytes = b""

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


Transport = Callable[[HTTPRequest], HTTPResponse]


class GitHubClient:
    """Wraps the handful of REST endpoints the bot needs."""

    FILES_PER_PAGE = 100
    MAX_FILE_PAGES = 30

    def __init__(
        self,
        token: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport or self._urllib_transport
        self.logger = get_logger("github")

    # ------------------------------------------------------------------
    # Repository content

    def fetch_file_content(self, owner: str, repo: str, path: str) -> Optional[str]:
        """Return the decoded text of ``path``, or ``None`` when it does not exist."""
        try:
            payload = self._request("GET", f"/repos/{owner}/{repo}/contents/{quote(path)}")
        except GitHubError as exc:
            if exc.not_found:
                return None
            raise
        if not isinstance(payload, dict):
            return None
        content = payload.get("content")
        if not isinstance(content, str) or not content:
            return None
        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise GitHubError(f"Could not decode {owner}/{repo}/{path}: {exc}") from exc

    def fetch_raw_url(self, url: str) -> str:
        response = self._send("GET", url, accept="text/plain")
        if response.status >= 400:
            raise GitHubError(f"GET {url} failed with status {response.status}", status=response.status)
        return response.text()

    def fetch_default_branch(self, owner: str, repo: str) -> str:
        payload = self._request("GET", f"/repos/{owner}/{repo}")
        branch = payload.get("default_branch") if isinstance(payload, dict) else None
        if not isinstance(branch, str) or not branch:
            raise GitHubError(f"{owner}/{repo} did not report a default branch")
        return branch

    # ------------------------------------------------------------------
    # Pull requests and issues

    def fetch_changed_files(self, owner: str, repo: str, pr_number: int) -> List[ChangedFile]:
        files: List[ChangedFile] = []
        for page in range(1, self.MAX_FILE_PAGES + 1):
            payload = self._request(
                "GET",
                f"/repos/{owner}/{repo}/pulls/{pr_number}/files",
                params={"per_page": self.FILES_PER_PAGE, "page": page},
            )
            if not isinstance(payload, list):
                break
            for item in payload:
                if not isinstance(item, dict) or not isinstance(item.get("filename"), str):
                    continue
                patch = item.get("patch")
                files.append(
                    ChangedFile(
                        filename=item["filename"],
                        status=str(item.get("status") or "modified"),
                        patch=patch if isinstance(patch, str) else None,
                    )
                )
            if len(payload) < self.FILES_PER_PAGE:
                break
        return files

    def list_issue_comments(
        self, owner: str, repo: str, number: int, *, limit: int = 20
    ) -> List[Dict[str, Any]]:
        payload = self._request(
            "GET",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            params={"per_page": limit, "sort": "created", "direction": "asc"},
        )
        if not isinstance(payload, list):
            return []
        return [item for item in payload if isinstance(item, dict)]

    def post_comment(self, owner: str, repo: str, number: int, body: str) -> Dict[str, Any]:
        return self._request(
            "POST", f"/repos/{owner}/{repo}/issues/{number}/comments", payload={"body": body}
        )

    def post_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: Sequence[ReviewComment],
        *,
        event: str = "COMMENT",
        body: str | None = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event": event,
            "comments": [comment.to_payload() for comment in comments],
        }
        if body:
            payload["body"] = body
        return self._request(
            "POST", f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews", payload=payload
        )

    # ------------------------------------------------------------------
    # Check runs

    def create_check_run(
        self,
        owner: str,
        repo: str,
        *,
        name: str,
        head_sha: str,
        status: str = "in_progress",
        conclusion: str | None = None,
        output: Mapping[str, Any] | None = None,
    ) -> int:
        payload: Dict[str, Any] = {"name": name, "head_sha": head_sha, "status": status}
        if conclusion:
            payload["conclusion"] = conclusion
        if output is not None:
            payload["output"] = dict(output)
        response = self._request("POST", f"/repos/{owner}/{repo}/check-runs", payload=payload)
        check_id = response.get("id") if isinstance(response, dict) else None
        if not isinstance(check_id, int):
            raise GitHubError("Check run creation returned no id")
        return check_id

    # ------------------------------------------------------------------
    # Transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self.api_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        response = self._send(method, url, payload=payload)
        if response.status >= 400:
            detail = _error_detail(response)
            raise GitHubError(
                f"{method} {path} failed with status {response.status}: {detail}",
                status=response.status,
            )
        if not response.body:
            return {}
        try:
            return json.loads(response.text())
        except json.JSONDecodeError as exc:
            raise GitHubError(f"{method} {path} returned invalid JSON") from exc

    def _send(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None = None,
        accept: str = "application/vnd.github+json",
    ) -> HTTPResponse:
        headers = {
            "Accept": accept,
            "User-Agent": "jacquez",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        body = None
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        self.logger.debug("%s %s", method, url)
        request = HTTPRequest(method=method, url=url, headers=headers, body=body, timeout=self.timeout)
        return self._transport(request)

    @staticmethod
    def _urllib_transport(request: HTTPRequest) -> HTTPResponse:
        http_request = Request(
            request.url, data=request.body, headers=request.headers, method=request.method
        )
        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                return HTTPResponse(status=response.status, body=response.read())
        except HTTPError as exc:  # pragma: no cover - depends on network
            return HTTPResponse(status=exc.code, body=exc.read() if hasattr(exc, "read") else b"")
        except URLError as exc:  # pragma: no cover - depends on network
            raise GitHubError(f"{request.method} {request.url} failed: {exc.reason}") from exc
        except (OSError, HTTPException) as exc:
            # Timeouts and dropped connections can surface while reading the body.
            raise GitHubError(f"{request.method} {request.url} failed: {exc!r}") from exc


def _error_detail(response: HTTPResponse) -> str:
    try:
        data = json.loads(response.text())
    except json.JSONDecodeError:
        return response.text().strip()[:200]
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return ""


__all__ = ["GitHubClient", "HTTPRequest", "HTTPResponse", "Transport"]
