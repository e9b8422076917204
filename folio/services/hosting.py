"""Static hosting API client used by the publish pipeline.

Uses httpx for async HTTP requests and tenacity to retry read-only calls
on transport errors. Mutating calls are never retried here; the publish
pipeline leaves retries to its caller.
"""

import enum
import logging
import re
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import BaseModel, SecretStr
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models import HostingConfig

logger = logging.getLogger(__name__)

# Pages answers a missing source branch with a bare message and no field errors
BRANCH_MISSING_PATTERN = re.compile(r"branch\b.*\bmust exist", re.IGNORECASE)


class HostingErrorKind(enum.Enum):
    """Structured failure categories reported by the hosting adapter."""
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    NOT_READY = "not_ready"
    OTHER = "other"


class HostingAPIError(Exception):
    """Raised for any non-success response from the hosting API."""

    def __init__(
        self,
        kind: HostingErrorKind,
        detail: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"HostingAPIError(kind={self.kind.name}, status={self.status_code}, detail={self.detail!r})"


class HostingStatus(enum.Enum):
    """Result of asking the hosting service to serve a repository."""
    ENABLED = "enabled"
    ALREADY_ENABLED = "already_enabled"


class HostingIdentity(BaseModel):
    """The account a credential belongs to."""
    id: int
    login: str


class HostingRepository(BaseModel):
    """The parts of a hosting repository the pipeline relies on."""
    id: int
    name: str
    owner: str
    default_branch: Optional[str] = None
    html_url: Optional[str] = None


class HostingAPI(Protocol):
    """Vendor-neutral hosting surface consumed by the publish pipeline."""

    async def get_identity(self) -> HostingIdentity:
        """Return the account the credential belongs to."""
        ...

    async def create_repository(self, name: str, description: str) -> HostingRepository:
        """Create a public repository; ALREADY_EXISTS when the name is used."""
        ...

    async def get_repository(self, owner: str, name: str) -> HostingRepository:
        """Fetch an existing repository."""
        ...

    async def get_file_version(self, owner: str, repo: str, path: str) -> Optional[str]:
        """Return the version token of a file, or None if it does not exist."""
        ...

    async def upsert_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
        version_token: Optional[str] = None,
    ) -> str:
        """Create or update a file and return its new version token."""
        ...

    async def enable_static_hosting(self, owner: str, repo: str, branch: str) -> HostingStatus:
        """Turn on static hosting for a repository."""
        ...


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _field_errors(body: Dict[str, Any]) -> set:
    """Field names listed in a structured validation error body."""
    errors = body.get("errors") or []
    return {e.get("field") for e in errors if isinstance(e, dict) and e.get("field")}


def _source_not_ready(body: Dict[str, Any]) -> bool:
    """True when a Pages 422 rejects the source branch rather than the request."""
    fields = _field_errors(body)
    if fields:
        return bool(fields & {"source", "branch"})
    return bool(BRANCH_MISSING_PATTERN.search(body.get("message") or ""))


def classify_response(response: httpx.Response) -> HostingAPIError:
    """Map a failed response to a structured error by status and headers."""
    body = _error_body(response)
    detail = body.get("message") or f"Hosting API error: {response.status_code} {response.reason_phrase}"
    status = response.status_code

    if status == 401:
        kind = HostingErrorKind.UNAUTHORIZED
    elif status == 429 or (status == 403 and response.headers.get("x-ratelimit-remaining") == "0"):
        kind = HostingErrorKind.RATE_LIMITED
    elif status == 404:
        kind = HostingErrorKind.NOT_FOUND
    elif status == 409:
        kind = HostingErrorKind.CONFLICT
    else:
        kind = HostingErrorKind.OTHER

    return HostingAPIError(kind, detail, status)


class GitHubHostingService:
    """Async GitHub client implementing HostingAPI.

    Serves sites through GitHub Pages. One instance is bound to one
    credential and lives for a single publish.

    Usage:
        async with GitHubHostingService(config, token) as gh:
            me = await gh.get_identity()
    """

    def __init__(
        self,
        config: HostingConfig,
        token: SecretStr,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._token = token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubHostingService":
        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            headers={
                "Authorization": f"Bearer {self._token.get_secret_value()}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=self.config.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise HostingAPIError(
                HostingErrorKind.OTHER,
                "Service not initialized. Use async context manager.",
            )
        return self._client

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = self._require_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise HostingAPIError(HostingErrorKind.OTHER, f"Hosting API unreachable: {e}") from e

    def _read_retry(self):
        return retry(
            stop=stop_after_attempt(self.config.read_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    async def _get(self, url: str) -> httpx.Response:
        """GET with bounded retries on connection-level failures."""
        client = self._require_client()

        @self._read_retry()
        async def _send() -> httpx.Response:
            return await client.get(url)

        try:
            return await _send()
        except httpx.TransportError as e:
            raise HostingAPIError(HostingErrorKind.OTHER, f"Hosting API unreachable: {e}") from e

    @staticmethod
    def _to_repository(data: Dict[str, Any]) -> HostingRepository:
        return HostingRepository(
            id=data["id"],
            name=data["name"],
            owner=data["owner"]["login"],
            default_branch=data.get("default_branch"),
            html_url=data.get("html_url"),
        )

    async def get_identity(self) -> HostingIdentity:
        response = await self._get("/user")
        if response.is_error:
            raise classify_response(response)

        data = response.json()
        return HostingIdentity(id=data["id"], login=data["login"])

    async def create_repository(self, name: str, description: str) -> HostingRepository:
        response = await self._request(
            "POST",
            "/user/repos",
            json={
                "name": name,
                "description": description,
                "private": False,  # free Pages hosting requires public repos
                "auto_init": True,
            },
        )

        if response.status_code == 422 and "name" in _field_errors(_error_body(response)):
            raise HostingAPIError(
                HostingErrorKind.ALREADY_EXISTS,
                f"Repository {name} already exists",
                422,
            )
        if response.is_error:
            raise classify_response(response)

        logger.info(f"Created repository: {name}")
        return self._to_repository(response.json())

    async def get_repository(self, owner: str, name: str) -> HostingRepository:
        response = await self._get(f"/repos/{owner}/{name}")
        if response.is_error:
            raise classify_response(response)
        return self._to_repository(response.json())

    async def get_file_version(self, owner: str, repo: str, path: str) -> Optional[str]:
        response = await self._get(f"/repos/{owner}/{repo}/contents/{path}")
        if response.status_code == 404:
            return None
        if response.is_error:
            raise classify_response(response)

        data = response.json()
        # A directory listing comes back as a list and has no single sha
        if not isinstance(data, dict):
            raise HostingAPIError(HostingErrorKind.OTHER, f"{path} is not a file", response.status_code)
        return data.get("sha")

    async def upsert_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
        version_token: Optional[str] = None,
    ) -> str:
        payload: Dict[str, Any] = {"message": message, "content": content_base64}
        if version_token is not None:
            payload["sha"] = version_token

        response = await self._request(
            "PUT",
            f"/repos/{owner}/{repo}/contents/{path}",
            json=payload,
        )
        if response.is_error:
            raise classify_response(response)

        new_token = response.json()["content"]["sha"]
        logger.debug(f"Uploaded {owner}/{repo}/{path} -> {new_token}")
        return new_token

    async def enable_static_hosting(self, owner: str, repo: str, branch: str) -> HostingStatus:
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pages",
            json={"source": {"branch": branch, "path": "/"}},
        )

        if response.status_code == 409:
            return HostingStatus.ALREADY_ENABLED
        if response.status_code == 422:
            body = _error_body(response)
            if _source_not_ready(body):
                raise HostingAPIError(
                    HostingErrorKind.NOT_READY,
                    body.get("message") or f"Branch {branch} is not available yet",
                    422,
                )
        if response.is_error:
            raise classify_response(response)

        logger.info(f"Enabled static hosting for {owner}/{repo}")
        return HostingStatus.ENABLED
