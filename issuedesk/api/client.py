"""
client.py - REST API client
Single responsibility: talk to the remote issue service over HTTP/JSON.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from issuedesk.domain.errors import StorageError
from issuedesk.domain.models import Issue, IssuePage
from issuedesk.domain.reference import ReferenceData, ReferenceItem

logger = logging.getLogger(__name__)

# ReferenceData attribute -> endpoint path
REFERENCE_ENDPOINTS: dict[str, str] = {
    "users": "/users",
    "risks": "/risks",
    "projects": "/projects",
    "issue_types": "/issue-types",
    "stages": "/issue-stages",
    "root_causes": "/root-causes",
}


def _unwrap_list(body: Any) -> list:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, list):
            return data
    raise StorageError("Unexpected list response shape")


class IssueApiClient:
    """
    Async client for the issue service.

    Every transport or HTTP status failure is raised as StorageError so callers
    handle one exception type regardless of backend.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("%s %s failed with %s", method, path, e.response.status_code)
            raise StorageError(f"{method} {path} failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise StorageError(f"{method} {path} failed: {e}") from e
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"{method} {path} returned invalid JSON") from e

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def list_issues(self, params: dict[str, Any]) -> IssuePage:
        body = await self._request("GET", "/issues", params=params)
        rows = _unwrap_list(body)
        total = len(rows)
        counts = None
        if isinstance(body, dict):
            total = int(body.get("total", total))
            counts = body.get("statusCounts")
        return IssuePage(
            issues=[Issue.from_dict(r) for r in rows],
            total=total,
            status_counts=counts,
        )

    async def create_issue(self, issue: Issue) -> Optional[Issue]:
        payload = issue.to_dict()
        payload.pop("id", None)
        body = await self._request("POST", "/issues", json=payload)
        return Issue.from_dict(body) if isinstance(body, dict) and body.get("id") else None

    async def update_issue(self, issue: Issue) -> None:
        await self._request("PUT", f"/issues/{issue.id}", json=issue.to_dict())

    async def delete_issue(self, issue_id: str) -> None:
        await self._request("DELETE", f"/issues/{issue_id}")

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    async def list_reference(self, kind: str) -> list[ReferenceItem]:
        body = await self._request("GET", REFERENCE_ENDPOINTS[kind])
        return [ReferenceItem.from_dict(item) for item in _unwrap_list(body)]

    async def load_reference_data(self) -> ReferenceData:
        kinds = list(REFERENCE_ENDPOINTS)
        results = await asyncio.gather(*(self.list_reference(k) for k in kinds))
        return ReferenceData(**dict(zip(kinds, results)))
