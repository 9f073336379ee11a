"""
HTTP client for the remote cherry-pick backend
"""
import httpx
from typing import Any, Dict, List, Optional, Sequence
import logging

from pydantic import ValidationError

from cherrypick.core.config import settings
from cherrypick.models import Commit, ExecutionResult, Repository, RepositoryPair
from cherrypick.services.fallback import TierFailure

logger = logging.getLogger(__name__)


class BackendError(TierFailure):
    """Transport-level failure talking to the backend"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class BackendClient:
    """Client for the /repos, /analyze, /cherry-pick and /health endpoints"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        health_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.backend_timeout
        self.health_timeout = health_timeout if health_timeout is not None else settings.health_timeout
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=self.headers,
            transport=self.transport,
        )

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Single attempt; transport failures and non-2xx raise BackendError.

        Returns the decoded JSON body, or None when the body is not JSON.
        """
        async with self._client(self.timeout) as client:
            try:
                response = await client.request(method, endpoint, json=payload)
            except httpx.TimeoutException as e:
                raise BackendError(f"Backend timed out on {endpoint}: {e}")
            except httpx.HTTPError as e:
                raise BackendError(f"Backend unreachable on {endpoint}: {e}")

        if not response.is_success:
            raise BackendError(
                f"Backend error on {endpoint}: {response.status_code}",
                response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Backend returned a non-JSON body for {endpoint}")
            return None

    async def get_repositories(self) -> RepositoryPair:
        data = await self._request("GET", "/repos")
        try:
            return RepositoryPair.model_validate(data)
        except ValidationError as e:
            # Nothing to act on without repositories
            raise BackendError(f"Backend returned unusable repositories: {e.error_count()} errors")

    async def analyze(self, source: Repository, target: Repository) -> List[Commit]:
        """Ask the backend to classify source commits.

        The backend's list is authoritative. An unusable body means no
        duplicates were reported, so the source list comes back unchanged.
        """
        payload = {
            "source": source.model_dump(mode="json", by_alias=True),
            "target": target.model_dump(mode="json", by_alias=True),
        }
        data = await self._request("POST", "/analyze", payload)
        if not isinstance(data, list):
            logger.warning("Backend analysis response is not a commit list, treating as no duplicates")
            return list(source.commits)
        try:
            return [Commit.model_validate(item) for item in data]
        except ValidationError as e:
            logger.warning(f"Backend analysis response malformed ({e.error_count()} errors), treating as no duplicates")
            return list(source.commits)

    async def cherry_pick(self, commit_ids: Sequence[str], target_repository_id: str) -> ExecutionResult:
        payload = {
            "commitIds": list(commit_ids),
            "targetRepositoryId": target_repository_id,
        }
        data = await self._request("POST", "/cherry-pick", payload)
        if not isinstance(data, dict):
            logger.warning("Backend cherry-pick response malformed, no logs produced")
            return ExecutionResult(success=False, logs=[])
        logs = data.get("logs")
        if not isinstance(logs, list):
            logs = []
        return ExecutionResult(
            success=data.get("success") is True,
            logs=[str(line) for line in logs],
        )

    async def check_health(self) -> bool:
        """Reachability probe, never raises"""
        async with self._client(self.health_timeout) as client:
            try:
                response = await client.get("/health")
                return response.is_success
            except httpx.HTTPError as e:
                logger.debug(f"Health check failed: {e}")
                return False
