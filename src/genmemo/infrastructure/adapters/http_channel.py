import json
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError

from genmemo.domain.constants import DEFAULT_SERVER_URL, REQUEST_TIMEOUT
from genmemo.domain.interfaces import ProgressChannel, SessionProvider
from genmemo.domain.models import (
    FailureKind,
    ProgressRecord,
    RemoteFailure,
    RemoteResult,
    RemoteSuccess,
)

from .wire import QuestionProgressData, QuestionProgressResponse, SyncResponse

AUTH_ENDPOINT = "/api/auth.php"


class HttpProgressChannel(ProgressChannel):
    """Adapter for the GenMemo web API's question-progress actions (HTTP form API)."""

    def __init__(
        self,
        session: SessionProvider,
        url: str = DEFAULT_SERVER_URL,
        timeout: float = REQUEST_TIMEOUT,
        clock: Callable[[], date] = date.today,
    ):
        self.logger = logging.getLogger(__name__)
        self.session = session
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._clock = clock
        self._client: httpx.AsyncClient | None = None
        self.logger.debug(f"HttpProgressChannel initialized with url={self.url}")

    async def upload_progress(
        self, collection_id: str, batch: list[ProgressRecord]
    ) -> RemoteResult:
        token = self.session.token
        if not token:
            return RemoteFailure("Not authenticated", FailureKind.AUTH)

        progress = [QuestionProgressData.from_record(r).model_dump() for r in batch]
        form = {
            "action": "sync-question-progress",
            "token": token,
            "package_uuid": collection_id,
            "progress": json.dumps(progress),
        }
        try:
            data = await self._request("POST", data=form)
            response = SyncResponse.model_validate(data)
        except Exception as e:
            return self._failure(e)

        if response.success is not True:
            return RemoteFailure(response.error or "Sync error", FailureKind.SERVER)

        count = response.synced_count if response.synced_count is not None else len(batch)
        self.logger.debug(f"[http] Server synced {count} records for {collection_id}")
        return RemoteSuccess(count=count)

    async def download_progress(self, collection_id: str) -> RemoteResult:
        token = self.session.token
        if not token:
            return RemoteFailure("Not authenticated", FailureKind.AUTH)

        params = {
            "action": "get-question-progress",
            "package_uuid": collection_id,
            "token": token,
        }
        try:
            data = await self._request("GET", params=params)
            response = QuestionProgressResponse.model_validate(data)
        except Exception as e:
            return self._failure(e)

        if response.error:
            return RemoteFailure(response.error, FailureKind.SERVER)

        today = self._clock()
        records = [p.to_record(today) for p in response.progress]
        return RemoteSuccess(count=len(records), records=records)

    async def _request(self, method: str, **kwargs) -> Any:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        resp = await self._client.request(method, self.url + AUTH_ENDPOINT, **kwargs)
        resp.raise_for_status()
        return resp.json()

    def _failure(self, e: Exception) -> RemoteFailure:
        failure = parse_error(e)
        self.logger.error(f"GenMemo API call failed: {e}")
        return failure

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def parse_error(e: Exception) -> RemoteFailure:
    """Map a transport or decoding exception to a readable failure."""
    if isinstance(e, httpx.HTTPStatusError):
        status = e.response.status_code
        if status == 401:
            return RemoteFailure("Not authorized", FailureKind.AUTH)
        if status == 404:
            return RemoteFailure("Resource not found", FailureKind.SERVER)
        return RemoteFailure(f"Server error ({status})", FailureKind.SERVER)
    if isinstance(e, httpx.TimeoutException):
        return RemoteFailure("Connection timeout", FailureKind.TRANSPORT)
    if isinstance(e, httpx.ConnectError):
        return RemoteFailure("No internet connection", FailureKind.TRANSPORT)
    if isinstance(e, (ValidationError, json.JSONDecodeError)):
        return RemoteFailure("Invalid response from server", FailureKind.SERVER)
    if isinstance(e, httpx.HTTPError):
        return RemoteFailure(str(e) or "Network error", FailureKind.TRANSPORT)
    return RemoteFailure(str(e) or "Unknown error", FailureKind.TRANSPORT)
