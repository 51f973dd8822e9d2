"""
Sync reconciler: uploads pending local progress and merges remote progress down.

Upload is at-least-once: pending markers are only cleared for records the
remote confirmed, so a failed or cancelled upload is simply retried by the
next call. Download applies a remote-wins merge.
"""

import asyncio
import logging

from genmemo.domain.interfaces import ProgressChannel, SessionProvider
from genmemo.domain.models import (
    Error,
    FailureKind,
    ItemKey,
    LearnableItem,
    NotAuthenticated,
    NothingToSync,
    ProgressRecord,
    RemoteFailure,
    Success,
    SyncResult,
    SyncState,
    SyncStatus,
)

from .ledger import ProgressLedger

logger = logging.getLogger(__name__)


class SyncReconciler:
    """
    Drives upload and download for one ledger.

    Follows Dependency Inversion: depends on the ProgressChannel and
    SessionProvider abstractions, never on a concrete transport.
    """

    def __init__(
        self,
        ledger: ProgressLedger,
        channel: ProgressChannel,
        session: SessionProvider,
    ):
        self._ledger = ledger
        self._channel = channel
        self._session = session
        self._status: dict[str, SyncStatus] = {}

    def status(self, collection_id: str) -> SyncStatus:
        return self._status.get(collection_id, SyncStatus())

    async def upload(self, collection_id: str) -> SyncResult:
        if not self._session.is_authenticated:
            return NotAuthenticated()

        pending = self._ledger.all_pending_for(collection_id)
        if not pending:
            self._set(collection_id, SyncState.IDLE)
            return NothingToSync()

        snapshot: dict[ItemKey, LearnableItem] = {}
        missing: list[ItemKey] = []
        unreadable: list[ItemKey] = []
        for key in sorted(pending):
            item = self._ledger.find(collection_id, key)
            if item is not None:
                snapshot[key] = item
            elif self._ledger.has(collection_id, key):
                unreadable.append(key)
            else:
                missing.append(key)

        # Only stored rows are sent. Markers without a row are dropped; unreadable
        # rows stay pending until rewritten.
        if missing:
            logger.warning(
                f"[sync] Dropping pending markers without a ledger row in {collection_id}: "
                f"{missing}"
            )
            self._ledger.clear_dirty(collection_id, missing)
        if unreadable:
            logger.warning(
                f"[sync] Skipping unreadable ledger rows in {collection_id}: {unreadable}"
            )
        if not snapshot:
            self._set(collection_id, SyncState.IDLE)
            return NothingToSync()

        batch = [ProgressRecord(item_key=k, item=v) for k, v in snapshot.items()]

        self._set(collection_id, SyncState.UPLOADING)
        logger.info(f"[sync] Uploading {len(batch)} records for {collection_id}")
        try:
            result = await self._channel.upload_progress(collection_id, batch)
        except asyncio.CancelledError:
            self._set(collection_id, SyncState.IDLE)
            raise
        except Exception as e:
            result = RemoteFailure(f"Unexpected channel error: {e}", FailureKind.TRANSPORT)

        if isinstance(result, RemoteFailure):
            return self._fail(collection_id, result)

        # A key answered again while the request was in flight stays dirty:
        # the value the remote received is no longer the current one.
        confirmed = [k for k, v in snapshot.items() if self._ledger.find(collection_id, k) == v]
        self._ledger.clear_dirty(collection_id, confirmed)
        if len(confirmed) < len(snapshot):
            logger.info(
                f"[sync] {len(snapshot) - len(confirmed)} records changed during upload "
                f"for {collection_id}; left pending"
            )

        self._set(collection_id, SyncState.IDLE)
        logger.info(f"[sync] Uploaded {result.count} records for {collection_id}")
        return Success(result.count)

    async def download(self, collection_id: str) -> SyncResult:
        """
        Fetch remote progress and merge it with remote-wins policy.

        Every remote record overwrites the local entry unconditionally; local
        entries the remote does not mention are left alone. The pending set is
        not touched.
        """
        if not self._session.is_authenticated:
            return NotAuthenticated()

        self._set(collection_id, SyncState.DOWNLOADING)
        try:
            result = await self._channel.download_progress(collection_id)
        except asyncio.CancelledError:
            self._set(collection_id, SyncState.IDLE)
            raise
        except Exception as e:
            result = RemoteFailure(f"Unexpected channel error: {e}", FailureKind.TRANSPORT)

        if isinstance(result, RemoteFailure):
            return self._fail(collection_id, result)

        merged = {record.item_key: record.item for record in result.records}
        overwritten_dirty = merged.keys() & self._ledger.all_pending_for(collection_id)
        if overwritten_dirty:
            logger.warning(
                f"[sync] Remote overwrote {len(overwritten_dirty)} unsynced local records "
                f"in {collection_id}: {sorted(overwritten_dirty)}"
            )
        self._ledger.put_many(collection_id, merged)

        self._set(collection_id, SyncState.IDLE)
        logger.info(f"[sync] Merged {len(merged)} remote records into {collection_id}")
        return Success(len(merged))

    async def sync(self, collection_id: str) -> SyncResult:
        """Upload pending changes, then download. Stops if the upload fails."""
        uploaded = await self.upload(collection_id)
        if isinstance(uploaded, (Error, NotAuthenticated)):
            return uploaded
        return await self.download(collection_id)

    def _fail(self, collection_id: str, failure: RemoteFailure) -> SyncResult:
        logger.error(f"[sync] {collection_id}: {failure.kind.value} failure: {failure.message}")
        self._set(collection_id, SyncState.ERROR, failure.message)
        if failure.kind == FailureKind.AUTH:
            return NotAuthenticated()
        return Error(failure.message)

    def _set(self, collection_id: str, state: SyncState, error: str | None = None) -> None:
        self._status[collection_id] = SyncStatus(state=state, error=error)

    async def close(self) -> None:
        await self._channel.close()
