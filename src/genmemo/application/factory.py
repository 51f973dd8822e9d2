"""
Component factory.
Centralizes the wiring of stores, ledger, channel and services from config.
"""

import random

from genmemo.application.catalog import CollectionCatalog
from genmemo.application.config import AppConfig
from genmemo.application.ledger import ProgressLedger
from genmemo.application.review_service import ReviewService
from genmemo.application.sync_service import SyncReconciler
from genmemo.domain.interfaces import RecordStore
from genmemo.infrastructure.adapters.http_channel import HttpProgressChannel
from genmemo.infrastructure.adapters.session import StaticSession
from genmemo.infrastructure.stores import InMemoryRecordStore, JsonFileRecordStore


def get_record_store(config: AppConfig) -> RecordStore:
    if config.store_backend == "memory":
        return InMemoryRecordStore()
    return JsonFileRecordStore(config.store_path)


def get_ledger(config: AppConfig, store: RecordStore | None = None) -> ProgressLedger:
    return ProgressLedger(store or get_record_store(config))


def get_review_service(config: AppConfig, ledger: ProgressLedger) -> ReviewService:
    rng = random.Random(config.seed) if config.seed is not None else None
    return ReviewService(ledger, rng=rng)


def get_catalog(ledger: ProgressLedger) -> CollectionCatalog:
    return CollectionCatalog(ledger.store, ledger)


def get_reconciler(config: AppConfig, ledger: ProgressLedger) -> SyncReconciler:
    session = StaticSession(config.token)
    channel = HttpProgressChannel(
        session, url=config.server_url, timeout=config.request_timeout
    )
    return SyncReconciler(ledger, channel, session)
