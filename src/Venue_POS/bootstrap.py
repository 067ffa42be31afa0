"""
Venue_POS.bootstrap

Wires config -> storage backend -> store -> sync worker.

Typical app entrypoint:

    with AppContext(load_config()) as app:
        store = app.store
        ...            # hand the store to the UI
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from Venue_POS.config_store import AppConfig
from Venue_POS.data.snapshot_store import (
    JsonFileSnapshotBackend,
    MemorySnapshotBackend,
    SnapshotBackend,
    SqliteSnapshotBackend,
)
from Venue_POS.integrations.sync_api_client import SyncApiClient
from Venue_POS.logging_setup import setup_logging
from Venue_POS.services.pos_store import PosStore
from Venue_POS.services.sync_worker import SyncWorker
from Venue_POS.utils.ids import make_id_strategy

logger = logging.getLogger(__name__)

JSON_SNAPSHOT_FILENAME = "venue_pos_db.json"


def build_backend(cfg: AppConfig) -> SnapshotBackend:
    data_dir = Path(cfg.data_dir) if cfg.data_dir else None
    if cfg.storage_backend == "memory":
        return MemorySnapshotBackend()
    if cfg.storage_backend == "json":
        base = data_dir or Path(__file__).resolve().parent / "data" / "db"
        return JsonFileSnapshotBackend(base / JSON_SNAPSHOT_FILENAME)
    return SqliteSnapshotBackend(data_dir)


def create_store(cfg: AppConfig, backend: Optional[SnapshotBackend] = None) -> PosStore:
    return PosStore(
        backend or build_backend(cfg),
        id_strategy=make_id_strategy(cfg.id_mode),
        sync_enabled=cfg.sync_enabled,
        pull_policy=cfg.pull_policy,
    )


def create_sync_worker(store: PosStore, cfg: AppConfig) -> Optional[SyncWorker]:
    if not cfg.sync_enabled:
        return None
    client = SyncApiClient(cfg.api_base_url, timeout=cfg.request_timeout_seconds)
    return SyncWorker(store, client, interval=cfg.sync_interval_seconds)


class AppContext:
    """
    Owns the store and (when a sync server is configured) the sync worker
    for the lifetime of the application.
    """

    def __init__(self, cfg: AppConfig, backend: Optional[SnapshotBackend] = None) -> None:
        self.cfg = cfg
        setup_logging(cfg.log_level, cfg.log_file)
        self.store = create_store(cfg, backend)
        self.worker = create_sync_worker(self.store, cfg)

    def start(self) -> None:
        if self.worker is not None:
            self.worker.start()
        else:
            logger.info("No sync server configured, running local-only")

    def stop(self, timeout: Optional[float] = None) -> None:
        if self.worker is not None:
            self.worker.stop(timeout if timeout is not None else self.cfg.request_timeout_seconds + 1)
            if self.worker.is_running():
                # The thread may still be mid-tick against the store.
                logger.warning("Sync worker did not stop in time, leaving storage open")
                return
            self.worker.client.close()
        if isinstance(self.store.backend, SqliteSnapshotBackend):
            self.store.backend.close()

    def __enter__(self) -> "AppContext":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
