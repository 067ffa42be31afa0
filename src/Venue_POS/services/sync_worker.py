"""
Venue_POS.services.sync_worker

Background push/pull loop between the local store and the sync server.

Each tick:
  1) copy the queue (new sales during the push land in the live queue only)
  2) POST the copy; on ack drop exactly those entries (by ts)
  3) GET reference data and merge it into the store
Any network problem leaves the queue as-is and we try again next tick.
Delivery is at-least-once: the server must treat replays as idempotent.

The loop runs in a daemon thread with explicit start()/stop(). Network
calls happen outside the store lock so the cashier is never blocked.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from Venue_POS.integrations.sync_api_client import SyncApiClient, SyncApiError
from Venue_POS.services.pos_store import PosStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0


@dataclass
class SyncResult:
    pushed: int = 0
    pulled: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncWorker:
    def __init__(
        self,
        store: PosStore,
        client: SyncApiClient,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.store = store
        self.client = client
        self.interval = interval
        self.last_result: Optional[SyncResult] = None

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------- One tick ----------

    def sync_once(self, force_pull: bool = False) -> SyncResult:
        """
        Run one push/pull cycle synchronously.

        With an empty queue nothing happens unless force_pull is set
        (used for the startup tick).
        """
        result = SyncResult()
        batch = self.store.take_sync_batch()

        if batch:
            try:
                self.client.push([entry.to_wire() for entry in batch])
            except SyncApiError as exc:
                logger.warning("Sync push failed, %d change(s) kept for retry: %s", len(batch), exc)
                result.error = str(exc)
                return result
            result.pushed = self.store.acknowledge_sync(batch)
            logger.info("Sync push acknowledged: %d change(s)", result.pushed)
        elif not force_pull:
            return result

        try:
            payload = self.client.pull()
        except SyncApiError as exc:
            logger.warning("Sync pull failed: %s", exc)
            result.error = str(exc)
            return result

        self.store.apply_pull(payload)
        result.pulled = True
        logger.debug(
            "Sync pull merged: services=%s settings=%s clients=%s",
            payload.services is not None,
            payload.settings is not None,
            payload.clients is not None,
        )
        return result

    # ---------- Lifecycle ----------

    def _tick(self, force_pull: bool = False) -> None:
        try:
            self.last_result = self.sync_once(force_pull=force_pull)
        except Exception:
            # One bad tick must not end the loop.
            logger.exception("Unexpected error during sync tick")
            self.last_result = SyncResult(error="unexpected error")

    def _run(self, stop_event: threading.Event) -> None:
        logger.info("Sync worker started (interval=%.1fs)", self.interval)
        self._tick(force_pull=True)
        while not stop_event.wait(self.interval):
            self._tick()
        logger.info("Sync worker stopped")

    def start(self) -> None:
        """
        Start the loop. A thread still finishing a stop() that timed out
        keeps its own (set) stop event and exits after its current tick;
        the new thread gets a fresh event.
        """
        if self.is_running() and not self._stop_event.is_set():
            return
        if self.is_running():
            logger.info("Previous sync thread still stopping, starting a new one")
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="venue-pos-sync",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
