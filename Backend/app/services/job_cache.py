# app/services/job_cache.py
import itertools
import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from app.errors import StoreUnavailable
from app.schemas.job import Job
from app.services.change_feed import ChangeEvent, ChangeFeed, Subscription
from app.services.job_store import JobStore

logger = logging.getLogger(__name__)

Snapshot = Tuple[Job, ...]


class JobCache:
    """
    In-memory copy of every job, kept current by the change feed.

    The cache is the only writer of its snapshot: any committed change to the
    jobs table triggers a full re-list and the snapshot is swapped wholesale.
    Readers get an immutable tuple and never a handle into live state.
    """

    def __init__(self, store: JobStore, feed: ChangeFeed):
        self.store = store
        self.feed = feed
        self._lock = threading.Lock()
        # serialises re-lists so an older listing never replaces a newer one
        self._refresh_lock = threading.Lock()
        self._snapshot: Snapshot = ()
        self._loaded = False
        self._subscription: Optional[Subscription] = None
        self._listeners: Dict[int, Callable[[Snapshot], None]] = {}
        self._keys = itertools.count(1)

    # --------------------------- lifecycle ---------------------------

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self.feed.subscribe(self._on_change)
        try:
            self.refresh()
        except StoreUnavailable:
            logger.warning("Initial job load failed; cache stays in loading state until the next change")

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_change(self, change: ChangeEvent) -> None:
        logger.debug("Change received: %s %s", change.event, change.job_id)
        try:
            self.refresh()
        except StoreUnavailable:
            logger.warning("Re-list after %s on job %s failed; keeping previous snapshot", change.event, change.job_id)

    def ensure_loaded(self) -> None:
        """Retry the initial listing if it has not succeeded yet; raises StoreUnavailable."""
        if self.is_loading:
            self.refresh()

    def refresh(self) -> Snapshot:
        with self._refresh_lock:
            jobs = tuple(self.store.list_jobs())
            with self._lock:
                self._snapshot = jobs
                self._loaded = True
                listeners = list(self._listeners.values())
        for listener in listeners:
            listener(jobs)
        return jobs

    # ---------------------------- readers ----------------------------

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return not self._loaded

    @property
    def jobs(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def get_job(self, job_id: str) -> Optional[Job]:
        return next((job for job in self.jobs if job.id == job_id), None)

    def search(self, term: Optional[str]) -> Snapshot:
        """Jobs whose number contains term, ignoring case."""
        jobs = self.jobs
        needle = (term or "").strip().lower()
        if not needle:
            return jobs
        return tuple(job for job in jobs if needle in job.job_number.lower())

    def subscribe(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Call listener with every new snapshot; returns an unsubscribe function."""
        with self._lock:
            key = next(self._keys)
            self._listeners[key] = listener

        def unsubscribe():
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe
