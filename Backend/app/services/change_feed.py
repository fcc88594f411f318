# app/services/change_feed.py
import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict

from sqlalchemy import event
from sqlalchemy.orm import Session, sessionmaker

from app.utils import utc_now

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"
_PENDING_KEY = "qc_pending_changes"


@dataclass(frozen=True)
class ChangeEvent:
    event: str  # INSERT / UPDATE / DELETE
    job_id: str
    table: str = JOBS_TABLE
    committed_at: datetime = field(default_factory=utc_now)

    def as_dict(self):
        return {
            "event": self.event,
            "table": self.table,
            "job_id": self.job_id,
            "committed_at": self.committed_at.isoformat(),
        }


class Subscription:
    def __init__(self, feed: "ChangeFeed", key: int):
        self._feed = feed
        self._key = key

    def cancel(self) -> None:
        self._feed._remove(self._key)


class ChangeFeed:
    """Fan-out of committed job changes to any number of subscribers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[ChangeEvent], None]] = {}
        self._keys = itertools.count(1)

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Subscription:
        with self._lock:
            key = next(self._keys)
            self._subscribers[key] = callback
        return Subscription(self, key)

    def _remove(self, key: int) -> None:
        with self._lock:
            self._subscribers.pop(key, None)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            try:
                callback(change)
            except Exception:
                # one broken subscriber must not stop the others
                logger.exception("Change feed subscriber failed for %s %s", change.event, change.job_id)


job_feed = ChangeFeed()


# ---------------------------------------------------------------------------
# ORM wiring: collect job row changes on flush, publish them once committed
# ---------------------------------------------------------------------------
def _is_job_row(obj) -> bool:
    return getattr(obj, "__tablename__", None) == JOBS_TABLE


_attached = []


def attach_change_feed(session_factory: sessionmaker, feed: ChangeFeed) -> None:
    """Publish job row changes made through session_factory's sessions to feed."""
    if any(factory is session_factory for factory in _attached):
        return
    _attached.append(session_factory)

    @event.listens_for(session_factory, "after_flush")
    def _collect(session: Session, flush_context):
        pending = session.info.setdefault(_PENDING_KEY, [])
        for obj in session.new:
            if _is_job_row(obj):
                pending.append(ChangeEvent("INSERT", obj.id))
        for obj in session.dirty:
            if _is_job_row(obj) and session.is_modified(obj, include_collections=False):
                pending.append(ChangeEvent("UPDATE", obj.id))
        for obj in session.deleted:
            if _is_job_row(obj):
                pending.append(ChangeEvent("DELETE", obj.id))

    @event.listens_for(session_factory, "after_commit")
    def _publish(session: Session):
        changes = session.info.pop(_PENDING_KEY, [])
        for change in changes:
            feed.publish(change)

    @event.listens_for(session_factory, "after_soft_rollback")
    def _discard(session: Session, previous_transaction):
        session.info.pop(_PENDING_KEY, None)
