"""
Realtime: "notify, then re-query".

Every commit that touched a tracked table bumps that table's version in a
process-local ChangeFeed and wakes waiting streams. Streams re-run their
query when woken (or after REALTIME_POLL_SECONDS, so changes made by other
processes are picked up too) and only emit when the result changed.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from flask import Flask, current_app, has_app_context
from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

EXTENSION_KEY = "buddylifts.changes"
_PENDING_KEY = "buddylifts.changed_tables"


class ChangeFeed:
    """Versionszähler pro Tabelle mit Condition zum Warten auf Änderungen."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._versions: Dict[str, int] = {}

    def versions(self, tables: Iterable[str]) -> Tuple[int, ...]:
        with self._cond:
            return tuple(self._versions.get(t, 0) for t in tables)

    def bump(self, tables: Iterable[str]) -> None:
        tables = set(tables)
        if not tables:
            return
        with self._cond:
            for table in tables:
                self._versions[table] = self._versions.get(table, 0) + 1
            self._cond.notify_all()
        logger.debug("Tables changed: %s", ", ".join(sorted(tables)))

    def wait(self, tables: Iterable[str], since: Tuple[int, ...], timeout: float) -> bool:
        """Blockiert bis eine der Tabellen eine neuere Version hat; False bei Timeout."""
        tables = tuple(tables)
        with self._cond:
            return self._cond.wait_for(
                lambda: tuple(self._versions.get(t, 0) for t in tables) != since, timeout=timeout
            )


def change_feed(app: Optional[Flask] = None) -> ChangeFeed:
    app = app or current_app
    return app.extensions[EXTENSION_KEY]


def _pending(session: Session) -> set:
    return session.info.setdefault(_PENDING_KEY, set())


@event.listens_for(Session, "after_flush")
def _collect_flushed(session: Session, _flush_context) -> None:
    pending = _pending(session)
    for obj in (*session.new, *session.dirty, *session.deleted):
        table = getattr(obj, "__tablename__", None)
        if table:
            pending.add(table)


@event.listens_for(Session, "do_orm_execute")
def _collect_bulk(state) -> None:
    # bulk UPDATE/DELETE laufen am Flush vorbei
    if state.is_update or state.is_delete:
        pending = _pending(state.session)
        for mapper in state.all_mappers:
            pending.add(mapper.local_table.name)


@event.listens_for(Session, "after_commit")
def _publish(session: Session) -> None:
    tables = session.info.pop(_PENDING_KEY, set())
    if tables and has_app_context() and EXTENSION_KEY in current_app.extensions:
        change_feed().bump(tables)


@event.listens_for(Session, "after_rollback")
def _discard(session: Session) -> None:
    session.info.pop(_PENDING_KEY, None)


def init_realtime(app: Flask) -> None:
    app.extensions[EXTENSION_KEY] = ChangeFeed()


def sse_event(name: str, data: Any) -> str:
    return f"event: {name}\ndata: {json.dumps(data)}\n\n"


def event_stream(
    load: Callable[[], Optional[Dict[str, Any]]],
    is_finished: Callable[[Dict[str, Any]], bool],
    tables: Iterable[str],
    feed: ChangeFeed,
    poll_seconds: float,
    heartbeat_seconds: float,
) -> Iterator[str]:
    """
    Generic SSE loop: emit `load()` whenever it changes, heartbeat comments in
    between, stop once `is_finished(snapshot)` holds or the row is gone.
    """
    tables = tuple(tables)
    last: Optional[Dict[str, Any]] = None
    last_sent = time.monotonic()

    while True:
        since = feed.versions(tables)
        snap = load()
        if snap is None:
            yield sse_event("gone", {})
            return
        if snap != last:
            yield sse_event("snapshot", snap)
            last, last_sent = snap, time.monotonic()
        if is_finished(snap):
            yield sse_event("end", {})
            return

        feed.wait(tables, since, timeout=poll_seconds)
        if time.monotonic() - last_sent >= heartbeat_seconds:
            yield ": heartbeat\n\n"
            last_sent = time.monotonic()
