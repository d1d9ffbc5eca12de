from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock

from app.core.config import settings
from app.core.errors import DraftLimitReached, DraftNotFound
from app.services.invoice_draft import DraftInvoice


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _DraftEntry:
    draft: DraftInvoice
    touched_at: datetime
    lock: Lock = field(default_factory=Lock)


class DraftRegistry:
    """
    Drafts live in process memory, keyed by owner. They are discarded on commit
    or explicit delete, dropped after sitting idle for
    ``settings.draft_idle_ttl_minutes``, and lost on restart. Each user may hold
    at most ``settings.max_open_drafts_per_user`` at a time.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utc_now):
        self._entries: dict[tuple[str, str], _DraftEntry] = {}
        self._lock = Lock()
        self._clock = clock

    def create(self, user_id: str, draft: DraftInvoice) -> DraftInvoice:
        now = self._clock()
        limit = settings.max_open_drafts_per_user
        with self._lock:
            self._drop_idle(now)
            if sum(1 for owner, _ in self._entries if owner == user_id) >= limit:
                raise DraftLimitReached(limit)
            self._entries[(user_id, draft.id)] = _DraftEntry(draft=draft, touched_at=now)
        return draft

    def list_for_user(self, user_id: str) -> list[DraftInvoice]:
        with self._lock:
            self._drop_idle(self._clock())
            drafts = [entry.draft for (owner, _), entry in self._entries.items() if owner == user_id]
        return sorted(drafts, key=lambda draft: draft.created_at, reverse=True)

    @contextmanager
    def checkout(self, user_id: str, draft_id: str) -> Iterator[DraftInvoice]:
        """Exclusive access to one draft for the duration of a request."""
        entry = self._entry(user_id, draft_id)
        with entry.lock:
            # It may have been committed, deleted or dropped while we waited.
            if self._entry_or_none(user_id, draft_id) is not entry:
                raise DraftNotFound(draft_id)
            entry.touched_at = self._clock()
            yield entry.draft

    def discard(self, user_id: str, draft_id: str) -> None:
        with self._lock:
            self._entries.pop((user_id, draft_id), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _drop_idle(self, now: datetime) -> None:
        cutoff = now - timedelta(minutes=settings.draft_idle_ttl_minutes)
        for key in [key for key, entry in self._entries.items() if entry.touched_at < cutoff]:
            del self._entries[key]

    def _entry(self, user_id: str, draft_id: str) -> _DraftEntry:
        entry = self._entry_or_none(user_id, draft_id)
        if entry is None:
            raise DraftNotFound(draft_id)
        return entry

    def _entry_or_none(self, user_id: str, draft_id: str) -> _DraftEntry | None:
        with self._lock:
            self._drop_idle(self._clock())
            return self._entries.get((user_id, draft_id))


draft_registry = DraftRegistry()
