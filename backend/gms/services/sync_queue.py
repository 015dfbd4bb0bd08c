"""In-memory mirror of the persisted offline action queue.

Insertion order is replay order. Every mutation writes the full list through
to the store, and the store notifies subscribers after each write, so the
in-memory list and the persisted list never drift apart.
"""

import logging
import uuid
from datetime import datetime, timezone

from gms.schemas.sync import ActionIntent, QueuedAction, build_action
from gms.services.queue_store import Observer, PersistentQueueStore

logger = logging.getLogger(__name__)


class SyncQueue:
    def __init__(self, store: PersistentQueueStore):
        self.store = store
        self._actions: list[QueuedAction] = store.load()
        self._used_ids: set[str] = {a.id for a in self._actions}
        if self._actions:
            logger.info("Loaded %d pending offline actions", len(self._actions))

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def pending_count(self) -> int:
        return len(self._actions)

    def _new_id(self) -> str:
        action_id = str(uuid.uuid4())
        while action_id in self._used_ids:
            action_id = str(uuid.uuid4())
        self._used_ids.add(action_id)
        return action_id

    def enqueue(self, intent: ActionIntent) -> QueuedAction:
        """Stamp the intent with a fresh id and timestamp and append it."""
        action = build_action(intent, self._new_id(), datetime.now(timezone.utc))
        self._actions.append(action)
        logger.info("Queued offline action %s (%s)", action.id, action.type)
        self.store.save(self._actions)
        return action.model_copy(deep=True)

    def list(self) -> list[QueuedAction]:
        """Snapshot copy; callers may mutate it freely."""
        return [a.model_copy(deep=True) for a in self._actions]

    def get(self, action_id: str) -> QueuedAction | None:
        for action in self._actions:
            if action.id == action_id:
                return action.model_copy(deep=True)
        return None

    def remove(self, action_id: str) -> bool:
        """Remove by exact id. Absent ids are a no-op; returns whether anything changed."""
        remaining = [a for a in self._actions if a.id != action_id]
        if len(remaining) == len(self._actions):
            return False
        self._actions = remaining
        self.store.save(self._actions)
        return True

    def clear(self) -> None:
        """Drop every pending action. Hard resets only (e.g. logout)."""
        if self._actions:
            logger.warning("Clearing %d pending offline actions", len(self._actions))
        self._actions = []
        self.store.save(self._actions)

    def subscribe(self, observer: Observer) -> None:
        self.store.add_observer(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self.store.remove_observer(observer)
