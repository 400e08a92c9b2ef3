"""Habit store — owns the habit list and persists it as one blob.

The list is mutated only through HabitStore. Every effective mutation
re-persists the whole list and then notifies subscribers so the view can
re-render. Storage failures are logged and never raised to callers; the
in-memory list stays authoritative until the next successful save.
"""

import logging
from datetime import date
from typing import Callable

from streakly import db
from streakly.config import STORAGE_KEY
from streakly.errors import DeserializationError, StorageError
from streakly.models import MAX_NAME_LENGTH, Habit, habits_from_json, habits_to_json, new_habit_id
from streakly.stats import today as _today

log = logging.getLogger(__name__)

Listener = Callable[["HabitStore"], None]


# ═══════════════════════════════════════════════════════════════════════════
# Pure list operations
# ═══════════════════════════════════════════════════════════════════════════

def add_habit(habits: list[Habit], name: str, today: date) -> Habit | None:
    """Append a new habit. Returns None (and changes nothing) for a blank name.

    Names longer than MAX_NAME_LENGTH are cut to fit.
    """
    name = (name or "").strip()[:MAX_NAME_LENGTH].rstrip()
    if not name:
        return None
    habit = Habit(id=new_habit_id(), name=name, created_at=today)
    habits.append(habit)
    return habit


def toggle_completion(habits: list[Habit], habit_id: str, day: date) -> bool | None:
    """Flip membership of day in the habit's completion set.

    Returns the new completed state, or None if no habit matches.
    """
    for habit in habits:
        if habit.id == habit_id:
            if day in habit.completed_dates:
                habit.completed_dates.discard(day)
                return False
            habit.completed_dates.add(day)
            return True
    return None


def remove_habit(habits: list[Habit], habit_id: str) -> bool:
    for i, habit in enumerate(habits):
        if habit.id == habit_id:
            del habits[i]
            return True
    return False


# ═══════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════

class HabitStore:
    """Application state: the habit list plus its persistence slot."""

    def __init__(self, key: str = STORAGE_KEY, clock: Callable[[], date] = _today):
        self._key = key
        self._clock = clock
        self._habits: list[Habit] = []
        self._listeners: list[Listener] = []

    @property
    def habits(self) -> tuple[Habit, ...]:
        return tuple(self._habits)

    def get(self, habit_id: str) -> Habit | None:
        for habit in self._habits:
            if habit.id == habit_id:
                return habit
        return None

    def today(self) -> date:
        return self._clock()

    # ── Persistence ───────────────────────────────────────────

    def load(self) -> list[Habit]:
        """Restore from storage. Missing or unreadable data yields an empty list."""
        try:
            blob = db.get_blob(self._key)
        except StorageError as e:
            log.warning("Could not read habits, starting empty: %s", e)
            blob = None

        if blob is None:
            self._habits = []
        else:
            try:
                self._habits = habits_from_json(blob)
            except DeserializationError as e:
                log.warning("Persisted habits are corrupt, starting empty: %s", e)
                self._habits = []

        log.info("Loaded %d habits", len(self._habits))
        return list(self._habits)

    def save(self) -> bool:
        """Overwrite the persisted blob. Returns False if the write failed."""
        try:
            db.set_blob(self._key, habits_to_json(self._habits))
        except StorageError as e:
            log.error("Failed to save habits: %s", e)
            return False
        return True

    # ── Mutations ─────────────────────────────────────────────

    def add(self, name: str) -> Habit | None:
        habit = add_habit(self._habits, name, self.today())
        if habit is None:
            log.debug("Ignoring blank habit name")
            return None
        log.info("Habit added: %s (%s)", habit.name, habit.id)
        self._commit()
        return habit

    def toggle(self, habit_id: str, day: date) -> bool | None:
        done = toggle_completion(self._habits, habit_id, day)
        if done is None:
            log.debug("Toggle for unknown habit %s ignored", habit_id)
            return None
        log.info("Habit %s %s on %s", habit_id, "completed" if done else "cleared", day)
        self._commit()
        return done

    def remove(self, habit_id: str) -> bool:
        if not remove_habit(self._habits, habit_id):
            log.debug("Remove for unknown habit %s ignored", habit_id)
            return False
        log.info("Habit removed: %s", habit_id)
        self._commit()
        return True

    # ── Change notification ───────────────────────────────────

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _commit(self) -> None:
        self.save()
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                log.error("Habit listener %r failed: %s", listener, e, exc_info=True)
