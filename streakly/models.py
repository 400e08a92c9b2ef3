"""Habit record and the JSON codec for the persisted habit list.

Wire shape (one JSON array, no schema version):
  [{"id": "...", "name": "...", "completedDates": ["YYYY-MM-DD", ...],
    "createdAt": "YYYY-MM-DD"}, ...]
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import date

from streakly.errors import DeserializationError

# Longest habit name accepted on add; longer input is cut to this
MAX_NAME_LENGTH = 64


def new_habit_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Habit:
    """A named habit and the calendar dates it was completed on."""
    id: str
    name: str
    created_at: date
    completed_dates: set[date] = field(default_factory=set)

    def is_completed(self, day: date) -> bool:
        return day in self.completed_dates

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "completedDates": [d.isoformat() for d in sorted(self.completed_dates)],
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        """Build a Habit from its wire dict. Extra keys are ignored."""
        if not isinstance(data, dict):
            raise DeserializationError(f"Habit entry must be an object, got {type(data).__name__}")
        try:
            habit_id = data["id"]
            name = data["name"]
            raw_dates = data["completedDates"]
            created_at = date.fromisoformat(data["createdAt"])
        except KeyError as e:
            raise DeserializationError(f"Habit entry missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"Bad createdAt: {e}") from e

        if not isinstance(habit_id, str) or not isinstance(name, str):
            raise DeserializationError("Habit id and name must be strings")
        # Ids travel inside ":"-separated callback data
        if not habit_id or ":" in habit_id:
            raise DeserializationError(f"Bad habit id: {habit_id!r}")
        if not name.strip():
            raise DeserializationError(f"Habit {habit_id} has a blank name")
        if not isinstance(raw_dates, list):
            raise DeserializationError("completedDates must be an array")
        try:
            completed = {date.fromisoformat(d) for d in raw_dates}
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"Bad completion date: {e}") from e

        return cls(id=habit_id, name=name, created_at=created_at, completed_dates=completed)


def habits_to_json(habits) -> str:
    """Serialize the full habit list."""
    return json.dumps([h.to_dict() for h in habits], ensure_ascii=False)


def habits_from_json(blob: str) -> list[Habit]:
    """Parse a persisted blob. Raises DeserializationError on any malformed input."""
    try:
        data = json.loads(blob)
    except (TypeError, ValueError, RecursionError) as e:
        raise DeserializationError(f"Persisted habits are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise DeserializationError(f"Persisted habits must be an array, got {type(data).__name__}")
    habits = [Habit.from_dict(item) for item in data]
    ids = [h.id for h in habits]
    if len(set(ids)) != len(ids):
        raise DeserializationError("Persisted habits contain duplicate ids")
    return habits
