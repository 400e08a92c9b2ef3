"""Exception types raised by the storage and codec layers.

Both are recovered at the HabitStore boundary; nothing here reaches the user.
"""


class StreaklyError(Exception):
    """Base class for Streakly errors."""


class DeserializationError(StreaklyError):
    """Persisted blob is malformed or has an unexpected shape."""


class StorageError(StreaklyError):
    """Underlying key-value storage failed to read or write."""
