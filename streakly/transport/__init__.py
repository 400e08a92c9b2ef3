"""Transport abstraction — base class for screen transports.

A transport draws the habit screen somewhere (Telegram by default) and
routes user actions back into the HabitStore.
"""

import logging
from abc import ABC, abstractmethod

log = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for transports.

    Transports are read-only consumers of store state: they render on
    change notifications and call store methods for user actions. Business
    logic lives in the store and stats layers.
    """

    @abstractmethod
    async def start(self) -> None:
        """Start the transport (connect, listen for updates)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Gracefully stop the transport."""
        ...

    @abstractmethod
    async def send_screen(self, chat_id: int) -> None:
        """Send a fresh habit screen to a chat."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport identifier (e.g., 'telegram')."""
        ...
