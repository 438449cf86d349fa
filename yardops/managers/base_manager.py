"""Base manager class for YardOps managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..coordinator import YardOpsCoordinator
    from ..store import JobStore


class BaseManager(ABC):
    """Base class for all YardOps managers with scoped event support.

    Provides:
    - Instance-scoped event emitting (emit)
    - Instance-scoped event listening (listen)
    - Automatic cleanup when the coordinator shuts down

    Data Persistence:
    - Managers write through `self.store`, using a StoreBatch whenever more
      than one record changes

    Subclasses must implement:
    - async_setup(): Subscribe to events, initialize state
    """

    def __init__(self, coordinator: YardOpsCoordinator) -> None:
        """Initialize manager.

        Args:
            coordinator: Parent coordinator owning the store and options
        """
        self.coordinator = coordinator

    @property
    def store(self) -> JobStore:
        """Return the coordinator's persistence store."""
        return self.coordinator.store

    def emit(self, suffix: str, **payload: Any) -> None:
        """Emit instance-scoped event to other managers.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_INVOICE_SENT)
            **payload: Event data dict passed to listeners

        Example:
            self.emit(
                const.SIGNAL_SUFFIX_INVOICE_SENT,
                job_id=job_id,
                revenue=75.0,
            )
        """
        const.LOGGER.debug(
            "Emitting event '%s' with payload keys: %s",
            suffix,
            list(payload.keys()),
        )
        self.coordinator.async_dispatcher_send(suffix, payload)

    def listen(self, suffix: str, callback: Callable[[dict[str, Any]], None]) -> None:
        """Subscribe to instance-scoped event with automatic cleanup.

        Args:
            suffix: Signal suffix constant to listen for
            callback: Function called when event fires (receives payload dict)
        """
        unsub = self.coordinator.async_dispatcher_connect(suffix, callback)
        self.coordinator.async_on_shutdown(unsub)
        const.LOGGER.debug(
            "Manager %s listening to event '%s'",
            self.__class__.__name__,
            suffix,
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once during coordinator initialization.
        """
