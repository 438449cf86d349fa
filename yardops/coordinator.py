# File: coordinator.py
"""Coordinator for YardOps.

Owns one store, the validated runtime options, and the managers that operate
on them. Managers talk to each other only through the coordinator's
in-process dispatcher (emit/listen on BaseManager).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from . import const
from .exceptions import ValidationError
from .managers import ReportManager, SeriesManager
from .store import JobStore, JsonFileJobStore, MemoryJobStore
from .utils.dt_utils import set_default_timezone

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


def _valid_time_zone(value: Any) -> str:
    """Validate an IANA time zone name."""
    name = str(value)
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"Unknown time zone: {name}") from err
    return name


OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.CONF_TARGET_FUTURE_COUNT): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(
            const.CONF_TIME_ZONE, default=const.DEFAULT_TIME_ZONE_NAME
        ): _valid_time_zone,
        vol.Optional(const.CONF_STORAGE_PATH): vol.Any(None, str),
    }
)


class YardOpsCoordinator:
    """Coordinator for YardOps.

    Example:
        coordinator = YardOpsCoordinator({"target_future_count": 4})
        await coordinator.async_setup()
        result = await coordinator.series_manager.async_create_job({...})
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        store: JobStore | None = None,
    ) -> None:
        """Initialize the YardOpsCoordinator.

        Args:
            options: Runtime options (CONF_* keys), validated by OPTIONS_SCHEMA
            store: Store override; otherwise JSON when storage_path is set,
                memory when not

        Raises:
            ValidationError: If the options are invalid.
        """
        try:
            self.options: dict[str, Any] = OPTIONS_SCHEMA(dict(options or {}))
        except vol.Invalid as err:
            const.LOGGER.error("Invalid YardOps options: %s", err)
            raise ValidationError(
                f"Invalid options: {err}", field=".".join(str(p) for p in err.path) or None
            ) from err

        set_default_timezone(ZoneInfo(self.options[const.CONF_TIME_ZONE]))

        storage_path = self.options.get(const.CONF_STORAGE_PATH)
        if store is not None:
            self.store = store
        elif storage_path:
            self.store = JsonFileJobStore(storage_path)
        else:
            self.store = MemoryJobStore()

        self._listeners: dict[str, list[Callable[[dict[str, Any]], None]]] = {}
        self._on_shutdown: list[Callable[[], None]] = []

        self.series_manager = SeriesManager(self)
        self.report_manager = ReportManager(self)

    @property
    def target_future_count(self) -> int | None:
        """Configured window size, or None for the per-frequency defaults."""
        return self.options.get(const.CONF_TARGET_FUTURE_COUNT)

    async def async_setup(self) -> None:
        """Load persisted data and set up managers."""
        if isinstance(self.store, JsonFileJobStore):
            await self.store.async_initialize()
        await self.series_manager.async_setup()
        await self.report_manager.async_setup()
        const.LOGGER.info(
            "%s ready (store=%s)", const.YARDOPS_TITLE, type(self.store).__name__
        )

    async def async_shutdown(self) -> None:
        """Disconnect every listener registered through the managers."""
        while self._on_shutdown:
            self._on_shutdown.pop()()

    # -------------------------------------------------------------------------
    # Dispatcher
    # -------------------------------------------------------------------------

    def async_dispatcher_connect(
        self, signal: str, callback: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.setdefault(signal, []).append(callback)

        def _unsub() -> None:
            listeners = self._listeners.get(signal, [])
            if callback in listeners:
                listeners.remove(callback)

        return _unsub

    def async_dispatcher_send(self, signal: str, payload: dict[str, Any]) -> None:
        """Call every listener of `signal` with the payload."""
        for callback in list(self._listeners.get(signal, [])):
            callback(payload)

    def async_on_shutdown(self, func: Callable[[], None]) -> None:
        """Run `func` when the coordinator shuts down."""
        self._on_shutdown.append(func)
