# File: services.py
"""Defines the service calls the UI shell uses to drive YardOps.

Each service validates its payload with a voluptuous schema, then delegates
to SeriesManager. Every call returns an OperationResult; schema failures come
back as validation errors without touching the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol

from . import const
from .engines.job_engine import JobEngine
from .exceptions import NotFoundError, OperationResult, ValidationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .coordinator import YardOpsCoordinator

_NON_EMPTY_STRING = vol.All(str, vol.Strip, vol.Length(min=1))
_OPTIONAL_TIME = vol.Any(None, str)

# --- Service Schemas ---
_JOB_FIELDS = {
    vol.Optional(const.DATA_JOB_CUSTOMER_NAME): str,
    vol.Optional(const.DATA_JOB_PROPERTY_ID): vol.Any(None, str),
    vol.Optional(const.DATA_JOB_SERVICE_ADDRESS): str,
    vol.Optional(const.DATA_JOB_SERVICE_TYPE): str,
    vol.Optional(const.DATA_JOB_BID_TYPE): vol.In(const.BID_TYPE_OPTIONS),
    vol.Optional(const.DATA_JOB_RATE): vol.Any(None, vol.Coerce(float)),
    vol.Optional(const.DATA_JOB_HOURLY_RATE): vol.Any(None, vol.Coerce(float)),
    vol.Optional(const.DATA_JOB_MAN_HOURS): vol.Any(None, vol.Coerce(float)),
    vol.Optional(const.DATA_JOB_NOTES): vol.Any(None, str),
}

CREATE_JOB_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_JOB_CUSTOMER_ID): _NON_EMPTY_STRING,
        vol.Required(const.DATA_JOB_SCHEDULED_DATE): _NON_EMPTY_STRING,
        vol.Optional(
            const.DATA_JOB_SERVICE_FREQUENCY, default=const.FREQUENCY_WEEKLY
        ): vol.In(const.FREQUENCY_OPTIONS),
        vol.Optional(const.DATA_JOB_SERIES_ID): _NON_EMPTY_STRING,
        **_JOB_FIELDS,
    }
)

EDIT_JOB_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_JOB_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_SCOPE, default=const.EDIT_SCOPE_SINGLE): vol.In(
            const.EDIT_SCOPE_OPTIONS
        ),
        vol.Optional(const.DATA_JOB_SCHEDULED_DATE): _NON_EMPTY_STRING,
        **_JOB_FIELDS,
    }
)

SERIES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SERIES_ID): _NON_EMPTY_STRING,
    }
)

MAINTAIN_SERIES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SERIES_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_TARGET_FUTURE_COUNT): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

MARK_INVOICE_SENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_ROUTING_ID): _NON_EMPTY_STRING,
    }
)

UPDATE_ROUTING_TIMES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_ROUTING_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_ARRIVAL_TIME): _OPTIONAL_TIME,
        vol.Optional(const.FIELD_DEPARTURE_TIME): _OPTIONAL_TIME,
    }
)

DELETE_JOB_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_JOB_ID): _NON_EMPTY_STRING,
    }
)


# --- Service Handlers ---


async def _handle_create_job(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_create_job(data)


async def _handle_edit_job(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    scope = data.pop(const.FIELD_SCOPE)
    return await coordinator.series_manager.async_edit_job(data, scope)


async def _handle_pause_series(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_pause_series(
        data[const.FIELD_SERIES_ID]
    )


async def _handle_resume_series(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_resume_series(
        data[const.FIELD_SERIES_ID]
    )


async def _handle_maintain_series(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    series_id = data[const.FIELD_SERIES_ID]
    series_jobs = await coordinator.store.async_query_by_series_id(series_id)
    base_job = next((job for job in series_jobs if JobEngine.is_base_job(job)), None)
    if base_job is None:
        return OperationResult.from_error(
            NotFoundError(
                const.COLLECTION_JOBS,
                series_id,
                const.ERROR_BASE_JOB_NOT_FOUND_FMT.format(series_id),
            )
        )
    return await coordinator.series_manager.async_maintain_series(
        base_job, series_jobs, data.get(const.FIELD_TARGET_FUTURE_COUNT)
    )


async def _handle_mark_invoice_sent(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_mark_invoice_sent(
        data[const.FIELD_ROUTING_ID]
    )


async def _handle_update_routing_times(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_update_routing_times(
        data[const.FIELD_ROUTING_ID],
        data.get(const.FIELD_ARRIVAL_TIME),
        data.get(const.FIELD_DEPARTURE_TIME),
    )


async def _handle_delete_job(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_delete_job(data[const.FIELD_JOB_ID])


async def _handle_delete_series(
    coordinator: YardOpsCoordinator, data: dict[str, Any]
) -> OperationResult:
    return await coordinator.series_manager.async_delete_series(
        data[const.FIELD_SERIES_ID]
    )


SERVICES: dict[str, tuple[vol.Schema, Callable[..., Awaitable[OperationResult]]]] = {
    const.SERVICE_CREATE_JOB: (CREATE_JOB_SCHEMA, _handle_create_job),
    const.SERVICE_EDIT_JOB: (EDIT_JOB_SCHEMA, _handle_edit_job),
    const.SERVICE_PAUSE_SERIES: (SERIES_SCHEMA, _handle_pause_series),
    const.SERVICE_RESUME_SERIES: (SERIES_SCHEMA, _handle_resume_series),
    const.SERVICE_MAINTAIN_SERIES: (MAINTAIN_SERIES_SCHEMA, _handle_maintain_series),
    const.SERVICE_MARK_INVOICE_SENT: (
        MARK_INVOICE_SENT_SCHEMA,
        _handle_mark_invoice_sent,
    ),
    const.SERVICE_UPDATE_ROUTING_TIMES: (
        UPDATE_ROUTING_TIMES_SCHEMA,
        _handle_update_routing_times,
    ),
    const.SERVICE_DELETE_JOB: (DELETE_JOB_SCHEMA, _handle_delete_job),
    const.SERVICE_DELETE_SERIES: (SERIES_SCHEMA, _handle_delete_series),
}


async def async_call_service(
    coordinator: YardOpsCoordinator, service: str, data: dict[str, Any] | None = None
) -> OperationResult:
    """Validate `data` for `service` and run it.

    Returns:
        The handler's OperationResult, or a validation failure for unknown
        services and payloads the schema rejects.
    """
    if service not in SERVICES:
        const.LOGGER.warning("Unknown service requested: %s", service)
        return OperationResult.from_error(ValidationError(f"Unknown service: {service}"))

    schema, handler = SERVICES[service]
    try:
        validated = schema(dict(data or {}))
    except vol.Invalid as err:
        field = ".".join(str(part) for part in err.path) or None
        const.LOGGER.warning("Service %s rejected input: %s", service, err)
        return OperationResult.from_error(
            ValidationError(f"Invalid data for {service}: {err}", field=field)
        )

    const.LOGGER.debug("Calling service %s", service)
    return await handler(coordinator, validated)
