"""Correlation IDs for tracing an exchange across services."""
import uuid
from contextvars import ContextVar

import structlog

CORRELATION_HEADER = "X-Correlation-ID"

# Context variable to store correlation ID across threads and async tasks
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def bind_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation ID to the current context.

    Generates a new UUID when none is given. The ID is also bound to the
    structlog context so every log entry of the exchange carries it.

    Returns:
        The bound correlation ID
    """
    if not correlation_id:
        correlation_id = str(uuid.uuid4())

    correlation_id_var.set(correlation_id)
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()


def clear_correlation_id() -> None:
    """Remove the correlation ID from the current context."""
    correlation_id_var.set("")
    structlog.contextvars.unbind_contextvars("correlation_id")
