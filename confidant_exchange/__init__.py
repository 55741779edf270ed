"""
Confidant token exchange client.

Typical use during process bootstrap and per request::

    from confidant_exchange import initialize, exchange, ExchangeRequest

    initialize("us-east-1")
    result = exchange(ExchangeRequest(
        token_life_minutes=5,
        auth_key="alias/authnz",
        from_context="app1",
        to_context="confidant",
        url="https://confidant.example",
    ))
    if result.success:
        secrets = result.parsed()
"""
from .binding import ProcessBinding, initialize, get_binding, reset_binding
from .services.exchange import (
    AuthScheme,
    ErrorKind,
    ExchangeError,
    ExchangeOptions,
    ExchangeRequest,
    ExchangeResult,
    SecretExchanger,
    exchange,
)

__version__ = "0.1.0"

__all__ = [
    "ProcessBinding",
    "initialize",
    "get_binding",
    "reset_binding",
    "AuthScheme",
    "ErrorKind",
    "ExchangeError",
    "ExchangeOptions",
    "ExchangeRequest",
    "ExchangeResult",
    "SecretExchanger",
    "exchange",
]
