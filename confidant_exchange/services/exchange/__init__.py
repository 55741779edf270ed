"""
Confidant Token Exchange Module

Mints a short-lived, context-bound token through envelope encryption and
presents it to a Confidant-style secret service:
- Validity window payload and token encoding
- Authorization header construction
- Single-attempt fetch with classified outcomes
"""

from .auth import AuthScheme, build_authorization_header
from .exchange_service import SecretExchanger, build_service_url, exchange
from .token import ValidityWindow, encode_token, encryption_context, format_timestamp
from .models import (
    ErrorKind,
    ExchangeError,
    ExchangeOptions,
    ExchangeRequest,
    ExchangeResult,
)

__all__ = [
    "AuthScheme",
    "build_authorization_header",
    "SecretExchanger",
    "build_service_url",
    "exchange",
    "ValidityWindow",
    "encode_token",
    "encryption_context",
    "format_timestamp",
    "ErrorKind",
    "ExchangeError",
    "ExchangeOptions",
    "ExchangeRequest",
    "ExchangeResult",
]
