"""
Request, option and result models for the token exchange
"""

from enum import Enum
from typing import Any, Optional
import orjson
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...config import Settings
from ...exceptions import (
    ConfidantExchangeError,
    BindingError,
    PayloadSerializationError,
    KeyManagementError,
    RequestConstructionError,
    TransportError,
    ServiceNotFoundError,
    AuthenticationError,
    ResponseDecodeError,
    UnexpectedStatusError,
)
from .auth import AuthScheme


class ExchangeRequest(BaseModel):
    """
    Call-scoped parameters of one exchange.

    Values are taken as given: empty identities and zero or negative
    lifetimes are passed through to the key-management service and the
    secret service, which decide what to accept.
    """
    model_config = ConfigDict(frozen=True)

    token_life_minutes: int = Field(..., description="Token lifetime in minutes")
    auth_key: str = Field(..., description="Key-management key id or alias")
    from_context: str = Field(..., description="Requester identity")
    to_context: str = Field(..., description="Secret service identity")
    url: str = Field(..., description="Secret service base URL")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExchangeRequest":
        return cls(
            token_life_minutes=settings.TOKEN_LIFETIME,
            auth_key=settings.AUTH_KEY,
            from_context=settings.FROM_CONTEXT,
            to_context=settings.TO_CONTEXT,
            url=settings.URL,
        )


class ExchangeOptions(BaseModel):
    """Caller-supplied knobs that do not change the minted token"""
    model_config = ConfigDict(frozen=True)

    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for the HTTP call (None: transport default)"
    )
    auth_scheme: AuthScheme = AuthScheme.BASIC

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExchangeOptions":
        return cls(timeout=settings.TIMEOUT, auth_scheme=AuthScheme(settings.AUTH_SCHEME))


class ErrorKind(str, Enum):
    """Classification of a failed exchange"""
    UNINITIALIZED = "uninitialized"
    PAYLOAD_SERIALIZATION_FAILURE = "payload_serialization_failure"
    CRYPTO_FAILURE = "crypto_failure"
    REQUEST_CONSTRUCTION_FAILURE = "request_construction_failure"
    TRANSPORT_FAILURE = "transport_failure"
    NOT_FOUND = "not_found"
    AUTH_FAILURE = "auth_failure"
    DECODE_FAILURE = "decode_failure"
    UNEXPECTED_STATUS = "unexpected_status"


_EXCEPTIONS: dict[ErrorKind, type[ConfidantExchangeError]] = {
    ErrorKind.UNINITIALIZED: BindingError,
    ErrorKind.PAYLOAD_SERIALIZATION_FAILURE: PayloadSerializationError,
    ErrorKind.CRYPTO_FAILURE: KeyManagementError,
    ErrorKind.REQUEST_CONSTRUCTION_FAILURE: RequestConstructionError,
    ErrorKind.TRANSPORT_FAILURE: TransportError,
    ErrorKind.NOT_FOUND: ServiceNotFoundError,
    ErrorKind.AUTH_FAILURE: AuthenticationError,
    ErrorKind.DECODE_FAILURE: ResponseDecodeError,
}


class ExchangeError(BaseModel):
    """
    Classified failure with a human-readable diagnostic
    """
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    cause: Optional[str] = None

    def to_exception(self) -> ConfidantExchangeError:
        if self.kind == ErrorKind.UNEXPECTED_STATUS:
            return UnexpectedStatusError(self.message, status_code=self.status_code or 0)
        return _EXCEPTIONS[self.kind](self.message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ExchangeResult(BaseModel):
    """
    Outcome of one exchange: a payload or an error, never both
    """
    model_config = ConfigDict(frozen=True)

    success: bool = False
    payload: bytes = b""
    error: Optional[ExchangeError] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "ExchangeResult":
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed result must carry an error")
        if not self.success and self.payload:
            raise ValueError("A failed result cannot carry a payload")
        return self

    @classmethod
    def ok(cls, payload: bytes) -> "ExchangeResult":
        return cls(success=True, payload=payload)

    @classmethod
    def failed(cls, error: ExchangeError) -> "ExchangeResult":
        return cls(success=False, error=error)

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind, or None on success"""
        return self.error.kind if self.error else None

    def parsed(self) -> Any:
        """
        Parse the payload.

        Raises:
            The mapped exception if the exchange failed
        """
        self.raise_for_error()
        return orjson.loads(self.payload)

    def raise_for_error(self) -> None:
        """Raise the exception matching the error kind, if any"""
        if self.error is not None:
            raise self.error.to_exception()
