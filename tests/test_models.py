"""
Tests for exchange result and error models
"""

import orjson
import pytest
from pydantic import ValidationError

from confidant_exchange.exceptions import (
    AuthenticationError,
    BindingError,
    KeyManagementError,
    ResponseDecodeError,
    ServiceNotFoundError,
    TransportError,
    UnexpectedStatusError,
)
from confidant_exchange.services.exchange import (
    ErrorKind,
    ExchangeError,
    ExchangeOptions,
    ExchangeResult,
)


class TestExchangeResult:
    """Payload/error exclusivity"""

    def test_ok(self):
        result = ExchangeResult.ok(b'{"secret":"s"}')

        assert result.success is True
        assert result.error is None
        assert result.kind is None
        assert result.parsed() == {"secret": "s"}

    def test_failed(self):
        result = ExchangeResult.failed(ExchangeError(kind=ErrorKind.NOT_FOUND, message="gone"))

        assert result.success is False
        assert result.payload == b""
        assert result.kind is ErrorKind.NOT_FOUND

    def test_success_with_error_rejected(self):
        with pytest.raises(ValidationError, match="cannot carry an error"):
            ExchangeResult(
                success=True,
                payload=b"{}",
                error=ExchangeError(kind=ErrorKind.AUTH_FAILURE, message="x"),
            )

    def test_failure_without_error_rejected(self):
        with pytest.raises(ValidationError, match="must carry an error"):
            ExchangeResult(success=False)

    def test_failure_with_payload_rejected(self):
        with pytest.raises(ValidationError, match="cannot carry a payload"):
            ExchangeResult(
                success=False,
                payload=b"{}",
                error=ExchangeError(kind=ErrorKind.AUTH_FAILURE, message="x"),
            )

    def test_empty_success_payload_allowed(self):
        assert ExchangeResult.ok(b"").success is True

    def test_parsed_keeps_raw_bytes(self):
        body = b'{"b": 1, "a": [1.50, "\\u00e9"]}'
        result = ExchangeResult.ok(body)

        assert result.payload == body
        assert result.parsed() == orjson.loads(body)

    def test_parsed_raises_on_failure(self):
        result = ExchangeResult.failed(ExchangeError(kind=ErrorKind.AUTH_FAILURE, message="denied"))

        with pytest.raises(AuthenticationError, match="denied"):
            result.parsed()


class TestRaiseForError:
    """Error kind to exception mapping"""

    @pytest.mark.parametrize(
        "kind,exc_type",
        [
            (ErrorKind.UNINITIALIZED, BindingError),
            (ErrorKind.CRYPTO_FAILURE, KeyManagementError),
            (ErrorKind.TRANSPORT_FAILURE, TransportError),
            (ErrorKind.NOT_FOUND, ServiceNotFoundError),
            (ErrorKind.AUTH_FAILURE, AuthenticationError),
            (ErrorKind.DECODE_FAILURE, ResponseDecodeError),
        ],
    )
    def test_mapping(self, kind, exc_type):
        result = ExchangeResult.failed(ExchangeError(kind=kind, message="boom"))

        with pytest.raises(exc_type, match="boom"):
            result.raise_for_error()

    def test_unexpected_status_carries_code(self):
        error = ExchangeError(kind=ErrorKind.UNEXPECTED_STATUS, message="teapot", status_code=418)

        with pytest.raises(UnexpectedStatusError) as exc_info:
            ExchangeResult.failed(error).raise_for_error()

        assert exc_info.value.status_code == 418

    def test_success_does_not_raise(self):
        ExchangeResult.ok(b"{}").raise_for_error()

    def test_every_kind_maps_to_an_exception(self):
        for kind in ErrorKind:
            assert isinstance(ExchangeError(kind=kind, message="m").to_exception(), Exception)


def test_error_str():
    error = ExchangeError(kind=ErrorKind.NOT_FOUND, message="service not found in secret service")
    assert str(error) == "not_found: service not found in secret service"


def test_options_reject_non_positive_timeout():
    with pytest.raises(ValidationError):
        ExchangeOptions(timeout=0)
