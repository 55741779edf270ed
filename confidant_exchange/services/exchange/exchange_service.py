"""
SecretExchanger: mint a context-bound token and fetch a service's secrets
"""

import threading
import time
from typing import Callable, Optional
from datetime import datetime
from urllib.parse import quote

import httpx
import orjson
import structlog

from ...binding import ProcessBinding, get_binding
from ...correlation import (
    CORRELATION_HEADER,
    bind_correlation_id,
    clear_correlation_id,
    get_correlation_id,
)
from ...exceptions import PayloadSerializationError, RequestConstructionError
from ...metrics import ExchangeMetrics
from .auth import build_authorization_header
from .models import (
    ErrorKind,
    ExchangeError,
    ExchangeOptions,
    ExchangeRequest,
    ExchangeResult,
)
from .token import ValidityWindow, encode_token, encryption_context, utcnow

log = structlog.get_logger()

SERVICES_PATH = "/v1/services/"


def build_service_url(base_url: str, from_context: str) -> str:
    """
    Build the secret service endpoint for ``from_context``.

    The identity is percent-encoded as a single path segment.

    Raises:
        RequestConstructionError: If base_url is not an absolute http(s) URL
            or carries a query or fragment
    """
    try:
        parsed = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise RequestConstructionError(f"Invalid secret service URL '{base_url}': {e}")

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise RequestConstructionError(
            f"Secret service URL must be absolute http(s), got '{base_url}'"
        )
    if "?" in base_url or "#" in base_url:
        raise RequestConstructionError(
            f"Secret service URL must not carry a query or fragment, got '{base_url}'"
        )

    return base_url.rstrip("/") + SERVICES_PATH + quote(from_context, safe="")


class SecretExchanger:
    """
    Token exchange engine

    Each call to ``exchange`` performs exactly one key-management encrypt and
    at most one HTTP request, in that order, and never retries. The engine
    holds no per-call state, so one instance can serve concurrent callers as
    long as its binding was set up before they start.
    """

    def __init__(
        self,
        binding: Optional[ProcessBinding] = None,
        http_client: Optional[httpx.Client] = None,
        metrics: Optional[ExchangeMetrics] = None,
        options: Optional[ExchangeOptions] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize SecretExchanger

        Args:
            binding: Key-management binding (defaults to the process-wide one,
                     looked up at call time)
            http_client: Transport used for the secret service request. When
                         omitted, the exchanger creates and owns one.
            metrics: Optional metrics sink
            options: Default options for calls that pass none
            clock: Source of the current UTC time
        """
        self._binding = binding
        self._client = http_client
        self._owns_client = http_client is None
        self._client_lock = threading.Lock()
        self._metrics = metrics
        self._options = options or ExchangeOptions()
        self._clock = clock

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client()
            return self._client

    def close(self) -> None:
        """Close the HTTP client if this exchanger created it"""
        with self._client_lock:
            if self._owns_client and self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "SecretExchanger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def exchange(
        self,
        request: ExchangeRequest,
        options: Optional[ExchangeOptions] = None
    ) -> ExchangeResult:
        """
        Mint a token for ``request`` and fetch the service's secrets.

        Args:
            request: Call-scoped exchange parameters
            options: Per-call options (defaults to the exchanger's options)

        Returns:
            ExchangeResult carrying either the raw response body or a
            classified error
        """
        options = options or self._options
        bound_here = not get_correlation_id()
        if bound_here:
            bind_correlation_id()

        try:
            return self._observed_exchange(request, options)
        finally:
            if bound_here:
                clear_correlation_id()

    def _observed_exchange(self, request: ExchangeRequest, options: ExchangeOptions) -> ExchangeResult:
        start_time = time.time()
        if self._metrics:
            self._metrics.exchanges_in_flight.inc()

        try:
            result = self._exchange(request, options)
        finally:
            if self._metrics:
                self._metrics.exchanges_in_flight.dec()

        duration = time.time() - start_time
        if self._metrics:
            outcome = "success" if result.success else result.error.kind.value
            self._metrics.record_exchange(outcome, duration)

        if result.success:
            log.info(
                "exchange.completed",
                from_context=request.from_context,
                to_context=request.to_context,
                payload_bytes=len(result.payload),
                duration_ms=round(duration * 1000, 2),
            )
        else:
            log.warning(
                "exchange.failed",
                from_context=request.from_context,
                to_context=request.to_context,
                kind=result.error.kind.value,
                status_code=result.error.status_code,
                error=result.error.message,
                duration_ms=round(duration * 1000, 2),
            )
        return result

    def _exchange(self, request: ExchangeRequest, options: ExchangeOptions) -> ExchangeResult:
        binding = self._binding or get_binding()
        if binding is None:
            return _failure(
                ErrorKind.UNINITIALIZED,
                "key-management service has not been initialized"
            )

        log.debug(
            "exchange.started",
            from_context=request.from_context,
            to_context=request.to_context,
            url=request.url,
            region=binding.region,
        )

        # Validity window -> plaintext payload
        try:
            window = ValidityWindow.starting_at(self._clock(), request.token_life_minutes)
            payload = window.to_payload()
        except PayloadSerializationError as e:
            return _failure(ErrorKind.PAYLOAD_SERIALIZATION_FAILURE, str(e), cause=e)

        # Envelope encryption bound to the (from, to) identity pair
        try:
            ciphertext = binding.kms.encrypt(
                request.auth_key,
                payload,
                encryption_context(request.from_context, request.to_context),
            )
        except Exception as e:
            if self._metrics:
                self._metrics.record_kms_encrypt(False)
            return _failure(ErrorKind.CRYPTO_FAILURE, "encrypt payload via key-management service failed", cause=e)
        if self._metrics:
            self._metrics.record_kms_encrypt(True)

        token = encode_token(ciphertext)

        try:
            url = build_service_url(request.url, request.from_context)
            headers = {
                "Authorization": build_authorization_header(
                    request.from_context, token, options.auth_scheme
                ),
                CORRELATION_HEADER: get_correlation_id(),
            }
            extra = {"timeout": options.timeout} if options.timeout is not None else {}
            http_request = self._get_client().build_request("GET", url, headers=headers, **extra)
        except RequestConstructionError as e:
            return _failure(ErrorKind.REQUEST_CONSTRUCTION_FAILURE, str(e), cause=e)
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            return _failure(
                ErrorKind.REQUEST_CONSTRUCTION_FAILURE,
                f"failed to create request to secret service ({request.url})",
                cause=e,
            )

        # Single attempt, no retry
        try:
            response = self._get_client().send(http_request)
        except httpx.RequestError as e:
            return _failure(ErrorKind.TRANSPORT_FAILURE, "failed to make the request to the secret service", cause=e)

        return _classify(response)


def _classify(response: httpx.Response) -> ExchangeResult:
    """Map the secret service response to a result"""
    status = response.status_code

    if status == httpx.codes.NOT_FOUND:
        return _failure(ErrorKind.NOT_FOUND, "service not found in secret service", status_code=status)

    if status == httpx.codes.UNAUTHORIZED:
        return _failure(ErrorKind.AUTH_FAILURE, "authentication or authorization failed", status_code=status)

    if status == httpx.codes.OK:
        body = response.content
        try:
            orjson.loads(body)
        except orjson.JSONDecodeError as e:
            return _failure(
                ErrorKind.DECODE_FAILURE,
                "failed to decode response from secret service",
                status_code=status,
                cause=e,
            )
        return ExchangeResult.ok(body)

    return _failure(
        ErrorKind.UNEXPECTED_STATUS,
        f"received unexpected return from secret service (status: {status})",
        status_code=status,
    )


def _failure(
    kind: ErrorKind,
    message: str,
    status_code: Optional[int] = None,
    cause: Optional[BaseException] = None,
) -> ExchangeResult:
    if cause is not None and str(cause) and str(cause) not in message:
        message = f"{message}: {cause}"
    return ExchangeResult.failed(ExchangeError(
        kind=kind,
        message=message,
        status_code=status_code,
        cause=repr(cause) if cause is not None else None,
    ))


def exchange(
    request: ExchangeRequest,
    options: Optional[ExchangeOptions] = None,
    http_client: Optional[httpx.Client] = None,
) -> ExchangeResult:
    """
    One-shot exchange using the process-wide binding from ``initialize()``.
    """
    with SecretExchanger(http_client=http_client) as exchanger:
        return exchanger.exchange(request, options)
