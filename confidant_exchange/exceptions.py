"""
Exception hierarchy for the Confidant token exchange.

The exchange engine reports failures as data (see ``ExchangeResult``).
These exceptions are used internally between the minting steps and are
raised by ``ExchangeResult.raise_for_error()`` for callers that prefer
exceptions over inspecting results.
"""

from typing import Optional


class ConfidantExchangeError(Exception):
    """Base exception for token exchange errors"""
    pass


class BindingError(ConfidantExchangeError):
    """Raised when no key-management binding has been initialized"""
    pass


class PayloadSerializationError(ConfidantExchangeError):
    """Raised when the validity window cannot be serialized"""
    pass


class KeyManagementError(ConfidantExchangeError):
    """Raised when the key-management service fails to encrypt"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class RequestConstructionError(ConfidantExchangeError):
    """Raised when the request to the secret service cannot be built"""
    pass


class TransportError(ConfidantExchangeError):
    """Raised when the request never produced an HTTP response"""
    pass


class ServiceNotFoundError(ConfidantExchangeError):
    """Raised when the secret service does not know the requested service"""
    pass


class AuthenticationError(ConfidantExchangeError):
    """Raised when the secret service rejects the credential"""
    pass


class ResponseDecodeError(ConfidantExchangeError):
    """Raised when a successful response carries an undecodable body"""
    pass


class UnexpectedStatusError(ConfidantExchangeError):
    """Raised for any status the exchange does not classify"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code
