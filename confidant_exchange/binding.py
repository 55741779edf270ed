"""
Process binding to a region-scoped key-management client.

``initialize(region)`` is meant to run once during process bootstrap,
before any worker threads start exchanging. It is not synchronized.
Code that prefers explicit wiring builds a ``ProcessBinding`` itself and
hands it to ``SecretExchanger``.
"""
from typing import Optional

import structlog

from .adapters import KeyManagementClient, create_kms_client
from .config import Settings, get_settings

log = structlog.get_logger()


class ProcessBinding:
    """Read-only handle to an initialized key-management client."""

    __slots__ = ("_region", "_kms")

    def __init__(self, region: str, kms: KeyManagementClient):
        object.__setattr__(self, "_region", region)
        object.__setattr__(self, "_kms", kms)

    def __setattr__(self, name, value):
        raise AttributeError("ProcessBinding is read-only")

    @property
    def region(self) -> str:
        return self._region

    @property
    def kms(self) -> KeyManagementClient:
        return self._kms

    @classmethod
    def for_region(cls, region: str, settings: Optional[Settings] = None) -> "ProcessBinding":
        """Build a binding with the configured key-management backend."""
        return cls(region, create_kms_client(region, settings))

    def __repr__(self) -> str:
        return f"ProcessBinding(region={self._region!r}, backend={self._kms.backend!r})"


# Global default binding
_binding: Optional[ProcessBinding] = None


def initialize(
    region: Optional[str] = None,
    *,
    kms_client: Optional[KeyManagementClient] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Replace the process-wide binding with a fresh client for ``region``.

    Every call builds a new client, even for the same region.

    Args:
        region: Region identifier, e.g. "us-east-1" (defaults to the AWS_REGION setting)
        kms_client: Use this client instead of building one from settings
        settings: Settings used to select the backend
    """
    global _binding
    if region is None:
        region = (settings or get_settings()).AWS_REGION
    if kms_client is not None:
        binding = ProcessBinding(region, kms_client)
    else:
        binding = ProcessBinding.for_region(region, settings)
    _binding = binding
    log.info("binding.initialized", region=region, backend=binding.kms.backend)


def get_binding() -> Optional[ProcessBinding]:
    """Get the process-wide binding, or None before initialize()."""
    return _binding


def reset_binding() -> None:
    """Drop the process-wide binding (used by tests)."""
    global _binding
    _binding = None
