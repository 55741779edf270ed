"""Key-management backends for token minting."""
import structlog

from .base import KeyManagementClient
from .aws_kms import AwsKmsClient
from .local import LocalKmsClient
from ..config import Settings, get_settings

log = structlog.get_logger()


def create_kms_client(region: str, settings: Settings | None = None) -> KeyManagementClient:
    """
    Create the key-management client selected by configuration.

    Args:
        region: Region the client is scoped to (ignored by the local backend)
        settings: Settings to read the backend from (defaults to get_settings())

    Returns:
        KeyManagementClient instance based on the KMS_BACKEND setting
    """
    settings = settings or get_settings()
    if settings.KMS_BACKEND == "local":
        log.info("kms.backend_selected", backend="local")
        return LocalKmsClient.from_encoded(settings.local_kms_keys)

    log.info("kms.backend_selected", backend="aws", region=region)
    return AwsKmsClient(
        region,
        connect_timeout=settings.KMS_CONNECT_TIMEOUT,
        read_timeout=settings.KMS_READ_TIMEOUT,
    )


__all__ = [
    "KeyManagementClient",
    "AwsKmsClient",
    "LocalKmsClient",
    "create_kms_client",
]
