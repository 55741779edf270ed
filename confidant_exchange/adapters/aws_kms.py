"""AWS KMS key-management adapter."""
from typing import Any, Mapping
import structlog
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from .base import KeyManagementClient
from ..exceptions import KeyManagementError

log = structlog.get_logger()


class AwsKmsClient(KeyManagementClient):
    """AWS KMS implementation of the key-management adapter.

    The boto3 client is created lazily so constructing the adapter never
    touches the network or the credential chain; failures surface on the
    first ``encrypt`` call.
    """

    backend = "aws"

    def __init__(
        self,
        region: str,
        client: Any = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
    ):
        """
        Initialize AWS KMS adapter.

        Args:
            region: AWS region the KMS client is scoped to
            client: Pre-built boto3 KMS client (mainly for tests)
            connect_timeout: Optional connect timeout in seconds
            read_timeout: Optional read timeout in seconds
        """
        self.region = region
        self._client = client
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout

    def _get_client(self) -> Any:
        """Get or create the boto3 KMS client."""
        if self._client is None:
            options: dict[str, Any] = {}
            if self._connect_timeout is not None:
                options["connect_timeout"] = self._connect_timeout
            if self._read_timeout is not None:
                options["read_timeout"] = self._read_timeout
            self._client = boto3.client(
                "kms",
                region_name=self.region,
                config=Config(**options) if options else None,
            )
        return self._client

    def encrypt(self, key_id: str, plaintext: bytes, context: Mapping[str, str]) -> bytes:
        """
        Encrypt plaintext with KMS, binding it to the encryption context.

        Raises:
            KeyManagementError: On any KMS or botocore failure
        """
        try:
            response = self._get_client().encrypt(
                KeyId=key_id,
                Plaintext=plaintext,
                EncryptionContext=dict(context),
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            log.error("kms.encrypt_failed", backend=self.backend, key_id=key_id, error_code=error_code)
            raise KeyManagementError(f"KMS encrypt failed: {e}", error_code=error_code) from e
        except (BotoCoreError, ValueError) as e:
            log.error("kms.encrypt_failed", backend=self.backend, key_id=key_id, error=str(e))
            raise KeyManagementError(f"KMS encrypt failed: {e}") from e

        log.debug("kms.encrypted", backend=self.backend, key_id=key_id, region=self.region)
        return response["CiphertextBlob"]
