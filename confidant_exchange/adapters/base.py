"""Base adapter interface for key-management backends."""
from abc import ABC, abstractmethod
from typing import Mapping


class KeyManagementClient(ABC):
    """Abstract interface for envelope-encryption backends.

    Implementations must bind the ciphertext to ``context`` so that it can
    only be decrypted by presenting the same context again.
    """

    #: Short backend name used in logs and metrics
    backend: str = "unknown"

    @abstractmethod
    def encrypt(self, key_id: str, plaintext: bytes, context: Mapping[str, str]) -> bytes:
        """
        Encrypt plaintext under a managed key.

        Args:
            key_id: Identifier (or alias) of the managed key
            plaintext: Data to encrypt
            context: Authenticated encryption context

        Returns:
            Opaque ciphertext blob

        Raises:
            KeyManagementError: If the backend cannot encrypt
        """
        pass
