"""
Offline key-management adapter.

Implements envelope-style encryption locally with AES-256-GCM so the
exchange can run against a development Confidant without AWS. The
encryption context is the AEAD associated data.

Ciphertext format: [key_id length 1B][key_id][nonce 12B][payload + GCM tag 16B]
"""
import os
import base64
import binascii
from typing import Callable, Mapping

import orjson
import structlog
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .base import KeyManagementClient
from ..exceptions import KeyManagementError

log = structlog.get_logger()

NONCE_SIZE = 12  # 96-bit nonce
KEY_LENGTH = 32  # AES-256


def serialize_context(context: Mapping[str, str]) -> bytes:
    """Canonical encoding of an encryption context (sorted keys)."""
    return orjson.dumps(dict(context), option=orjson.OPT_SORT_KEYS)


class LocalKmsClient(KeyManagementClient):
    """In-process AES-GCM implementation of the key-management adapter.

    Key material is loaded and checked on the first ``encrypt`` call, so a
    misconfigured key table surfaces as a ``KeyManagementError`` at exchange
    time rather than while binding.
    """

    backend = "local"

    def __init__(self, keys: Mapping[str, bytes] | Callable[[], Mapping[str, bytes]]):
        """
        Initialize local adapter.

        Args:
            keys: Mapping of key id to raw 32-byte key, or a callable
                  returning one
        """
        self._source = keys
        self._keys: dict[str, bytes] | None = None

    @classmethod
    def from_encoded(
        cls,
        keys: Mapping[str, str] | Callable[[], Mapping[str, str]],
    ) -> "LocalKmsClient":
        """Build from base64-encoded keys (as stored in configuration)."""
        def load() -> dict[str, bytes]:
            encoded = keys() if callable(keys) else keys
            decoded: dict[str, bytes] = {}
            for key_id, material in encoded.items():
                try:
                    decoded[key_id] = base64.b64decode(material, validate=True)
                except binascii.Error as e:
                    raise ValueError(f"Local key '{key_id}' is not valid base64: {e}")
            return decoded

        return cls(load)

    @staticmethod
    def generate_key() -> str:
        """Generate a random 32-byte key and return it base64-encoded."""
        return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode("ascii")

    def _get_keys(self) -> dict[str, bytes]:
        """
        Get the validated key table, loading it on first use.

        Raises:
            ValueError: If the key table cannot be loaded or a key is not
                exactly 32 bytes
        """
        if self._keys is None:
            keys = dict(self._source() if callable(self._source) else self._source)
            for key_id, key in keys.items():
                if len(key) != KEY_LENGTH:
                    raise ValueError(
                        f"Local key '{key_id}' must be exactly {KEY_LENGTH} bytes, got {len(key)}"
                    )
                if len(key_id.encode("utf-8")) > 255:
                    raise ValueError(f"Local key id '{key_id[:16]}...' is too long")
            self._keys = keys
        return self._keys

    def encrypt(self, key_id: str, plaintext: bytes, context: Mapping[str, str]) -> bytes:
        try:
            keys = self._get_keys()
        except ValueError as e:
            log.error("kms.encrypt_failed", backend=self.backend, key_id=key_id, error=str(e))
            raise KeyManagementError(f"Local key material is invalid: {e}", error_code="InvalidKeyMaterial") from e

        key = keys.get(key_id)
        if key is None:
            log.error("kms.encrypt_failed", backend=self.backend, key_id=key_id, error="unknown key")
            raise KeyManagementError(f"Key '{key_id}' not found", error_code="NotFoundException")

        nonce = os.urandom(NONCE_SIZE)
        ct = AESGCM(key).encrypt(nonce, plaintext, serialize_context(context))
        key_id_bytes = key_id.encode("utf-8")
        log.debug("kms.encrypted", backend=self.backend, key_id=key_id)
        return bytes([len(key_id_bytes)]) + key_id_bytes + nonce + ct
