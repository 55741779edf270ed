from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    # Key management
    AWS_REGION: str = "us-east-1"
    # Backend selection: "aws" (KMS) or "local" (offline AES-GCM keys)
    KMS_BACKEND: Literal["aws", "local"] = "aws"
    LOCAL_KMS_KEYS: str = ""  # Comma-separated "key_id=base64key" pairs
    KMS_CONNECT_TIMEOUT: float | None = None
    KMS_READ_TIMEOUT: float | None = None
    # Exchange defaults for callers building requests from the environment
    TOKEN_LIFETIME: int = 10  # minutes
    AUTH_KEY: str = ""
    FROM_CONTEXT: str = ""
    TO_CONTEXT: str = ""
    URL: str = ""
    AUTH_SCHEME: Literal["basic", "legacy"] = "basic"
    TIMEOUT: float | None = None  # seconds, None disables the deadline
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(
        env_prefix="CONFIDANT_",
        env_file=".env",
        extra="ignore",
    )

    def local_kms_keys(self) -> dict[str, str]:
        """Parse LOCAL_KMS_KEYS into a key id -> base64 key mapping."""
        keys: dict[str, str] = {}
        for item in self.LOCAL_KMS_KEYS.split(","):
            item = item.strip()
            if not item:
                continue
            key_id, sep, material = item.partition("=")
            if not sep:
                raise ValueError(f"Malformed LOCAL_KMS_KEYS entry for key '{key_id}'")
            keys[key_id.strip()] = material.strip()
        return keys

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
