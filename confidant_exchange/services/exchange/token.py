"""
Validity window and bearer token minting
"""

from base64 import urlsafe_b64encode
from datetime import datetime, timedelta, timezone

import orjson
from pydantic import BaseModel, ConfigDict

from ...exceptions import PayloadSerializationError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(dt: datetime) -> str:
    """
    Format a datetime as fixed-width UTC ISO-8601, e.g. 2024-01-05T09:03:07Z.

    Naive datetimes are taken to be UTC already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    # strftime does not zero-pad years below 1000 on every platform
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}Z"
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidityWindow(BaseModel):
    """
    Time range during which a minted token is accepted
    """
    model_config = ConfigDict(frozen=True)

    not_before: datetime
    not_after: datetime

    @classmethod
    def starting_at(cls, now: datetime, lifetime_minutes: int) -> "ValidityWindow":
        """
        Window opening at ``now`` and closing ``lifetime_minutes`` later.

        Raises:
            PayloadSerializationError: If the end falls outside the datetime range
        """
        try:
            not_after = now + timedelta(minutes=lifetime_minutes)
        except OverflowError as e:
            raise PayloadSerializationError(
                f"Token lifetime of {lifetime_minutes} minutes is out of range: {e}"
            )
        return cls(not_before=now, not_after=not_after)

    def to_payload(self) -> bytes:
        """
        Serialize to the plaintext that gets encrypted into the token.

        Raises:
            PayloadSerializationError: If the window cannot be serialized
        """
        try:
            return orjson.dumps({
                "not_before": format_timestamp(self.not_before),
                "not_after": format_timestamp(self.not_after),
            })
        except (orjson.JSONEncodeError, ValueError, OverflowError) as e:
            raise PayloadSerializationError(f"Failed to serialize validity window: {e}")


def encryption_context(from_context: str, to_context: str) -> dict[str, str]:
    """Authenticated context binding the token to sender and receiver"""
    return {"from": from_context, "to": to_context}


def encode_token(ciphertext: bytes) -> str:
    """Encode a ciphertext blob as a URL-safe bearer token"""
    return urlsafe_b64encode(ciphertext).decode("ascii")
