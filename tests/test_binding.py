"""
Tests for the process-wide key-management binding
"""

import base64

import httpx
import pytest

from confidant_exchange import (
    ErrorKind,
    ExchangeRequest,
    exchange,
    get_binding,
    initialize,
    reset_binding,
)
from confidant_exchange.adapters import AwsKmsClient, LocalKmsClient
from confidant_exchange.binding import ProcessBinding
from confidant_exchange.config import Settings

from fakes import LOCAL_KEY, LOCAL_KEY_ID, RecordingKms


class TestInitialize:
    """initialize() and get_binding()"""

    def test_no_binding_before_initialize(self):
        assert get_binding() is None

    def test_initialize_with_client(self):
        kms = RecordingKms()
        initialize("us-east-1", kms_client=kms)

        binding = get_binding()
        assert binding.region == "us-east-1"
        assert binding.kms is kms

    def test_initialize_replaces_binding(self):
        first, second = RecordingKms(), RecordingKms()
        initialize("us-east-1", kms_client=first)
        initialize("eu-west-1", kms_client=second)

        assert get_binding().region == "eu-west-1"
        assert get_binding().kms is second

    def test_same_region_builds_new_client(self):
        settings = Settings(_env_file=None)
        initialize("us-east-1", settings=settings)
        before = get_binding().kms
        initialize("us-east-1", settings=settings)

        assert get_binding().kms is not before

    def test_initialize_uses_configured_backend(self):
        settings = Settings(
            _env_file=None,
            KMS_BACKEND="local",
            LOCAL_KMS_KEYS=f"{LOCAL_KEY_ID}={base64.b64encode(LOCAL_KEY).decode()}",
        )
        initialize("us-east-1", settings=settings)

        assert isinstance(get_binding().kms, LocalKmsClient)

    def test_reset(self):
        initialize("us-east-1", kms_client=RecordingKms())
        reset_binding()
        assert get_binding() is None


class TestProcessBinding:
    """Read-only binding handle"""

    def test_read_only(self):
        binding = ProcessBinding("us-east-1", RecordingKms())

        with pytest.raises(AttributeError, match="read-only"):
            binding.region = "eu-west-1"

    def test_for_region_defaults_to_aws(self):
        binding = ProcessBinding.for_region("us-west-2", Settings(_env_file=None))

        assert isinstance(binding.kms, AwsKmsClient)
        assert binding.region == "us-west-2"

    def test_repr_names_backend(self):
        binding = ProcessBinding("us-east-1", RecordingKms())
        assert repr(binding) == "ProcessBinding(region='us-east-1', backend='recording')"


def test_region_defaults_to_setting():
    initialize(kms_client=RecordingKms(), settings=Settings(_env_file=None, AWS_REGION="ca-central-1"))

    assert get_binding().region == "ca-central-1"


@pytest.mark.parametrize("keys", ["k=c2hvcnQ=", "k=not-base64!", "broken"])
def test_bad_local_keys_surface_at_exchange(keys):
    """Test initialize() succeeds and the bad key table is reported as a crypto failure."""
    requests = []
    client = httpx.Client(transport=httpx.MockTransport(lambda r: requests.append(r) or httpx.Response(200)))
    initialize("us-east-1", settings=Settings(_env_file=None, KMS_BACKEND="local", LOCAL_KMS_KEYS=keys))

    result = exchange(
        ExchangeRequest(
            token_life_minutes=5,
            auth_key="k",
            from_context="app1",
            to_context="confidant",
            url="https://c.example",
        ),
        http_client=client,
    )

    assert result.kind is ErrorKind.CRYPTO_FAILURE
    assert requests == []
