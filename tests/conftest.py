"""Shared fixtures."""
import pytest

from confidant_exchange.adapters.local import LocalKmsClient
from confidant_exchange.binding import ProcessBinding, reset_binding

from fakes import FIXED_NOW, LOCAL_KEY, LOCAL_KEY_ID, RecordingKms


@pytest.fixture(autouse=True)
def clean_binding():
    """Every test starts without a process-wide binding"""
    reset_binding()
    yield
    reset_binding()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def recording_kms():
    return RecordingKms()


@pytest.fixture
def binding(recording_kms):
    return ProcessBinding("us-east-1", recording_kms)


@pytest.fixture
def local_kms():
    return LocalKmsClient({LOCAL_KEY_ID: LOCAL_KEY})
