"""Tests for Authorization header construction."""
import base64

import pytest

from confidant_exchange.services.exchange import AuthScheme, build_authorization_header

# base64url token whose standard-base64 encoding with the username contains '+' and '/'
TOKEN = base64.urlsafe_b64encode(b"\xfb\xef\xbe" * 4).decode()


def test_basic_is_rfc7617():
    header = build_authorization_header("app1", TOKEN, AuthScheme.BASIC)

    scheme, credentials = header.split(" ", 1)
    assert scheme == "Basic"
    assert base64.b64decode(credentials, validate=True) == f"app1:{TOKEN}".encode()


def test_basic_is_default():
    assert build_authorization_header("app1", TOKEN) == \
        build_authorization_header("app1", TOKEN, AuthScheme.BASIC)


def test_legacy_reproduces_historic_wire_form():
    header = build_authorization_header("app1", TOKEN, AuthScheme.LEGACY)

    assert header.startswith("Basic: ")
    encoded = header[len("Basic: "):]
    assert encoded == base64.urlsafe_b64encode(f"app1:{TOKEN}".encode()).decode()


def test_username_split_on_first_colon():
    header = build_authorization_header("svc", "tok:en")
    decoded = base64.b64decode(header.split(" ", 1)[1]).decode()
    username, password = decoded.split(":", 1)
    assert username == "svc"
    assert password == "tok:en"


@pytest.mark.parametrize("scheme", ["basic", "legacy"])
def test_scheme_from_string(scheme):
    assert AuthScheme(scheme).value == scheme


def test_non_ascii_identity_is_encoded():
    header = build_authorization_header("sérvice", TOKEN)
    header.encode("ascii")
