"""
Authorization header construction for the secret service.

Two wire forms are supported:

- ``basic``: RFC 7617, ``Basic <base64(from:token)>`` with the standard
  base64 alphabet. This is what HTTP Basic parsers such as werkzeug's
  ``request.authorization`` accept.
- ``legacy``: ``Basic: <base64url(from:token)>``. Older clients sent this
  form; only servers with a matching custom parser accept it.
"""

from base64 import b64encode, urlsafe_b64encode
from enum import Enum


class AuthScheme(str, Enum):
    """Authorization header wire form"""
    BASIC = "basic"
    LEGACY = "legacy"


def build_authorization_header(
    from_context: str,
    token: str,
    scheme: AuthScheme = AuthScheme.BASIC
) -> str:
    """
    Build the Authorization header value presenting identity and token.

    Args:
        from_context: Requester identity, used as the username
        token: Bearer token minted for this exchange, used as the password
        scheme: Wire form to produce

    Returns:
        Header value
    """
    credentials = f"{from_context}:{token}".encode("utf-8")

    if scheme == AuthScheme.LEGACY:
        return "Basic: " + urlsafe_b64encode(credentials).decode("ascii")

    return "Basic " + b64encode(credentials).decode("ascii")
