"""
Token authentication for the records API.

Kept in its own module so that ``REST_FRAMEWORK`` settings can import
the class without pulling in any view code.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword.

    Clients send ``Authorization: Token <key>`` with the key returned by
    the login endpoint.
    """

    keyword = 'Token'
