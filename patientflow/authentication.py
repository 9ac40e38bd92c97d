"""
Token authentication for the API.

Identity is issued elsewhere; this class only gives the settings a
stable import path and fixes the ``Authorization`` header keyword.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword."""

    keyword = 'Token'
