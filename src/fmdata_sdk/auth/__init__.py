"""
FileMaker Data API SDK Auth Module.

Token lifecycle and stored re-authentication credentials.
"""

from .token import BasicCredentials, Credentials, OAuthCredentials, TokenManager

__all__ = [
    "BasicCredentials",
    "Credentials",
    "OAuthCredentials",
    "TokenManager",
]
