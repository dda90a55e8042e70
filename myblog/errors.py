"""
Errors raised to callers of the blog client.
"""
from typing import Optional


class ContentAPIError(Exception):
    """
    Raised when a content API call fails.

    Covers transport failures, validation failures and rejected credentials
    alike; callers only need the message to show. ``status_code`` is set when
    the server answered.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
