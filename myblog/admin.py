"""
Admin credential handling.

The password is verified against the server before it is remembered, and it
is stored outside the cache namespace so cache invalidation never logs the
admin out.
"""
import logging
from typing import Optional

from myblog.cache import KeyValueBackend

logger = logging.getLogger("admin")

PASSWORD_KEY = "admin_password"


class AdminSession:
    """
    Remembers a verified admin password in the durable backend.

    A copy is also kept in memory, so a durable tier that cannot be written
    still leaves this process logged in.
    """

    def __init__(self, client, backend: KeyValueBackend):
        self._client = client
        self._backend = backend
        self._remembered: Optional[str] = None

    @property
    def password(self) -> Optional[str]:
        """The remembered password, or None."""
        try:
            stored = self._backend.get_item(PASSWORD_KEY)
        except Exception as e:
            logger.debug(f"Could not read stored credential: {e}")
            stored = None
        return stored if stored is not None else self._remembered

    @property
    def is_authenticated(self) -> bool:
        return bool(self.password)

    def login(self, password: str) -> None:
        """
        Verify ``password`` with the server, then remember it.

        Raises:
            ContentAPIError: The server rejected the password
        """
        self._client.verify_password(password)
        self._remembered = password
        try:
            self._backend.set_item(PASSWORD_KEY, password)
        except Exception as e:
            logger.warning(f"Could not persist credential, keeping it for this session only: {e}")
        logger.info("Admin login succeeded")

    def logout(self) -> None:
        self._remembered = None
        self._backend.remove_item(PASSWORD_KEY)
