"""OS keyring storage for cloud provider tokens."""

import keyring
from keyring.errors import PasswordDeleteError

SERVICE_NAME = "filmnotes"

TOKEN_KEYS = ("access_token", "refresh_token")


class CredentialStore:
    """Keeps one set of tokens per provider under the filmnotes keyring service."""

    def __init__(self, service: str = SERVICE_NAME) -> None:
        self.service = service

    def _username(self, provider: str, key: str) -> str:
        return f"{provider}:{key}"

    def store(self, provider: str, key: str, value: str) -> None:
        keyring.set_password(self.service, self._username(provider, key), value)

    def retrieve(self, provider: str, key: str) -> str | None:
        return keyring.get_password(self.service, self._username(provider, key))

    def clear(self, provider: str) -> None:
        for key in TOKEN_KEYS:
            try:
                keyring.delete_password(self.service, self._username(provider, key))
            except PasswordDeleteError:
                pass  # nothing stored
