"""Cloud storage interface used for off-device database backups."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class CloudProviderError(Exception):
    """Wraps all SDK-specific exceptions from cloud providers."""


@dataclass
class CloudAccountInfo:
    display_name: str = ""
    email: str = ""


@dataclass
class RemoteBackup:
    name: str = ""
    path: str = ""
    size: int = 0
    modified: str = ""


class CloudProvider(ABC):
    """Strategy interface for cloud storage backends."""

    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    def get_auth_url(self) -> str:
        """Return the URL the user opens to authorise filmnotes."""
        ...

    @abstractmethod
    def finish_auth(self, code: str) -> CloudAccountInfo:
        """Exchange the pasted auth code for tokens and store them."""
        ...

    @abstractmethod
    def is_authenticated(self) -> bool:
        ...

    @abstractmethod
    def get_account_info(self) -> CloudAccountInfo | None:
        ...

    @abstractmethod
    def list_backups(self, folder: str) -> list[RemoteBackup]:
        """List database backups stored in the remote folder, newest first."""
        ...

    @abstractmethod
    def upload_file(self, local_path: str, remote_path: str) -> None:
        ...

    @abstractmethod
    def download_file(self, remote_path: str, local_path: str) -> None:
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Revoke tokens and clear stored credentials."""
        ...
