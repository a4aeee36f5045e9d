"""Dropbox backend for database backups."""

import dropbox
from dropbox import DropboxOAuth2FlowNoRedirect
from dropbox.files import FileMetadata, WriteMode
from loguru import logger

from .credentials import CredentialStore
from .provider import CloudAccountInfo, CloudProvider, CloudProviderError, RemoteBackup

PROVIDER_NAME = "dropbox"

BACKUP_SUFFIX = ".db"


class DropboxProvider(CloudProvider):
    """PKCE "no redirect" OAuth: the user pastes the code Dropbox shows them."""

    def __init__(self, app_key: str, credential_store: CredentialStore | None = None) -> None:
        if not app_key:
            raise CloudProviderError("No Dropbox app key configured (cloud.app_key)")
        self._app_key = app_key
        self._creds = credential_store or CredentialStore()
        self._auth_flow: DropboxOAuth2FlowNoRedirect | None = None

    def provider_name(self) -> str:
        return "Dropbox"

    # --- Auth ---

    def get_auth_url(self) -> str:
        try:
            self._auth_flow = DropboxOAuth2FlowNoRedirect(
                self._app_key,
                use_pkce=True,
                token_access_type="offline",
            )
            return self._auth_flow.start()
        except Exception as exc:
            raise CloudProviderError(f"Failed to start auth flow: {exc}") from exc

    def finish_auth(self, code: str) -> CloudAccountInfo:
        if self._auth_flow is None:
            raise CloudProviderError("Auth flow not started, call get_auth_url() first")
        try:
            result = self._auth_flow.finish(code.strip())
        except Exception as exc:
            raise CloudProviderError(f"Auth failed: {exc}") from exc
        self._creds.store(PROVIDER_NAME, "access_token", result.access_token)
        self._creds.store(PROVIDER_NAME, "refresh_token", result.refresh_token)
        self._auth_flow = None
        logger.info("Linked Dropbox account")
        return self.get_account_info() or CloudAccountInfo()

    def is_authenticated(self) -> bool:
        return self._creds.retrieve(PROVIDER_NAME, "refresh_token") is not None

    def get_account_info(self) -> CloudAccountInfo | None:
        try:
            acct = self._client().users_get_current_account()
        except Exception:
            logger.warning("Could not fetch Dropbox account info")
            return None
        return CloudAccountInfo(display_name=acct.name.display_name, email=acct.email)

    # --- Files ---

    def list_backups(self, folder: str) -> list[RemoteBackup]:
        try:
            result = self._client().files_list_folder(folder)
        except Exception as exc:
            raise CloudProviderError(f"Failed to list {folder}: {exc}") from exc
        backups = [
            RemoteBackup(
                name=entry.name,
                path=entry.path_display,
                size=entry.size,
                modified=entry.server_modified.isoformat() if entry.server_modified else "",
            )
            for entry in result.entries
            if isinstance(entry, FileMetadata) and entry.name.endswith(BACKUP_SUFFIX)
        ]
        return sorted(backups, key=lambda b: b.modified, reverse=True)

    def upload_file(self, local_path: str, remote_path: str) -> None:
        try:
            with open(local_path, "rb") as f:
                self._client().files_upload(f.read(), remote_path, mode=WriteMode.overwrite)
        except Exception as exc:
            raise CloudProviderError(f"Upload failed: {exc}") from exc

    def download_file(self, remote_path: str, local_path: str) -> None:
        try:
            self._client().files_download_to_file(local_path, remote_path)
        except Exception as exc:
            raise CloudProviderError(f"Download failed: {exc}") from exc

    def disconnect(self) -> None:
        try:
            self._client().auth_token_revoke()
        except Exception:
            logger.warning("Dropbox token revoke failed, clearing local tokens anyway")
        self._creds.clear(PROVIDER_NAME)

    def _client(self) -> dropbox.Dropbox:
        refresh_token = self._creds.retrieve(PROVIDER_NAME, "refresh_token")
        if not refresh_token:
            raise CloudProviderError("Not authenticated, no refresh token found")
        return dropbox.Dropbox(oauth2_refresh_token=refresh_token, app_key=self._app_key)
