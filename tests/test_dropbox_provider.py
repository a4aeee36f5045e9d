"""Tests for the DropboxProvider with mocked Dropbox SDK."""

from datetime import datetime
from unittest.mock import MagicMock, mock_open, patch

import pytest

from filmnotes.cloud.credentials import CredentialStore
from filmnotes.cloud.dropbox_provider import PROVIDER_NAME, DropboxProvider
from filmnotes.cloud.provider import CloudProviderError

APP_KEY = "test-app-key"


@pytest.fixture
def mock_creds():
    """CredentialStore mock with no stored tokens by default."""
    creds = MagicMock(spec=CredentialStore)
    creds.retrieve.return_value = None
    return creds


@pytest.fixture
def authed_creds():
    """CredentialStore mock with a refresh token already stored."""
    creds = MagicMock(spec=CredentialStore)

    def _retrieve(provider, key):
        if key == "refresh_token":
            return "fake_refresh_token"
        if key == "access_token":
            return "fake_access_token"
        return None

    creds.retrieve.side_effect = _retrieve
    return creds


def _db_file(name: str, modified: datetime, size: int = 2048):
    from dropbox.files import FileMetadata

    entry = MagicMock(spec=FileMetadata)
    entry.name = name
    entry.path_display = f"/FilmNotes/{name}"
    entry.size = size
    entry.server_modified = modified
    return entry


class TestConstruction:
    def test_provider_name(self, mock_creds):
        assert DropboxProvider(APP_KEY, mock_creds).provider_name() == "Dropbox"

    def test_requires_app_key(self, mock_creds):
        with pytest.raises(CloudProviderError, match="app key"):
            DropboxProvider("", mock_creds)


class TestAuth:
    @patch("filmnotes.cloud.dropbox_provider.DropboxOAuth2FlowNoRedirect")
    def test_get_auth_url_returns_url(self, mock_flow_cls, mock_creds):
        mock_flow_cls.return_value.start.return_value = "https://dropbox.com/oauth2/authorize?x"
        provider = DropboxProvider(APP_KEY, mock_creds)
        assert "dropbox.com" in provider.get_auth_url()
        mock_flow_cls.assert_called_once_with(APP_KEY, use_pkce=True, token_access_type="offline")

    @patch("filmnotes.cloud.dropbox_provider.DropboxOAuth2FlowNoRedirect")
    def test_get_auth_url_wraps_errors(self, mock_flow_cls, mock_creds):
        mock_flow_cls.side_effect = Exception("bad key")
        with pytest.raises(CloudProviderError, match="Failed to start auth flow"):
            DropboxProvider(APP_KEY, mock_creds).get_auth_url()

    @patch("filmnotes.cloud.dropbox_provider.DropboxOAuth2FlowNoRedirect")
    def test_finish_auth_stores_tokens(self, mock_flow_cls, mock_creds):
        mock_result = MagicMock()
        mock_result.access_token = "new_access"
        mock_result.refresh_token = "new_refresh"
        mock_flow_cls.return_value.finish.return_value = mock_result

        provider = DropboxProvider(APP_KEY, mock_creds)
        provider.get_auth_url()

        with patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox") as mock_dbx_cls:
            mock_acct = MagicMock()
            mock_acct.name.display_name = "Test User"
            mock_acct.email = "test@example.com"
            mock_dbx_cls.return_value.users_get_current_account.return_value = mock_acct
            mock_creds.retrieve.side_effect = (
                lambda p, k: "new_refresh" if k == "refresh_token" else None
            )
            info = provider.finish_auth("  auth_code_123 \n")

        mock_flow_cls.return_value.finish.assert_called_once_with("auth_code_123")
        mock_creds.store.assert_any_call(PROVIDER_NAME, "access_token", "new_access")
        mock_creds.store.assert_any_call(PROVIDER_NAME, "refresh_token", "new_refresh")
        assert info.display_name == "Test User"
        assert info.email == "test@example.com"

    @patch("filmnotes.cloud.dropbox_provider.DropboxOAuth2FlowNoRedirect")
    def test_finish_auth_wraps_bad_code(self, mock_flow_cls, mock_creds):
        mock_flow_cls.return_value.finish.side_effect = Exception("invalid_grant")
        provider = DropboxProvider(APP_KEY, mock_creds)
        provider.get_auth_url()
        with pytest.raises(CloudProviderError, match="Auth failed"):
            provider.finish_auth("wrong")
        mock_creds.store.assert_not_called()

    def test_finish_auth_without_start_raises(self, mock_creds):
        provider = DropboxProvider(APP_KEY, mock_creds)
        with pytest.raises(CloudProviderError, match="not started"):
            provider.finish_auth("code")


class TestIsAuthenticated:
    def test_false_when_no_token(self, mock_creds):
        assert DropboxProvider(APP_KEY, mock_creds).is_authenticated() is False

    def test_true_when_token_exists(self, authed_creds):
        assert DropboxProvider(APP_KEY, authed_creds).is_authenticated() is True


class TestGetAccountInfo:
    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_returns_account_info(self, mock_dbx_cls, authed_creds):
        mock_acct = MagicMock()
        mock_acct.name.display_name = "Jane Doe"
        mock_acct.email = "jane@example.com"
        mock_dbx_cls.return_value.users_get_current_account.return_value = mock_acct

        info = DropboxProvider(APP_KEY, authed_creds).get_account_info()
        assert info.display_name == "Jane Doe"
        assert info.email == "jane@example.com"
        mock_dbx_cls.assert_called_once_with(
            oauth2_refresh_token="fake_refresh_token", app_key=APP_KEY
        )

    def test_returns_none_when_not_authenticated(self, mock_creds):
        assert DropboxProvider(APP_KEY, mock_creds).get_account_info() is None


class TestListBackups:
    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_lists_db_files_newest_first(self, mock_dbx_cls, authed_creds):
        from dropbox.files import FileMetadata, FolderMetadata

        older = _db_file("filmnotes_20250101_120000.db", datetime(2025, 1, 1, 12, 0))
        newer = _db_file("filmnotes_20250301_080000.db", datetime(2025, 3, 1, 8, 0))
        txt_file = MagicMock(spec=FileMetadata)
        txt_file.name = "notes.txt"
        folder = MagicMock(spec=FolderMetadata)
        folder.name = "old.db"
        mock_dbx_cls.return_value.files_list_folder.return_value.entries = [
            older, txt_file, folder, newer,
        ]

        backups = DropboxProvider(APP_KEY, authed_creds).list_backups("/FilmNotes")
        assert [b.name for b in backups] == [newer.name, older.name]
        assert backups[0].path == f"/FilmNotes/{newer.name}"
        assert backups[0].size == 2048
        assert backups[0].modified == "2025-03-01T08:00:00"

    def test_raises_when_not_authenticated(self, mock_creds):
        with pytest.raises(CloudProviderError):
            DropboxProvider(APP_KEY, mock_creds).list_backups("/FilmNotes")


class TestUploadDownload:
    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_upload_calls_files_upload(self, mock_dbx_cls, authed_creds):
        from dropbox.files import WriteMode

        provider = DropboxProvider(APP_KEY, authed_creds)
        with patch("builtins.open", mock_open(read_data=b"dbdata")):
            provider.upload_file("/tmp/test.db", "/FilmNotes/test.db")
        mock_dbx_cls.return_value.files_upload.assert_called_once_with(
            b"dbdata", "/FilmNotes/test.db", mode=WriteMode.overwrite
        )

    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_download_calls_files_download_to_file(self, mock_dbx_cls, authed_creds):
        provider = DropboxProvider(APP_KEY, authed_creds)
        provider.download_file("/FilmNotes/test.db", "/tmp/test.db")
        mock_dbx_cls.return_value.files_download_to_file.assert_called_once_with(
            "/tmp/test.db", "/FilmNotes/test.db"
        )


class TestDisconnect:
    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_disconnect_revokes_and_clears(self, mock_dbx_cls, authed_creds):
        DropboxProvider(APP_KEY, authed_creds).disconnect()
        mock_dbx_cls.return_value.auth_token_revoke.assert_called_once()
        authed_creds.clear.assert_called_once_with(PROVIDER_NAME)

    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_disconnect_clears_even_if_revoke_fails(self, mock_dbx_cls, authed_creds):
        mock_dbx_cls.return_value.auth_token_revoke.side_effect = Exception("offline")
        DropboxProvider(APP_KEY, authed_creds).disconnect()
        authed_creds.clear.assert_called_once_with(PROVIDER_NAME)


class TestSDKExceptionWrapping:
    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_upload_wraps_sdk_exception(self, mock_dbx_cls, authed_creds):
        mock_dbx_cls.return_value.files_upload.side_effect = Exception("network error")
        provider = DropboxProvider(APP_KEY, authed_creds)
        with pytest.raises(CloudProviderError, match="Upload failed"):
            with patch("builtins.open", mock_open(read_data=b"data")):
                provider.upload_file("/tmp/test.db", "/FilmNotes/test.db")

    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_download_wraps_sdk_exception(self, mock_dbx_cls, authed_creds):
        mock_dbx_cls.return_value.files_download_to_file.side_effect = Exception("not found")
        provider = DropboxProvider(APP_KEY, authed_creds)
        with pytest.raises(CloudProviderError, match="Download failed"):
            provider.download_file("/FilmNotes/test.db", "/tmp/test.db")

    @patch("filmnotes.cloud.dropbox_provider.dropbox.Dropbox")
    def test_list_wraps_sdk_exception(self, mock_dbx_cls, authed_creds):
        mock_dbx_cls.return_value.files_list_folder.side_effect = Exception("forbidden")
        provider = DropboxProvider(APP_KEY, authed_creds)
        with pytest.raises(CloudProviderError, match="Failed to list /FilmNotes"):
            provider.list_backups("/FilmNotes")
