"""Unit tests for the passwd file store."""

from pathlib import Path

import pytest
from passlib.hash import apr_md5_crypt

from realm_auth.auth.passwd import PasswdEntry, PasswdFileStore, lookup, parse_passwd
from realm_auth.exceptions import StoreUnavailableError


@pytest.fixture
def passwd_file(tmp_path: Path) -> Path:
    """Passwd file with plaintext, hashed and malformed lines."""
    path = tmp_path / "passwd"
    path.write_text(
        "alice:secret\n"
        "onlyonefield\n"
        "\n"
        "# carol:commented\n"
        f"bob:{apr_md5_crypt.hash('hunter2')}:1000:Bob Builder\n"
        "dave::\n",
        encoding="utf-8",
    )
    return path


class TestParsePasswd:
    """Test passwd content parsing."""

    def test_basic_entries(self) -> None:
        """Test username and password fields are extracted."""
        entries = parse_passwd("alice:secret\nbob:hunter2\n")

        assert entries == {
            "alice": PasswdEntry(username="alice", stored_password="secret"),
            "bob": PasswdEntry(username="bob", stored_password="hunter2"),
        }

    def test_extra_fields_ignored(self) -> None:
        """Test trailing fields do not leak into the stored password."""
        entries = parse_passwd("alice:secret:1000:1000:Alice:/home/alice:/bin/sh")

        assert entries["alice"].stored_password == "secret"

    def test_malformed_lines_skipped(self) -> None:
        """Test lines with fewer than two fields are skipped."""
        entries = parse_passwd("onlyonefield\nalice:secret\n")

        assert list(entries) == ["alice"]

    def test_last_entry_wins(self) -> None:
        """Test duplicate usernames keep the last record."""
        entries = parse_passwd("alice:first\nalice:second\n")

        assert entries["alice"].stored_password == "second"

    def test_crlf_and_missing_trailing_newline(self) -> None:
        """Test Windows line endings and no final newline are handled."""
        entries = parse_passwd("alice:secret\r\nbob:hunter2")

        assert entries["alice"].stored_password == "secret"
        assert entries["bob"].stored_password == "hunter2"

    def test_empty_content(self) -> None:
        """Test empty content yields no entries."""
        assert parse_passwd("") == {}


class TestPasswdFileStore:
    """Test PasswdFileStore lookups and verification."""

    def test_lookup_existing_user(self, passwd_file: Path) -> None:
        """Test looking up a present user returns its stored password."""
        assert lookup(str(passwd_file), "alice") == "secret"

    def test_lookup_missing_user(self, passwd_file: Path) -> None:
        """Test looking up an absent user returns None."""
        assert lookup(str(passwd_file), "bob-the-second") is None
        assert lookup(str(passwd_file), "onlyonefield") is None
        assert lookup(str(passwd_file), "# carol") is None

    def test_lookup_empty_password(self, passwd_file: Path) -> None:
        """Test an empty stored password is returned as an empty string."""
        assert lookup(str(passwd_file), "dave") == ""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test an absent file raises StoreUnavailableError."""
        missing = tmp_path / "nope"

        with pytest.raises(StoreUnavailableError) as exc_info:
            lookup(str(missing), "alice")

        assert exc_info.value.path == str(missing)

    def test_directory_path_raises(self, tmp_path: Path) -> None:
        """Test a path that is not a regular file raises StoreUnavailableError."""
        with pytest.raises(StoreUnavailableError):
            lookup(str(tmp_path), "alice")

    def test_verify_plaintext(self, passwd_file: Path) -> None:
        """Test plaintext entries verify against the supplied password."""
        store = PasswdFileStore()

        assert store.verify(str(passwd_file), "alice", "secret") is True
        assert store.verify(str(passwd_file), "alice", "wrong") is False

    def test_verify_hashed(self, passwd_file: Path) -> None:
        """Test hashed entries are verified through the matcher."""
        store = PasswdFileStore()

        assert store.verify(str(passwd_file), "bob", "hunter2") is True
        assert store.verify(str(passwd_file), "bob", "wrong") is False

    def test_verify_unknown_user(self, passwd_file: Path) -> None:
        """Test unknown users fail verification."""
        store = PasswdFileStore()

        assert store.verify(str(passwd_file), "mallory", "secret") is False

    def test_file_reread_on_each_lookup(self, passwd_file: Path) -> None:
        """Test edits to the file are picked up without any reload call."""
        store = PasswdFileStore()
        assert store.verify(str(passwd_file), "alice", "secret") is True

        passwd_file.write_text("alice:changed\n", encoding="utf-8")

        assert store.verify(str(passwd_file), "alice", "secret") is False
        assert store.verify(str(passwd_file), "alice", "changed") is True

    def test_invalid_encoding_raises(self, tmp_path: Path) -> None:
        """Test undecodable content is reported as unavailable."""
        path = tmp_path / "passwd"
        path.write_bytes(b"alice:\xff\xfe\n")

        with pytest.raises(StoreUnavailableError):
            PasswdFileStore().lookup(str(path), "alice")
