"""Tests for stored secret encryption."""

import stat
from pathlib import Path

import pytest

from podcatalog.config.crypto import ENCRYPTED_PREFIX, SecretBox
from podcatalog.utils.errors import EncryptionError


class TestSecretBox:
    """Tests for SecretBox."""

    def test_key_created_with_owner_only_permissions(self, tmp_path: Path) -> None:
        key_path = tmp_path / "nested" / ".keyfile"
        box = SecretBox(key_path)

        box.encrypt("secret")

        assert key_path.exists()
        assert stat.S_IMODE(key_path.stat().st_mode) == 0o600

    def test_roundtrip(self, tmp_path: Path) -> None:
        box = SecretBox(tmp_path / ".keyfile")

        stored = box.encrypt("my-client-secret")

        assert stored.startswith(ENCRYPTED_PREFIX)
        assert "my-client-secret" not in stored
        assert box.decrypt(stored) == "my-client-secret"

    def test_key_reused_across_instances(self, tmp_path: Path) -> None:
        key_path = tmp_path / ".keyfile"
        stored = SecretBox(key_path).encrypt("value")

        assert SecretBox(key_path).decrypt(stored) == "value"

    def test_empty_values_pass_through(self, tmp_path: Path) -> None:
        box = SecretBox(tmp_path / ".keyfile")

        assert box.encrypt(None) is None
        assert box.encrypt("") == ""
        assert box.decrypt(None) is None
        assert not (tmp_path / ".keyfile").exists()

    def test_already_encrypted_not_double_encrypted(self, tmp_path: Path) -> None:
        box = SecretBox(tmp_path / ".keyfile")
        stored = box.encrypt("value")

        assert box.encrypt(stored) == stored

    def test_plaintext_returned_unchanged(self, tmp_path: Path) -> None:
        box = SecretBox(tmp_path / ".keyfile")

        assert box.decrypt("hand-typed") == "hand-typed"

    def test_is_encrypted(self) -> None:
        assert SecretBox.is_encrypted("enc:abc")
        assert not SecretBox.is_encrypted("abc")
        assert not SecretBox.is_encrypted(None)

    def test_wrong_key(self, tmp_path: Path) -> None:
        stored = SecretBox(tmp_path / "a" / ".keyfile").encrypt("value")

        with pytest.raises(EncryptionError, match="Could not decrypt"):
            SecretBox(tmp_path / "b" / ".keyfile").decrypt(stored)

    def test_insecure_key_permissions(self, tmp_path: Path) -> None:
        key_path = tmp_path / ".keyfile"
        SecretBox(key_path).encrypt("value")
        key_path.chmod(0o644)

        with pytest.raises(EncryptionError, match="insecure permissions"):
            SecretBox(key_path).encrypt("other")
