"""Encryption of stored API credentials using Fernet."""

import stat
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from podcatalog.utils.errors import EncryptionError

# Marks values written by SecretBox so hand-edited plaintext secrets still load
ENCRYPTED_PREFIX = "enc:"


class SecretBox:
    """Encrypts config secrets with a per-user Fernet key.

    The key is generated on first use and written with 0600 permissions.
    Encrypted values are stored as ``enc:<token>``; anything without the
    prefix is treated as plaintext the user typed into config.yaml.
    """

    def __init__(self, key_path: Path) -> None:
        self.key_path = key_path
        self._cipher: Fernet | None = None

    def _load_or_create_key(self) -> bytes:
        if self.key_path.exists():
            self._check_permissions()
            return self.key_path.read_bytes()

        key = Fernet.generate_key()
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        self.key_path.write_bytes(key)
        self.key_path.chmod(0o600)
        return key

    def _check_permissions(self) -> None:
        """Refuse keys that group or others can read or write.

        Raises:
            EncryptionError: If the key file permissions are too open
        """
        mode = stat.S_IMODE(self.key_path.stat().st_mode)
        if mode & (stat.S_IRGRP | stat.S_IROTH | stat.S_IWGRP | stat.S_IWOTH):
            raise EncryptionError(
                f"Key file {self.key_path} has insecure permissions ({oct(mode)}). "
                f"Run: chmod 600 {self.key_path}"
            )

    @property
    def cipher(self) -> Fernet:
        if self._cipher is None:
            self._cipher = Fernet(self._load_or_create_key())
        return self._cipher

    @staticmethod
    def is_encrypted(value: str | None) -> bool:
        return bool(value) and value.startswith(ENCRYPTED_PREFIX)

    def encrypt(self, plaintext: str | None) -> str | None:
        """Encrypt a secret for storage.

        Empty values and values that are already encrypted pass through.

        Raises:
            EncryptionError: If encryption fails
        """
        if not plaintext or self.is_encrypted(plaintext):
            return plaintext

        try:
            token = self.cipher.encrypt(plaintext.encode("utf-8"))
        except Exception as e:
            raise EncryptionError(f"Failed to encrypt secret: {e}") from e
        return ENCRYPTED_PREFIX + token.decode("utf-8")

    def decrypt(self, stored: str | None) -> str | None:
        """Decrypt a stored secret; plaintext values are returned unchanged.

        Raises:
            EncryptionError: If the value is marked encrypted but cannot be
                decrypted with the current key
        """
        if not self.is_encrypted(stored):
            return stored

        token = stored[len(ENCRYPTED_PREFIX):]
        try:
            return self.cipher.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise EncryptionError(
                f"Could not decrypt stored secret with key {self.key_path}. "
                "Re-enter credentials with `podcatalog config credentials`."
            ) from e
