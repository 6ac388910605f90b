"""AES-256-GCM encryption for FTP passwords kept in the record store."""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

IV_LENGTH = 16
TAG_LENGTH = 16
KEY_LENGTH = 32

# Key derivation parameters shared with tokens written by the previous
# dashboard, which derived its key with scrypt defaults and a fixed salt.
KDF_SALT = b'salt'
KDF_N = 2 ** 14
KDF_R = 8
KDF_P = 1


class EncryptionError(Exception):
    """Raised when a secret cannot be encrypted or decrypted."""


class PasswordCipher:
    """
    Encrypts and decrypts short secrets with a key derived from a passphrase.

    Tokens have the form ``iv:tag:ciphertext``, every part hex encoded.
    """

    def __init__(self, secret: str):
        if not secret:
            raise EncryptionError('ENCRYPTION_KEY environment variable is not set')
        self._aead = AESGCM(derive_key(secret))

    @classmethod
    def from_env(cls) -> 'PasswordCipher':
        return cls(os.environ.get('ENCRYPTION_KEY', ''))

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a string.

        Args:
            plaintext: Secret to protect

        Returns:
            Token in iv:tag:ciphertext hex form
        """
        iv = os.urandom(IV_LENGTH)
        sealed = self._aead.encrypt(iv, plaintext.encode('utf-8'), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        """
        Decrypt a token produced by encrypt().

        Args:
            token: iv:tag:ciphertext hex string

        Returns:
            The original plaintext

        Raises:
            EncryptionError: If the token is malformed or fails authentication
        """
        parts = token.split(':')
        if len(parts) != 3:
            raise EncryptionError('Invalid encrypted text format')

        try:
            iv, tag, ciphertext = (bytes.fromhex(part) for part in parts)
        except ValueError as e:
            raise EncryptionError('Invalid encrypted text format') from e

        if len(iv) != IV_LENGTH or len(tag) != TAG_LENGTH:
            raise EncryptionError('Invalid encrypted text format')

        try:
            plaintext = self._aead.decrypt(iv, ciphertext + tag, None)
        except InvalidTag as e:
            raise EncryptionError('Decryption failed: wrong key or corrupted data') from e

        return plaintext.decode('utf-8')


def derive_key(secret: str) -> bytes:
    kdf = Scrypt(salt=KDF_SALT, length=KEY_LENGTH, n=KDF_N, r=KDF_R, p=KDF_P)
    return kdf.derive(secret.encode('utf-8'))
