"""
Encryption of account and profile PHI at rest (AES-256-GCM).
"""
import base64
import hashlib
import hmac
import os
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from flask import current_app, has_app_context


class PHIEncryptor:
    """Encrypts/decrypts PHI strings with a 256-bit key."""

    def __init__(self, key_b64: str):
        if not key_b64:
            raise ValueError("PHI_ENCRYPTION_KEY is not set")
        self._key = base64.b64decode(key_b64)
        if len(self._key) != 32:
            raise ValueError("PHI_ENCRYPTION_KEY must be 32 bytes (256 bits)")
        self._aesgcm = AESGCM(self._key)

    def encrypt(self, plaintext: str) -> str:
        """Return base64 of nonce + ciphertext."""
        if not plaintext:
            return plaintext
        nonce = os.urandom(12)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode('utf-8'), None)
        return base64.b64encode(nonce + ciphertext).decode('utf-8')

    def decrypt(self, encrypted_b64: str) -> str:
        if not encrypted_b64:
            return encrypted_b64
        encrypted_data = base64.b64decode(encrypted_b64)
        nonce, ciphertext = encrypted_data[:12], encrypted_data[12:]
        return self._aesgcm.decrypt(nonce, ciphertext, None).decode('utf-8')

    def hash_email(self, email: str) -> str:
        """Deterministic HMAC-SHA256 of the normalized email, for lookups."""
        normalized = email.strip().lower().encode('utf-8')
        return hmac.new(self._key, normalized, hashlib.sha256).hexdigest()


def _configured_key():
    if has_app_context():
        return current_app.config.get('PHI_ENCRYPTION_KEY') or os.getenv('PHI_ENCRYPTION_KEY')
    return os.getenv('PHI_ENCRYPTION_KEY')


def get_encryptor() -> PHIEncryptor:
    """Encryptor for the current app, built once per app."""
    if not has_app_context():
        return PHIEncryptor(_configured_key())
    encryptor = current_app.extensions.get('phi_encryptor')
    if encryptor is None:
        encryptor = PHIEncryptor(_configured_key())
        current_app.extensions['phi_encryptor'] = encryptor
    return encryptor


def encrypt_phi(value: str) -> str:
    return get_encryptor().encrypt(value)


def decrypt_phi(value: str) -> str:
    return get_encryptor().decrypt(value)


def hash_email(email: str) -> str:
    return get_encryptor().hash_email(email)
