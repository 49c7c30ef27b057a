"""Field-level encryption for sensitive party fields.

Each value is encrypted independently with AES-256-CBC under a fresh random
16-byte nonce and stored as ``hex(nonce):hex(ciphertext)``.  Encrypting the
same plaintext twice therefore yields two different strings.

Decryption is best-effort.  A value without the ``:`` delimiter is treated as
legacy plaintext, and a value that cannot be decoded (bad hex, wrong key,
truncated ciphertext) is returned exactly as stored, so one corrupt field
never fails a whole read.  ``try_decrypt`` exposes which of those cases
happened.

The key is configured with FIELD_ENCRYPTION_KEY: either 32 raw characters or
64 hex characters.  Generate one with:

    python -c "import os; print(os.urandom(32).hex())"
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from errors import CipherDecodeError, ConfigurationError

KEY_SIZE = 32
NONCE_SIZE = 16
DELIMITER = ":"
_BLOCK_BITS = algorithms.AES.block_size


def resolve_key(raw: str | bytes | None) -> bytes:
    """Turn configured key material into exactly 32 bytes.

    Raises ConfigurationError when the key is absent or the wrong size.
    """
    if not raw:
        raise ConfigurationError("Field encryption key is not configured")
    if isinstance(raw, str):
        candidate = raw.strip()
        if len(candidate) == KEY_SIZE * 2:
            try:
                return bytes.fromhex(candidate)
            except ValueError:
                pass
        key = candidate.encode("utf-8")
    else:
        key = bytes(raw)
    if len(key) != KEY_SIZE:
        raise ConfigurationError(
            f"Field encryption key must be {KEY_SIZE} bytes, got {len(key)}"
        )
    return key


class DecryptStatus(str, enum.Enum):
    DECRYPTED = "decrypted"
    PLAINTEXT = "plaintext"
    CORRUPT = "corrupt"
    EMPTY = "empty"


@dataclass(frozen=True)
class DecryptOutcome:
    """Result of a best-effort decrypt.

    ``value`` is always safe to hand back to the caller: the plaintext when
    ``status`` is DECRYPTED, otherwise the input unchanged.
    """

    status: DecryptStatus
    value: str | None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is DecryptStatus.DECRYPTED


class FieldCipher:
    """AES-256-CBC cipher bound to one key."""

    def __init__(self, key: str | bytes):
        self._key = resolve_key(key)

    def encrypt(self, plaintext: str | None) -> str | None:
        """Encrypt a string.  Empty or None values are returned unchanged."""
        if not plaintext:
            return plaintext
        nonce = os.urandom(NONCE_SIZE)
        padder = padding.PKCS7(_BLOCK_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(nonce)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{nonce.hex()}{DELIMITER}{ciphertext.hex()}"

    def try_decrypt(self, value: str | None) -> DecryptOutcome:
        if not value:
            return DecryptOutcome(DecryptStatus.EMPTY, value)
        if DELIMITER not in value:
            return DecryptOutcome(DecryptStatus.PLAINTEXT, value)
        try:
            return DecryptOutcome(DecryptStatus.DECRYPTED, self._decode(value))
        except CipherDecodeError as exc:
            return DecryptOutcome(DecryptStatus.CORRUPT, value, reason=str(exc))

    def decrypt(self, value: str | None) -> str | None:
        """Decrypt a stored value, passing it through if it cannot be decoded."""
        return self.try_decrypt(value).value

    def _decode(self, value: str) -> str:
        nonce_hex, _, body_hex = value.partition(DELIMITER)
        try:
            nonce = bytes.fromhex(nonce_hex)
            ciphertext = bytes.fromhex(body_hex)
        except ValueError as exc:
            raise CipherDecodeError("value is not hex encoded") from exc
        if len(nonce) != NONCE_SIZE:
            raise CipherDecodeError(f"nonce must be {NONCE_SIZE} bytes")
        if not ciphertext or len(ciphertext) % (_BLOCK_BITS // 8):
            raise CipherDecodeError("ciphertext is not a whole number of blocks")

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(nonce)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        try:
            raw = unpadder.update(padded) + unpadder.finalize()
            return raw.decode("utf-8")
        except ValueError as exc:
            # Wrong key or tampered ciphertext
            raise CipherDecodeError("ciphertext did not decrypt cleanly") from exc


def encrypt(plaintext: str | None, key: str | bytes) -> str | None:
    """Encrypt one value under ``key``.  The key is validated first."""
    return FieldCipher(key).encrypt(plaintext)


def decrypt(ciphertext: str | None, key: str | bytes) -> str | None:
    """Decrypt one value under ``key``, passing through anything undecodable."""
    return FieldCipher(key).decrypt(ciphertext)
