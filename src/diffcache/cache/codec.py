"""
The codec pipeline -- how a cache mapping becomes a sealed secret.

    write:  mapping -> canonical JSON -> zlib -> base64 -> sealed box -> base64
    read:   supplied string -> base64 -> zlib -> JSON -> mapping

Sealing is one-way for this process. A sealed box is opened only with
the private key of the secret store's owner. The read path has no
decrypt step because the CI host decrypts the secret before handing it
back as the ``cache`` input; what arrives is the compressed plaintext.

``unseal`` and ``generate_keypair`` exist for the owner's side (local
stores, inspection) and are never part of a run.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib

from nacl.encoding import Base64Encoder
from nacl.exceptions import CryptoError
from nacl.public import PrivateKey, PublicKey, SealedBox

from ..errors import CacheDecodeError, ConfigurationError

CacheMapping = dict[str, str]


def serialize(mapping: CacheMapping) -> str:
    """Canonical string form: sorted keys, no whitespace."""
    return json.dumps(mapping, sort_keys=True, separators=(",", ":"))


def deserialize(text: str) -> CacheMapping:
    """Parse the canonical form back into a tag mapping.

    Raises:
        CacheDecodeError: If the text is not a JSON object of strings.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CacheDecodeError(f"Cache is not valid JSON: {exc}") from exc
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise CacheDecodeError("Cache must map tags to file-list strings")
    return data


def compress(text: str) -> str:
    return base64.b64encode(zlib.compress(text.encode("utf-8"), 9)).decode("ascii")


def decompress(blob: str) -> str:
    """Invert :func:`compress`.

    Raises:
        CacheDecodeError: If the blob is not a compressed string.
    """
    try:
        raw = base64.b64decode(blob.strip(), validate=True)
        return zlib.decompress(raw).decode("utf-8")
    except (ValueError, zlib.error) as exc:
        raise CacheDecodeError(f"Unable to decompress cache: {exc}") from exc


def seal(plaintext: str, public_key: str) -> str:
    """Encrypt for the holder of ``public_key`` only.

    Args:
        plaintext: Value to seal.
        public_key: Base64 X25519 public key.

    Returns:
        Base64 sealed box.

    Raises:
        ConfigurationError: If the key is malformed.
    """
    try:
        box = SealedBox(PublicKey(public_key.encode("ascii"), encoder=Base64Encoder))
    except (binascii.Error, CryptoError, ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid public key: {exc}") from exc
    return box.encrypt(plaintext.encode("utf-8"), encoder=Base64Encoder).decode("ascii")


def unseal(ciphertext: str, private_key: str) -> str:
    """Open a sealed box with the owner's base64 private key."""
    try:
        box = SealedBox(PrivateKey(private_key.strip().encode("ascii"), encoder=Base64Encoder))
        return box.decrypt(ciphertext.encode("ascii"), encoder=Base64Encoder).decode("utf-8")
    except (binascii.Error, CryptoError, ValueError, TypeError) as exc:
        raise CacheDecodeError(f"Unable to open sealed cache: {exc}") from exc


def generate_keypair() -> tuple[str, str]:
    """Return a fresh ``(public_key, private_key)`` pair, base64 encoded."""
    private = PrivateKey.generate()
    return (
        private.public_key.encode(Base64Encoder).decode("ascii"),
        private.encode(Base64Encoder).decode("ascii"),
    )


def encode_cache(mapping: CacheMapping, public_key: str) -> str:
    """Full write path: serialize, compress, seal."""
    return seal(compress(serialize(mapping)), public_key)


def decode_cache(blob: str) -> CacheMapping:
    """Full read path for a supplied (already unsealed) cache input."""
    return deserialize(decompress(blob))
