#!/usr/bin/env python3
# cipherkeep/security/encryption/envelope.py
from __future__ import annotations
"""
Versioned, passphrase-sealed envelope for the credential database.

Every call to `seal` draws a fresh salt and nonce, derives a 32-byte key from
the passphrase and seals the whole plaintext in one shot.

Suites
------
- aes-256-gcm       (default) scrypt KDF, AEAD, header authenticated as AAD
- chacha20poly1305  scrypt KDF, AEAD, header authenticated as AAD
- aes-256-cbc       legacy, unauthenticated, OpenSSL `enc -pbkdf2` layout

Public API
----------
seal(plaintext, passphrase, *, suite="aes-256-gcm", kdf=KdfParams()) -> bytes
unseal(blob, passphrase) -> bytes
detect_suite(blob) -> str | None

Notes
-----
- AEAD layout: [u16 header_len][header_json_bytes][ciphertext+tag]
- Header JSON keys are stable and sorted for deterministic AAD.
- Legacy layout: b"Salted__" || salt8 || AES-256-CBC(PKCS7(plaintext)), key and
  IV from PBKDF2-HMAC-SHA256 (10000 iterations), readable by
  `openssl enc -d -aes-256-cbc -pbkdf2`.
- Empty input is the empty store: unseal(b"") == b"".
- Every failure to open (wrong passphrase, truncation, tampering, unknown
  header) raises AuthError. Plaintext is only returned once fully verified.
"""

import base64
import hashlib
import json
import os
import struct
from dataclasses import dataclass
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from cipherkeep.errors import AuthError

# --------------------------- constants / header ---------------------------

MAGIC: Final[bytes] = b"CKP1"
V1: Final[int] = 1

SUITE_AES_GCM: Final[str] = "aes-256-gcm"
SUITE_CHACHA: Final[str] = "chacha20poly1305"
SUITE_LEGACY_CBC: Final[str] = "aes-256-cbc"

AEAD_SUITES: Final[frozenset[str]] = frozenset({SUITE_AES_GCM, SUITE_CHACHA})
SUITES: Final[frozenset[str]] = AEAD_SUITES | {SUITE_LEGACY_CBC}
DEFAULT_SUITE: Final[str] = SUITE_AES_GCM

_KEY_LEN: Final[int] = 32
_NONCE_LEN: Final[int] = 12
_SALT_LEN: Final[int] = 16
_TAG_LEN: Final[int] = 16

# u16 max for header length guard (65,535)
_U16_MAX: Final[int] = 0xFFFF

# OpenSSL `enc` compatibility
_OPENSSL_MAGIC: Final[bytes] = b"Salted__"
_OPENSSL_SALT_LEN: Final[int] = 8
_OPENSSL_PBKDF2_ITER: Final[int] = 10_000

# Upper bounds for scrypt cost; enforced on seal, on config load and on open
_MAX_N: Final[int] = 2**20
_MAX_R: Final[int] = 32
_MAX_P: Final[int] = 16


@dataclass(frozen=True, slots=True)
class KdfParams:
    """scrypt cost parameters (recorded in every sealed header)."""
    n: int = 2**14
    r: int = 8
    p: int = 1

    def validate(self) -> None:
        if self.n <= 1 or self.n & (self.n - 1):
            raise ValueError("scrypt n must be a power of two greater than 1")
        if self.r <= 0 or self.p <= 0:
            raise ValueError("scrypt r and p must be positive")
        if self.n > _MAX_N or self.r > _MAX_R or self.p > _MAX_P:
            raise ValueError(
                f"scrypt parameters out of range (n <= {_MAX_N}, r <= {_MAX_R}, p <= {_MAX_P})"
            )


def _b64e(b: bytes) -> str:
    """urlsafe base64 (no padding)."""
    return base64.urlsafe_b64encode(b).decode("ascii").rstrip("=")


def _b64d(s: str) -> bytes:
    """Decode urlsafe base64 that may omit padding."""
    pad = "=" * ((4 - len(s) % 4) % 4)
    return base64.urlsafe_b64decode(s + pad)


def _derive_key(passphrase: str, salt: bytes, kdf: KdfParams) -> bytes:
    """Derive a 32B key from the passphrase with scrypt."""
    maxmem = 128 * kdf.r * (kdf.n + kdf.p + 2) + 1024 * 1024
    return hashlib.scrypt(
        passphrase.encode("utf-8"),
        salt=salt, n=kdf.n, r=kdf.r, p=kdf.p,
        maxmem=maxmem, dklen=_KEY_LEN,
    )


def _aead_for(suite: str, key: bytes) -> AESGCM | ChaCha20Poly1305:
    if suite == SUITE_AES_GCM:
        return AESGCM(key)
    if suite == SUITE_CHACHA:
        return ChaCha20Poly1305(key)
    raise ValueError(f"Unsupported AEAD suite: {suite}")


def _pack_header(header: dict) -> bytes:
    """Serialize header, return [u16 len][json] (the json part is the AAD).

    Raises:
        ValueError: If the header is larger than 65535 bytes.
    """
    hbytes = json.dumps(
        header, separators=(",", ":"), sort_keys=True
    ).encode("utf-8")
    if len(hbytes) > _U16_MAX:
        raise ValueError("Header too large")
    return struct.pack(">H", len(hbytes)) + hbytes


def _unpack_header(blob: bytes) -> tuple[dict, bytes, bytes]:
    """Split blob into (header_dict, aad_bytes, ciphertext)."""
    if len(blob) < 2:
        raise AuthError("Missing envelope header")
    (hlen,) = struct.unpack(">H", blob[:2])
    hbytes = blob[2:2 + hlen]
    if len(hbytes) != hlen:
        raise AuthError("Truncated envelope header")
    try:
        header = json.loads(hbytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise AuthError("Unreadable envelope header") from exc
    if not isinstance(header, dict):
        raise AuthError("Unreadable envelope header")
    return header, hbytes, blob[2 + hlen:]


# ------------------------------ legacy CBC ------------------------------

def _openssl_key_iv(passphrase: str, salt: bytes) -> tuple[bytes, bytes]:
    material = hashlib.pbkdf2_hmac(
        "sha256", passphrase.encode("utf-8"), salt, _OPENSSL_PBKDF2_ITER, dklen=48
    )
    return material[:32], material[32:]


def _seal_legacy(plaintext: bytes, passphrase: str) -> bytes:
    salt = os.urandom(_OPENSSL_SALT_LEN)
    key, iv = _openssl_key_iv(passphrase, salt)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    enc = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return _OPENSSL_MAGIC + salt + enc.update(padded) + enc.finalize()


def _unseal_legacy(blob: bytes, passphrase: str) -> bytes:
    # No integrity check exists in this mode; padding is the only tell.
    head = len(_OPENSSL_MAGIC) + _OPENSSL_SALT_LEN
    salt, ct = blob[len(_OPENSSL_MAGIC):head], blob[head:]
    if len(salt) != _OPENSSL_SALT_LEN or not ct or len(ct) % 16:
        raise AuthError("Truncated legacy envelope")
    key, iv = _openssl_key_iv(passphrase, salt)
    dec = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = dec.update(ct) + dec.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise AuthError("Cannot open envelope") from exc


# ------------------------------ public API ------------------------------

def detect_suite(blob: bytes) -> str | None:
    """Return the suite a blob was sealed with, or None if unrecognised/empty."""
    if not blob:
        return None
    if blob.startswith(_OPENSSL_MAGIC):
        return SUITE_LEGACY_CBC
    try:
        header, _, _ = _unpack_header(blob)
    except AuthError:
        return None
    suite = header.get("suite")
    return suite if suite in AEAD_SUITES else None


def seal(
    plaintext: bytes,
    passphrase: str,
    *,
    suite: str = DEFAULT_SUITE,
    kdf: KdfParams = KdfParams(),
) -> bytes:
    """Encrypt plaintext under a passphrase into a self-describing blob.

    Args:
        plaintext: Bytes to protect (may be empty).
        passphrase: Master passphrase; never stored.
        suite: One of SUITES.
        kdf: scrypt parameters for AEAD suites (ignored by legacy CBC).

    Raises:
        ValueError: On unknown suite or invalid KDF parameters.
    """
    if suite not in SUITES:
        raise ValueError(f"Unsupported cipher suite: {suite}")
    if suite == SUITE_LEGACY_CBC:
        return _seal_legacy(bytes(plaintext), passphrase)

    kdf.validate()
    salt = os.urandom(_SALT_LEN)
    nonce = os.urandom(_NONCE_LEN)
    key = _derive_key(passphrase, salt, kdf)
    header = {
        "magic": _b64e(MAGIC),
        "v": V1,
        "suite": suite,
        "kdf": "scrypt",
        "salt": _b64e(salt),
        "n": kdf.n,
        "r": kdf.r,
        "p": kdf.p,
        "nonce": _b64e(nonce),
    }
    framed = _pack_header(header)
    aad = framed[2:]
    ct = _aead_for(suite, key).encrypt(nonce, bytes(plaintext), aad)
    return framed + ct


def unseal(blob: bytes, passphrase: str) -> bytes:
    """Decrypt a blob produced by `seal`.

    Raises:
        AuthError: Wrong passphrase, corrupt/tampered blob or unknown header.
    """
    if not blob:
        return b""
    if blob.startswith(_OPENSSL_MAGIC):
        return _unseal_legacy(blob, passphrase)

    header, aad, ct = _unpack_header(blob)
    try:
        if _b64d(str(header["magic"])) != MAGIC:
            raise AuthError("Bad magic")
        version = int(header["v"])
        suite = str(header["suite"])
        kdf_name = str(header["kdf"])
        salt = _b64d(str(header["salt"]))
        nonce = _b64d(str(header["nonce"]))
        kdf = KdfParams(n=int(header["n"]), r=int(header["r"]), p=int(header["p"]))
    except AuthError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise AuthError(f"Invalid header: {type(exc).__name__}") from exc

    if version != V1:
        raise AuthError(f"Unsupported envelope version: {version}")
    if suite not in AEAD_SUITES or kdf_name != "scrypt":
        raise AuthError("Unsupported or inconsistent header parameters")
    if len(salt) != _SALT_LEN or len(nonce) != _NONCE_LEN or len(ct) < _TAG_LEN:
        raise AuthError("Unsupported or inconsistent header parameters")
    try:
        kdf.validate()
    except ValueError as exc:
        raise AuthError("Invalid KDF parameters") from exc

    key = _derive_key(passphrase, salt, kdf)
    try:
        return _aead_for(suite, key).decrypt(nonce, ct, aad)
    except InvalidTag as exc:
        raise AuthError("Cannot open envelope") from exc
