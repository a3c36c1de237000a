# Tests for the passphrase-sealed envelope
#
# Coverage:
#   - Seal/unseal round trip per suite, empty plaintext and empty blob
#   - Fresh salt and nonce on every seal
#   - Wrong passphrase, tampering and truncation fail closed with AuthError
#   - Header bounds (scrypt cost) and unsupported versions
#   - Legacy aes-256-cbc blobs in the OpenSSL `enc -pbkdf2` layout

import hashlib
import json
import os
import struct

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherkeep.errors import AuthError
from cipherkeep.security.encryption.envelope import (
    SUITE_AES_GCM,
    SUITE_CHACHA,
    SUITE_LEGACY_CBC,
    KdfParams,
    detect_suite,
    seal,
    unseal,
)


def _rewrite_header(blob, **changes):
    (hlen,) = struct.unpack(">H", blob[:2])
    header = json.loads(blob[2:2 + hlen])
    header.update(changes)
    hbytes = json.dumps(header, separators=(",", ":"), sort_keys=True).encode()
    return struct.pack(">H", len(hbytes)) + hbytes + blob[2 + hlen:]


class TestRoundTrip:
    @pytest.mark.parametrize("suite", [SUITE_AES_GCM, SUITE_CHACHA, SUITE_LEGACY_CBC])
    def test_each_suite_opens_what_it_sealed(self, suite, fast_kdf):
        blob = seal(b"github:hunter2\n", "correct horse", suite=suite, kdf=fast_kdf)
        assert unseal(blob, "correct horse") == b"github:hunter2\n"
        assert detect_suite(blob) == suite

    def test_empty_plaintext_still_authenticated(self, fast_kdf):
        blob = seal(b"", "pw", kdf=fast_kdf)
        assert blob != b""
        assert unseal(blob, "pw") == b""
        with pytest.raises(AuthError):
            unseal(blob, "other")

    def test_empty_blob_is_empty_store(self):
        assert unseal(b"", "anything") == b""
        assert detect_suite(b"") is None

    def test_fresh_salt_and_nonce_each_time(self, fast_kdf):
        a = seal(b"same", "pw", kdf=fast_kdf)
        b = seal(b"same", "pw", kdf=fast_kdf)
        assert a != b

    def test_kdf_parameters_recorded_in_header(self):
        blob = seal(b"x", "pw", kdf=KdfParams(n=2**11, r=4, p=2))
        (hlen,) = struct.unpack(">H", blob[:2])
        header = json.loads(blob[2:2 + hlen])
        assert (header["n"], header["r"], header["p"]) == (2**11, 4, 2)
        assert header["suite"] == SUITE_AES_GCM
        assert unseal(blob, "pw") == b"x"


class TestFailClosed:
    @pytest.mark.parametrize("suite", [SUITE_AES_GCM, SUITE_CHACHA])
    def test_wrong_passphrase(self, suite, fast_kdf):
        blob = seal(b"a:b\n", "right", suite=suite, kdf=fast_kdf)
        with pytest.raises(AuthError):
            unseal(blob, "wrong")

    def test_flipped_ciphertext_byte(self, fast_kdf):
        blob = bytearray(seal(b"a:b\n", "pw", kdf=fast_kdf))
        blob[-1] ^= 0x01
        with pytest.raises(AuthError):
            unseal(bytes(blob), "pw")

    def test_header_is_authenticated(self, fast_kdf):
        blob = seal(b"a:b\n", "pw", kdf=fast_kdf)
        # same suite, cosmetic change in the AAD
        tampered = _rewrite_header(blob, extra="x")
        with pytest.raises(AuthError):
            unseal(tampered, "pw")

    @pytest.mark.parametrize("cut", [1, 3, 40])
    def test_truncated(self, cut, fast_kdf):
        blob = seal(b"a:b\n", "pw", kdf=fast_kdf)
        with pytest.raises(AuthError):
            unseal(blob[:cut], "pw")

    def test_garbage(self):
        with pytest.raises(AuthError):
            unseal(os.urandom(64), "pw")

    def test_excessive_scrypt_cost_rejected_before_derivation(self, fast_kdf):
        blob = _rewrite_header(seal(b"a:b\n", "pw", kdf=fast_kdf), n=2**24)
        with pytest.raises(AuthError):
            unseal(blob, "pw")

    def test_unknown_version(self, fast_kdf):
        blob = _rewrite_header(seal(b"a:b\n", "pw", kdf=fast_kdf), v=2)
        with pytest.raises(AuthError):
            unseal(blob, "pw")


class TestSealArguments:
    def test_unknown_suite(self):
        with pytest.raises(ValueError):
            seal(b"x", "pw", suite="rot13")

    def test_invalid_kdf(self):
        with pytest.raises(ValueError):
            seal(b"x", "pw", kdf=KdfParams(n=1000))

    @pytest.mark.parametrize("kdf", [
        KdfParams(n=2**21),
        KdfParams(r=33),
        KdfParams(p=17),
    ])
    def test_cost_beyond_what_open_accepts(self, kdf):
        with pytest.raises(ValueError, match="out of range"):
            seal(b"x", "pw", kdf=kdf)

    def test_upper_bounds_round_trip(self):
        kdf = KdfParams(n=2**10, r=32, p=16)
        assert unseal(seal(b"a:b\n", "pw", kdf=kdf), "pw") == b"a:b\n"


class TestLegacyCbc:
    def test_layout_matches_openssl(self):
        blob = seal(b"x:y\n", "pw", suite=SUITE_LEGACY_CBC)
        assert blob.startswith(b"Salted__")
        assert (len(blob) - 16) % 16 == 0

    def test_opens_blob_built_like_openssl_enc(self):
        salt = os.urandom(8)
        material = hashlib.pbkdf2_hmac("sha256", b"pw", salt, 10_000, dklen=48)
        padder = padding.PKCS7(128).padder()
        padded = padder.update(b"mail:secret\n") + padder.finalize()
        enc = Cipher(algorithms.AES(material[:32]), modes.CBC(material[32:])).encryptor()
        blob = b"Salted__" + salt + enc.update(padded) + enc.finalize()

        assert unseal(blob, "pw") == b"mail:secret\n"

    def test_truncated_legacy(self):
        with pytest.raises(AuthError):
            unseal(b"Salted__1234", "pw")
