"""
Shared pytest fixtures for the cipherkeep test suite.

  - Cheap scrypt parameters so every seal/unseal stays fast.
  - A store path inside tmp_path (directory not yet created).
  - A scripted, echo-free prompt and in-memory clipboard for shell tests.
"""

import logging
import os

import pytest

from cipherkeep.context import AppContext
from cipherkeep.errors import ClipboardUnavailable
from cipherkeep.security.encryption.envelope import KdfParams
from cipherkeep.session import Session
from cipherkeep.store import CredentialStore, load_config

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")


# ── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers a boot test attached to the package logger."""
    yield
    logger = logging.getLogger("cipherkeep")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def fast_kdf():
    return KdfParams(n=2**10, r=8, p=1)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "vault" / "store.ck"


@pytest.fixture
def session():
    with Session() as s:
        yield s


@pytest.fixture
def store(store_path, session, fast_kdf):
    return CredentialStore(store_path, session, kdf=fast_kdf)


class ScriptedPrompt:
    """Stands in for getpass: returns queued answers, records the labels asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def queue(self, *answers):
        self.answers.extend(answers)

    def __call__(self, label):
        self.asked.append(label)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {label!r}")
        return self.answers.pop(0)


class FakeClipboard:
    def __init__(self, available=True):
        self.available = available
        self.command = ["fake-clip"] if available else None
        self.copied = []

    def copy(self, text):
        if not self.available:
            raise ClipboardUnavailable("No clipboard utility found.")
        self.copied.append(text)


@pytest.fixture
def config(tmp_path, monkeypatch, store_path):
    monkeypatch.chdir(tmp_path)
    return load_config(
        config_dir=tmp_path / "cfg",
        environ={
            "CIPHERKEEP_STORE_PATH": str(store_path),
            "CIPHERKEEP_HISTORY_FILE_PATH": str(store_path.parent / "history"),
            "CIPHERKEEP_SCRYPT_N": "1024",
            "CIPHERKEEP_PASSWORD_LENGTH": "20",
        },
    )


@pytest.fixture
def ctx(config, session, fast_kdf):
    store = CredentialStore(config.store_path, session, suite=config.cipher, kdf=fast_kdf)
    return AppContext(
        config=config,
        session=session,
        store=store,
        prompt=ScriptedPrompt(),
        clipboard=FakeClipboard(),
        editor=None,
    )
