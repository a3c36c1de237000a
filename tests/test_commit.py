# Tests for the backup-then-atomic-replace commit
#
# Coverage:
#   - First commit creates a private directory and a 0600 database
#   - Later commits snapshot the previous bytes into the .bak slot
#   - No temporary files survive success or failure
#   - A crash after the backup and before the final move keeps the old database
#   - A failed backup aborts before any new ciphertext is written

import os
import stat
from pathlib import Path

import pytest

import cipherkeep.store.mutation as mutation
from cipherkeep.security.encryption.envelope import unseal
from cipherkeep.store import backup_path, commit

from conftest import posix_only


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


def _leftovers(directory):
    return sorted(p.name for p in Path(directory).iterdir() if p.name.endswith(".tmp"))


class TestCommit:
    @posix_only
    def test_first_commit_is_private(self, store_path, fast_kdf):
        commit(store_path, b"a:1\n", "pw", kdf=fast_kdf)

        assert _mode(store_path) == 0o600
        assert _mode(store_path.parent) == 0o700
        assert not backup_path(store_path).exists()
        assert unseal(store_path.read_bytes(), "pw") == b"a:1\n"

    def test_second_commit_snapshots_previous_bytes(self, store_path, fast_kdf):
        commit(store_path, b"a:1\n", "pw", kdf=fast_kdf)
        first = store_path.read_bytes()
        commit(store_path, b"a:2\n", "pw", kdf=fast_kdf)

        bak = backup_path(store_path)
        assert bak.read_bytes() == first
        assert unseal(store_path.read_bytes(), "pw") == b"a:2\n"
        if os.name != "nt":
            assert _mode(bak) == 0o600

    def test_no_temp_files_left(self, store_path, fast_kdf):
        for i in range(3):
            commit(store_path, f"a:{i}\n".encode(), "pw", kdf=fast_kdf)
        assert _leftovers(store_path.parent) == []
        assert sorted(p.name for p in store_path.parent.iterdir()) == ["store.ck", "store.ck.bak"]

    def test_backup_suffix_is_configurable(self, store_path, fast_kdf):
        commit(store_path, b"a:1\n", "pw", kdf=fast_kdf, backup_suffix=".old")
        commit(store_path, b"a:2\n", "pw", kdf=fast_kdf, backup_suffix=".old")
        assert store_path.with_name("store.ck.old").exists()


class TestInterruptedCommit:
    def test_crash_before_final_move_keeps_original(self, store_path, fast_kdf, monkeypatch):
        commit(store_path, b"keep:me\n", "pw", kdf=fast_kdf)
        original = store_path.read_bytes()
        real_replace = os.replace

        def replace_fails_on_database(src, dst):
            if Path(dst) == store_path:
                raise OSError("simulated crash")
            return real_replace(src, dst)

        monkeypatch.setattr(mutation.os, "replace", replace_fails_on_database)
        with pytest.raises(OSError, match="simulated crash"):
            commit(store_path, b"lost:update\n", "pw", kdf=fast_kdf)

        assert store_path.read_bytes() == original
        assert unseal(store_path.read_bytes(), "pw") == b"keep:me\n"
        assert backup_path(store_path).read_bytes() == original
        assert _leftovers(store_path.parent) == []

    def test_failed_backup_writes_nothing(self, store_path, fast_kdf, monkeypatch):
        commit(store_path, b"keep:me\n", "pw", kdf=fast_kdf)
        original = store_path.read_bytes()

        def no_backup(path, suffix=".bak"):
            raise OSError("backup disk full")

        monkeypatch.setattr(mutation, "snapshot", no_backup)
        with pytest.raises(OSError, match="backup disk full"):
            commit(store_path, b"new:data\n", "pw", kdf=fast_kdf)

        assert store_path.read_bytes() == original
        assert _leftovers(store_path.parent) == []
