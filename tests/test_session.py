# Tests for the interactive Session (passphrase cache)

import pytest

from cipherkeep.errors import AuthError, BadPassphrase, ConfirmationMismatch, SessionLocked
from cipherkeep.session import Session, SessionState

from conftest import ScriptedPrompt


class TestLifecycle:
    def test_starts_locked(self):
        s = Session()
        assert s.state is SessionState.LOCKED
        with pytest.raises(SessionLocked):
            s.passphrase

    def test_unlock_then_lock_zeroes_buffer(self):
        s = Session()
        s.unlock("pässword")
        assert s.passphrase == "pässword"
        buffer = s._secret
        s.lock()
        assert s.state is SessionState.LOCKED
        assert set(buffer) == {0}

    def test_empty_passphrase_rejected(self):
        with pytest.raises(ValueError):
            Session().unlock("")

    def test_context_manager_locks_on_exit(self):
        with Session() as s:
            s.unlock("pw")
        assert not s.is_unlocked

    def test_repr_does_not_leak(self):
        s = Session()
        s.unlock("supersecret")
        assert "supersecret" not in repr(s)


class TestEstablish:
    def test_new_database_asks_twice(self):
        prompt = ScriptedPrompt("pw", "pw")
        s = Session()
        s.ensure_unlocked(prompt, new_database=True)
        assert prompt.asked == ["Master passphrase: ", "Confirm passphrase: "]
        assert s.passphrase == "pw"

    def test_existing_database_asks_once(self):
        prompt = ScriptedPrompt("pw")
        s = Session()
        s.ensure_unlocked(prompt, new_database=False)
        assert prompt.asked == ["Master passphrase: "]

    def test_cached_passphrase_is_reused(self):
        prompt = ScriptedPrompt()
        s = Session()
        s.unlock("pw")
        s.ensure_unlocked(prompt, new_database=True)
        assert prompt.asked == []

    def test_confirmation_mismatch_stays_locked(self):
        s = Session()
        with pytest.raises(ConfirmationMismatch):
            s.establish(ScriptedPrompt("one", "two"), confirm=True)
        assert not s.is_unlocked


class TestGuard:
    def test_auth_error_locks(self):
        s = Session()
        s.unlock("pw")
        with pytest.raises(BadPassphrase):
            with s.guard():
                raise BadPassphrase()
        assert not s.is_unlocked

    def test_plain_auth_error_locks(self):
        s = Session()
        s.unlock("pw")
        with pytest.raises(AuthError):
            with s.guard():
                raise AuthError("tampered")
        assert not s.is_unlocked

    def test_other_errors_keep_session(self):
        s = Session()
        s.unlock("pw")
        with pytest.raises(RuntimeError):
            with s.guard():
                raise RuntimeError("unrelated")
        assert s.is_unlocked
