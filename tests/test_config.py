# Tests for configuration loading (defaults, files, environment overrides)

import pytest

from cipherkeep.security.encryption.envelope import KdfParams
from cipherkeep.store import load_config


@pytest.fixture
def cfg_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    d = tmp_path / "cfg"
    d.mkdir()
    return d


class TestDefaults:
    def test_defaults(self, cfg_dir):
        config = load_config(config_dir=cfg_dir, environ={})
        assert config.cipher == "aes-256-gcm"
        assert config.password_length == 24
        assert config.kdf == KdfParams()
        assert config.store_path.name == "store.ck"
        assert config.log_file_path is None
        assert config.enable_completion is True
        assert config.clipboard_timeout == 5


class TestSources:
    def test_environment_overrides(self, cfg_dir, tmp_path):
        config = load_config(config_dir=cfg_dir, environ={
            "CIPHERKEEP_STORE_PATH": str(tmp_path / "x" / "db.ck"),
            "CIPHERKEEP_CIPHER": "ChaCha20Poly1305",
            "CIPHERKEEP_ENABLE_COMPLETION": "off",
            "UNRELATED": "ignored",
        })
        assert config.store_path == (tmp_path / "x" / "db.ck").resolve()
        assert config.cipher == "chacha20poly1305"
        assert config.enable_completion is False
        assert "UNRELATED" not in config.extra

    def test_dotenv_file(self, cfg_dir):
        (cfg_dir / ".env").write_text('PASSWORD_LENGTH=32\nEDITOR="nano -w"\n# comment\n')
        config = load_config(config_dir=cfg_dir, environ={})
        assert config.password_length == 32
        assert config.editor == "nano -w"

    def test_toml_nested_keys_flatten(self, cfg_dir):
        (cfg_dir / "config.toml").write_text("[scrypt]\nn = 32768\nr = 4\n")
        config = load_config(config_dir=cfg_dir, environ={})
        assert config.kdf == KdfParams(n=32768, r=4, p=1)

    def test_ini_sections_flatten(self, cfg_dir):
        (cfg_dir / "config.ini").write_text("[clipboard]\nclipboard_timeout = 9\n")
        config = load_config(config_dir=cfg_dir, environ={})
        assert config.clipboard_timeout == 9

    def test_environment_beats_files(self, cfg_dir):
        (cfg_dir / "config.json").write_text('{"PASSWORD_LENGTH": 40}')
        config = load_config(config_dir=cfg_dir, environ={"CIPHERKEEP_PASSWORD_LENGTH": "12"})
        assert config.password_length == 12

    def test_cwd_beats_config_dir(self, cfg_dir, tmp_path):
        (cfg_dir / "config.json").write_text('{"PASSWORD_LENGTH": 40}')
        (tmp_path / "config.json").write_text('{"PASSWORD_LENGTH": 50}')
        assert load_config(config_dir=cfg_dir, environ={}).password_length == 50

    def test_unknown_keys_preserved(self, cfg_dir):
        config = load_config(config_dir=cfg_dir, environ={"CIPHERKEEP_FUTURE_KNOB": "1"})
        assert config.extra == {"FUTURE_KNOB": "1"}


class TestValidation:
    @pytest.mark.parametrize("env", [
        {"CIPHERKEEP_PASSWORD_LENGTH": "7"},
        {"CIPHERKEEP_PASSWORD_LENGTH": "many"},
        {"CIPHERKEEP_CIPHER": "des"},
        {"CIPHERKEEP_SCRYPT_N": "1000"},
        {"CIPHERKEEP_SCRYPT_R": "0"},
        {"CIPHERKEEP_SCRYPT_N": str(2**21)},
        {"CIPHERKEEP_SCRYPT_R": "33"},
        {"CIPHERKEEP_SCRYPT_P": "17"},
        {"CIPHERKEEP_LOG_LEVEL": "LOUD"},
        {"CIPHERKEEP_CLIPBOARD_TIMEOUT": "0"},
        {"CIPHERKEEP_ENABLE_COMPLETION": "maybe"},
    ])
    def test_invalid_values(self, cfg_dir, env):
        with pytest.raises(ValueError):
            load_config(config_dir=cfg_dir, environ=env)

    def test_store_path_must_not_be_directory(self, cfg_dir, tmp_path):
        with pytest.raises(ValueError, match="directory"):
            load_config(config_dir=cfg_dir, environ={"CIPHERKEEP_STORE_PATH": str(tmp_path)})

    def test_scrypt_bounds_match_what_open_accepts(self, cfg_dir):
        config = load_config(
            config_dir=cfg_dir,
            environ={"CIPHERKEEP_SCRYPT_N": str(2**20), "CIPHERKEEP_SCRYPT_R": "32", "CIPHERKEEP_SCRYPT_P": "16"},
        )
        assert config.kdf == KdfParams(n=2**20, r=32, p=16)

        with pytest.raises(ValueError, match="SCRYPT_N/R/P invalid"):
            load_config(config_dir=cfg_dir, environ={"CIPHERKEEP_SCRYPT_R": "33"})
