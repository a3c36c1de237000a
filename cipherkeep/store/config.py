#!/usr/bin/env python3
# cipherkeep/store/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only, Python 3.11+).

Precedence (low → high):
  1) Built-in defaults
  2) Files in the user config dir (~/.config/cipherkeep), then in CWD:
     .env, config.ini, config.json, config.toml
  3) Environment variables prefixed CIPHERKEEP_ (e.g. CIPHERKEEP_STORE_PATH)

Validation:
  - STORE_PATH / HISTORY_FILE_PATH: normalized paths (no creation here)
  - LOG_FILE_PATH: None or normalized path
  - CIPHER: one of the envelope suites
  - PASSWORD_LENGTH: int >= 8
  - SCRYPT_N: power of two > 1; SCRYPT_R / SCRYPT_P: int >= 1
  - LOG_LEVEL: None or one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - ENABLE_COMPLETION: bool
  - EDITOR / CLIPBOARD_COMMAND: None or str
  - CLIPBOARD_TIMEOUT: int >= 1
"""

from dataclasses import dataclass, field
from typing import Any, Mapping
from pathlib import Path
import configparser
import json
import os
import re
import tomllib

from cipherkeep.security import default_store_root
from cipherkeep.security.encryption.envelope import DEFAULT_SUITE, SUITES, KdfParams

ENV_PREFIX = "CIPHERKEEP_"

# ---------- defaults ----------


def _default_config_dir() -> Path:
    if os.name == "nt":
        return default_store_root()
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "cipherkeep"


DEFAULTS: dict[str, Any] = {
    "STORE_PATH": str(default_store_root() / "store.ck"),
    "CIPHER": DEFAULT_SUITE,          # 'aes-256-gcm', 'chacha20poly1305', 'aes-256-cbc'
    "PASSWORD_LENGTH": 24,
    "SCRYPT_N": 2**14,                # CPU/memory cost parameter for scrypt
    "SCRYPT_R": 8,                    # block size parameter for scrypt
    "SCRYPT_P": 1,                    # parallelization parameter for scrypt
    "LOG_LEVEL": None,                # 'DEBUG'/'INFO'/'WARNING'/'ERROR'/'CRITICAL'
    "LOG_FILE_PATH": None,
    "HISTORY_FILE_PATH": str(default_store_root() / "history"),
    "ENABLE_COMPLETION": True,
    "EDITOR": None,                   # falls back to $VISUAL / $EDITOR / vi
    "CLIPBOARD_COMMAND": None,        # autodetected when unset
    "CLIPBOARD_TIMEOUT": 5,
}


# ---------- data model ----------

@dataclass(frozen=True)
class AppConfig:
    store_path: Path
    history_file_path: Path
    log_file_path: Path | None

    cipher: str
    password_length: int
    kdf: KdfParams

    log_level: str | None
    enable_completion: bool
    editor: str | None
    clipboard_command: str | None
    clipboard_timeout: int

    # Unrecognized keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        out[k] = v
    return out


def _load_ini_file(path: Path) -> dict[str, str]:
    cfg = configparser.ConfigParser()
    try:
        cfg.read(path, encoding="utf-8")
    except FileNotFoundError:
        return {}
    flat: dict[str, str] = {}
    for sec in cfg.sections():
        for k, v in cfg.items(sec):
            flat[k.upper()] = v
    return flat


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return {}


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'scrypt': {'n': 32768}} -> {'SCRYPT_N': 32768}
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _find_config_files(config_dir: Path | None = None) -> list[Path]:
    dirs = [config_dir or _default_config_dir(), Path.cwd()]
    names = (".env", "config.ini", "config.json", "config.toml")
    return [d / n for d in dirs for n in names]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ValueError(f"Expected boolean, got: {val!r}")


def _as_int(val: Any) -> int:
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    try:
        return int(str(val).strip())
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Expected integer, got: {val!r}") from exc


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_log_level(val: Any) -> str | None:
    lv = _as_opt_str(val)
    if lv is None:
        return None
    up = lv.upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ValueError(
            f"LOG_LEVEL must be one of {sorted(allowed)}, got {lv!r}")
    return up


def _as_cipher(val: Any) -> str:
    suite = (_as_opt_str(val) or DEFAULT_SUITE).strip().lower()
    if suite not in SUITES:
        raise ValueError(f"CIPHER must be one of {sorted(SUITES)}, got {suite!r}")
    return suite


def _as_path(val: Any) -> Path:
    s = str(val)
    # expand both ~ and env vars
    s = os.path.expandvars(os.path.expanduser(s))
    return Path(s).resolve()


def _as_opt_path(val: Any) -> Path | None:
    v = _as_opt_str(val)
    return None if v is None else _as_path(v)


# ---------- merge & load ----------

def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _merge_sources(
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(config_dir):
        if file.name == ".env":
            merged.update(_normalize_keys(_load_env_file(file)))
        elif file.suffix == ".ini":
            merged.update(_normalize_keys(_load_ini_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_toml_file(file))))

    # Environment variables override all; only CIPHERKEEP_-prefixed keys
    env = os.environ if environ is None else environ
    env_overrides = {k[len(ENV_PREFIX):]: v for k, v in env.items()
                     if k.startswith(ENV_PREFIX)}
    merged.update(_normalize_keys(env_overrides))
    return merged


# ---------- validation ----------

def _validate_and_build(config: dict[str, Any]) -> AppConfig:
    store_path = _as_path(config.get("STORE_PATH", DEFAULTS["STORE_PATH"]))
    history_file_path = _as_path(config.get(
        "HISTORY_FILE_PATH", DEFAULTS["HISTORY_FILE_PATH"]))
    log_file_path = _as_opt_path(config.get(
        "LOG_FILE_PATH", DEFAULTS["LOG_FILE_PATH"]))

    cipher = _as_cipher(config.get("CIPHER", DEFAULTS["CIPHER"]))
    password_length = _as_int(config.get(
        "PASSWORD_LENGTH", DEFAULTS["PASSWORD_LENGTH"]))
    kdf = KdfParams(
        n=_as_int(config.get("SCRYPT_N", DEFAULTS["SCRYPT_N"])),
        r=_as_int(config.get("SCRYPT_R", DEFAULTS["SCRYPT_R"])),
        p=_as_int(config.get("SCRYPT_P", DEFAULTS["SCRYPT_P"])),
    )
    log_level = _as_log_level(config.get("LOG_LEVEL", DEFAULTS["LOG_LEVEL"]))
    enable_completion = _as_bool(config.get(
        "ENABLE_COMPLETION", DEFAULTS["ENABLE_COMPLETION"]))
    editor = _as_opt_str(config.get("EDITOR", DEFAULTS["EDITOR"]))
    clipboard_command = _as_opt_str(config.get(
        "CLIPBOARD_COMMAND", DEFAULTS["CLIPBOARD_COMMAND"]))
    clipboard_timeout = _as_int(config.get(
        "CLIPBOARD_TIMEOUT", DEFAULTS["CLIPBOARD_TIMEOUT"]))

    # --- constraints (no filesystem creation here) ---
    if password_length < 8:
        raise ValueError("PASSWORD_LENGTH must be >= 8")
    if clipboard_timeout < 1:
        raise ValueError("CLIPBOARD_TIMEOUT must be >= 1")
    try:
        kdf.validate()
    except ValueError as exc:
        raise ValueError(f"SCRYPT_N/R/P invalid: {exc}") from exc
    if store_path.exists() and store_path.is_dir():
        raise ValueError(f"STORE_PATH points to a directory: {store_path}")

    recognized = set(DEFAULTS.keys())
    extra = {k: v for k, v in config.items() if k not in recognized}

    return AppConfig(
        store_path=store_path,
        history_file_path=history_file_path,
        log_file_path=log_file_path,
        cipher=cipher,
        password_length=password_length,
        kdf=kdf,
        log_level=log_level,
        enable_completion=enable_completion,
        editor=editor,
        clipboard_command=clipboard_command,
        clipboard_timeout=clipboard_timeout,
        extra=extra,
    )


# ---------- public API ----------

def load_config(
    *,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load, merge, normalize, and validate configuration.
    No filesystem side-effects (no directory creation).
    """
    raw = _merge_sources(config_dir, environ)
    return _validate_and_build(raw)
