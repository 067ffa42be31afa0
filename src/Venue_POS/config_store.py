"""
Venue_POS.config_store

Centralized configuration for the POS install.

Responsibilities:
- Persist install config to a JSON file (one per device)
- Provide helpers for:
    - sync server URL, interval and request timeout
    - storage backend / data directory
    - id mode (uuid for multi-device, sequential for a single till)
    - pull policy for server reference data
    - receipt header/footer texts

The config file defaults to src/Venue_POS/config/pos_config.json and can be
moved with the VENUE_POS_CONFIG environment variable.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse


# ---------------------------------------------------------------------------
# Paths & constants
# ---------------------------------------------------------------------------

_BASE_DIR = Path(__file__).resolve().parent
_CONFIG_DIR = _BASE_DIR / "config"
_CONFIG_FILE = _CONFIG_DIR / "pos_config.json"

CONFIG_ENV_VAR = "VENUE_POS_CONFIG"

_VALID_BACKENDS = {"sqlite", "json", "memory"}
_VALID_ID_MODES = {"uuid", "sequential"}
_VALID_PULL_POLICIES = {"overwrite", "keep_pending"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}

_MIN_INTERVAL = 1.0
_MIN_TIMEOUT = 0.5


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class AppConfig:
    """
    Top-level config structure.

    Stored as JSON at: src/Venue_POS/config/pos_config.json
    """
    # Empty = local-only install, no sync worker
    api_base_url: str = ""
    sync_interval_seconds: float = 10.0
    request_timeout_seconds: float = 5.0

    storage_backend: str = "sqlite"
    data_dir: str = ""          # empty = next to the data package

    id_mode: str = "uuid"
    pull_policy: str = "overwrite"

    # Receipt texts
    org_name: str = "Чистый пруд"
    org_subtitle: str = "Территория отдыха"
    footer_text: str = "Спасибо за посещение!"

    log_level: str = "INFO"
    log_file: bool = False

    @property
    def sync_enabled(self) -> bool:
        return bool(self.api_base_url)


# ---------------------------------------------------------------------------
# Internal helpers for JSON I/O
# ---------------------------------------------------------------------------


def config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path)
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return _CONFIG_FILE


def _read_raw_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            return data
        return {}
    except (OSError, ValueError):
        # If config is corrupted, start fresh
        return {}


def _write_raw_config(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)


def _float_or(value: Any, default: float, floor: float) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if num != num:  # NaN
        return default
    return max(floor, num)


def _choice_or(value: Any, valid: set, default: str) -> str:
    text = str(value or "").strip()
    return text if text in valid else default


def _from_raw_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Convert dict -> AppConfig, applying defaults if keys are missing or bad.
    """
    base = AppConfig()
    return AppConfig(
        api_base_url=str(raw.get("api_base_url", "") or "").strip(),
        sync_interval_seconds=_float_or(
            raw.get("sync_interval_seconds"), base.sync_interval_seconds, _MIN_INTERVAL
        ),
        request_timeout_seconds=_float_or(
            raw.get("request_timeout_seconds"), base.request_timeout_seconds, _MIN_TIMEOUT
        ),
        storage_backend=_choice_or(raw.get("storage_backend"), _VALID_BACKENDS, base.storage_backend),
        data_dir=str(raw.get("data_dir", "") or ""),
        id_mode=_choice_or(raw.get("id_mode"), _VALID_ID_MODES, base.id_mode),
        pull_policy=_choice_or(raw.get("pull_policy"), _VALID_PULL_POLICIES, base.pull_policy),
        org_name=str(raw.get("org_name") or base.org_name),
        org_subtitle=str(raw.get("org_subtitle", base.org_subtitle) or ""),
        footer_text=str(raw.get("footer_text", base.footer_text) or ""),
        log_level=_choice_or(str(raw.get("log_level") or "").upper(), _VALID_LOG_LEVELS, base.log_level),
        log_file=bool(raw.get("log_file", False)),
    )


# ---------------------------------------------------------------------------
# Public config API
# ---------------------------------------------------------------------------


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load config from JSON. Missing or corrupt file -> defaults.
    """
    return _from_raw_config(_read_raw_config(config_path(path)))


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> None:
    """
    Persist the entire config to disk.
    """
    _write_raw_config(config_path(path), asdict(cfg))


# --- Sync --------------------------------------------------------------


def validate_base_url(url: str) -> bool:
    """
    http(s) URL with a host. Empty is allowed (means: sync off).
    """
    if not url:
        return True
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def set_api_base_url(url: str, path: Optional[Path] = None) -> None:
    cleaned = (url or "").strip().rstrip("/")
    if not validate_base_url(cleaned):
        raise ValueError(f"Invalid sync server URL: {url!r}")
    cfg = load_config(path)
    cfg.api_base_url = cleaned
    save_config(cfg, path)


def set_sync_interval(seconds: float, path: Optional[Path] = None) -> None:
    if seconds < _MIN_INTERVAL:
        raise ValueError(f"Sync interval must be at least {_MIN_INTERVAL} seconds")
    cfg = load_config(path)
    cfg.sync_interval_seconds = float(seconds)
    save_config(cfg, path)


def set_request_timeout(seconds: float, path: Optional[Path] = None) -> None:
    if seconds < _MIN_TIMEOUT:
        raise ValueError(f"Request timeout must be at least {_MIN_TIMEOUT} seconds")
    cfg = load_config(path)
    cfg.request_timeout_seconds = float(seconds)
    save_config(cfg, path)


# --- Storage / ids ---------------------------------------------------------


def set_storage_backend(backend: str, data_dir: str = "", path: Optional[Path] = None) -> None:
    name = (backend or "").strip().lower()
    if name not in _VALID_BACKENDS:
        raise ValueError(f"Unknown storage backend: {backend!r}")
    cfg = load_config(path)
    cfg.storage_backend = name
    cfg.data_dir = data_dir or ""
    save_config(cfg, path)


def set_id_mode(mode: str, path: Optional[Path] = None) -> None:
    name = (mode or "").strip().lower()
    if name not in _VALID_ID_MODES:
        raise ValueError(f"Unknown id mode: {mode!r}")
    cfg = load_config(path)
    cfg.id_mode = name
    save_config(cfg, path)


def set_pull_policy(policy: str, path: Optional[Path] = None) -> None:
    name = (policy or "").strip().lower()
    if name not in _VALID_PULL_POLICIES:
        raise ValueError(f"Unknown pull policy: {policy!r}")
    cfg = load_config(path)
    cfg.pull_policy = name
    save_config(cfg, path)


# --- Receipt texts ---------------------------------------------------------


def set_org_details(
    org_name: Optional[str] = None,
    org_subtitle: Optional[str] = None,
    footer_text: Optional[str] = None,
    path: Optional[Path] = None,
) -> None:
    cfg = load_config(path)
    if org_name is not None:
        if not org_name.strip():
            raise ValueError("Organization name cannot be empty")
        cfg.org_name = org_name.strip()
    if org_subtitle is not None:
        cfg.org_subtitle = org_subtitle.strip()
    if footer_text is not None:
        cfg.footer_text = footer_text.strip()
    save_config(cfg, path)
