"""
TourTrack configuration loader

This module centralizes *all* configuration handling for TourTrack.

Design goals:
- Keep the CLI Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/tourtrack/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by the CLI)
2) Environment variables (TOURTRACK_*)
3) User config: ~/.config/tourtrack/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Recognized keys:

    [paths]
    track_root = "~/Tours/gpx"        # where GPX files are selected from

    [sync]
    mode = "scaled"                   # "scaled" or "elapsed"
    truncate_after_video = true       # drop samples recorded after video end

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` otherwise.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from tourtrack.analyze.sync import SYNC_MODES
from tourtrack.errors import ConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.

    Missing config files are normal. Malformed ones indicate user intent
    and fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "paths.track_root")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v).expanduser()
    return None


def _as_bool(v: Any) -> Optional[bool]:
    """
    Coerce loosely-typed config values into booleans.

    Accepts common truthy / falsy representations so that TOML values and
    environment variables behave the same. Returns None when the value
    cannot be interpreted.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    return None


def _as_mode(v: Any, origin: str) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip().lower()
    if s not in SYNC_MODES:
        raise ConfigError(f"Invalid sync.mode {v!r} from {origin} (expected one of {SYNC_MODES})")
    return s


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_track_root() -> Path:
    return Path.home() / "Tours" / "gpx"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SyncConfig:
    """
    Defaults for video synchronization.
    """

    mode: str = "scaled"
    truncate_after_video: bool = True


@dataclass(frozen=True)
class TourTrackConfig:
    """
    Fully merged TourTrack configuration.

    Attributes:
    - track_root: directory GPX files are selected from
    - sync: synchronization defaults
    - source: provenance map showing where each value came from
    """

    track_root: Path
    sync: SyncConfig
    source: dict[str, str]


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
ENV_MAP = {
    "TOURTRACK_TRACK_ROOT": "paths.track_root",
    "TOURTRACK_SYNC_MODE": "sync.mode",
    "TOURTRACK_SYNC_TRUNCATE": "sync.truncate_after_video",
}


def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> TourTrackConfig:
    """
    Load, merge, and normalize all TourTrack configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path.cwd())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "tourtrack" / "config.toml"

    # Defaults
    track_root = default_track_root()
    mode = "scaled"
    truncate = True

    src = {
        "paths.track_root": "default",
        "sync.mode": "default",
        "sync.truncate_after_video": "default",
    }

    # Repo config, then user config (user overrides repo)
    layers = (
        ("repo", repo_config_path, _load_toml(repo_config_path) if repo_config_path else {}),
        ("user", user_config_path, _load_toml(user_config_path) if user_config_path else {}),
    )
    for label, path, cfg in layers:
        origin = f"{label}:{path}"

        v_path = _as_path(_deep_get(cfg, "paths.track_root"))
        if v_path is not None:
            track_root = v_path
            src["paths.track_root"] = origin

        v_mode = _as_mode(_deep_get(cfg, "sync.mode"), origin)
        if v_mode is not None:
            mode = v_mode
            src["sync.mode"] = origin

        raw_trunc = _deep_get(cfg, "sync.truncate_after_video")
        v_trunc = _as_bool(raw_trunc)
        if raw_trunc is not None and v_trunc is None:
            raise ConfigError(f"Invalid boolean {raw_trunc!r} for sync.truncate_after_video from {origin}")
        if v_trunc is not None:
            truncate = v_trunc
            src["sync.truncate_after_video"] = origin

    # Environment variable overrides (highest non-CLI precedence)
    for env, key in ENV_MAP.items():
        val = os.environ.get(env)
        if not val:
            continue
        origin = f"env:{env}"
        if key == "paths.track_root":
            track_root = Path(val).expanduser()
        elif key == "sync.mode":
            mode = _as_mode(val, origin)
        elif key == "sync.truncate_after_video":
            b = _as_bool(val)
            if b is None:
                raise ConfigError(f"Invalid boolean {val!r} from {origin}")
            truncate = b
        src[key] = origin

    return TourTrackConfig(
        track_root=track_root.expanduser(),
        sync=SyncConfig(mode=mode, truncate_after_video=truncate),
        source=src,
    )
