from pathlib import Path

import pytest

from tourtrack.config import load_config
from tourtrack.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("TOURTRACK_TRACK_ROOT", "TOURTRACK_SYNC_MODE", "TOURTRACK_SYNC_TRUNCATE"):
        monkeypatch.delenv(var, raising=False)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_config(tmp_path):
    cfg = load_config(
        repo_root=tmp_path,
        repo_config_path=tmp_path / "none.toml",
        user_config_path=tmp_path / "also_none.toml",
    )
    assert cfg.track_root == Path.home() / "Tours" / "gpx"
    assert cfg.sync.mode == "scaled"
    assert cfg.sync.truncate_after_video is True
    assert set(cfg.source.values()) == {"default"}


def test_user_config_overrides_repo_config(tmp_path):
    repo = write(tmp_path / "repo" / "config" / "config.toml",
                 '[paths]\ntrack_root = "/data/repo"\n[sync]\nmode = "elapsed"\n')
    user = write(tmp_path / "user.toml",
                 '[paths]\ntrack_root = "/data/user"\n')

    cfg = load_config(repo_root=tmp_path / "repo", repo_config_path=repo, user_config_path=user)

    assert cfg.track_root == Path("/data/user")
    assert cfg.sync.mode == "elapsed"
    assert cfg.source["paths.track_root"] == f"user:{user}"
    assert cfg.source["sync.mode"] == f"repo:{repo}"


def test_env_overrides_files(tmp_path, monkeypatch):
    user = write(tmp_path / "user.toml", '[sync]\ntruncate_after_video = true\nmode = "scaled"\n')
    monkeypatch.setenv("TOURTRACK_SYNC_TRUNCATE", "off")
    monkeypatch.setenv("TOURTRACK_SYNC_MODE", "Elapsed")
    monkeypatch.setenv("TOURTRACK_TRACK_ROOT", str(tmp_path / "tracks"))

    cfg = load_config(repo_root=tmp_path, repo_config_path=None, user_config_path=user)

    assert cfg.sync.truncate_after_video is False
    assert cfg.sync.mode == "elapsed"
    assert cfg.track_root == tmp_path / "tracks"
    assert cfg.source["sync.truncate_after_video"] == "env:TOURTRACK_SYNC_TRUNCATE"


def test_malformed_toml_fails_loudly(tmp_path):
    user = write(tmp_path / "user.toml", "[sync\nmode = ")
    with pytest.raises(ConfigError, match="Failed to parse TOML"):
        load_config(repo_root=tmp_path, repo_config_path=None, user_config_path=user)


def test_unknown_sync_mode(tmp_path):
    user = write(tmp_path / "user.toml", '[sync]\nmode = "warp"\n')
    with pytest.raises(ConfigError, match="Invalid sync.mode"):
        load_config(repo_root=tmp_path, repo_config_path=None, user_config_path=user)


def test_bad_boolean_in_config_file(tmp_path):
    user = write(tmp_path / "user.toml", '[sync]\ntruncate_after_video = "maybe"\n')
    with pytest.raises(ConfigError, match="Invalid boolean"):
        load_config(repo_root=tmp_path, repo_config_path=None, user_config_path=user)


def test_bad_boolean_in_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TOURTRACK_SYNC_TRUNCATE", "maybe")
    with pytest.raises(ConfigError):
        load_config(repo_root=tmp_path, repo_config_path=None, user_config_path=tmp_path / "x.toml")
