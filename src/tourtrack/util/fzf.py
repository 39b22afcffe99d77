# tourtrack/util/fzf.py
"""
Interactive GPX file selection with `fzf`

fzf is fed "<file name>\t<full path>" lines and only the name column is
shown and searched; the full path comes back in the selected lines.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which
from typing import Optional, Sequence

from tourtrack.errors import FzfNotFoundError, SelectionError

# 1: nothing matched, 130: user pressed Esc / Ctrl-C
_EMPTY_SELECTION_CODES = (1, 130)


def list_gpx_candidates(track_root: Path) -> list[Path]:
    """All *.gpx files under `track_root`, sorted."""
    if not track_root.is_dir():
        return []
    return sorted(p for p in track_root.rglob("*.gpx") if p.is_file())


def _fzf_command(header: str, multi: bool, preview: Optional[str]) -> list[str]:
    cmd = ["fzf", "--delimiter=\t", "--with-nth=1", "--nth=1",
           "--layout=reverse", "--height=60%", "--border", "--header", header]
    if multi:
        cmd.append("--multi")
    if preview:
        cmd += ["--preview", preview, "--preview-window", "right:60%:wrap"]
    return cmd


def _selected_paths(stdout: bytes) -> list[Path]:
    paths = []
    for line in stdout.decode().splitlines():
        if not line.strip():
            continue
        _, _, full = line.strip().partition("\t")
        paths.append(Path(full or line.strip()).expanduser().resolve())
    return paths


def fzf_select_paths(
        paths: Sequence[Path], *,
        header: str,
        multi: bool = True,
        preview: Optional[str] = None,
) -> list[Path]:
    """
    Let the user pick GPX files by name; returns resolved full paths.

    An aborted or empty selection returns an empty list.

    Raises:
      FzfNotFoundError if fzf is not installed
      SelectionError if fzf exits with an unexpected status
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    listing = "".join(f"{p.name}\t{p}\n" for p in paths)
    proc = subprocess.run(
        _fzf_command(header, multi, preview),
        input=listing.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    if proc.returncode in _EMPTY_SELECTION_CODES:
        return []
    if proc.returncode != 0:
        raise SelectionError(f"fzf failed: {proc.stderr.decode(errors='replace')}")
    return _selected_paths(proc.stdout)
