# src/bigfib/workspace.py
"""The user workspace: editable profiles and the output/ directory used by ``--output .``."""
from __future__ import annotations

import os
import shutil
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

SUBDIRS = ("profiles", "output")


def workspace_dir() -> Path:
    """$BIGFIB_HOME, or ~/Documents/Bigfib."""
    home = os.environ.get("BIGFIB_HOME")
    root = Path(home).expanduser() if home else Path.home() / "Documents" / "Bigfib"
    return root.resolve()


def seed_workspace(*, overwrite: bool = False) -> tuple[Path, int]:
    """
    Create the workspace and copy the packaged *.toml profiles into it.

    Profiles already present are kept unless overwrite is set (the CLI allows that
    only with BIGFIB_DEV=1). Returns (workspace, number of profiles copied).
    """
    root = workspace_dir()
    for sub in SUBDIRS:
        (root / sub).mkdir(parents=True, exist_ok=True)

    copied = 0
    with as_file(pkg_files("bigfib") / "profiles") as packaged:
        for src in sorted(Path(packaged).glob("*.toml")):
            dst = root / "profiles" / src.name
            if overwrite or not dst.exists():
                shutil.copy2(src, dst)
                copied += 1
    return root, copied


def ensure_workspace_seeded() -> tuple[Path, bool, int]:
    """seed_workspace() without overwriting; also says whether anything was new."""
    root, copied = seed_workspace()
    return root, copied > 0, copied
