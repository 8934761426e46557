# src/bigfib/config.py
"""
Profiles are TOML files in <workspace>/profiles, named by their file stem.

An optional [_PROFILE_] table carries a one-line description; every other table
is handed to the runtime unchanged. The profile last picked with --profile is
remembered in profiles/.current.
"""
from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bigfib.dispatch import Thresholds
from bigfib.utility import UserInputError
from bigfib.workspace import ensure_workspace_seeded, workspace_dir

META_TABLE = "_PROFILE_"
NO_DESCRIPTION = "(no description)"


@dataclass
class Settings:
    name: str
    description: str
    data: dict[str, Any]


def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _read_profile(path: Path) -> tuple[dict[str, Any], str]:
    """Parse one profile into (settings without the meta table, description)."""
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as e:
        # tomllib puts the "(at line L, column C)" location in the message
        raise UserInputError(f"reading {path.name}: {e}.") from None

    meta = data.pop(META_TABLE, None)
    description = meta.get("description", "") if isinstance(meta, dict) else ""
    return data, " ".join(str(description).split()) or NO_DESCRIPTION


def _validate(data: dict[str, Any], path: Path) -> None:
    try:
        Thresholds.from_section(data.get("THRESHOLDS", {}))
    except UserInputError as e:
        raise UserInputError(f"{path.name}: {e}") from None

    for section, key, lowest in (("BEHAVIOUR", "MAX_DIGITS", 0), ("BENCHMARK", "REPEAT", 1)):
        table = data.get(section, {})
        if not isinstance(table, dict):
            raise UserInputError(f"{path.name}: [{section}] must be a table.")
        val = table.get(key, lowest)
        if isinstance(val, bool) or not isinstance(val, int) or val < lowest:
            raise UserInputError(f"{path.name}: {section}.{key} must be an integer >= {lowest}, got {val!r}.")


def list_all_profiles() -> list[str]:
    ensure_workspace_seeded()
    return sorted(p.stem for p in _profiles_dir().glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """(name, description) for every profile; one that fails to parse is still listed."""
    items = []
    for name in list_all_profiles():
        try:
            _, description = _read_profile(_profiles_dir() / f"{name}.toml")
        except UserInputError:
            description = "(unreadable profile)"
        items.append((name, description))
    return items


def has_profile(name: str) -> bool:
    return (_profiles_dir() / f"{name}.toml").is_file()


def load_settings(name: str | None = None) -> Settings:
    """Read and validate a profile; no name means 'default'."""
    name = name or "default"
    path = _profiles_dir() / f"{name}.toml"
    if not path.is_file():
        raise UserInputError(f"Profile '{name}' not found at {path}")

    data, description = _read_profile(path)
    _validate(data, path)
    return Settings(name=name, description=description, data=data)


def _current_profile_path() -> Path:
    p = _profiles_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s.removesuffix(".toml") or None


def write_current_profile(name: str) -> None:
    _current_profile_path().write_text(name.strip().removesuffix(".toml"), encoding="utf-8")
