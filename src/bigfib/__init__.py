from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("bigfib")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .dispatch import DEFAULT_THRESHOLDS, Thresholds, evaluate, fibonacci, select_algorithm
from .registry import discover, get_algorithm
from .runtime import APPLY, CFG
from .utility import UserInputError, highest_bit_position
from .verify import cross_check, reference
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "DEFAULT_THRESHOLDS",
    "Thresholds",
    "UserInputError",
    "__version__",
    "cross_check",
    "discover",
    "evaluate",
    "fibonacci",
    "get_algorithm",
    "has_profile",
    "highest_bit_position",
    "load_settings",
    "read_current_profile",
    "reference",
    "select_algorithm",
    "workspace_dir",
]
