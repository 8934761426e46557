# src/bigfib/runtime.py
"""
Per-context view of the active profile.

The CLI applies a profile once; library code reads it through CFG("SECTION.KEY").
Threads started without a copied context see an empty runtime, so every lookup
falls back to its built-in default.
"""
from __future__ import annotations

import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from colorama import Fore, Style

if TYPE_CHECKING:
    from bigfib.config import Settings


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False

    def apply(self, settings: Settings | dict[str, Any]) -> None:
        """Replace the active settings; a plain dict is treated as an unnamed profile."""
        if isinstance(settings, dict):
            self.profile_name, data = "default", settings
        else:
            self.profile_name, data = settings.name, settings.data
        self.settings = dict(data)

        flag = self.get("BEHAVIOUR.DEBUG")
        if isinstance(flag, bool):
            self.debug = flag

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self.settings
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


_current_runtime: ContextVar[Runtime | None] = ContextVar("bigfib_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset() -> None:
    """Drop the runtime of the current context; the next current() starts from defaults."""
    _current_runtime.set(None)


def APPLY(settings: Settings | dict[str, Any]) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def debug(msg: str) -> None:
    if current().debug:
        print(f"{Fore.CYAN}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)
