# src/bigfib/registry.py
from __future__ import annotations

import inspect
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import import_module
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

from bigfib.utility import UserInputError

# --------------------- Discovery → Index (immutable) ----------------------


@dataclass
class Index:
    funcs: dict[str, Callable]                 # algorithm name -> func
    descriptions: dict[str, str]               # name -> short description
    complexity: dict[str, str]                 # name -> cost note, e.g. "O(log n) mul"
    modules: dict[str, str]                    # name -> defining module
    dispatchable: frozenset[str] = frozenset()  # names the dispatcher may select
    limits: dict[str, int] = field(default_factory=dict)  # name -> largest supported n

    def names(self) -> list[str]:
        return list(self.funcs)


def _is_algorithm(obj) -> bool:
    return callable(obj) and getattr(obj, "__is_algorithm__", False)


def _collect_from_module(mod) -> list[Callable[..., object]]:
    out = []
    for _, o in inspect.getmembers(mod):
        if _is_algorithm(o) and o.__module__ == mod.__name__:
            out.append(o)
    return out


# ---------- Decorator (only tags the function; no side effects) ----------


def algorithm(*, name: str, description: str = "", complexity: str = "",
              rank: int = 100, dispatchable: bool = True, limit: int | None = None):
    def deco(fn: Callable[..., object]):
        fn.__is_algorithm__ = True
        fn.algorithm_name = name
        fn.description = description
        fn.complexity = complexity
        fn.rank = int(rank)
        fn.dispatchable = bool(dispatchable)
        if limit is not None:
            fn.limit = int(limit)
        return fn
    return deco


@lru_cache(maxsize=1)
def discover() -> Index:
    """Import every module of bigfib.algorithms and index the tagged evaluators by rank."""
    found: list[Callable[..., object]] = []

    pkg_dir = pkg_files("bigfib") / "algorithms"
    with as_file(pkg_dir) as real:
        for file in sorted(Path(real).glob("*.py")):
            if file.name == "__init__.py":
                continue
            mod = import_module(f"bigfib.algorithms.{file.stem}")
            found.extend(_collect_from_module(mod))

    found.sort(key=lambda fn: (fn.rank, fn.algorithm_name))

    funcs: OrderedDict[str, Callable[..., object]] = OrderedDict()
    desc: dict[str, str] = {}
    cost: dict[str, str] = {}
    mods: dict[str, str] = {}
    limits: dict[str, int] = {}
    dispatch: set[str] = set()

    for fn in found:
        name = fn.algorithm_name
        if name in funcs:
            raise RuntimeError(
                f"algorithm name '{name}' defined twice: {mods[name]} and {fn.__module__}"
            )
        funcs[name] = fn
        desc[name] = fn.description
        cost[name] = fn.complexity
        mods[name] = fn.__module__
        lim = getattr(fn, "limit", None)
        if isinstance(lim, int):
            limits[name] = lim
        if fn.dispatchable:
            dispatch.add(name)

    return Index(
        funcs=funcs,
        descriptions=desc,
        complexity=cost,
        modules=mods,
        dispatchable=frozenset(dispatch),
        limits=limits,
    )


def get_algorithm(name: str) -> Callable[..., object]:
    """Resolve an algorithm by name (case-insensitive)."""
    idx = discover()
    key = (name or "").strip().lower()
    fn = idx.funcs.get(key)
    if fn is None:
        raise UserInputError(
            f"unknown algorithm '{name}'. Known: {', '.join(idx.names())}."
        )
    return fn
