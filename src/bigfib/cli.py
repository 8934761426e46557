# src/bigfib/cli.py

"""
bigfib - exact Fibonacci numbers of any size

Description:
    Prints F(n) for an integer index n, choosing the fastest of several
    big-integer algorithms for the size of n. Also benchmarks the algorithms
    and re-measures the crossover points used to choose between them.

usage: see bigfib -h
"""

from __future__ import annotations

import argparse
import contextlib
import faulthandler
import os
import re
import sys
import textwrap
import threading
import traceback
from importlib.resources import files as pkg_files
from time import perf_counter

from colorama import Fore, Style
from colorama import init as colorama_init

import bigfib.config as CONFIG
from bigfib import __version__ as _ver
from bigfib.bench import calibrate, compare
from bigfib.dispatch import Thresholds, evaluate, fibonacci, resolve_backend, select_algorithm
from bigfib.fmt import format_duration, format_value, label
from bigfib.output_manager import OutputManager
from bigfib.registry import discover
from bigfib.runtime import APPLY, CFG
from bigfib.runtime import current as _rt_current
from bigfib.runtime import debug as _debug
from bigfib.utility import UserInputError, dec_digits, flatten_dotted, sync_int_str_limit
from bigfib.verify import cross_check, reference
from bigfib.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = ("init", "where", "list", "profiles", "bench", "calibrate", "check")

_INDEX_RE = re.compile(r"^([+-]?\d+)(?:(e|\*\*|\^)(\d+))?$", re.IGNORECASE)


def _install_debug_hooks() -> None:
    """With --debug, native crashes and exceptions in any thread print a full traceback."""
    with contextlib.suppress(AttributeError, ValueError, OSError):
        faulthandler.enable()  # needs stderr to be a real file

    def _report(where: str, exc_type, exc, tb) -> None:
        print(f"\n{Fore.RED}[crash in {where}]{Style.RESET_ALL}", file=sys.stderr)
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)

    def _main_hook(exc_type, exc, tb):
        _report("main thread", exc_type, exc, tb)

    def _thread_hook(args):
        name = args.thread.name if args.thread is not None else "thread"
        _report(name, args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = _main_hook
    threading.excepthook = _thread_hook


def _print_user_error(msg: str) -> None:
    if not msg.startswith("Invalid input:"):
        msg = f"{Fore.RED}Error:{Style.RESET_ALL} {msg}"
    print(msg, file=sys.stderr)


def parse_index(text: str) -> int:
    """
    Parse an index: plain integers (with optional _ or , separators) and the
    shorthands 1e7, 10**7 and 10^7.
    """
    s = text.strip().replace("_", "").replace(",", "")
    m = _INDEX_RE.match(s)
    if not m:
        raise UserInputError(f"Invalid input: '{text}' is not an integer index.")
    base, op, exp = m.groups()
    if op is None:
        return int(base)
    if op.lower() == "e":
        return int(base) * 10 ** int(exp)
    return int(base) ** int(exp)


def _parse_sizes(items: list[str]) -> list[int]:
    if items:
        return [parse_index(s) for s in items]
    sizes = CFG("BENCHMARK.SIZES", [100, 1_000, 10_000, 100_000])
    if not isinstance(sizes, list) or not all(isinstance(v, int) for v in sizes):
        raise UserInputError("BENCHMARK.SIZES must be a list of integers.")
    return sizes


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace and copy packaged profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable BIGFIB_DEV=1.
          Replaces the workspace profiles with the packaged ones.

      where
          Show the workspace and package paths.

      list
          List the algorithms and the index range each one serves.

      profiles
          List profiles with their descriptions.

      bench [N ...]
          Time every algorithm at the given indices (default: BENCHMARK.SIZES).

      calibrate
          Re-measure the dispatch crossovers on this machine.

      check N
          Evaluate F(N) with every algorithm that supports N and compare each
          result with gmpy2.fib.
    """)

    p = argparse.ArgumentParser(
        prog="bigfib",
        description="bigfib: exact Fibonacci numbers of any size",
        usage=(
            "bigfib N [--full | --digits] [--algorithm NAME] [--backend NAME] [--verify]\n"
            "              [--profile NAME] [--output OUTPUT] [--quiet] [--debug]\n"
            "       bigfib {init,where,list,profiles,bench,calibrate,check} ...\n"
            "       bigfib -h | --help\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="N | command",
                   help="index of the Fibonacci number, or a command")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    p.add_argument("--profile", default=None, help="Profile to apply (remembered for later runs)")
    p.add_argument("--algorithm", default=None, help="Force one algorithm instead of automatic selection")
    p.add_argument("--backend", default=None, choices=("int", "gmpy2"),
                   help="Integer type used during evaluation (default: ARITHMETIC.BACKEND)")
    shape = p.add_mutually_exclusive_group()
    shape.add_argument("--full", action="store_true", help="Print every digit (guarded by BEHAVIOUR.MAX_DIGITS)")
    shape.add_argument("--digits", action="store_true", help="Print only the number of decimal digits")
    p.add_argument("--verify", action="store_true", help="Cross-check the result against gmpy2.fib")
    p.add_argument("--output", default=None, help="Write results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output")
    p.add_argument("--debug", action="store_true", help="Show algorithm choice, timings and tracebacks")

    return p


def main(argv=None) -> int:
    """Exit codes: 0 ok, 2 bad input or profile, 130 interrupted, 1 anything else."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in (argv if argv is not None else sys.argv):
            raise
        print(f"{Fore.RED}Internal error:{Style.RESET_ALL} {type(e).__name__}: {e}", file=sys.stderr)
        print("Rerun with --debug for the traceback.", file=sys.stderr)
        return 1


def _apply_profile(explicit: str | None) -> str:
    """Apply --profile (and remember it), else the remembered profile, else 'default'."""
    if explicit:
        if not CONFIG.has_profile(explicit):
            raise UserInputError(
                f"unknown profile '{explicit}'. Available: {', '.join(CONFIG.list_all_profiles())}"
            )
        name = explicit
        CONFIG.write_current_profile(name)
    else:
        last = CONFIG.read_current_profile()
        name = last if last and CONFIG.has_profile(last) else "default"

    if CONFIG.has_profile(name):
        APPLY(CONFIG.load_settings(name))
    return name


# ---- commands ----

def _cmd_init(items: list[str]) -> int:
    if len(items) > 1 and items[1] == "overwrite":
        if os.environ.get("BIGFIB_DEV") != "1":
            print("Refusing to overwrite: set BIGFIB_DEV=1 to enable developer overwrite.")
            return 2
        ws, copied = seed_workspace(overwrite=True)
        print(f"Workspace ready at: {ws} (overwrote existing files)")
    else:
        ws, _, copied = ensure_workspace_seeded()
        print(f"Workspace ready at: {ws}")
    print(f"Copied -> profiles: {copied}")
    return 0


def _cmd_where() -> int:
    print(f"Workspace: {workspace_dir()}")
    print(f"Package:   {pkg_files('bigfib')}")
    return 0


def _cmd_list() -> int:
    idx = discover()
    th = Thresholds.from_config()
    regions = {
        "table": "n <= 92",
        "series": f"92 < n <= {th.series_max}",
        "blenkinsop": f"{th.series_max} < n <= {th.blenkinsop_max}",
        "takahashi": f"n > {th.blenkinsop_max}",
    }
    width = max(len(n) for n in idx.names())
    for name in idx.names():
        region = regions.get(name, "benchmark only") if name in idx.dispatchable else "benchmark only"
        print(f"{label(name.ljust(width))}  {idx.complexity[name]:<32} {Fore.CYAN}{region}{Style.RESET_ALL}")
        print(f"{' ' * width}  {idx.descriptions[name]}")
    return 0


def _cmd_profiles() -> int:
    active = _rt_current().profile_name
    for name, desc in CONFIG.list_profiles_with_descriptions():
        mark = f"{Fore.GREEN}*{Style.RESET_ALL}" if name == active else " "
        print(f"{mark} {label(name)}: {desc}")
    return 0


def _cmd_bench(items: list[str], args) -> int:
    sizes = _parse_sizes(items[1:])
    names = [args.algorithm] if args.algorithm else None
    rows = compare(sizes, names, backend=args.backend, progress=not args.quiet)

    best: dict[int, float] = {}
    for r in rows:
        best[r.n] = min(best.get(r.n, r.seconds), r.seconds)

    print(f"{'n':>12}  {'algorithm':<12} {'time':>12}")
    for r in rows:
        tag = f" {Fore.GREEN}fastest{Style.RESET_ALL}" if r.seconds == best[r.n] else ""
        print(f"{r.n:>12}  {r.algorithm:<12} {format_duration(r.seconds):>12}{tag}")
    return 0


def _cmd_calibrate(args) -> int:
    before = Thresholds.from_config()
    t0 = perf_counter()
    th = calibrate(backend=args.backend, progress=not args.quiet)
    print(f"Measured in {format_duration(perf_counter() - t0)}; profile '{_rt_current().profile_name}' uses "
          f"SERIES_MAX = {before.series_max}, BLENKINSOP_MAX = {before.blenkinsop_max}.")
    print("Suggested profile section:\n")
    print("[THRESHOLDS]")
    print(f"SERIES_MAX = {th.series_max}")
    print(f"BLENKINSOP_MAX = {th.blenkinsop_max}")
    return 0


def _cmd_check(n: int, args) -> int:
    names = [args.algorithm] if args.algorithm else None
    report = cross_check(n, names, num=resolve_backend(args.backend))
    for name, value in report.results.items():
        if value == report.expected:
            print(f"{Fore.GREEN}ok{Style.RESET_ALL}        {name}")
        else:
            print(f"{Fore.RED}MISMATCH{Style.RESET_ALL}  {name}")
    for name in report.skipped:
        print(f"{Fore.YELLOW}skipped{Style.RESET_ALL}   {name} (n out of range)")
    return 0 if report.ok else 1


def _cmd_compute(n: int, args) -> int:
    thresholds = Thresholds.from_config()
    name = args.algorithm.strip().lower() if args.algorithm else select_algorithm(n, thresholds)
    resolve_backend(args.backend)  # fail early on a bad profile backend

    _debug(f"profile={_rt_current().profile_name} thresholds={thresholds}")
    _debug(f"n={n} algorithm={name} backend={args.backend or CFG('ARITHMETIC.BACKEND', 'int')}")

    t0 = perf_counter()
    if args.algorithm:
        value = evaluate(name, n, backend=args.backend)
    else:
        value = fibonacci(n, thresholds=thresholds, backend=args.backend)
    elapsed = perf_counter() - t0
    _debug(f"evaluated in {format_duration(elapsed)}")

    digits = dec_digits(value)
    status = 0
    with OutputManager(output_file=args.output, quiet=args.quiet, n=n) as om:
        if args.digits:
            om.write(f"{label(f'F({n})')} has {digits} decimal digits")
        else:
            om.write(f"{label(f'F({n})')} = {format_value(value, full=args.full)}")
            if not args.full:
                om.write_screen(f"{Fore.CYAN}{digits} digits, {name}, {format_duration(elapsed)}{Style.RESET_ALL}")

        if args.verify:
            if value == reference(n):
                om.write(f"{Fore.GREEN}verified{Style.RESET_ALL} against gmpy2.fib")
            else:
                om.write(f"{Fore.RED}MISMATCH{Style.RESET_ALL} against gmpy2.fib")
                status = 1
    return status


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)
    if args.debug:
        _install_debug_hooks()

    ensure_workspace_seeded()
    profile_name = _apply_profile(args.profile)
    rt.debug = rt.debug or bool(args.debug)
    sync_int_str_limit()

    if args.debug:
        _debug(f"workspace {workspace_dir()}")
        for key, val in flatten_dotted(rt.settings).items():
            _debug(f"{profile_name}: {key} = {val!r}")

    items = args.items
    if not items:
        parser.print_help()
        return 0

    cmd = items[0].lower()
    if cmd == "init":
        return _cmd_init(items)
    if cmd == "where":
        return _cmd_where()
    if cmd == "list":
        return _cmd_list()
    if cmd == "profiles":
        return _cmd_profiles()
    if cmd == "bench":
        return _cmd_bench(items, args)
    if cmd == "calibrate":
        return _cmd_calibrate(args)
    if cmd == "check":
        if len(items) != 2:
            raise UserInputError("usage: bigfib check N")
        return _cmd_check(parse_index(items[1]), args)

    if len(items) > 1:
        raise UserInputError(f"expected one index, got {len(items)} arguments. Commands: {', '.join(COMMANDS)}.")
    return _cmd_compute(parse_index(items[0]), args)


if __name__ == "__main__":
    raise SystemExit(main())
