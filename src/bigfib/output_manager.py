# src/bigfib/output_manager.py
"""
Where the result of one ``bigfib N`` run goes.

``--output`` accepts:
    (nothing)          screen only
    "." or "./"        <workspace>/output/F_<n>.txt
    "some/dir/"        some/dir/F_<n>.txt (relative paths are under the workspace)
    "some/file.txt"    appended to, one blank line between runs
Files never receive ANSI colour codes.
"""
from __future__ import annotations

import os

from bigfib.fmt import strip_ansi
from bigfib.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str) -> str:
    """Expand '~' and anchor relative paths at the workspace."""
    if not path:
        raise ValueError("Output path is empty")
    path = os.path.expanduser(path)
    return os.path.normpath(path if os.path.isabs(path) else os.path.join(workspace_root, path))


def split_filename(n: int, ext: str = ".txt") -> str:
    return f"F_{n}{ext}"


class OutputManager:
    def __init__(self, output_file: str | None = None, quiet: bool = False, n: int | None = None):
        self.quiet = quiet
        self._lines: list[str] = []
        self._closed = False
        self._append = False
        self._path: str | None = None

        target = output_file or ""
        if not target:
            return
        workspace = str(workspace_dir())
        if target in (".", "./") or target.endswith(("/", os.sep)):
            if n is None:
                raise ValueError("An index must be provided when writing to a directory.")
            directory = resolve_output_path("output" if target in (".", "./") else target, workspace)
            os.makedirs(directory, exist_ok=True)
            self._path = os.path.join(directory, split_filename(n))
        else:
            self._path = resolve_output_path(target, workspace)
            self._append = True
            os.makedirs(os.path.dirname(self._path), exist_ok=True)

    @property
    def path(self) -> str | None:
        return self._path

    def write(self, *args, sep: str = " ") -> None:
        """One line to the screen (unless quiet) and to the file, if any."""
        line = sep.join(str(a) for a in args)
        self._lines.append(strip_ansi(line))
        if not self.quiet:
            print(line)
        if self._append:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(line) + "\n")

    def write_screen(self, *args, sep: str = " ") -> None:
        """Screen-only line, e.g. timing that should not end up in result files."""
        if not self.quiet:
            print(*args, sep=sep, flush=True)

    def getvalue(self) -> str:
        """Everything written so far, without colour codes."""
        return "".join(line + "\n" for line in self._lines)

    def close(self) -> None:
        """Write the per-index file, or the blank separator line of an appended file."""
        if self._closed or not self._lines or self._path is None:
            return
        self._closed = True
        if self._append:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write("\n")
        else:
            with open(self._path, "w", encoding="utf-8") as fh:
                fh.write(self.getvalue())

    def __enter__(self) -> OutputManager:
        return self

    def __exit__(self, *exc) -> bool:
        self.close()
        return False
