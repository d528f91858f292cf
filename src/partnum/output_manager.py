# output_manager.py
from __future__ import annotations

import os

from partnum.fmt import strip_ansi
from partnum.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str | os.PathLike) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(os.fspath(workspace_root), path))


def validate_output_setting(output_file: str | None) -> str | None:
    """
    None / "" => screen only; "dir/" => per-query files; "file.txt" => append.
    Returns the normalized setting or raises ValueError.
    """
    if output_file is None:
        return None
    s = output_file.strip()
    if not s:
        return ""
    name = os.path.basename(s.rstrip("/\\"))
    if s.endswith(("/", "\\")) or s in (".", "./"):
        return s
    if name.lower().endswith((".toml", ".py")):
        raise ValueError(f"refusing to write results into '{name}'")
    return s


class OutputManager:
    """
    Handles all printing/output, including to screen and/or file.

    Usage:
        # Split mode (one file per query, e.g. results/P1000.txt, or per
        # named report, e.g. results/check.txt with name="check"):
        om = OutputManager(output_file="results/", number=1000)
        om.write("Hello")   # prints and buffers; file written on close()
        om.close()

        # Single file (append all runs to one file):
        om = OutputManager(output_file="results/all.txt")
        om.write("Hello")   # prints and appends
        om.close()
    """

    def __init__(
        self,
        output_file: str | None = None,
        quiet: bool = False,
        number: int | None = None,
        name: str | None = None,
    ):
        self.quiet = quiet
        self.output_file = output_file or ""
        self.number = number
        self.name = name
        self._buffer: list[str] = []
        self._closed = False

        self._mode: str = "none"     # "none" | "split" | "single"
        self._split_path: str | None = None
        self._single_path: str | None = None

        if self.output_file in (".", "./") or self.output_file.endswith(("/", "\\")):
            if number is None and not name:
                raise ValueError("A number or a name must be provided when outputting to a directory.")
            directory = resolve_output_path(self.output_file, workspace_dir())
            os.makedirs(directory, exist_ok=True)
            self._mode = "split"
            stem = f"P{number}" if number is not None else name
            self._split_path = os.path.join(directory, f"{stem}.txt")

        elif self.output_file:
            path = resolve_output_path(self.output_file, workspace_dir())
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._mode = "single"
            self._single_path = path

    @property
    def mode(self) -> str:
        return self._mode

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        if self._mode == "single" and self._single_path:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))
        # split mode writes once, on close()

    def getvalue(self) -> str:
        """Returns everything written (with color codes)."""
        return "".join(self._buffer)

    def close(self) -> None:
        """Flush buffered output to the per-query file (split mode) or add a separator (single mode)."""
        if self._closed or not self._buffer:
            return
        self._closed = True
        if self._mode == "split" and self._split_path:
            with open(self._split_path, "w", encoding="utf-8") as fh:
                fh.write(strip_ansi("".join(self._buffer)))
        elif self._mode == "single" and self._single_path:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write("\n")  # one empty line between runs

    def __enter__(self) -> OutputManager:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
