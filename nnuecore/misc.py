"""Engine identification, debug statistics, I/O logging and command-line paths."""

from __future__ import annotations

import datetime
import os
import platform
import sys
import threading
from dataclasses import dataclass
from typing import IO, Optional, Sequence

ENGINE_NAME = "NNUECore"
ENGINE_AUTHORS = "the NNUECore developers (see AUTHORS file)"
VERSION = ""

_MONTHS = "Jan Feb Mar Apr May Jun Jul Aug Sep Oct Nov Dec".split()


def engine_info(
    to_uci: bool = False,
    version: str = VERSION,
    build_date: Optional[datetime.date] = None,
) -> str:
    """Return the full engine name.

    With an empty version the build date is appended as DDMMYY.
    """
    text = f"{ENGINE_NAME} {version}"
    if not version:
        date = build_date or datetime.date.today()
        text += f"{date.day:02d}{date.month:02d}{date.year % 100:02d}"
    text += "\nid author " if to_uci else " by "
    return text + ENGINE_AUTHORS


def compiler_info() -> str:
    """Describe the interpreter and platform the engine runs on."""
    implementation = platform.python_implementation()
    system = platform.system() or "unknown system"
    bits = " 64bit" if sys.maxsize > 2**32 else " 32bit"
    lines = [
        "",
        f"Compiled by {implementation} {platform.python_version()} on {system}",
        f"Compilation settings include: {bits}" + ("" if __debug__ is False else " DEBUG"),
        f"__VERSION__ macro expands to: {sys.version.splitlines()[0]}",
        "",
    ]
    return "\n".join(lines)


class DebugStats:
    """Thread-safe counters for hit rates and running means."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total_hits = 0
        self.hits = 0
        self.total_means = 0
        self.mean_sum = 0

    def hit_on(self, b: bool, condition: bool = True) -> None:
        """Count one trial, and a hit if ``b``; ignored unless ``condition``."""
        if not condition:
            return
        with self._lock:
            self.total_hits += 1
            if b:
                self.hits += 1

    def mean_of(self, v: int) -> None:
        """Add a sample to the running mean."""
        with self._lock:
            self.total_means += 1
            self.mean_sum += v

    def report(self) -> list[str]:
        """Return the report lines for the collected statistics."""
        with self._lock:
            lines = []
            if self.total_hits:
                rate = 100 * self.hits // self.total_hits
                lines.append(
                    f"Total {self.total_hits} Hits {self.hits} hit rate (%) {rate}"
                )
            if self.total_means:
                lines.append(
                    f"Total {self.total_means} Mean {self.mean_sum / self.total_means}"
                )
            return lines


_stats = DebugStats()


def dbg_hit_on(b: bool, condition: bool = True) -> None:
    """Record a hit trial in the global statistics."""
    _stats.hit_on(b, condition)


def dbg_mean_of(v: int) -> None:
    """Record a sample in the global running mean."""
    _stats.mean_of(v)


def dbg_print(stream: Optional[IO[str]] = None) -> None:
    """Write the global statistics report, by default to standard error."""
    out = stream if stream is not None else sys.stderr
    for line in _stats.report():
        out.write(line + "\n")
    out.flush()


class _Logger:
    """Mirrors standard input and output into a log file."""

    def __init__(self) -> None:
        self.file: Optional[IO[str]] = None
        self.last = "\n"
        self.lock = threading.Lock()
        self.original_in: Optional[IO[str]] = None
        self.original_out: Optional[IO[str]] = None

    def log(self, text: str, prefix: str) -> None:
        if not text or self.file is None:
            return
        with self.lock:
            for line in text.splitlines(keepends=True):
                if self.last == "\n":
                    self.file.write(prefix)
                self.file.write(line)
                self.last = line[-1]

    def start(self, fname: str) -> None:
        if fname and self.file is None:
            try:
                self.file = open(fname, "w", encoding="utf-8")
            except OSError:
                sys.stderr.write(f"Unable to open debug log file {fname}\n")
                sys.stderr.flush()
                raise SystemExit(1)
            self.last = "\n"
            self.original_in = sys.stdin
            self.original_out = sys.stdout
            sys.stdin = _TeeIn(self.original_in, self)
            sys.stdout = _TeeOut(self.original_out, self)
        elif not fname and self.file is not None:
            sys.stdout = self.original_out
            sys.stdin = self.original_in
            self.file.close()
            self.file = None


class _TeeOut:
    def __init__(self, stream: IO[str], logger: _Logger) -> None:
        self._stream = stream
        self._logger = logger

    def write(self, text: str) -> int:
        written = self._stream.write(text)
        self._logger.log(text, "<< ")
        return written

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        if self._logger.file is not None:
            self._logger.file.flush()
        self._stream.flush()

    def __getattr__(self, name: str):
        return getattr(self._stream, name)


class _TeeIn:
    def __init__(self, stream: IO[str], logger: _Logger) -> None:
        self._stream = stream
        self._logger = logger

    def read(self, size: int = -1) -> str:
        text = self._stream.read(size)
        self._logger.log(text, ">> ")
        return text

    def readline(self, size: int = -1) -> str:
        text = self._stream.readline(size)
        self._logger.log(text, ">> ")
        return text

    def __iter__(self):
        return self

    def __next__(self) -> str:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    def __getattr__(self, name: str):
        return getattr(self._stream, name)


_logger = _Logger()


def start_logger(fname: str) -> None:
    """Start logging standard I/O to ``fname``; an empty name stops it."""
    _logger.start(fname)


_PATH_SEPARATOR = "\\" if os.name == "nt" else "/"


@dataclass(frozen=True)
class CommandLine:
    """Paths derived from the program's invocation."""

    argv0: str
    binary_directory: str
    working_directory: str

    @classmethod
    def from_argv(
        cls, argv: Sequence[str], working_directory: Optional[str] = None
    ) -> "CommandLine":
        """Build the paths from ``argv`` and the working directory."""
        if not argv:
            raise ValueError("argv must contain the program name")
        argv0 = argv[0]
        if working_directory is None:
            try:
                working_directory = os.getcwd()
            except OSError:
                working_directory = ""

        cut = max(argv0.rfind("\\"), argv0.rfind("/"))
        binary_directory = "." + _PATH_SEPARATOR if cut < 0 else argv0[: cut + 1]

        if binary_directory.startswith("." + _PATH_SEPARATOR):
            binary_directory = working_directory + binary_directory[1:]

        return cls(argv0, binary_directory, working_directory)