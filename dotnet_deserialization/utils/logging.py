"""
Unified logging for payload generation.

Console output plus an optional log file. Warnings and errors are counted
for an end-of-run summary. Nothing touches the filesystem until a log path
is given, so importing the package has no side effects.

Usage:
    from dotnet_deserialization.utils import log, logWarning, logError, logDebug, init_logging

    init_logging(Path("payload.log"))     # optional; enables debug output

    log("Generating payload...")          # console + file
    logWarning("selector deprecated")     # yellow, counted
    logError("encoding failed")           # red on stderr, counted
    logDebug("record 5: 412 bytes")       # file only

    print_summary()
"""

import sys
import atexit
from pathlib import Path
from datetime import datetime
from typing import List, Optional, TextIO, Tuple


class Colors:
    YELLOW = '\033[93m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


RULE = "=" * 70

_log_file: Optional[TextIO] = None
_initialized = False
_atexit_registered = False
_warnings: List[str] = []
_errors: List[str] = []


def _timestamp() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def init_logging(log_path: Path = None):
    """
    Start a logging session. Repeated calls are ignored until close_logging().

    Args:
        log_path: Log file to write. None keeps output on the console and
                  drops debug messages.
    """
    global _log_file, _initialized, _atexit_registered, _warnings, _errors

    if _initialized:
        return

    _warnings = []
    _errors = []
    _initialized = True

    if log_path is None:
        return

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        _log_file = open(path, 'w', encoding='utf-8')
    except OSError as e:
        print(f"Warning: Could not open log file {path}: {e}", file=sys.stderr)
        return

    _write_to_file(f"Session started: {_timestamp()}\n{RULE}\n")
    if not _atexit_registered:
        atexit.register(close_logging)
        _atexit_registered = True


def close_logging():
    """Close the log file and end the session."""
    global _log_file, _initialized

    if _log_file is not None:
        _write_to_file(f"\n{RULE}\nSession finished: {_timestamp()}")
        _log_file.close()
        _log_file = None

    _initialized = False


def get_counts() -> Tuple[int, int]:
    """Return (error_count, warning_count)."""
    return len(_errors), len(_warnings)


def _write_to_file(msg: str, end: str = "\n"):
    if _log_file is None:
        return
    try:
        _log_file.write(msg + end)
        _log_file.flush()
    except OSError:
        # Console output carries on without the file
        pass


def _report_list(title: str, items: List[str], color: str):
    if not items:
        return
    print(f"\n{color}{Colors.BOLD}{title} ({len(items)}):{Colors.RESET}")
    _write_to_file(f"\n{title} ({len(items)}):")
    for item in items:
        print(f"  {color}- {item}{Colors.RESET}")
        _write_to_file(f"  - {item}")


def print_summary():
    """Print collected errors and warnings with their counts."""
    log(f"\n{RULE}\nSUMMARY\n{RULE}")

    _report_list("Errors", _errors, Colors.RED)
    _report_list("Warnings", _warnings, Colors.YELLOW)

    error_color = Colors.RED + Colors.BOLD if _errors else Colors.GREEN
    warning_color = Colors.YELLOW + Colors.BOLD if _warnings else Colors.GREEN
    print(f"\n{error_color}{len(_errors)} Error(s){Colors.RESET} | "
          f"{warning_color}{len(_warnings)} Warning(s){Colors.RESET}")
    _write_to_file(f"\n{len(_errors)} Error(s) | {len(_warnings)} Warning(s)")


def log(msg: str = "", end: str = "\n"):
    """Log an info message to the console and the log file."""
    if not _initialized:
        init_logging()

    print(msg, end=end)
    _write_to_file(msg, end)


def logWarning(msg: str, end: str = "\n"):
    """Log a warning in yellow. Counted for the summary."""
    if not _initialized:
        init_logging()

    formatted = f"Warning: {msg}"
    print(f"{Colors.YELLOW}{formatted}{Colors.RESET}", end=end)
    _write_to_file(formatted, end)
    _warnings.append(msg)


def logError(msg: str, end: str = "\n"):
    """Log an error in red on stderr. Counted for the summary."""
    if not _initialized:
        init_logging()

    formatted = f"ERROR: {msg}"
    print(f"{Colors.RED}{formatted}{Colors.RESET}", end=end, file=sys.stderr)
    _write_to_file(formatted, end)
    _errors.append(msg)


def logDebug(msg: str, end: str = "\n"):
    """Log a debug message to the log file only."""
    if not _initialized:
        init_logging()

    _write_to_file(f"[DEBUG] {msg}", end)
