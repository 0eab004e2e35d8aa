"""Diagnostic output on stderr.

restcall never writes response data to stdout; everything it shows the
user (dry-run request dumps) is a diagnostic and goes to stderr.

* **Colour control** -- respects ``NO_COLOR`` and ``TERM=dumb``.
* **Quiet mode** -- suppresses informational messages.
* **Verbose mode** -- enables debug messages (dry-run headers and bodies).

Library code does not print through :mod:`logging`; it reaches the user
through the global :class:`OutputManager` returned by :func:`get_output`.
Host applications install their own with :func:`set_output`.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console


class OutputManager:
    """Central manager for user-facing diagnostics.

    Wraps a Rich :class:`~rich.console.Console` bound to stderr.

    Args:
        no_color: Disable all colour and Rich styling.
        quiet: Suppress informational messages.
        verbose: Enable debug-level messages.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed when quiet."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message, markup=False, highlight=False)

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when verbose."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[debug] {message}", markup=False, style="dim")


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None
