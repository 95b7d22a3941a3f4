"""Validation of the detect exit code.

The expectation is free-form text:
- an integer: the exit code must equal it;
- "true" (any case): the exit code must be 0;
- anything else (including "false"): no validation, every exit code passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hubdetect.core.errors import ExitCodeMismatchError
from hubdetect.core.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ExitCodeExpectation:
    """Expected exit code; None means validation is skipped."""

    expected: Optional[int]

    @classmethod
    def parse(cls, text: Optional[str]) -> "ExitCodeExpectation":
        value = (text or "").strip()
        try:
            return cls(int(value))
        except ValueError:
            pass
        if value.lower() == "true":
            return cls(0)
        return cls(None)

    @property
    def enabled(self) -> bool:
        return self.expected is not None

    def accepts(self, exit_code: int) -> bool:
        return self.expected is None or exit_code == self.expected


def validate_exit_code(exit_code: int, expectation: ExitCodeExpectation) -> None:
    """Check an exit code against the expectation.

    Raises:
        ExitCodeMismatchError: If validation is enabled and the code differs.
    """
    expected = expectation.expected
    if expected is None:
        LOGGER.debug(f"Exit code validation disabled, ignoring exit status {exit_code}")
        return
    if exit_code != expected:
        raise ExitCodeMismatchError(exit_code, expected)
