from __future__ import annotations

from typing import Optional


class AfrobarometerError(Exception):
    """
    Base class for all failures raised by the build/read pipeline.

    `round` and `stage` identify where a build failed (e.g. round 3, stage
    "download"). Both are optional since some failures are not tied to a round.
    """

    def __init__(self, message: str, *, round_: Optional[int] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.round = round_
        self.stage = stage

    def __str__(self) -> str:
        if self.round is None and self.stage is None:
            return self.message
        where = "/".join(
            part for part in (
                f"round {self.round}" if self.round is not None else None,
                self.stage,
            ) if part
        )
        return f"[{where}] {self.message}"


class ConfigurationError(AfrobarometerError):
    """Raised when no cache root has been initialized."""


class AfrbIOError(AfrobarometerError, OSError):
    """Raised on filesystem or network failures."""


class DownloadError(AfrbIOError):
    """Raised when a remote file cannot be downloaded."""


class FormatError(AfrobarometerError, ValueError):
    """Raised when a survey or location file cannot be parsed."""


class StateError(AfrobarometerError):
    """Raised when the build output is not in the state an operation needs."""


class AlreadyBuiltError(StateError):
    """Raised when a build would replace existing output without overwrite."""


class NotBuiltError(StateError):
    """Raised when a round is read before it has been built."""
