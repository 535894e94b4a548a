from __future__ import annotations

from pathlib import Path
from typing import Optional


class TranscriptToolError(RuntimeError):
    """Base class for failures that abort a conversion run."""


class InvalidPathError(TranscriptToolError):
    """Raised when the input path is neither a regular file nor a directory."""


class NoInputError(TranscriptToolError):
    """Raised when a directory holds no files with a transcript extension."""


class RemoteServiceError(TranscriptToolError):
    """Raised when the completion service fails or answers with an unexpected shape."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FilesystemError(TranscriptToolError):
    """Raised when a transcript cannot be read or the output cannot be written."""

    def __init__(self, message: str, *, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path
