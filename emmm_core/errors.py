"""
Error Taxonomy
==============

Exceptions raised by the archive and image pipelines.

Application errors derive from EmmmCoreError and mean "your input failed".
WorkerError and its subclasses mean "the engine broke" and are kept out of
the EmmmCoreError tree so callers can tell the two apart.
"""

from typing import Optional


class EmmmCoreError(Exception):
    """Base exception for all application-level errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ResourceIOError(EmmmCoreError):
    """A file could not be opened, read, created or written."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to access {self.path}: {reason}")


class DecodeError(EmmmCoreError):
    """Input could not be decoded."""

    pass


class ImageDecodeError(DecodeError):
    """Image bytes are corrupt or in an unrecognized format."""

    pass


class ArchiveFormatError(DecodeError):
    """Container is unreadable or does not hold a valid document entry."""

    pass


class SizeLimitError(EmmmCoreError):
    """No compression trial produced a result under the byte budget."""

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(
            "Unable to compress within size limit",
            f"Raise the budget above {max_size} bytes or pass a smaller image",
        )


class WorkerError(Exception):
    """The worker running an operation failed outside the operation itself."""

    pass


class NotifierError(WorkerError):
    """A progress sink raised while being notified."""

    pass
