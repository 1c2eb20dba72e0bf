"""Exception types shared by the layout engine and the viewer runtime.

Build-time failures abort only the build in progress, persistence failures
degrade to default state, and missing inputs are fatal at startup.
"""

from __future__ import annotations

from pathlib import Path


class TxtviewError(RuntimeError):
    """Base class for all txtview failures."""


class LayoutAllocationError(TxtviewError):
    """Raised when a line store cannot grow during a layout build."""

    def __init__(self, message: str, *, line_count: int = 0) -> None:
        super().__init__(message)
        self.line_count = line_count


class MeasurementError(TxtviewError):
    """Raised by a width oracle that cannot measure a candidate prefix."""


class CorruptScrollStateError(TxtviewError):
    """Raised when a persisted scroll record fails validation."""


class MissingFontError(TxtviewError):
    """Raised when the requested font file cannot be found or opened."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class MissingDocumentError(TxtviewError):
    """Raised when the document to display cannot be read."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
