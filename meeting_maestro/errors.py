"""Error taxonomy shared by the summary relay and the action-item extractor.

Recovery degradation is deliberately absent: a degraded extraction is a
normal result carrying a warning, not an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meeting_maestro.llm.credentials import KeyValidation


class MaestroError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputMissingError(MaestroError):
    """The request carried no notes or summary text; upstream was not called."""

    status_code = 400


class UpstreamUnavailableError(MaestroError):
    """The completion client cannot be built (missing or malformed credentials)."""

    status_code = 503

    def __init__(self, message: str, validation: KeyValidation | None = None) -> None:
        super().__init__(message)
        self.validation = validation


class UpstreamFailureError(MaestroError):
    """The completion call was issued and failed."""

    status_code = 502
