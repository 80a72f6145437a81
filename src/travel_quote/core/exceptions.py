"""Exception types raised by the quote system."""

from __future__ import annotations


class ReferenceDataError(Exception):
    """Reference tables are missing or malformed."""


class QuoteComputationError(Exception):
    """Unexpected failure during pricing, discounting, or underwriting.

    The message is safe to expose; the original exception is chained as
    ``__cause__`` for logging only.
    """

    def __init__(self, stage: str, message: str = "Quote computation failed") -> None:
        super().__init__(f"{message} (stage: {stage})")
        self.stage = stage
