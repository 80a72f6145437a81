"""Abstract base class for quote pipelines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from omegaconf import DictConfig

    from travel_quote.schemas.quote import QuoteRequest
    from travel_quote.schemas.results import QuoteOutcome


class BasePipeline(ABC):
    """Contract for quote pipelines served by the API.

    Subclasses must implement :meth:`calculate`.
    """

    def __init__(self, cfg: DictConfig) -> None:
        self.cfg = cfg

    @abstractmethod
    def calculate(self, request: QuoteRequest, today: Optional[date] = None) -> QuoteOutcome:
        """Run validation, pricing, discounts and underwriting for *request*.

        Parameters
        ----------
        request:
            The incoming quote request, not yet validated.
        today:
            The quote date. Defaults to the current date.

        Returns
        -------
        QuoteOutcome
            The terminal outcome: validation failure, decline, manual
            review or success.

        Raises
        ------
        QuoteComputationError
            If pricing, discounting or underwriting fails unexpectedly.
        """
        ...
