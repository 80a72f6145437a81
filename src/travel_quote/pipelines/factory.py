"""Pipeline factory: load reference data and wire the quote pipeline from Hydra config."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from loguru import logger

from travel_quote.reference.loader import load_reference_data

if TYPE_CHECKING:
    from omegaconf import DictConfig

    from travel_quote.pipelines.base import BasePipeline
    from travel_quote.reference.provider import ReferenceDataProvider


def create_pipeline(cfg: DictConfig, reference: Optional[ReferenceDataProvider] = None) -> BasePipeline:
    """Create the quote pipeline described by *cfg*.

    Parameters
    ----------
    cfg:
        The full Hydra configuration.
    reference:
        Reference data to price against. When omitted, the CSV tables
        under ``cfg.reference.data_dir`` are loaded.

    Returns
    -------
    BasePipeline
        A pipeline ready to compute quotes.

    Raises
    ------
    ReferenceDataError
        If the reference tables cannot be loaded.
    """
    from travel_quote.pipelines.quote_pipeline import QuotePipeline

    if reference is None:
        reference = load_reference_data(cfg.reference.data_dir)

    logger.info("Creating quote pipeline")
    return QuotePipeline(cfg, reference)
