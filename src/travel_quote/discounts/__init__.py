"""Discount aggregation over promo codes, group size, corporate flag and risk bundles."""

from travel_quote.discounts.engine import DiscountEngine, DiscountSettings, GroupTier

__all__ = ["DiscountEngine", "DiscountSettings", "GroupTier"]
