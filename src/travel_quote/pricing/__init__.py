"""Premium calculation: age, duration, country and risk coefficients."""

from travel_quote.pricing.calculator import PremiumCalculator

__all__ = ["PremiumCalculator"]
