"""Travel insurance quote pipeline: validation, pricing, discounts and underwriting."""

__version__ = "1.0.0"
