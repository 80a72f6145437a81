"""Reference data access: provider interface, in-memory store, CSV loader, cache."""

from travel_quote.reference.cache import ParameterCache
from travel_quote.reference.loader import load_reference_data
from travel_quote.reference.memory import InMemoryReferenceData
from travel_quote.reference.provider import ReferenceDataProvider

__all__ = [
    "InMemoryReferenceData",
    "ParameterCache",
    "ReferenceDataProvider",
    "load_reference_data",
]
