from .fetcher import Fetcher
from .singleflight import SingleFlight

__all__ = ["Fetcher", "SingleFlight"]
