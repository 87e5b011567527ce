"""Route modules for the disaster reports API."""
from . import auth, geocoding, reports, stats

__all__ = ["auth", "reports", "stats", "geocoding"]
