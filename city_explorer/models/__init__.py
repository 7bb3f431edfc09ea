"""SQLAlchemy ORM models.

Importing this module should register all tables on Base.metadata.
"""

from __future__ import annotations

from city_explorer.models.business import Business
from city_explorer.models.cache_fetch import CacheFetch
from city_explorer.models.event import Event
from city_explorer.models.forecast import Forecast
from city_explorer.models.location import Location
from city_explorer.models.movie import Movie

__all__ = [
    "Business",
    "CacheFetch",
    "Event",
    "Forecast",
    "Location",
    "Movie",
]
