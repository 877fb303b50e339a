"""
City configuration for report normalization.

Each city defines:
  - display name
  - district list (used for grouping, statistics and map markers)
  - reference lat/lng (city center the markers are scattered around)

CITY_CONFIGS is keyed by city name; SUBREDDIT_CITIES maps a lowercased
subreddit to its city. Subreddits not in the table resolve to
UNKNOWN_CITY, which keeps the New York reference point.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CityConfig:
    """Districts and reference point for one city."""
    name: str
    districts: tuple[str, ...]
    lat: float
    lng: float

    @property
    def reference_point(self) -> tuple[float, float]:
        return (self.lat, self.lng)


UNKNOWN = "Unknown"

# New York doubles as the reference point for unresolved subreddits
DEFAULT_REFERENCE_POINT: tuple[float, float] = (40.7128, -74.006)


# ---------------------------------------------------------------------------
# City definitions
# ---------------------------------------------------------------------------

CITY_CONFIGS: Mapping[str, CityConfig] = MappingProxyType({
    "New York": CityConfig(
        name="New York",
        districts=("Manhattan", "Brooklyn", "Queens", "Bronx", "Staten Island"),
        lat=40.7128, lng=-74.006,
    ),
    "Los Angeles": CityConfig(
        name="Los Angeles",
        districts=("Hollywood", "Beverly Hills", "Santa Monica", "Downtown", "Venice"),
        lat=34.0522, lng=-118.2437,
    ),
    "Chicago": CityConfig(
        name="Chicago",
        districts=("Loop", "North Side", "South Side", "West Side", "Lincoln Park"),
        lat=41.8781, lng=-87.6298,
    ),
    "San Francisco": CityConfig(
        name="San Francisco",
        districts=("Mission", "Castro", "SOMA", "Richmond", "Sunset"),
        lat=37.7749, lng=-122.4194,
    ),
    "Boston": CityConfig(
        name="Boston",
        districts=("Back Bay", "North End", "South End", "Cambridge", "Somerville"),
        lat=42.3601, lng=-71.0589,
    ),
    "London": CityConfig(
        name="London",
        districts=("Westminster", "Camden", "Hackney", "Tower Hamlets", "Kensington"),
        lat=51.5074, lng=-0.1278,
    ),
    "Toronto": CityConfig(
        name="Toronto",
        districts=("Downtown", "North York", "Scarborough", "Etobicoke", "York"),
        lat=43.6532, lng=-79.3832,
    ),
    "Melbourne": CityConfig(
        name="Melbourne",
        districts=("CBD", "South Yarra", "Richmond", "St Kilda", "Brunswick"),
        lat=-37.8136, lng=144.9631,
    ),
    "Sydney": CityConfig(
        name="Sydney",
        districts=("CBD", "Bondi", "Manly", "Parramatta", "Newtown"),
        lat=-33.8688, lng=151.2093,
    ),
    "Seattle": CityConfig(
        name="Seattle",
        districts=("Capitol Hill", "Fremont", "Ballard", "Queen Anne", "Georgetown"),
        lat=47.6062, lng=-122.3321,
    ),
    "Philadelphia": CityConfig(
        name="Philadelphia",
        districts=(
            "Center City", "South Philly", "Northern Liberties", "Fishtown",
            "University City",
        ),
        lat=39.9526, lng=-75.1652,
    ),
})

UNKNOWN_CITY = CityConfig(
    name=UNKNOWN,
    districts=(),
    lat=DEFAULT_REFERENCE_POINT[0],
    lng=DEFAULT_REFERENCE_POINT[1],
)

# Lowercased subreddit -> city name
SUBREDDIT_CITIES: Mapping[str, str] = MappingProxyType({
    "nyc": "New York",
    "newyorkcity": "New York",
    "losangeles": "Los Angeles",
    "chicago": "Chicago",
    "sanfrancisco": "San Francisco",
    "boston": "Boston",
    "london": "London",
    "toronto": "Toronto",
    "melbourne": "Melbourne",
    "sydney": "Sydney",
    "seattle": "Seattle",
    "philadelphia": "Philadelphia",
})


def get_city_config(name: str) -> CityConfig:
    """Get config for a city by display name. Raises KeyError if not found."""
    if name not in CITY_CONFIGS:
        raise KeyError(
            f"Unknown city: {name!r}. Available: {', '.join(sorted(CITY_CONFIGS.keys()))}"
        )
    return CITY_CONFIGS[name]


def resolve_subreddit(subreddit: str) -> CityConfig:
    """Map a subreddit (any case) to its city, or UNKNOWN_CITY."""
    city_name = SUBREDDIT_CITIES.get((subreddit or "").lower())
    if city_name is None:
        return UNKNOWN_CITY
    return CITY_CONFIGS[city_name]


def get_city_subreddits() -> list[str]:
    """All subreddits that resolve to a known city."""
    return list(SUBREDDIT_CITIES.keys())
