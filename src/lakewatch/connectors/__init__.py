from .base import PageSource, build_client
from .city import CityAnnouncementsConnector, city_parser
from .lake_expo import LakeExpoConnector
from .lake_status import LakeStatusConnector
from .locations import LocationStore, SupabaseLocationStore
from .traffic import TrafficConnector
from .weather import WeatherAlertsConnector

__all__ = [
    "PageSource",
    "build_client",
    "LakeExpoConnector",
    "CityAnnouncementsConnector",
    "city_parser",
    "WeatherAlertsConnector",
    "TrafficConnector",
    "LakeStatusConnector",
    "LocationStore",
    "SupabaseLocationStore",
]
