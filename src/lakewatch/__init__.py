from .config import BoundingBox, RegionConfig
from .models import (
    LakeStatus,
    Location,
    NormalizedIncident,
    RawArticle,
    TopStory,
    TrafficIncident,
    WeatherAlert,
)
from .service import IntelligenceService

__all__ = [
    "BoundingBox",
    "RegionConfig",
    "RawArticle",
    "NormalizedIncident",
    "TopStory",
    "WeatherAlert",
    "TrafficIncident",
    "Location",
    "LakeStatus",
    "IntelligenceService",
]
