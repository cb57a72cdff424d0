import pytest

from lakewatch.config import RegionConfig
from lakewatch.gazetteers import fallback_coordinates, geocode, identifier_hash, is_within_region, match_place


def test_match_place_uses_first_listed_entry() -> None:
    assert match_place("Crash on Hwy 54 in Osage Beach") == (38.13, -92.65)
    assert match_place("Miller County deputies respond") == (38.20, -92.60)
    assert match_place("Nothing local here") is None


def test_geocode_prefers_place_keyword() -> None:
    assert geocode("Fire in Eldon", "lakeexpo-abc") == (38.35, -92.58)


def test_fallback_arithmetic() -> None:
    assert identifier_hash("a") == 97
    lat, lng = fallback_coordinates("a")
    assert lat == pytest.approx(38.15 + (-3 / 400) * 0.25)
    assert lng == pytest.approx(-92.75 + (-39 / 400) * 0.25)


def test_fallback_is_deterministic_and_bounded() -> None:
    region = RegionConfig()
    for identifier in ["lakeexpo-story", "city-1700000000000", "", "x" * 300, "ünïcode-id"]:
        first = geocode("no place named", identifier, region)
        assert geocode("no place named", identifier, region) == first
        lat, lng = first
        assert abs(lat - region.center_lat) <= region.spread_degrees
        assert abs(lng - region.center_lng) <= region.spread_degrees


def test_fallback_scales_with_spread() -> None:
    narrow = RegionConfig(spread_degrees=0.01)
    lat, lng = fallback_coordinates("lakeexpo-story", narrow)
    assert abs(lat - narrow.center_lat) <= 0.01
    assert abs(lng - narrow.center_lng) <= 0.01


def test_is_within_region() -> None:
    assert is_within_region(38.2, -92.7) is True
    assert is_within_region(39.0, -92.7) is False
