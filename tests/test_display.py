import asyncio
from datetime import datetime, timedelta, timezone

from lakewatch.display import (
    EMPTY_INCIDENTS_MESSAGE,
    PANEL_CLOSE_DELAY_SECONDS,
    DataFeed,
    FeedState,
    MapDisplay,
    MarkerFilters,
    PanelController,
    render_incident_list,
    status_condition,
)
from lakewatch.models import LakeStatus, Location, NormalizedIncident, TopStory, TrafficIncident, WeatherAlert

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _incident(incident_id: str, kind: str, minutes_ago: int, lat: float | None = 38.2) -> NormalizedIncident:
    ts = (NOW - timedelta(minutes=minutes_ago)).isoformat().replace("+00:00", "Z")
    return NormalizedIncident(
        id=incident_id,
        title=f"{kind.title()} report {incident_id}",
        type=kind,
        severity="advisory",
        source="Lake Expo",
        timestamp=ts,
        lat=lat,
        lng=-92.7 if lat is not None else None,
    )


def _traffic(incident_id: str, severity: str = "advisory") -> TrafficIncident:
    return TrafficIncident(
        id=incident_id,
        type="construction",
        description="Construction: lane shift",
        lat=38.2,
        lng=-92.7,
        severity=severity,
        timestamp="2026-03-10T10:00:00Z",
    )


def _location(name: str, kind: str, cam: str | None = None) -> Location:
    return Location(id=name, name=name, type=kind, lat=38.1, lng=-92.7, cam_embed_url=cam)


class FakeHandle:
    def __init__(self, callback) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    def __init__(self) -> None:
        self.calls: list[tuple[float, FakeHandle]] = []

    def __call__(self, delay, callback) -> FakeHandle:
        handle = FakeHandle(callback)
        self.calls.append((delay, handle))
        return handle


def test_empty_incident_list_renders_message() -> None:
    assert render_incident_list([]) == "No reported incidents in the last 7 days."
    assert render_incident_list([]) == EMPTY_INCIDENTS_MESSAGE


def test_incident_list_is_newest_first_with_relative_times() -> None:
    rendered = render_incident_list(
        [
            _incident("a", "crime", 60 * 24 * 4),
            _incident("b", "fire", 0),
            _incident("c", "accident", 5),
            _incident("d", "other", 60 * 2),
            _incident("e", "boating", 60 * 24 * 2),
        ],
        now=NOW,
    )
    lines = rendered.splitlines()
    assert lines[0].endswith("(Lake Expo, Just now)")
    assert lines[1].endswith("(Lake Expo, 5 min ago)")
    assert lines[2].endswith("(Lake Expo, 2 hours ago)")
    assert lines[3].endswith("(Lake Expo, 2 days ago)")
    assert lines[4].endswith("(Lake Expo, 3/6/2026)")


def test_panel_controller_keeps_one_panel_open() -> None:
    timers = FakeTimers()
    panels = PanelController(call_later=timers)
    marina = _location("Marina Bay Resort", "marina")

    panels.open("location", marina)
    assert panels.is_open("location")
    panels.open("traffic", _traffic("osm-way-1"))
    assert panels.open_panel == "traffic"
    assert not panels.is_open("location")

    panels.close()
    assert panels.open_panel is None
    assert panels.selections["traffic"] is not None
    delay, handle = timers.calls[-1]
    assert delay == PANEL_CLOSE_DELAY_SECONDS == 0.3
    handle.callback()
    assert panels.selections["traffic"] is None


def test_reopening_cancels_pending_clear() -> None:
    timers = FakeTimers()
    panels = PanelController(call_later=timers)
    first = _incident("a", "crime", 1)
    second = _incident("b", "fire", 1)

    panels.open("local", first)
    panels.close()
    _, pending = timers.calls[-1]
    panels.open("local", second)
    assert pending.cancelled is True
    assert panels.selected() == second


def test_panel_close_on_event_loop() -> None:
    async def run() -> tuple[object, object]:
        panels = PanelController()
        panels.open("location", _location("Backwater Jack's", "restaurant"))
        panels.close()
        before = panels.selections["location"]
        await asyncio.sleep(PANEL_CLOSE_DELAY_SECONDS + 0.1)
        return before, panels.selections["location"]

    before, after = asyncio.run(run())
    assert before is not None
    assert after is None


def test_panel_camera_url_is_embed_ready() -> None:
    panels = PanelController(call_later=FakeTimers())
    panels.open("location", _location("Dock Cam", "bar", cam="https://www.twitch.tv/lakecam"))
    assert panels.camera_url(parent="loz.watch") == (
        "https://player.twitch.tv/?channel=lakecam&parent=loz.watch&muted=false"
    )


def test_type_filters_never_all_off() -> None:
    filters = MarkerFilters()
    assert filters.toggle_type("bar") is True
    assert filters.toggle_type("marina") is True
    assert filters.toggle_type("restaurant") is False
    assert filters.active_types == {"restaurant"}
    assert filters.toggle_type("bar") is True
    assert filters.active_types == {"restaurant", "bar"}


def test_location_search_and_type_filter() -> None:
    locations = [
        _location("Shady Gators", "bar"),
        _location("Backwater Jack's", "restaurant"),
        _location("Marina Bay Resort", "marina"),
    ]
    filters = MarkerFilters(search_query="  BAY ")
    assert [loc.name for loc in filters.visible_locations(locations)] == ["Marina Bay Resort"]
    filters = MarkerFilters(search_query="")
    filters.toggle_type("marina")
    assert [loc.name for loc in filters.visible_locations(locations)] == ["Shady Gators", "Backwater Jack's"]


def test_local_accidents_move_to_traffic_layer() -> None:
    local = [
        _incident("crash", "accident", 10),
        _incident("theft", "crime", 10),
        _incident("nowhere", "fire", 10, lat=None),
    ]
    traffic = [_traffic("osm-way-1")]

    filters = MarkerFilters()
    road, accidents = filters.traffic_layer(traffic, local)
    assert [i.id for i in road] == ["osm-way-1"]
    assert [i.id for i in accidents] == ["crash"]
    assert [i.id for i in filters.local_layer(local)] == ["theft"]
    assert filters.visible_incident_count(traffic, local) == 3

    filters.show_traffic = False
    assert filters.traffic_layer(traffic, local) == ([], [])
    assert [i.id for i in filters.local_layer(local)] == ["crash", "theft"]

    filters.show_local = False
    assert filters.local_layer(local) == []


def test_status_condition_priority() -> None:
    warning = WeatherAlert(event="Flood Warning", severity="Severe")
    watch = WeatherAlert(event="Winter Storm Watch", severity="Moderate")
    assert status_condition([warning], [_traffic("t")]) == "alert"
    assert status_condition([watch], []) == "advisory"
    assert status_condition([], [_traffic("t", severity="info")]) == "advisory"
    assert status_condition([WeatherAlert(event="Special Weather Statement")], []) == "normal"
    assert status_condition([], []) == "normal"


def test_data_feed_keeps_last_result_on_error() -> None:
    outcomes = [["first"], RuntimeError("boom")]

    async def loader():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    feed = DataFeed("traffic", loader, 10)
    assert feed.state is FeedState.IDLE
    assert asyncio.run(feed.refresh()) is FeedState.LOADED
    assert feed.result == ["first"]
    assert feed.last_updated is not None
    assert asyncio.run(feed.refresh()) is FeedState.ERRORED
    assert feed.result == ["first"]
    assert feed.error == "boom"


class FakeService:
    async def lake_status(self) -> LakeStatus:
        return LakeStatus(lakeLevel=655.1, lastUpdated="2026-03-10T12:00:00Z")

    async def traffic_incidents(self) -> list[TrafficIncident]:
        return [_traffic("osm-way-9")]

    async def weather_alerts(self) -> list[WeatherAlert]:
        return []

    async def local_intelligence(self):
        story = TopStory(
            id="s",
            headline="Dock fire",
            summary="Dock fire",
            source="Lake Expo",
            timestamp="2026-03-10T11:00:00Z",
        )
        return [_incident("crash", "accident", 3), _incident("theft", "crime", 4)], story

    async def locations(self) -> list[Location]:
        return [_location("Shady Gators", "bar")]


def test_map_display_schedules_one_job_per_feed() -> None:
    async def run():
        display = MapDisplay(FakeService())
        await display.start()
        jobs = {job.id: job.trigger.interval for job in display.scheduler.get_jobs()}
        snapshot = display.snapshot()
        display.stop()
        return jobs, snapshot, display.scheduler.get_jobs()

    jobs, snapshot, remaining = asyncio.run(run())
    assert jobs == {
        "feed:lake_status": timedelta(minutes=5),
        "feed:traffic": timedelta(minutes=10),
        "feed:weather_alerts": timedelta(minutes=15),
        "feed:local_intelligence": timedelta(minutes=15),
        "feed:locations": timedelta(minutes=60),
    }
    assert remaining == []
    assert snapshot["condition"] == "advisory"
    assert snapshot["lakeStatus"]["lakeLevel"] == 655.1
    assert snapshot["topStory"]["headline"] == "Dock fire"
    assert [i["id"] for i in snapshot["trafficIncidents"]] == ["osm-way-9", "crash"]
    assert [i["id"] for i in snapshot["localIncidents"]] == ["theft"]
    assert set(snapshot["feeds"].values()) == {"loaded"}


class CameraService(FakeService):
    async def locations(self) -> list[Location]:
        return [_location("Backwater Jack's", "restaurant", cam="https://www.twitch.tv/lakecam")]


def test_map_display_notifies_after_each_refresh() -> None:
    seen: list[str] = []

    async def run():
        display = MapDisplay(CameraService(), on_refresh=seen.append, embed_parent="lake.example")
        await display.start()
        state = await display.refresh("traffic")
        snapshot = display.snapshot()
        display.stop()
        return state, snapshot

    state, snapshot = asyncio.run(run())
    assert seen == ["initial", "traffic"]
    assert state is FeedState.LOADED
    assert snapshot["locations"][0]["camEmbedUrl"] == (
        "https://player.twitch.tv/?channel=lakecam&parent=lake.example&muted=false"
    )
