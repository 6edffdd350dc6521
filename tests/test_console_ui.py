import asyncio
import io

import pytest

import api_adapters
import transport_advisor
from api_structures import GeoPoint, TransportType
from console_ui import ConsoleMap, format_duration, format_verdict


@pytest.mark.parametrize("seconds, expected", [
    (1200, "20 min"),
    (1500, "25 min"),
    (90, "2 min"),
    (89, "1 min"),
    (0, "0 min"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_verdict():
    assert format_verdict(1200, 1500, TransportType.TRANSIT) == [
        "Subway - 20 min", "Uber - 25 min", "Subway is faster!"]
    assert format_verdict(None, 900, TransportType.RIDE_HAIL) == [
        "Subway - unknown", "Uber - 15 min", "Uber is faster!"]
    assert format_verdict(None, None, None) == [
        "Subway - unknown", "Uber - no cars nearby", "You are on your own, buddy :("]


@pytest.mark.parametrize("text", ["", "50.45", "a,b", "50,30,1", "91,30", "50,181"])
def test_geo_point_parse_rejects_garbage(text):
    with pytest.raises(ValueError):
        GeoPoint.parse(text)


def test_geo_point_parse():
    assert GeoPoint.parse(" 50.45 , 30.52 ") == GeoPoint(50.45, 30.52)


def test_map_ignores_unreadable_clicks(map_view, console_out):
    clicks = []
    map_view.add_click_listener(clicks.append)

    map_view.handle_line("somewhere nice")
    map_view.handle_line("   ")
    map_view.handle_line("50.45,30.52")

    assert clicks == [GeoPoint(50.45, 30.52)]
    assert "Could not read 'somewhere nice'" in console_out.getvalue()


def test_cancelled_click_listener_gets_nothing(map_view):
    clicks = []
    handle = map_view.add_click_listener(clicks.append)
    handle.cancel()
    handle.cancel()

    map_view.handle_line("50.45,30.52")

    assert clicks == []
    assert not map_view.listening


def test_commands_are_not_clicks(map_view):
    clicks, resets = [], []
    map_view.add_click_listener(clicks.append)
    map_view.add_command_listener("reset", lambda: resets.append(True))

    map_view.handle_line("RESET")

    assert resets == [True]
    assert clicks == []


def test_read_input_stops_on_quit():
    out = io.StringIO()
    map_view = ConsoleMap(stream=io.StringIO("50.1,30.1\nquit\n50.2,30.2\n"), out=out)
    clicks = []
    map_view.add_click_listener(clicks.append)

    asyncio.run(map_view.read_input())

    assert clicks == [GeoPoint(50.1, 30.1)]


def test_render_route_describes_first_leg(map_view, console_out, make_directions):
    map_view.render_route(make_directions(1200))
    map_view.render_origin_marker(GeoPoint(50.1, 30.1))

    output = console_out.getvalue()
    assert "Route from Maidan Nezalezhnosti to Lukianivska (2 steps)" in output
    assert "Marker A (You) at 50.10000, 30.10000" in output
    assert map_view.center == GeoPoint(50.1, 30.1)

    map_view.clear_route()
    assert map_view.route is None


def test_main_exits_without_credentials(monkeypatch):
    monkeypatch.setattr(api_adapters, "GOOGLE_API_KEY", None)
    monkeypatch.delenv("HOME_LOCATION", raising=False)

    assert transport_advisor.main([]) == 1


def test_main_rejects_bad_here():
    with pytest.raises(SystemExit):
        transport_advisor.main(["--here", "nowhere"])
