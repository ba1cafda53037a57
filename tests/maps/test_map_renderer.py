from __future__ import annotations

import pytest

from src.staffdesk.staffdesk.core.enums import MarkerColor
from src.staffdesk.staffdesk.maps.location import Coordinates, location_from_form, parse_location
from src.staffdesk.staffdesk.maps.renderer import OpenStreetMapRenderer


def test_form_coordinates_are_stored_with_six_decimals():
    assert location_from_form("12.9716", "77.5946") == "12.971600, 77.594600"
    assert location_from_form(" -33.8688 ", "151.2093") == "-33.868800, 151.209300"


@pytest.mark.parametrize("lat, lng", [("", ""), (None, None), ("12.9", ""), ("abc", "1"), ("91", "0"), ("0", "181"), ("nan", "0")])
def test_unusable_form_coordinates_become_no_location(lat, lng):
    assert location_from_form(lat, lng) is None


def test_parse_location_round_trips_storage_format():
    assert parse_location("12.971600, 77.594600") == Coordinates(lat=12.9716, lng=77.5946)
    assert parse_location("12.9716") is None
    assert parse_location("1, 2, 3") is None
    assert parse_location(None) is None


def test_renderer_pins_location_with_marker_colour():
    view = OpenStreetMapRenderer(zoom=15, span=0.01, height=250).render("12.971600, 77.594600", MarkerColor.GREEN)

    assert view is not None
    assert view.marker_hex == "#10b981"
    assert view.height == 250
    assert view.label == "12.971600, 77.594600"
    assert view.embed_url.startswith("https://www.openstreetmap.org/export/embed.html?")
    assert "marker=12.971600%2C77.594600" in view.embed_url
    assert "bbox=77.584600%2C12.961600%2C77.604600%2C12.981600" in view.embed_url
    assert view.link_url.endswith("#map=15/12.971600/77.594600")


def test_clock_out_marker_is_blue():
    view = OpenStreetMapRenderer().render("0.5, 0.5", MarkerColor.BLUE, label="Clock-out")
    assert view.marker_hex == "#3b82f6"
    assert view.label == "Clock-out"


@pytest.mark.parametrize("location", [None, "", "somewhere", "999, 999"])
def test_unparsable_location_renders_nothing(location):
    assert OpenStreetMapRenderer().render(location, MarkerColor.GREEN) is None
