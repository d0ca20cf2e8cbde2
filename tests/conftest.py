# tests/conftest.py
import pytest

from station_zones.geometry.types import Facility, Point


def square(min_x, min_y, max_x, max_y):
    """Open counter-clockwise rectangle."""
    return [
        Point(min_x, min_y),
        Point(max_x, min_y),
        Point(max_x, max_y),
        Point(min_x, max_y),
    ]


@pytest.fixture
def unit_square():
    return square(0.0, 0.0, 10.0, 10.0)


@pytest.fixture
def triangle_facilities():
    return [
        Facility(id="a", point=Point(0.0, 0.0), name="A"),
        Facility(id="b", point=Point(10.0, 0.0), name="B"),
        Facility(id="c", point=Point(5.0, 10.0), name="C"),
    ]
