"""Tests for poster label text."""

from __future__ import annotations

import pytest

from posterstudio.poster import PosterLabels, format_coords


class TestFormatCoords:
    """Tests for format_coords."""

    @pytest.mark.parametrize(
        ("lat", "lng", "expected"),
        [
            (48.8566, 2.3522, "48.8566°N 2.3522°E"),
            (-33.8688, 151.2093, "33.8688°S 151.2093°E"),
            (40.7128, -74.006, "40.7128°N 74.0060°W"),
            (-22.9068, -43.1729, "22.9068°S 43.1729°W"),
            (0.0, 0.0, "0.0000°N 0.0000°E"),
        ],
    )
    def test_hemispheres(self, lat: float, lng: float, expected: str) -> None:
        """Coordinates use absolute values with hemisphere letters."""
        assert format_coords(lat, lng) == expected


class TestPosterLabels:
    """Tests for PosterLabels."""

    def test_from_location(self) -> None:
        """Labels carry the given names and formatted coordinates."""
        labels = PosterLabels.from_location("Paris", "France", 48.8566, 2.3522)
        assert labels == PosterLabels("Paris", "France", "48.8566°N 2.3522°E")

    def test_fallbacks(self) -> None:
        """An empty city shows 'City' and an empty country stays empty."""
        labels = PosterLabels.from_location("", None, 0.0, 0.0)
        assert labels.city == "City"
        assert labels.country == ""
