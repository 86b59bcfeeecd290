"""Poster label text."""

from __future__ import annotations

from dataclasses import dataclass


__all__ = ["PosterLabels", "format_coords"]


def format_coords(lat: float, lng: float) -> str:
    """Format a location as ``48.8566°N 2.3522°E``."""
    lat_direction = "°N" if lat >= 0 else "°S"
    lng_direction = "°E" if lng >= 0 else "°W"
    return f"{abs(lat):.4f}{lat_direction} {abs(lng):.4f}{lng_direction}"


@dataclass(frozen=True)
class PosterLabels:
    """Text drawn by the poster layout around the map."""

    city: str
    country: str
    coords: str

    @classmethod
    def from_location(cls, city: str | None, country: str | None, lat: float, lng: float) -> PosterLabels:
        """Build labels, falling back to ``City`` when no city name is set."""
        return cls(
            city=city or "City",
            country=country or "",
            coords=format_coords(lat, lng),
        )
