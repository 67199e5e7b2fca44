"""Geocoding service helpers."""

from .nominatim_client import GeocodeCandidate, GeocodingServiceError, NominatimClient
from .service import Geocoder

__all__ = [
    "Geocoder",
    "GeocodeCandidate",
    "GeocodingServiceError",
    "NominatimClient",
]
