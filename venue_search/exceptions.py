"""Exceptions raised by the venue search collaborators."""


class VenueSearchError(Exception):
    """Base exception for venue search errors."""


class GeocodingError(VenueSearchError):
    """Raised when a geocoding collaborator is unreachable or answers badly."""


class LocationUnavailableError(VenueSearchError):
    """Raised when the device position cannot be determined."""
