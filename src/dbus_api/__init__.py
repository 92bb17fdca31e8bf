"""
dBUS API Client

A Python package for querying the dBUS (San Sebastián buses) web service:
arrival times, lines, itineraries, stops, vehicles and service notices.
"""

from dbus_api.client import DbusClient, build_url
from dbus_api.config import BASE_URL, VALID_LANGUAGES, ClientConfig
from dbus_api.exceptions import (
    ApiConnectionError,
    ApiError,
    BadRequestError,
    ConfigurationError,
    DbusError,
    ExportError,
    NotFoundError,
    ResponseParseError,
    ServerError,
    UnauthorizedError,
)
from dbus_api.frames import (
    arrival_times_frame,
    lines_frame,
    save_frame,
    stops_frame,
)

__version__ = "0.1.0"

__all__ = [
    "DbusClient",
    "build_url",
    "BASE_URL",
    "VALID_LANGUAGES",
    "ClientConfig",
    "DbusError",
    "ConfigurationError",
    "ApiConnectionError",
    "ResponseParseError",
    "ApiError",
    "BadRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "ServerError",
    "ExportError",
    "arrival_times_frame",
    "stops_frame",
    "lines_frame",
    "save_frame",
]
