"""Offline IP geolocation backed by a local MaxMind database."""

import ipaddress
import logging
from pathlib import Path

import geoip2.database
import geoip2.errors

from trackdrop.api.access.dto.access import GeoLocation

logger = logging.getLogger(__name__)


class GeoLocator:
    """Country/city lookup; every failure maps to an unknown location."""

    def __init__(self, db_path: Path | None):
        self._reader = None
        if db_path and Path(db_path).is_file():
            self._reader = geoip2.database.Reader(str(db_path))
            logger.info("Loaded GeoIP database %s", db_path)
        else:
            logger.warning("GeoIP database not found at %s, geography will be unknown", db_path)

    @property
    def enabled(self) -> bool:
        return self._reader is not None

    def lookup(self, ip: str | None) -> GeoLocation:
        if not ip or self._reader is None:
            return GeoLocation()
        try:
            address = ipaddress.ip_address(ip.strip())
        except ValueError:
            return GeoLocation()
        if address.is_private or address.is_loopback:
            return GeoLocation()

        try:
            response = self._reader.city(str(address))
        except (geoip2.errors.AddressNotFoundError, ValueError):
            return GeoLocation()
        return GeoLocation(
            country=response.country.iso_code or None,
            city=response.city.name or None,
        )

    def close(self):
        if self._reader is not None:
            self._reader.close()
            self._reader = None
