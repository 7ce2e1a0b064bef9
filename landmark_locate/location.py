from __future__ import annotations

import logging
import os
from typing import Optional

from PIL import Image

from .types import Coordinates

logger = logging.getLogger(__name__)

GPS_IFD = 0x8825
GPS_LATITUDE_REF = 1
GPS_LATITUDE = 2
GPS_LONGITUDE_REF = 3
GPS_LONGITUDE = 4


class StaticLocation:
    """Location provider that always reports the same position (or none)."""

    def __init__(self, coordinates: Optional[Coordinates] = None) -> None:
        self.coordinates = coordinates

    @classmethod
    def at(cls, latitude: float, longitude: float) -> "StaticLocation":
        return cls(Coordinates(latitude=latitude, longitude=longitude))

    def current(self) -> Optional[Coordinates]:
        return self.coordinates


def _dms_to_degrees(dms, ref: str) -> float:
    degrees, minutes, seconds = (float(x) for x in dms)
    value = degrees + minutes / 60.0 + seconds / 3600.0
    if ref.upper() in ("S", "W"):
        value = -value
    return value


def exif_location(path: str | os.PathLike[str]) -> Optional[Coordinates]:
    """Read the GPS position embedded in a photo's EXIF block, if there is one."""
    try:
        with Image.open(path) as im:
            gps = im.getexif().get_ifd(GPS_IFD)
        if not gps or GPS_LATITUDE not in gps or GPS_LONGITUDE not in gps:
            return None
        lat = _dms_to_degrees(gps[GPS_LATITUDE], str(gps.get(GPS_LATITUDE_REF, "N")))
        lon = _dms_to_degrees(gps[GPS_LONGITUDE], str(gps.get(GPS_LONGITUDE_REF, "E")))
        return Coordinates(latitude=lat, longitude=lon)
    except Exception as e:
        logger.debug("No usable EXIF GPS in %s: %s", path, e)
        return None
