from __future__ import annotations

import csv
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from .distance import planar_distance_km
from .errors import ServiceInitError
from .types import LandmarkRecord

logger = logging.getLogger(__name__)

# landmark_id, category, supercategory, hierarchical_label, natural_or_human_made,
# images, latitude, longitude, landmark_name, landmark_info, info_language, country
CSV_COLUMNS = 12


def record_from_row(row: list[str]) -> Optional[LandmarkRecord]:
    if len(row) < CSV_COLUMNS:
        return None
    try:
        landmark_id = int(row[0].strip())
        latitude = float(row[6])
        longitude = float(row[7])
    except ValueError:
        return None
    return LandmarkRecord(
        landmark_id=landmark_id,
        category=row[1].strip(),
        supercategory=row[2].strip(),
        hierarchical_label=row[3].strip(),
        natural_or_human_made=row[4].strip(),
        latitude=latitude,
        longitude=longitude,
        name=row[8].strip(),
        info=row[9].strip(),
        info_language=row[10].strip(),
        country=row[11].strip(),
    )


class CsvLandmarkStore:
    """In-memory landmark table loaded from the landmark CSV export."""

    def __init__(self, records: Iterable[LandmarkRecord]) -> None:
        self._by_id: dict[int, LandmarkRecord] = {}
        for record in records:
            self._by_id.setdefault(record.landmark_id, record)

    @classmethod
    def from_csv(cls, path: str | os.PathLike[str]) -> "CsvLandmarkStore":
        p = Path(path)
        records: list[LandmarkRecord] = []
        skipped = 0
        try:
            # errors="replace" keeps rows with stray bytes instead of aborting the load
            with p.open("r", encoding="utf-8", errors="replace", newline="") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for row in reader:
                    record = record_from_row(row)
                    if record is None:
                        skipped += 1
                        continue
                    records.append(record)
        except OSError as e:
            raise ServiceInitError(f"Could not read landmark CSV {p}: {e}") from e
        if skipped:
            logger.warning("Skipped %d malformed landmark rows in %s", skipped, p.name)
        logger.info("Loaded %d landmarks from %s", len(records), p.name)
        return cls(records)

    def __len__(self) -> int:
        return len(self._by_id)

    def get_by_id(self, landmark_id: int) -> Optional[LandmarkRecord]:
        return self._by_id.get(landmark_id)

    def get_nearby(self, latitude: float, longitude: float, radius_km: float) -> list[LandmarkRecord]:
        nearby = [
            lm
            for lm in self._by_id.values()
            if planar_distance_km(latitude, longitude, lm.latitude, lm.longitude) <= radius_km
        ]
        logger.debug("Found %d landmarks within %.1f km", len(nearby), radius_km)
        return nearby
