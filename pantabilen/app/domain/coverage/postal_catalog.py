"""
Postal Code Catalog Import.

Parses tab-separated postal code exports (GeoNames layout: country code,
postal code, place name, region, ..., latitude, longitude) into rows for
the postal code master table. Bad lines are collected, not raised, so one
malformed line does not abort an import of tens of thousands.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

POSTAL_CODE_PATTERN = re.compile(r"^\d{5}$")
LATITUDE_COLUMN = 9
LONGITUDE_COLUMN = 10

# Swedish bounding box
LAT_RANGE = (55.0, 70.0)
LNG_RANGE = (10.0, 25.0)


@dataclass
class CatalogImport:
    """Parsed rows and per-line errors (1-based line numbers)."""
    rows: List[Dict] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def with_coordinates(self) -> int:
        return sum(1 for row in self.rows if row["latitude"] is not None)


def _float_or_none(value: Optional[str]) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_coordinates(lat: Optional[float], lng: Optional[float]) -> Tuple[Optional[float], Optional[float]]:
    """
    Swap coordinates given in (lng, lat) order and drop pairs outside Sweden.
    """
    if lat is None or lng is None:
        return None, None
    if LNG_RANGE[0] <= lat <= LNG_RANGE[1] and LAT_RANGE[0] <= lng <= LAT_RANGE[1]:
        lat, lng = lng, lat
    if not (LAT_RANGE[0] <= lat <= LAT_RANGE[1] and LNG_RANGE[0] <= lng <= LNG_RANGE[1]):
        return None, None
    return lat, lng


def parse_line(line: str, country: str) -> Dict:
    """
    Parse one tab-separated line.

    Raises:
        ValueError: too few columns, missing data or a malformed postal code
    """
    columns = [column.strip() for column in line.split("\t")]
    if len(columns) < 4:
        raise ValueError(f"För få kolumner ({len(columns)})")

    country_code, postal_code_raw, city, region = columns[:4]
    if not country_code or not postal_code_raw or not city:
        raise ValueError("Saknar väsentlig data")

    postal_code = re.sub(r"\s+", "", postal_code_raw)
    if not POSTAL_CODE_PATTERN.match(postal_code):
        raise ValueError(f"Ogiltigt postnummer: {postal_code_raw}")

    lat, lng = normalize_coordinates(
        _float_or_none(columns[LATITUDE_COLUMN] if len(columns) > LATITUDE_COLUMN else None),
        _float_or_none(columns[LONGITUDE_COLUMN] if len(columns) > LONGITUDE_COLUMN else None),
    )
    return {
        "postal_code": postal_code,
        "city": city,
        "region": region or None,
        "country": country,
        "latitude": lat,
        "longitude": lng,
        "is_active": True,
    }


def parse_catalog(lines: Iterable[str], country: str) -> CatalogImport:
    """Parse every non-blank line; failures are recorded in `errors`."""
    result = CatalogImport()
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            result.rows.append(parse_line(line.rstrip("\n"), country))
        except ValueError as exc:
            result.errors.append(f"Rad {number}: {exc}")
    return result
