"""Static vehicle catalog loading"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from tfs_gateway.domain.exceptions import CatalogError
from tfs_gateway.domain.models import Vehicle

BUNDLED_CATALOG = Path(__file__).resolve().parents[1] / "data" / "vehicles.json"


def vehicle_from_record(record: Dict[str, Any]) -> Vehicle:
    """Build a Vehicle from a catalog record (msrp_usd_est / horsepower_hp / body_style keys)"""
    horsepower = record.get("horsepower_hp")
    return Vehicle(
        year=int(record["year"]),
        make=record["make"],
        model=record["model"],
        trim=record["trim"],
        msrp_usd=float(record["msrp_usd_est"]),
        horsepower_hp=int(horsepower) if horsepower is not None else None,
        drivetrain=record["drivetrain"],
        powertrain=record["powertrain"],
        body_style=record["body_style"],
        image_url=record["image_url"],
    )


def load_vehicles(path: Optional[str] = None) -> List[Vehicle]:
    """
    Load the vehicle catalog.

    Reads the JSON array at `path`, or the catalog bundled with the package.

    Raises:
        CatalogError: File missing, not a JSON array, or a record is malformed
    """
    try:
        if path:
            raw = Path(path).read_text(encoding="utf-8")
        else:
            raw = BUNDLED_CATALOG.read_text(encoding="utf-8")
        records = json.loads(raw)
    except (OSError, ValueError) as e:
        raise CatalogError(f"Unable to read vehicle catalog: {e}") from e

    if not isinstance(records, list):
        raise CatalogError("Vehicle catalog must be a JSON array")

    try:
        return [vehicle_from_record(record) for record in records]
    except (KeyError, ValueError, TypeError) as e:
        raise CatalogError(f"Invalid vehicle record: {e}") from e
