"""
Layout loading for JSON-defined facilities.

A layout describes a whole zoo as data: enclosures, the paths between them,
the animals and where they live, and the caretakers with their assignments.
LayoutLoader reads one file and builds it into a FacilityGraph through the
facility's public API, so every capacity and compatibility rule applies
exactly as it would for hand-written calls.

Design philosophy:
- Layouts are data (JSON), not code
- Enclosures are referred to by a local ``key`` inside the file; the loader
  maps keys to the generated enclosure IDs
- Structural problems (missing fields, unknown keys) raise ValueError before
  anything is built; placements the facility refuses are reported, not raised

Layout file structure:
```json
{
  "name": "City Zoo",
  "description": "...",
  "enclosures": [
    {"key": "savanna", "name": "Savanna", "category": "Grassland", "area": 1200, "capacity": 4}
  ],
  "paths": [{"from": "savanna", "to": "aviary", "length": 120}],
  "occupants": [
    {"name": "Leo", "species": "Lion", "age": 5, "weight": 190, "category": "Mammal", "enclosure": "savanna"}
  ],
  "caretakers": [
    {"name": "Anna", "age": 34, "salary": 3000, "experience": 8, "enclosures": ["savanna"]}
  ]
}
```

Usage:
    loader = LayoutLoader()
    report = loader.load("city_zoo", facility)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .config import Config
from .facility import FacilityGraph
from .schemas import Outcome


class LayoutReport(BaseModel):
    """What a layout load produced."""

    name: str
    enclosure_ids: Dict[str, str] = Field(
        default_factory=dict, description="Layout key -> generated enclosure ID"
    )
    occupant_ids: List[str] = Field(default_factory=list)
    caretaker_ids: List[str] = Field(default_factory=list)
    refused: List[str] = Field(
        default_factory=list, description="Messages of operations the facility refused"
    )

    @property
    def complete(self) -> bool:
        return not self.refused


class LayoutLoader:
    """Load and validate facility layouts from JSON files.

    Directory structure:
    - Default: ``Config.LAYOUTS_DIR`` ({PROJECT_ROOT}/layouts unless overridden)
    - Override via constructor: LayoutLoader(Path("/custom/layouts"))
    - Layout files: {layout_name}.json (e.g., "city_zoo.json")

    Validation:
    - Required fields: name, enclosures
    - Each enclosure needs a name and a capacity; keys must be unique
    - Paths, occupants and caretakers may only refer to declared keys
    """

    def __init__(self, layouts_dir: Optional[Path] = None):
        self.layouts_dir = Path(layouts_dir) if layouts_dir else Config.LAYOUTS_DIR

    def load(self, layout_name: str, facility: FacilityGraph) -> LayoutReport:
        """Build the named layout into ``facility``.

        Args:
            layout_name: File name without the .json extension
            facility: Facility to populate (usually empty)

        Returns:
            LayoutReport with the key -> ID map and any refused operations

        Raises:
            FileNotFoundError: If the layout file doesn't exist
            ValueError: If the JSON is invalid or misses required fields
        """
        layout_path = self.layouts_dir / f"{layout_name}.json"
        if not layout_path.exists():
            raise FileNotFoundError(f"Layout '{layout_name}' not found at {layout_path}")

        try:
            data = json.loads(layout_path.read_text("utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Layout '{layout_name}' is not valid JSON: {exc}") from exc

        self._validate_layout(data)
        report = LayoutReport(name=data["name"])

        for entry in data["enclosures"]:
            outcome = facility.create_enclosure(
                name=entry["name"],
                category=entry.get("category", ""),
                area=float(entry.get("area", 0.0)),
                capacity=int(entry["capacity"]),
            )
            if self._record(report, outcome):
                report.enclosure_ids[self._key(entry)] = outcome.subject_id

        for entry in data.get("paths", []):
            self._record(
                report,
                facility.add_path(
                    self._resolve(report, entry["from"]),
                    self._resolve(report, entry["to"]),
                    float(entry["length"]),
                ),
            )

        for entry in data.get("occupants", []):
            self._build_occupant(entry, facility, report)

        for entry in data.get("caretakers", []):
            self._build_caretaker(entry, facility, report)

        facility.log.info(
            f"Layout {report.name}: {len(report.enclosure_ids)} enclosures, "
            f"{len(report.occupant_ids)} occupants, {len(report.caretaker_ids)} caretakers, "
            f"{len(report.refused)} refused"
        )
        return report

    def _validate_layout(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValueError("Layout must be a JSON object")

        required = ["name", "enclosures"]
        missing = [field for field in required if field not in data]
        if missing:
            raise ValueError(f"Layout missing required fields: {missing}")

        keys = set()
        for entry in data["enclosures"]:
            if "name" not in entry or "capacity" not in entry:
                raise ValueError("Each enclosure entry must include 'name' and 'capacity'")
            key = self._key(entry)
            if key in keys:
                raise ValueError(f"Duplicate enclosure key: {key!r}")
            keys.add(key)

        for entry in data.get("paths", []):
            for field in ("from", "to", "length"):
                if field not in entry:
                    raise ValueError(f"Path entry missing '{field}': {entry}")
            self._check_key(keys, entry["from"], "path")
            self._check_key(keys, entry["to"], "path")

        for entry in data.get("occupants", []):
            for field in ("name", "species", "category"):
                if field not in entry:
                    raise ValueError(f"Occupant entry missing '{field}': {entry}")
            if entry.get("enclosure") is not None:
                self._check_key(keys, entry["enclosure"], f"occupant {entry['name']}")

        for entry in data.get("caretakers", []):
            if "name" not in entry:
                raise ValueError(f"Caretaker entry missing 'name': {entry}")
            for key in entry.get("enclosures", []):
                self._check_key(keys, key, f"caretaker {entry['name']}")

    def _build_occupant(self, entry: Dict[str, Any], facility: FacilityGraph, report: LayoutReport) -> None:
        outcome = facility.placement.create(
            name=entry["name"],
            species=entry["species"],
            age=int(entry.get("age", 0)),
            weight=float(entry.get("weight", 0.0)),
            category=entry["category"],
        )
        if not self._record(report, outcome):
            return
        report.occupant_ids.append(outcome.subject_id)
        if entry.get("enclosure") is not None:
            self._record(
                report,
                facility.placement.admit_to(self._resolve(report, entry["enclosure"]), outcome.subject_id),
            )

    def _build_caretaker(self, entry: Dict[str, Any], facility: FacilityGraph, report: LayoutReport) -> None:
        outcome = facility.staffing.create(
            name=entry["name"],
            age=int(entry.get("age", 0)),
            salary=int(entry.get("salary", 0)),
            experience=int(entry.get("experience", 0)),
        )
        if not self._record(report, outcome):
            return
        report.caretaker_ids.append(outcome.subject_id)
        for key in entry.get("enclosures", []):
            self._record(report, facility.staffing.assign(outcome.subject_id, self._resolve(report, key)))

    @staticmethod
    def _key(entry: Dict[str, Any]) -> str:
        return entry.get("key", entry["name"])

    @staticmethod
    def _resolve(report: LayoutReport, key: str) -> str:
        # Keys of refused enclosures stay unmapped; the facility then reports NOT_FOUND
        return report.enclosure_ids.get(key, key)

    @staticmethod
    def _check_key(keys: set, key: str, owner: str) -> None:
        if key not in keys:
            raise ValueError(f"Unknown enclosure key {key!r} referenced by {owner}")

    @staticmethod
    def _record(report: LayoutReport, outcome: Outcome) -> bool:
        if not outcome:
            report.refused.append(outcome.message)
        return outcome.ok

    def list_layouts(self) -> List[str]:
        """Names of the layout files available in ``layouts_dir``."""
        if not self.layouts_dir.exists():
            return []
        return sorted(f.stem for f in self.layouts_dir.glob("*.json") if not f.name.startswith("_"))

    def get_layout_info(self, layout_name: str) -> Dict[str, Any]:
        """Read layout metadata without building anything."""
        layout_path = self.layouts_dir / f"{layout_name}.json"
        data = json.loads(layout_path.read_text("utf-8"))
        return {
            "name": data.get("name", layout_name),
            "description": data.get("description", "No description"),
            "num_enclosures": len(data.get("enclosures", [])),
            "num_occupants": len(data.get("occupants", [])),
            "num_caretakers": len(data.get("caretakers", [])),
        }


def load_layout(layout_name: str, facility: Optional[FacilityGraph] = None) -> FacilityGraph:
    """Convenience: build a layout from the default directory into a facility.

    Returns the facility (a new in-memory one when none is given).
    """
    facility = facility or FacilityGraph()
    LayoutLoader().load(layout_name, facility)
    return facility
