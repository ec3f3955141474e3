"""Build a layout and print the resulting facility.

    python -m zoograph --layout city_zoo
    python -m zoograph --layout city_zoo --route "Central Plaza" "Northern Forest"

With ``--store json`` the facility is opened from ``--data-dir`` first, so a
layout is only loaded when the store is empty.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .config import Config
from .facility import FacilityGraph
from .logging_utils import Color, EventLog, Level, colored, levels_from
from .persistence import in_memory_stores, json_stores
from .scenario import LayoutLoader


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Zoo facility graph")
    parser.add_argument("--layout", default="city_zoo", help="Layout name (file stem in the layouts dir)")
    parser.add_argument("--layouts-dir", type=Path, default=None, help="Directory holding layout files")
    parser.add_argument("--store", choices=Config.STORES, default=Config.STORE, help="Storage backend")
    parser.add_argument("--data-dir", type=Path, default=Config.DATA_DIR, help="Directory for the json store")
    parser.add_argument(
        "--route",
        nargs=2,
        metavar=("FROM", "TO"),
        help="Print the shortest walk between two enclosures (by name)",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def _by_name(facility: FacilityGraph, name: str) -> Optional[str]:
    for enclosure in facility.enclosures():
        if enclosure.name.casefold() == name.casefold():
            return enclosure.id
    return None


def print_route(facility: FacilityGraph, start: str, end: str) -> None:
    start_id, end_id = _by_name(facility, start), _by_name(facility, end)
    if start_id is None or end_id is None:
        print(colored(f"Unknown enclosure in route {start!r} -> {end!r}", Color.RED))
        return
    distance = facility.distance(start_id, end_id)
    if distance is None:
        print(colored(f"No walkway connects {start} and {end}", Color.YELLOW))
        return
    names = [facility.get_enclosure(eid).name for eid in facility.shortest_path(start_id, end_id)]
    print(colored(f"{' -> '.join(names)} ({distance:g} m)", Color.CYAN, bold=True))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    minimum = Level.WARN if args.quiet else Level.parse(Config.LOG_LEVEL)
    log = EventLog(levels=levels_from(minimum), log_file=Config.LOG_FILE)
    stores = json_stores(args.data_dir) if args.store == "json" else in_memory_stores()

    facility = FacilityGraph.open(stores, log)
    try:
        if not facility.enclosures():
            report = LayoutLoader(args.layouts_dir).load(args.layout, facility)
            for message in report.refused:
                print(colored(f"refused: {message}", Color.YELLOW))
        print(facility.describe())
        print(colored(f"Connected: {facility.is_connected()}", Color.CYAN))
        unplaced = facility.placement.unplaced()
        if unplaced:
            print(colored(f"Unplaced: {', '.join(o.name for o in unplaced)}", Color.YELLOW))
        if args.route:
            print_route(facility, *args.route)
    finally:
        facility.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
