"""
Facility composition root.

FacilityGraph owns the enclosure graph and the two services that act on it.
It is decoupled from configuration and storage: stores and the event log are
injected, and ``from_config`` is only a convenience for scripts.

Responsibilities:
1. Route queries (shortest path, distance, connectivity) to the graph
2. Add and remove enclosures and paths, keeping the stores informed
3. Cascade enclosure removal to occupants and caretakers
4. Rebuild a whole facility from its stores at startup (``open``)
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .config import Config
from .enclosure import Enclosure
from .environment import FacilityGraphState, Graph, PathState
from .logging_utils import EventLog
from .persistence import FacilityStores, in_memory_stores, json_stores
from .placement import PlacementService
from .schemas import FailureReason, Outcome
from .service import GraphService
from .staffing import StaffingService


class FacilityGraph(GraphService):
    """A zoo: enclosures joined by paths, with placement and staffing services.

    Fully decoupled. Pass ``stores`` to persist changes and ``log`` to
    control output; both default to in-memory / config-driven instances.
    """

    def __init__(
        self,
        stores: Optional[FacilityStores] = None,
        log: Optional[EventLog] = None,
        graph: Optional[Graph] = None,
    ):
        super().__init__(graph or Graph(), log)
        self.stores = stores or in_memory_stores()
        self._placement = PlacementService(self.graph, self.stores.occupants, self.log)
        self._staffing = StaffingService(
            self.graph, self.stores.caretakers, self.stores.enclosures, self.log
        )

    @classmethod
    def open(cls, stores: FacilityStores, log: Optional[EventLog] = None) -> "FacilityGraph":
        """Build a facility from everything the stores hold.

        Enclosures are loaded first, then paths, then occupants (re-linked to
        their enclosures) and caretakers.

        Raises:
            StoreError: If any store cannot be read
        """
        facility = cls(stores=stores, log=log)
        for enclosure in stores.enclosures.load_all().values():
            facility.graph.add_vertex(enclosure)

        for from_id, to_id, length in stores.paths.load_all():
            if not facility.graph.add_edge(from_id, to_id, length):
                facility.log.warn(f"Skipping stored path {from_id} <-> {to_id}: unknown enclosure")

        facility.placement.load(stores.occupants.load_all())
        facility.staffing.load(stores.caretakers.load_all())
        facility.log.info(
            f"Opened facility with {len(facility.graph.vertices)} enclosures "
            f"and {len(facility.paths())} paths"
        )
        return facility

    @classmethod
    def from_config(cls) -> "FacilityGraph":
        """Open a facility using ``Config.STORE`` and ``Config.DATA_DIR``."""
        Config.validate()
        log = EventLog.from_config()
        if Config.STORE == "json":
            stores = json_stores(Config.DATA_DIR)
        else:
            stores = in_memory_stores()
        return cls.open(stores, log)

    def close(self) -> None:
        self.log.close()

    @property
    def placement(self) -> PlacementService:
        return self._placement

    @property
    def staffing(self) -> StaffingService:
        return self._staffing

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def shortest_path(self, start_id: str, end_id: str) -> List[str]:
        return self.graph.find_shortest_path_by_weight(start_id, end_id)

    def distance(self, from_id: str, to_id: str) -> Optional[float]:
        """Length of the shortest walk between two enclosures, None if unreachable."""
        return self.graph.try_distance(from_id, to_id)

    def is_connected(self) -> bool:
        return self.graph.check_connectivity()

    def get_enclosure(self, enclosure_id: str) -> Optional[Enclosure]:
        return self.enclosure(enclosure_id)

    def paths(self) -> List[PathState]:
        """One record per undirected path, in insertion order."""
        seen: Dict[tuple, PathState] = {}
        for edge in self.graph.edges:
            path = PathState(from_id=edge.from_id, to_id=edge.to_id, length=edge.weight)
            seen.setdefault(path.key(), path)
        return list(seen.values())

    def neighbor_names(self, enclosure_id: str) -> List[str]:
        names = []
        for neighbor_id in self.graph.get_neighbors(enclosure_id):
            neighbor = self.enclosure(neighbor_id)
            names.append(neighbor.name if neighbor else neighbor_id)
        return sorted(names)

    # ------------------------------------------------------------------
    # Enclosures
    # ------------------------------------------------------------------

    def add_enclosure(self, enclosure: Enclosure) -> Outcome:
        if self.graph.has_vertex(enclosure.id):
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"Enclosure with ID {enclosure.id} already exists",
                subject_id=enclosure.id,
            )
        if enclosure.capacity < 0 or enclosure.area < 0:
            return self._refuse(
                FailureReason.INVALID_VALUE,
                f"Enclosure {enclosure.name} needs a non-negative capacity and area "
                f"(got capacity={enclosure.capacity}, area={enclosure.area:g})",
                subject_id=enclosure.id,
            )
        self.graph.add_vertex(enclosure)
        return self._commit(
            Outcome.success(f"Added enclosure {enclosure.name} (ID: {enclosure.id})", subject_id=enclosure.id),
            lambda: self.stores.enclosures.save(enclosure),
        )

    def create_enclosure(self, name: str, category: str, area: float, capacity: int) -> Outcome:
        """Build and add an enclosure. ``subject_id`` carries the new ID."""
        return self.add_enclosure(Enclosure(name=name, category=category, area=area, capacity=capacity))

    def remove_enclosure(self, enclosure_id: str) -> Outcome:
        """Remove an enclosure, its paths, and every link pointing at it.

        Occupants inside become unplaced and the caretaker loses the
        assignment before the vertex goes.
        """
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Enclosure {enclosure_id} not found")

        released = self.placement.release_enclosure(enclosure_id)
        unassigned = self.staffing.release_enclosure(enclosure_id)
        neighbors = self.graph.get_neighbors(enclosure_id)
        self.graph.remove_vertex(enclosure_id)

        writes = [lambda n=neighbor: self.stores.paths.delete(enclosure_id, n) for neighbor in neighbors]
        writes.append(lambda: self.stores.enclosures.delete(enclosure_id))
        outcome = self._commit(
            Outcome.success(
                f"Removed enclosure {enclosure.name} ({len(released)} occupants unplaced)",
                subject_id=enclosure_id,
            ),
            *writes,
        )

        cascade = released + ([unassigned] if unassigned is not None else [])
        failed = [result for result in cascade if not result]
        if outcome and failed:
            return Outcome.failure(
                FailureReason.STORE_FAILURE,
                f"{outcome.message}, but {len(failed)} linked record(s) were not stored: "
                + "; ".join(result.message for result in failed),
                subject_id=enclosure_id,
            )
        return outcome

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def add_path(self, from_id: str, to_id: str, length: float) -> Outcome:
        if self.enclosure(from_id) is None or self.enclosure(to_id) is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Cannot add path: unknown enclosure in {from_id} <-> {to_id}",
            )
        if self.graph.get_edge(from_id, to_id) is not None:
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"A path between {from_id} and {to_id} already exists",
            )
        self.graph.add_edge(from_id, to_id, length)
        return self._commit(
            Outcome.success(f"Added path {from_id} <-> {to_id} ({length:g} m)"),
            lambda: self.stores.paths.save(from_id, to_id, length),
        )

    def remove_path(self, from_id: str, to_id: str) -> Outcome:
        if not self.graph.remove_edge(from_id, to_id):
            return self._refuse(FailureReason.NOT_FOUND, f"No path between {from_id} and {to_id}")
        return self._commit(
            Outcome.success(f"Removed path {from_id} <-> {to_id}"),
            lambda: self.stores.paths.delete(from_id, to_id),
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self) -> FacilityGraphState:
        return FacilityGraphState(
            enclosures=[enclosure.to_state() for enclosure in self.enclosures()],
            paths=self.paths(),
            connected=self.is_connected(),
        )

    def describe(self) -> str:
        """Human-readable listing of enclosures, their occupants and paths."""
        lines = [f"Facility: {len(self.graph.vertices)} enclosures, {len(self.paths())} paths"]
        for enclosure in self.enclosures():
            lines.append(f"  {enclosure.summary()}")
            for occupant in enclosure.occupants:
                lines.append(f"    - {occupant.summary()}")
        if self.paths():
            lines.append("Paths:")
        for path in self.paths():
            start = self.enclosure(path.from_id)
            end = self.enclosure(path.to_id)
            lines.append(
                f"  {start.name if start else path.from_id} <-> "
                f"{end.name if end else path.to_id}: {path.length:g} m"
            )
        return "\n".join(lines)
