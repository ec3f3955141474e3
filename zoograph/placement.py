"""Occupant lifecycle and placement.

PlacementService owns the occupant index and is the only code that moves
occupants in and out of enclosures. Every committed change is reported to
the injected ``OccupantStore``.

Consistency rules kept here:
- an occupant is in at most one enclosure, and ``occupant.enclosure_id``
  names exactly that enclosure (or is None)
- enclosure membership only changes through ``Enclosure.admit``/``evict``,
  so capacity and compatibility are always enforced
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ValidationError

from .enclosure import Enclosure
from .environment import Graph
from .logging_utils import EventLog
from .persistence import InMemoryOccupantStore, OccupantStore, StoreError
from .schemas import Category, FailureReason, Occupant, Outcome
from .service import GraphService, validation_message


class PlacementService(GraphService):
    """Creates occupants and admits, evicts and relocates them."""

    def __init__(
        self,
        graph: Graph,
        store: Optional[OccupantStore] = None,
        log: Optional[EventLog] = None,
    ):
        super().__init__(graph, log)
        self.store = store or InMemoryOccupantStore()
        self._occupants: Dict[str, Occupant] = {}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def occupants(self) -> Dict[str, Occupant]:
        return dict(self._occupants)

    def get(self, occupant_id: str) -> Optional[Occupant]:
        return self._occupants.get(occupant_id)

    def holder_of(self, occupant_id: str) -> Optional[Enclosure]:
        """The enclosure whose membership list contains ``occupant_id``."""
        for enclosure in self.enclosures():
            if enclosure.has_occupant(occupant_id):
                return enclosure
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        species: str,
        age: int,
        weight: float,
        category: str | Category,
    ) -> Outcome:
        """Create an unplaced occupant. ``subject_id`` carries the new ID."""
        parsed = Category.parse(category)
        if parsed is None:
            return self._refuse(
                FailureReason.INVALID_CATEGORY,
                f"Unknown category {category!r}; occupant {name} not created",
            )

        try:
            occupant = Occupant(name=name, species=species, age=age, weight=weight, category=parsed)
        except ValidationError as exc:
            return self._refuse(
                FailureReason.INVALID_VALUE,
                f"Occupant {name} not created: {validation_message(exc)}",
            )
        self._occupants[occupant.id] = occupant
        return self._commit(
            Outcome.success(
                f"Created {parsed.value} {name} ({species}), ID {occupant.id}",
                subject_id=occupant.id,
            ),
            lambda: self.store.save(occupant),
        )

    def load(self, occupants: Dict[str, Occupant]) -> List[str]:
        """Index stored occupants and re-attach them to their enclosures.

        Occupants naming an unknown enclosure, or one that refuses them, are
        left unplaced and their stored link is cleared. Returns the IDs of
        those occupants.
        """
        detached: List[str] = []
        for occupant in occupants.values():
            self._occupants[occupant.id] = occupant
            if occupant.enclosure_id is None:
                continue
            enclosure = self.enclosure(occupant.enclosure_id)
            if enclosure is not None and enclosure.admit(occupant):
                self.log.debug(f"Linked occupant {occupant.id} to enclosure {enclosure.id}")
                continue
            self.log.warn(
                f"Occupant {occupant.name} could not rejoin enclosure {occupant.enclosure_id}; left unplaced"
            )
            occupant.enclosure_id = None
            detached.append(occupant.id)
            try:
                self.store.update_enclosure_link(occupant.id, None)
            except StoreError as exc:
                self.log.error(f"Could not clear stored link for {occupant.id}: {exc}")
        self.log.info(f"Loaded {len(occupants)} occupants ({len(detached)} detached)")
        return detached

    def remove(self, occupant_id: str) -> Outcome:
        """Delete an occupant from the system, evicting it first if placed."""
        occupant = self._occupants.get(occupant_id)
        if occupant is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Occupant {occupant_id} not found")

        holder = self.holder_of(occupant_id)
        if holder is not None:
            holder.evict(occupant_id)
            occupant.enclosure_id = None
        del self._occupants[occupant_id]
        return self._commit(
            Outcome.success(f"Occupant {occupant.name} removed from the system", subject_id=occupant_id),
            lambda: self.store.delete(occupant_id),
        )

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def admit_to(self, enclosure_id: str, occupant_id: str) -> Outcome:
        enclosure = self.enclosure(enclosure_id)
        occupant = self._occupants.get(occupant_id)
        if enclosure is None or occupant is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Invalid enclosure or occupant ID: enclosure={enclosure_id}, occupant={occupant_id}",
            )

        if occupant.enclosure_id not in (None, enclosure_id):
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"{occupant.name} already lives in enclosure {occupant.enclosure_id}; relocate instead",
                subject_id=occupant_id,
            )

        failure = enclosure.admission_failure(occupant)
        if failure is not None:
            reason, detail = failure
            return self._refuse(reason, f"Cannot admit {occupant.name}: {detail}", subject_id=occupant_id)

        enclosure.admit(occupant)
        occupant.enclosure_id = enclosure_id
        return self._commit(
            Outcome.success(f"{occupant.name} admitted to {enclosure.name}", subject_id=occupant_id),
            lambda: self.store.update_enclosure_link(occupant_id, enclosure_id),
        )

    def evict_from(self, enclosure_id: str, occupant_id: str) -> Outcome:
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Enclosure {enclosure_id} not found")
        if not enclosure.evict(occupant_id):
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Occupant {occupant_id} is not in enclosure {enclosure.name}",
            )

        occupant = self._occupants.get(occupant_id)
        if occupant is not None:
            occupant.enclosure_id = None
        return self._commit(
            Outcome.success(f"Occupant {occupant_id} evicted from {enclosure.name}", subject_id=occupant_id),
            lambda: self.store.update_enclosure_link(occupant_id, None),
        )

    def relocate(self, from_id: str, to_id: str, occupant_id: str) -> Outcome:
        """Move an occupant between enclosures, or leave it where it is."""
        source = self.enclosure(from_id)
        target = self.enclosure(to_id)
        if source is None or target is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"One of the enclosures does not exist: from={from_id}, to={to_id}",
            )

        occupant = self._occupants.get(occupant_id)
        if occupant is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Occupant {occupant_id} not found")
        if not source.has_occupant(occupant_id):
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"{occupant.name} is not in enclosure {source.name}",
                subject_id=occupant_id,
            )

        failure = target.admission_failure(occupant)
        if failure is not None:
            reason, detail = failure
            return self._refuse(
                reason,
                f"Cannot move {occupant.name} to {target.name}: {detail}",
                subject_id=occupant_id,
            )

        source.evict(occupant_id)
        target.admit(occupant)
        occupant.enclosure_id = to_id
        return self._commit(
            Outcome.success(
                f"{occupant.name} moved from {source.name} to {target.name}",
                subject_id=occupant_id,
            ),
            lambda: self.store.update_enclosure_link(occupant_id, to_id),
        )

    def release_enclosure(self, enclosure_id: str) -> List[Outcome]:
        """Evict everyone from an enclosure that is about to disappear.

        Returns one eviction Outcome per occupant; ``subject_id`` names the
        occupant that became unplaced.
        """
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None:
            return []
        return [self.evict_from(enclosure_id, occupant_id) for occupant_id in enclosure.occupant_ids()]

    # ------------------------------------------------------------------
    # Queries and care
    # ------------------------------------------------------------------

    def unplaced(self) -> List[Occupant]:
        """Occupants not present in any enclosure's membership list."""
        enclosures = self.enclosures()
        result = [
            occupant
            for occupant_id, occupant in self._occupants.items()
            if not any(enclosure.has_occupant(occupant_id) for enclosure in enclosures)
        ]
        self.log.debug(f"Found {len(result)} unplaced occupants")
        return result

    def all_placed(self) -> bool:
        return not self.unplaced()

    def feed(self, occupant_id: str) -> Outcome:
        """Feed an occupant. Feeding twice succeeds with ``detail="already fed"``."""
        occupant = self._occupants.get(occupant_id)
        if occupant is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Occupant {occupant_id} not found for feeding")

        if not occupant.feed():
            self.log.warn(f"{occupant.name} already fed earlier")
            return Outcome.success(
                f"{occupant.name} is already full",
                subject_id=occupant_id,
                detail="already fed",
            )
        return self._commit(
            Outcome.success(
                f"{occupant.name} ({occupant.species}) ate",
                subject_id=occupant_id,
                detail="fed",
            ),
            lambda: self.store.save(occupant),
        )

    def describe_sound(self, occupant_id: str) -> Optional[str]:
        occupant = self._occupants.get(occupant_id)
        return occupant.make_sound() if occupant else None

    def describe_movement(self, occupant_id: str) -> Optional[str]:
        occupant = self._occupants.get(occupant_id)
        return occupant.move() if occupant else None
